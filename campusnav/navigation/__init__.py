"""Deterministic campus router.

Module split:
    - `models`: building names and frozen route value types.
    - `locations`: free-text -> building/room resolution.
    - `steps`: building-pair direction scripts.
    - `planner`: estimation and the `plan` entrypoint.
"""

from campusnav.navigation.locations import is_location_recognized, resolve
from campusnav.navigation.models import (
    BUILDINGS,
    LocationDescriptor,
    NavigationRoute,
    NavigationStep,
    RouteEstimate,
)
from campusnav.navigation.planner import estimate, plan
from campusnav.navigation.steps import synthesize

__all__ = [
    "BUILDINGS",
    "LocationDescriptor",
    "NavigationRoute",
    "NavigationStep",
    "RouteEstimate",
    "estimate",
    "is_location_recognized",
    "plan",
    "resolve",
    "synthesize",
]
