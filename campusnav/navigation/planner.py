"""Route planning: composition of resolver, step synthesizer and estimator.

Architectural role:
    `plan` is the standalone route boundary. It is callable without any
    conversation state and never reaches the provider layer.

Determinism:
    Pure and total. No clock reads, randomness, or I/O, so identical inputs
    always yield equal `NavigationRoute` values and concurrent calls need no
    coordination.
"""

import logging

from campusnav.navigation.locations import resolve_building
from campusnav.navigation.models import NavigationRoute, RouteEstimate
from campusnav.navigation.steps import synthesize


logger = logging.getLogger(__name__)

MINUTES_PER_STEP = 2
BUILDING_TRANSFER_MINUTES = 3
SAME_BUILDING_LABEL = "Same building"
BETWEEN_BUILDINGS_LABEL = "~200-500 meters between buildings"


def estimate(step_count: int, same_building: bool) -> RouteEstimate:
    """Estimate walking time and distance for a synthesized route.

    `minutes = step_count * 2 (+3 when changing buildings)`. The distance
    label is a fixed placeholder rather than a measured value.
    """
    minutes = step_count * MINUTES_PER_STEP
    if not same_building:
        minutes += BUILDING_TRANSFER_MINUTES

    return RouteEstimate(
        estimated_time=f"{minutes} min",
        distance_label=SAME_BUILDING_LABEL if same_building else BETWEEN_BUILDINGS_LABEL,
    )


def plan(current_location_text: str, destination_text: str) -> NavigationRoute:
    """Plan directions between two free-text campus locations.

    Args:
        current_location_text: Where the user is, for example "Main entrance".
        destination_text: Where the user wants to go, for example "Room N-201".

    Returns:
        `NavigationRoute` with steps, time estimate, distance label and the
        resolved `(from, to)` building pair.
    """
    from_building = resolve_building(current_location_text)
    to_building = resolve_building(destination_text)
    same_building = from_building == to_building

    steps = synthesize(from_building, to_building, destination_text)
    route_estimate = estimate(len(steps), same_building)

    logger.debug(
        "Planned route %s -> %s with %d steps",
        from_building,
        to_building,
        len(steps),
    )

    return NavigationRoute(
        steps=tuple(steps),
        estimated_time=route_estimate.estimated_time,
        distance_label=route_estimate.distance_label,
        buildings=(from_building, to_building),
    )
