"""Value types produced by the deterministic router.

All types are frozen dataclasses: the router builds them once per call and
nothing mutates them afterwards.
"""

from dataclasses import dataclass


MAIN_BUILDING = "Main Building"
SCIENCE_BUILDING = "Science Building"
NORTH_BUILDING = "North Building"
SOUTH_BUILDING = "South Building"
LIBRARY = "Library"
CAFETERIA = "Cafeteria"
STUDENT_CENTER = "Student Center"
GYMNASIUM = "Gymnasium"
AUDITORIUM = "Auditorium"

BUILDINGS = (
    MAIN_BUILDING,
    SCIENCE_BUILDING,
    NORTH_BUILDING,
    SOUTH_BUILDING,
    LIBRARY,
    CAFETERIA,
    STUDENT_CENTER,
    GYMNASIUM,
    AUDITORIUM,
)


@dataclass(frozen=True)
class LocationDescriptor:
    """Resolved form of a free-text location.

    Attributes:
        building: One of `BUILDINGS`.
        room: Room token as written in the input (for example `N-201`), if any.
    """

    building: str
    room: str | None = None


@dataclass(frozen=True)
class NavigationStep:
    instruction: str
    details: str | None = None

    def to_dict(self) -> dict:
        return {"instruction": self.instruction, "details": self.details}


@dataclass(frozen=True)
class RouteEstimate:
    estimated_time: str
    distance_label: str


@dataclass(frozen=True)
class NavigationRoute:
    """Ordered directions between two resolved buildings.

    Attributes:
        steps: Directions in walking order; always at least two entries.
        estimated_time: Minutes label such as `"11 min"`.
        distance_label: Fixed placeholder text, not derived from geometry.
        buildings: Resolved `(from, to)` pair.
    """

    steps: tuple[NavigationStep, ...]
    estimated_time: str
    distance_label: str
    buildings: tuple[str, str]

    def to_dict(self) -> dict:
        """Return the JSON shape served by the HTTP adapter."""
        return {
            "steps": [step.to_dict() for step in self.steps],
            "estimatedTime": self.estimated_time,
            "distance": self.distance_label,
            "buildings": list(self.buildings),
        }
