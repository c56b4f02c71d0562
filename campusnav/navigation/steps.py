"""Step synthesis between two resolved buildings.

The curated scripts cover four directed building pairs only. The table is
intentionally not symmetric: for example North -> Main has no script of its
own and falls through to the generic three-step walk.
"""

from campusnav.navigation.locations import extract_room
from campusnav.navigation.models import (
    MAIN_BUILDING,
    NORTH_BUILDING,
    SCIENCE_BUILDING,
    SOUTH_BUILDING,
    NavigationStep,
)


# =========================================================
# CURATED BUILDING-PAIR SCRIPTS
# Keyed by exact (from, to) building names.
# =========================================================

CURATED_ROUTES: dict[tuple[str, str], tuple[NavigationStep, ...]] = {
    (MAIN_BUILDING, SCIENCE_BUILDING): (
        NavigationStep(
            "Exit the Main Building through the east exit",
            "Head towards the main hallway on the first floor",
        ),
        NavigationStep(
            "Walk straight across the courtyard",
            "The Science Building will be directly ahead",
        ),
        NavigationStep(
            "Enter the Science Building through the main entrance",
            'Look for the building labeled "Science"',
        ),
    ),
    (MAIN_BUILDING, NORTH_BUILDING): (
        NavigationStep(
            "Exit the Main Building through the north exit",
            "Head towards the north side of the building",
        ),
        NavigationStep(
            "Cross the walkway to the North Building",
            "Follow the covered walkway",
        ),
        NavigationStep(
            "Enter the North Building",
            "The entrance will be on your right",
        ),
    ),
    (MAIN_BUILDING, SOUTH_BUILDING): (
        NavigationStep(
            "Exit the Main Building through the south exit",
            "Head towards the south side of the building",
        ),
        NavigationStep(
            "Cross the walkway to the South Building",
            "Follow the covered walkway",
        ),
        NavigationStep(
            "Enter the South Building",
            "The entrance will be on your left",
        ),
    ),
    (SCIENCE_BUILDING, MAIN_BUILDING): (
        NavigationStep(
            "Exit the Science Building through the main entrance",
            "Head towards the west side of the building",
        ),
        NavigationStep(
            "Walk straight across the courtyard",
            "The Main Building will be directly ahead",
        ),
        NavigationStep(
            "Enter the Main Building through the east entrance",
            "Look for the main entrance doors",
        ),
    ),
}


def _generic_route(from_building: str, to_building: str) -> tuple[NavigationStep, ...]:
    return (
        NavigationStep(f"Exit the {from_building}", "Head towards the main exit"),
        NavigationStep(f"Walk to the {to_building}", "Follow the campus pathways and signs"),
        NavigationStep(f"Enter the {to_building}", "Look for the main entrance"),
    )


def _final_step(destination_text: str) -> NavigationStep:
    room_match = extract_room(destination_text)
    if room_match:
        room = room_match.room
        return NavigationStep(
            f"Find Room {room}",
            f"Check the room numbers on each floor. Room {room} should be clearly marked.",
        )
    return NavigationStep(
        f"Locate your destination: {destination_text}",
        "Look for signs or ask for directions if needed",
    )


def synthesize(from_building: str, to_building: str, destination_text: str) -> list[NavigationStep]:
    """Build ordered directions from one building to another.

    Args:
        from_building: Resolved start building.
        to_building: Resolved target building.
        destination_text: Raw destination text; only used for the final step.

    Returns:
        A new list with the building transition followed by one final
        "find the destination" step.
    """
    if from_building == to_building:
        steps = [
            NavigationStep(
                f"You're already in the {to_building}",
                "Look for room signs or ask for directions to your specific room.",
            )
        ]
    else:
        script = CURATED_ROUTES.get((from_building, to_building))
        if script is None:
            script = _generic_route(from_building, to_building)
        steps = list(script)

    steps.append(_final_step(destination_text))
    return steps
