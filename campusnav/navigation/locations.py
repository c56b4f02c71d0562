"""Free-text location resolution for the deterministic router.

Resolution order (first hit wins):
    1. Room-number token (`N-201`, `S305`, `Room 150`, `2041`).
    2. Known-location keyword table, in table order.
    3. Loose keyword fallback (`science`/`lab`, `north`/`n-`, `south`/`s-`).
    4. Main Building.

Determinism:
    Pure functions over the input string. `resolve` is total: every string,
    including the empty string, maps to exactly one building.
"""

import re
from dataclasses import dataclass

from campusnav.navigation.models import (
    AUDITORIUM,
    CAFETERIA,
    GYMNASIUM,
    LIBRARY,
    MAIN_BUILDING,
    NORTH_BUILDING,
    SCIENCE_BUILDING,
    SOUTH_BUILDING,
    STUDENT_CENTER,
    LocationDescriptor,
)


# Optional "room" word, optional single-letter prefix, optional hyphen, 3-4 digits.
ROOM_PATTERN = re.compile(r"(?:room\s*)?([a-z]?-?\d{3,4})", re.IGNORECASE)


@dataclass(frozen=True)
class CampusLocation:
    building: str
    floor: int | None = None


# Insertion order is the match order.
CAMPUS_LOCATIONS: dict[str, CampusLocation] = {
    "main entrance": CampusLocation(MAIN_BUILDING, floor=1),
    "entrance": CampusLocation(MAIN_BUILDING, floor=1),
    "library": CampusLocation(LIBRARY, floor=1),
    "cafeteria": CampusLocation(CAFETERIA, floor=1),
    "science building": CampusLocation(SCIENCE_BUILDING, floor=1),
    "gym": CampusLocation(GYMNASIUM, floor=1),
    "auditorium": CampusLocation(AUDITORIUM, floor=1),
    "student center": CampusLocation(STUDENT_CENTER, floor=1),
}

FALLBACK_KEYWORDS = (
    (("science", "lab"), SCIENCE_BUILDING),
    (("north", "n-"), NORTH_BUILDING),
    (("south", "s-"), SOUTH_BUILDING),
)


@dataclass(frozen=True)
class RoomMatch:
    building: str
    room: str


def normalize_location(text: str) -> str:
    return (text or "").lower().strip()


def _building_for_room(token: str) -> str:
    prefix = token[0].lower()
    if prefix == "n":
        return NORTH_BUILDING
    if prefix == "s":
        return SOUTH_BUILDING

    # Other letter prefixes and a bare leading hyphen carry no usable number.
    number = int(token) if token.isdigit() else None
    if number is not None and 100 <= number < 200:
        return MAIN_BUILDING
    if number is not None and 200 <= number < 300:
        return SCIENCE_BUILDING
    return MAIN_BUILDING


def extract_room(text: str) -> RoomMatch | None:
    """Return the first room token in `text` and the building it implies.

    The token keeps the caller's original casing so it can be echoed back in
    directions ("Find Room N-201").
    """
    match = ROOM_PATTERN.search((text or "").strip())
    if not match:
        return None
    token = match.group(1)
    return RoomMatch(building=_building_for_room(token), room=token)


def match_keyword(normalized: str) -> CampusLocation | None:
    for key, location in CAMPUS_LOCATIONS.items():
        if key in normalized:
            return location
    return None


def resolve(text: str) -> LocationDescriptor:
    """Map arbitrary location text to a building and optional room token.

    Args:
        text: Free-text description such as "Room N-201" or "the library".

    Returns:
        `LocationDescriptor`. Never raises; unmatched input resolves to the
        Main Building with no room.

    Edge cases:
        A room token wins over keywords present in the same text, so
        "library room 215" resolves to the Science Building.
    """
    room_match = extract_room(text)
    if room_match:
        return LocationDescriptor(building=room_match.building, room=room_match.room)

    normalized = normalize_location(text)

    known = match_keyword(normalized)
    if known:
        return LocationDescriptor(building=known.building)

    for keywords, building in FALLBACK_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return LocationDescriptor(building=building)

    return LocationDescriptor(building=MAIN_BUILDING)


def resolve_building(text: str) -> str:
    return resolve(text).building


def is_location_recognized(text: str) -> bool:
    """Return whether `text` names something the router knows about.

    True for room tokens, known-location keywords, or any mention of
    "building" or "room". Used by front ends to decide whether to ask the
    user for a clearer description; `resolve` itself never needs it.
    """
    normalized = normalize_location(text)
    return (
        extract_room(normalized) is not None
        or match_keyword(normalized) is not None
        or "building" in normalized
        or "room" in normalized
    )
