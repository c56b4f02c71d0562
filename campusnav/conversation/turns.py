"""Append-only turn log for one chat session.

Purpose of this abstraction:
    Hold the ordered user/assistant exchange of a single session in memory.
    The log is the only conversation state; nothing is written to disk and the
    log disappears with the session.

Ordering:
    Turns are kept in append order and are never reordered, merged or
    deduplicated. Image-only user turns are stored with empty `content` and are
    still part of the replayed history.

Concurrency:
    Appends are serialized with a lock so overlapping submissions land in
    call-completion order.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

from campusnav.llm.types import HistoryMessage, ImagePayload


USER = "user"
ASSISTANT = "assistant"
ROLES = (USER, ASSISTANT)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Turn:
    """One immutable exchange unit.

    Attributes:
        role: `user` or `assistant`.
        content: Message text; may be empty when an image carries the meaning.
        image: Photo attached to a user turn, if any.
        timestamp: Creation time (UTC), informational only.
    """

    role: str
    content: str = ""
    image: ImagePayload | None = None
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unsupported turn role: {self.role!r}")
        if self.image is not None and self.role != USER:
            raise ValueError("Only user turns may carry an image")

    def to_history(self) -> HistoryMessage:
        return HistoryMessage(role=self.role, content=self.content)

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "content": self.content,
            "hasImage": self.image is not None,
            "imageType": self.image.mime_type if self.image else None,
            "timestamp": self.timestamp.isoformat(),
        }


class TurnLog:
    """Ordered, append-only sequence of `Turn` objects."""

    def __init__(self):
        self._turns: list[Turn] = []
        self._lock = threading.Lock()

    def append(self, turn: Turn) -> Turn:
        with self._lock:
            self._turns.append(turn)
        return turn

    def turns(self) -> tuple[Turn, ...]:
        """Return a read-only snapshot for rendering collaborators."""
        with self._lock:
            return tuple(self._turns)

    def history(self) -> tuple[HistoryMessage, ...]:
        return tuple(turn.to_history() for turn in self.turns())

    def clear(self) -> None:
        """Discard the whole session."""
        with self._lock:
            self._turns.clear()

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self):
        return iter(self.turns())
