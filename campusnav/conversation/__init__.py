"""Conversation state and provider request orchestration.

Module split:
    - `turns`: immutable `Turn` and the append-only `TurnLog`.
    - `orchestrator`: `ConversationOrchestrator.submit`.
"""

from campusnav.conversation.orchestrator import ConversationOrchestrator
from campusnav.conversation.turns import ASSISTANT, USER, Turn, TurnLog

__all__ = ["ASSISTANT", "USER", "ConversationOrchestrator", "Turn", "TurnLog"]
