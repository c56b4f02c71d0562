"""Conversation orchestration for one chat session.

Architectural role:
    Drives one request/response cycle per user action: validate input, append
    the user turn, assemble a `ProviderRequest`, await the provider adapter and
    append the assistant reply on success.

Session start:
    A new session (and every `reset`) begins with the assistant `GREETING`
    turn, which is replayed as history like any other turn.

Control-flow model:
    1. Reject submissions with neither text nor image (`NoContentError`)
       before touching the turn log or the provider.
    2. Snapshot prior turns as history, then append the new user turn.
    3. Select the model: vision model when an image is attached, otherwise the
       cheaper text model.
    4. Run the blocking adapter call in a worker thread.
    5. On `TextResult`, append an assistant turn. On `FailureResult`, append
       nothing; the caller renders `reply_text(result)` instead.

Interaction surface:
    - Provider: any `ProviderAdapter` (injected; no process-global client).
    - Rendering: `turn_log.turns()` snapshot.

Determinism:
    Request assembly is deterministic for a fixed turn log and input. Provider
    output is not.
"""

import asyncio
import logging

from campusnav.conversation.turns import ASSISTANT, USER, Turn, TurnLog
from campusnav.errors import NoContentError
from campusnav.llm.client import ProviderAdapter
from campusnav.llm.errors import advisory_message
from campusnav.llm.types import (
    FailureResult,
    ImagePayload,
    ProviderRequest,
    ProviderResult,
    TextResult,
)
from campusnav.prompting.prompts import GREETING, SYSTEM_PROMPT


logger = logging.getLogger(__name__)

EMPTY_REPLY_FALLBACK = "Sorry, I could not generate a response."


class ConversationOrchestrator:
    """Owns the turn log of one session and talks to one provider adapter."""

    def __init__(
        self,
        adapter: ProviderAdapter,
        *,
        system_prompt: str = SYSTEM_PROMPT,
        greeting: str | None = GREETING,
        turn_log: TurnLog | None = None,
    ):
        self._adapter = adapter
        self._system_prompt = system_prompt
        self._greeting = greeting
        if turn_log is None:
            turn_log = TurnLog()
            self._seed_greeting(turn_log)
        self._turn_log = turn_log

    def _seed_greeting(self, turn_log: TurnLog) -> None:
        if self._greeting:
            turn_log.append(Turn(role=ASSISTANT, content=self._greeting))

    @property
    def adapter(self) -> ProviderAdapter:
        return self._adapter

    @property
    def turn_log(self) -> TurnLog:
        return self._turn_log

    def build_request(
        self,
        history,
        text: str | None,
        image: ImagePayload | None,
    ) -> ProviderRequest:
        return ProviderRequest(
            system_prompt=self._system_prompt,
            history=tuple(history),
            current_text=text,
            current_image=image,
            model=self._adapter.settings.model_for(image is not None),
        )

    async def submit(
        self,
        text: str | None = None,
        image: ImagePayload | None = None,
    ) -> ProviderResult:
        """Send one user action to the provider and record the exchange.

        Args:
            text: User message; blank text counts as absent.
            image: Optional photo for this turn only. Later requests replay the
                turn's text but never its image bytes.

        Returns:
            `TextResult` with the assistant reply, or the adapter's
            `FailureResult`.

        Raises:
            NoContentError: Neither text nor a non-empty image was supplied.
        """
        has_text = bool(text and text.strip())
        if image is not None and not image.data:
            image = None

        if not has_text and image is None:
            raise NoContentError()

        history = self._turn_log.history()
        text = text.strip() if has_text else None
        self._turn_log.append(Turn(role=USER, content=text or "", image=image))

        request = self.build_request(history, text, image)
        result = await asyncio.to_thread(self._adapter.invoke, request)

        if isinstance(result, FailureResult):
            logger.warning(
                "Chat submission failed: kind=%s detail=%s",
                result.kind.value,
                result.detail,
            )
            return result

        message = result.message or EMPTY_REPLY_FALLBACK
        self._turn_log.append(Turn(role=ASSISTANT, content=message))
        return TextResult(message=message)

    def reply_text(self, result: ProviderResult) -> str:
        """Text to display for a submission outcome (reply or advisory)."""
        if isinstance(result, TextResult):
            return result.message
        return advisory_message(result, self._adapter.settings)

    def reset(self) -> None:
        """Discard the exchange and start over from the greeting."""
        self._turn_log.clear()
        self._seed_greeting(self._turn_log)
