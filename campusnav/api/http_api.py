"""
HTTP API adapter for the campus navigation assistant.

Architectural role:
- Expose the chat, route-planning and location-extraction boundaries over HTTP.
- Enforce adapter-level input validation (missing fields, bad uploads).
- Delegate chat to `ConversationOrchestrator`, routing to
  `campusnav.navigation.plan`, and location extraction to
  `campusnav.llm.location_tools`.

Endpoint responsibilities:
- `POST /api/chat`: multipart `message`/`image`/`session_id` -> assistant reply.
- `GET /api/chat/{session_id}`: turn log for rendering.
- `DELETE /api/chat/{session_id}`: discard a session.
- `POST /api/navigate`: JSON `currentLocation`/`destination` -> route.
- `POST /api/detect-location`: multipart `image` -> location guess.
- `POST /api/parse-location`: JSON `text` -> normalized location.
- `GET /health`: provider name and configuration state.

Status mapping (chat and location endpoints):
- Successful replies and soft provider advisories (unconfigured, unauthorized,
  quota, rate limit) -> HTTP 200, advisory text in `message`.
- Unknown provider failures -> HTTP 500.
- Missing content or rejected uploads -> HTTP 400.

Side effects:
- Keeps at most `MAX_SESSIONS` chat sessions in process memory (LRU
  `SessionRegistry`); nothing persists across restarts.
- Loads environment variables at import time via `load_dotenv()`.
"""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import logging
import os
import threading
import uuid
from collections import OrderedDict

import uvicorn
from fastapi import FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from campusnav.api.multimodal.image_input import load_image
from campusnav.config import configure_logging
from campusnav.conversation.orchestrator import ConversationOrchestrator
from campusnav.errors import ImageValidationError, NoContentError
from campusnav.llm.client import ProviderAdapter, build_adapter
from campusnav.llm.errors import advisory_message
from campusnav.llm.location_tools import describe_image, normalize_location_text
from campusnav.llm.provider_config import ProviderSettings, load_settings
from campusnav.llm.types import FailureResult
from campusnav.navigation.planner import plan


logger = logging.getLogger(__name__)

# Least recently used sessions are evicted beyond this many.
MAX_SESSIONS = int(os.getenv("MAX_CHAT_SESSIONS", "500"))


# ============================================================
# Request Schemas
# ============================================================

class NavigateRequest(BaseModel):
    """Body of `POST /api/navigate`; blank fields are rejected by the handler."""

    model_config = ConfigDict(populate_by_name=True)

    current_location: str | None = Field(default=None, alias="currentLocation")
    destination: str | None = None


class ParseLocationRequest(BaseModel):
    text: str | None = None


# ============================================================
# Session Registry
# ============================================================

class SessionRegistry:
    """In-process LRU map of session id -> orchestrator, all sharing one adapter.

    At most `max_sessions` sessions are kept; creating one more drops the
    session that was used least recently.
    """

    def __init__(self, adapter: ProviderAdapter, max_sessions: int = MAX_SESSIONS):
        self._adapter = adapter
        self._max_sessions = max(1, max_sessions)
        self._sessions: OrderedDict[str, ConversationOrchestrator] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id: str | None) -> ConversationOrchestrator | None:
        if not session_id:
            return None
        with self._lock:
            orchestrator = self._sessions.get(session_id)
            if orchestrator is not None:
                self._sessions.move_to_end(session_id)
            return orchestrator

    def get_or_create(self, session_id: str | None = None) -> tuple[str, ConversationOrchestrator]:
        """Return the named session, creating it (with a fresh id if blank)."""
        session_id = session_id or uuid.uuid4().hex
        with self._lock:
            orchestrator = self._sessions.get(session_id)
            if orchestrator is None:
                orchestrator = ConversationOrchestrator(self._adapter)
                self._sessions[session_id] = orchestrator
                while len(self._sessions) > self._max_sessions:
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.info("Evicted idle chat session %s", evicted)
            else:
                self._sessions.move_to_end(session_id)
        return session_id, orchestrator

    def discard(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


async def _read_upload(image: UploadFile | None):
    """Return a validated `ImagePayload`, or `None` when no file was sent."""
    if image is None:
        return None
    raw = await image.read()
    if not raw:
        return None
    return load_image(raw, image.content_type)


# ============================================================
# Application Factory
# ============================================================

def create_app(
    adapter: ProviderAdapter | None = None,
    settings: ProviderSettings | None = None,
    max_sessions: int = MAX_SESSIONS,
) -> FastAPI:
    """
    Build the FastAPI application around one provider adapter.

    Args:
        adapter: Pre-built adapter (tests inject doubles here).
        settings: Provider settings used when `adapter` is not given; defaults
            to `load_settings()` from the environment.
        max_sessions: Upper bound on in-memory chat sessions.
    """
    if adapter is None:
        adapter = build_adapter(settings or load_settings())

    app = FastAPI(title="Campus Navigation Assistant")
    registry = SessionRegistry(adapter, max_sessions=max_sessions)
    app.state.adapter = adapter
    app.state.sessions = registry

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "provider": adapter.settings.provider,
            "configured": adapter.is_configured,
        }

    # ------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------

    @app.post("/api/chat")
    async def chat(
        message: str | None = Form(default=None),
        image: UploadFile | None = File(default=None),
        session_id: str | None = Form(default=None),
    ):
        try:
            payload = await _read_upload(image)
        except ImageValidationError as err:
            return _bad_request(str(err))

        if not (message and message.strip()) and payload is None:
            return _bad_request(str(NoContentError()))

        session_id, orchestrator = registry.get_or_create(session_id)

        try:
            result = await orchestrator.submit(message, payload)
        except NoContentError as err:
            return _bad_request(str(err))

        reply = orchestrator.reply_text(result)

        if isinstance(result, FailureResult) and not result.is_soft:
            logger.error("Chat request failed for session %s: %s", session_id, result.detail)
            return JSONResponse(
                status_code=500,
                content={"message": reply, "session_id": session_id},
            )

        return {"message": reply, "session_id": session_id}

    @app.get("/api/chat/{session_id}")
    def chat_history(session_id: str):
        orchestrator = registry.get(session_id)
        if orchestrator is None:
            return JSONResponse(status_code=404, content={"error": "Unknown session"})
        return {
            "session_id": session_id,
            "turns": [turn.to_dict() for turn in orchestrator.turn_log.turns()],
        }

    @app.delete("/api/chat/{session_id}")
    def clear_chat(session_id: str):
        if not registry.discard(session_id):
            return JSONResponse(status_code=404, content={"error": "Unknown session"})
        return {"session_id": session_id, "cleared": True}

    # ------------------------------------------------------------
    # Deterministic routing
    # ------------------------------------------------------------

    @app.post("/api/navigate")
    def navigate(body: NavigateRequest):
        current = (body.current_location or "").strip()
        destination = (body.destination or "").strip()

        if not current or not destination:
            return _bad_request("Both currentLocation and destination are required")

        return plan(current, destination).to_dict()

    # ------------------------------------------------------------
    # Location extraction
    # ------------------------------------------------------------

    @app.post("/api/detect-location")
    async def detect_location(image: UploadFile | None = File(default=None)):
        try:
            payload = await _read_upload(image)
        except ImageValidationError as err:
            return _bad_request(str(err))

        if payload is None:
            return _bad_request("No image provided")

        guess = await asyncio.to_thread(describe_image, adapter, payload)
        return _location_response(guess, "Failed to detect location")

    @app.post("/api/parse-location")
    async def parse_location(body: ParseLocationRequest):
        if not body.text or not body.text.strip():
            return _bad_request("No text provided")

        guess = await asyncio.to_thread(normalize_location_text, adapter, body.text)
        return _location_response(guess, "Failed to parse location")

    def _location_response(guess, error_label: str):
        if guess.location is not None:
            content = {"location": guess.location}
            if isinstance(guess.result, FailureResult):
                content["message"] = advisory_message(guess.result, adapter.settings)
            return content

        failure = guess.result
        if failure.is_soft:
            return {"location": None, "message": advisory_message(failure, adapter.settings)}

        return JSONResponse(
            status_code=500,
            content={"error": error_label, "details": failure.detail},
        )

    return app


app = create_app()


def serve():
    """Run the module-level app with uvicorn (`HOST`/`PORT`, default 127.0.0.1:8000)."""
    configure_logging()
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    serve()
