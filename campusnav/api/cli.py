"""
Interactive CLI adapter for the campus navigation assistant.

Architectural role:
- Terminal interface over the chat orchestrator and the deterministic router.
- Shows which provider is active and whether it is configured at startup.

Request lifecycle (per line of input):
1. Read a single line from stdin.
2. Handle local commands:
   - `exit` / `quit`: stop.
   - `empty chat` / `clear chat`: discard the session turn log.
   - `/route <from> -> <to>`: print deterministic directions.
   - `/image <path> [message]`: submit a photo with optional text.
   - `/where <path>`: ask the provider which location a photo shows.
3. Anything else is submitted to the orchestrator as chat text.

Error handling strategy:
- Input validation errors (bad image paths, empty submissions) are printed and
  the loop continues.
- Provider failures are printed as advisory text; unknown failures are
  prefixed so they stand out.
- EOF and keyboard interrupts end the session without traceback output.
"""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import re
import sys

from campusnav.api.multimodal.image_input import load_image_file
from campusnav.config import configure_logging
from campusnav.conversation.orchestrator import ConversationOrchestrator
from campusnav.errors import InputValidationError
from campusnav.llm.client import build_adapter
from campusnav.llm.errors import advisory_message
from campusnav.llm.location_tools import describe_image
from campusnav.llm.provider_config import load_settings
from campusnav.llm.types import FailureResult, TextResult
from campusnav.navigation.models import NavigationRoute
from campusnav.navigation.planner import plan
from campusnav.prompting.prompts import GREETING


ROUTE_SEPARATOR = "->"
# Leading path, optionally quoted so it may contain spaces, then the rest.
IMAGE_ARGUMENT_PATTERN = re.compile(r"""^\s*(?:"([^"]+)"|'([^']+)'|(\S+))\s*(.*)$""", re.DOTALL)
DIVIDER = "-" * 60

USAGE = (
    "Commands:\n"
    " /route <from> -> <to>     deterministic directions\n"
    " /image <path> [message]   send a photo of where you are\n"
    "                           (quote paths that contain spaces)\n"
    " /where <path>             identify the location in a photo\n"
    " clear chat                start over\n"
    " exit                      quit\n"
)


# =========================================================
# RENDERING
# =========================================================

def format_route(route: NavigationRoute) -> str:
    from_building, to_building = route.buildings
    lines = [f"{from_building} -> {to_building}", ""]
    for index, step in enumerate(route.steps, start=1):
        lines.append(f"{index}. {step.instruction}")
        if step.details:
            lines.append(f"   {step.details}")
    lines.append("")
    lines.append(f"Estimated time: {route.estimated_time}")
    lines.append(f"Distance: {route.distance_label}")
    return "\n".join(lines)


def parse_route_command(argument: str) -> tuple[str, str] | None:
    """Split `<from> -> <to>`; `None` when either side is missing."""
    if ROUTE_SEPARATOR not in argument:
        return None
    origin, destination = (part.strip() for part in argument.split(ROUTE_SEPARATOR, 1))
    if not origin or not destination:
        return None
    return origin, destination


def parse_image_command(argument: str) -> tuple[str, str]:
    """Split `<path> [message]`; the path may be wrapped in quotes."""
    match = IMAGE_ARGUMENT_PATTERN.match(argument)
    if not match:
        return "", ""
    path = next(group for group in match.groups()[:3] if group is not None)
    return path, match.group(4).strip()


def render_result(orchestrator: ConversationOrchestrator, result) -> str:
    text = orchestrator.reply_text(result)
    if isinstance(result, FailureResult) and not result.is_soft:
        return f"[provider error] {text}"
    return text


# =========================================================
# COMMAND HANDLING
# =========================================================

def handle_line(orchestrator: ConversationOrchestrator, line: str) -> str | None:
    """
    Process one line of input and return the text to print.

    Returns `None` for blank input. Exit commands are handled by `main`.
    """
    question = line.strip()
    if not question:
        return None

    lowered = question.lower()

    if lowered in ("empty chat", "clear chat"):
        orchestrator.reset()
        return "Chat cleared."

    if lowered in ("/help", "help"):
        return USAGE

    command, _, argument = question.partition(" ")
    command = command.lower()

    try:
        if command == "/route":
            parsed = parse_route_command(argument)
            if parsed is None:
                return "Usage: /route <from> -> <to>"
            return format_route(plan(*parsed))

        if command == "/image":
            path, text = parse_image_command(argument)
            image = load_image_file(path)
            result = asyncio.run(orchestrator.submit(text or None, image))
            return render_result(orchestrator, result)

        if command == "/where":
            path, _ = parse_image_command(argument)
            image = load_image_file(path)
            guess = describe_image(orchestrator.adapter, image)
            if isinstance(guess.result, TextResult):
                return f"Detected location: {guess.location}"
            advisory = advisory_message(guess.result, orchestrator.adapter.settings)
            if guess.location is None:
                return advisory
            return f"{advisory}\nUsing fallback location: {guess.location}"

        result = asyncio.run(orchestrator.submit(question))
        return render_result(orchestrator, result)

    except InputValidationError as err:
        return f"Input error: {err}"


# =========================================================
# MAIN APPLICATION LOOP
# =========================================================

def main():
    """
    Run the interactive terminal session.

    Error handling strategy:
    - Provider configuration problems are reported at startup but do not stop
      the loop; `/route` works without any credential.
    - EOF and keyboard interrupts are handled gracefully.
    """
    configure_logging()

    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    settings = load_settings()
    orchestrator = ConversationOrchestrator(build_adapter(settings))

    print("BMCC navigation assistant started. (Type 'exit' to quit)\n")
    print(f"Provider: {settings.label} ({'configured' if settings.is_configured else 'not configured'})")
    print(DIVIDER)
    print(USAGE)
    print(DIVIDER)
    print(f"\nAssistant:\n{GREETING}")
    print("\n" + DIVIDER + "\n")

    while True:

        try:
            line = input("You: ")

        except EOFError:
            print("\nSession ended.")
            break

        except KeyboardInterrupt:
            print("\nInterrupted.")
            break

        if line.strip().lower() in ("exit", "quit"):
            print("Shutting down.")
            break

        output = handle_line(orchestrator, line)
        if output is None:
            continue

        print(f"\nAssistant:\n{output}")
        print("\n" + DIVIDER + "\n")


if __name__ == "__main__":
    main()
