"""Exception hierarchy for caller-side input failures.

Provider failures are not exceptions: adapters return them as
`FailureResult` values (see `campusnav.llm.types`). The classes here cover
input problems that must be rejected before any provider call is attempted.
"""


class CampusNavError(Exception):
    """Base class for all errors raised by the package."""


class InputValidationError(CampusNavError):
    """Caller supplied input that cannot be processed."""


class NoContentError(InputValidationError):
    """A chat submission carried neither text nor image."""

    def __init__(self, message: str = "No message or image provided"):
        super().__init__(message)


class ImageValidationError(InputValidationError):
    """An uploaded image was empty, too large, or not a supported format."""
