"""Error taxonomy for the generation pipeline.

Every failure the pipeline surfaces is a ``BlogWriterError`` tagged with an
``ErrorKind``. Backend SDK exceptions are classified by HTTP status into
``BackendError`` so callers never depend on the SDK's exception hierarchy.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

import anthropic


class ErrorKind(StrEnum):
    """Closed set of failure categories."""

    AUTHENTICATION = "authentication"
    RATE_LIMITED = "rate_limited"
    CONNECTION_FAILED = "connection_failed"
    OVERLOADED = "overloaded"
    FORBIDDEN = "forbidden"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    BACKEND_ERROR = "backend_error"
    TRUNCATED = "truncated"
    TOOL_ONLY_RESPONSE = "tool_only_response"
    EMPTY_RESPONSE = "empty_response"
    STOPPED_EARLY = "stopped_early"
    UNKNOWN_STOP = "unknown_stop"
    MALFORMED_OUTPUT = "malformed_output"
    SCHEMA_VIOLATION = "schema_violation"


class BlogWriterError(Exception):
    """Base error carrying a failure kind and a user-facing message."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @property
    def message(self) -> str:
        return str(self)


class BackendError(BlogWriterError):
    """The generation backend rejected or failed a request."""

    def __init__(self, kind: ErrorKind, message: str, status_code: int | None = None) -> None:
        super().__init__(kind, message)
        self.status_code = status_code


class TextExtractionError(BlogWriterError):
    """A backend response contained no text block.

    Keeps the stop reason and the full response for diagnostics.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        stop_reason: str | None,
        response: Any,
    ) -> None:
        super().__init__(kind, message)
        self.stop_reason = stop_reason
        self.response = response


class OutputValidationError(BlogWriterError):
    """Model text could not be parsed or did not match the expected shape."""

    def __init__(self, kind: ErrorKind, message: str, issues: list[str] | None = None) -> None:
        super().__init__(kind, message)
        self.issues = issues or []


_STATUS_KINDS: dict[int, tuple[ErrorKind, str]] = {
    401: (
        ErrorKind.AUTHENTICATION,
        "Invalid Anthropic API key. Update your key in settings.",
    ),
    403: (
        ErrorKind.FORBIDDEN,
        "API key lacks permission for this request.",
    ),
    413: (
        ErrorKind.PAYLOAD_TOO_LARGE,
        "Request too large. Try a shorter topic.",
    ),
    429: (
        ErrorKind.RATE_LIMITED,
        "Rate limit exceeded after retries. Try again in a minute.",
    ),
    529: (
        ErrorKind.OVERLOADED,
        "Anthropic API is overloaded. Try again later.",
    ),
}


def classify_backend_error(exc: anthropic.APIError) -> BackendError:
    """Translate an Anthropic SDK error into a tagged ``BackendError``."""
    if isinstance(exc, anthropic.APIConnectionError):
        return BackendError(
            ErrorKind.CONNECTION_FAILED,
            "Could not connect to Anthropic. Check your internet connection.",
        )

    status = getattr(exc, "status_code", None)
    if status in _STATUS_KINDS:
        kind, message = _STATUS_KINDS[status]
        return BackendError(kind, message, status_code=status)
    return BackendError(
        ErrorKind.BACKEND_ERROR,
        f"API error ({status}): {exc.message}",
        status_code=status,
    )
