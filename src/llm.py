"""Shared Anthropic client helpers.

Builds the API client from resolved config, reduces raw message responses
to text, and cleans up JSON the model wraps in markdown fences.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

import anthropic

from blogwriter.errors import BackendError, ErrorKind, TextExtractionError

if TYPE_CHECKING:
    from blogwriter.config import BlogWriterConfig

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL_TYPE = "web_search_20250305"
WEB_SEARCH_TOOL_NAME = "web_search"

_TOOL_BLOCK_TYPES = ("tool_use", "server_tool_use")


def create_client(config: BlogWriterConfig) -> anthropic.Anthropic:
    """Create an Anthropic client from the resolved config.

    Raises:
        BackendError: If no Anthropic API key is configured.
    """
    api_key = config.anthropic.api_key.strip()
    if not api_key:
        raise BackendError(
            ErrorKind.AUTHENTICATION,
            "Anthropic API key not configured. Set ANTHROPIC_API_KEY or add it to your config.",
        )
    return anthropic.Anthropic(api_key=api_key, max_retries=config.anthropic.max_retries)


def web_search_tool(max_uses: int = 3) -> dict[str, Any]:
    """Declaration for the server-side web search tool."""
    return {
        "type": WEB_SEARCH_TOOL_TYPE,
        "name": WEB_SEARCH_TOOL_NAME,
        "max_uses": max_uses,
    }


def usage_of(response: Any) -> tuple[int, int]:
    """Return ``(input_tokens, output_tokens)`` from the response's usage."""
    return response.usage.input_tokens, response.usage.output_tokens


def extract_text(response: Any) -> str:
    """Reduce a message response to its text payload.

    All text blocks are joined with a single space and the result stripped.
    Text wins regardless of stop reason.

    Raises:
        TextExtractionError: If the response holds no text block. The error
            kind is derived from the stop reason.
    """
    text_blocks = [block.text for block in response.content if block.type == "text"]
    if text_blocks:
        return " ".join(text_blocks).strip()

    stop_reason = response.stop_reason

    if stop_reason == "max_tokens":
        raise TextExtractionError(
            ErrorKind.TRUNCATED,
            "Response truncated: output token limit reached",
            stop_reason,
            response,
        )

    if stop_reason == "tool_use":
        tool_names = [block.name for block in response.content if block.type in _TOOL_BLOCK_TYPES]
        raise TextExtractionError(
            ErrorKind.TOOL_ONLY_RESPONSE,
            f"No text content. Model invoked tools: {', '.join(tool_names)}",
            stop_reason,
            response,
        )

    if stop_reason == "end_turn":
        raise TextExtractionError(
            ErrorKind.EMPTY_RESPONSE,
            "Model returned empty response",
            stop_reason,
            response,
        )

    if stop_reason == "stop_sequence":
        raise TextExtractionError(
            ErrorKind.STOPPED_EARLY,
            "Response stopped at configured stop sequence without text",
            stop_reason,
            response,
        )

    raise TextExtractionError(
        ErrorKind.UNKNOWN_STOP,
        f"No text content (stop_reason: {stop_reason or 'unknown'})",
        stop_reason,
        response,
    )


def create_message(
    client: anthropic.Anthropic,
    *,
    label: str,
    **request: Any,
) -> Any:
    """Issue a single ``messages.create`` call with debug logging."""
    logger.debug(
        "Calling Anthropic API model=%s max_tokens=%s (%s)",
        request.get("model"),
        request.get("max_tokens"),
        label,
    )
    response = client.messages.create(**request)
    logger.debug(
        "Anthropic API returned stop_reason=%s in=%d out=%d (%s)",
        response.stop_reason,
        response.usage.input_tokens,
        response.usage.output_tokens,
        label,
    )
    return response


# ---------------------------------------------------------------------------
# JSON output helpers
# ---------------------------------------------------------------------------

# Fence lines must stand alone. A JSON string cannot hold a raw newline, so
# fences inside an encoded string value never match.
_JSON_FENCE_RE = re.compile(
    r"^```(?:json)?[ \t]*\n(.*?)\n[ \t]*```[ \t]*$",
    re.DOTALL | re.MULTILINE,
)


def strip_json_fences(text: str) -> str:
    """Strip markdown code fences from LLM JSON output.

    Handles Claude's tendency to wrap JSON in ```json ... ``` blocks.
    Only the interior of the first fenced block is kept.
    """
    text = text.strip()
    match = _JSON_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text
