"""Shared fakes for Anthropic message responses and clients."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

import pytest


def text_block(text: str) -> SimpleNamespace:
    return SimpleNamespace(type="text", text=text)


def tool_use_block(name: str, block_type: str = "tool_use") -> SimpleNamespace:
    return SimpleNamespace(type=block_type, name=name, id=f"toolu_{name}", input={})


def make_response(
    *blocks: Any,
    stop_reason: str | None = "end_turn",
    input_tokens: int = 10,
    output_tokens: int = 20,
) -> SimpleNamespace:
    """Build an object shaped like ``anthropic.types.Message``.

    Plain strings become text blocks.
    """
    content = [text_block(b) if isinstance(b, str) else b for b in blocks]
    return SimpleNamespace(
        content=content,
        stop_reason=stop_reason,
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


class FakeMessages:
    def __init__(self, responses: list[Any]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if not self._responses:
            raise AssertionError("Unexpected messages.create call")
        nxt = self._responses.pop(0)
        if isinstance(nxt, BaseException):
            raise nxt
        return nxt


class FakeClient:
    """Stands in for ``anthropic.Anthropic``; replays queued responses."""

    def __init__(self, *responses: Any) -> None:
        self.messages = FakeMessages(list(responses))

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.messages.calls


VALID_PAYLOAD: dict[str, Any] = {
    "title": "Shipping a Terminal Blog Writer",
    "excerpt": "How I wired Claude into my portfolio. It drafts, reviews and formats.",
    "content": "## Why\n\nBecause writing is hard.",
    "tags": ["Typescript", "Ai"],
    "media": [],
    "isActive": True,
}


@pytest.fixture
def make_client():
    return FakeClient


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def valid_payload_json() -> str:
    return json.dumps(VALID_PAYLOAD)


@pytest.fixture
def tool_block_factory():
    return tool_use_block


@pytest.fixture
def valid_payload() -> dict[str, Any]:
    return dict(VALID_PAYLOAD)
