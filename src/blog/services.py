"""Stage functions for the blog pipeline.

Each stage issues exactly one request to the Anthropic API, reduces the
response to text with ``extract_text``, and returns a ``StepResult`` carrying
the backend's own token counts. Stages hold no state between calls.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from blogwriter.blog.models import BlogPayload, BlogSummary, PipelineStep, StageSettings, StepResult
from blogwriter.blog.prompts import (
    NO_CORRECTIONS_SENTINEL,
    NO_EXISTING_POSTS,
    get_system_prompt,
    get_topic_list_prompt,
)
from blogwriter.errors import ErrorKind, OutputValidationError
from blogwriter.llm import create_message, extract_text, strip_json_fences, usage_of, web_search_tool

logger = logging.getLogger(__name__)

_DEFAULT_SETTINGS = StageSettings()

# "1. Topic", "2) Topic", "3 - Topic", "4: Topic", optionally bolded "**5.**"
_ORDINAL_RE = re.compile(r"^\s*(?:\*\*)?\d+\s*(?:[.):]|\s-)(?:\*\*)?\s*")
_WRAPPING_CHARS = "\"'*` "


def render_summaries(summaries: list[BlogSummary]) -> str:
    """Render existing posts as ``- "Title": excerpt`` lines."""
    if not summaries:
        return NO_EXISTING_POSTS
    return "\n".join(f'- "{s.title}": {s.excerpt}' for s in summaries)


def parse_numbered_list(text: str, limit: int | None = None) -> list[str]:
    """Parse a numbered list into its items.

    Lines without a leading ordinal marker are discarded, ordinals and
    wrapping quotes/emphasis are stripped, and empty items dropped.
    """
    items: list[str] = []
    for line in text.splitlines():
        match = _ORDINAL_RE.match(line)
        if not match:
            continue
        item = line[match.end():].strip().strip(_WRAPPING_CHARS)
        if item:
            items.append(item)
    if limit is not None:
        items = items[:limit]
    return items


def _step_result(data: Any, response: Any) -> StepResult[Any]:
    input_tokens, output_tokens = usage_of(response)
    return StepResult(data=data, input_tokens=input_tokens, output_tokens=output_tokens)


def brainstorm_topic(
    client: Any,
    model: str,
    summaries: list[BlogSummary],
    *,
    settings: StageSettings = _DEFAULT_SETTINGS,
) -> StepResult[str]:
    """Suggest one fresh topic that does not overlap existing posts."""
    response = create_message(
        client,
        label="brainstorm",
        model=model,
        max_tokens=settings.brainstorm_max_tokens,
        system=get_system_prompt(PipelineStep.BRAINSTORMING, settings),
        messages=[
            {
                "role": "user",
                "content": (
                    f"Existing blog posts:\n{render_summaries(summaries)}\n\n"
                    "Suggest one new topic."
                ),
            }
        ],
        tool_choice={"type": "any"},
        tools=[web_search_tool(settings.web_search_max_uses)],
    )
    return _step_result(extract_text(response).strip(), response)


def brainstorm_topics(
    client: Any,
    model: str,
    summaries: list[BlogSummary],
    *,
    count: int | None = None,
    settings: StageSettings = _DEFAULT_SETTINGS,
) -> StepResult[list[str]]:
    """Suggest ``count`` candidate topics as an ordered list.

    Raises:
        OutputValidationError: If no numbered items could be parsed.
    """
    count = count or settings.topic_count
    response = create_message(
        client,
        label="brainstorm-topics",
        model=model,
        max_tokens=settings.topics_max_tokens,
        system=get_topic_list_prompt(settings, count),
        messages=[
            {
                "role": "user",
                "content": (
                    f"Existing blog posts:\n{render_summaries(summaries)}\n\n"
                    f"Suggest {count} new topics."
                ),
            }
        ],
        tools=[web_search_tool(settings.web_search_max_uses)],
    )
    text = extract_text(response)
    topics = parse_numbered_list(text, limit=count)
    if not topics:
        raise OutputValidationError(
            ErrorKind.MALFORMED_OUTPUT,
            "LLM returned no numbered topics. Please try again.",
        )
    if len(topics) < count:
        logger.warning("Expected %d topics, parsed %d", count, len(topics))
    return _step_result(topics, response)


def write_blog_post(
    client: Any,
    model: str,
    topic: str,
    *,
    settings: StageSettings = _DEFAULT_SETTINGS,
) -> StepResult[str]:
    """Draft a long-form markdown post about ``topic``."""
    response = create_message(
        client,
        label="write",
        model=model,
        max_tokens=settings.write_max_tokens,
        system=get_system_prompt(PipelineStep.WRITING, settings),
        tools=[web_search_tool(settings.web_search_max_uses)],
        tool_choice={"type": "any"},
        messages=[{"role": "user", "content": f"Write a blog post about: {topic}"}],
    )
    return _step_result(extract_text(response), response)


def review_blog_post(
    client: Any,
    model: str,
    content: str,
    *,
    settings: StageSettings = _DEFAULT_SETTINGS,
) -> StepResult[str]:
    """Return a line-per-defect correction list, or the no-corrections sentinel."""
    response = create_message(
        client,
        label="review",
        model=model,
        max_tokens=settings.review_max_tokens,
        system=get_system_prompt(PipelineStep.REVIEWING, settings),
        messages=[{"role": "user", "content": content}],
    )
    return _step_result(extract_text(response), response)


def format_blog_post(
    client: Any,
    model: str,
    content: str,
    corrections: str,
    *,
    settings: StageSettings = _DEFAULT_SETTINGS,
) -> StepResult[BlogPayload]:
    """Apply corrections and return the validated blog payload.

    Raises:
        OutputValidationError: MALFORMED_OUTPUT if the text is not JSON,
            SCHEMA_VIOLATION if the JSON does not match ``BlogPayload``.
    """
    if corrections.strip() == NO_CORRECTIONS_SENTINEL:
        user_message = (
            f"Blog post:\n{content}\n\nNo corrections needed. Format this post as JSON."
        )
    else:
        user_message = f"Blog post:\n{content}\n\nCorrections to apply:\n{corrections}"

    response = create_message(
        client,
        label="format",
        model=model,
        max_tokens=settings.format_max_tokens,
        system=get_system_prompt(PipelineStep.FORMATTING, settings),
        messages=[{"role": "user", "content": user_message}],
    )
    payload = parse_blog_payload(extract_text(response))
    return _step_result(payload, response)


def parse_blog_payload(text: str) -> BlogPayload:
    """Parse and validate the formatter's JSON output.

    Only a fully valid payload is returned; there is no best-effort result.
    """
    try:
        parsed = json.loads(text.strip())
    except json.JSONDecodeError:
        try:
            parsed = json.loads(strip_json_fences(text))
        except json.JSONDecodeError as exc:
            raise OutputValidationError(
                ErrorKind.MALFORMED_OUTPUT,
                "LLM returned invalid JSON. Please try again.",
            ) from exc

    if not isinstance(parsed, dict):
        issue = f"expected a JSON object, got {type(parsed).__name__}"
        raise OutputValidationError(
            ErrorKind.SCHEMA_VIOLATION,
            f"Invalid blog payload: {issue}",
            [issue],
        )

    try:
        return BlogPayload.model_validate(parsed)
    except ValidationError as exc:
        issues = [_describe_issue(err) for err in exc.errors()]
        raise OutputValidationError(
            ErrorKind.SCHEMA_VIOLATION,
            f"Invalid blog payload: {', '.join(issues)}",
            issues,
        ) from exc


def _describe_issue(err: dict[str, Any]) -> str:
    field = ".".join(str(part) for part in err.get("loc", ()))
    message = err.get("msg", "invalid value")
    return f"{field}: {message}" if field else message
