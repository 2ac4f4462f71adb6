"""Pure data models for blog generation.

All Pydantic models and enums live here. No I/O, no business logic,
no API calls. Services import from this module; this module only
imports from stdlib, third-party packages, and blogwriter.pricing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blogwriter.pricing import calculate_cost

T = TypeVar("T")

MAX_TAGS = 4
MAX_TAG_LENGTH = 30

# ---------------------------------------------------------------------------
# Pipeline bookkeeping
# ---------------------------------------------------------------------------


class PipelineStep(StrEnum):
    """Pipeline stages, in execution order."""

    BRAINSTORMING = "brainstorming"
    WRITING = "writing"
    REVIEWING = "reviewing"
    FORMATTING = "formatting"


class TokenUsage(BaseModel):
    """Immutable snapshot of accumulated token counts and their cost."""

    model_config = ConfigDict(frozen=True)

    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)
    cost: float = Field(default=0.0, ge=0)

    @classmethod
    def zero(cls) -> TokenUsage:
        return cls()

    @classmethod
    def from_tokens(cls, model_id: str | None, input_tokens: int, output_tokens: int) -> TokenUsage:
        """Build a snapshot whose cost is derived from the model's pricing."""
        return cls(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=calculate_cost(model_id, input_tokens, output_tokens),
        )

    def add(self, model_id: str | None, input_tokens: int, output_tokens: int) -> TokenUsage:
        """Return a new snapshot with the given tokens added.

        Cost is re-derived from the summed token totals.
        """
        return TokenUsage.from_tokens(
            model_id,
            self.input_tokens + input_tokens,
            self.output_tokens + output_tokens,
        )


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """Output of a single stage plus the tokens the backend reported for it."""

    data: T
    input_tokens: int
    output_tokens: int


class StageSettings(BaseModel):
    """Request limits and author profile shared by the stage functions."""

    model_config = ConfigDict(frozen=True)

    blog_description: str = "personal tech/sports/lifestyle portfolio blog"
    audience: str = "a developer/tech enthusiast audience"
    github_url: str = ""
    brainstorm_max_tokens: int = 256
    topics_max_tokens: int = 512
    write_max_tokens: int = 4096
    review_max_tokens: int = 1024
    format_max_tokens: int = 5120
    web_search_max_uses: int = 3
    topic_count: int = 5


# ---------------------------------------------------------------------------
# Blog content
# ---------------------------------------------------------------------------


class BlogPayload(BaseModel):
    """Validated post ready to hand to the publish API.

    Field names follow the blog API's wire format (``isActive``); dump with
    ``by_alias=True`` when sending.
    """

    model_config = ConfigDict(strict=True, populate_by_name=True)

    title: str
    excerpt: str
    content: str
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    media: list[str] = Field(default_factory=list)
    is_active: bool = Field(default=True, alias="isActive")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        tags: list[str] = []
        for tag in value:
            tag = tag.strip()
            if not tag:
                raise ValueError("Tags must not be empty")
            if len(tag) > MAX_TAG_LENGTH:
                raise ValueError(f"Tag '{tag}' is longer than {MAX_TAG_LENGTH} characters")
            tags.append(tag[0].upper() + tag[1:])
        return tags

    def to_api_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class BlogSummary(BaseModel):
    """Title/excerpt pair of an existing post, used to steer brainstorming."""

    title: str
    excerpt: str
    tags: list[str] | None = None


class Blog(BaseModel):
    """A stored post as returned by the blog API."""

    model_config = ConfigDict(populate_by_name=True)

    slug: str = ""
    title: str
    excerpt: str = ""
    content: str = ""
    time_to_read: int = Field(default=0, alias="timeToRead")
    media: list[str] | None = None
    tags: list[str] | None = None
    is_active: bool = Field(default=True, alias="isActive")
    created_at: str = Field(default="", alias="createdAt")
    updated_at: str = Field(default="", alias="updatedAt")

    def to_summary(self) -> BlogSummary:
        return BlogSummary(title=self.title, excerpt=self.excerpt, tags=self.tags)


# ---------------------------------------------------------------------------
# Pipeline results
# ---------------------------------------------------------------------------


class PipelineProgress(BaseModel):
    """Published on entry to each stage with usage accumulated so far."""

    model_config = ConfigDict(frozen=True)

    step: PipelineStep
    usage: TokenUsage


class PipelineResult(BaseModel):
    """Terminal artifact of a successful run."""

    payload: BlogPayload
    usage: TokenUsage


class TopicSuggestions(BaseModel):
    """Candidate topics from the list brainstorm and what they cost."""

    topics: list[str]
    usage: TokenUsage
