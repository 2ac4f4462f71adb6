"""Blog generation stages.

Turns a topic (or a list of existing posts, when no topic is given) into a
validated blog payload through brainstorm, write, review and format calls.
"""

from blogwriter.blog.models import (
    Blog,
    BlogPayload,
    BlogSummary,
    PipelineProgress,
    PipelineResult,
    PipelineStep,
    StageSettings,
    StepResult,
    TokenUsage,
    TopicSuggestions,
)
from blogwriter.blog.prompts import NO_CORRECTIONS_SENTINEL, get_system_prompt
from blogwriter.blog.services import (
    brainstorm_topic,
    brainstorm_topics,
    format_blog_post,
    parse_blog_payload,
    parse_numbered_list,
    render_summaries,
    review_blog_post,
    write_blog_post,
)

__all__ = [
    "Blog",
    "BlogPayload",
    "BlogSummary",
    "NO_CORRECTIONS_SENTINEL",
    "PipelineProgress",
    "PipelineResult",
    "PipelineStep",
    "StageSettings",
    "StepResult",
    "TokenUsage",
    "TopicSuggestions",
    "brainstorm_topic",
    "brainstorm_topics",
    "format_blog_post",
    "get_system_prompt",
    "parse_blog_payload",
    "parse_numbered_list",
    "render_summaries",
    "review_blog_post",
    "write_blog_post",
]
