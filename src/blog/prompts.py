"""System prompts for the brainstorm, write, review and format stages."""

from __future__ import annotations

from blogwriter.blog.models import PipelineStep, StageSettings

NO_CORRECTIONS_SENTINEL = "NO CORRECTIONS NEEDED"
NO_EXISTING_POSTS = "No existing posts yet."

_WEB_SEARCH_GUIDANCE = (
    "You have access to a web search tool. Use it when the topic references"
    " a URL, a specific project, recent events, or anything you need to"
    " fact-check or gather details about. Do NOT search for general"
    " knowledge you already know well."
)

_BRAINSTORM_RULES = (
    "- Does NOT overlap with existing posts\n"
    "- Is relevant and timely in tech, sports, or lifestyle\n"
    "- Would be interesting to {audience}\n"
    "- Is specific enough to write a focused post about\n"
    "- Don't ever imagine tools that I haven't built yet.\n"
    "- You have web search capabilities, so you can suggest topics about"
    " recent events, new projects, or specific technologies.\n"
)

SYSTEM_PROMPTS: dict[PipelineStep, str] = {
    PipelineStep.BRAINSTORMING: (
        "You suggest blog post topics for a {blog_description}. Given a list"
        " of existing blog post summaries, suggest a single fresh topic that:\n"
        + _BRAINSTORM_RULES
        + "{github_hint}"
        "Output ONLY the topic as a single sentence (under 15 words), nothing else."
    ),
    PipelineStep.WRITING: (
        "You are a skilled blog writer for a {blog_description}. Write"
        " engaging, natural blog posts in markdown format. The posts should:\n"
        "- Sound human and conversational, not robotic or corporate\n"
        "- Be well-structured with clear headings (## for sections)\n"
        "- Include a compelling introduction and conclusion\n"
        "- Be between 800-1500 words\n"
        "- Avoid clichés, filler phrases, and typical AI patterns like"
        ' "In today\'s world", "Let\'s dive in", "In conclusion",'
        ' "It\'s not X, it\'s Y", etc.\n'
        "- Use specific examples and concrete details\n"
        + _WEB_SEARCH_GUIDANCE
        + "\nOutput ONLY the markdown content of the blog post, nothing else."
    ),
    PipelineStep.REVIEWING: (
        "You are a sharp editorial reviewer. Given a blog post, output a"
        " concise numbered list of corrections. Focus on:\n"
        "- AI-sounding phrases or patterns to rephrase\n"
        "- Factual inaccuracies to fix\n"
        "- Redundant sentences to remove\n"
        "- Awkward phrasing to improve\n"
        "- Missing transitions or flow issues\n"
        "Be brief and specific. Each item should be one line: the problem"
        " and the fix.\n"
        f'If the post is good, output "{NO_CORRECTIONS_SENTINEL}".\n'
        "Output ONLY the correction list, nothing else."
    ),
    PipelineStep.FORMATTING: (
        "You are a formatting assistant. Given a blog post and a list of"
        " corrections, apply the corrections and output a JSON object"
        " matching this exact schema:\n"
        "{{\n"
        '  "title": "string (catchy blog title)",\n'
        '  "excerpt": "string (2-3 sentence summary)",\n'
        '  "content": "string (full corrected markdown content)",\n'
        '  "tags": ["string (single-word relevant, capitalized, keywords, 1-4 tags)"],\n'
        '  "media": [],\n'
        '  "isActive": true\n'
        "}}\n"
        "Output ONLY valid JSON, no markdown fences, no explanation."
    ),
}

TOPIC_LIST_PROMPT = (
    "You suggest blog post topics for a {blog_description}. Given a list of"
    " existing blog post summaries, suggest exactly {count} fresh topics."
    " Each topic:\n"
    + _BRAINSTORM_RULES
    + "- Is distinct from the other suggestions\n"
    "Spread the suggestions across tech, sports, and lifestyle where it"
    " makes sense.\n"
    "{github_hint}"
    "Output ONLY a numbered list (1. ... {count}. ...), one topic per line,"
    " each a single sentence under 15 words. No preamble, nothing else."
)


def _github_hint(settings: StageSettings) -> str:
    if not settings.github_url:
        return ""
    return (
        f"- You can access {settings.github_url} to check for new"
        " repositories or projects to write about.\n"
    )


def get_system_prompt(step: PipelineStep, settings: StageSettings) -> str:
    """Get the system prompt for a pipeline stage.

    Args:
        step: Stage being run.
        settings: Author profile and limits to interpolate.

    Returns:
        Interpolated prompt string.
    """
    return SYSTEM_PROMPTS[step].format(
        blog_description=settings.blog_description,
        audience=settings.audience,
        github_hint=_github_hint(settings),
    )


def get_topic_list_prompt(settings: StageSettings, count: int) -> str:
    """System prompt asking for a numbered list of ``count`` topics."""
    return TOPIC_LIST_PROMPT.format(
        blog_description=settings.blog_description,
        audience=settings.audience,
        github_hint=_github_hint(settings),
        count=count,
    )
