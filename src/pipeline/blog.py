"""Blog pipeline: topic → brainstorm → draft → review → formatted payload.

The pipeline owns all cross-stage state: the resolved topic and the running
token usage. Stages run strictly in order, one backend request at a time.
Subscribers receive a ``PipelineProgress`` on entry to each stage carrying
the usage accumulated before that stage. Any failure aborts the run; there
are no retries here beyond what the Anthropic client does itself.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

import anthropic

from blogwriter.blog import (
    BlogSummary,
    PipelineProgress,
    PipelineResult,
    PipelineStep,
    StageSettings,
    TokenUsage,
    TopicSuggestions,
    brainstorm_topic,
    brainstorm_topics,
    format_blog_post,
    review_blog_post,
    write_blog_post,
)
from blogwriter.config import BlogWriterConfig, load_config
from blogwriter.errors import classify_backend_error
from blogwriter.llm import create_client

logger = logging.getLogger(__name__)


class ProgressListener(Protocol):
    """Receives a progress value on each stage transition."""

    def __call__(self, progress: PipelineProgress) -> None: ...


class SummarySource(Protocol):
    """Anything that can list existing posts (the blog API client does)."""

    def fetch_blog_summaries(self) -> list[BlogSummary]: ...


class BlogPipeline:
    """Sequences the generation stages and accumulates usage."""

    def __init__(
        self,
        config: BlogWriterConfig,
        *,
        client: Any | None = None,
        summary_source: SummarySource | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._summary_source = summary_source
        self._listeners: list[ProgressListener] = []
        self._model = config.resolved_model_id
        self._settings: StageSettings = config.to_stage_settings()

    @property
    def model(self) -> str:
        return self._model

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ProgressListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def run(self, topic: str = "", *, initial_usage: TokenUsage | None = None) -> PipelineResult:
        """Generate a blog payload for ``topic``, brainstorming one if blank.

        Args:
            topic: Topic to write about. Empty or whitespace triggers
                the brainstorming stage.
            initial_usage: Usage already spent by the caller (for example
                on a topic-list brainstorm) that progress should include.

        Returns:
            The validated payload and the total usage of the run.

        Raises:
            BlogWriterError: Classified failure of whichever stage failed.
        """
        usage = initial_usage or TokenUsage.zero()
        try:
            client = self._get_client()
            resolved_topic = topic.strip()

            if not resolved_topic:
                self._publish(PipelineStep.BRAINSTORMING, usage)
                summaries = self._get_summary_source().fetch_blog_summaries()
                brainstorm = brainstorm_topic(
                    client, self._model, summaries, settings=self._settings
                )
                usage = usage.add(self._model, brainstorm.input_tokens, brainstorm.output_tokens)
                resolved_topic = brainstorm.data
                logger.info("Brainstormed topic: %s", resolved_topic)

            self._publish(PipelineStep.WRITING, usage)
            draft = write_blog_post(client, self._model, resolved_topic, settings=self._settings)
            usage = usage.add(self._model, draft.input_tokens, draft.output_tokens)

            self._publish(PipelineStep.REVIEWING, usage)
            review = review_blog_post(client, self._model, draft.data, settings=self._settings)
            usage = usage.add(self._model, review.input_tokens, review.output_tokens)

            self._publish(PipelineStep.FORMATTING, usage)
            formatted = format_blog_post(
                client, self._model, draft.data, review.data, settings=self._settings
            )
            usage = usage.add(self._model, formatted.input_tokens, formatted.output_tokens)
        except anthropic.APIError as exc:
            raise classify_backend_error(exc) from exc

        logger.info(
            "Generated '%s' (%d in / %d out tokens, $%.4f)",
            formatted.data.title,
            usage.input_tokens,
            usage.output_tokens,
            usage.cost,
        )
        return PipelineResult(payload=formatted.data, usage=usage)

    def suggest_topics(self, count: int | None = None) -> TopicSuggestions:
        """Brainstorm a list of candidate topics for the caller to pick from."""
        try:
            client = self._get_client()
            summaries = self._get_summary_source().fetch_blog_summaries()
            result = brainstorm_topics(
                client, self._model, summaries, count=count, settings=self._settings
            )
        except anthropic.APIError as exc:
            raise classify_backend_error(exc) from exc

        usage = TokenUsage.from_tokens(self._model, result.input_tokens, result.output_tokens)
        return TopicSuggestions(topics=result.data, usage=usage)

    def _publish(self, step: PipelineStep, usage: TokenUsage) -> None:
        logger.info(
            "Pipeline step: %s (%d in / %d out tokens so far)",
            step,
            usage.input_tokens,
            usage.output_tokens,
        )
        progress = PipelineProgress(step=step, usage=usage)
        for listener in list(self._listeners):
            listener(progress)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = create_client(self._config)
        return self._client

    def _get_summary_source(self) -> SummarySource:
        if self._summary_source is None:
            from blogwriter.integrations.portfolio import PortfolioAPIClient

            self._summary_source = PortfolioAPIClient(
                self._config.to_portfolio_config()  # type: ignore[arg-type]
            )
        return self._summary_source


def generate_blog(
    topic: str,
    on_progress: Callable[[PipelineProgress], None] | None = None,
    *,
    config: BlogWriterConfig | None = None,
    client: Any | None = None,
    summary_source: SummarySource | None = None,
) -> PipelineResult:
    """Run the full pipeline once.

    Config is resolved once via ``load_config()`` when not supplied.
    """
    pipeline = BlogPipeline(
        config or load_config(),
        client=client,
        summary_source=summary_source,
    )
    if on_progress is not None:
        pipeline.subscribe(on_progress)
    return pipeline.run(topic)
