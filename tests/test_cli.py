"""Tests for the blogwriter CLI (pipeline and blog API mocked)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console
from typer.testing import CliRunner

from blogwriter import __version__
from blogwriter.blog.models import (
    Blog,
    BlogPayload,
    BlogSummary,
    PipelineResult,
    TokenUsage,
    TopicSuggestions,
)
from blogwriter.cli import app
from blogwriter.errors import BackendError, ErrorKind
from blogwriter.integrations.portfolio import PortfolioAPIError

MODEL = "claude-haiku-4-5-20251001"

_ENV_VARS = ("ANTHROPIC_API_KEY", "BLOGWRITER_MODEL", "BLOGWRITER_API_URL", "BLOGWRITER_API_KEY")


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Avoid table/panel wrapping at the default 80 columns."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    with patch("blogwriter.cli.console", Console(width=200)):
        yield


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / ".blogwriter.toml"
    path.write_text(
        "[anthropic]\n"
        'api_key = "sk-test"\n'
        f'model = "{MODEL}"\n'
        "\n[portfolio]\n"
        'url = "https://portfolio.example.com"\n'
        'api_key = "blog-key"\n'
    )
    return path


@pytest.fixture
def result(valid_payload) -> PipelineResult:
    return PipelineResult(
        payload=BlogPayload.model_validate(valid_payload),
        usage=TokenUsage.from_tokens(MODEL, 3600, 3200),
    )


class TestCLIBasics:
    def test_main_help(self, runner: CliRunner) -> None:
        outcome = runner.invoke(app, ["--help"])
        assert outcome.exit_code == 0
        assert "write" in outcome.output
        assert "check-api" in outcome.output

    def test_version(self, runner: CliRunner) -> None:
        outcome = runner.invoke(app, ["--version"])
        assert outcome.exit_code == 0
        assert f"blogwriter {__version__}" in outcome.output

    def test_models_marks_configured_model(self, runner: CliRunner, config_file: Path) -> None:
        outcome = runner.invoke(app, ["--config", str(config_file), "models"])
        assert outcome.exit_code == 0
        assert f"{MODEL} *" in outcome.output
        assert "claude-opus-4-6" in outcome.output
        assert "claude-opus-4-6 *" not in outcome.output

    def test_models_model_flag_overrides(self, runner: CliRunner, config_file: Path) -> None:
        outcome = runner.invoke(
            app, ["--config", str(config_file), "--model", "claude-opus-4-6", "models"]
        )
        assert "claude-opus-4-6 *" in outcome.output


class TestWriteCommand:
    @patch("blogwriter.cli.BlogPipeline")
    def test_no_publish_renders_preview(
        self, mock_pipeline_cls: MagicMock, runner: CliRunner, config_file: Path, result
    ) -> None:
        mock_pipeline_cls.return_value.run.return_value = result

        outcome = runner.invoke(
            app, ["--config", str(config_file), "write", "Rust for web devs", "--no-publish"]
        )

        assert outcome.exit_code == 0, outcome.output
        assert "Shipping a Terminal Blog Writer" in outcome.output
        assert "Because writing is hard." in outcome.output
        assert "Tags: Typescript, Ai" in outcome.output
        assert "Model: Claude Haiku 4.5 | Tokens: 3.6k in / 3.2k out" in outcome.output
        assert "Not published." in outcome.output

        config = mock_pipeline_cls.call_args[0][0]
        assert config.resolved_model_id == MODEL
        mock_pipeline_cls.return_value.run.assert_called_once_with(
            "Rust for web devs", initial_usage=None
        )

    @patch("blogwriter.cli.BlogPipeline")
    def test_json_output(
        self, mock_pipeline_cls: MagicMock, runner: CliRunner, config_file: Path, result
    ) -> None:
        mock_pipeline_cls.return_value.run.return_value = result

        outcome = runner.invoke(
            app, ["--config", str(config_file), "write", "Topic", "--json", "--no-publish"]
        )

        assert outcome.exit_code == 0, outcome.output
        assert '"isActive": true' in outcome.output
        assert '"title": "Shipping a Terminal Blog Writer"' in outcome.output

    @patch("blogwriter.cli.BlogPipeline")
    def test_declining_confirmation_does_not_publish(
        self, mock_pipeline_cls: MagicMock, runner: CliRunner, config_file: Path, result
    ) -> None:
        mock_pipeline_cls.return_value.run.return_value = result

        with patch("blogwriter.cli.PortfolioAPIClient") as mock_api_cls:
            outcome = runner.invoke(
                app, ["--config", str(config_file), "write", "Topic"], input="n\n"
            )

        assert outcome.exit_code == 0, outcome.output
        assert "Not published." in outcome.output
        mock_api_cls.assert_not_called()

    @patch("blogwriter.cli.PortfolioAPIClient")
    @patch("blogwriter.cli.BlogPipeline")
    def test_publish(
        self,
        mock_pipeline_cls: MagicMock,
        mock_api_cls: MagicMock,
        runner: CliRunner,
        config_file: Path,
        result,
    ) -> None:
        mock_pipeline_cls.return_value.run.return_value = result
        mock_api_cls.return_value.create_blog.return_value = Blog(
            slug="shipping-a-terminal-blog-writer", title="Shipping a Terminal Blog Writer"
        )

        outcome = runner.invoke(
            app, ["--config", str(config_file), "write", "Topic", "--publish"]
        )

        assert outcome.exit_code == 0, outcome.output
        assert "Published: Shipping a Terminal Blog Writer (shipping-a-terminal-blog-writer)" in (
            outcome.output
        )
        portfolio_config = mock_api_cls.call_args[0][0]
        assert portfolio_config.url == "https://portfolio.example.com"
        assert portfolio_config.api_key == "blog-key"
        mock_api_cls.return_value.create_blog.assert_called_once_with(result.payload)

    @patch("blogwriter.cli.PortfolioAPIClient")
    @patch("blogwriter.cli.BlogPipeline")
    def test_publish_failure_exits_nonzero(
        self,
        mock_pipeline_cls: MagicMock,
        mock_api_cls: MagicMock,
        runner: CliRunner,
        config_file: Path,
        result,
    ) -> None:
        mock_pipeline_cls.return_value.run.return_value = result
        mock_api_cls.return_value.create_blog.side_effect = PortfolioAPIError(
            500, "Failed to create blog: 500"
        )

        outcome = runner.invoke(
            app, ["--config", str(config_file), "write", "Topic", "--publish"]
        )

        assert outcome.exit_code == 1
        assert "Error: Failed to create blog: 500" in outcome.output

    @patch("blogwriter.cli.BlogPipeline")
    def test_pipeline_error_exits_nonzero(
        self, mock_pipeline_cls: MagicMock, runner: CliRunner, config_file: Path
    ) -> None:
        mock_pipeline_cls.return_value.run.side_effect = BackendError(
            ErrorKind.AUTHENTICATION,
            "Invalid Anthropic API key. Update your key in settings.",
            401,
        )

        outcome = runner.invoke(app, ["--config", str(config_file), "write", "Topic"])

        assert outcome.exit_code == 1
        assert "Error: Invalid Anthropic API key." in outcome.output

    @patch("blogwriter.cli.BlogPipeline")
    def test_pick_runs_chosen_topic_with_prior_usage(
        self, mock_pipeline_cls: MagicMock, runner: CliRunner, config_file: Path, result
    ) -> None:
        pipeline = mock_pipeline_cls.return_value
        usage = TokenUsage.from_tokens(MODEL, 80, 30)
        pipeline.suggest_topics.return_value = TopicSuggestions(
            topics=["First idea", "Second idea"], usage=usage
        )
        pipeline.run.return_value = result

        outcome = runner.invoke(
            app,
            ["--config", str(config_file), "write", "--pick", "--no-publish"],
            input="2\n",
        )

        assert outcome.exit_code == 0, outcome.output
        assert "1. First idea" in outcome.output
        pipeline.run.assert_called_once_with("Second idea", initial_usage=usage)


class TestTopicsCommand:
    @patch("blogwriter.cli.BlogPipeline")
    def test_lists_topics(
        self, mock_pipeline_cls: MagicMock, runner: CliRunner, config_file: Path
    ) -> None:
        mock_pipeline_cls.return_value.suggest_topics.return_value = TopicSuggestions(
            topics=["[Guide] Rust on the web", "Marathon taper week"],
            usage=TokenUsage.from_tokens(MODEL, 80, 30),
        )

        outcome = runner.invoke(app, ["--config", str(config_file), "topics", "-n", "2"])

        assert outcome.exit_code == 0, outcome.output
        assert "1. [Guide] Rust on the web" in outcome.output
        assert "2. Marathon taper week" in outcome.output
        mock_pipeline_cls.return_value.suggest_topics.assert_called_once_with(2)

    @patch("blogwriter.cli.BlogPipeline")
    def test_error_exits_nonzero(
        self, mock_pipeline_cls: MagicMock, runner: CliRunner, config_file: Path
    ) -> None:
        mock_pipeline_cls.return_value.suggest_topics.side_effect = PortfolioAPIError(
            401, "Failed to fetch blogs: 401"
        )
        outcome = runner.invoke(app, ["--config", str(config_file), "topics"])
        assert outcome.exit_code == 1
        assert "Failed to fetch blogs: 401" in outcome.output


class TestCheckApiCommand:
    @patch("blogwriter.cli.PortfolioAPIClient")
    def test_lists_summaries(
        self, mock_api_cls: MagicMock, runner: CliRunner, config_file: Path
    ) -> None:
        mock_api_cls.return_value.fetch_blog_summaries.return_value = [
            BlogSummary(title="[Draft] Rust", excerpt="Notes.", tags=["Rust", "Web"]),
        ]

        outcome = runner.invoke(app, ["--config", str(config_file), "check-api"])

        assert outcome.exit_code == 0, outcome.output
        assert "Connected! Found 1 blog post." in outcome.output
        assert "1. [Draft] Rust" in outcome.output
        assert "[Rust, Web]" in outcome.output

    @patch("blogwriter.cli.PortfolioAPIClient")
    def test_missing_key_exits_nonzero(
        self, mock_api_cls: MagicMock, runner: CliRunner, config_file: Path
    ) -> None:
        mock_api_cls.return_value.fetch_blog_summaries.side_effect = PortfolioAPIError(
            401, "No API key configured."
        )

        outcome = runner.invoke(app, ["--config", str(config_file), "check-api"])

        assert outcome.exit_code == 1
        assert "No API key configured." in outcome.output

    def test_html_response_exits_cleanly(self, runner: CliRunner, config_file: Path) -> None:
        html = MagicMock()
        html.read.return_value = b"<html>Not found</html>"
        html.__enter__ = lambda s: s
        html.__exit__ = MagicMock(return_value=False)

        with patch("urllib.request.urlopen", return_value=html):
            outcome = runner.invoke(app, ["--config", str(config_file), "check-api"])

        assert outcome.exit_code == 1
        assert not isinstance(outcome.exception, ValueError)
        assert "Error: Failed to fetch blogs: response was not JSON" in outcome.output
