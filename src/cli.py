"""CLI interface for blogwriter."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from blogwriter.blog import BlogPayload, PipelineProgress, PipelineStep, TokenUsage
from blogwriter.config import BlogWriterConfig, load_config, merge_cli_overrides
from blogwriter.errors import BlogWriterError
from blogwriter.integrations.portfolio import PortfolioAPIClient, PortfolioAPIError
from blogwriter.pipeline import BlogPipeline
from blogwriter.pricing import MODELS, format_cost, format_tokens, get_model_def

app = typer.Typer(
    name="blogwriter",
    help="Brainstorm, draft, review and publish portfolio blog posts with Claude.",
)

console = Console()

STEP_LABELS: dict[PipelineStep, str] = {
    PipelineStep.BRAINSTORMING: "Brainstorming topic",
    PipelineStep.WRITING: "Writing blog post",
    PipelineStep.REVIEWING: "Reviewing & correcting",
    PipelineStep.FORMATTING: "Formatting final version",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from blogwriter import __version__

        console.print(f"blogwriter {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to a .blogwriter.toml file."),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Model id override."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Blogwriter - generate blog posts for your portfolio."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = merge_cli_overrides(load_config(config_path), model=model)


def _usage_line(config: BlogWriterConfig, usage: TokenUsage) -> str:
    model_name = get_model_def(config.resolved_model_id).name
    return (
        f"Model: {model_name} | Tokens: {format_tokens(usage.input_tokens)} in / "
        f"{format_tokens(usage.output_tokens)} out | Cost: {format_cost(usage.cost)}"
    )


def _render_preview(payload: BlogPayload) -> None:
    tags = ", ".join(payload.tags) if payload.tags else "none"
    console.print(Panel(payload.excerpt, title=payload.title, subtitle=f"Tags: {tags}"))
    console.print(Markdown(payload.content))


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {message}")
    return typer.Exit(1)


@app.command()
def write(
    ctx: typer.Context,
    topic: Annotated[
        str,
        typer.Argument(help="Topic to write about. Leave empty to brainstorm one."),
    ] = "",
    pick: Annotated[
        bool,
        typer.Option("--pick", help="Brainstorm a list of topics and choose one."),
    ] = False,
    publish: Annotated[
        bool | None,
        typer.Option("--publish/--no-publish", help="Publish without asking (or never)."),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the payload as JSON instead of a preview."),
    ] = False,
) -> None:
    """Generate a blog post and optionally publish it."""
    config: BlogWriterConfig = ctx.obj
    pipeline = BlogPipeline(config)
    initial_usage: TokenUsage | None = None

    try:
        if pick and not topic.strip():
            with console.status("Brainstorming topics..."):
                suggestions = pipeline.suggest_topics()
            for i, candidate in enumerate(suggestions.topics, 1):
                console.print(f"  {i}. {escape(candidate)}")
            choice = typer.prompt(
                "Pick a topic",
                type=typer.IntRange(1, len(suggestions.topics)),
            )
            topic = suggestions.topics[choice - 1]
            initial_usage = suggestions.usage

        with console.status("Starting...") as status:

            def on_progress(progress: PipelineProgress) -> None:
                status.update(
                    f"{STEP_LABELS[progress.step]}  [dim]{_usage_line(config, progress.usage)}[/dim]"
                )

            pipeline.subscribe(on_progress)
            result = pipeline.run(topic, initial_usage=initial_usage)
    except (BlogWriterError, PortfolioAPIError) as exc:
        raise _fail(str(exc)) from exc

    if as_json:
        console.print_json(json.dumps(result.payload.to_api_dict()))
    else:
        _render_preview(result.payload)
    console.print(f"[dim]{_usage_line(config, result.usage)}[/dim]")

    if publish is None:
        publish = typer.confirm("Publish this post?", default=False)
    if not publish:
        console.print("[yellow]Not published.[/yellow]")
        return

    client = PortfolioAPIClient(config.to_portfolio_config())  # type: ignore[arg-type]
    try:
        with console.status("Uploading..."):
            blog = client.create_blog(result.payload)
    except PortfolioAPIError as exc:
        raise _fail(str(exc)) from exc
    console.print(f"[green]Published:[/green] {blog.title} ({blog.slug})")


@app.command()
def topics(
    ctx: typer.Context,
    count: Annotated[
        int | None,
        typer.Option("--count", "-n", min=1, help="Number of topics to suggest."),
    ] = None,
) -> None:
    """Suggest fresh topics that do not overlap existing posts."""
    config: BlogWriterConfig = ctx.obj
    try:
        with console.status("Brainstorming topics..."):
            suggestions = BlogPipeline(config).suggest_topics(count)
    except (BlogWriterError, PortfolioAPIError) as exc:
        raise _fail(str(exc)) from exc

    for i, candidate in enumerate(suggestions.topics, 1):
        console.print(f"{i}. {escape(candidate)}")
    console.print(f"[dim]{_usage_line(config, suggestions.usage)}[/dim]")


@app.command()
def models(ctx: typer.Context) -> None:
    """List available models and their pricing."""
    config: BlogWriterConfig = ctx.obj
    table = Table(title="Models")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Input $/MTok", justify="right")
    table.add_column("Output $/MTok", justify="right")
    for model in MODELS:
        marker = " *" if model.id == config.resolved_model_id else ""
        table.add_row(
            model.id + marker,
            model.name,
            f"{model.input_price_per_mtok:g}",
            f"{model.output_price_per_mtok:g}",
        )
    console.print(table)


@app.command("check-api")
def check_api(ctx: typer.Context) -> None:
    """Verify the blog API key by listing existing posts."""
    config: BlogWriterConfig = ctx.obj
    client = PortfolioAPIClient(config.to_portfolio_config())  # type: ignore[arg-type]
    try:
        summaries = client.fetch_blog_summaries()
    except PortfolioAPIError as exc:
        raise _fail(str(exc)) from exc

    plural = "" if len(summaries) == 1 else "s"
    console.print(f"[green]Connected! Found {len(summaries)} blog post{plural}.[/green]")
    for i, summary in enumerate(summaries, 1):
        console.print(f"[bold]{i}. {escape(summary.title)}[/bold]")
        console.print(f"   [dim]{escape(summary.excerpt)}[/dim]")
        if summary.tags:
            console.print(f"   [blue]{escape('[' + ', '.join(summary.tags) + ']')}[/blue]")


if __name__ == "__main__":
    app()
