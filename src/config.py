"""Unified configuration loaded from .blogwriter.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags. The result is a
frozen ``BlogWriterConfig`` resolved once at startup and passed explicitly
into the pipeline.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from blogwriter.blog.models import StageSettings
from blogwriter.pricing import DEFAULT_MODEL

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".blogwriter.toml"
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "blogwriter" / "config.toml"

_STAGE_DEFAULTS = StageSettings()


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True)


class AnthropicSectionConfig(_Section):
    """[anthropic] section."""

    api_key: str = ""
    model: str | None = None
    max_retries: int = 3


class PortfolioSectionConfig(_Section):
    """[portfolio] section: the blog-hosting admin API."""

    url: str = "https://denizlg24.com"
    api_key: str = ""


class AuthorConfig(_Section):
    """[author] section: identity used when rendering prompts."""

    blog_description: str = _STAGE_DEFAULTS.blog_description
    audience: str = _STAGE_DEFAULTS.audience
    github_url: str = _STAGE_DEFAULTS.github_url


class GenerationConfig(_Section):
    """[generation] section: per-stage request limits."""

    brainstorm_max_tokens: int = _STAGE_DEFAULTS.brainstorm_max_tokens
    topics_max_tokens: int = _STAGE_DEFAULTS.topics_max_tokens
    write_max_tokens: int = _STAGE_DEFAULTS.write_max_tokens
    review_max_tokens: int = _STAGE_DEFAULTS.review_max_tokens
    format_max_tokens: int = _STAGE_DEFAULTS.format_max_tokens
    web_search_max_uses: int = Field(default=_STAGE_DEFAULTS.web_search_max_uses, ge=0)
    topic_count: int = Field(default=_STAGE_DEFAULTS.topic_count, ge=1)


class BlogWriterConfig(_Section):
    """Top-level configuration for the blog writer."""

    anthropic: AnthropicSectionConfig = Field(default_factory=AnthropicSectionConfig)
    portfolio: PortfolioSectionConfig = Field(default_factory=PortfolioSectionConfig)
    author: AuthorConfig = Field(default_factory=AuthorConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    @property
    def resolved_model_id(self) -> str:
        """Configured model id, or the default model's id."""
        return self.anthropic.model or DEFAULT_MODEL.id

    def to_portfolio_config(self) -> object:
        """Convert to PortfolioConfig for the blog API client."""
        from blogwriter.integrations.portfolio import PortfolioConfig

        return PortfolioConfig(url=self.portfolio.url, api_key=self.portfolio.api_key)

    def to_stage_settings(self) -> StageSettings:
        """Convert to StageSettings for the stage functions."""
        return StageSettings(
            **self.author.model_dump(),
            **self.generation.model_dump(),
        )


def load_config(path: str | Path | None = None) -> BlogWriterConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .blogwriter.toml in CWD
    3. ~/.config/blogwriter/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged BlogWriterConfig.
    """
    data: dict[str, Any] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for candidate in (Path(".") / CONFIG_FILENAME, GLOBAL_CONFIG_PATH):
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break

    config = BlogWriterConfig.model_validate(data) if data else BlogWriterConfig()
    return _apply_env_vars(config)


def merge_cli_overrides(config: BlogWriterConfig, **cli_kwargs: object) -> BlogWriterConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "model": ("anthropic", "model"),
        "anthropic_key": ("anthropic", "api_key"),
        "api_url": ("portfolio", "url"),
        "api_key": ("portfolio", "api_key"),
        "topic_count": ("generation", "topic_count"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = value

    return BlogWriterConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: BlogWriterConfig) -> BlogWriterConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "ANTHROPIC_API_KEY": ("anthropic", "api_key"),
        "BLOGWRITER_MODEL": ("anthropic", "model"),
        "BLOGWRITER_API_URL": ("portfolio", "url"),
        "BLOGWRITER_API_KEY": ("portfolio", "api_key"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    return BlogWriterConfig.model_validate(data)
