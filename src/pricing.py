"""Model pricing table and token cost arithmetic.

Prices are USD per million tokens. Unknown model ids fall back to
``DEFAULT_MODEL`` so cost reporting never fails mid-run.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ModelDef(BaseModel):
    """A selectable generation model and its per-token pricing."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    input_price_per_mtok: float
    output_price_per_mtok: float


MODELS: list[ModelDef] = [
    ModelDef(
        id="claude-sonnet-4-5-20250929",
        name="Sonnet 4.5",
        input_price_per_mtok=3,
        output_price_per_mtok=15,
    ),
    ModelDef(
        id="claude-opus-4-6",
        name="Opus 4.6",
        input_price_per_mtok=5,
        output_price_per_mtok=25,
    ),
    ModelDef(
        id="claude-haiku-4-5-20251001",
        name="Haiku 4.5",
        input_price_per_mtok=1,
        output_price_per_mtok=5,
    ),
]

DEFAULT_MODEL = MODELS[0]

_TOKENS_PER_UNIT = 1_000_000


def get_model_def(model_id: str | None) -> ModelDef:
    """Look up a model by id, falling back to the default model."""
    for model in MODELS:
        if model.id == model_id:
            return model
    return DEFAULT_MODEL


def calculate_cost(model_id: str | None, input_tokens: int, output_tokens: int) -> float:
    """Dollar cost of a token count at the given model's prices."""
    model = get_model_def(model_id)
    return (
        input_tokens / _TOKENS_PER_UNIT * model.input_price_per_mtok
        + output_tokens / _TOKENS_PER_UNIT * model.output_price_per_mtok
    )


def format_tokens(n: int) -> str:
    """Render a token count compactly (``1.2k`` above a thousand)."""
    if n >= 1000:
        return f"{n / 1000:.1f}k"
    return str(n)


def format_cost(cost: float) -> str:
    return f"${cost:.4f}"
