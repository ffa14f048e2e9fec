"""LLM model construction for the generation agent."""

from .model_provider import (
    PROVIDER_DEFAULTS,
    LLMProvider,
    create_model,
    get_active_provider,
    get_model_id,
)

__all__ = [
    "LLMProvider",
    "PROVIDER_DEFAULTS",
    "create_model",
    "get_active_provider",
    "get_model_id",
]
