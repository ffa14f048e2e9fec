"""Multi-provider LLM model factory.

Dispatches to the correct Strands SDK model class based on the ``LLM_PROVIDER``
environment variable (default: ``openai``). Providers other than the default
are optional extras that import lazily so the core install stays lean.

Resolution order for model IDs:
  1. Explicit ``model_id`` argument
  2. ``{PROVIDER}_MODEL_ID`` env var  (e.g. ``ANTHROPIC_MODEL_ID``)
  3. ``PROVIDER_DEFAULTS``
"""

import logging
import os
from collections.abc import Callable
from enum import Enum
from typing import Any

from webprod.config import DEFAULT_GENERATION_MAX_TOKENS, DEFAULT_GENERATION_TEMPERATURE

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Provider enum
# ---------------------------------------------------------------------------


class LLMProvider(Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    BEDROCK = "bedrock"
    OLLAMA = "ollama"


PROVIDER_DEFAULTS: dict[LLMProvider, str] = {
    LLMProvider.OPENAI: "gpt-4o-mini",
    LLMProvider.ANTHROPIC: "claude-3-5-haiku-20241022",
    LLMProvider.BEDROCK: "anthropic.claude-3-5-sonnet-20241022-v2:0",
    LLMProvider.OLLAMA: "llama3.1:8b",
}


# ---------------------------------------------------------------------------
# Provider detection
# ---------------------------------------------------------------------------


def get_active_provider() -> LLMProvider:
    """Return the active LLM provider from the ``LLM_PROVIDER`` env var.

    Raises:
        ValueError: If the env var value is not a recognised provider.
    """
    raw = os.getenv("LLM_PROVIDER", "openai").strip().lower()
    try:
        return LLMProvider(raw)
    except ValueError:
        valid = ", ".join(p.value for p in LLMProvider)
        raise ValueError(f"Unknown LLM_PROVIDER '{raw}'. Valid options: {valid}") from None


def get_model_id(provider: LLMProvider | None = None) -> str:
    """Return the model ID for the provider (env override, then default)."""
    provider = provider or get_active_provider()
    env_key = f"{provider.value.upper()}_MODEL_ID"
    from_env = os.getenv(env_key)
    if from_env:
        return from_env

    default_id = PROVIDER_DEFAULTS[provider]
    logger.info("Using default model for %s: %s", provider.value, default_id)
    return default_id


# ---------------------------------------------------------------------------
# Provider factory registry
# ---------------------------------------------------------------------------

_PROVIDER_FACTORIES: dict[LLMProvider, Callable[..., Any]] = {}


def _register_provider(provider: LLMProvider):
    """Decorator to register a provider factory function."""

    def decorator(fn):
        _PROVIDER_FACTORIES[provider] = fn
        return fn

    return decorator


@_register_provider(LLMProvider.OPENAI)
def _create_openai(model_id, max_tokens, temperature):
    try:
        from strands.models.openai import OpenAIModel
    except ImportError as e:
        raise ImportError(
            "OpenAI provider requires the 'openai' package. "
            "Install it with: pip install 'strands-agents[openai]'"
        ) from e

    client_args = {}
    api_key = os.getenv("OPENAI_API_KEY")
    if api_key:
        client_args["api_key"] = api_key

    params: dict[str, Any] = {"max_tokens": max_tokens}
    if temperature is not None:
        params["temperature"] = temperature

    return OpenAIModel(client_args=client_args or None, model_id=model_id, params=params)


@_register_provider(LLMProvider.ANTHROPIC)
def _create_anthropic(model_id, max_tokens, temperature):
    try:
        from strands.models.anthropic import AnthropicModel
    except ImportError as e:
        raise ImportError(
            "Anthropic provider requires the 'anthropic' package. "
            "Install it with: pip install 'webprod-issue-agent[anthropic]'"
        ) from e

    client_args = {}
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if api_key:
        client_args["api_key"] = api_key

    params = {}
    if temperature is not None:
        params["temperature"] = temperature

    return AnthropicModel(
        client_args=client_args or None,
        model_id=model_id,
        max_tokens=max_tokens,
        params=params or None,
    )


@_register_provider(LLMProvider.BEDROCK)
def _create_bedrock(model_id, max_tokens, temperature):
    from botocore.config import Config
    from strands.models.bedrock import BedrockModel

    region_name = os.getenv("AWS_REGION")
    if not region_name:
        raise ValueError(
            "AWS_REGION environment variable is not set. "
            "Please configure it in your .env file."
        )

    # Transport-level retry for network/HTTP errors only
    boto_config = Config(
        read_timeout=float(os.getenv("BEDROCK_READ_TIMEOUT", "120.0")),
        connect_timeout=float(os.getenv("BEDROCK_CONNECT_TIMEOUT", "30.0")),
        retries={"max_attempts": 3, "mode": "standard"},
    )

    return BedrockModel(
        model_id=model_id,
        region_name=region_name,
        boto_client_config=boto_config,
        streaming=False,
        temperature=temperature,
        max_tokens=max_tokens,
    )


@_register_provider(LLMProvider.OLLAMA)
def _create_ollama(model_id, max_tokens, temperature):
    try:
        from strands.models.ollama import OllamaModel
    except ImportError as e:
        raise ImportError(
            "Ollama provider requires the 'ollama' package. "
            "Install it with: pip install 'webprod-issue-agent[ollama]'"
        ) from e

    ollama_kwargs = {
        "host": os.getenv("OLLAMA_HOST", "http://localhost:11434"),
        "model_id": model_id,
        "max_tokens": max_tokens,
    }
    if temperature is not None:
        ollama_kwargs["temperature"] = temperature

    return OllamaModel(**ollama_kwargs)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def create_model(
    model_id: str | None = None,
    max_tokens: int = DEFAULT_GENERATION_MAX_TOKENS,
    temperature: float | None = DEFAULT_GENERATION_TEMPERATURE,
):
    """Create a model instance for the active provider.

    Args:
        model_id: Model identifier. Resolved from env/provider defaults
            when ``None``.
        max_tokens: Maximum response tokens.
        temperature: Sampling temperature (default ``0.2``).

    Returns:
        A Strands ``Model`` instance.
    """
    provider = get_active_provider()

    if model_id is None:
        model_id = get_model_id(provider)

    factory = _PROVIDER_FACTORIES[provider]

    logger.info(
        "Creating %s model: model_id=%s, max_tokens=%s",
        provider.value,
        model_id,
        max_tokens,
    )

    return factory(model_id=model_id, max_tokens=max_tokens, temperature=temperature)
