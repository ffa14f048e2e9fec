"""Tests for the multi-provider LLM model factory."""

from unittest.mock import MagicMock

import pytest

from webprod.agents import LLMProvider, create_model, get_active_provider, get_model_id
from webprod.agents.model_provider import _PROVIDER_FACTORIES

# ---------------------------------------------------------------------------
# get_active_provider
# ---------------------------------------------------------------------------


class TestGetActiveProvider:
    def test_default_is_openai(self, monkeypatch):
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        assert get_active_provider() is LLMProvider.OPENAI

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("openai", LLMProvider.OPENAI),
            ("anthropic", LLMProvider.ANTHROPIC),
            ("bedrock", LLMProvider.BEDROCK),
            ("ollama", LLMProvider.OLLAMA),
        ],
    )
    def test_each_provider(self, monkeypatch, value, expected):
        monkeypatch.setenv("LLM_PROVIDER", value)
        assert get_active_provider() is expected

    def test_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", " Anthropic ")
        assert get_active_provider() is LLMProvider.ANTHROPIC

    def test_invalid_raises(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "banana")
        with pytest.raises(ValueError, match="Unknown LLM_PROVIDER 'banana'"):
            get_active_provider()


# ---------------------------------------------------------------------------
# get_model_id
# ---------------------------------------------------------------------------


class TestGetModelId:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "anthropic")
        monkeypatch.setenv("ANTHROPIC_MODEL_ID", "my-custom-model")
        assert get_model_id() == "my-custom-model"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("OPENAI_MODEL_ID", raising=False)
        assert get_model_id(LLMProvider.OPENAI) == "gpt-4o-mini"

    def test_ollama_default(self, monkeypatch):
        monkeypatch.delenv("OLLAMA_MODEL_ID", raising=False)
        assert get_model_id(LLMProvider.OLLAMA) == "llama3.1:8b"


# ---------------------------------------------------------------------------
# create_model
# ---------------------------------------------------------------------------


class TestCreateModel:
    def _patch_factory(self, monkeypatch, provider):
        """Replace the factory in the dispatch dict and return the mock."""
        mock = MagicMock(return_value=MagicMock())
        monkeypatch.setitem(_PROVIDER_FACTORIES, provider, mock)
        return mock

    def test_openai_dispatch_with_defaults(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        monkeypatch.delenv("OPENAI_MODEL_ID", raising=False)
        mock = self._patch_factory(monkeypatch, LLMProvider.OPENAI)
        create_model()
        mock.assert_called_once_with(model_id="gpt-4o-mini", max_tokens=2000, temperature=0.2)

    def test_explicit_model_id(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "anthropic")
        mock = self._patch_factory(monkeypatch, LLMProvider.ANTHROPIC)
        create_model(model_id="claude-sonnet-4-20250514", max_tokens=1000)
        assert mock.call_args[1]["model_id"] == "claude-sonnet-4-20250514"
        assert mock.call_args[1]["max_tokens"] == 1000

    def test_bedrock_requires_region(self, monkeypatch):
        pytest.importorskip("boto3")
        monkeypatch.setenv("LLM_PROVIDER", "bedrock")
        monkeypatch.delenv("AWS_REGION", raising=False)
        with pytest.raises(ValueError, match="AWS_REGION"):
            create_model(model_id="some-model")

    def test_every_provider_registered(self):
        assert set(_PROVIDER_FACTORIES) == set(LLMProvider)
