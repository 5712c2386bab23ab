"""Tests for giftwise.core.llm — provider selection."""

from unittest.mock import AsyncMock, patch

import pytest

import giftwise.core.llm as llm


@pytest.fixture(autouse=True)
def reset_provider():
    llm._selected = None
    yield
    llm._selected = None


class TestSelectProvider:
    @patch("giftwise.config.settings")
    def test_unknown_provider_raises(self, mock_settings):
        mock_settings.LLM_PROVIDER = "nonexistent"
        with pytest.raises(ValueError, match="Unknown LLM_PROVIDER"):
            llm._select_provider()

    @patch("giftwise.config.settings")
    def test_default_model_per_provider(self, mock_settings):
        mock_settings.LLM_PROVIDER = "OpenAI"
        mock_settings.LLM_MODEL = ""
        mock_settings.LLM_API_KEY = "k"
        selected = llm._select_provider()
        assert selected.model == "gpt-4.1-nano"
        assert selected.api_key == "k"

    @patch("giftwise.config.settings")
    def test_model_override(self, mock_settings):
        mock_settings.LLM_PROVIDER = "anthropic"
        mock_settings.LLM_MODEL = "custom-model"
        mock_settings.LLM_API_KEY = "k"
        assert llm._select_provider().model == "custom-model"


class TestComplete:
    @pytest.mark.asyncio
    async def test_routes_prompt_to_provider(self):
        fake = AsyncMock(return_value="hello")
        llm._selected = llm._Selected(fn=fake, model="m", api_key="k")

        text = await llm.complete("sys", "user", max_tokens=64, temperature=0.2)

        assert text == "hello"
        api_key, model, prompt = fake.call_args[0]
        assert (api_key, model) == ("k", "m")
        assert prompt == llm.Prompt(system="sys", user_message="user", max_tokens=64, temperature=0.2)
