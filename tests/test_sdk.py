"""
Unit tests for SDK layer.

Tests metered client behavior and pricing of reported usage.
"""

from unittest.mock import Mock, patch

import pytest
from openai import OpenAIError

from ai_cost_estimator.core.catalog import MODEL_CATALOG, ModelSpec
from ai_cost_estimator.core.pricing import PriceSheet
from ai_cost_estimator.sdk.openai_client import (
    GEMINI_OPENAI_BASE_URL,
    LiveEstimate,
    MeteredClient,
)


def _response(prompt_tokens=1_000_000, completion_tokens=1_000_000, text="Hello"):
    """Create a mock chat completion response."""
    response = Mock()
    response.usage = Mock(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    response.choices = [Mock(message=Mock(content=text))]
    return response


class TestMeteredClient:
    """Test MeteredClient wrapper."""

    @patch('ai_cost_estimator.sdk.openai_client.OpenAI')
    def test_init_success(self, mock_openai_class):
        """Test successful initialization."""
        mock_openai_class.return_value = Mock()

        client = MeteredClient("gemini-2.5-flash", api_key="test-key")

        assert client.model.id == "gemini-2.5-flash"
        assert client.base_url == GEMINI_OPENAI_BASE_URL
        assert client.client is not None
        mock_openai_class.assert_called_once_with(api_key="test-key", base_url=GEMINI_OPENAI_BASE_URL)

    @patch('ai_cost_estimator.sdk.openai_client.OpenAI')
    def test_init_reads_api_key_from_environment(self, mock_openai_class, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")

        MeteredClient("gemini-2.5-flash", base_url="http://localhost:8080/v1")

        mock_openai_class.assert_called_once_with(api_key="env-key", base_url="http://localhost:8080/v1")

    def test_init_missing_model(self):
        """Test initialization fails with missing model."""
        with pytest.raises(ValueError, match="model_id is required"):
            MeteredClient("")

    def test_init_unknown_model(self):
        with pytest.raises(ValueError, match="Unsupported model: not-a-model"):
            MeteredClient("not-a-model")

    @patch('ai_cost_estimator.sdk.openai_client.OpenAI')
    def test_generate_prices_usage(self, mock_openai_class):
        """Test reported usage is priced with the model's sheet."""
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _response()
        mock_openai_class.return_value = mock_client

        client = MeteredClient("gemini-2.5-flash", api_key="k")
        result = client.generate("What is 2 + 2?")

        assert isinstance(result, LiveEstimate)
        assert result.model_id == "gemini-2.5-flash"
        assert result.text == "Hello"
        assert result.prompt_units == 1_000_000
        assert result.completion_units == 1_000_000
        # 0.075 input + 0.30 output
        assert result.cost == pytest.approx(0.375)

        mock_client.chat.completions.create.assert_called_once_with(
            model="gemini-2.5-flash",
            messages=[{"role": "user", "content": "What is 2 + 2?"}],
        )

    @patch('ai_cost_estimator.sdk.openai_client.OpenAI')
    def test_generate_with_custom_catalog(self, mock_openai_class):
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _response(500_000, 0)
        mock_openai_class.return_value = mock_client
        custom = ModelSpec(
            id="local-llm",
            name="Local",
            pricing=PriceSheet(input_price_per_million=2.0, output_price_per_million=4.0),
            is_custom=True,
        )

        client = MeteredClient("local-llm", catalog=MODEL_CATALOG.with_models([custom]), api_key="k")

        assert client.generate("hi").cost == pytest.approx(1.0)

    @patch('ai_cost_estimator.sdk.openai_client.OpenAI')
    def test_generate_empty_prompt(self, mock_openai_class):
        client = MeteredClient("gemini-2.5-flash", api_key="k")
        with pytest.raises(ValueError, match="prompt is required"):
            client.generate("   ")

    @patch('ai_cost_estimator.sdk.openai_client.OpenAI')
    def test_generate_missing_usage(self, mock_openai_class):
        """Test a response without usage fails loudly."""
        response = _response()
        response.usage = None
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = response
        mock_openai_class.return_value = mock_client

        client = MeteredClient("gemini-2.5-flash", api_key="k")
        with pytest.raises(ValueError, match="missing usage"):
            client.generate("hi")

    @patch('ai_cost_estimator.sdk.openai_client.OpenAI')
    def test_generate_empty_content(self, mock_openai_class):
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _response(text=None)
        mock_openai_class.return_value = mock_client

        client = MeteredClient("gemini-2.5-flash", api_key="k")
        assert client.generate("hi").text == ""

    @patch('ai_cost_estimator.sdk.openai_client.OpenAI')
    def test_api_error_propagates(self, mock_openai_class):
        """Test API errors are propagated without modification."""
        mock_client = Mock()
        error = OpenAIError("rate limited")
        mock_client.chat.completions.create.side_effect = error
        mock_openai_class.return_value = mock_client

        client = MeteredClient("gemini-2.5-flash", api_key="k")
        with pytest.raises(OpenAIError) as excinfo:
            client.generate("hi")

        assert excinfo.value is error

    @patch('ai_cost_estimator.sdk.openai_client.OpenAI')
    def test_compare_two_models(self, mock_openai_class):
        """Test the same prompt is priced on both models."""
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _response()
        mock_openai_class.return_value = mock_client

        client = MeteredClient("gemini-2.5-flash", api_key="k")
        first, second = client.compare("hi", "gemini-2.5-pro")

        assert first.model_id == "gemini-2.5-flash"
        assert second.model_id == "gemini-2.5-pro"
        # 3.50 input + 10.50 output
        assert second.cost == pytest.approx(14.0)
        assert mock_client.chat.completions.create.call_count == 2
