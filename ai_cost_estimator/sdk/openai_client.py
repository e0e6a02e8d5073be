"""
Metered client for OpenAI-compatible generative APIs.

Sends a prompt, reads the reported token usage and prices it with the
cost engine. By default it targets Gemini's OpenAI-compatible endpoint.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from openai import OpenAI, OpenAIError

from ..core.catalog import MODEL_CATALOG, ModelCatalog
from ..core.pricing import compute_cost
from ..core.token_counter import UsageProfile

logger = logging.getLogger(__name__)

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
API_KEY_ENV_VAR = "GEMINI_API_KEY"


@dataclass(frozen=True)
class LiveEstimate:
    """Response text with the priced usage of the call that produced it."""
    model_id: str
    text: str
    prompt_units: int
    completion_units: int
    cost: float


class MeteredClient:
    """Generative API client that prices every call.

    Failures are loud: API errors propagate unchanged after being logged.
    """

    def __init__(
        self,
        model_id: str,
        catalog: ModelCatalog = MODEL_CATALOG,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None
    ):
        """Initialize metered client.

        Args:
            model_id: Catalog model identifier (required)
            catalog: Catalog used to look up prices
            api_key: API key (defaults to the GEMINI_API_KEY environment variable)
            base_url: OpenAI-compatible endpoint (defaults to Gemini's)

        Raises:
            ValueError: If model_id is empty or not in the catalog
        """
        if not model_id or not model_id.strip():
            raise ValueError("model_id is required and cannot be empty")

        self.catalog = catalog
        self.model = catalog.get_model(model_id)
        self.base_url = base_url or GEMINI_OPENAI_BASE_URL
        self.client = OpenAI(
            api_key=api_key or os.environ.get(API_KEY_ENV_VAR),
            base_url=self.base_url,
        )

    def generate(self, prompt: str, model_id: Optional[str] = None) -> LiveEstimate:
        """Send a prompt and price the reported usage.

        Args:
            prompt: User prompt (required)
            model_id: Override the client's model for this call

        Returns:
            LiveEstimate for the call

        Raises:
            ValueError: If prompt is empty or the response has no usage
            OpenAIError: Propagated without modification
        """
        if not prompt or not prompt.strip():
            raise ValueError("prompt is required and cannot be empty")

        model = self.catalog.get_model(model_id) if model_id else self.model
        logger.debug("Sending %d-character prompt to %s", len(prompt), model.id)

        try:
            response = self.client.chat.completions.create(
                model=model.id,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            logger.error("Generative API call to %s failed: %s", model.id, e)
            raise

        usage = response.usage
        if not usage:
            raise ValueError("API response missing usage information")

        prompt_units = usage.prompt_tokens or 0
        completion_units = usage.completion_tokens or 0
        breakdown = compute_cost(
            model.pricing,
            UsageProfile(input_units=prompt_units, output_units=completion_units),
        )

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        return LiveEstimate(
            model_id=model.id,
            text=text,
            prompt_units=prompt_units,
            completion_units=completion_units,
            cost=breakdown.total_cost,
        )

    def compare(self, prompt: str, other_model_id: str) -> Tuple[LiveEstimate, LiveEstimate]:
        """Send the same prompt to this client's model and another one."""
        return self.generate(prompt), self.generate(prompt, model_id=other_model_id)
