"""
Pricing calculations for generative model usage.

Turns a model price sheet and a usage profile into a line-item cost breakdown.
"""

from dataclasses import dataclass, fields
from typing import Optional

from .token_counter import UsageProfile

UNITS_PER_MILLION = 1_000_000


@dataclass(frozen=True)
class PriceSheet:
    """Per-unit prices for a single model (USD)."""
    input_price_per_million: float
    output_price_per_million: float
    cached_input_price_per_million: Optional[float] = None
    cache_storage_price_per_million_per_hour: Optional[float] = None
    price_per_image: Optional[float] = None
    price_per_second_of_video: Optional[float] = None
    price_per_second_of_audio: Optional[float] = None

    def __post_init__(self):
        """Validate that every present price is non-negative."""
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None and value < 0:
                raise ValueError(f"{f.name} cannot be negative")


@dataclass(frozen=True)
class CostBreakdown:
    """Line-item costs for a usage profile.

    All per-request items are already multiplied by the request count;
    storage is charged once.
    """
    input_cost: float
    output_cost: float
    image_generation_cost: float
    video_generation_cost: float
    storage_cost: float
    total_cost: float


def compute_cost(price_sheet: PriceSheet, usage: UsageProfile) -> CostBreakdown:
    """Compute the cost breakdown for a usage profile.

    Caching is all-or-nothing: when enabled and the model has a cached
    input price, every input unit is billed at that price and the cached
    context is charged for storage. Video generation is not billed yet,
    even for models that list a per-second price.

    Inputs are not validated here.

    Args:
        price_sheet: Prices for the model being estimated
        usage: Usage figures, already clamped by the caller

    Returns:
        CostBreakdown whose total is the sum of the scaled line items
        plus storage
    """
    effective_input_units = usage.effective_input_units

    input_price = price_sheet.input_price_per_million
    if usage.caching_enabled and price_sheet.cached_input_price_per_million is not None:
        input_price = price_sheet.cached_input_price_per_million

    # Per-request components
    input_cost = (effective_input_units / UNITS_PER_MILLION) * input_price
    output_cost = (usage.output_units / UNITS_PER_MILLION) * price_sheet.output_price_per_million
    image_cost = usage.generated_image_count * (price_sheet.price_per_image or 0)
    video_cost = 0.0

    storage_cost = 0.0
    storage_price = price_sheet.cache_storage_price_per_million_per_hour
    if usage.caching_enabled and storage_price is not None:
        storage_cost = (
            (effective_input_units / UNITS_PER_MILLION) * storage_price * usage.cache_storage_hours
        )

    scaled_input = input_cost * usage.request_count
    scaled_output = output_cost * usage.request_count
    scaled_image = image_cost * usage.request_count
    scaled_video = video_cost * usage.request_count

    return CostBreakdown(
        input_cost=scaled_input,
        output_cost=scaled_output,
        image_generation_cost=scaled_image,
        video_generation_cost=scaled_video,
        storage_cost=storage_cost,
        total_cost=(scaled_input + scaled_output + scaled_image + scaled_video) + storage_cost,
    )
