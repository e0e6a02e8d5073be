"""
Unit tests for pricing calculations.

Tests unit conversion, cached tier selection, volume scaling and the
breakdown-sums-to-total contract.
"""

import itertools

import pytest

from ai_cost_estimator.core.catalog import MODEL_CATALOG
from ai_cost_estimator.core.pricing import CostBreakdown, PriceSheet, compute_cost
from ai_cost_estimator.core.token_counter import (
    AUDIO_UNITS_PER_MINUTE,
    VIDEO_UNITS_PER_MINUTE,
    UsageProfile,
    estimate_units_from_word_count,
)

FLASH = PriceSheet(
    input_price_per_million=0.075,
    output_price_per_million=0.30,
    cached_input_price_per_million=0.01875,
    cache_storage_price_per_million_per_hour=1.00,
)

ONE_DOLLAR = PriceSheet(input_price_per_million=1.0, output_price_per_million=2.0)


def _line_item_sum(breakdown: CostBreakdown) -> float:
    return (
        breakdown.input_cost
        + breakdown.output_cost
        + breakdown.image_generation_cost
        + breakdown.video_generation_cost
    ) + breakdown.storage_cost


class TestUsageProfile:
    """Test UsageProfile conversions."""

    def test_media_conversion_constants(self):
        """Verify media conversion rates per minute."""
        assert AUDIO_UNITS_PER_MINUTE == 1920
        assert VIDEO_UNITS_PER_MINUTE == 15480

    def test_effective_input_units(self):
        """Verify audio and video minutes are added to text input."""
        usage = UsageProfile(input_units=100, audio_minutes=2, video_minutes=0.5)
        assert usage.effective_input_units == 100 + 2 * 1920 + 0.5 * 15480

    def test_defaults(self):
        """Verify a default profile is a single uncached request."""
        usage = UsageProfile()
        assert usage.request_count == 1
        assert usage.caching_enabled is False
        assert usage.effective_input_units == 0


class TestWordCountEstimate:
    """Test word to unit estimation."""

    def test_zero_words(self):
        assert estimate_units_from_word_count(0) == 0

    def test_hundred_words(self):
        assert estimate_units_from_word_count(100) == 135

    def test_rounds_up(self):
        """Verify partial units round up."""
        # 1 * 1.35 = 1.35 -> 2
        assert estimate_units_from_word_count(1) == 2
        assert estimate_units_from_word_count(3) == 5


class TestPriceSheet:
    """Test price sheet validation."""

    def test_optional_prices_default_to_absent(self):
        sheet = PriceSheet(input_price_per_million=1.0, output_price_per_million=2.0)
        assert sheet.cached_input_price_per_million is None
        assert sheet.price_per_image is None

    def test_negative_price_rejected(self):
        """Verify negative prices are rejected."""
        with pytest.raises(ValueError, match="output_price_per_million cannot be negative"):
            PriceSheet(input_price_per_million=1.0, output_price_per_million=-1.0)

    def test_negative_optional_price_rejected(self):
        with pytest.raises(ValueError, match="price_per_image cannot be negative"):
            PriceSheet(input_price_per_million=1.0, output_price_per_million=1.0, price_per_image=-0.1)


class TestCostCalculation:
    """Test cost calculation accuracy."""

    def test_text_only_cost(self):
        """Verify input and output are billed per million units."""
        usage = UsageProfile(input_units=1_000_000, output_units=1_000_000)
        breakdown = compute_cost(FLASH, usage)
        assert breakdown.input_cost == pytest.approx(0.075)
        assert breakdown.output_cost == pytest.approx(0.30)
        assert breakdown.storage_cost == 0
        assert breakdown.total_cost == pytest.approx(0.375)

    def test_zero_usage_costs_nothing(self):
        breakdown = compute_cost(FLASH, UsageProfile())
        assert breakdown.total_cost == 0

    def test_audio_minutes_billed_as_input(self):
        """Verify one minute of audio costs 1920 input units."""
        breakdown = compute_cost(ONE_DOLLAR, UsageProfile(audio_minutes=1))
        assert breakdown.input_cost == pytest.approx(1920 / 1_000_000)

    def test_video_minutes_billed_as_input(self):
        """Verify one minute of video costs 15480 input units."""
        breakdown = compute_cost(ONE_DOLLAR, UsageProfile(video_minutes=1))
        assert breakdown.input_cost == pytest.approx(15480 / 1_000_000)

    def test_image_generation_cost(self):
        """Verify images are billed per image and per request."""
        sheet = PriceSheet(input_price_per_million=0, output_price_per_million=0, price_per_image=0.04)
        breakdown = compute_cost(sheet, UsageProfile(generated_image_count=4, request_count=2))
        assert breakdown.image_generation_cost == pytest.approx(0.32)
        assert breakdown.total_cost == pytest.approx(0.32)

    def test_images_without_image_price_are_free(self):
        breakdown = compute_cost(ONE_DOLLAR, UsageProfile(generated_image_count=10))
        assert breakdown.image_generation_cost == 0

    def test_video_generation_not_billed(self):
        """Verify per-second video prices are not charged."""
        sheet = PriceSheet(
            input_price_per_million=0,
            output_price_per_million=0,
            price_per_second_of_video=0.15,
        )
        breakdown = compute_cost(sheet, UsageProfile(request_count=10, video_minutes=3))
        assert breakdown.video_generation_cost == 0
        assert breakdown.total_cost == 0

    def test_request_count_scales_each_line_item(self):
        """Verify every per-request line item is multiplied by request count."""
        single = compute_cost(FLASH, UsageProfile(input_units=1_000_000, output_units=500_000))
        triple = compute_cost(
            FLASH, UsageProfile(input_units=1_000_000, output_units=500_000, request_count=3)
        )
        assert triple.input_cost == single.input_cost * 3
        assert triple.output_cost == single.output_cost * 3
        assert triple.total_cost == pytest.approx(single.total_cost * 3)


class TestCachedPricing:
    """Test cached input tier selection and storage cost."""

    def test_cached_price_used_when_enabled(self):
        usage = UsageProfile(input_units=1_000_000, caching_enabled=True)
        breakdown = compute_cost(FLASH, usage)
        assert breakdown.input_cost == pytest.approx(0.01875)

    def test_standard_price_used_when_disabled(self):
        usage = UsageProfile(input_units=1_000_000, caching_enabled=False)
        breakdown = compute_cost(FLASH, usage)
        assert breakdown.input_cost == pytest.approx(0.075)

    def test_missing_cached_price_falls_back_to_standard(self):
        """Verify models without a cached price bill standard input."""
        usage = UsageProfile(input_units=1_000_000, caching_enabled=True)
        breakdown = compute_cost(ONE_DOLLAR, usage)
        assert breakdown.input_cost == pytest.approx(1.0)

    def test_zero_cached_price_is_honored(self):
        """Verify a present cached price of zero makes input free."""
        sheet = PriceSheet(
            input_price_per_million=1.0,
            output_price_per_million=1.0,
            cached_input_price_per_million=0.0,
        )
        usage = UsageProfile(input_units=1_000_000, caching_enabled=True)
        assert compute_cost(sheet, usage).input_cost == 0

    def test_storage_cost(self):
        """Verify storage is billed per million cached units per hour."""
        usage = UsageProfile(input_units=1_000_000, caching_enabled=True, cache_storage_hours=2)
        breakdown = compute_cost(FLASH, usage)
        assert breakdown.storage_cost == pytest.approx(2.0)

    def test_storage_not_scaled_by_request_count(self):
        usage = UsageProfile(
            input_units=1_000_000, caching_enabled=True, cache_storage_hours=2, request_count=50
        )
        breakdown = compute_cost(FLASH, usage)
        assert breakdown.storage_cost == pytest.approx(2.0)
        assert breakdown.input_cost == pytest.approx(0.01875 * 50)

    def test_storage_zero_when_caching_disabled(self):
        """Verify storage hours are ignored without caching."""
        usage = UsageProfile(input_units=1_000_000, caching_enabled=False, cache_storage_hours=100)
        assert compute_cost(FLASH, usage).storage_cost == 0

    def test_storage_zero_without_storage_price(self):
        usage = UsageProfile(input_units=1_000_000, caching_enabled=True, cache_storage_hours=5)
        assert compute_cost(ONE_DOLLAR, usage).storage_cost == 0


class TestBreakdownInvariants:
    """Test properties that hold for every model and profile."""

    PROFILES = [
        UsageProfile(*values)
        for values in itertools.product(
            [0, 1234],          # input_units
            [0, 987],           # output_units
            [0, 1.5],           # audio_minutes
            [0, 0.25],          # video_minutes
            [0, 3],             # generated_image_count
            [1, 7],             # request_count
            [False, True],      # caching_enabled
            [0, 12.5],          # cache_storage_hours
        )
    ]

    def test_total_is_exact_sum_of_line_items(self):
        for model in MODEL_CATALOG.list_models():
            for usage in self.PROFILES:
                breakdown = compute_cost(model.pricing, usage)
                assert breakdown.total_cost == _line_item_sum(breakdown), (model.id, usage)

    def test_all_fields_non_negative(self):
        for model in MODEL_CATALOG.list_models():
            for usage in self.PROFILES:
                breakdown = compute_cost(model.pricing, usage)
                assert min(
                    breakdown.input_cost,
                    breakdown.output_cost,
                    breakdown.image_generation_cost,
                    breakdown.video_generation_cost,
                    breakdown.storage_cost,
                    breakdown.total_cost,
                ) >= 0

    def test_identical_inputs_give_identical_output(self):
        usage = UsageProfile(
            input_units=4321, output_units=1234, audio_minutes=1.7, request_count=13,
            caching_enabled=True, cache_storage_hours=3.3,
        )
        assert compute_cost(FLASH, usage) == compute_cost(FLASH, usage)
