"""
Token counting and usage profiles.

Converts words and media durations into token-equivalent billing units.
"""

import math
from dataclasses import dataclass

# Approximate token cost of one minute of media input
AUDIO_UNITS_PER_MINUTE = 32 * 60
VIDEO_UNITS_PER_MINUTE = 258 * 60

# Average tokens per English word
UNITS_PER_WORD = 1.35


@dataclass(frozen=True)
class UsageProfile:
    """Usage figures for a single cost calculation.

    Values are trusted as given: callers clamp to non-negative numbers
    (and request_count to at least 1) before building a profile.
    """
    input_units: int = 0
    output_units: int = 0
    audio_minutes: float = 0.0
    video_minutes: float = 0.0
    generated_image_count: int = 0
    request_count: int = 1
    caching_enabled: bool = False
    cache_storage_hours: float = 0.0

    @property
    def effective_input_units(self) -> float:
        """Text input plus the token equivalent of audio and video input."""
        return (
            self.input_units
            + self.audio_minutes * AUDIO_UNITS_PER_MINUTE
            + self.video_minutes * VIDEO_UNITS_PER_MINUTE
        )


def estimate_units_from_word_count(words: float) -> int:
    """Estimate token-equivalent units for a word count, rounding up."""
    return math.ceil(words * UNITS_PER_WORD)
