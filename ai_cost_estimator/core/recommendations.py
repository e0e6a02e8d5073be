"""
Cost optimization recommendations.

Ranks a fixed catalog of recommendations against observed call statistics.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

FAILURE_RATE_THRESHOLD = 0.05
AVG_RETRIES_THRESHOLD = 1.5
MAX_ERROR_HANDLING_SAVINGS = 45
MAX_DEDUPLICATION_SAVINGS = 40
TOP_RECOMMENDATIONS = 3

DEDUPLICATION_TITLE = "Implement Request Deduplication"


class RecommendationCategory(Enum):
    CACHING = "caching"
    BATCHING = "batching"
    MODEL_OPTIMIZATION = "model-optimization"
    ERROR_HANDLING = "error-handling"
    ARCHITECTURE = "architecture"


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class CallStat:
    """Observed outcome of a single API call."""
    latency_ms: float
    success: bool
    retry_count: int = 0
    model: str = ""
    cost: float = 0.0
    network_cost: float = 0.0
    feature_tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RecommendationRecord:
    """A single optimization suggestion.

    Lower priority values are more urgent. estimated_savings is a percentage
    of monthly spend.
    """
    title: str
    description: str
    category: RecommendationCategory
    estimated_savings: float
    implementation_difficulty: Difficulty
    priority: int
    code_suggestion: Optional[str] = None


RECOMMENDATION_CATALOG: Tuple[RecommendationRecord, ...] = (
    RecommendationRecord(
        title="Enable Response Caching",
        description=(
            "Cache frequently used API responses to reduce redundant calls. This is "
            "especially effective for queries that are repeated within short time windows."
        ),
        category=RecommendationCategory.CACHING,
        estimated_savings=30,
        implementation_difficulty=Difficulty.EASY,
        code_suggestion=(
            "key = hash_request(params)\n"
            "cached = cache.get(key)\n"
            "if cached and not cached.expired:\n"
            "    return cached.data\n"
            "result = client.call(params)\n"
            "cache[key] = CacheEntry(result, time.time())\n"
            "return result"
        ),
        priority=1,
    ),
    RecommendationRecord(
        title="Batch API Requests",
        description=(
            "Combine multiple individual requests into fewer batch requests. This reduces "
            "overhead and often provides better API discounts."
        ),
        category=RecommendationCategory.BATCHING,
        estimated_savings=25,
        implementation_difficulty=Difficulty.MEDIUM,
        code_suggestion=(
            "requests = [build_request(user_id) for user_id in user_ids]\n"
            "responses = client.batch(requests)"
        ),
        priority=2,
    ),
    RecommendationRecord(
        title="Use Cheaper Model Variant",
        description=(
            "Switch from Pro model to Flash for non-critical tasks. Flash provides 95% of "
            "Pro's capabilities at 1/10th the cost."
        ),
        category=RecommendationCategory.MODEL_OPTIMIZATION,
        estimated_savings=40,
        implementation_difficulty=Difficulty.EASY,
        code_suggestion=(
            "# For simple tasks, use Flash instead of Pro\n"
            "model = \"gemini-2.5-pro\" if is_complex_task else \"gemini-2.5-flash\"\n"
            "response = client.generate(model=model, prompt=prompt)"
        ),
        priority=1,
    ),
    RecommendationRecord(
        title="Implement Circuit Breaker Pattern",
        description=(
            "Prevent cascading failures and wasted retries by implementing circuit breaker "
            "pattern. This reduces costs from failed retry attempts."
        ),
        category=RecommendationCategory.ERROR_HANDLING,
        estimated_savings=20,
        implementation_difficulty=Difficulty.MEDIUM,
        code_suggestion=(
            "class CircuitBreaker:\n"
            "    def __init__(self, threshold=5):\n"
            "        self.failure_count = 0\n"
            "        self.threshold = threshold\n"
            "\n"
            "    def execute(self, fn):\n"
            "        if self.failure_count >= self.threshold:\n"
            "            raise RuntimeError(\"Circuit breaker is OPEN\")\n"
            "        try:\n"
            "            result = fn()\n"
            "        except Exception:\n"
            "            self.failure_count += 1\n"
            "            raise\n"
            "        self.failure_count = 0\n"
            "        return result"
        ),
        priority=2,
    ),
    RecommendationRecord(
        title="Reduce Token Usage",
        description=(
            "Minimize input tokens by removing unnecessary context, using summaries, and "
            "filtering data before sending to API."
        ),
        category=RecommendationCategory.ARCHITECTURE,
        estimated_savings=35,
        implementation_difficulty=Difficulty.MEDIUM,
        code_suggestion=(
            "full_text = fetch_document()  # 100k tokens\n"
            "relevant = extract_relevant_sections(full_text)  # 5k tokens\n"
            "response = client.process(relevant)"
        ),
        priority=1,
    ),
    RecommendationRecord(
        title=DEDUPLICATION_TITLE,
        description=(
            "Detect and prevent duplicate requests within a short window. Great for "
            "handling race conditions and async operations."
        ),
        category=RecommendationCategory.ARCHITECTURE,
        estimated_savings=15,
        implementation_difficulty=Difficulty.EASY,
        code_suggestion=(
            "pending = {}\n"
            "\n"
            "async def deduped_fetch(key, fetch):\n"
            "    if key not in pending:\n"
            "        pending[key] = asyncio.ensure_future(fetch())\n"
            "        pending[key].add_done_callback(lambda _: pending.pop(key, None))\n"
            "    return await pending[key]"
        ),
        priority=2,
    ),
)


def _promote(
    recommendations: List[RecommendationRecord],
    index: int,
    estimated_savings: float
) -> None:
    recommendations[index] = replace(
        recommendations[index],
        priority=0,
        estimated_savings=estimated_savings,
    )


def generate_recommendations(
    call_stats: Optional[Sequence[CallStat]] = None,
    monthly_spend: float = 0.0
) -> List[RecommendationRecord]:
    """Rank the recommendation catalog against observed call statistics.

    A failure rate above 5% promotes the error-handling recommendation and
    an average above 1.5 retries per call promotes request deduplication.
    The catalog itself is never modified; callers get a fresh list sorted
    by priority, ties keeping catalog order.

    Args:
        call_stats: Observed calls, or None when nothing has been recorded
        monthly_spend: Current monthly spend (does not affect ranking)

    Returns:
        Recommendations ordered from most to least urgent
    """
    recommendations = list(RECOMMENDATION_CATALOG)

    if call_stats:
        total = len(call_stats)
        failure_rate = sum(1 for call in call_stats if not call.success) / total
        avg_retries = sum(call.retry_count for call in call_stats) / total

        if failure_rate > FAILURE_RATE_THRESHOLD:
            for i, rec in enumerate(recommendations):
                if rec.category == RecommendationCategory.ERROR_HANDLING:
                    logger.debug("Failure rate %.3f promotes %r", failure_rate, rec.title)
                    _promote(
                        recommendations, i,
                        min(MAX_ERROR_HANDLING_SAVINGS, failure_rate * 100),
                    )
                    break

        if avg_retries > AVG_RETRIES_THRESHOLD:
            for i, rec in enumerate(recommendations):
                if rec.title == DEDUPLICATION_TITLE:
                    logger.debug("Average retries %.2f promotes %r", avg_retries, rec.title)
                    _promote(
                        recommendations, i,
                        min(MAX_DEDUPLICATION_SAVINGS, avg_retries * 20),
                    )
                    break

    # sorted() is stable
    return sorted(recommendations, key=lambda rec: rec.priority)


def calculate_potential_savings(
    recommendations: Sequence[RecommendationRecord],
    monthly_spend: float
) -> float:
    """Estimate savings from adopting the top three recommendations.

    Percentages are added, not compounded, so overlapping savings are
    counted in full.
    """
    top = recommendations[:TOP_RECOMMENDATIONS]
    total_percent = sum(rec.estimated_savings for rec in top)
    return monthly_spend * total_percent / 100


def get_recommendations_by_category(
    category: RecommendationCategory
) -> List[RecommendationRecord]:
    """Return catalog entries in a category, in catalog order."""
    return [rec for rec in RECOMMENDATION_CATALOG if rec.category == category]
