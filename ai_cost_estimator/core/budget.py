"""
Team budget tracking and alerting.

Classifies spend against monthly budgets, projects month-end totals and
builds chargeback reports. Allocations are immutable; spend updates
return new records.

Alert levels, in order of severity:
1. ok - spend below the alert threshold
2. warning - spend at or above the threshold but within budget
3. critical - budget fully spent or exceeded
"""

import math
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .recommendations import CallStat

DEFAULT_ALERT_THRESHOLD = 80
DAYS_PER_MONTH = 30

PREMIUM_BUCKET = "Premium Models"
STANDARD_BUCKET = "Standard Models"


class AlertLevel(Enum):
    """Budget health classification."""
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class BudgetAllocation:
    """Monthly budget assigned to a team."""
    team_name: str
    monthly_budget: float
    spent: float = 0.0
    period: str = ""  # YYYY-MM
    alerts: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BudgetStatus:
    allocation: BudgetAllocation
    percentage_used: float
    remaining_budget: float
    is_over_budget: bool
    alert_level: AlertLevel


@dataclass(frozen=True)
class BudgetForecast:
    projected_total: float
    will_exceed: bool
    projected_excess_or_surplus: float  # positive is surplus


@dataclass(frozen=True)
class BudgetAlert:
    team: str
    message: str
    severity: AlertLevel


@dataclass(frozen=True)
class ChargebackLine:
    category: str
    cost: float
    percentage: float


@dataclass(frozen=True)
class ChargebackReport:
    team_name: str
    period: str
    total_cost: float
    breakdown: List[ChargebackLine]
    daily_average: float


def _current_period() -> str:
    return date.today().strftime("%Y-%m")


def _ratio(numerator: float, denominator: float) -> float:
    """Divide with IEEE semantics instead of raising on a zero denominator."""
    if denominator == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def _critical_message(status: BudgetStatus) -> str:
    if status.is_over_budget:
        return f"Budget exceeded by ${abs(status.remaining_budget):.2f}"
    return "Budget fully spent"


def create_budget_allocation(
    team_name: str,
    monthly_budget: float,
    period: Optional[str] = None
) -> BudgetAllocation:
    """Create an empty allocation for the given (default: current) period."""
    return BudgetAllocation(
        team_name=team_name,
        monthly_budget=monthly_budget,
        spent=0.0,
        period=period or _current_period(),
        alerts=(),
    )


def classify_budget_status(
    allocation: BudgetAllocation,
    alert_threshold_percent: float = DEFAULT_ALERT_THRESHOLD
) -> BudgetStatus:
    """Classify an allocation's spend into an alert level.

    A zero monthly budget yields an infinite (or NaN, when nothing was
    spent) percentage rather than an exception; callers should avoid it.

    Args:
        allocation: Budget and spend to classify
        alert_threshold_percent: Percentage used at which a warning starts

    Returns:
        BudgetStatus with percentage used, remaining budget and alert level
    """
    percentage_used = _ratio(allocation.spent, allocation.monthly_budget) * 100
    remaining_budget = allocation.monthly_budget - allocation.spent
    is_over_budget = remaining_budget < 0

    alert_level = AlertLevel.OK
    if remaining_budget <= 0 and allocation.spent > 0:
        alert_level = AlertLevel.CRITICAL
    elif percentage_used >= alert_threshold_percent:
        alert_level = AlertLevel.WARNING

    return BudgetStatus(
        allocation=allocation,
        percentage_used=percentage_used,
        remaining_budget=remaining_budget,
        is_over_budget=is_over_budget,
        alert_level=alert_level,
    )


def forecast_budget_status(
    allocation: BudgetAllocation,
    daily_spend_rate: float,
    days_remaining: float
) -> BudgetForecast:
    """Project month-end spend linearly from a daily rate."""
    projected_total = allocation.spent + daily_spend_rate * days_remaining
    return BudgetForecast(
        projected_total=projected_total,
        will_exceed=projected_total > allocation.monthly_budget,
        projected_excess_or_surplus=allocation.monthly_budget - projected_total,
    )


def update_budget_spending(
    allocation: BudgetAllocation,
    additional_cost: float,
    alert_threshold: float = DEFAULT_ALERT_THRESHOLD
) -> Tuple[BudgetAllocation, Optional[str]]:
    """Record additional spend and raise an alert if a threshold is crossed.

    Returns:
        The updated allocation (with the alert appended to its history)
        and the alert message, or None when the budget is healthy
    """
    updated = replace(allocation, spent=allocation.spent + additional_cost)
    status = classify_budget_status(updated, alert_threshold)

    alert = None
    if status.alert_level == AlertLevel.WARNING:
        alert = f"Budget alert: {status.percentage_used:.1f}% used"
    elif status.alert_level == AlertLevel.CRITICAL:
        alert = f"CRITICAL: {_critical_message(status)}"

    if alert is not None:
        updated = replace(updated, alerts=updated.alerts + (alert,))
    return updated, alert


def allocate_budget_to_teams(
    total_monthly_budget: float,
    team_weights: Mapping[str, float],
    period: Optional[str] = None
) -> Dict[str, BudgetAllocation]:
    """Split a total budget across teams in proportion to their weights."""
    total_weight = sum(team_weights.values())
    return {
        team_name: create_budget_allocation(
            team_name,
            _ratio(total_monthly_budget * weight, total_weight),
            period,
        )
        for team_name, weight in team_weights.items()
    }


def generate_budget_alerts(
    allocations: Mapping[str, BudgetAllocation],
    alert_threshold: float = DEFAULT_ALERT_THRESHOLD
) -> List[BudgetAlert]:
    """Collect an alert for every team in warning or critical state."""
    alerts = []
    for allocation in allocations.values():
        status = classify_budget_status(allocation, alert_threshold)
        if status.alert_level == AlertLevel.CRITICAL:
            alerts.append(BudgetAlert(
                team=allocation.team_name,
                message=_critical_message(status),
                severity=AlertLevel.CRITICAL,
            ))
        elif status.alert_level == AlertLevel.WARNING:
            alerts.append(BudgetAlert(
                team=allocation.team_name,
                message=f"{status.percentage_used:.1f}% of budget used",
                severity=AlertLevel.WARNING,
            ))
    return alerts


def generate_chargeback_report(
    team_name: str,
    calls: Sequence[CallStat],
    feature_breakdown: bool = False,
    period: Optional[str] = None
) -> ChargebackReport:
    """Attribute call costs (including network cost) to a team.

    Calls are bucketed by their first feature tag when feature_breakdown
    is set, otherwise by premium ("pro" models) versus standard models.
    """
    buckets: Dict[str, float] = {}
    total_cost = 0.0

    for call in calls:
        cost = call.cost + call.network_cost
        total_cost += cost
        if feature_breakdown and call.feature_tags:
            bucket = call.feature_tags[0]
        elif "pro" in call.model:
            bucket = PREMIUM_BUCKET
        else:
            bucket = STANDARD_BUCKET
        buckets[bucket] = buckets.get(bucket, 0.0) + cost

    breakdown = [
        ChargebackLine(
            category=category,
            cost=cost,
            percentage=(cost / total_cost) * 100 if total_cost else 0.0,
        )
        for category, cost in buckets.items()
    ]
    breakdown.sort(key=lambda line: line.cost, reverse=True)

    return ChargebackReport(
        team_name=team_name,
        period=period or _current_period(),
        total_cost=total_cost,
        breakdown=breakdown,
        daily_average=total_cost / DAYS_PER_MONTH,
    )
