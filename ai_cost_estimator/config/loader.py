"""
Configuration management and loading.

Loads custom model price sheets, team budgets and recorded call
statistics from YAML files.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ai_cost_estimator.core.budget import DEFAULT_ALERT_THRESHOLD, BudgetAllocation
from ai_cost_estimator.core.catalog import MODEL_CATALOG, ModelCatalog, ModelKind, ModelSpec
from ai_cost_estimator.core.pricing import PriceSheet
from ai_cost_estimator.core.recommendations import CallStat

logger = logging.getLogger(__name__)

_REQUIRED_PRICE_KEYS = ("input_price_per_million", "output_price_per_million")
_OPTIONAL_PRICE_KEYS = (
    "cached_input_price_per_million",
    "cache_storage_price_per_million_per_hour",
    "price_per_image",
    "price_per_second_of_video",
    "price_per_second_of_audio",
)
_MODEL_KEYS = set(_REQUIRED_PRICE_KEYS) | set(_OPTIONAL_PRICE_KEYS) | {
    "name", "description", "context_window", "kind",
}
_TEAM_KEYS = {"monthly_budget", "spent", "period"}
_CALL_KEYS = {
    "latency_ms", "success", "retry_count", "model", "cost", "network_cost", "feature_tags",
}


@dataclass(frozen=True)
class EstimatorConfig:
    """Complete estimator configuration."""
    models: Tuple[ModelSpec, ...] = ()
    teams: Dict[str, BudgetAllocation] = field(default_factory=dict)
    alert_threshold: float = DEFAULT_ALERT_THRESHOLD

    def catalog(self, base: ModelCatalog = MODEL_CATALOG) -> ModelCatalog:
        """Built-in catalog extended with the configured custom models."""
        return base.with_models(self.models)


def _read_yaml(path: str, description: str) -> Any:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"{description} file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in {description.lower()} file {path}: {e}")


def _check_keys(data: Dict, allowed: set, path: str) -> None:
    unknown = set(data.keys()) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in {path}: {sorted(unknown)}")


def _number(data: Dict, key: str, path: str, minimum: float = 0) -> float:
    value = data[key]
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' in {path} must be a number")
    if value < minimum:
        raise ValueError(f"'{key}' in {path} must be >= {minimum}")
    return float(value)


def _whole_number(data: Dict, key: str, path: str) -> int:
    value = _number(data, key, path)
    if not value.is_integer():
        raise ValueError(f"'{key}' in {path} must be a whole number")
    return int(value)


def load_estimator_config(path: str) -> EstimatorConfig:
    """Load and validate estimator configuration from a YAML file.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated EstimatorConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    raw_config = _read_yaml(path, "Config")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    _check_keys(raw_config, {"models", "budgets"}, "configuration")

    models_data = raw_config.get("models") or {}
    if not isinstance(models_data, dict):
        raise ValueError("'models' must be a dictionary")

    models = tuple(
        _parse_model(model_id, model_data, f"models.{model_id}")
        for model_id, model_data in models_data.items()
    )

    teams: Dict[str, BudgetAllocation] = {}
    alert_threshold: float = DEFAULT_ALERT_THRESHOLD
    budgets_data = raw_config.get("budgets")
    if budgets_data is not None:
        if not isinstance(budgets_data, dict):
            raise ValueError("'budgets' must be a dictionary")
        _check_keys(budgets_data, {"alert_threshold", "teams"}, "budgets")

        if "alert_threshold" in budgets_data:
            alert_threshold = _number(budgets_data, "alert_threshold", "budgets")

        teams_data = budgets_data.get("teams") or {}
        if not isinstance(teams_data, dict):
            raise ValueError("'budgets.teams' must be a dictionary")
        for team_name, team_data in teams_data.items():
            teams[team_name] = _parse_team(team_name, team_data, f"budgets.teams.{team_name}")

    logger.info("Loaded %d custom models and %d team budgets from %s", len(models), len(teams), path)

    return EstimatorConfig(models=models, teams=teams, alert_threshold=alert_threshold)


def _parse_model(model_id: Any, data: Any, path: str) -> ModelSpec:
    """Parse and validate a custom model definition.

    Raises:
        ValueError: If the definition is invalid
    """
    if not isinstance(data, dict):
        raise ValueError(f"Model '{model_id}' must be a dictionary")
    _check_keys(data, _MODEL_KEYS, path)

    prices: Dict[str, Optional[float]] = {}
    for key in _REQUIRED_PRICE_KEYS:
        if key not in data:
            raise ValueError(f"Missing required '{key}' in {path}")
        prices[key] = _number(data, key, path)
    for key in _OPTIONAL_PRICE_KEYS:
        if data.get(key) is not None:
            prices[key] = _number(data, key, path)

    context_window = 0
    if data.get("context_window") is not None:
        context_window = _whole_number(data, "context_window", path)

    kind_str = data.get("kind", ModelKind.TEXT.value)
    try:
        kind = ModelKind(str(kind_str).lower())
    except ValueError:
        valid_kinds = [k.value for k in ModelKind]
        raise ValueError(f"'kind' in {path} must be one of: {valid_kinds}")

    return ModelSpec(
        id=str(model_id),
        name=str(data.get("name") or model_id),
        description=str(data.get("description") or f"Custom model: {model_id}"),
        context_window=context_window,
        kind=kind,
        pricing=PriceSheet(**prices),
        is_custom=True,
    )


def _parse_team(team_name: Any, data: Any, path: str) -> BudgetAllocation:
    """Parse and validate a team budget entry."""
    if not isinstance(data, dict):
        raise ValueError(f"Team '{team_name}' must be a dictionary")
    _check_keys(data, _TEAM_KEYS, path)

    if "monthly_budget" not in data:
        raise ValueError(f"Missing required 'monthly_budget' in {path}")
    monthly_budget = _number(data, "monthly_budget", path)
    if monthly_budget == 0:
        raise ValueError(f"'monthly_budget' in {path} must be > 0")

    spent = _number(data, "spent", path) if "spent" in data else 0.0

    period = str(data.get("period", ""))
    if period and not _is_period(period):
        raise ValueError(f"'period' in {path} must be formatted YYYY-MM")

    return BudgetAllocation(
        team_name=str(team_name),
        monthly_budget=monthly_budget,
        spent=spent,
        period=period,
    )


def _is_period(value: str) -> bool:
    parts = value.split("-")
    return (
        len(parts) == 2
        and len(parts[0]) == 4
        and parts[0].isdigit()
        and len(parts[1]) == 2
        and parts[1].isdigit()
        and 1 <= int(parts[1]) <= 12
    )


def load_call_stats(path: str) -> List[CallStat]:
    """Load recorded API call statistics from a YAML list.

    Each entry needs latency_ms and success; the rest are optional.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If an entry is invalid
    """
    raw_calls = _read_yaml(path, "Call stats")

    if raw_calls is None:
        return []
    if not isinstance(raw_calls, list):
        raise ValueError("Call stats must be a list")

    calls = []
    for i, data in enumerate(raw_calls):
        entry_path = f"calls[{i}]"
        if not isinstance(data, dict):
            raise ValueError(f"{entry_path} must be a dictionary")
        _check_keys(data, _CALL_KEYS, entry_path)

        for key in ("latency_ms", "success"):
            if key not in data:
                raise ValueError(f"Missing required '{key}' in {entry_path}")
        if not isinstance(data["success"], bool):
            raise ValueError(f"'success' in {entry_path} must be true or false")

        tags = data.get("feature_tags") or []
        if not isinstance(tags, list):
            raise ValueError(f"'feature_tags' in {entry_path} must be a list")

        calls.append(CallStat(
            latency_ms=_number(data, "latency_ms", entry_path),
            success=data["success"],
            retry_count=_whole_number(data, "retry_count", entry_path) if "retry_count" in data else 0,
            model=str(data.get("model", "")),
            cost=_number(data, "cost", entry_path) if "cost" in data else 0.0,
            network_cost=_number(data, "network_cost", entry_path) if "network_cost" in data else 0.0,
            feature_tags=tuple(str(tag) for tag in tags),
        ))
    return calls
