"""
CLI interface for AI Cost Estimator.

Provides command-line access to the cost calculator, shadow cost
simulator, recommendations, budgets and live estimates.
"""

import csv
import logging
import sys
from typing import List, Optional, Tuple

import typer
import yaml
from openai import OpenAIError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ai_cost_estimator.config.loader import (
    EstimatorConfig,
    load_call_stats,
    load_estimator_config,
)
from ai_cost_estimator.core.budget import (
    AlertLevel,
    classify_budget_status,
    forecast_budget_status,
    generate_budget_alerts,
)
from ai_cost_estimator.core.catalog import MODEL_CATALOG, ModelCatalog, ModelSpec, compare_models
from ai_cost_estimator.core.pricing import CostBreakdown, compute_cost
from ai_cost_estimator.core.recommendations import (
    calculate_potential_savings,
    generate_recommendations,
)
from ai_cost_estimator.core.shadow import (
    SCENARIOS,
    compute_shadow_cost,
    estimate_monthly_impact,
    simulate_all_scenarios,
)
from ai_cost_estimator.core.token_counter import UsageProfile, estimate_units_from_word_count
from ai_cost_estimator.sdk.openai_client import MeteredClient

app = typer.Typer()
console = Console()
logger = logging.getLogger(__name__)

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

DEFAULT_MODEL = "gemini-2.5-flash"
CSV_HEADERS = ["Model", "Total Cost", "Input Cost", "Output Cost", "Storage Cost", "Cached"]

_ALERT_STYLES = {
    AlertLevel.OK: "green",
    AlertLevel.WARNING: "yellow",
    AlertLevel.CRITICAL: "red",
}


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """AI Cost Estimator CLI."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)
    if ctx.invoked_subcommand is None:
        console.print("AI Cost Estimator - Use --help to see available commands")


def _fail(message: str) -> None:
    logger.error(message)
    console.print(f"[red]Error:[/] {message}")
    sys.exit(EXIT_CODE_FAIL)


def _load_config(config_path: Optional[str]) -> EstimatorConfig:
    if config_path is None:
        return EstimatorConfig()
    return load_estimator_config(config_path)


def _format_cost(amount: float) -> str:
    """Format a model cost, keeping precision for sub-cent amounts."""
    if amount == 0:
        return "$0.00"
    if amount < 0.01:
        return f"${amount:.7f}"
    return f"${amount:.4f}"


def _format_currency(amount: float) -> str:
    """Format currency with proper symbols and formatting."""
    return f"${abs(amount):,.2f}"


def _build_usage(
    input_tokens: int,
    output_tokens: int,
    words: Optional[int],
    requests: int,
    audio_minutes: float,
    video_minutes: float,
    images: int,
    cached: bool,
    storage_hours: float,
) -> UsageProfile:
    if words is not None:
        input_tokens = estimate_units_from_word_count(words)
    return UsageProfile(
        input_units=input_tokens,
        output_units=output_tokens,
        audio_minutes=audio_minutes,
        video_minutes=video_minutes,
        generated_image_count=images,
        request_count=requests,
        caching_enabled=cached,
        cache_storage_hours=storage_hours,
    )


@app.command()
def models(
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="YAML file with custom models"
    ),
):
    """List priced models."""
    try:
        catalog = _load_config(config_path).catalog()
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(str(e))

    table = Table(title="Models (USD per 1M tokens)")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Cached input", justify="right")
    table.add_column("Per image", justify="right")
    for model in catalog.list_models():
        pricing = model.pricing
        table.add_row(
            model.id,
            model.name + (" (custom)" if model.is_custom else ""),
            f"{pricing.input_price_per_million:g}",
            f"{pricing.output_price_per_million:g}",
            "-" if pricing.cached_input_price_per_million is None
            else f"{pricing.cached_input_price_per_million:g}",
            "-" if pricing.price_per_image is None else f"{pricing.price_per_image:g}",
        )
    console.print(table)


@app.command()
def estimate(
    model_id: str = typer.Option(DEFAULT_MODEL, "--model", "-m", help="Model identifier"),
    input_tokens: int = typer.Option(1000, "--input-tokens", "-i", min=0),
    output_tokens: int = typer.Option(500, "--output-tokens", "-o", min=0),
    words: Optional[int] = typer.Option(
        None, "--words", "-w", min=0, help="Estimate input tokens from a word count"
    ),
    requests: int = typer.Option(1, "--requests", "-r", min=1),
    audio_minutes: float = typer.Option(0.0, "--audio-minutes", min=0),
    video_minutes: float = typer.Option(0.0, "--video-minutes", min=0),
    images: int = typer.Option(0, "--images", min=0, help="Generated images per request"),
    cached: bool = typer.Option(False, "--cached", help="Bill input at the cached price"),
    storage_hours: float = typer.Option(0.0, "--storage-hours", min=0),
    budget: Optional[float] = typer.Option(None, "--budget", "-b", min=0),
    config_path: Optional[str] = typer.Option(None, "--config", "-c"),
):
    """Estimate the cost of a usage profile on one model."""
    try:
        model = _load_config(config_path).catalog().get_model(model_id)
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(str(e))

    usage = _build_usage(
        input_tokens, output_tokens, words, requests,
        audio_minutes, video_minutes, images, cached, storage_hours,
    )
    breakdown = compute_cost(model.pricing, usage)

    console.print(f"\n[bold]{model.name}[/bold] ({model.id})")
    console.print("-" * 40)
    if words is not None:
        console.print(f"Estimated input tokens: {usage.input_units:,}")
    console.print(f"Input cost: {_format_cost(breakdown.input_cost)}")
    console.print(f"Output cost: {_format_cost(breakdown.output_cost)}")
    console.print(f"Image generation cost: {_format_cost(breakdown.image_generation_cost)}")
    console.print(f"Storage cost: {_format_cost(breakdown.storage_cost)}")
    console.print(f"[bold]Total cost: {_format_cost(breakdown.total_cost)}[/bold]")

    if budget is not None:
        if breakdown.total_cost > budget:
            console.print(f"[red]Over budget of {_format_currency(budget)}[/]")
        else:
            console.print(f"[green]Within budget of {_format_currency(budget)}[/]")


def _write_csv(
    path: str,
    rows: List[Tuple[ModelSpec, CostBreakdown]],
    cached: bool
) -> None:
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADERS)
        for model, breakdown in rows:
            writer.writerow([
                model.name,
                f"{breakdown.total_cost:.6f}",
                f"{breakdown.input_cost:.6f}",
                f"{breakdown.output_cost:.6f}",
                f"{breakdown.storage_cost:.6f}",
                "Yes" if cached else "No",
            ])


@app.command()
def compare(
    input_tokens: int = typer.Option(1000, "--input-tokens", "-i", min=0),
    output_tokens: int = typer.Option(500, "--output-tokens", "-o", min=0),
    words: Optional[int] = typer.Option(None, "--words", "-w", min=0),
    requests: int = typer.Option(1, "--requests", "-r", min=1),
    audio_minutes: float = typer.Option(0.0, "--audio-minutes", min=0),
    video_minutes: float = typer.Option(0.0, "--video-minutes", min=0),
    images: int = typer.Option(0, "--images", min=0),
    cached: bool = typer.Option(False, "--cached"),
    storage_hours: float = typer.Option(0.0, "--storage-hours", min=0),
    csv_path: Optional[str] = typer.Option(None, "--csv", help="Export the comparison as CSV"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c"),
):
    """Price one usage profile on every model."""
    try:
        catalog = _load_config(config_path).catalog()
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(str(e))

    usage = _build_usage(
        input_tokens, output_tokens, words, requests,
        audio_minutes, video_minutes, images, cached, storage_hours,
    )
    rows = compare_models(catalog, usage)

    table = Table(title="Model comparison")
    table.add_column("Model")
    table.add_column("Total", justify="right")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Storage", justify="right")
    for model, breakdown in rows:
        table.add_row(
            model.name,
            _format_cost(breakdown.total_cost),
            _format_cost(breakdown.input_cost),
            _format_cost(breakdown.output_cost),
            _format_cost(breakdown.storage_cost),
        )
    console.print(table)

    if csv_path:
        try:
            _write_csv(csv_path, rows, cached)
        except OSError as e:
            _fail(f"Could not write {csv_path}: {e}")
        console.print(f"[green]✓[/] Exported {len(rows)} rows to {csv_path}")


@app.command()
def shadow(
    direct_cost: float = typer.Argument(..., min=0, help="Cost of one unit of work"),
    scenario: Optional[str] = typer.Option(
        None, "--scenario", "-s", help=f"One of: {', '.join(SCENARIOS)}"
    ),
    requests: int = typer.Option(1, "--requests", "-r", min=1),
):
    """Simulate hidden retry, egress and cache-miss costs."""
    if scenario is None:
        results = simulate_all_scenarios(direct_cost, requests)
    else:
        if scenario not in SCENARIOS:
            console.print(f"[yellow]Unknown scenario '{scenario}', using 'normal'[/]")
            scenario = "normal"
        results = {scenario: compute_shadow_cost(direct_cost, scenario, requests)}

    table = Table(title="Shadow cost")
    table.add_column("Scenario")
    table.add_column("Direct", justify="right")
    table.add_column("Retries", justify="right")
    table.add_column("Egress", justify="right")
    table.add_column("Cache misses", justify="right")
    table.add_column("Total", justify="right")
    for key, result in results.items():
        table.add_row(
            key,
            _format_currency(result.direct_cost),
            _format_currency(result.estimated_retry_cost),
            _format_currency(result.egress_cost),
            _format_currency(result.cache_miss_cost),
            _format_currency(result.total_shadow_cost),
        )
    console.print(table)

    for result in results.values():
        console.print(result.description)

    if scenario is not None:
        impact = estimate_monthly_impact(direct_cost, scenario)
        console.print(
            f"\nTreating {_format_currency(direct_cost)} as a daily cost: "
            f"{_format_currency(impact.estimated)}/month direct, "
            f"{_format_currency(impact.with_shadow)}/month with shadow costs "
            f"(+{_format_currency(impact.additional_cost)})"
        )


@app.command()
def advise(
    calls_path: Optional[str] = typer.Option(
        None, "--calls", help="YAML list of recorded call statistics"
    ),
    monthly_spend: float = typer.Option(0.0, "--spend", "-s", min=0, help="Monthly spend"),
):
    """Rank cost optimization recommendations."""
    try:
        calls = load_call_stats(calls_path) if calls_path else None
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(str(e))

    recommendations = generate_recommendations(calls, monthly_spend)

    table = Table(title="Recommendations")
    table.add_column("Priority", justify="right")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Savings", justify="right")
    table.add_column("Difficulty")
    for rec in recommendations:
        table.add_row(
            str(rec.priority),
            rec.title,
            rec.category.value,
            f"{rec.estimated_savings:.0f}%",
            rec.implementation_difficulty.value,
        )
    console.print(table)

    savings = calculate_potential_savings(recommendations, monthly_spend)
    console.print(f"Potential monthly savings (top 3): {_format_currency(savings)}")


@app.command()
def budget(
    config_path: str = typer.Option(..., "--config", "-c", help="YAML file with team budgets"),
    daily_rate: Optional[float] = typer.Option(
        None, "--daily-rate", min=0, help="Daily spend rate for forecasting"
    ),
    days_remaining: int = typer.Option(0, "--days-remaining", min=0),
    enforced: bool = typer.Option(
        False, "--enforced", "-e", help="Exit with error code if any team has spent its whole budget"
    ),
):
    """Show budget status, forecasts and alerts for each team."""
    try:
        config = load_estimator_config(config_path)
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(str(e))

    if not config.teams:
        console.print("\n[bold yellow]No team budgets configured[/]")
        sys.exit(EXIT_CODE_PASS)

    table = Table(title="Team budgets")
    table.add_column("Team")
    table.add_column("Period")
    table.add_column("Budget", justify="right")
    table.add_column("Spent", justify="right")
    table.add_column("Used", justify="right")
    table.add_column("Status")
    if daily_rate is not None:
        table.add_column("Projected", justify="right")

    for allocation in config.teams.values():
        status = classify_budget_status(allocation, config.alert_threshold)
        style = _ALERT_STYLES[status.alert_level]
        row = [
            allocation.team_name,
            allocation.period or "-",
            _format_currency(allocation.monthly_budget),
            _format_currency(allocation.spent),
            f"{status.percentage_used:.1f}%",
            f"[{style}]{status.alert_level.value}[/]",
        ]
        if daily_rate is not None:
            forecast = forecast_budget_status(allocation, daily_rate, days_remaining)
            marker = " (over)" if forecast.will_exceed else ""
            row.append(_format_currency(forecast.projected_total) + marker)
        table.add_row(*row)
    console.print(table)

    alerts = generate_budget_alerts(config.teams, config.alert_threshold)
    for alert in alerts:
        style = _ALERT_STYLES[alert.severity]
        console.print(f"[{style}]{alert.severity.value.upper()}[/] {alert.team}: {alert.message}")

    if enforced and any(a.severity == AlertLevel.CRITICAL for a in alerts):
        sys.exit(EXIT_CODE_FAIL)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def live(
    prompt: str = typer.Argument(..., help="Prompt to send"),
    model_id: str = typer.Option(DEFAULT_MODEL, "--model", "-m"),
    other_model_id: Optional[str] = typer.Option(
        None, "--versus", help="Send the same prompt to a second model"
    ),
    config_path: Optional[str] = typer.Option(None, "--config", "-c"),
):
    """Send a prompt to the generative API and price the real usage."""
    try:
        catalog: ModelCatalog = _load_config(config_path).catalog()
        client = MeteredClient(model_id, catalog=catalog)
        if other_model_id:
            estimates = list(client.compare(prompt, other_model_id))
        else:
            estimates = [client.generate(prompt)]
    except (ValueError, FileNotFoundError, yaml.YAMLError, OpenAIError) as e:
        _fail(str(e))

    for result in estimates:
        console.print(f"\n[bold]{result.model_id}[/bold]")
        console.print(result.text, markup=False)
        console.print(
            f"[dim]Input tokens: {result.prompt_units:,}  "
            f"Output tokens: {result.completion_units:,}  "
            f"Cost: {_format_cost(result.cost)}[/]"
        )

    if len(estimates) == 2:
        cheaper = min(estimates, key=lambda e: e.cost)
        console.print(f"\nCheaper: [bold]{cheaper.model_id}[/bold]")


if __name__ == "__main__":
    app()
