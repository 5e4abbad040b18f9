"""CLI entry point for the trading journal analytics."""

from __future__ import annotations

import json

import click

from .core.config import load_settings
from .core.errors import JournalError
from .core.file_io import load_trades
from .journal.analyzer import PerformanceAnalyzer
from .journal.breakdown import BreakdownAggregator
from .observability.logger import get_logger, new_analysis_id, setup_logging

logger = get_logger(__name__)


def _echo_json(payload: dict) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


@click.group()
def main() -> None:
    """Trading Journal performance analytics."""


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="Config file path")
@click.option("--balance", type=float, default=None, help="Initial account balance")
@click.option("--period-days", type=int, default=None, help="Days covered by the trades (Calmar)")
@click.option("--risk-free-rate", type=float, default=None, help="Per-trade risk-free rate (Sharpe)")
@click.option("--summary", is_flag=True, help="Print a short text summary instead of JSON")
def analyze(
    trades_file: str,
    config: str | None,
    balance: float | None,
    period_days: int | None,
    risk_free_rate: float | None,
    summary: bool,
) -> None:
    """Compute metrics, Wolf Score and breakdown for a trade file."""
    try:
        settings = load_settings(config)
        setup_logging(settings.observability.log_level, settings.observability.log_format)
        new_analysis_id()
        trades = load_trades(trades_file)
        report = PerformanceAnalyzer.from_settings(settings).analyze(
            trades,
            initial_balance=balance,
            period_days=period_days,
            risk_free_rate=risk_free_rate,
        )
    except JournalError as exc:
        raise click.ClickException(str(exc)) from exc

    logger.info("analysis_complete", trades=len(trades), score=report.wolf_score.score)

    if summary:
        _print_summary(report)
    else:
        _echo_json(report.to_dict())


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="Config file path")
@click.option("--heatmap-only", is_flag=True, help="Print only the heatmap")
def breakdown(trades_file: str, config: str | None, heatmap_only: bool) -> None:
    """Print the hierarchical breakdown and heatmap for a trade file."""
    try:
        settings = load_settings(config)
        setup_logging(settings.observability.log_level, settings.observability.log_format)
        new_analysis_id()
        trades = load_trades(trades_file)
    except JournalError as exc:
        raise click.ClickException(str(exc)) from exc

    aggregator = BreakdownAggregator(settings.timeframes, settings.labels)
    if heatmap_only:
        _echo_json(aggregator.build_heatmap(trades).to_dict())
    else:
        _echo_json(aggregator.build(trades).to_dict())


def _print_summary(report) -> None:
    """Print a formatted performance summary."""
    m = report.metrics
    wolf = report.wolf_score

    click.echo(f"\n{'=' * 60}")
    click.echo("PERFORMANCE SUMMARY")
    click.echo(f"{'=' * 60}")
    click.echo(f"  Trades:          {m.total_trades} ({m.wins}W / {m.losses}L / {m.breakeven}BE / {m.pending}P)")
    click.echo(f"  Win Rate:        {m.win_rate:.1f}%")
    click.echo(f"  Net P&L:         {m.total_pnl:+.2f} ({report.balance.pnl_percent:+.2f}%)")
    click.echo(f"  Balance:         {report.balance.current_balance:.2f}")
    click.echo(f"  Profit Factor:   {m.profit_factor:.2f}")
    click.echo(f"  Max Drawdown:    {m.max_drawdown:.2f}")
    click.echo(f"  Sharpe:          {report.sharpe_ratio:.4f}")
    click.echo(f"  Calmar:          {report.calmar_ratio:.4f}")
    click.echo(f"\n  Wolf Score:      {wolf.score} ({wolf.grade.value}, {wolf.description})")
    for axis in wolf.radar_data():
        click.echo(f"    {axis['metric']:15s}: {axis['value']:.1f}")
