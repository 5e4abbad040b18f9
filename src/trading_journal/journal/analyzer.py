"""Full performance report for one list of trades.

Runs every calculator in the package over the same trade list and
bundles the results.  Defaults for balance, period and risk-free rate
come from :class:`~trading_journal.core.config.AnalyticsConfig`.

Usage::

    analyzer = PerformanceAnalyzer.from_settings(load_settings("journal.toml"))
    report = analyzer.analyze(trades, initial_balance=25_000)
    print(report.wolf_score.grade.value)   # "A"
    print(report.to_dict()["sharpe_ratio"])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..core.config import AnalyticsConfig, Settings
from ..core.models import TradeRecord
from .breakdown import BreakdownAggregator, BreakdownResult
from .metrics import (
    BalanceSummary,
    HoldTimeStats,
    MonthlyMetrics,
    StreakStats,
    TradeMetrics,
    calculate_average_hold_time,
    calculate_balance_summary,
    calculate_calmar_ratio,
    calculate_consecutive_streaks,
    calculate_monthly_metrics,
    calculate_sharpe_ratio,
    calculate_trade_metrics,
)
from .tag_analytics import TagMetrics, calculate_tag_metrics
from .wolf_score import WolfScoreEngine, WolfScoreResult

logger = logging.getLogger(__name__)


@dataclass
class PerformanceReport:
    metrics: TradeMetrics
    sharpe_ratio: float
    calmar_ratio: float
    hold_time: HoldTimeStats
    streaks: StreakStats
    wolf_score: WolfScoreResult
    initial_balance: float
    period_days: int
    balance: BalanceSummary = field(default_factory=BalanceSummary)
    monthly: list[MonthlyMetrics] = field(default_factory=list)
    breakdown: BreakdownResult | None = None
    tag_metrics: list[TagMetrics] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON/API use."""
        return {
            "initial_balance": self.initial_balance,
            "period_days": self.period_days,
            "balance": self.balance.to_dict(),
            "metrics": self.metrics.to_dict(),
            "sharpe_ratio": round(self.sharpe_ratio, 4),
            "calmar_ratio": round(self.calmar_ratio, 4),
            "hold_time": self.hold_time.to_dict(),
            "streaks": self.streaks.to_dict(),
            "monthly": [m.to_dict() for m in self.monthly],
            "wolf_score": self.wolf_score.to_dict(),
            "radar": self.wolf_score.radar_data(),
            "breakdown": self.breakdown.to_dict() if self.breakdown else None,
            "tag_metrics": [m.to_dict() for m in self.tag_metrics],
        }


class PerformanceAnalyzer:
    """Runs metrics, scoring and breakdown over a trade list.

    Parameters
    ----------
    config : AnalyticsConfig | None
        Default balance, period, risk-free rate and optional sections.
    engine : WolfScoreEngine | None
        Scoring engine.  Defaults to one with the standard tables.
    aggregator : BreakdownAggregator | None
        Breakdown aggregator.  Defaults to the standard timeframe table.
    """

    def __init__(
        self,
        config: AnalyticsConfig | None = None,
        engine: WolfScoreEngine | None = None,
        aggregator: BreakdownAggregator | None = None,
    ) -> None:
        self._config = config or AnalyticsConfig()
        self._engine = engine or WolfScoreEngine()
        self._aggregator = aggregator or BreakdownAggregator()

    @classmethod
    def from_settings(cls, settings: Settings) -> PerformanceAnalyzer:
        return cls(
            config=settings.analytics,
            engine=WolfScoreEngine(settings.scoring),
            aggregator=BreakdownAggregator(settings.timeframes, settings.labels),
        )

    @property
    def config(self) -> AnalyticsConfig:
        return self._config

    def analyze(
        self,
        trades: list[TradeRecord],
        initial_balance: float | None = None,
        period_days: int | None = None,
        risk_free_rate: float | None = None,
    ) -> PerformanceReport:
        """Compute the full report.  Arguments left as None use the config."""
        balance = self._config.initial_balance if initial_balance is None else initial_balance
        days = self._config.period_days if period_days is None else period_days
        rfr = self._config.risk_free_rate if risk_free_rate is None else risk_free_rate

        metrics = calculate_trade_metrics(trades)
        wolf = self._engine.evaluate(metrics, trades, balance)

        report = PerformanceReport(
            metrics=metrics,
            sharpe_ratio=calculate_sharpe_ratio(trades, rfr),
            calmar_ratio=calculate_calmar_ratio(trades, balance, days),
            hold_time=calculate_average_hold_time(trades),
            streaks=calculate_consecutive_streaks(trades),
            wolf_score=wolf,
            initial_balance=balance,
            period_days=days,
            balance=calculate_balance_summary(trades, balance),
            monthly=calculate_monthly_metrics(trades),
        )
        if self._config.include_breakdown:
            report.breakdown = self._aggregator.build(trades)
        if self._config.include_tag_metrics:
            report.tag_metrics = calculate_tag_metrics(trades)

        logger.info(
            "Performance analysis: trades=%d win_rate=%.1f pnl=%.2f wolf=%d grade=%s",
            metrics.total_trades,
            metrics.win_rate,
            metrics.total_pnl,
            wolf.score,
            wolf.grade.value,
        )
        return report
