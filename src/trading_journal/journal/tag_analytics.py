"""Per-tag performance.

A trade with tags ``("FVG", "OB")`` counts once towards ``FVG`` and once
towards ``OB``.  For full-combination analysis use the ``tag_combo``
level of :class:`~trading_journal.journal.breakdown.BreakdownAggregator`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from ..core.enums import TradeOutcome
from ..core.models import TradeRecord
from .metrics import PROFIT_FACTOR_SENTINEL


@dataclass
class TagMetrics:
    tag: str
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    win_rate: float = 0.0
    net_pnl: float = 0.0
    avg_pnl: float = 0.0
    profit_factor: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class _TagBucket:
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    net_pnl: float = 0.0
    gross_wins: float = 0.0
    gross_losses: float = 0.0

    def record(self, trade: TradeRecord) -> None:
        pnl = trade.pnl or 0.0
        self.total_trades += 1
        self.net_pnl += pnl
        if trade.outcome == TradeOutcome.WIN:
            self.wins += 1
            self.gross_wins += pnl
        elif trade.outcome == TradeOutcome.LOSS:
            self.losses += 1
            self.gross_losses += abs(pnl)
        elif trade.outcome == TradeOutcome.BREAKEVEN:
            self.breakeven += 1

    def to_metrics(self, tag: str) -> TagMetrics:
        decided = self.wins + self.losses
        if self.gross_losses > 0:
            profit_factor = self.gross_wins / self.gross_losses
        else:
            profit_factor = PROFIT_FACTOR_SENTINEL if self.gross_wins > 0 else 0.0
        return TagMetrics(
            tag=tag,
            total_trades=self.total_trades,
            wins=self.wins,
            losses=self.losses,
            breakeven=self.breakeven,
            win_rate=self.wins / decided * 100.0 if decided else 0.0,
            net_pnl=self.net_pnl,
            avg_pnl=self.net_pnl / self.total_trades if self.total_trades else 0.0,
            profit_factor=profit_factor,
        )


def get_all_unique_tags(trades: list[TradeRecord]) -> list[str]:
    """Every individual tag in use, sorted alphabetically."""
    return sorted({tag for trade in trades for tag in trade.tags})


def calculate_tag_metrics(trades: list[TradeRecord]) -> list[TagMetrics]:
    """Metrics for each individual tag, most used first.

    Ties keep the order in which the tags were first seen.
    """
    buckets: dict[str, _TagBucket] = {}
    for trade in trades:
        for tag in trade.tags:
            buckets.setdefault(tag, _TagBucket()).record(trade)

    metrics = [bucket.to_metrics(tag) for tag, bucket in buckets.items()]
    metrics.sort(key=lambda m: -m.total_trades)
    return metrics
