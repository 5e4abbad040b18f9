"""Wolf Score — composite 0-100 trader quality score.

Five sub-scores, each normalized to 0-100, are averaged into one
composite and mapped to a letter grade:

    Sub-score            Raw input                       100 at
    ─────────────────────────────────────────────────────────────────
    Win Rate             win rate (%)                    >= 60 %
    Profit Factor        gross profit / gross loss       >= 2.6
    Avg Win/Loss         avg win / |avg loss|            >= 2.6
    Max Drawdown         drawdown as % of balance        0 %
    Consistency          CV of per-trade pnl             CV = 0

Profit factor and average win/loss ratio use banded piecewise-linear
scales; every band, threshold and grade boundary lives in
:class:`~trading_journal.core.config.ScoringTables` and can be swapped
by passing different tables to :class:`WolfScoreEngine`.

Usage::

    engine = WolfScoreEngine()
    result = engine.evaluate(metrics, trades, initial_balance=10_000)
    print(result.score, result.grade.value)   # 78 "B"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import numpy as np

from ..core.config import ScoringTables
from ..core.enums import Grade
from ..core.models import TradeRecord
from .metrics import TradeMetrics, population_std

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass
class WolfScoreMetrics:
    """The five sub-scores, each on a 0-100 scale."""

    win_rate: float = 0.0
    profit_factor: float = 0.0
    avg_win_loss_ratio: float = 0.0
    max_drawdown: float = 0.0
    consistency: float = 0.0

    def values(self) -> list[float]:
        return [
            self.win_rate,
            self.profit_factor,
            self.avg_win_loss_ratio,
            self.max_drawdown,
            self.consistency,
        ]


@dataclass
class WolfScoreResult:
    score: int
    metrics: WolfScoreMetrics
    grade: Grade
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON/API use."""
        return {
            "score": self.score,
            "grade": self.grade.value,
            "description": self.description,
            "metrics": {
                "win_rate": round(self.metrics.win_rate, 2),
                "profit_factor": round(self.metrics.profit_factor, 2),
                "avg_win_loss_ratio": round(self.metrics.avg_win_loss_ratio, 2),
                "max_drawdown": round(self.metrics.max_drawdown, 2),
                "consistency": round(self.metrics.consistency, 2),
            },
        }

    def radar_data(self) -> list[dict[str, Any]]:
        """One axis per sub-score, ready for a radar chart."""
        m = self.metrics
        return [
            {"metric": "Win %", "value": m.win_rate, "full_mark": 100},
            {"metric": "Profit Factor", "value": m.profit_factor, "full_mark": 100},
            {"metric": "Avg W/L", "value": m.avg_win_loss_ratio, "full_mark": 100},
            {"metric": "Max DD", "value": m.max_drawdown, "full_mark": 100},
            {"metric": "Consistency", "value": m.consistency, "full_mark": 100},
        ]


class WolfScoreEngine:
    """Maps trade metrics onto sub-scores, a composite and a grade.

    Parameters
    ----------
    tables : ScoringTables | None
        Bands, win-rate basis and grade thresholds.  Defaults to the
        standard tables.
    """

    def __init__(self, tables: ScoringTables | None = None) -> None:
        self._tables = tables or ScoringTables()

    @property
    def tables(self) -> ScoringTables:
        return self._tables

    # ------------------------------------------------------------------ #
    # Sub-scores                                                           #
    # ------------------------------------------------------------------ #

    def win_rate_score(self, win_rate: float) -> float:
        return _clamp(win_rate / self._tables.win_rate_basis * 100.0)

    def profit_factor_score(self, profit_factor: float) -> float:
        return _clamp(self._tables.profit_factor.score(profit_factor))

    def avg_win_loss_score(self, avg_win: float, avg_loss: float) -> float:
        """Score avg win / |avg loss|.  avg_loss may be given signed or absolute."""
        loss = abs(avg_loss)
        if loss == 0:
            return 100.0 if avg_win > 0 else 0.0
        return _clamp(self._tables.win_loss_ratio.score(avg_win / loss))

    def max_drawdown_score(self, max_drawdown: float, initial_balance: float) -> float:
        if initial_balance <= 0:
            return self._tables.drawdown_fallback_score
        dd_pct = abs(max_drawdown) / initial_balance * 100.0
        return _clamp(100.0 - dd_pct)

    def consistency_score(self, trades: list[TradeRecord]) -> float:
        """100 - CV x 100, CV = population std of pnl / |total pnl|.

        Fewer than two pnl samples or a flat series score 100.  A series
        with spread but no net profit scores 0.
        """
        pnl = np.array([t.pnl for t in trades if t.pnl is not None], dtype=float)
        std = population_std(pnl)
        if std == 0.0:
            return 100.0
        total = float(np.sum(pnl))
        if total <= 0:
            return 0.0
        return _clamp(100.0 - std / abs(total) * 100.0)

    # ------------------------------------------------------------------ #
    # Composite                                                            #
    # ------------------------------------------------------------------ #

    def evaluate(
        self,
        metrics: TradeMetrics,
        trades: list[TradeRecord],
        initial_balance: float,
    ) -> WolfScoreResult:
        """Compute all five sub-scores, the composite and its grade."""
        sub_scores = WolfScoreMetrics(
            win_rate=self.win_rate_score(metrics.win_rate),
            profit_factor=self.profit_factor_score(metrics.profit_factor),
            avg_win_loss_ratio=self.avg_win_loss_score(metrics.avg_win, metrics.avg_loss),
            max_drawdown=self.max_drawdown_score(metrics.max_drawdown, initial_balance),
            consistency=self.consistency_score(trades),
        )

        values = sub_scores.values()
        composite = _round_half_up(sum(values) / len(values))
        band = self._tables.grade_for(composite)

        logger.debug(
            "Wolf score: score=%d grade=%s win_rate=%.1f pf=%.1f wl=%.1f dd=%.1f cons=%.1f",
            composite,
            band.grade.value,
            *values,
        )

        return WolfScoreResult(
            score=composite,
            metrics=sub_scores,
            grade=band.grade,
            description=band.description,
        )


def calculate_wolf_score(
    trades: list[TradeRecord],
    metrics: TradeMetrics,
    initial_balance: float,
    tables: ScoringTables | None = None,
) -> WolfScoreResult:
    """Convenience wrapper around :meth:`WolfScoreEngine.evaluate`."""
    return WolfScoreEngine(tables).evaluate(metrics, trades, initial_balance)
