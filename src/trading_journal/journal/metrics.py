"""Trade metrics — pure functions over a list of trade records.

Every function here is total: an empty list, a zero-variance series or
a missing timestamp yields the documented default (usually 0), never an
exception or NaN.  Order-sensitive functions sort their input by entry
date/time themselves; callers may pass trades in any order.

Usage::

    metrics = calculate_trade_metrics(trades)
    sharpe = calculate_sharpe_ratio(trades)
    calmar = calculate_calmar_ratio(trades, initial_balance=10_000)
    streaks = calculate_consecutive_streaks(trades)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from ..core.enums import Direction, StreakType, TradeOutcome
from ..core.models import TradeFilters, TradeRecord

logger = logging.getLogger(__name__)

# Reported when wins exist and losses are zero
PROFIT_FACTOR_SENTINEL = 999.0

# Below this a standard deviation counts as zero
_ZERO_STD = 1e-12


@dataclass
class TradeMetrics:
    """Scalar performance snapshot for one evaluation window."""

    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    pending: int = 0
    win_rate: float = 0.0  # Percent of decided (win + loss) trades
    total_pnl: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0  # Negative (mean of losing pnl)
    profit_factor: float = 0.0
    max_drawdown: float = 0.0  # Absolute, in pnl units
    expectancy: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    recovery_factor: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class HoldTimeStats:
    """Average hold times in minutes."""

    avg_winner_minutes: float = 0.0
    avg_loser_minutes: float = 0.0
    avg_all_minutes: float = 0.0
    winner_count: int = 0
    loser_count: int = 0
    total_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class StreakStats:
    max_win_streak: int = 0
    max_loss_streak: int = 0
    current_streak_type: StreakType = StreakType.NONE
    current_streak_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_win_streak": self.max_win_streak,
            "max_loss_streak": self.max_loss_streak,
            "current_streak": {
                "type": self.current_streak_type.value,
                "count": self.current_streak_count,
            },
        }


# ------------------------------------------------------------------ #
# Helpers                                                              #
# ------------------------------------------------------------------ #

def sort_chronologically(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    """Stable sort by entry date, then entry time (missing time = 00:00)."""
    return sorted(trades, key=lambda t: t.entry_datetime)


def _pnl_series(trades: Iterable[TradeRecord]) -> np.ndarray:
    """Chronological pnl samples, skipping trades without a pnl."""
    return np.array(
        [t.pnl for t in sort_chronologically(trades) if t.pnl is not None],
        dtype=float,
    )


def population_std(values: np.ndarray) -> float:
    if len(values) < 2:
        return 0.0
    std = float(np.std(values, ddof=0))
    return std if std > _ZERO_STD else 0.0


# ------------------------------------------------------------------ #
# Per-trade calculations                                               #
# ------------------------------------------------------------------ #

def calculate_trade_pnl(trade: TradeRecord, asset_multiplier: float = 1.0) -> float:
    """Price-based P&L; 0 while the trade has no exit price."""
    if trade.exit_price is None:
        return 0.0
    if trade.direction == Direction.LONG:
        move = trade.exit_price - trade.entry_price
    else:
        move = trade.entry_price - trade.exit_price
    return move * trade.lot * asset_multiplier


def determine_trade_outcome(trade: TradeRecord) -> TradeOutcome:
    """Pending without an exit price, otherwise by the sign of pnl."""
    if trade.exit_price is None:
        return TradeOutcome.PENDING
    pnl = trade.pnl or 0.0
    if pnl > 0:
        return TradeOutcome.WIN
    if pnl < 0:
        return TradeOutcome.LOSS
    return TradeOutcome.BREAKEVEN


def calculate_r_multiple(trade: TradeRecord) -> float | None:
    """R-multiple of a trade, or None when it cannot be determined.

    An explicit ``r_multiple`` on the record wins.  Otherwise pnl is
    divided by the amount risked (stop distance x lot size).
    """
    if trade.r_multiple is not None:
        return trade.r_multiple
    if not trade.pnl or not trade.entry_price or not trade.stop_loss or not trade.lot:
        return None
    risk = abs(trade.entry_price - trade.stop_loss) * trade.lot
    if risk <= 0:
        return None
    return trade.pnl / risk


def calculate_trade_duration(trade: TradeRecord) -> int:
    """Whole minutes between entry and exit (floored).

    Returns 0 when the exit date or exit time is missing.  A missing
    entry time counts as midnight.
    """
    exit_at = trade.exit_datetime
    if exit_at is None:
        return 0
    seconds = (exit_at - trade.entry_datetime).total_seconds()
    return int(seconds // 60)


# ------------------------------------------------------------------ #
# Series calculations                                                  #
# ------------------------------------------------------------------ #

def calculate_max_drawdown(trades: Iterable[TradeRecord]) -> float:
    """Largest peak-to-trough decline of cumulative pnl.

    The equity curve starts at a zero baseline, so a losing first trade
    is already a drawdown from the baseline peak.
    """
    pnl = _pnl_series(trades)
    if len(pnl) == 0:
        return 0.0
    equity = np.concatenate(([0.0], np.cumsum(pnl)))
    running_peak = np.maximum.accumulate(equity)
    return float(np.max(running_peak - equity))


def calculate_trade_metrics(trades: list[TradeRecord]) -> TradeMetrics:
    """Tally outcomes and compute pnl-based summary metrics."""
    result = TradeMetrics(total_trades=len(trades))
    if not trades:
        return result

    for trade in trades:
        if trade.outcome == TradeOutcome.WIN:
            result.wins += 1
        elif trade.outcome == TradeOutcome.LOSS:
            result.losses += 1
        elif trade.outcome == TradeOutcome.BREAKEVEN:
            result.breakeven += 1
        else:
            result.pending += 1

    decided = result.wins + result.losses
    if decided > 0:
        result.win_rate = result.wins / decided * 100.0

    pnl = np.array([t.pnl for t in trades if t.pnl is not None], dtype=float)
    skipped = len(trades) - len(pnl)
    if skipped:
        logger.debug("Trade metrics: %d of %d trades have no pnl and are excluded", skipped, len(trades))
    if len(pnl) == 0:
        return result

    wins = pnl[pnl > 0]
    losses = pnl[pnl < 0]

    result.total_pnl = float(np.sum(pnl))
    result.expectancy = float(np.mean(pnl))
    if len(wins) > 0:
        result.avg_win = float(np.mean(wins))
        result.largest_win = float(np.max(wins))
    if len(losses) > 0:
        result.avg_loss = float(np.mean(losses))
        result.largest_loss = float(np.min(losses))

    gross_profit = float(np.sum(wins)) if len(wins) > 0 else 0.0
    gross_loss = abs(float(np.sum(losses))) if len(losses) > 0 else 0.0
    if gross_loss > 0:
        result.profit_factor = gross_profit / gross_loss
    elif gross_profit > 0:
        result.profit_factor = PROFIT_FACTOR_SENTINEL

    result.max_drawdown = calculate_max_drawdown(trades)
    if result.max_drawdown > 0:
        result.recovery_factor = result.total_pnl / result.max_drawdown

    return result


def calculate_sharpe_ratio(trades: list[TradeRecord], risk_free_rate: float = 0.0) -> float:
    """Per-trade Sharpe ratio: (mean pnl - risk_free_rate) / population std.

    Each trade's pnl is one return sample.  No annualization is applied.
    Returns 0 for fewer than two samples or a zero-variance series.
    """
    pnl = _pnl_series(trades)
    if len(pnl) < 2:
        return 0.0
    std = population_std(pnl)
    if std == 0.0:
        return 0.0
    return (float(np.mean(pnl)) - risk_free_rate) / std


def calculate_calmar_ratio(
    trades: list[TradeRecord],
    initial_balance: float,
    period_days: int = 365,
) -> float:
    """Annualized return (%) divided by max drawdown (% of balance).

    Returns 0 for no trades, a non-positive balance or period, or a
    series that never drew down.
    """
    if not trades or initial_balance <= 0 or period_days <= 0:
        return 0.0

    max_dd = calculate_max_drawdown(trades)
    if max_dd == 0:
        return 0.0

    total_pnl = sum(t.pnl for t in trades if t.pnl is not None)
    total_return_pct = total_pnl / initial_balance * 100.0
    annualized_return_pct = total_return_pct * (365.0 / period_days)
    max_dd_pct = max_dd / initial_balance * 100.0
    return annualized_return_pct / max_dd_pct


def calculate_average_hold_time(trades: list[TradeRecord]) -> HoldTimeStats:
    """Average hold time of winners, losers and all timed trades.

    Trades without both an exit date and an exit time are left out of
    every average rather than counted as zero.
    """
    winners: list[int] = []
    losers: list[int] = []
    timed: list[int] = []

    for trade in trades:
        if trade.exit_datetime is None:
            continue
        minutes = calculate_trade_duration(trade)
        timed.append(minutes)
        if trade.outcome == TradeOutcome.WIN:
            winners.append(minutes)
        elif trade.outcome == TradeOutcome.LOSS:
            losers.append(minutes)

    untimed = len(trades) - len(timed)
    if untimed:
        logger.debug("Hold time: %d of %d trades have no exit timestamp and are excluded", untimed, len(trades))

    return HoldTimeStats(
        avg_winner_minutes=float(np.mean(winners)) if winners else 0.0,
        avg_loser_minutes=float(np.mean(losers)) if losers else 0.0,
        avg_all_minutes=float(np.mean(timed)) if timed else 0.0,
        winner_count=len(winners),
        loser_count=len(losers),
        total_count=len(timed),
    )


def calculate_consecutive_streaks(trades: list[TradeRecord]) -> StreakStats:
    """Longest and current win/loss streaks in chronological order.

    A breakeven or pending trade ends the running streak and does not
    start a new one.
    """
    result = StreakStats()
    streak_type = StreakType.NONE
    count = 0

    for trade in sort_chronologically(trades):
        if trade.outcome == TradeOutcome.WIN:
            kind = StreakType.WIN
        elif trade.outcome == TradeOutcome.LOSS:
            kind = StreakType.LOSS
        else:
            streak_type, count = StreakType.NONE, 0
            continue

        if kind == streak_type:
            count += 1
        else:
            streak_type, count = kind, 1

        if kind == StreakType.WIN:
            result.max_win_streak = max(result.max_win_streak, count)
        else:
            result.max_loss_streak = max(result.max_loss_streak, count)

    result.current_streak_type = streak_type
    result.current_streak_count = count
    return result


# ------------------------------------------------------------------ #
# Selection                                                            #
# ------------------------------------------------------------------ #

def filter_trades(trades: list[TradeRecord], filters: TradeFilters) -> list[TradeRecord]:
    return [t for t in trades if filters.matches(t)]


def group_trades_by_day(trades: list[TradeRecord]) -> dict[str, list[TradeRecord]]:
    """Group trades by entry date (ISO ``YYYY-MM-DD`` keys, ascending)."""
    by_day: dict[str, list[TradeRecord]] = defaultdict(list)
    for trade in trades:
        by_day[trade.entry_date.isoformat()].append(trade)
    return dict(sorted(by_day.items()))


# ------------------------------------------------------------------ #
# Period summaries                                                     #
# ------------------------------------------------------------------ #

@dataclass
class MonthlyMetrics:
    month: str  # "YYYY-MM"
    label: str  # "January 2024"
    trades: int = 0
    wins: int = 0
    losses: int = 0
    pnl: float = 0.0
    win_rate: float = 0.0  # Percent of decided (win + loss) trades

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BalanceSummary:
    """Account balance implied by the starting balance plus realized pnl."""

    initial_balance: float = 0.0
    pnl: float = 0.0
    pnl_percent: float = 0.0  # Of the initial balance; 0 when balance <= 0
    current_balance: float = 0.0
    is_profit: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def calculate_monthly_metrics(trades: list[TradeRecord]) -> list[MonthlyMetrics]:
    """Per-month tallies keyed by entry month, oldest month first.

    Pending trades count towards ``trades`` but not towards pnl.
    """
    by_month: dict[str, list[TradeRecord]] = defaultdict(list)
    for trade in trades:
        by_month[trade.entry_date.strftime("%Y-%m")].append(trade)

    result: list[MonthlyMetrics] = []
    for month in sorted(by_month):
        members = by_month[month]
        wins = sum(1 for t in members if t.outcome == TradeOutcome.WIN)
        losses = sum(1 for t in members if t.outcome == TradeOutcome.LOSS)
        decided = wins + losses
        result.append(MonthlyMetrics(
            month=month,
            label=members[0].entry_date.strftime("%B %Y"),
            trades=len(members),
            wins=wins,
            losses=losses,
            pnl=float(sum(t.pnl for t in members if t.pnl is not None)),
            win_rate=wins / decided * 100.0 if decided else 0.0,
        ))
    return result


def calculate_balance_summary(trades: list[TradeRecord], initial_balance: float) -> BalanceSummary:
    pnl = float(sum(t.pnl for t in trades if t.pnl is not None))
    return BalanceSummary(
        initial_balance=initial_balance,
        pnl=pnl,
        pnl_percent=pnl / initial_balance * 100.0 if initial_balance > 0 else 0.0,
        current_balance=initial_balance + pnl,
        is_profit=pnl > 0,
    )
