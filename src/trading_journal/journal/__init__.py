"""Trading Performance Analytics — metrics, Wolf Score and breakdowns.

Every calculator here is a pure function of a trade list: nothing is
cached between calls and degenerate input (no trades, zero variance,
zero balance) yields a documented default instead of an exception.

Key components
--------------
**Metrics**

calculate_trade_metrics      Outcome tallies, win rate, profit factor, drawdown
calculate_sharpe_ratio       Per-trade Sharpe ratio (not annualized)
calculate_calmar_ratio       Annualized return over max drawdown
calculate_average_hold_time  Hold time of winners, losers and all trades
calculate_consecutive_streaks  Longest and current win/loss streaks
calculate_monthly_metrics    Trades, win rate and pnl per entry month
calculate_balance_summary    Current balance and pnl as % of the initial balance

**Scoring**

WolfScoreEngine       Five 0-100 sub-scores, composite and letter grade

**Breakdown**

BreakdownAggregator   Six-level drill-down tree and (HTF, PD array) x LTF heatmap
calculate_tag_metrics Per-tag performance

**Report**

PerformanceAnalyzer   Runs everything above over one trade list
"""

from .analyzer import PerformanceAnalyzer, PerformanceReport
from .breakdown import (
    BaseStats,
    BreakdownAggregator,
    BreakdownNode,
    BreakdownResult,
    Heatmap,
    HeatmapCell,
)
from .metrics import (
    BalanceSummary,
    MonthlyMetrics,
    HoldTimeStats,
    StreakStats,
    TradeMetrics,
    calculate_average_hold_time,
    calculate_balance_summary,
    calculate_calmar_ratio,
    calculate_consecutive_streaks,
    calculate_max_drawdown,
    calculate_monthly_metrics,
    calculate_r_multiple,
    calculate_sharpe_ratio,
    calculate_trade_duration,
    calculate_trade_metrics,
    calculate_trade_pnl,
    determine_trade_outcome,
    filter_trades,
    group_trades_by_day,
)
from .tag_analytics import TagMetrics, calculate_tag_metrics, get_all_unique_tags
from .timeframes import (
    TimeframeAlignment,
    classify_timeframe,
    detect_session,
    get_timeframe_alignment,
    sort_timeframes,
)
from .wolf_score import WolfScoreEngine, WolfScoreMetrics, WolfScoreResult, calculate_wolf_score

__all__ = [
    "PerformanceAnalyzer",
    "PerformanceReport",
    "BaseStats",
    "BreakdownAggregator",
    "BreakdownNode",
    "BreakdownResult",
    "Heatmap",
    "HeatmapCell",
    "BalanceSummary",
    "HoldTimeStats",
    "MonthlyMetrics",
    "StreakStats",
    "TradeMetrics",
    "calculate_average_hold_time",
    "calculate_balance_summary",
    "calculate_calmar_ratio",
    "calculate_consecutive_streaks",
    "calculate_max_drawdown",
    "calculate_monthly_metrics",
    "calculate_r_multiple",
    "calculate_sharpe_ratio",
    "calculate_trade_duration",
    "calculate_trade_metrics",
    "calculate_trade_pnl",
    "determine_trade_outcome",
    "filter_trades",
    "group_trades_by_day",
    "TagMetrics",
    "calculate_tag_metrics",
    "get_all_unique_tags",
    "TimeframeAlignment",
    "classify_timeframe",
    "detect_session",
    "get_timeframe_alignment",
    "sort_timeframes",
    "WolfScoreEngine",
    "WolfScoreMetrics",
    "WolfScoreResult",
    "calculate_wolf_score",
]
