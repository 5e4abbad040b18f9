"""Property tests: analytics invariants over arbitrary trade lists.

Every calculator must be total (finite output for any input), Sharpe
must never rise with the risk-free rate, merged breakdown stats must
carry a count-weighted average R, and timeframe ordering must put known
labels coarsest first with unknown labels after them in input order.
"""

import math
from datetime import date, timedelta

from hypothesis import given, settings, strategies as st

from trading_journal.core.config import DEFAULT_TIMEFRAMES
from trading_journal.core.models import TradeRecord
from trading_journal.journal.breakdown import BreakdownAggregator, compute_stats
from trading_journal.journal.metrics import (
    calculate_calmar_ratio,
    calculate_max_drawdown,
    calculate_sharpe_ratio,
    calculate_trade_metrics,
)
from trading_journal.journal.wolf_score import WolfScoreEngine

# Cent-rounded, as a journal stores them
_pnl = st.one_of(
    st.none(),
    st.floats(min_value=-1e6, max_value=1e6, allow_nan=False).map(lambda x: round(x, 2)),
)
_balance = st.one_of(st.sampled_from([0.0, -500.0]), st.floats(min_value=1.0, max_value=1e6))
_known_tf = st.sampled_from(["Monthly", "Weekly", "Daily", "H4", "4H", "1H", "M30", "15m", "M5", "1m"])
_unknown_tf = st.sampled_from(["Tick", "Range", "Renko", "N/A"])


def _trades(pnls: list[float | None], r_multiples: list[float | None] | None = None) -> list[TradeRecord]:
    start = date(2024, 1, 1)
    r_multiples = r_multiples or [None] * len(pnls)
    return [
        TradeRecord(
            entry_date=start + timedelta(days=i % 60),
            entry_time=f"{i % 24:02d}:00",
            pnl=pnl,
            r_multiple=r,
            htf=["Daily", "H4", None][i % 3],
            ltf=["M15", "M5"][i % 2],
            session=["London", "New York"][i % 2],
            tags=["OB", "FVG, OB", ""][i % 3],
        )
        for i, (pnl, r) in enumerate(zip(pnls, r_multiples))
    ]


@given(
    pnls=st.lists(_pnl, max_size=40),
    low=st.floats(min_value=-1e4, max_value=1e4, allow_nan=False),
    delta=st.floats(min_value=0, max_value=1e4, allow_nan=False),
)
@settings(max_examples=100)
def test_sharpe_non_increasing_in_risk_free_rate(pnls, low, delta):
    trades = _trades(pnls)
    assert calculate_sharpe_ratio(trades, low + delta) <= calculate_sharpe_ratio(trades, low) + 1e-9


@given(pnls=st.lists(_pnl, max_size=40), balance=_balance)
@settings(max_examples=100)
def test_calculators_are_total(pnls, balance):
    trades = _trades(pnls)
    metrics = calculate_trade_metrics(trades)
    for value in metrics.to_dict().values():
        assert math.isfinite(value)
    assert math.isfinite(calculate_sharpe_ratio(trades))
    assert math.isfinite(calculate_calmar_ratio(trades, balance))
    assert calculate_max_drawdown(trades) >= 0.0

    result = WolfScoreEngine().evaluate(metrics, trades, balance)
    assert 0 <= result.score <= 100
    assert all(0.0 <= v <= 100.0 for v in result.metrics.values())


@given(
    left=st.lists(st.floats(min_value=-10, max_value=10, allow_nan=False), min_size=1, max_size=20),
    right=st.lists(st.floats(min_value=-10, max_value=10, allow_nan=False), min_size=1, max_size=20),
)
@settings(max_examples=100)
def test_merge_matches_pooled_average(left, right):
    a = compute_stats(_trades([1.0] * len(left), left))
    b = compute_stats(_trades([1.0] * len(right), right))
    merged = a.merge(b)
    pooled = sum(left + right) / len(left + right)
    assert merged.r_count == len(left) + len(right)
    assert math.isclose(merged.avg_r_multiple, pooled, rel_tol=1e-9, abs_tol=1e-9)


@given(labels=st.lists(st.one_of(_known_tf, _unknown_tf), max_size=20))
def test_timeframe_order(labels):
    ordered = DEFAULT_TIMEFRAMES.sort(labels)
    assert sorted(ordered) == sorted(labels)

    ranks = [DEFAULT_TIMEFRAMES.rank(label) for label in ordered]
    known = [r for r in ranks if r is not None]
    assert known == sorted(known, reverse=True)
    # Every unknown label comes after every known one
    if None in ranks:
        assert all(r is None for r in ranks[ranks.index(None):])
    unknown_in = [label for label in labels if DEFAULT_TIMEFRAMES.rank(label) is None]
    unknown_out = [label for label in ordered if DEFAULT_TIMEFRAMES.rank(label) is None]
    assert unknown_out == unknown_in


@given(pnls=st.lists(_pnl, max_size=30))
@settings(max_examples=50)
def test_tree_counts_add_up(pnls):
    tree = BreakdownAggregator().build_tree(_trades(pnls))
    assert tree.stats.count == len(pnls)

    stack = [tree]
    while stack:
        node = stack.pop()
        if node.children:
            assert sum(c.stats.count for c in node.children.values()) == node.stats.count
            stack.extend(node.children.values())


@given(pnls=st.lists(_pnl, max_size=30))
@settings(max_examples=50)
def test_heatmap_cells_cover_every_trade(pnls):
    heatmap = BreakdownAggregator().build_heatmap(_trades(pnls))
    assert sum(cell.stats.count for cell in heatmap.cells.values()) == len(pnls)
    assert len(heatmap.cells) <= len(heatmap.rows) * len(heatmap.columns)
