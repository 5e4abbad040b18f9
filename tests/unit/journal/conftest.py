"""Shared fixtures for journal tests."""

from datetime import date, timedelta

import pytest

from trading_journal.core.models import TradeRecord
from trading_journal.journal.breakdown import BreakdownAggregator
from trading_journal.journal.wolf_score import WolfScoreEngine


def make_trade(
    pnl: float | None = 100.0,
    entry_date: str = "2024-01-02",
    entry_time: str | None = "10:00",
    **overrides,
) -> TradeRecord:
    """Build a trade record; keyword overrides use the snake_case field names."""
    data = {
        "symbol": "EURUSD",
        "direction": "Long",
        "entry_price": 100.0,
        "stop_loss": 0.0,
        "lot": 1.0,
        "pnl": pnl,
        "entry_date": entry_date,
        "entry_time": entry_time,
    }
    data.update(overrides)
    return TradeRecord.model_validate(data)


def make_series(pnls: list[float | None], start: date = date(2024, 1, 1)) -> list[TradeRecord]:
    """One trade per day, in the given order."""
    return [
        make_trade(pnl=pnl, entry_date=(start + timedelta(days=i)).isoformat())
        for i, pnl in enumerate(pnls)
    ]


@pytest.fixture
def trade_factory():
    return make_trade


@pytest.fixture
def series_factory():
    return make_series


@pytest.fixture
def engine():
    return WolfScoreEngine()


@pytest.fixture
def aggregator():
    return BreakdownAggregator()
