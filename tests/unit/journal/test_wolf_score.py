"""Tests for the Wolf Score composite scoring engine."""

import pytest

from trading_journal.core.config import ScoringTables
from trading_journal.core.enums import Grade
from trading_journal.journal.metrics import TradeMetrics, calculate_trade_metrics
from trading_journal.journal.wolf_score import (
    WolfScoreEngine,
    _round_half_up,
    calculate_wolf_score,
)


class TestWinRateScore:
    def test_scales_against_basis(self, engine):
        assert engine.win_rate_score(30.0) == pytest.approx(50.0)

    def test_capped_at_100(self, engine):
        assert engine.win_rate_score(85.0) == 100.0

    def test_zero(self, engine):
        assert engine.win_rate_score(0.0) == 0.0


class TestProfitFactorScore:
    def test_inside_top_band(self, engine):
        assert engine.profit_factor_score(2.3) == pytest.approx(82.25)

    def test_band_boundaries(self, engine):
        assert engine.profit_factor_score(1.0) == pytest.approx(40.0)
        assert engine.profit_factor_score(1.5) == pytest.approx(60.0)
        assert engine.profit_factor_score(2.2) == pytest.approx(80.0)

    def test_below_one(self, engine):
        assert engine.profit_factor_score(0.5) == pytest.approx(20.0)

    def test_at_and_above_cap(self, engine):
        assert engine.profit_factor_score(2.6) == 100.0
        assert engine.profit_factor_score(999.0) == 100.0


class TestAvgWinLossScore:
    def test_ratio(self, engine):
        assert engine.avg_win_loss_score(150.0, -100.0) == pytest.approx(60.0)

    def test_accepts_absolute_loss(self, engine):
        assert engine.avg_win_loss_score(150.0, 100.0) == pytest.approx(60.0)

    def test_no_losses(self, engine):
        assert engine.avg_win_loss_score(100.0, 0.0) == 100.0

    def test_no_wins_no_losses(self, engine):
        assert engine.avg_win_loss_score(0.0, 0.0) == 0.0


class TestMaxDrawdownScore:
    def test_percent_of_balance(self, engine):
        assert engine.max_drawdown_score(2000.0, 10_000.0) == pytest.approx(80.0)

    def test_no_drawdown(self, engine):
        assert engine.max_drawdown_score(0.0, 10_000.0) == 100.0

    def test_drawdown_larger_than_balance(self, engine):
        assert engine.max_drawdown_score(15_000.0, 10_000.0) == 0.0

    def test_non_positive_balance_falls_back(self, engine):
        assert engine.max_drawdown_score(500.0, 0.0) == 50.0
        assert engine.max_drawdown_score(500.0, -1.0) == 50.0


class TestConsistencyScore:
    def test_coefficient_of_variation(self, engine, series_factory):
        # std 100 / total 400 = 0.25
        assert engine.consistency_score(series_factory([100.0, 300.0])) == pytest.approx(75.0)

    def test_single_trade(self, engine, series_factory):
        assert engine.consistency_score(series_factory([100.0])) == 100.0

    def test_flat_series(self, engine, series_factory):
        assert engine.consistency_score(series_factory([50.0, 50.0, 50.0])) == 100.0

    def test_no_net_profit(self, engine, series_factory):
        assert engine.consistency_score(series_factory([100.0, -100.0])) == 0.0
        assert engine.consistency_score(series_factory([-100.0, -300.0])) == 0.0

    def test_clamped_at_zero(self, engine, series_factory):
        assert engine.consistency_score(series_factory([1000.0, -990.0])) == 0.0

    def test_ignores_pending(self, engine, series_factory):
        assert engine.consistency_score(series_factory([100.0, None, 300.0])) == pytest.approx(75.0)


class TestComposite:
    def test_elite_trader(self, engine, series_factory):
        metrics = TradeMetrics(
            win_rate=70.0, profit_factor=3.0, avg_win=300.0, avg_loss=-100.0, max_drawdown=0.0,
        )
        result = engine.evaluate(metrics, series_factory([100.0, 100.0, 100.0]), 10_000.0)
        assert result.metrics.values() == [100.0] * 5
        assert result.score == 100
        assert result.grade == Grade.S
        assert result.description == "Elite"

    def test_mixed_trader(self, engine, series_factory):
        metrics = TradeMetrics(
            win_rate=45.0, profit_factor=1.5, avg_win=150.0, avg_loss=-100.0, max_drawdown=1000.0,
        )
        result = engine.evaluate(metrics, series_factory([100.0, 300.0]), 10_000.0)
        # 75, 60, 60, 90, 75
        assert result.score == 72
        assert result.grade == Grade.B
        assert result.description == "Good"

    def test_empty_trades(self, engine):
        result = engine.evaluate(TradeMetrics(), [], 10_000.0)
        # Only drawdown (100) and consistency (100) score
        assert result.score == 40
        assert result.grade == Grade.F

    def test_round_half_up(self):
        assert _round_half_up(72.5) == 73
        assert _round_half_up(73.5) == 74
        assert _round_half_up(72.49) == 72

    def test_calculate_wolf_score_wrapper(self, series_factory):
        trades = series_factory([100.0, 300.0, -50.0])
        metrics = calculate_trade_metrics(trades)
        direct = WolfScoreEngine().evaluate(metrics, trades, 10_000.0)
        assert calculate_wolf_score(trades, metrics, 10_000.0).score == direct.score


class TestInjectedTables:
    def test_custom_win_rate_basis(self, series_factory):
        engine = WolfScoreEngine(ScoringTables(win_rate_basis=50.0))
        assert engine.win_rate_score(50.0) == 100.0

    def test_tables_property(self):
        tables = ScoringTables(drawdown_fallback_score=0.0)
        engine = WolfScoreEngine(tables)
        assert engine.tables is tables
        assert engine.max_drawdown_score(100.0, 0.0) == 0.0


class TestSerialization:
    def test_to_dict(self, engine, series_factory):
        trades = series_factory([100.0, 300.0])
        result = engine.evaluate(calculate_trade_metrics(trades), trades, 10_000.0)
        d = result.to_dict()
        assert d["grade"] == result.grade.value
        assert set(d["metrics"]) == {
            "win_rate", "profit_factor", "avg_win_loss_ratio", "max_drawdown", "consistency",
        }

    def test_radar_data(self, engine, series_factory):
        trades = series_factory([100.0, 300.0])
        result = engine.evaluate(calculate_trade_metrics(trades), trades, 10_000.0)
        radar = result.radar_data()
        assert [axis["metric"] for axis in radar] == [
            "Win %", "Profit Factor", "Avg W/L", "Max DD", "Consistency",
        ]
        assert all(axis["full_mark"] == 100 for axis in radar)
        assert radar[4]["value"] == pytest.approx(75.0)
