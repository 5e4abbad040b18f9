"""Test Settings loading and the scoring/timeframe lookup tables."""

import pytest
from pydantic import ValidationError

from trading_journal.core.config import (
    DEFAULT_TIMEFRAMES,
    BandedScale,
    GradeBand,
    ScoreBand,
    ScoringTables,
    Settings,
    TimeframeRank,
    TimeframeTable,
    load_settings,
)
from trading_journal.core.enums import Grade
from trading_journal.core.errors import ConfigError


class TestSettingsDefaults:
    def test_default_settings(self):
        settings = Settings()
        assert settings.analytics.initial_balance == 10_000.0
        assert settings.analytics.risk_free_rate == 0.0
        assert settings.analytics.period_days == 365
        assert settings.observability.log_format == "json"

    def test_default_labels(self):
        labels = Settings().labels
        assert labels.not_available == "N/A"
        assert labels.no_confluence == "No Confluences"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("JOURNAL_ANALYTICS__INITIAL_BALANCE", "25000")
        monkeypatch.setenv("JOURNAL_OBSERVABILITY__LOG_LEVEL", "DEBUG")
        settings = Settings()
        assert settings.analytics.initial_balance == 25_000.0
        assert settings.observability.log_level == "DEBUG"


class TestLoadSettings:
    def test_missing_path_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.toml")
        assert settings.analytics.initial_balance == 10_000.0

    def test_load_from_toml(self, tmp_path):
        path = tmp_path / "journal.toml"
        path.write_text(
            "[analytics]\n"
            "initial_balance = 5000.0\n"
            "period_days = 90\n"
            "[scoring]\n"
            "win_rate_basis = 55.0\n"
        )
        settings = load_settings(path)
        assert settings.analytics.initial_balance == 5000.0
        assert settings.analytics.period_days == 90
        assert settings.scoring.win_rate_basis == 55.0

    def test_overrides_win(self, tmp_path):
        path = tmp_path / "journal.toml"
        path.write_text("[analytics]\ninitial_balance = 5000.0\n")
        settings = load_settings(path, overrides={"analytics": {"initial_balance": 1.0}})
        assert settings.analytics.initial_balance == 1.0

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[analytics\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_settings(path)

    def test_invalid_table(self):
        with pytest.raises(ConfigError):
            load_settings(overrides={"scoring": {"win_rate_basis": 0}})


class TestBandedScale:
    def test_interpolates_within_band(self):
        band = ScoreBand(lower=1.0, upper=2.0, score_low=10.0, score_high=20.0)
        assert band.interpolate(1.5) == pytest.approx(15.0)

    def test_band_bounds_validated(self):
        with pytest.raises(ValidationError):
            ScoreBand(lower=2.0, upper=1.0, score_low=0.0, score_high=1.0)

    def test_bands_must_be_contiguous(self):
        with pytest.raises(ValidationError, match="contiguous"):
            BandedScale(
                bands=(
                    ScoreBand(lower=0.0, upper=1.0, score_low=0.0, score_high=50.0),
                    ScoreBand(lower=1.5, upper=2.0, score_low=50.0, score_high=90.0),
                ),
                cap_threshold=2.0,
            )

    def test_band_past_cap(self):
        with pytest.raises(ValidationError, match="cap threshold"):
            BandedScale(
                bands=(ScoreBand(lower=0.0, upper=3.0, score_low=0.0, score_high=90.0),),
                cap_threshold=2.0,
            )

    def test_score(self):
        scale = BandedScale(
            bands=(ScoreBand(lower=0.0, upper=2.0, score_low=0.0, score_high=80.0),),
            cap_threshold=3.0,
        )
        assert scale.score(1.0) == pytest.approx(40.0)
        assert scale.score(-1.0) == 0.0
        assert scale.score(2.5) == 80.0  # gap below the cap
        assert scale.score(3.0) == 100.0


class TestScoringTables:
    @pytest.mark.parametrize(
        "score,grade,description",
        [
            (100, Grade.S, "Elite"),
            (90, Grade.S, "Elite"),
            (89, Grade.A, "Excellent"),
            (70, Grade.B, "Good"),
            (60, Grade.C, "Average"),
            (50, Grade.D, "Below Average"),
            (49, Grade.F, "Needs Improvement"),
            (0, Grade.F, "Needs Improvement"),
        ],
    )
    def test_grade_for(self, score, grade, description):
        band = ScoringTables().grade_for(score)
        assert band.grade == grade
        assert band.description == description

    def test_grades_must_descend(self):
        with pytest.raises(ValidationError, match="descending"):
            ScoringTables(grades=(
                GradeBand(min_score=50.0, grade=Grade.A),
                GradeBand(min_score=60.0, grade=Grade.B),
                GradeBand(min_score=0.0, grade=Grade.F),
            ))

    def test_lowest_grade_starts_at_zero(self):
        with pytest.raises(ValidationError, match="start at 0"):
            ScoringTables(grades=(GradeBand(min_score=50.0, grade=Grade.A),))

    def test_tables_are_frozen(self):
        tables = ScoringTables()
        with pytest.raises(ValidationError):
            tables.win_rate_basis = 10.0


class TestTimeframeTable:
    def test_rank_with_aliases(self):
        assert DEFAULT_TIMEFRAMES.rank("Daily") == DEFAULT_TIMEFRAMES.rank("D1") == 80
        assert DEFAULT_TIMEFRAMES.rank(" h4 ") == 70
        assert DEFAULT_TIMEFRAMES.rank("Tick") is None
        assert DEFAULT_TIMEFRAMES.rank(None) is None

    def test_minutes_and_monthly_do_not_collide(self):
        assert DEFAULT_TIMEFRAMES.rank("M1") == 10
        assert DEFAULT_TIMEFRAMES.rank("MN") == 100

    def test_canonical(self):
        assert DEFAULT_TIMEFRAMES.canonical("H4") == "4H"
        assert DEFAULT_TIMEFRAMES.canonical("m15") == "15m"
        assert DEFAULT_TIMEFRAMES.canonical(" Tick ") == "Tick"

    def test_duplicate_alias_rejected(self):
        with pytest.raises(ValidationError, match="listed twice"):
            TimeframeTable(ranks=(
                TimeframeRank(label="4H", rank=70, aliases=("H4",)),
                TimeframeRank(label="H4", rank=60),
            ))

    def test_sort(self):
        assert DEFAULT_TIMEFRAMES.sort(["M5", "Custom", "Weekly", "H1"]) == ["Weekly", "H1", "M5", "Custom"]
