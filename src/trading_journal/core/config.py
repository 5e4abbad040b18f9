"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.

The scoring bands, grade thresholds and timeframe priorities are
frozen lookup tables.  Components receive them by injection, so a test
or a caller can swap any of them without touching the engine.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import cached_property
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings

from .enums import Grade
from .errors import ConfigError


# ---------------------------------------------------------------------------
# Scoring tables
# ---------------------------------------------------------------------------

class ScoreBand(BaseModel):
    """One linear segment of a banded scale: [lower, upper) -> [score_low, score_high]."""

    model_config = ConfigDict(frozen=True)

    lower: float
    upper: float
    score_low: float
    score_high: float

    @model_validator(mode="after")
    def _check_bounds(self) -> ScoreBand:
        if self.upper <= self.lower:
            raise ValueError(f"band upper {self.upper} must exceed lower {self.lower}")
        return self

    def interpolate(self, value: float) -> float:
        if value <= self.lower:
            return self.score_low
        if value >= self.upper:
            return self.score_high
        span = self.upper - self.lower
        return self.score_low + (value - self.lower) * (self.score_high - self.score_low) / span


class BandedScale(BaseModel):
    """Piecewise-linear mapping of a raw ratio onto a 0-100 score.

    Values at or above ``cap_threshold`` score ``cap_score``.  Values
    below the first band score that band's ``score_low``.
    """

    model_config = ConfigDict(frozen=True)

    bands: tuple[ScoreBand, ...]
    cap_threshold: float
    cap_score: float = 100.0

    @model_validator(mode="after")
    def _check_contiguous(self) -> BandedScale:
        if not self.bands:
            raise ValueError("a banded scale needs at least one band")
        for prev, nxt in zip(self.bands, self.bands[1:]):
            if nxt.lower != prev.upper:
                raise ValueError(
                    f"bands must be ascending and contiguous: "
                    f"{prev.upper} is followed by {nxt.lower}"
                )
        if self.bands[-1].upper > self.cap_threshold:
            raise ValueError("last band extends past the cap threshold")
        return self

    def score(self, value: float) -> float:
        if value >= self.cap_threshold:
            return self.cap_score
        if value < self.bands[0].lower:
            return self.bands[0].score_low
        for band in self.bands:
            if band.lower <= value < band.upper:
                return band.interpolate(value)
        # Gap between the last band and the cap
        return self.bands[-1].score_high


class GradeBand(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_score: float
    grade: Grade
    description: str = ""


DEFAULT_RATIO_SCALE = BandedScale(
    bands=(
        ScoreBand(lower=0.0, upper=1.0, score_low=0.0, score_high=40.0),
        ScoreBand(lower=1.0, upper=1.5, score_low=40.0, score_high=60.0),
        ScoreBand(lower=1.5, upper=2.2, score_low=60.0, score_high=80.0),
        ScoreBand(lower=2.2, upper=2.6, score_low=80.0, score_high=89.0),
    ),
    cap_threshold=2.6,
    cap_score=100.0,
)

DEFAULT_GRADE_BANDS: tuple[GradeBand, ...] = (
    GradeBand(min_score=90.0, grade=Grade.S, description="Elite"),
    GradeBand(min_score=80.0, grade=Grade.A, description="Excellent"),
    GradeBand(min_score=70.0, grade=Grade.B, description="Good"),
    GradeBand(min_score=60.0, grade=Grade.C, description="Average"),
    GradeBand(min_score=50.0, grade=Grade.D, description="Below Average"),
    GradeBand(min_score=0.0, grade=Grade.F, description="Needs Improvement"),
)


class ScoringTables(BaseModel):
    """Every lookup table the Wolf Score engine reads."""

    model_config = ConfigDict(frozen=True)

    win_rate_basis: float = 60.0  # Win rate (%) that maxes the sub-score
    profit_factor: BandedScale = DEFAULT_RATIO_SCALE
    win_loss_ratio: BandedScale = DEFAULT_RATIO_SCALE
    grades: tuple[GradeBand, ...] = DEFAULT_GRADE_BANDS
    drawdown_fallback_score: float = 50.0  # Used when balance <= 0

    @model_validator(mode="after")
    def _check_grades(self) -> ScoringTables:
        if self.win_rate_basis <= 0:
            raise ValueError("win_rate_basis must be positive")
        if not self.grades:
            raise ValueError("grade table is empty")
        thresholds = [g.min_score for g in self.grades]
        if any(b >= a for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError("grade thresholds must be strictly descending")
        if thresholds[-1] > 0:
            raise ValueError("lowest grade must start at 0")
        return self

    def grade_for(self, score: float) -> GradeBand:
        for band in self.grades:
            if score >= band.min_score:
                return band
        return self.grades[-1]


# ---------------------------------------------------------------------------
# Timeframe priority
# ---------------------------------------------------------------------------

def normalize_timeframe_key(label: str) -> str:
    return "".join(label.split()).lower()


class TimeframeRank(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str  # Canonical display label
    rank: int  # Higher = coarser
    aliases: tuple[str, ...] = ()


class TimeframeTable(BaseModel):
    """Immutable timeframe -> priority lookup (coarser ranks higher)."""

    model_config = ConfigDict(frozen=True)

    ranks: tuple[TimeframeRank, ...]
    htf_min_rank: int = 70  # H4 and above count as higher timeframes

    @model_validator(mode="after")
    def _check_unique(self) -> TimeframeTable:
        seen: set[str] = set()
        for entry in self.ranks:
            for key in {normalize_timeframe_key(a) for a in (entry.label, *entry.aliases)}:
                if key in seen:
                    raise ValueError(f"timeframe alias {key!r} is listed twice")
                seen.add(key)
        return self

    @cached_property
    def alias_index(self) -> dict[str, TimeframeRank]:
        lookup: dict[str, TimeframeRank] = {}
        for entry in self.ranks:
            for alias in (entry.label, *entry.aliases):
                lookup[normalize_timeframe_key(alias)] = entry
        return lookup

    def entry(self, label: str | None) -> TimeframeRank | None:
        if not label:
            return None
        return self.alias_index.get(normalize_timeframe_key(label))

    def rank(self, label: str | None) -> int | None:
        """Priority of ``label``, or None when it is not recognized."""
        found = self.entry(label)
        return found.rank if found is not None else None

    def canonical(self, label: str) -> str:
        """Canonical label for a known alias; unknown labels pass through trimmed."""
        found = self.entry(label)
        return found.label if found is not None else label.strip()

    def sort(self, labels: Iterable[str], coarsest_first: bool = True) -> list[str]:
        """Order labels by priority; unknown labels follow in first-seen order."""
        items = list(labels)
        known = [label for label in items if self.rank(label) is not None]
        unknown = [label for label in items if self.rank(label) is None]
        known.sort(key=lambda label: self.rank(label), reverse=coarsest_first)
        return known + unknown


DEFAULT_TIMEFRAMES = TimeframeTable(
    ranks=(
        TimeframeRank(label="Monthly", rank=100, aliases=("MN", "MN1", "1MO", "Mensal")),
        TimeframeRank(label="Weekly", rank=90, aliases=("W", "W1", "1W", "Semanal")),
        TimeframeRank(label="Daily", rank=80, aliases=("D", "D1", "1D", "Diario", "Diário")),
        TimeframeRank(label="4H", rank=70, aliases=("H4",)),
        TimeframeRank(label="1H", rank=60, aliases=("H1",)),
        TimeframeRank(label="30m", rank=50, aliases=("M30",)),
        TimeframeRank(label="15m", rank=40, aliases=("M15",)),
        TimeframeRank(label="5m", rank=30, aliases=("M5",)),
        TimeframeRank(label="3m", rank=20, aliases=("M3",)),
        TimeframeRank(label="1m", rank=10, aliases=("M1",)),
    ),
)


# ---------------------------------------------------------------------------
# Breakdown labels
# ---------------------------------------------------------------------------

class BreakdownLabels(BaseModel):
    """Sentinel labels used when a grouping value is missing."""

    model_config = ConfigDict(frozen=True)

    not_available: str = "N/A"
    no_confluence: str = "No Confluences"
    with_pd_array: str = "PD Array"
    without_pd_array: str = "No PD Array"


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class AnalyticsConfig(BaseModel):
    initial_balance: float = 10_000.0
    risk_free_rate: float = 0.0  # Per-trade pnl units, not annualized
    period_days: int = 365
    include_breakdown: bool = True
    include_tag_metrics: bool = True


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level analytics settings.

    Environment variables fill in whatever the TOML file and overrides
    leave unset.
    """

    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    scoring: ScoringTables = Field(default_factory=ScoringTables)
    timeframes: TimeframeTable = DEFAULT_TIMEFRAMES
    labels: BreakdownLabels = Field(default_factory=BreakdownLabels)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "JOURNAL_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: the file is not valid TOML or a table fails validation.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
