"""Timeframe and trading-session helpers.

Timeframe priority comes from an injected
:class:`~trading_journal.core.config.TimeframeTable`; everything else
here is a fixed lookup.

Usage::

    sort_timeframes(["5m", "Daily", "H4", "Tick"])   # ["Daily", "H4", "5m", "Tick"]
    classify_timeframe("H4")                        # TimeframeClass.HTF
    get_timeframe_alignment("4H", "H1").status      # AlignmentStatus.ST_ALIGNED
    detect_session(date(2024, 3, 4), time(10, 0))   # TradingSession.LONDON_NY_OVERLAP
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, time
from typing import Any

from ..core.config import DEFAULT_TIMEFRAMES, TimeframeTable
from ..core.enums import AlignmentStatus, TimeframeClass, TradingSession

# Analysis TF -> entry TF -> alignment state (canonical labels)
_ALIGNMENT_MAP: dict[str, dict[str, AlignmentStatus]] = {
    "Monthly": {
        "Daily": AlignmentStatus.ST_ALIGNED,
        "4H": AlignmentStatus.ST_RE_ALIGNED,
    },
    "Weekly": {
        "Daily": AlignmentStatus.ST_ALIGNED,
        "4H": AlignmentStatus.ST_RE_ALIGNED,
    },
    "Daily": {
        "4H": AlignmentStatus.ST_ALIGNED,
        "1H": AlignmentStatus.ST_RE_ALIGNED,
    },
    "4H": {
        "1H": AlignmentStatus.ST_ALIGNED,
        "15m": AlignmentStatus.ST_RE_ALIGNED,
    },
    "1H": {
        "15m": AlignmentStatus.ST_ALIGNED,
        "5m": AlignmentStatus.ST_RE_ALIGNED,
    },
    "15m": {
        "5m": AlignmentStatus.ST_ALIGNED,
        "1m": AlignmentStatus.ST_RE_ALIGNED,
    },
    "5m": {
        "1m": AlignmentStatus.ST_ALIGNED,
    },
}

_ALIGNMENT_LABELS = {
    AlignmentStatus.ST_ALIGNED: "ST Aligned",
    AlignmentStatus.ST_RE_ALIGNED: "ST + RE Aligned",
    AlignmentStatus.ST_RE_PLUS_ALERT: "ST + RE + ...",
}

# Session windows in UTC hours (start inclusive, end exclusive).  Checked
# in order; the first match wins, so the overlap shadows London and NY.
SESSION_WINDOWS: tuple[tuple[TradingSession, int, int], ...] = (
    (TradingSession.LONDON_NY_OVERLAP, 12, 16),
    (TradingSession.NEW_YORK, 12, 21),
    (TradingSession.LONDON, 7, 16),
    (TradingSession.TOKYO, 0, 9),
    (TradingSession.SYDNEY, 21, 6),  # Wraps midnight
)


@dataclass(frozen=True)
class TimeframeAlignment:
    status: AlignmentStatus
    label: str
    is_warning: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "label": self.label,
            "is_warning": self.is_warning,
        }


def sort_timeframes(
    labels: Iterable[str],
    table: TimeframeTable = DEFAULT_TIMEFRAMES,
    coarsest_first: bool = True,
) -> list[str]:
    """Order timeframe labels by priority; unknown labels go last, stably."""
    return table.sort(labels, coarsest_first=coarsest_first)


def classify_timeframe(label: str | None, table: TimeframeTable = DEFAULT_TIMEFRAMES) -> TimeframeClass:
    """HTF for H4 and above, LTF for everything else (unknown included)."""
    rank = table.rank(label)
    if rank is None:
        return TimeframeClass.LTF
    return TimeframeClass.HTF if rank >= table.htf_min_rank else TimeframeClass.LTF


def get_timeframe_alignment(
    htf: str | None,
    ltf: str | None,
    table: TimeframeTable = DEFAULT_TIMEFRAMES,
) -> TimeframeAlignment:
    """Alignment between the PD-array (analysis) timeframe and the entry timeframe.

    Pairs not in the alignment map, including unknown or missing
    labels, fall back to ``ST_RE_PLUS_ALERT``.
    """
    status = AlignmentStatus.ST_RE_PLUS_ALERT
    if htf and ltf:
        entries = _ALIGNMENT_MAP.get(table.canonical(htf), {})
        status = entries.get(table.canonical(ltf), AlignmentStatus.ST_RE_PLUS_ALERT)
    return TimeframeAlignment(
        status=status,
        label=_ALIGNMENT_LABELS[status],
        is_warning=status == AlignmentStatus.ST_RE_PLUS_ALERT,
    )


def detect_session(
    entry_date: date | None,
    entry_time: time | None,
    utc_offset_hours: int = -3,
) -> TradingSession:
    """Trading session of a local entry time.

    ``utc_offset_hours`` is the offset of the journal's local clock from
    UTC (-3 for Brasilia).  Only the hour is used.  Missing date or time
    gives ``Off-Hours``.
    """
    if entry_date is None or entry_time is None:
        return TradingSession.OFF_HOURS

    utc_hour = (entry_time.hour - utc_offset_hours) % 24
    for session, start, end in SESSION_WINDOWS:
        if start < end:
            if start <= utc_hour < end:
                return session
        elif utc_hour >= start or utc_hour < end:
            return session
    return TradingSession.OFF_HOURS
