"""Enumerations used across the trading journal."""

from enum import Enum


class Direction(str, Enum):
    LONG = "Long"
    SHORT = "Short"


class TradeOutcome(str, Enum):
    """Win / loss / break-even / pending classification."""

    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"
    PENDING = "pending"


class StreakType(str, Enum):
    WIN = "win"
    LOSS = "loss"
    NONE = "none"


class Grade(str, Enum):
    """Wolf Score letter grade, best first."""

    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class TimeframeClass(str, Enum):
    HTF = "HTF"  # H4 and above
    LTF = "LTF"


class AlignmentStatus(str, Enum):
    """Analysis TF -> entry TF alignment state."""

    ST_ALIGNED = "st_aligned"
    ST_RE_ALIGNED = "st_re_aligned"
    ST_RE_PLUS_ALERT = "st_re_plus_alert"


class TradingSession(str, Enum):
    LONDON_NY_OVERLAP = "London-NY Overlap"
    NEW_YORK = "New York"
    LONDON = "London"
    TOKYO = "Tokyo"
    SYDNEY = "Sydney"
    OFF_HOURS = "Off-Hours"
