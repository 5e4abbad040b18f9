"""Core domain models used across the trading journal.

``TradeRecord`` is the canonical shape of one journal entry as the
analytics engine sees it.  It accepts the camelCase payloads produced
by the journal store (``entryDate``, ``tfAnalise``, ``pdArray`` ...) as
well as snake_case keyword arguments, and is immutable once built.
"""

from __future__ import annotations

import math
import uuid
from datetime import date, datetime, time
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .enums import Direction, TradeOutcome
from .tags import NO_CONFLUENCE_LABEL, normalize_tags, tag_combo_label

# PD-array values that mean "no PD array on this setup"
_EMPTY_PD_ARRAY = frozenset({"", "n/a", "na", "none", "-"})


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class TradeRecord(BaseModel):
    """One trade as supplied by the journal store.

    ``pnl`` absent means the trade is still pending.  When ``outcome``
    is not supplied it is derived from the sign of ``pnl``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    # Identity
    trade_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        validation_alias=_alias("trade_id", "id", "tradeId"),
    )
    account_id: str | None = Field(default=None, validation_alias=_alias("account_id", "accountId"))
    symbol: str = ""
    direction: Direction = Field(default=Direction.LONG, validation_alias=_alias("direction", "type"))

    # Prices and size
    entry_price: float = Field(default=0.0, validation_alias=_alias("entry_price", "entryPrice"))
    exit_price: float | None = Field(default=None, validation_alias=_alias("exit_price", "exitPrice"))
    stop_loss: float = Field(default=0.0, validation_alias=_alias("stop_loss", "stopLoss"))
    take_profit: float = Field(default=0.0, validation_alias=_alias("take_profit", "takeProfit"))
    lot: float = Field(default=0.0, validation_alias=_alias("lot", "lot_size", "lotSize"))

    # Result
    pnl: float | None = None
    outcome: TradeOutcome | None = Field(default=None, validate_default=True)
    r_multiple: float | None = Field(default=None, validation_alias=_alias("r_multiple", "rMultiple"))

    # Timing
    entry_date: date = Field(validation_alias=_alias("entry_date", "entryDate"))
    entry_time: time | None = Field(default=None, validation_alias=_alias("entry_time", "entryTime"))
    exit_date: date | None = Field(default=None, validation_alias=_alias("exit_date", "exitDate"))
    exit_time: time | None = Field(default=None, validation_alias=_alias("exit_time", "exitTime"))

    # Setup context
    htf: str | None = Field(default=None, validation_alias=_alias("htf", "HTF", "tfAnalise", "tf_analise"))
    ltf: str | None = Field(default=None, validation_alias=_alias("ltf", "LTF", "tfEntrada", "tf_entrada"))
    pd_array: str | None = Field(default=None, validation_alias=_alias("pd_array", "pdArray"))
    session: str | None = None
    tags: tuple[str, ...] = ()
    strategy: str | None = None
    setup: str | None = None

    # ------------------------------------------------------------------ #
    # Validators                                                           #
    # ------------------------------------------------------------------ #

    @field_validator("direction", mode="before")
    @classmethod
    def _direction_case(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @field_validator("entry_date", "exit_date", mode="before")
    @classmethod
    def _strip_time_suffix(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            return value.split("T")[0]
        return value

    @field_validator("entry_time", "exit_time", mode="before")
    @classmethod
    def _blank_time(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("entry_time", "exit_time", mode="after")
    @classmethod
    def _drop_utc_offset(cls, value: time | None) -> time | None:
        # Times are journal wall-clock times; an offset ("10:00Z") is discarded
        if value is not None and value.tzinfo is not None:
            return value.replace(tzinfo=None)
        return value

    @field_validator("htf", "ltf", "pd_array", "session", "strategy", "setup", mode="before")
    @classmethod
    def _blank_label(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("pnl", "exit_price", "r_multiple", mode="after")
    @classmethod
    def _finite_or_missing(cls, value: float | None) -> float | None:
        if value is not None and not math.isfinite(value):
            return None
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> tuple[str, ...]:
        return normalize_tags(value)

    @field_validator("outcome", mode="after")
    @classmethod
    def _derive_outcome(cls, value: TradeOutcome | None, info: ValidationInfo) -> TradeOutcome:
        if value is not None:
            return value
        pnl = info.data.get("pnl")
        if pnl is None:
            return TradeOutcome.PENDING
        if pnl > 0:
            return TradeOutcome.WIN
        if pnl < 0:
            return TradeOutcome.LOSS
        return TradeOutcome.BREAKEVEN

    # ------------------------------------------------------------------ #
    # Derived views                                                        #
    # ------------------------------------------------------------------ #

    @property
    def tag_combo(self) -> str:
        """Canonical label for this trade's full confluence combination."""
        return tag_combo_label(self.tags, NO_CONFLUENCE_LABEL)

    @property
    def has_pd_array(self) -> bool:
        return self.pd_array is not None and self.pd_array.lower() not in _EMPTY_PD_ARRAY

    @property
    def entry_datetime(self) -> datetime:
        return datetime.combine(self.entry_date, self.entry_time or time(0, 0))

    @property
    def exit_datetime(self) -> datetime | None:
        """Exit timestamp, or None when either exit date or time is missing."""
        if self.exit_date is None or self.exit_time is None:
            return None
        return datetime.combine(self.exit_date, self.exit_time)

    @property
    def is_closed(self) -> bool:
        return self.outcome != TradeOutcome.PENDING


class TradeFilters(BaseModel):
    """Optional criteria for narrowing a trade list (all inclusive)."""

    model_config = ConfigDict(frozen=True)

    account_id: str | None = None
    symbol: str | None = None
    direction: Direction | None = None
    outcome: TradeOutcome | None = None
    strategy: str | None = None
    date_from: date | None = None
    date_to: date | None = None

    def matches(self, trade: TradeRecord) -> bool:
        if self.account_id and trade.account_id != self.account_id:
            return False
        if self.symbol and trade.symbol != self.symbol:
            return False
        if self.direction and trade.direction != self.direction:
            return False
        if self.outcome and trade.outcome != self.outcome:
            return False
        if self.strategy and trade.strategy != self.strategy:
            return False
        if self.date_from and trade.entry_date < self.date_from:
            return False
        if self.date_to and trade.entry_date > self.date_to:
            return False
        return True
