"""Trade file loading.

Reads a JSON export of the journal: either a bare list of trade objects
or an object with a ``trades`` list.  Each item is validated into a
:class:`~trading_journal.core.models.TradeRecord`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .errors import TradeDataError
from .models import TradeRecord

logger = logging.getLogger(__name__)

_TRADE_LIST = TypeAdapter(list[TradeRecord])


def parse_trades(payload: Any) -> list[TradeRecord]:
    """Validate a decoded JSON payload into trade records.

    Raises:
        TradeDataError: the payload is not a trade list or an item fails
            validation.  ``index`` points at the first bad item.
    """
    if isinstance(payload, dict):
        payload = payload.get("trades")
    if not isinstance(payload, list):
        raise TradeDataError("expected a list of trades or an object with a 'trades' list")

    try:
        return _TRADE_LIST.validate_python(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = first.get("loc", ())
        index = loc[0] if loc and isinstance(loc[0], int) else None
        field = ".".join(str(part) for part in loc[1:]) or "trade"
        raise TradeDataError(f"{field}: {first.get('msg', 'invalid value')}", index=index) from exc


def load_trades(path: str | Path) -> list[TradeRecord]:
    """Read and validate a UTF-8 JSON trade file.

    Raises:
        TradeDataError: the file is not UTF-8 JSON or a trade fails validation.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TradeDataError(f"{path} is not valid UTF-8 JSON: {exc}") from exc

    trades = parse_trades(payload)
    logger.info("Loaded %d trades from %s", len(trades), path)
    return trades
