"""Custom exception hierarchy for the trading journal.

The calculation functions never raise; these are used at the loading
boundaries (configuration files and trade payloads).
"""


class JournalError(Exception):
    """Base exception for all trading journal errors."""


# --- Configuration ---
class ConfigError(JournalError):
    """Invalid or missing configuration."""


# --- Data ---
class TradeDataError(JournalError):
    """A trade payload failed validation at the ingestion boundary."""

    def __init__(self, message: str, index: int | None = None):
        self.index = index
        if index is not None:
            message = f"trade #{index}: {message}"
        super().__init__(message)
