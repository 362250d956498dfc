"""Shared symbol and number helpers for venue adapters."""
import re

_VENUE_PREFIX = re.compile(r"^[A-Z0-9_]+:")
_SEPARATORS = re.compile(r"[^A-Z0-9]")

NO_CACHE_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def strip_venue_prefix(symbol: str) -> str:
    """Drop a leading `VENUE:` scope ("NASDAQ:AAPL" -> "AAPL")."""
    return _VENUE_PREFIX.sub("", symbol.strip().upper())


def normalize_crypto_pair(symbol: str) -> str:
    """Exchange-native pair code ("BINANCE:BTC/USDT" -> "BTCUSDT")."""
    return _SEPARATORS.sub("", strip_venue_prefix(symbol))


def to_float(value: object) -> float | None:
    """Parse a number (or numeric string); None for missing or unparseable values."""
    if value is None or value == "":
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def first_positive(*values: object) -> float | None:
    """First value that parses to a number > 0."""
    for value in values:
        number = to_float(value)
        if number is not None and number > 0:
            return number
    return None
