"""Models for the Binance provider (24h ticker params and payload)."""
from pydantic import BaseModel, ConfigDict


class BinanceTickerParams(BaseModel):
    """Params for /api/v3/ticker/24hr."""

    symbol: str


class BinanceTicker24h(BaseModel):
    """Subset of the /api/v3/ticker/24hr payload. Binance sends numbers as strings."""

    model_config = ConfigDict(extra="ignore")

    symbol: str
    lastPrice: str | None = None
    openPrice: str | None = None
    priceChangePercent: str | None = None
    highPrice: str | None = None
    lowPrice: str | None = None
    volume: str | None = None
    quoteVolume: str | None = None
