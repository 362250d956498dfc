"""Models for the Yahoo Finance chart endpoint (params and payload)."""
from pydantic import BaseModel, ConfigDict


class YahooChartParams(BaseModel):
    """Params for /v8/finance/chart/{ticker}: one trading day of 1-minute bars."""

    interval: str = "1m"
    range: str = "1d"


class ChartMeta(BaseModel):
    """Session meta block. Every field is optional upstream."""

    model_config = ConfigDict(extra="ignore")

    symbol: str | None = None
    regularMarketPrice: float | None = None
    currentPrice: float | None = None
    previousClose: float | None = None
    chartPreviousClose: float | None = None
    regularMarketDayHigh: float | None = None
    regularMarketDayLow: float | None = None
    regularMarketVolume: float | None = None
    marketCap: float | None = None


class ChartQuoteSeries(BaseModel):
    """Intraday arrays; entries are null for minutes without trades."""

    model_config = ConfigDict(extra="ignore")

    high: list[float | None] = []
    low: list[float | None] = []
    volume: list[float | None] = []


class ChartIndicators(BaseModel):
    model_config = ConfigDict(extra="ignore")

    quote: list[ChartQuoteSeries] = []


class ChartResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    meta: ChartMeta | None = None
    indicators: ChartIndicators | None = None

    @property
    def intraday(self) -> ChartQuoteSeries | None:
        if self.indicators is None or not self.indicators.quote:
            return None
        return self.indicators.quote[0]


class ChartBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    result: list[ChartResult] | None = None
    error: dict | None = None


class ChartResponse(BaseModel):
    """Top-level /v8/finance/chart payload."""

    model_config = ConfigDict(extra="ignore")

    chart: ChartBody
