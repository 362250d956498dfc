"""Shared Yahoo Finance chart client for equities and indices."""
from dataclasses import dataclass

import httpx

from quote_pipeline.providers.core import (InvalidQuote, MalformedResponse,
                                           VenueAdapterABC)
from quote_pipeline.providers.core.market_provider_abc import DEFAULT_TIMEOUT
from quote_pipeline.providers.core.utils import first_positive
from quote_pipeline.providers.stocks.yahoo.models import (ChartMeta,
                                                          ChartQuoteSeries,
                                                          ChartResponse,
                                                          YahooChartParams)
from quote_pipeline.schemas import InstrumentClass, Quote, utcnow


@dataclass(frozen=True)
class SessionStats:
    """High/low/volume over the observed window."""

    high: float
    low: float
    volume: float


class YahooChartProvider(VenueAdapterABC):
    """Quotes from the unofficial Yahoo Finance v8 chart endpoint.

    Requests one day of 1-minute bars. Price resolution is
    regularMarketPrice -> currentPrice -> previousClose; a missing or zero
    price rejects the quote. Subclasses decide the ticker and how session
    high/low/volume are derived.
    """

    api_name = "Yahoo Finance"
    BASE_URL = "https://query1.finance.yahoo.com"
    CHART_PATH = "/v8/finance/chart/{ticker}"

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, client=client)

    async def _fetch_quote(self, symbol: str, instrument_class: InstrumentClass) -> Quote:
        ticker = self.resolve_symbol(symbol, instrument_class)
        data = await self._get_json(
            self.CHART_PATH.format(ticker=ticker),
            params=YahooChartParams().model_dump(),
        )
        chart = ChartResponse.model_validate(data).chart
        if not chart.result:
            raise MalformedResponse(f"No chart result for '{ticker}'", symbol=symbol)
        result = chart.result[0]
        if result.meta is None:
            raise MalformedResponse(f"No chart meta for '{ticker}'", symbol=symbol)
        return self._build_quote(symbol, result.meta, result.intraday)

    def _build_quote(
        self, symbol: str, meta: ChartMeta, intraday: ChartQuoteSeries | None
    ) -> Quote:
        price = first_positive(meta.regularMarketPrice, meta.currentPrice, meta.previousClose)
        if price is None:
            raise InvalidQuote(f"No usable price for '{symbol}'", symbol=symbol)

        reference = first_positive(meta.previousClose, meta.chartPreviousClose) or price
        change = price - reference
        stats = self._session_stats(meta, intraday, price)
        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=(change / reference) * 100 if reference > 0 else 0.0,
            volume=stats.volume,
            high_24h=stats.high,
            low_24h=stats.low,
            market_cap=meta.marketCap,
            timestamp=utcnow(),
        )

    def _session_stats(
        self, meta: ChartMeta, intraday: ChartQuoteSeries | None, price: float
    ) -> SessionStats:
        """Intraday arrays when present, else the session meta fields."""
        highs = _present(intraday.high) if intraday else []
        lows = _present(intraday.low) if intraday else []
        volumes = _present(intraday.volume) if intraday else []
        return SessionStats(
            high=max(highs) if highs else (meta.regularMarketDayHigh or price),
            low=min(lows) if lows else (meta.regularMarketDayLow or price),
            volume=volumes[-1] if volumes else (meta.regularMarketVolume or 0.0),
        )


def _present(values: list[float | None]) -> list[float]:
    return [v for v in values if v is not None]
