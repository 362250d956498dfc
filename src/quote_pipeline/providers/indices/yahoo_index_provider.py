"""Yahoo Finance adapter for market indices."""
from collections.abc import Mapping

import httpx

from quote_pipeline.config import DEFAULT_INDEX_MAP
from quote_pipeline.providers.core import UnmappedSymbol
from quote_pipeline.providers.core.market_provider_abc import DEFAULT_TIMEOUT
from quote_pipeline.providers.stocks.yahoo.models import (ChartMeta,
                                                          ChartQuoteSeries)
from quote_pipeline.providers.stocks.yahoo.yahoo_chart_provider import (
    SessionStats, YahooChartProvider)
from quote_pipeline.schemas import InstrumentClass


class YahooIndexProvider(YahooChartProvider):
    """Index quotes through an explicit canonical -> Yahoo code table.

    Symbols missing from the table fail closed with UnmappedSymbol; index codes
    are never guessed from the canonical name.
    """

    supported_classes = frozenset({InstrumentClass.INDEX})

    def __init__(
        self,
        base_url: str = YahooChartProvider.BASE_URL,
        *,
        index_map: Mapping[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, client=client)
        source = DEFAULT_INDEX_MAP if index_map is None else index_map
        self._index_map = {k.strip().upper(): v for k, v in source.items()}

    def resolve_symbol(self, symbol: str, instrument_class: InstrumentClass) -> str:
        code = self._index_map.get(symbol.strip().upper())
        if code is None:
            raise UnmappedSymbol(f"Index '{symbol}' is not mapped", symbol=symbol)
        return code

    def _session_stats(
        self, meta: ChartMeta, intraday: ChartQuoteSeries | None, price: float
    ) -> SessionStats:
        """Indices report session figures in meta only."""
        return SessionStats(
            high=meta.regularMarketDayHigh or meta.chartPreviousClose or price,
            low=meta.regularMarketDayLow or meta.chartPreviousClose or price,
            volume=meta.regularMarketVolume or 0.0,
        )
