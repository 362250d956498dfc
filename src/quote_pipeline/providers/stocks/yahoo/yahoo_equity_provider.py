"""Yahoo Finance adapter for international and Brazilian equities."""
from quote_pipeline.providers.core.utils import strip_venue_prefix
from quote_pipeline.providers.stocks.yahoo.yahoo_chart_provider import \
    YahooChartProvider
from quote_pipeline.schemas import InstrumentClass


class YahooEquityProvider(YahooChartProvider):
    """Equity quotes. "NASDAQ:AAPL" queries AAPL; B3 tickers get the .SA suffix."""

    supported_classes = frozenset({InstrumentClass.EQUITY, InstrumentClass.EQUITY_BR})
    COUNTRY_SUFFIXES: dict[InstrumentClass, str] = {InstrumentClass.EQUITY_BR: ".SA"}
    # Tickers Yahoo lists under a different code; aliases skip the country suffix.
    SYMBOL_ALIASES: dict[str, str] = {"USDBRL": "USDBRL=X"}

    def resolve_symbol(self, symbol: str, instrument_class: InstrumentClass) -> str:
        ticker = strip_venue_prefix(symbol)
        if not ticker:
            raise ValueError(f"Empty ticker in '{symbol}'")
        if ticker in self.SYMBOL_ALIASES:
            return self.SYMBOL_ALIASES[ticker]
        suffix = self.COUNTRY_SUFFIXES.get(instrument_class, "")
        if suffix and not ticker.endswith(suffix):
            ticker += suffix
        return ticker
