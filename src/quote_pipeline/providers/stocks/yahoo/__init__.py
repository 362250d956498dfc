"""Yahoo Finance chart adapters."""
from quote_pipeline.providers.stocks.yahoo.yahoo_chart_provider import (
    SessionStats, YahooChartProvider)
from quote_pipeline.providers.stocks.yahoo.yahoo_equity_provider import \
    YahooEquityProvider

__all__ = ["SessionStats", "YahooChartProvider", "YahooEquityProvider"]
