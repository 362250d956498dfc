"""Factory wiring adapters, orchestrator, gate and registry into a MarketService."""
from quote_pipeline.config import Settings
from quote_pipeline.providers import (BinanceProvider, YahooEquityProvider,
                                      YahooIndexProvider)
from quote_pipeline.schemas import InstrumentClass
from quote_pipeline.services.batch_orchestrator import BatchOrchestrator
from quote_pipeline.services.market_hours import (TradingSessionGate,
                                                  default_calendars)
from quote_pipeline.services.market_service import MarketService
from quote_pipeline.services.series_registry import SeriesRegistry


def create_market_service(settings: Settings) -> MarketService:
    """Build a MarketService from settings.

    Args:
        settings: Pipeline configuration (URLs, timeouts, intervals, tables).

    Returns:
        A MarketService owning its adapters; close it on shutdown.
    """
    equities = YahooEquityProvider(settings.yahoo_base_url, timeout=settings.request_timeout)
    adapters = {
        InstrumentClass.CRYPTO: BinanceProvider(
            settings.binance_base_url, timeout=settings.request_timeout
        ),
        InstrumentClass.EQUITY: equities,
        InstrumentClass.EQUITY_BR: equities,
        InstrumentClass.INDEX: YahooIndexProvider(
            settings.yahoo_base_url,
            index_map=settings.index_map,
            timeout=settings.request_timeout,
        ),
    }
    orchestrator = BatchOrchestrator(
        adapters,
        chunk_size=settings.chunk_size,
        inter_batch_delay=settings.inter_batch_delay,
    )
    gate = TradingSessionGate(
        default_calendars(settings.us_holidays, settings.b3_holidays),
        crypto_interval=settings.crypto_interval,
        open_interval=settings.open_interval,
        closed_interval=settings.closed_interval,
    )
    registry = SeriesRegistry(orchestrator, gate, volatility=settings.volatility)
    return MarketService(orchestrator, gate, registry)
