"""Core adapter abstractions."""
from quote_pipeline.providers.core.error_mapper import ProviderErrorMapper
from quote_pipeline.providers.core.exceptions import (InvalidQuote,
                                                      MalformedResponse,
                                                      TransportError,
                                                      UnmappedSymbol,
                                                      UpstreamRejection,
                                                      VenueError)
from quote_pipeline.providers.core.market_provider_abc import VenueAdapterABC
from quote_pipeline.providers.core.protocols import QuoteSource

__all__ = [
    "InvalidQuote",
    "MalformedResponse",
    "ProviderErrorMapper",
    "QuoteSource",
    "TransportError",
    "UnmappedSymbol",
    "UpstreamRejection",
    "VenueAdapterABC",
    "VenueError",
]
