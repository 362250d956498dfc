"""Index venue adapters."""
from quote_pipeline.providers.indices.yahoo_index_provider import \
    YahooIndexProvider

__all__ = ["YahooIndexProvider"]
