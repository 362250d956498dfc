"""Abstract base class for cryptocurrency venue adapters."""
from quote_pipeline.providers.core import VenueAdapterABC
from quote_pipeline.providers.core.utils import normalize_crypto_pair
from quote_pipeline.schemas import InstrumentClass


class CryptoProviderABC(VenueAdapterABC):
    """Base for crypto exchanges: pairs trade 24/7 and use prefix-free pair codes."""

    supported_classes = frozenset({InstrumentClass.CRYPTO})

    def resolve_symbol(self, symbol: str, instrument_class: InstrumentClass) -> str:
        return normalize_crypto_pair(symbol)
