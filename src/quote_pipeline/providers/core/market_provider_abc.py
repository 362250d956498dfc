"""Abstract base class for venue adapters."""
import logging
from abc import ABC, abstractmethod

import httpx

from quote_pipeline.providers.core.error_mapper import ProviderErrorMapper
from quote_pipeline.providers.core.exceptions import (InvalidQuote,
                                                      UnmappedSymbol,
                                                      UpstreamRejection,
                                                      VenueError)
from quote_pipeline.providers.core.utils import NO_CACHE_HEADERS
from quote_pipeline.schemas import InstrumentClass, Quote

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class VenueAdapterABC(ABC):
    """Base interface for all venue adapters.

    Each adapter turns a canonical symbol into a normalized Quote. Callers only
    ever see "got a quote" or None: `fetch` classifies and logs every failure
    raised by `_fetch_quote` and never lets it escape.

    Subclasses set `api_name` and `supported_classes`, and implement
    `resolve_symbol` and `_fetch_quote`.
    """

    api_name: str = "API"
    supported_classes: frozenset[InstrumentClass] = frozenset()

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            base_url: Upstream root URL.
            timeout: Per-request timeout in seconds.
            client: Pre-built client (tests inject one backed by MockTransport).
        """
        self._error_mapper = ProviderErrorMapper(api_name=self.api_name)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=NO_CACHE_HEADERS,
            timeout=httpx.Timeout(timeout),
        )

    @abstractmethod
    def resolve_symbol(self, symbol: str, instrument_class: InstrumentClass) -> str:
        """Translate a canonical symbol into the code this venue expects.

        Raises:
            UnmappedSymbol: When the venue has no code for the symbol.
        """

    @abstractmethod
    async def _fetch_quote(self, symbol: str, instrument_class: InstrumentClass) -> Quote:
        """Fetch and normalize one quote. May raise anything; `fetch` classifies it."""

    async def fetch(self, symbol: str, instrument_class: InstrumentClass) -> Quote | None:
        """Fetch a normalized quote, or None when none could be obtained."""
        try:
            quote = await self._fetch_quote(symbol, instrument_class)
            if quote.price <= 0:
                raise InvalidQuote(f"Non-positive price for '{symbol}'", symbol=symbol)
            return quote
        except Exception as exc:  # pylint: disable=broad-except
            self._log_failure(self._error_mapper.classify(exc, symbol=symbol))
            return None

    async def _get_json(self, path: str, params: dict | None = None) -> dict:
        """GET `path` with caching disabled and return the decoded JSON object."""
        response = await self._client.get(path, params=params, headers=NO_CACHE_HEADERS)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data

    def _log_failure(self, error: VenueError) -> None:
        if isinstance(error, UnmappedSymbol):
            logger.error(
                "%s: no provider mapping for '%s'; add it to the index map",
                self.api_name,
                error.symbol,
            )
        elif isinstance(error, UpstreamRejection) and error.rate_limited:
            logger.warning("%s: rate limited while fetching '%s'", self.api_name, error.symbol)
        else:
            logger.warning("%s: %s (%s)", self.api_name, error, error.reason)

    async def close(self) -> None:
        """Close the HTTP client when this adapter created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "VenueAdapterABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
