"""Domain concept for mapping raw adapter exceptions onto the venue taxonomy."""
import asyncio
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from quote_pipeline.providers.core.exceptions import (MalformedResponse,
                                                      TransportError,
                                                      UpstreamRejection,
                                                      VenueError)


@dataclass(frozen=True)
class ProviderErrorMapper:
    """Maps transport/parse exceptions to a VenueError subclass.

    One instance per adapter so every classified error carries the venue name.
    """

    api_name: str = "API"

    def classify(self, exc: Exception, symbol: str | None = None) -> VenueError:
        """Return the taxonomy error for `exc`.

        Args:
            exc: Exception raised while fetching or parsing a quote.
            symbol: Canonical symbol being fetched, included in the message.

        Returns:
            `exc` itself when it is already a VenueError, otherwise a new
            VenueError chained to it.
        """
        if isinstance(exc, VenueError):
            if exc.venue is None:
                exc.venue = self.api_name
            return exc
        target = f" for '{symbol}'" if symbol is not None else ""
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            error: VenueError = UpstreamRejection(
                f"{self.api_name} returned {status}{target}",
                status_code=status,
                symbol=symbol,
                venue=self.api_name,
            )
        elif isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
            error = TransportError(
                f"Request to {self.api_name} timed out{target}",
                symbol=symbol,
                venue=self.api_name,
            )
        elif isinstance(exc, (httpx.TransportError, OSError)):
            error = TransportError(
                f"Could not reach {self.api_name}{target}: {exc}",
                symbol=symbol,
                venue=self.api_name,
            )
        elif isinstance(exc, (ValidationError, ValueError, KeyError, TypeError, IndexError)):
            error = MalformedResponse(
                f"Unexpected {self.api_name} payload{target}: {exc}",
                symbol=symbol,
                venue=self.api_name,
            )
        else:
            error = VenueError(
                f"{self.api_name} error{target}: {exc}",
                symbol=symbol,
                venue=self.api_name,
            )
        error.__cause__ = exc
        return error
