"""Failure taxonomy for venue adapters.

Adapters raise these internally; VenueAdapterABC.fetch collapses every one of
them to an absent quote, so they never reach the orchestrator.
"""


class VenueError(Exception):
    """Base for every adapter-level failure."""

    reason = "venue error"

    def __init__(self, message: str, *, symbol: str | None = None, venue: str | None = None) -> None:
        super().__init__(message)
        self.symbol = symbol
        self.venue = venue


class TransportError(VenueError):
    """Network failure or timeout."""

    reason = "transport"


class UpstreamRejection(VenueError):
    """Upstream answered with a non-2xx status."""

    reason = "upstream rejection"

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        symbol: str | None = None,
        venue: str | None = None,
    ) -> None:
        super().__init__(message, symbol=symbol, venue=venue)
        self.status_code = status_code

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429


class MalformedResponse(VenueError):
    """Body could not be parsed or lacks required fields."""

    reason = "malformed response"


class UnmappedSymbol(VenueError):
    """No provider code configured for the symbol. A configuration gap."""

    reason = "unmapped symbol"


class InvalidQuote(VenueError):
    """Resolved price is missing, zero or negative."""

    reason = "invalid quote"
