"""Service helpers shared by the routers."""
from quote_pipeline.services.utils.stream_handler import (
    handle_series_stream, parse_symbols_param)

__all__ = ["handle_series_stream", "parse_symbols_param"]
