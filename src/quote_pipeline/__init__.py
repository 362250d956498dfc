"""Quote pipeline: normalized multi-venue quotes with session-aware polling."""

__version__ = "0.1.0"
