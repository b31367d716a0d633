"""Replay Studio - replay discovery and upload queue orchestration."""

__version__ = "0.1.0"
