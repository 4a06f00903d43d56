"""Utility functions for BirdCount."""

from birdcount.utils.time import ensure_utc, format_timestamp, utcnow

__all__ = [
    "ensure_utc",
    "format_timestamp",
    "utcnow",
]
