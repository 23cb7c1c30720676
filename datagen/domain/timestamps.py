"""
Timestamp text profiles shared by the record types.

Two layouts are produced, both with microsecond precision:

- ``format_timestamptz``: ``YYYY-MM-DD HH:MM:SS.ffffff+HH:MM`` for events whose
  ordering across a sub-second interval matters downstream (ad clicks).
- ``format_timestamp``: ``YYYY-MM-DD HH:MM:SS.ffffff`` (naive) for e-commerce events.
"""

from __future__ import annotations

from datetime import datetime


def local_now() -> datetime:
    """Current wall-clock time, aware of the local UTC offset."""
    return datetime.now().astimezone()


def format_timestamptz(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.astimezone()
    return ts.isoformat(sep=" ", timespec="microseconds")


def format_timestamp(ts: datetime) -> str:
    return ts.replace(tzinfo=None).isoformat(sep=" ", timespec="microseconds")


def parse_timestamp(text: str) -> datetime:
    """Parse either profile back into a datetime."""
    return datetime.fromisoformat(text)


__all__ = ["format_timestamp", "format_timestamptz", "local_now", "parse_timestamp"]
