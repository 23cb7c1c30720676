"""
Utilities package for the datagen load generator.

Exports shared helpers for logging, profiling, and other cross-cutting concerns.
Keep this package lightweight and free of event-family specific logic.
"""

from datagen.utils.logging import configure_logging, get_logger
from datagen.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
