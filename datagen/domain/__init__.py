"""
Domain package for the datagen load generator.

Exports the record models the generators emit and the timestamp profiles they
are stamped with. Keep this package focused on data definitions and projections.
"""

from datagen.domain.models import (
    ClickEvent,
    OrderEvent,
    ParcelEvent,
    RecordEncodingError,
    SinkRecord,
)
from datagen.domain.timestamps import format_timestamp, format_timestamptz, local_now

__all__ = [
    "ClickEvent",
    "OrderEvent",
    "ParcelEvent",
    "RecordEncodingError",
    "SinkRecord",
    "format_timestamp",
    "format_timestamptz",
    "local_now",
]
