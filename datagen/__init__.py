"""
datagen - synthetic event load generator for streaming pipelines.

Fabricates plausible, internally consistent business events and streams them
to a message bus or a database as a continuous, cancellable flow of records:

- Ad clicks: an impression and the click that followed it
- E-commerce: order line items plus order_created/parcel_shipped parcel events,
  kept consistent by a sliding window so nothing ships before it is ordered

Each event family is a load generator with a fixed set of topics and an async
production loop; sinks (console, PostgreSQL, Kafka) consume what they emit.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Public API exports
from datagen.config import Settings, get_settings
from datagen.domain import ClickEvent, OrderEvent, ParcelEvent, RecordEncodingError, SinkRecord
from datagen.generators import (
    AbstractLoadGenerator,
    AdClickGenerator,
    EcommerceGenerator,
    LoadGenerator,
)
from datagen.orchestrator import LoadStats, RunConfig, available_modes, run, run_load
from datagen.utils.logging import configure_logging, get_logger

__all__ = [
    "__version__",
    # Configuration
    "Settings",
    "get_settings",
    # Records
    "ClickEvent",
    "OrderEvent",
    "ParcelEvent",
    "RecordEncodingError",
    "SinkRecord",
    # Generators
    "AbstractLoadGenerator",
    "AdClickGenerator",
    "EcommerceGenerator",
    "LoadGenerator",
    # Driver
    "LoadStats",
    "RunConfig",
    "available_modes",
    "run",
    "run_load",
    # Logging
    "configure_logging",
    "get_logger",
]
