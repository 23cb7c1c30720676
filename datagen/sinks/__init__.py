"""
Sinks package for the datagen load generator.

Re-exports the sink interfaces and the concrete destinations.
"""

from datagen.sinks.abstract import AbstractSink, Sink
from datagen.sinks.console import ConsoleSink
from datagen.sinks.kafka import KafkaSink
from datagen.sinks.postgres import PostgresSink

__all__ = [
    "AbstractSink",
    "Sink",
    "ConsoleSink",
    "KafkaSink",
    "PostgresSink",
]
