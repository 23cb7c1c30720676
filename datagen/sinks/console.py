"""
Console sink: print each record instead of shipping it anywhere.

Useful to eyeball a generator's output or to pipe it into another tool.
"""

from __future__ import annotations

from typing import Optional, TextIO

import typer

from datagen.domain.models import SinkRecord
from datagen.sinks.abstract import AbstractSink


class ConsoleSink(AbstractSink):
    """Write one ``<topic> <key> <json>`` line per record."""

    name: str = "print"

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    async def write(self, record: SinkRecord) -> None:
        document = record.to_json().decode("utf-8")
        typer.echo(f"{record.topic} {record.key} {document}", file=self._stream)


__all__ = ["ConsoleSink"]
