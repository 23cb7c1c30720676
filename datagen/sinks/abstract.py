"""
Sink interfaces for the datagen load generator.

A sink is the downstream collaborator that takes ownership of emitted records:
it publishes them to a message bus, inserts them as rows, or prints them.
"""

from __future__ import annotations

import abc
from typing import Protocol, Sequence, runtime_checkable

from datagen.domain.models import SinkRecord


@runtime_checkable
class Sink(Protocol):
    """
    Common interface all sinks must implement.

    Attributes
    ----------
    name : str
        Sink name used on the command line (e.g. ``kafka``).
    """

    name: str

    async def prepare(self, topics: Sequence[str]) -> None:
        """Acquire connections and provision destinations for ``topics``."""
        ...

    async def write(self, record: SinkRecord) -> None:
        """
        Deliver one record.

        Raises
        ------
        RecordEncodingError
            If the record cannot be projected into the sink's format.
        """
        ...

    async def close(self) -> None:
        """Flush pending writes and release resources. Safe to call twice."""
        ...


class AbstractSink(abc.ABC):
    """
    ABC helper for class-based sinks.

    Subclasses set `name` and implement `write`; `prepare` and `close` default to no-ops.
    """

    name: str

    async def prepare(self, topics: Sequence[str]) -> None:
        del topics

    @abc.abstractmethod
    async def write(self, record: SinkRecord) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    async def close(self) -> None:
        return None


__all__ = ["AbstractSink", "Sink"]
