"""
Load generator interfaces for the datagen load generator.

Concrete generators (ad clicks, e-commerce orders) implement the LoadGenerator
protocol: they report the topics they produce for and run an unbounded
production loop feeding an ``asyncio.Queue`` until a stop event is set. The
AbstractLoadGenerator ABC supplies that loop on top of a synchronous
``generate()`` tick, so subclasses only describe how one batch is synthesized.
"""

from __future__ import annotations

import abc
import asyncio
from typing import List, Protocol, runtime_checkable

from datagen.domain.models import SinkRecord


async def offer(record: SinkRecord, out: "asyncio.Queue[SinkRecord]", stop: asyncio.Event) -> bool:
    """
    Hand one record to the output queue unless the stream has been stopped.

    Blocks while a bounded queue is full, racing the put against ``stop``.
    Always yields to the event loop once, so a producer feeding an unbounded
    queue still lets the consumer and whoever sets ``stop`` run.

    Returns
    -------
    bool
        True when the record was delivered and the stream should keep going,
        False when the caller must return. A False result never hides a
        delivery: either the record is in the queue or it was never offered.
    """
    if stop.is_set():
        return False

    if not out.full():
        out.put_nowait(record)
        await asyncio.sleep(0)
        return not stop.is_set()

    put = asyncio.ensure_future(out.put(record))
    stopped = asyncio.ensure_future(stop.wait())
    try:
        await asyncio.wait({put, stopped}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        delivered = put.done() and not put.cancelled()
        # Cancelling a pending put withdraws the record before it is enqueued.
        for task in (put, stopped):
            if not task.done():
                task.cancel()
    return delivered and not stop.is_set()


@runtime_checkable
class LoadGenerator(Protocol):
    """
    Common interface all load generators must implement.

    Attributes
    ----------
    name : str
        Mode name used on the command line (e.g. ``ecommerce``).
    description : str
        A human-friendly summary of the event family.
    """

    name: str
    description: str

    def topics(self) -> List[str]:
        """Destination topics this generator emits to."""
        ...

    async def load(self, stop: asyncio.Event, out: "asyncio.Queue[SinkRecord]") -> None:
        """
        Produce records into ``out`` until ``stop`` is set.

        Parameters
        ----------
        stop : asyncio.Event
            Cooperative cancellation signal, checked around every handoff.
        out : asyncio.Queue
            Output channel; its bound (if any) is chosen by the caller.
        """
        ...


class AbstractLoadGenerator(abc.ABC):
    """
    ABC helper for class-based generators.

    Subclasses set ``name``, ``description`` and ``_topics`` and implement
    ``generate``. State changes made by ``generate`` are committed before any
    record of the batch is offered and are never rolled back.
    """

    name: str
    description: str
    _topics: tuple[str, ...]

    def topics(self) -> List[str]:
        return list(self._topics)

    @abc.abstractmethod
    def generate(self) -> List[SinkRecord]:  # pragma: no cover - interface only
        """Synthesize one batch of records, advancing internal state."""
        raise NotImplementedError

    async def load(self, stop: asyncio.Event, out: "asyncio.Queue[SinkRecord]") -> None:
        while not stop.is_set():
            records = self.generate()
            if not records:
                # Idle tick: nothing to hand off, but stay cancellable.
                await asyncio.sleep(0)
                continue
            for record in records:
                if not await offer(record, out, stop):
                    return


__all__ = ["AbstractLoadGenerator", "LoadGenerator", "offer"]
