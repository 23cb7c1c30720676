"""
Driver that wires a load generator to a sink and streams until told to stop.

Usage (example from CLI):
    from datagen.orchestrator import RunConfig, run

    stats = run(RunConfig(mode="ecommerce", sink="print", max_records=100))
    print(stats.to_dict())

The generator's `load()` runs as its own task feeding a queue; the driver drains
the queue into the sink, optionally paced to a queries-per-second target, and
stops on a record cap, a duration, an external stop event, or SIGINT/SIGTERM.
"""

from __future__ import annotations

import asyncio
import random
import signal
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from datagen.config import Settings, get_settings
from datagen.domain.models import RecordEncodingError, SinkRecord
from datagen.generators.abstract import LoadGenerator
from datagen.generators.ad_click import AdClickGenerator
from datagen.generators.ecommerce import EcommerceGenerator
from datagen.sinks.abstract import Sink
from datagen.sinks.console import ConsoleSink
from datagen.sinks.kafka import KafkaSink
from datagen.sinks.postgres import PostgresSink
from datagen.utils.logging import get_logger
from datagen.utils.profiler import profile_block

log = get_logger(__name__)


@dataclass
class RunConfig:
    """Parameters of one generator run. ``None`` limits mean unbounded."""

    mode: str
    sink: str = "print"
    qps: Optional[float] = None
    max_records: Optional[int] = None
    duration_seconds: Optional[float] = None
    queue_size: int = 1_000
    seed: int = 0
    report_interval_seconds: float = 10.0

    @classmethod
    def from_settings(cls, mode: str, settings: Optional[Settings] = None, **overrides) -> "RunConfig":
        settings = settings or get_settings()
        values = {
            "qps": settings.qps,
            "queue_size": settings.queue_size,
            "seed": settings.seed,
            "report_interval_seconds": settings.report_interval_seconds,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(mode=mode, **values)


@dataclass
class LoadStats:
    """Outcome of a run: what was written where, and what it cost."""

    mode: str
    sink: str
    records: int = 0
    skipped: int = 0
    discarded: int = 0
    per_topic: Dict[str, int] = field(default_factory=dict)
    duration_seconds: float = 0.0
    peak_rss_bytes: Optional[int] = None
    cpu_percent: Optional[float] = None

    @property
    def throughput_records_per_sec(self) -> float:
        return self.records / self.duration_seconds if self.duration_seconds > 0 else 0.0

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "sink": self.sink,
            "records": self.records,
            "skipped": self.skipped,
            "discarded": self.discarded,
            "per_topic": dict(sorted(self.per_topic.items())),
            "duration_seconds": round(self.duration_seconds, 2),
            "throughput_records_per_sec": round(self.throughput_records_per_sec, 2),
            "peak_rss_bytes": self.peak_rss_bytes,
            "cpu_percent": round(self.cpu_percent, 1) if self.cpu_percent is not None else None,
        }


def _generator_factories(settings: Settings) -> Dict[str, Callable[[random.Random], LoadGenerator]]:
    """Registry of available generators."""
    return {
        AdClickGenerator.name: lambda rng: AdClickGenerator(rng),
        EcommerceGenerator.name: lambda rng: EcommerceGenerator(
            rng,
            catalog_size=settings.catalog_size,
            max_pending_orders=settings.max_pending_orders,
        ),
    }


def _sink_factories(settings: Settings) -> Dict[str, Callable[[], Sink]]:
    """Registry of available sinks."""
    return {
        ConsoleSink.name: lambda: ConsoleSink(),
        PostgresSink.name: lambda: PostgresSink(),
        KafkaSink.name: lambda: KafkaSink(settings),
    }


def available_modes() -> List[str]:
    """List available generator modes."""
    return sorted(_generator_factories(get_settings()).keys())


def available_sinks() -> List[str]:
    """List available sink names."""
    return sorted(_sink_factories(get_settings()).keys())


def build_generator(mode: str, rng: random.Random, settings: Optional[Settings] = None) -> LoadGenerator:
    factories = _generator_factories(settings or get_settings())
    if mode not in factories:
        raise ValueError(f"Unknown mode '{mode}'. Available: {', '.join(sorted(factories))}")
    return factories[mode](rng)


def build_sink(name: str, settings: Optional[Settings] = None) -> Sink:
    factories = _sink_factories(settings or get_settings())
    if name not in factories:
        raise ValueError(f"Unknown sink '{name}'. Available: {', '.join(sorted(factories))}")
    return factories[name]()


class _Pacer:
    """Spaces writes ``1 / qps`` seconds apart; a no-op without a target."""

    def __init__(self, qps: Optional[float]) -> None:
        if qps is not None and qps <= 0:
            raise ValueError(f"qps must be > 0, got {qps}")
        self._interval = 1.0 / qps if qps else 0.0
        self._next_at: Optional[float] = None

    async def wait(self) -> None:
        if not self._interval:
            return
        now = asyncio.get_running_loop().time()
        # No catch-up burst after a slow sink write.
        if self._next_at is None or self._next_at < now:
            self._next_at = now
        delay = self._next_at - now
        self._next_at += self._interval
        if delay > 0:
            await asyncio.sleep(delay)


async def _next_record(queue: "asyncio.Queue[SinkRecord]", stop: asyncio.Event) -> Optional[SinkRecord]:
    """Take the next record, or None once ``stop`` is set."""
    if stop.is_set():
        return None
    if not queue.empty():
        return queue.get_nowait()

    get = asyncio.ensure_future(queue.get())
    stopped = asyncio.ensure_future(stop.wait())
    try:
        await asyncio.wait({get, stopped}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        received = get.done() and not get.cancelled()
        for task in (get, stopped):
            if not task.done():
                task.cancel()
    return get.result() if received else None


async def run_load(
    generator: LoadGenerator,
    sink: Sink,
    config: RunConfig,
    stop: Optional[asyncio.Event] = None,
) -> LoadStats:
    """
    Stream records from ``generator`` into ``sink`` until stopped.

    Parameters
    ----------
    generator : LoadGenerator
        Source of records; its `load()` runs as a separate task.
    sink : Sink
        Destination; prepared with the generator's topics and always closed.
    config : RunConfig
        Pacing, queue bound and stop conditions.
    stop : asyncio.Event, optional
        External stop signal. Setting it ends the run gracefully.

    Returns
    -------
    LoadStats
        Counts and duration of the run (profiling fields are left empty).

    Raises
    ------
    ValueError
        When ``qps`` or ``duration_seconds`` is set but not positive.

    Notes
    -----
    Records still buffered in the queue when the run stops are discarded and
    counted in `LoadStats.discarded`. Records the sink cannot encode are logged
    and counted in `LoadStats.skipped`; any other sink error ends the run.
    """
    if config.duration_seconds is not None and config.duration_seconds <= 0:
        raise ValueError(f"duration_seconds must be > 0, got {config.duration_seconds}")
    stop = stop or asyncio.Event()
    loop = asyncio.get_running_loop()
    queue: "asyncio.Queue[SinkRecord]" = asyncio.Queue(maxsize=config.queue_size)
    stats = LoadStats(mode=generator.name, sink=sink.name)
    per_topic: Counter = Counter()
    pacer = _Pacer(config.qps)

    start = loop.time()
    last_report = start
    deadline = (
        loop.call_later(config.duration_seconds, stop.set)
        if config.duration_seconds is not None
        else None
    )
    producer: Optional[asyncio.Task] = None
    log.info(
        f"[LOAD START] {generator.name} -> {sink.name}",
        extra={"mode": generator.name, "sink": sink.name, "topics": generator.topics()},
    )
    try:
        await sink.prepare(generator.topics())
        producer = asyncio.create_task(generator.load(stop, queue), name=f"load-{generator.name}")
        # A generator that returns or fails on its own ends the run too.
        producer.add_done_callback(lambda _: stop.set())

        while True:
            record = await _next_record(queue, stop)
            if record is None:
                break
            await pacer.wait()
            try:
                await sink.write(record)
            except RecordEncodingError:
                stats.skipped += 1
                log.exception(
                    "Skipping record that could not be encoded",
                    extra={"topic": record.topic, "key": record.key},
                )
                continue

            stats.records += 1
            per_topic[record.topic] += 1
            if config.max_records is not None and stats.records >= config.max_records:
                stop.set()

            now = loop.time()
            if now - last_report >= config.report_interval_seconds:
                last_report = now
                log.info(
                    f"Sent {stats.records} records in total (elapsed {now - start:.1f}s)",
                    extra={"records": stats.records, "skipped": stats.skipped},
                )
    finally:
        stop.set()
        if deadline is not None:
            deadline.cancel()
        try:
            if producer is not None:
                await producer
        finally:
            stats.discarded = queue.qsize()
            if stats.discarded:
                log.info("Discarded buffered records", extra={"discarded": stats.discarded})
            await sink.close()
            stats.per_topic = dict(per_topic)
            stats.duration_seconds = loop.time() - start

    log.info(
        f"[LOAD DONE] {generator.name} -> {sink.name}",
        extra={"records": stats.records, "skipped": stats.skipped},
    )
    return stats


def _install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop.set)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform or outside the main thread.
            log.debug("Signal handler not installed", extra={"signal": signum})


async def _run_async(config: RunConfig, settings: Settings) -> LoadStats:
    stop = asyncio.Event()
    _install_signal_handlers(stop)
    rng = random.Random(config.seed)
    generator = build_generator(config.mode, rng, settings)
    sink = build_sink(config.sink, settings)
    return await run_load(generator, sink, config, stop)


def run(config: RunConfig, settings: Optional[Settings] = None) -> LoadStats:
    """
    Run one generator to completion from synchronous code and profile it.

    Raises
    ------
    ValueError
        On an unknown mode or sink, or invalid generator settings.
    """
    settings = settings or get_settings()
    with profile_block(config.mode) as profile:
        stats = asyncio.run(_run_async(config, settings))
    stats.peak_rss_bytes = profile.peak_rss_bytes
    stats.cpu_percent = profile.cpu_percent
    return stats


__all__ = [
    "LoadStats",
    "RunConfig",
    "available_modes",
    "available_sinks",
    "build_generator",
    "build_sink",
    "run",
    "run_load",
]
