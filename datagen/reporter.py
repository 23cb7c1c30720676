from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from datagen.orchestrator import LoadStats


def print_stats(stats: LoadStats, console: Optional[Console] = None) -> None:
    """
    Render a finished run as a rich table: one row per topic, totals in the caption.
    """
    console = console or Console(stderr=True)

    if not stats.per_topic:
        console.print(f"[yellow]No records written by '{stats.mode}' to '{stats.sink}'.[/yellow]")
        return

    caption_parts = [
        f"{stats.records:,} records in {stats.duration_seconds:.1f}s",
        f"{stats.throughput_records_per_sec:,.2f} records/s",
    ]
    if stats.peak_rss_bytes:
        caption_parts.append(f"peak RSS {stats.peak_rss_bytes / (1024 * 1024):.2f} MB")
    if stats.cpu_percent is not None:
        caption_parts.append(f"CPU {stats.cpu_percent:.1f}%")
    if stats.skipped:
        caption_parts.append(f"[red]{stats.skipped:,} skipped[/red]")
    if stats.discarded:
        caption_parts.append(f"{stats.discarded:,} discarded on stop")

    table = Table(
        title=f"datagen: {stats.mode} -> {stats.sink}",
        box=box.ROUNDED,
        caption=" │ ".join(caption_parts),
    )
    table.add_column("Topic", style="cyan", no_wrap=True)
    table.add_column("Records", justify="right", style="magenta")
    table.add_column("Share", justify="right", style="green")

    for topic, count in sorted(stats.per_topic.items(), key=lambda item: item[1], reverse=True):
        share = count / stats.records if stats.records else 0.0
        table.add_row(topic, f"{count:,}", f"{share:.1%}")

    console.print(table)


__all__ = ["print_stats"]
