from __future__ import annotations

import json
import random
import sys
from typing import Optional

import typer

from datagen.config import get_settings
from datagen.orchestrator import RunConfig, available_modes, available_sinks, build_generator, run
from datagen.reporter import print_stats
from datagen.utils.logging import configure_logging

app = typer.Typer(help="Synthetic event load generator for streaming pipelines.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"kafka={settings.kafka_bootstrap_servers} | seed={settings.seed} qps={settings.qps} "
        f"queue={settings.queue_size} catalog={settings.catalog_size} "
        f"window={settings.max_pending_orders}"
    )
    typer.echo("Modes: " + ", ".join(available_modes()))
    typer.echo("Sinks: " + ", ".join(available_sinks()))


@app.command()
def topics(
    mode: str = typer.Option(..., "--mode", "-m", help="Generator mode (ad-click, ecommerce)."),
) -> None:
    """
    List the topics a generator writes to.
    """
    try:
        generator = build_generator(mode, random.Random(0))
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--mode") from exc
    for topic in generator.topics():
        typer.echo(topic)


@app.command("run")
def run_command(
    mode: str = typer.Option(..., "--mode", "-m", help="Generator mode (ad-click, ecommerce)."),
    sink: str = typer.Option("print", "--sink", "-s", help="Destination (print, postgres, kafka)."),
    qps: Optional[float] = typer.Option(None, "--qps", help="Records per second (default unlimited)."),
    records: Optional[int] = typer.Option(None, "--records", "-n", help="Stop after N records."),
    duration: Optional[float] = typer.Option(None, "--duration", "-d", help="Stop after S seconds."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Deterministic RNG seed."),
    queue_size: Optional[int] = typer.Option(
        None, "--queue-size", help="Generator output buffer (0 = unbounded)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print run statistics as JSON."),
) -> None:
    """
    Stream generated records into a sink until a limit is hit or Ctrl-C.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    config = RunConfig.from_settings(
        mode,
        settings,
        sink=sink,
        qps=qps,
        max_records=records,
        duration_seconds=duration,
        seed=seed,
        queue_size=queue_size,
    )
    try:
        stats = run(config, settings)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    if as_json:
        typer.echo(json.dumps(stats.to_dict(), indent=2), err=sink == "print")
    else:
        print_stats(stats)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
