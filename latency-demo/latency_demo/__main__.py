#!/usr/bin/env python3
"""Run a traced Root -> Foo -> Bar workload and export its spans and latency."""

import asyncio
import logging
import random
from typing import Optional, Tuple

import structlog
import typer
from opentelemetry import trace
from rich.console import Console
from rich.table import Table

from .utils.config import (
    BAR_MAX_WAIT_MS,
    FOO_MAX_WAIT_MS,
    LOG_LEVEL,
    PORT,
    TICK_INTERVAL,
    Settings,
)
from .utils.driver import serve
from .utils.errors import LatencyDemoError
from .utils.exporter import Exporter, init_exporter
from .utils.project import discover_project_id
from .utils.workload import SystemClock, Workload


def configure_logging(level: str = LOG_LEVEL):
    logging.basicConfig(level=level.upper(), format="%(message)s")
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()

logger = structlog.get_logger(__name__)
console = Console()
app = typer.Typer(help="Traced latency workload for exporter integration checks")


def display_summary(title: str, rows):
    table = Table(title=title)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    for key, value in rows:
        table.add_row(str(key), str(value))
    console.print(table)


def resolve_project_id(project_id: Optional[str]) -> str:
    if project_id:
        return project_id
    try:
        return discover_project_id()
    except LatencyDemoError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def bootstrap(settings: Settings) -> Tuple[Exporter, Workload]:
    try:
        exporter = init_exporter(settings)
    except LatencyDemoError as e:
        console.print(f"[red]{e}[/red]")
        logger.exception("Exporter bootstrap failed")
        raise typer.Exit(1)
    workload = Workload(
        tracer=exporter.tracer,
        recorder=exporter.recorder(),
        rng=random.Random(settings.seed),
        clock=SystemClock(),
        foo_max_wait_ms=settings.foo_max_wait_ms,
        bar_max_wait_ms=settings.bar_max_wait_ms,
    )
    return exporter, workload


@app.command()
def run(
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Skip discovery and use this project"),
    port: int = typer.Option(PORT, "--port", help="Port of the liveness endpoint"),
    interval: float = typer.Option(TICK_INTERVAL, "--interval", "-i", help="Seconds between Root invocations"),
    console_export: bool = typer.Option(False, "--console", help="Print spans and metrics instead of using OTLP"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the simulated delays"),
    foo_max_ms: int = typer.Option(FOO_MAX_WAIT_MS, "--foo-max-ms", help="Upper bound of Foo's delay"),
    bar_max_ms: int = typer.Option(BAR_MAX_WAIT_MS, "--bar-max-ms", help="Upper bound of Bar's delay"),
):
    """Invoke Root periodically and serve a liveness endpoint."""
    settings = Settings(
        project_id=resolve_project_id(project_id),
        port=port,
        interval=interval,
        console=console_export,
        seed=seed,
        foo_max_wait_ms=foo_max_ms,
        bar_max_wait_ms=bar_max_ms,
    )
    exporter, workload = bootstrap(settings)
    console.print(f"\n[bold blue]Running workload every {interval}s on port {port}[/bold blue]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")
    try:
        asyncio.run(serve(workload, settings))
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping...[/yellow]")
    finally:
        exporter.shutdown()


@app.command()
def once(
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Skip discovery and use this project"),
    console_export: bool = typer.Option(False, "--console", help="Print spans and metrics instead of using OTLP"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the simulated delays"),
    foo_max_ms: int = typer.Option(FOO_MAX_WAIT_MS, "--foo-max-ms", help="Upper bound of Foo's delay"),
    bar_max_ms: int = typer.Option(BAR_MAX_WAIT_MS, "--bar-max-ms", help="Upper bound of Bar's delay"),
):
    """Invoke Root a single time and flush everything it produced."""
    settings = Settings(
        project_id=resolve_project_id(project_id),
        console=console_export,
        seed=seed,
        foo_max_wait_ms=foo_max_ms,
        bar_max_wait_ms=bar_max_ms,
    )
    exporter, workload = bootstrap(settings)
    try:
        measurement = workload.root()
        span_context = measurement.span_context
        display_summary(
            "Root invocation",
            [
                ("measure", measurement.measure.name),
                ("latency", f"{measurement.value}{measurement.measure.unit}"),
                ("trace_id", trace.format_trace_id(span_context.trace_id)),
                ("span_id", trace.format_span_id(span_context.span_id)),
            ],
        )
    finally:
        exporter.force_flush()
        exporter.shutdown()


@app.command()
def show_config(
    project_id: Optional[str] = typer.Option(None, "--project-id", help="Skip discovery and use this project"),
):
    """Show the settings a run would use."""
    settings = Settings(project_id=resolve_project_id(project_id))
    display_summary("Configuration", settings.as_rows())


if __name__ == "__main__":
    app()
