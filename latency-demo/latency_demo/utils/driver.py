"""Periodic driver for the workload, plus the combined ticker/HTTP runner."""

import asyncio
import contextlib
import math
from typing import Optional

import structlog
import uvicorn

from .config import Settings
from .server import create_app
from .workload import Workload

logger = structlog.get_logger(__name__)


async def run_ticker(workload: Workload, interval: float, max_ticks: Optional[int] = None) -> int:
    """Invoke ``workload.root`` every ``interval`` seconds.

    Invocations never overlap. When one overruns, the ticks it covered are
    dropped rather than fired back to back. Returns the number of ticks run.
    """
    loop = asyncio.get_running_loop()
    next_tick = loop.time() + interval
    ticks = 0
    while max_ticks is None or ticks < max_ticks:
        await asyncio.sleep(max(0.0, next_tick - loop.time()))
        ticks += 1
        logger.info("loop start", tick=ticks)
        try:
            measurement = await asyncio.to_thread(workload.root)
            logger.info("loop end", tick=ticks, latency_ms=measurement.value)
        except Exception:
            logger.exception("Workload invocation failed", tick=ticks)

        next_tick += interval
        behind = loop.time() - next_tick
        if behind > 0:
            dropped = math.ceil(behind / interval) if interval > 0 else 0
            logger.warning("Dropping ticks", dropped=dropped)
            next_tick += dropped * interval
    return ticks


async def serve(workload: Workload, settings: Settings, host: str = "0.0.0.0") -> None:
    server = uvicorn.Server(uvicorn.Config(create_app(), host=host, port=settings.port, log_level="info"))
    ticker = asyncio.create_task(run_ticker(workload, settings.interval))
    logger.info("starting loop", interval=settings.interval, port=settings.port)
    try:
        await server.serve()
    finally:
        ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker
