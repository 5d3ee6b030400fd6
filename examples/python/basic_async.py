"""Drive the workload from the asyncio ticker for a few ticks."""

import asyncio
import random

from latency_demo.utils.config import Settings
from latency_demo.utils.driver import run_ticker
from latency_demo.utils.exporter import init_exporter
from latency_demo.utils.workload import SystemClock, Workload


async def main():
    exporter = init_exporter(Settings(project_id="local-example", console=True))
    workload = Workload(
        tracer=exporter.tracer,
        recorder=exporter.recorder(),
        rng=random.Random(42),
        clock=SystemClock(),
        foo_max_wait_ms=200,
        bar_max_wait_ms=100,
    )

    ticks = await run_ticker(workload, interval=1.0, max_ticks=3)
    print(f"Ran {ticks} ticks")
    exporter.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
