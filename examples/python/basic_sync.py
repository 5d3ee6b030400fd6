"""Run the workload once and print its spans and latency to the console."""

import random

from latency_demo.utils.config import Settings
from latency_demo.utils.exporter import init_exporter
from latency_demo.utils.workload import SystemClock, Workload


def main():
    exporter = init_exporter(Settings(project_id="local-example", console=True))
    workload = Workload(
        tracer=exporter.tracer,
        recorder=exporter.recorder(),
        rng=random.Random(),
        clock=SystemClock(),
    )

    measurement = workload.root()
    print(f"Root latency: {measurement.value}ms")
    exporter.force_flush()
    exporter.shutdown()


if __name__ == "__main__":
    main()
