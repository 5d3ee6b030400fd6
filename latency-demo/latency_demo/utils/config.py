"""Configuration constants for the traced latency workload."""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

GCP_PROJECT_ID = os.getenv("GCP_PROJECT_ID", "")
GCE_METADATA_HOST = os.getenv("GCE_METADATA_HOST", "metadata.google.internal")

PORT = int(os.getenv("PORT", "8080"))
TICK_INTERVAL = float(os.getenv("TICK_INTERVAL", "10.0"))

OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318")
SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "latency-demo")
METRIC_EXPORT_INTERVAL_MS = int(os.getenv("METRIC_EXPORT_INTERVAL_MS", "60000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

MEASURE_LATENCY = "task_latency"
LATENCY_UNIT = "ms"
LATENCY_BUCKETS = (100.0, 200.0, 400.0, 1000.0, 2000.0, 4000.0)

ROOT_SPAN = "root"
FOO_SPAN = "child_foo"
BAR_SPAN = "child_bar"

FOO_WAIT_ATTRIBUTE = "foo_wait"
BAR_WAIT_ATTRIBUTE = "bar_wait"

FOO_MAX_WAIT_MS = 2000
BAR_MAX_WAIT_MS = 1000


@dataclass(frozen=True)
class Settings:
    project_id: str = ""
    port: int = PORT
    interval: float = TICK_INTERVAL
    otlp_endpoint: str = OTLP_ENDPOINT
    service_name: str = SERVICE_NAME
    metric_export_interval_ms: int = METRIC_EXPORT_INTERVAL_MS
    console: bool = False
    foo_max_wait_ms: int = FOO_MAX_WAIT_MS
    bar_max_wait_ms: int = BAR_MAX_WAIT_MS
    seed: Optional[int] = None

    def as_rows(self) -> Tuple[Tuple[str, str], ...]:
        return (
            ("project_id", self.project_id or "-"),
            ("port", str(self.port)),
            ("interval", f"{self.interval}s"),
            ("otlp_endpoint", "console" if self.console else self.otlp_endpoint),
            ("service_name", self.service_name),
            ("metric_export_interval", f"{self.metric_export_interval_ms}ms"),
            ("foo_max_wait", f"{self.foo_max_wait_ms}ms"),
            ("bar_max_wait", f"{self.bar_max_wait_ms}ms"),
            ("seed", "random" if self.seed is None else str(self.seed)),
        )
