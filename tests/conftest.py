"""Pytest configuration and fixtures."""

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON

from latency_demo.utils.metrics import LatencyRecorder
from latency_demo.utils.workload import Workload


class FakeClock:
    """Clock that only moves when something sleeps on it."""

    def __init__(self, start_ns: int = 1_000_000_000):
        self.now = start_ns
        self.sleeps = []

    def now_ns(self) -> int:
        return self.now

    def sleep_ms(self, ms: int) -> None:
        self.sleeps.append(ms)
        self.now += ms * 1_000_000


class FixedRandom:
    def __init__(self, *values):
        self.values = list(values)
        self.bounds = []

    def randrange(self, stop: int) -> int:
        self.bounds.append(stop)
        return self.values.pop(0)


class MeasurementCollector:
    def __init__(self):
        self.measurements = []

    def export_measurement(self, measurement):
        self.measurements.append(measurement)


@pytest.fixture
def span_exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(span_exporter):
    provider = TracerProvider(sampler=ALWAYS_ON)
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    yield provider
    provider.shutdown()


@pytest.fixture
def tracer(tracer_provider):
    return tracer_provider.get_tracer("tests")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def collector():
    return MeasurementCollector()


@pytest.fixture
def make_workload(tracer, collector, clock):
    """Build a Workload on the in-memory tracer; delays come from ``rng``."""

    def _make(rng, workload_clock=None, **kwargs):
        return Workload(
            tracer=tracer,
            recorder=LatencyRecorder(collector),
            rng=rng,
            clock=workload_clock or clock,
            **kwargs,
        )

    return _make


def spans_by_name(span_exporter):
    return {span.name: span for span in span_exporter.get_finished_spans()}
