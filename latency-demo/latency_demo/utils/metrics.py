"""Latency measure, its view, and the recorder that ties a measurement to a span."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Protocol, Tuple

import structlog
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.metrics import Histogram
from opentelemetry.sdk.metrics.view import ExplicitBucketHistogramAggregation, View
from opentelemetry.trace import NonRecordingSpan, Span, SpanContext

from .config import LATENCY_BUCKETS, LATENCY_UNIT, MEASURE_LATENCY

logger = structlog.get_logger(__name__)

ATTACHMENT_KEY_SPAN_CONTEXT = "SpanContext"

NANOS_PER_MILLI = 1000 * 1000


@dataclass(frozen=True)
class Measure:
    name: str
    description: str
    unit: str
    view_description: str
    buckets: Tuple[float, ...] = ()


LATENCY_MEASURE = Measure(
    name=MEASURE_LATENCY,
    description="query latency",
    unit=LATENCY_UNIT,
    view_description="the latency of root function per query",
    buckets=LATENCY_BUCKETS,
)


def latency_view(measure: Measure = LATENCY_MEASURE) -> View:
    return View(
        instrument_name=measure.name,
        name=measure.name,
        description=measure.view_description,
        aggregation=ExplicitBucketHistogramAggregation(boundaries=measure.buckets),
    )


@dataclass(frozen=True)
class Measurement:
    measure: Measure
    value: int
    attachments: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "attachments", MappingProxyType(dict(self.attachments)))

    @property
    def span_context(self) -> Optional[SpanContext]:
        return self.attachments.get(ATTACHMENT_KEY_SPAN_CONTEXT)


class MeasurementExporter(Protocol):
    def export_measurement(self, measurement: Measurement) -> None: ...


class HistogramMeasurementExporter:
    """Feeds measurements into an OTel histogram.

    The span context attachment is turned back into a context so the SDK keeps
    it as an exemplar next to the bucket the value lands in.
    """

    def __init__(self, histogram: Histogram):
        self.histogram = histogram

    def export_measurement(self, measurement: Measurement) -> None:
        context = None
        span_context = measurement.span_context
        if span_context is not None:
            context = trace.set_span_in_context(NonRecordingSpan(span_context))
        self.histogram.record(measurement.value, context=context)


def duration_ms(start_ns: int, end_ns: int) -> int:
    return (end_ns - start_ns) // NANOS_PER_MILLI


class LatencyRecorder:
    def __init__(self, exporter: MeasurementExporter, measure: Measure = LATENCY_MEASURE):
        self.exporter = exporter
        self.measure = measure

    def record_root_latency(
        self, context: Context, span: Optional[Span], start: int, end: int
    ) -> Measurement:
        if span is None:
            span = trace.get_current_span(context)
        measurement = Measurement(
            measure=self.measure,
            value=duration_ms(start, end),
            attachments={ATTACHMENT_KEY_SPAN_CONTEXT: span.get_span_context()},
        )
        self.exporter.export_measurement(measurement)
        logger.debug(
            "Recorded latency",
            measure=self.measure.name,
            value=measurement.value,
            trace_id=trace.format_trace_id(measurement.span_context.trace_id),
        )
        return measurement
