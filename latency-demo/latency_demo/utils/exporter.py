"""Span and metric exporter bootstrap.

Providers are kept on the returned handle rather than installed as the global
OTel providers; the workload receives its tracer and recorder explicitly.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.metrics import Histogram
from opentelemetry.sdk.metrics import MeterProvider, TraceBasedExemplarFilter
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.trace import Tracer

from .config import Settings
from .errors import ExporterInitError
from .metrics import LATENCY_MEASURE, HistogramMeasurementExporter, LatencyRecorder, Measure, latency_view

logger = structlog.get_logger(__name__)

INSTRUMENTATION_NAME = "latency_demo"


@dataclass(frozen=True)
class Exporter:
    tracer_provider: TracerProvider
    meter_provider: MeterProvider
    tracer: Tracer
    latency_histogram: Histogram
    measure: Measure = LATENCY_MEASURE

    def recorder(self) -> LatencyRecorder:
        return LatencyRecorder(HistogramMeasurementExporter(self.latency_histogram), self.measure)

    def force_flush(self) -> None:
        self.tracer_provider.force_flush()
        self.meter_provider.force_flush()

    def shutdown(self) -> None:
        self.tracer_provider.shutdown()
        self.meter_provider.shutdown()


def _span_processor(settings: Settings, span_exporter: Optional[SpanExporter]):
    if span_exporter is not None:
        return SimpleSpanProcessor(span_exporter)
    if settings.console:
        return SimpleSpanProcessor(ConsoleSpanExporter())
    endpoint = settings.otlp_endpoint.rstrip("/")
    return BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{endpoint}/v1/traces"))


def _metric_reader(settings: Settings, metric_reader: Optional[MetricReader]) -> MetricReader:
    if metric_reader is not None:
        return metric_reader
    if settings.console:
        metric_exporter = ConsoleMetricExporter()
    else:
        endpoint = settings.otlp_endpoint.rstrip("/")
        metric_exporter = OTLPMetricExporter(endpoint=f"{endpoint}/v1/metrics")
    return PeriodicExportingMetricReader(
        metric_exporter, export_interval_millis=settings.metric_export_interval_ms
    )


def init_exporter(
    settings: Settings,
    span_exporter: Optional[SpanExporter] = None,
    metric_reader: Optional[MetricReader] = None,
    measure: Measure = LATENCY_MEASURE,
) -> Exporter:
    """Build tracer and meter providers that ship to the configured backend.

    ``span_exporter`` and ``metric_reader`` replace the OTLP (or console)
    destinations, which is how tests capture what would be exported.
    """
    try:
        resource = Resource.create(
            {"service.name": settings.service_name, "gcp.project_id": settings.project_id}
        )
        tracer_provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)
        tracer_provider.add_span_processor(_span_processor(settings, span_exporter))

        meter_provider = MeterProvider(
            metric_readers=[_metric_reader(settings, metric_reader)],
            resource=resource,
            views=[latency_view(measure)],
            exemplar_filter=TraceBasedExemplarFilter(),
        )
    except Exception as e:
        raise ExporterInitError(f"failed to create exporter: {e}") from e

    histogram = meter_provider.get_meter(INSTRUMENTATION_NAME).create_histogram(
        name=measure.name, unit=measure.unit, description=measure.description
    )
    logger.info(
        "Exporter initialized",
        project_id=settings.project_id,
        destination="console" if settings.console else settings.otlp_endpoint,
        measure=measure.name,
    )
    return Exporter(
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
        tracer=tracer_provider.get_tracer(INSTRUMENTATION_NAME),
        latency_histogram=histogram,
        measure=measure,
    )
