"""Tests for the latency measure and recorder."""

import pytest
from opentelemetry import trace

from latency_demo.utils.config import LATENCY_BUCKETS, MEASURE_LATENCY
from latency_demo.utils.metrics import (
    ATTACHMENT_KEY_SPAN_CONTEXT,
    LATENCY_MEASURE,
    HistogramMeasurementExporter,
    LatencyRecorder,
    Measurement,
    duration_ms,
)
from latency_demo.utils.tracing import ROOT_CONTEXT, begin_span, end_span


class RecordingHistogram:
    def __init__(self):
        self.calls = []

    def record(self, amount, attributes=None, context=None):
        self.calls.append((amount, context))


class TestDurationMs:
    def test_truncates_instead_of_rounding(self):
        assert duration_ms(1_000_000_000, 1_237_500_000) == 237

    def test_sub_millisecond_is_zero(self):
        assert duration_ms(5, 999_999) == 0

    def test_exact_milliseconds(self):
        assert duration_ms(0, 2_000_000_000) == 2000


class TestLatencyMeasure:
    def test_descriptor(self):
        assert LATENCY_MEASURE.name == MEASURE_LATENCY
        assert LATENCY_MEASURE.unit == "ms"
        assert LATENCY_MEASURE.buckets == LATENCY_BUCKETS
        assert LATENCY_BUCKETS == (100.0, 200.0, 400.0, 1000.0, 2000.0, 4000.0)

    def test_descriptor_is_read_only(self):
        with pytest.raises(AttributeError):
            LATENCY_MEASURE.name = "other"


class TestLatencyRecorder:
    def test_records_one_measurement_tagged_with_span(self, tracer, collector):
        context, span = begin_span(tracer, ROOT_CONTEXT, "root")
        recorder = LatencyRecorder(collector)

        measurement = recorder.record_root_latency(context, span, 1_000_000_000, 1_237_500_000)
        end_span(span)

        assert collector.measurements == [measurement]
        assert measurement.value == 237
        assert measurement.measure is LATENCY_MEASURE
        assert measurement.attachments[ATTACHMENT_KEY_SPAN_CONTEXT] == span.get_span_context()

    def test_falls_back_to_span_in_context(self, tracer, collector):
        context, span = begin_span(tracer, ROOT_CONTEXT, "root")

        measurement = LatencyRecorder(collector).record_root_latency(context, None, 0, 3_000_000)
        end_span(span)

        assert measurement.span_context == span.get_span_context()
        assert measurement.value == 3

    def test_attachments_cannot_be_modified(self):
        measurement = Measurement(measure=LATENCY_MEASURE, value=1, attachments={"k": "v"})
        with pytest.raises(TypeError):
            measurement.attachments["k"] = "other"


class TestHistogramMeasurementExporter:
    def test_rebuilds_context_from_attachment(self, tracer):
        _, span = begin_span(tracer, ROOT_CONTEXT, "root")
        end_span(span)
        histogram = RecordingHistogram()
        measurement = Measurement(
            measure=LATENCY_MEASURE,
            value=42,
            attachments={ATTACHMENT_KEY_SPAN_CONTEXT: span.get_span_context()},
        )

        HistogramMeasurementExporter(histogram).export_measurement(measurement)

        ((amount, context),) = histogram.calls
        assert amount == 42
        assert trace.get_current_span(context).get_span_context() == span.get_span_context()

    def test_without_attachment_records_plain_value(self):
        histogram = RecordingHistogram()

        HistogramMeasurementExporter(histogram).export_measurement(Measurement(LATENCY_MEASURE, 7))

        assert histogram.calls == [(7, None)]
