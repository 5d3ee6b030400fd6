"""Build a span tree by hand with explicit contexts and send it over OTLP."""

import time

from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

from latency_demo.utils.tracing import ROOT_CONTEXT, begin_span, end_span, span_scope

resource = Resource(attributes={"service.name": "otel-example"})
tracer_provider = TracerProvider(resource=resource)
tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint="http://localhost:4318/v1/traces")))

tracer = tracer_provider.get_tracer(__name__)


def main():
    context, parent = begin_span(tracer, ROOT_CONTEXT, "parent-operation")
    try:
        parent.set_attribute("operation.type", "example")
        print("Parent span created")

        with span_scope(tracer, context, "child-operation") as (_, child):
            child.set_attribute("step", "processing")
            print("Child span created")
            time.sleep(0.1)

        with span_scope(tracer, context, "another-child") as (_, child):
            child.set_attribute("step", "finalizing")
            print("Another child span created")
            time.sleep(0.05)
    finally:
        end_span(parent)

    print("Traces sent!")
    tracer_provider.force_flush()


if __name__ == "__main__":
    main()
