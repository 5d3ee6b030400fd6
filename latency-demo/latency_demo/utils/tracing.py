"""Span tree construction with explicitly threaded contexts.

Every span is started from a context handed in by the caller and the derived
context is handed back; nothing is attached to the ambient OTel context, so
concurrent invocations never see each other's spans.
"""

from contextlib import contextmanager
from typing import Iterator, Tuple

from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.trace import Span, Status, StatusCode, Tracer

ROOT_CONTEXT = Context()


def begin_span(tracer: Tracer, context: Context, name: str) -> Tuple[Context, Span]:
    span = tracer.start_span(name, context=context)
    return trace.set_span_in_context(span, context), span


def end_span(span: Span) -> None:
    # closing twice is a no-op, the span is exported once
    if span.is_recording():
        span.end()


@contextmanager
def span_scope(tracer: Tracer, context: Context, name: str) -> Iterator[Tuple[Context, Span]]:
    child_context, span = begin_span(tracer, context, name)
    try:
        yield child_context, span
    except BaseException as e:
        if span.is_recording():
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, f"{type(e).__name__}: {e}"))
        raise
    finally:
        end_span(span)
