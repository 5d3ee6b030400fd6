"""The simulated Root -> Foo -> Bar call chain."""

import time
from dataclasses import dataclass
from typing import Protocol

import structlog
from opentelemetry.context import Context
from opentelemetry.trace import Span, Tracer

from .config import (
    BAR_MAX_WAIT_MS,
    BAR_SPAN,
    BAR_WAIT_ATTRIBUTE,
    FOO_MAX_WAIT_MS,
    FOO_SPAN,
    FOO_WAIT_ATTRIBUTE,
    ROOT_SPAN,
)
from .metrics import LatencyRecorder, Measurement
from .tracing import ROOT_CONTEXT, span_scope

logger = structlog.get_logger(__name__)


class Clock(Protocol):
    def now_ns(self) -> int: ...

    def sleep_ms(self, ms: int) -> None: ...


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int: ...


class SystemClock:
    def now_ns(self) -> int:
        return time.time_ns()

    def sleep_ms(self, ms: int) -> None:
        time.sleep(ms / 1000)


@dataclass(frozen=True)
class Workload:
    """Everything one invocation of the chain needs, built once at startup."""

    tracer: Tracer
    recorder: LatencyRecorder
    rng: RandomSource
    clock: Clock
    foo_max_wait_ms: int = FOO_MAX_WAIT_MS
    bar_max_wait_ms: int = BAR_MAX_WAIT_MS

    def root(self) -> Measurement:
        with span_scope(self.tracer, ROOT_CONTEXT, ROOT_SPAN) as (context, span):
            start = self.clock.now_ns()
            self.foo(context)
            end = self.clock.now_ns()
            return self.recorder.record_root_latency(context, span, start, end)

    def foo(self, context: Context) -> None:
        with span_scope(self.tracer, context, FOO_SPAN) as (context, span):
            ms = self.draw_wait(span, "foo", FOO_WAIT_ATTRIBUTE, self.foo_max_wait_ms)
            self.bar(context)
            self.clock.sleep_ms(ms)

    def bar(self, context: Context) -> None:
        with span_scope(self.tracer, context, BAR_SPAN) as (_, span):
            self.simulate(span, "bar", BAR_WAIT_ATTRIBUTE, self.bar_max_wait_ms)

    def draw_wait(self, span: Span, task: str, attribute: str, upper_bound_ms: int) -> int:
        ms = self.rng.randrange(upper_bound_ms)
        span.set_attribute(attribute, ms)
        logger.info(f"task {task} blocked", attribute=attribute, wait_ms=ms)
        return ms

    def simulate(self, span: Span, task: str, attribute: str, upper_bound_ms: int) -> int:
        # the attribute is on the span before the sleep starts
        ms = self.draw_wait(span, task, attribute, upper_bound_ms)
        self.clock.sleep_ms(ms)
        return ms
