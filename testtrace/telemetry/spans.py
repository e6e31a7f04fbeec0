"""
Span synthesis for qualifying test events.

Each qualifying ``output`` line becomes its own span in its own trace.
No attempt is made to correlate several lines of the same test: the line
is treated as an instantaneous event, so start and end times coincide.
"""

from dataclasses import dataclass
from typing import Callable

from testtrace.model.event import TestEvent
from testtrace.telemetry.events import (
    Span,
    SpanKind,
    SpanStatus,
    Attribute,
    generate_trace_id,
    generate_span_id,
    now_ns,
)

FAIL_MARKER = "FAIL"


@dataclass
class SpanSynthesizer:
    """
    Builds completed spans from qualifying test events.

    The span name is the test name, which is the empty string for
    package-level output. Exactly three attributes are attached:
    ``package``, ``action`` and ``output``, copied verbatim from the event.

    Usage:
        synthesizer = SpanSynthesizer()
        span = synthesizer.synthesize(event)
    """

    clock: Callable[[], int] = now_ns

    def synthesize(self, event: TestEvent) -> Span:
        """Create a span for one event. The caller guarantees qualification."""
        timestamp = self.clock()

        if FAIL_MARKER in event.output:
            status = SpanStatus.ERROR
            status_message = event.output.strip()
        else:
            status = SpanStatus.OK
            status_message = ""

        return Span(
            trace_id=generate_trace_id(),
            span_id=generate_span_id(),
            name=event.test,
            kind=SpanKind.INTERNAL,
            start_time_ns=timestamp,
            end_time_ns=timestamp,
            status=status,
            status_message=status_message,
            attributes=[
                Attribute("package", event.package),
                Attribute("action", event.action),
                Attribute("output", event.output),
            ],
        )
