"""
Explicitly constructed tracer provider.

The provider owns the span synthesizer and the batch exporter. It is
created by the process entry point and handed to whatever needs to
record spans; there is no process-wide registry.
"""

from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING

from testtrace.model.event import TestEvent
from testtrace.telemetry.encoding import encode_batch
from testtrace.telemetry.events import Span
from testtrace.telemetry.exporter import BatchExporter
from testtrace.telemetry.sink import Sink
from testtrace.telemetry.spans import SpanSynthesizer

if TYPE_CHECKING:
    from testtrace.config import TraceSettings


@dataclass
class TracerProvider:
    """
    Records qualifying events as spans and hands them to the exporter.

    Sampling is always on: every recorded event is enqueued.

    Usage:
        provider = TracerProvider.from_settings(settings, sink)
        with provider:
            provider.record(event)
        # leaving the block shuts the exporter down and flushes
    """

    exporter: BatchExporter
    synthesizer: SpanSynthesizer = field(default_factory=SpanSynthesizer)

    @classmethod
    def from_settings(cls, settings: "TraceSettings", sink: Sink) -> "TracerProvider":
        encoder = partial(
            encode_batch,
            fmt=settings.output_format,
            resource={"service.name": settings.service_name},
        )
        exporter = BatchExporter(
            sink,
            max_batch_size=settings.max_batch_size,
            flush_interval=settings.flush_interval,
            max_queue_size=settings.max_queue_size,
            encoder=encoder,
        )
        return cls(exporter=exporter)

    def record(self, event: TestEvent) -> Span:
        """Synthesize a span for a qualifying event and enqueue it."""
        span = self.synthesizer.synthesize(event)
        self.exporter.enqueue(span)
        return span

    def force_flush(self) -> None:
        self.exporter.flush()

    def shutdown(self) -> None:
        """Flush remaining spans and close the exporter; waits for the write."""
        self.exporter.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
