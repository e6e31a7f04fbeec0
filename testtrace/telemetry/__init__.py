"""
Telemetry module for testtrace.

Turns qualifying test events into spans and exports them in batches as
line-delimited JSON, either in a flat record layout or as OTLP/JSON that
can be piped to OpenTelemetry backends (Jaeger, collectors, etc.).

Usage:
    from testtrace.telemetry import BatchExporter, StreamSink, TracerProvider

    exporter = BatchExporter(StreamSink(), max_batch_size=512, flush_interval=1.0)
    provider = TracerProvider(exporter=exporter)
    provider.record(event)
    provider.shutdown()
"""

from testtrace.telemetry.encoding import OutputFormat, encode_batch
from testtrace.telemetry.events import Span, SpanStatus
from testtrace.telemetry.exporter import BatchExporter, ExporterState, ExporterStats
from testtrace.telemetry.provider import TracerProvider
from testtrace.telemetry.sink import Sink, StreamSink
from testtrace.telemetry.spans import SpanSynthesizer

__all__ = [
    "BatchExporter",
    "ExporterState",
    "ExporterStats",
    "OutputFormat",
    "Sink",
    "Span",
    "SpanStatus",
    "SpanSynthesizer",
    "StreamSink",
    "TracerProvider",
    "encode_batch",
]
