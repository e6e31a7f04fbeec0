"""
Span data types and their serialised forms.

This module defines the data structures that map to OpenTelemetry's
trace model: spans, attributes and status, together with
the two record layouts a span can be rendered into:

- ``to_record()``: a flat, self-describing JSON object (one per line);
- ``to_otlp()``: the OTLP/JSON span object.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Optional
import time
import uuid


class SpanKind(IntEnum):
    """OpenTelemetry span kinds."""

    INTERNAL = 1
    SERVER = 2
    CLIENT = 3
    PRODUCER = 4
    CONSUMER = 5


class SpanStatus(IntEnum):
    """OpenTelemetry span status codes."""

    UNSET = 0
    OK = 1
    ERROR = 2

    @property
    def label(self) -> str:
        return {0: "Unset", 1: "Ok", 2: "Error"}[int(self)]


@dataclass
class Attribute:
    """A key-value attribute for spans."""

    key: str
    value: str

    def to_otlp(self) -> dict:
        """Convert to OTLP attribute format."""
        return {"key": self.key, "value": {"stringValue": self.value}}


@dataclass
class Span:
    """
    A completed span representing one unit of test execution.

    Spans are synthesised from single output lines, so they carry no
    parent and start and end at the same instant unless set otherwise.
    """

    trace_id: str
    span_id: str
    name: str
    parent_span_id: Optional[str] = None
    kind: SpanKind = SpanKind.INTERNAL
    start_time_ns: Optional[int] = None
    end_time_ns: Optional[int] = None
    status: SpanStatus = SpanStatus.UNSET
    status_message: str = ""
    attributes: list[Attribute] = field(default_factory=list)

    def attribute_map(self) -> dict[str, str]:
        """Attributes as a plain string mapping, last key wins."""
        return {a.key: a.value for a in self.attributes}

    def to_otlp(self) -> dict:
        """Convert to OTLP span format."""
        span = {
            "traceId": self.trace_id,
            "spanId": self.span_id,
            "name": self.name,
            "kind": int(self.kind),
            "status": {
                "code": int(self.status),
            },
            "attributes": [a.to_otlp() for a in self.attributes],
        }

        if self.parent_span_id:
            span["parentSpanId"] = self.parent_span_id

        if self.start_time_ns:
            span["startTimeUnixNano"] = str(self.start_time_ns)

        if self.end_time_ns:
            span["endTimeUnixNano"] = str(self.end_time_ns)

        if self.status_message:
            span["status"]["message"] = self.status_message

        return span

    def to_record(self, resource: Optional[dict[str, str]] = None) -> dict:
        """Convert to the flat line-oriented record layout."""
        record = {
            "traceID": self.trace_id,
            "spanID": self.span_id,
            "parentSpanID": self.parent_span_id or "",
            "name": self.name,
            "kind": self.kind.name.lower(),
            "startTime": format_timestamp(self.start_time_ns),
            "endTime": format_timestamp(self.end_time_ns),
            "attributes": self.attribute_map(),
            "events": [],
            "links": [],
            "status": {
                "code": self.status.label,
                "description": self.status_message,
            },
        }
        if resource is not None:
            record["resource"] = dict(resource)
        return record


def generate_trace_id() -> str:
    """Generate a 32-character hex trace ID (16 bytes)."""
    return uuid.uuid4().hex


def generate_span_id() -> str:
    """Generate a 16-character hex span ID (8 bytes)."""
    return uuid.uuid4().hex[:16]


def now_ns() -> int:
    """Current time in nanoseconds since Unix epoch."""
    return time.time_ns()


def format_timestamp(timestamp_ns: Optional[int]) -> str:
    """RFC 3339 UTC timestamp with microsecond precision, or ``""``."""
    if timestamp_ns is None:
        return ""
    seconds, remainder = divmod(timestamp_ns, 1_000_000_000)
    dt = datetime.fromtimestamp(seconds, tz=timezone.utc).replace(
        microsecond=remainder // 1000
    )
    return dt.isoformat().replace("+00:00", "Z")
