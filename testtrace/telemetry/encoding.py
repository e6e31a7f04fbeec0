"""
Serialise batches of spans into line-delimited records.

Two layouts are supported:

- ``jsonl``: one flat span record per line (see ``Span.to_record``);
- ``otlp``: one OTLP/JSON ``resourceSpans`` envelope per span per line,
  which can be piped to OTLP collectors or loaded by trace viewers.
"""

import json
from enum import Enum
from typing import Iterable, Optional

from testtrace import __version__
from testtrace.telemetry.events import Span

SCOPE_NAME = "testtrace.telemetry"


class OutputFormat(str, Enum):
    """Record layout written to the sink."""

    jsonl = "jsonl"
    otlp = "otlp"


def _resource_attributes(resource: dict[str, str]) -> list[dict]:
    return [
        {"key": key, "value": {"stringValue": value}}
        for key, value in resource.items()
    ]


def encode_span(span: Span, fmt: OutputFormat, resource: dict[str, str]) -> str:
    """Render one span as a single JSON line (without the newline)."""
    if fmt == OutputFormat.otlp:
        payload = {
            "resourceSpans": [
                {
                    "resource": {"attributes": _resource_attributes(resource)},
                    "scopeSpans": [
                        {
                            "scope": {"name": SCOPE_NAME, "version": __version__},
                            "spans": [span.to_otlp()],
                        }
                    ],
                }
            ]
        }
    else:
        payload = span.to_record(resource)

    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def encode_batch(
    spans: Iterable[Span],
    fmt: OutputFormat = OutputFormat.jsonl,
    resource: Optional[dict[str, str]] = None,
) -> bytes:
    """Render a batch as newline-terminated UTF-8 records, one per span."""
    resource = resource or {}
    lines = [encode_span(span, OutputFormat(fmt), resource) for span in spans]
    if not lines:
        return b""
    return ("\n".join(lines) + "\n").encode("utf-8")
