"""Decode single lines of a ``go test -json`` stream into events.

Two kinds of rejection are distinguished:

- :class:`DecodeError` when the line is not a well-formed event record
  (bad JSON, not an object, missing or ill-typed fields, bad UTF-8);
- :class:`IgnoredLine` when the record is valid but does not qualify
  for a span (see :mod:`testtrace.filter`).
"""

import json
from typing import Union

from pydantic import ValidationError as PydanticValidationError

from testtrace.filter import OUTPUT_ACTION, has_status_marker
from testtrace.model.errors import DecodeError, IgnoredLine
from testtrace.model.event import TestEvent


def _format_validation_error(error: PydanticValidationError) -> str:
    """Condense pydantic errors into ``Field: message`` pairs."""
    parts = []
    for err in error.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "record"
        parts.append(f"{field}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def decode_line(line: Union[str, bytes]) -> TestEvent:
    """Decode a line into a :class:`TestEvent` without filtering it."""
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as e:
            text = line.decode("utf-8", errors="replace")
            raise DecodeError(text, f"invalid UTF-8 ({e.reason})") from e

    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise DecodeError(line, f"invalid JSON ({e.msg})") from e

    if not isinstance(data, dict):
        raise DecodeError(line, f"expected a JSON object, got {type(data).__name__}")

    try:
        return TestEvent.model_validate(data)
    except PydanticValidationError as e:
        raise DecodeError(line, _format_validation_error(e)) from e


def parse_line(line: Union[str, bytes], package_spans: bool = True) -> TestEvent:
    """Decode a line and return the event if it qualifies for a span.

    Args:
        line: One raw line, with or without its trailing newline.
        package_spans: When False, package-level output (empty ``Test``)
            is rejected as :class:`IgnoredLine` instead of producing a
            span with an empty name.

    Raises:
        DecodeError: The line is not a well-formed event.
        IgnoredLine: The event is valid but not trace-worthy.
    """
    event = decode_line(line)

    if event.action != OUTPUT_ACTION:
        raise IgnoredLine(event, f"action is {event.action!r}")
    if not has_status_marker(event.output):
        raise IgnoredLine(event, "output has no PASS/FAIL marker")
    if not package_spans and event.is_package_level:
        raise IgnoredLine(event, "package-level output")

    return event
