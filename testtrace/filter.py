"""Decide whether a decoded event is worth a span."""

from testtrace.model.event import TestEvent

OUTPUT_ACTION = "output"

# Case-sensitive substrings marking a terminal test status in output lines.
STATUS_MARKERS = ("PASS", "FAIL")


def has_status_marker(output: str) -> bool:
    return any(marker in output for marker in STATUS_MARKERS)


def qualifies(event: TestEvent) -> bool:
    """True iff the event is an ``output`` action carrying PASS or FAIL."""
    return event.action == OUTPUT_ACTION and has_status_marker(event.output)
