"""Exception hierarchy for the event-to-span pipeline."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .event import TestEvent


MAX_LINE_PREVIEW = 120


def _preview(line: str) -> str:
    line = line.rstrip("\r\n")
    if len(line) > MAX_LINE_PREVIEW:
        return line[:MAX_LINE_PREVIEW] + "..."
    return line


class TestTraceError(Exception):
    """Base class for all testtrace errors."""

    # Not a test class, despite the name.
    __test__ = False


class DecodeError(TestTraceError):
    """A line is not a well-formed test event record.

    Signals a data quality problem upstream. The line is skipped.
    """

    def __init__(self, line: str, reason: str) -> None:
        self.line = line
        self.reason = reason
        super().__init__(f"{reason}: {_preview(line)!r}")


class IgnoredLine(TestTraceError):
    """A well-formed event that does not qualify for a span.

    This is routine filtering, not a failure.
    """

    def __init__(self, event: "TestEvent", reason: str) -> None:
        self.event = event
        self.reason = reason
        super().__init__(reason)


class ExportError(TestTraceError):
    """Writing a batch of spans to the sink failed; the batch was dropped."""

    def __init__(self, message: str, dropped: int = 0) -> None:
        self.dropped = dropped
        super().__init__(message)


class ConfigError(TestTraceError):
    """Invalid or unreadable configuration."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message if path is None else f"{path}: {message}")
