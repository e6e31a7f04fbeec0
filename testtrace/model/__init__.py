from .errors import (
    ConfigError,
    DecodeError,
    ExportError,
    IgnoredLine,
    TestTraceError,
)
from .event import TestEvent

__all__ = [
    "ConfigError",
    "DecodeError",
    "ExportError",
    "IgnoredLine",
    "TestEvent",
    "TestTraceError",
]
