"""
Sinks receive serialised span batches.

A sink is anything with a ``write(data: bytes) -> None`` method that
raises ``OSError`` on failure. Writes are treated as append-only and
order-preserving; each call carries one complete batch.
"""

import io
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional, Protocol, Union, runtime_checkable


@runtime_checkable
class Sink(Protocol):
    def write(self, data: bytes) -> None: ...


@dataclass
class StreamSink:
    """
    Writes batches to stdout, a file path, or an already open handle.

    Usage:
        sink = StreamSink(output=Path("spans.jsonl"))  # appends to the file
        sink = StreamSink()                            # stdout
        sink = StreamSink(output=some_handle)          # binary or text handle
    """

    output: Union[IO, Path, str, None] = None

    _file_handle: Optional[IO] = None
    _owns_handle: bool = False

    def __post_init__(self):
        if self.output is None or self.output == "-":
            self._file_handle = sys.stdout
            self._owns_handle = False
        elif isinstance(self.output, (Path, str)):
            self._file_handle = open(self.output, "ab")
            self._owns_handle = True
        else:
            self._file_handle = self.output
            self._owns_handle = False
        self._write_lock = threading.Lock()

    def write(self, data: bytes) -> None:
        """Write one batch and flush it through to the underlying stream."""
        handle = self._file_handle
        if handle is None:
            raise OSError("sink is closed")

        with self._write_lock:
            if isinstance(handle, io.TextIOBase):
                binary = getattr(handle, "buffer", None)
                if binary is not None:
                    handle.flush()
                    binary.write(data)
                    binary.flush()
                    return
                handle.write(data.decode("utf-8"))
            else:
                handle.write(data)
            handle.flush()

    def close(self):
        """Close the output file if we own it."""
        if self._owns_handle and self._file_handle:
            self._file_handle.close()
        self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
