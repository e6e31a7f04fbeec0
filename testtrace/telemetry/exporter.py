"""
Batching span exporter.

Spans are buffered in memory and written to a sink when either the batch
reaches ``max_batch_size`` spans (size trigger) or ``flush_interval``
seconds have passed since the previous flush (time trigger).

Writes happen on a background worker thread, so a slow sink never blocks
producers calling :meth:`BatchExporter.enqueue`. Flushes are serialised by
an export lock: no two flushes ever run at the same time, and a batch is
taken out of the buffer atomically, so neither the sink nor producers see
a half-cleared buffer.

A failed write drops the spans it carried; there is no retry.

With ``max_queue_size`` set, producers facing a full buffer wait for the
worker to pick up the pending batch. Only when a sink write is already in
flight is the oldest buffered span evicted instead.

State machine::

    IDLE --enqueue--> ACCUMULATING --size/time trigger--> FLUSHING --> IDLE
      any state --shutdown()--> CLOSED (after one final flush)
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Sequence

from testtrace.model.errors import ExportError
from testtrace.telemetry.encoding import encode_batch
from testtrace.telemetry.events import Span
from testtrace.telemetry.sink import Sink

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 512
DEFAULT_FLUSH_INTERVAL = 1.0


class ExporterState(str, Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    FLUSHING = "flushing"
    CLOSED = "closed"


@dataclass
class ExporterStats:
    """Counters describing what happened to enqueued spans."""

    enqueued: int = 0
    exported: int = 0
    dropped: int = 0  # lost to failed sink writes
    overflowed: int = 0  # evicted by the bounded queue
    rejected: int = 0  # enqueued after shutdown
    batches: int = 0
    failed_batches: int = 0


def _chunks(spans: Sequence[Span], size: int):
    for start in range(0, len(spans), size):
        yield spans[start : start + size]


class BatchExporter:
    """Buffers spans and exports them to a sink in batches.

    Args:
        sink: Destination for serialised batches.
        max_batch_size: Size trigger; also the most spans per sink write.
        flush_interval: Time trigger, in seconds.
        max_queue_size: When set, the buffer never holds more than this many
            spans. While a sink write is in flight, the oldest buffered span
            is evicted to admit a new one.
            ``None`` leaves the buffer unbounded.
        encoder: Turns a list of spans into the bytes handed to the sink.
        autostart: Start the background worker immediately. Without a
            worker the size trigger flushes inline and the time trigger
            is inactive.
    """

    def __init__(
        self,
        sink: Sink,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL,
        max_queue_size: Optional[int] = None,
        encoder: Optional[Callable[[Sequence[Span]], bytes]] = None,
        autostart: bool = True,
    ):
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")
        if flush_interval <= 0:
            raise ValueError("flush_interval must be positive")
        if max_queue_size is not None and max_queue_size < max_batch_size:
            raise ValueError("max_queue_size must not be smaller than max_batch_size")

        self._sink = sink
        self._max_batch_size = max_batch_size
        self._flush_interval = flush_interval
        self._max_queue_size = max_queue_size
        self._encoder = encoder or encode_batch

        self._buffer: deque[Span] = deque()
        self._cond = threading.Condition(threading.Lock())
        self._export_lock = threading.Lock()
        self._flushing = False
        self._finalizing = False
        self._stopping = False
        self._closed = False
        self._stats = ExporterStats()
        self._worker: Optional[threading.Thread] = None

        if autostart:
            self.start()

    # Public API

    def start(self) -> None:
        """Start the background worker that drives both triggers."""
        with self._cond:
            if self._closed:
                raise RuntimeError("exporter has been shut down")
            if self._worker is not None:
                return
            self._worker = threading.Thread(
                target=self._run, name="testtrace-exporter", daemon=True
            )
            self._worker.start()

    def enqueue(self, span: Span) -> bool:
        """Buffer a span for export.

        With a bounded queue and a full buffer, the caller waits for the
        worker to take the buffered batch. The oldest span is evicted only
        while a sink write is in flight.

        Returns False, without buffering, once the exporter is shut down.
        """
        while True:
            make_room = False
            with self._cond:
                while True:
                    if self._closed:
                        self._stats.rejected += 1
                        logger.warning(
                            "Exporter is shut down, dropping span %r", span.name
                        )
                        return False
                    if not self._queue_full() or self._flushing:
                        break
                    if self._worker is None:
                        make_room = True
                        break
                    self._cond.notify_all()
                    self._cond.wait()

                if not make_room:
                    if self._queue_full():
                        self._evict_oldest()
                    self._buffer.append(span)
                    self._stats.enqueued += 1
                    flush_inline = self._reached_batch_size()
                    break

            self._flush_quietly("overflow")

        if flush_inline:
            self._flush_quietly("size")
        return True

    def flush(self) -> None:
        """Export everything buffered right now.

        Raises:
            ExportError: At least one sink write failed. The spans of the
                failed writes are dropped; other chunks are still written.
        """
        self._flush("manual")

    def shutdown(self) -> None:
        """Stop the worker, then flush what is left, synchronously.

        Safe to call more than once; only the first call flushes.

        Raises:
            ExportError: The final flush failed. The exporter is closed
                regardless.
        """
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._stopping = True
            self._finalizing = True
            self._cond.notify_all()
            worker = self._worker

        try:
            # The worker must be gone before the final flush so the two cannot race.
            if worker is not None:
                worker.join()

            self._flush("shutdown")
        finally:
            with self._cond:
                self._finalizing = False

    @property
    def state(self) -> ExporterState:
        with self._cond:
            if self._flushing or self._finalizing:
                return ExporterState.FLUSHING
            if self._closed:
                return ExporterState.CLOSED
            if self._buffer:
                return ExporterState.ACCUMULATING
            return ExporterState.IDLE

    @property
    def stats(self) -> ExporterStats:
        """A snapshot of the exporter counters."""
        with self._cond:
            return replace(self._stats)

    @property
    def pending_count(self) -> int:
        """Number of spans currently waiting in the buffer."""
        with self._cond:
            return len(self._buffer)

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    @property
    def flush_interval(self) -> float:
        return self._flush_interval

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    # Internal helpers

    def _queue_full(self) -> bool:
        return (
            self._max_queue_size is not None
            and len(self._buffer) >= self._max_queue_size
        )

    def _evict_oldest(self) -> None:
        self._buffer.popleft()
        self._stats.overflowed += 1
        if self._stats.overflowed == 1:
            logger.warning(
                "Span queue full (%d), dropping oldest spans", self._max_queue_size
            )

    def _reached_batch_size(self) -> bool:
        """Wake the worker on a full batch. True when the caller must flush inline."""
        if len(self._buffer) < self._max_batch_size:
            return False
        if self._worker is not None:
            self._cond.notify_all()
            return False
        return True

    def _run(self) -> None:
        """Worker loop: wait for a size or time trigger, then flush."""
        deadline = time.monotonic() + self._flush_interval

        while True:
            with self._cond:
                while (
                    not self._stopping and len(self._buffer) < self._max_batch_size
                ):
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        break
                    self._cond.wait(timeout=remaining)

                if self._stopping:
                    return
                trigger = (
                    "size" if len(self._buffer) >= self._max_batch_size else "timer"
                )

            self._flush_quietly(trigger)
            deadline = time.monotonic() + self._flush_interval

    def _flush_quietly(self, trigger: str) -> None:
        try:
            self._flush(trigger)
        except ExportError:
            pass  # already logged and counted by _export

    def _flush(self, trigger: str) -> None:
        with self._export_lock:
            with self._cond:
                if not self._buffer:
                    return
                batch = list(self._buffer)
                self._buffer.clear()
                self._flushing = True
                self._cond.notify_all()

            try:
                dropped, first_error = self._export(batch, trigger)
            finally:
                with self._cond:
                    self._flushing = False

        if dropped:
            raise ExportError(
                f"Failed to export {dropped} of {len(batch)} span(s): {first_error}",
                dropped=dropped,
            ) from first_error

    def _export(self, batch: list[Span], trigger: str):
        """Write a batch chunk by chunk. Returns (dropped, first_error)."""
        dropped = 0
        first_error: Optional[Exception] = None

        for chunk in _chunks(batch, self._max_batch_size):
            try:
                data = self._encoder(chunk)
                self._sink.write(data)
            except Exception as e:
                dropped += len(chunk)
                if first_error is None:
                    first_error = e
                with self._cond:
                    self._stats.dropped += len(chunk)
                    self._stats.failed_batches += 1
                logger.error(
                    "Dropping batch of %d span(s) (%s flush): %s",
                    len(chunk),
                    trigger,
                    e,
                )
            else:
                with self._cond:
                    self._stats.exported += len(chunk)
                    self._stats.batches += 1
                logger.debug("Exported %d span(s) (%s flush)", len(chunk), trigger)

        return dropped, first_error
