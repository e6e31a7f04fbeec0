import io
import json
import logging
import threading
import time

import pytest


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("testtrace")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


class RecordingSink:
    """Sink that keeps every write in memory and can be told to fail."""

    def __init__(self, fail_writes: int = 0, delay: float = 0.0):
        self.writes: list[bytes] = []
        self.fail_writes = fail_writes
        self.delay = delay
        self.written = threading.Event()
        self._lock = threading.Lock()

    def write(self, data: bytes) -> None:
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            if self.fail_writes > 0:
                self.fail_writes -= 1
                raise OSError("sink unavailable")
            self.writes.append(data)
        self.written.set()

    def records(self) -> list[dict]:
        with self._lock:
            payload = b"".join(self.writes)
        return [json.loads(line) for line in payload.decode("utf-8").splitlines()]

    def batch_sizes(self) -> list[int]:
        with self._lock:
            return [len(data.decode("utf-8").splitlines()) for data in self.writes]


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.01) -> bool:
    """Poll ``predicate`` until it returns True or ``timeout`` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def make_line():
    """Build one `go test -json` line; keyword arguments override fields."""

    def _make_line(**fields) -> str:
        record = {
            "Time": "2024-05-01T10:00:00.000000Z",
            "Action": "output",
            "Package": "example.com/pkgA",
            "Test": "TestFoo",
            "Output": "--- PASS: TestFoo (0.00s)\n",
        }
        record.update(fields)
        return json.dumps({k: v for k, v in record.items() if v is not None}) + "\n"

    return _make_line


@pytest.fixture
def sink_factory():
    return RecordingSink


@pytest.fixture
def wait():
    return wait_for
