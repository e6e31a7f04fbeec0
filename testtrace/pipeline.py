"""Ingestion loop: read lines, parse them, record spans."""

import logging
from dataclasses import dataclass
from typing import IO, Iterable, Optional, Union

from testtrace.model.errors import DecodeError, IgnoredLine
from testtrace.parser import parse_line
from testtrace.telemetry.provider import TracerProvider

logger = logging.getLogger(__name__)


@dataclass
class PipelineStats:
    """Per-run line classification counts."""

    lines: int = 0
    spans: int = 0
    ignored: int = 0
    malformed: int = 0

    def summary(self) -> str:
        return (
            f"{self.lines} line(s): {self.spans} span(s), "
            f"{self.ignored} ignored, {self.malformed} malformed"
        )


def _classify(
    stream: Union[IO, Iterable[Union[str, bytes]]],
    package_spans: bool,
    provider: Optional[TracerProvider],
    stats: PipelineStats,
) -> None:
    # Iterating a stream yields a final line even without a trailing newline.
    for lineno, raw in enumerate(stream, start=1):
        stats.lines += 1

        try:
            event = parse_line(raw, package_spans=package_spans)
        except DecodeError as e:
            stats.malformed += 1
            logger.warning(f"Line {lineno}: skipping malformed event: {e}")
            continue
        except IgnoredLine as e:
            stats.ignored += 1
            logger.debug(f"Line {lineno}: ignored ({e.reason})")
            continue

        stats.spans += 1
        if provider is not None:
            provider.record(event)


def run_pipeline(
    stream: Union[IO, Iterable[Union[str, bytes]]],
    provider: TracerProvider,
    package_spans: bool = True,
) -> PipelineStats:
    """
    Feed every line of ``stream`` through parser, filter and synthesizer.

    Per-line problems never stop the loop. An ``OSError`` raised while
    reading is fatal and propagates; the provider is left open so the
    caller decides how to shut it down.

    Returns:
        Counts of processed, exported, ignored and malformed lines.
    """
    stats = PipelineStats()
    _classify(stream, package_spans, provider, stats)
    logger.debug(f"Ingestion finished: {stats.summary()}")
    return stats


def check_stream(
    stream: Union[IO, Iterable[Union[str, bytes]]], package_spans: bool = True
) -> PipelineStats:
    """Classify every line of ``stream`` without producing spans."""
    stats = PipelineStats()
    _classify(stream, package_spans, None, stats)
    return stats

