"""cli command that streams test events into exported spans"""

import sys

import click
import humanfriendly

from testtrace.cli.utils.logging import logger
from testtrace.config import load_settings
from testtrace.model.errors import ConfigError, ExportError
from testtrace.pipeline import run_pipeline
from testtrace.telemetry.encoding import OutputFormat
from testtrace.telemetry.provider import TracerProvider
from testtrace.telemetry.sink import StreamSink


def parse_interval(value):
    """Parse a `human friendly` interval such as 1s, 500ms or 0.25 into seconds."""
    if value is None:
        return None
    try:
        return float(humanfriendly.parse_timespan(value))
    except humanfriendly.InvalidTimespan as e:
        raise click.BadParameter(str(e), param_hint="--flush-interval") from e


@click.command(name="run")
@click.option(
    "-i",
    "--input",
    "input_stream",
    type=click.File("rb"),
    default="-",
    help="Event stream to read (`go test -json` output). Default: stdin.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, allow_dash=True),
    default="-",
    envvar="TESTTRACE_OUTPUT",
    help="File to append span records to. Default: stdout.",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="TESTTRACE_CONFIG",
    help="YAML settings file.",
)
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=None,
    envvar="TESTTRACE_FORMAT",
    help="Span record layout. Default: jsonl.",
)
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    default=None,
    envvar="TESTTRACE_BATCH_SIZE",
    help="Flush once this many spans are buffered. Default: 512.",
)
@click.option(
    "--flush-interval",
    type=str,
    default=None,
    envvar="TESTTRACE_FLUSH_INTERVAL",
    help="Flush at least this often. Example: 1s, 500ms. Default: 1s.",
)
@click.option(
    "--max-queue-size",
    type=click.IntRange(min=1),
    default=None,
    envvar="TESTTRACE_MAX_QUEUE_SIZE",
    help="Bound the span buffer, dropping the oldest spans when full.",
)
@click.option(
    "--service-name",
    type=str,
    default=None,
    envvar="TESTTRACE_SERVICE_NAME",
    help="Resource service.name attached to exported spans.",
)
@click.option(
    "--skip-package-output",
    is_flag=True,
    default=False,
    help="Do not emit spans for package-level PASS/FAIL lines.",
)
@click.pass_context
def run(
    ctx,
    input_stream,
    output,
    config_path,
    output_format,
    batch_size,
    flush_interval,
    max_queue_size,
    service_name,
    skip_package_output,
):
    """Read test events and export one span per PASS/FAIL output line."""
    ctx.ensure_object(dict)

    try:
        settings = load_settings(
            config_path,
            service_name=service_name,
            max_batch_size=batch_size,
            flush_interval=parse_interval(flush_interval),
            max_queue_size=max_queue_size,
            output_format=output_format,
            package_spans=False if skip_package_output else None,
        )
    except ConfigError as e:
        logger.error(f"Error: Invalid configuration: {e}")
        sys.exit(1)

    logger.debug(f"Settings: {settings.model_dump(mode='json')}")

    try:
        sink = StreamSink(output=None if output == "-" else output)
    except OSError as e:
        logger.error(f"Error: Cannot open output {output}: {e}")
        sys.exit(1)

    exit_code = 0
    provider = TracerProvider.from_settings(settings, sink)
    try:
        stats = run_pipeline(
            input_stream, provider, package_spans=settings.package_spans
        )
        logger.info(f"Processed {stats.summary()}")
    except OSError as e:
        logger.error(f"Error: Failed reading input: {e}")
        exit_code = 1
    finally:
        try:
            provider.shutdown()
        except ExportError as e:
            logger.error(f"Error: Final flush failed: {e}")
            exit_code = 1
        sink.close()

    exporter_stats = provider.exporter.stats
    if exporter_stats.dropped or exporter_stats.overflowed:
        logger.warning(
            f"Lost {exporter_stats.dropped + exporter_stats.overflowed} span(s): "
            f"{exporter_stats.dropped} failed to export, "
            f"{exporter_stats.overflowed} evicted from a full queue"
        )

    if exit_code:
        sys.exit(exit_code)
