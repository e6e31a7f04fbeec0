"""cli command to classify an event stream without exporting anything"""

import sys

import click

from testtrace.cli.utils.logging import logger
from testtrace.pipeline import check_stream


@click.command(name="check")
@click.option(
    "-i",
    "--input",
    "input_stream",
    type=click.File("rb"),
    default="-",
    help="Event stream to read (`go test -json` output). Default: stdin.",
)
@click.option(
    "--skip-package-output",
    is_flag=True,
    default=False,
    help="Count package-level PASS/FAIL lines as ignored.",
)
@click.pass_context
def check(ctx, input_stream, skip_package_output):
    """Report how many lines would become spans, and how many are malformed.

    Exits with status 1 when the stream contains malformed lines.
    """
    ctx.ensure_object(dict)

    try:
        stats = check_stream(input_stream, package_spans=not skip_package_output)
    except OSError as e:
        logger.error(f"Error: Failed reading input: {e}")
        sys.exit(1)

    click.echo(f"lines:     {stats.lines}")
    click.echo(f"spans:     {stats.spans}")
    click.echo(f"ignored:   {stats.ignored}")
    click.echo(f"malformed: {stats.malformed}")

    if stats.malformed:
        logger.error(f"Error: {stats.malformed} malformed line(s) found.")
        sys.exit(1)
