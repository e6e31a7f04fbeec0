"""testtrace CLI"""

import click

from testtrace import __version__
from testtrace.cli.check import check
from testtrace.cli.run import run

from .verbosity import add_verbosity_options


@click.group()
@click.version_option(__version__, prog_name="testtrace")
@click.pass_context
def cli(ctx):
    """
    Convert `go test -json` output into tracing spans.
    """
    ctx.ensure_object(dict)


cli.add_command(add_verbosity_options(run))
cli.add_command(add_verbosity_options(check))

add_verbosity_options(cli)

if __name__ == "__main__":
    cli(obj={})
