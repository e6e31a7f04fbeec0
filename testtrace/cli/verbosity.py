"""Verbosity options shared by the CLI group and its commands."""

import click

from .utils.logging import configure_logging

VERBOSITY_FLAGS = {"debug": "DEBUG", "quiet": "QUIET"}


def _verbosity_callback(ctx, param, value):
    root_ctx = ctx.find_root()
    root_ctx.ensure_object(dict)
    key = VERBOSITY_FLAGS[param.name]

    # A flag set on the group survives the command's default of False.
    if value or ctx is root_ctx or key not in root_ctx.obj:
        root_ctx.obj[key] = value

    configure_logging(
        debug=root_ctx.obj.get("DEBUG", False),
        quiet=root_ctx.obj.get("QUIET", False),
    )


def _verbosity_params():
    return [
        click.Option(
            ["--debug/--no-debug"],
            is_eager=True,
            expose_value=False,
            callback=_verbosity_callback,
            help="Enable debug mode",
        ),
        click.Option(
            ["--quiet", "-q"],
            is_flag=True,
            is_eager=True,
            expose_value=False,
            callback=_verbosity_callback,
            help="Only log warnings and errors.",
        ),
    ]


def add_verbosity_options(cmd: click.Command) -> click.Command:
    """Add --debug/--no-debug and --quiet to a command or group."""
    existing = {param.name for param in cmd.params}
    for param in reversed(_verbosity_params()):
        if param.name not in existing:
            cmd.params.insert(0, param)
    return cmd
