import logging
import sys


logger = logging.getLogger("testtrace")


def configure_logging(debug: bool = False, quiet: bool = False):
    """
    Configures the package logger from the verbosity flags.

    Diagnostics go to stderr so they never mix with span records on stdout.
    ``debug`` wins over ``quiet``.
    """
    if debug:
        log_level = logging.DEBUG
    elif quiet:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO
    logger.setLevel(log_level)

    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
