"""Logging configuration for the command line tools."""

import logging
import sys


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for a command run.

    Diagnostic logging goes to stderr so it never mixes with the report or
    JSON output on stdout.

    Args:
        verbose: Log DEBUG messages instead of warnings only
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level, format=LOG_FORMAT, stream=sys.stderr, force=True
    )

    # botocore is very chatty at DEBUG
    if verbose:
        logging.getLogger("botocore").setLevel(logging.INFO)
        logging.getLogger("urllib3").setLevel(logging.INFO)
