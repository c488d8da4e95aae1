from __future__ import annotations

import logging


def configure_logging(verbose: bool = False) -> None:
    """Send ledger_quote logs to stderr.

    Idempotent: subsequent calls only adjust the level.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger("ledger_quote")
    logger.setLevel(level)
    if logger.handlers:
        return

    stream = logging.StreamHandler()
    stream.setFormatter(
        logging.Formatter(
            fmt="%(levelname)s %(asctime)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    logger.addHandler(stream)
