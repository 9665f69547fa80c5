from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)-8s - [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool = False, quiet: bool = False, log_file: str | None = None) -> logging.Logger:
    """Configure logging for the CLI and return the package logger.

    Warnings and above by default; ``verbose`` adds INFO and DEBUG, ``quiet``
    keeps only errors.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a"))

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT, handlers=handlers, force=True)

    logger = logging.getLogger("commit_lens")
    logger.setLevel(level)
    return logger
