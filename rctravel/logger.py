"""Module containing the package logger and helpers for readable log messages."""

import logging
from typing import Any, Optional


def _get_logger(name: Optional[str] = "rctravel") -> logging.Logger:
    stderrOutput = logging.StreamHandler()

    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    stderrOutput.setFormatter(formatter)

    logger = logging.getLogger(name)
    logger.addHandler(stderrOutput)

    return logger


def configure(debug: bool) -> None:
    """
    Set the verbosity of the package logger.

    Only errors are shown by default since the interactive session that follows owns
    the terminal.
    """
    log.setLevel(logging.DEBUG if debug else logging.ERROR)


def summarize(obj: Any, max_length: int = 255) -> str:
    """Return a stringified representation of the object up to the given length."""
    stringified_obj = str(obj)

    if len(stringified_obj) <= max_length:
        return stringified_obj
    else:
        return stringified_obj[: max_length - 3] + "..."


# Default logger
log = _get_logger()
