"""Logging configuration helpers for swipe video runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

LOGGER_NAME = "swipe_video"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _open_log_file(log_file: Union[str, Path]) -> Tuple[Optional[logging.Handler], Optional[str]]:
    """Open ``log_file`` for appending, trying the working directory if its folder is unusable."""
    requested = Path(log_file)
    if not requested.is_absolute():
        requested = Path.cwd() / requested

    errors: List[str] = []
    for candidate in (requested, Path.cwd() / requested.name):
        try:
            candidate.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(candidate, encoding="utf-8")
        except OSError as exc:
            errors.append(f"'{candidate}': {exc}")
            continue
        if candidate == requested:
            return handler, None
        return handler, f"Could not log to {errors[0]}. Logging to '{candidate}' instead."
    return None, f"File logging disabled; could not open {' or '.join(errors)}"


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Union[str, Path, None] = None,
    include_stream: bool = True,
) -> logging.Logger:
    """Configure root logging for a run and return the package logger.

    ``verbose`` switches to DEBUG, which includes every encoder command line.
    File logging is off unless ``log_file`` is given.
    """
    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT)

    handlers: List[logging.Handler] = []
    pending_warning: Optional[str] = None
    if log_file:
        file_handler, pending_warning = _open_log_file(log_file)
        if file_handler:
            handlers.append(file_handler)

    if include_stream:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if pending_warning:
        logger.warning(pending_warning)
    return logger


__all__ = ["LOGGER_NAME", "configure_logging"]
