"""Logging setup for interactive sketch sessions."""

from __future__ import annotations

import logging
from logging import Logger
from typing import Iterable, Optional, Union

ROOT_LOGGER_NAME = "sketch rnn stepper"
_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def coerce_level(level: Union[int, str]) -> int:
    """Accept ``logging`` constants or their names (``"debug"``, ``"INFO"``...)."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level!r}")
    return resolved


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    name: str = ROOT_LOGGER_NAME,
    propagate: bool = False,
    extra_loggers: Optional[Iterable[str]] = None,
    quiet_transport: bool = True,
) -> Logger:
    """Configure and return the package logger, optionally binding extra loggers.

    Parameters
    ----------
    level:
        Logging verbosity, as an int or a level name from a YAML config.
    name:
        Logical logger namespace. Module loggers live under
        ``"sketch rnn stepper.<component>"`` so one call covers all of them.
    quiet_transport:
        Keep ``httpx`` request lines at WARNING unless DEBUG was requested.
    """

    numeric_level = coerce_level(level)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))

    def _attach(target: Logger, target_level: int) -> None:
        if not any(isinstance(existing, logging.StreamHandler) for existing in target.handlers):
            target.addHandler(handler)
        target.setLevel(target_level)
        target.propagate = propagate

    logger = logging.getLogger(name)
    _attach(logger, numeric_level)

    for logger_name in extra_loggers or ():
        _attach(logging.getLogger(logger_name), numeric_level)

    if quiet_transport and numeric_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    return logger


__all__ = ["ROOT_LOGGER_NAME", "coerce_level", "configure_logging"]
