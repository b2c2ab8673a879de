from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

Context = Optional[Mapping[str, Any]]


class StepLogger(Protocol):
    def info(self, message: str, context: Context = None) -> None:
        ...

    def warn(self, message: str, context: Context = None) -> None:
        ...

    def error(self, message: str, context: Context = None) -> None:
        ...


class NullStepLogger:
    """Accepts every call and does nothing."""

    def info(self, message: str, context: Context = None) -> None:
        return None

    def warn(self, message: str, context: Context = None) -> None:
        return None

    def error(self, message: str, context: Context = None) -> None:
        return None


NULL_STEP_LOGGER = NullStepLogger()


def _format_context(context: Context) -> str:
    if not context:
        return ""
    return " ".join(f"{key}={context[key]}" for key in sorted(context))


class LoggingStepLogger:
    """StepLogger backed by a stdlib logger; context renders as key=value pairs."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("culturejobs.steps")

    def _emit(self, level: int, message: str, context: Context) -> None:
        rendered = _format_context(context)
        if rendered:
            self._logger.log(level, "%s %s", message, rendered)
        else:
            self._logger.log(level, "%s", message)

    def info(self, message: str, context: Context = None) -> None:
        self._emit(logging.INFO, message, context)

    def warn(self, message: str, context: Context = None) -> None:
        self._emit(logging.WARNING, message, context)

    def error(self, message: str, context: Context = None) -> None:
        self._emit(logging.ERROR, message, context)


def resolve_step_logger(log_step: Optional[StepLogger]) -> StepLogger:
    return log_step if log_step is not None else NULL_STEP_LOGGER
