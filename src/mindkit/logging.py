"""Logging utilities for mindkit.

mindkit logs through loguru and is silent by default. Call ``enable_logging()``
to attach a stderr handler that only passes mindkit records, and close the
returned handle (or use it as a context manager) to detach it again.

A custom PREDICTION level sits between INFO and WARNING so that prediction
requests can be followed without the DEBUG noise of the analytics routines.

Note:
    Importing this module removes loguru's default stderr handler (ID 0) so
    that records are not printed twice once ``enable_logging()`` adds its own
    handler. If handler 0 was already removed the call is a no-op.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

PREDICTION_LEVEL: Final[str] = "PREDICTION"
PREDICTION_LEVEL_NUMBER: Final[int] = 25  # Between INFO (20) and WARNING (30)


def _register_prediction_level() -> None:
    """Register the PREDICTION level with loguru if it does not exist yet.

    loguru does not allow changing the severity of an existing level, so a
    conflicting registration only produces a UserWarning.
    """
    try:
        existing_level = logger.level(PREDICTION_LEVEL)
    except ValueError:
        logger.level(PREDICTION_LEVEL, no=PREDICTION_LEVEL_NUMBER, icon="🌳")
    else:
        if existing_level.no != PREDICTION_LEVEL_NUMBER:
            msg = (
                f"PREDICTION level already registered with numeric value {existing_level.no},"
                f" expected {PREDICTION_LEVEL_NUMBER}"
            )
            warnings.warn(msg, stacklevel=2)


_register_prediction_level()

type LogLevel = Literal[
    "TRACE",
    "DEBUG",
    "INFO",
    "PREDICTION",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

type LogFormat = Literal["short", "full"]

_SHORT_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <10}</level> | "  # noqa: RUF027 - loguru format string
    "<cyan>{function}</cyan> - "
    "<level>{message}</level> {extra}"
)
_FULL_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <10}</level> | "  # noqa: RUF027 - loguru format string
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> {extra}"
)


class LoggingHandle:
    """Owns one loguru handler added by ``enable_logging``.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     predict_record(record, spec, tree)
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        """Initialize the handle.

        Args:
            handler_id (int): The loguru handler ID returned by ``logger.add()``.
        """
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    @property
    def is_active(self) -> bool:
        """bool: Whether the handler is still attached."""
        return self.handler_id is not None

    def disable(self) -> None:
        """Remove the handler; the last open handle also re-disables the package logger.

        Calling this more than once is harmless.
        """
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()

    @classmethod
    def get_active_handle_count(cls) -> int:
        """Return the number of handles that have not been disabled.

        Returns:
            int: Count of active handles.
        """
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(
    *,
    level: LogLevel = PREDICTION_LEVEL,
    log_format: LogFormat = "short",
) -> LoggingHandle:
    """Route mindkit log records to stderr.

    Args:
        level (LogLevel): Minimum level to display. The default "PREDICTION"
            shows one line per prediction request plus warnings; "DEBUG" adds
            tree traversal and analytics details.
        log_format (LogFormat): "short" shows the function name only, "full"
            adds module and line number.

    Returns:
        LoggingHandle: Handle that detaches the handler when disabled.
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sys.stderr,
        level=level,
        filter=_is_mindkit_record,
        format=_SHORT_FORMAT if log_format == "short" else _FULL_FORMAT,
    )
    return LoggingHandle(handler_id)


def _is_mindkit_record(record: Record) -> bool:
    """Return True for records emitted from inside the mindkit package.

    Args:
        record (Record): The loguru record to filter.

    Returns:
        bool: True if the record's module belongs to mindkit.
    """
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
