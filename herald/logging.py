"""femtologging helpers shared across Herald.

Every Herald module logs pre-formatted messages through these helpers so
that level handling and percent-style interpolation behave the same in the
receiver, the dispatcher and the GitHub client.

Example:
>>> from herald.logging import get_logger, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "Registered %d commands", 2)

"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger


class LogLevel(enum.StrEnum):
    """Log levels accepted by ``HERALD_LOG_LEVEL``."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Return an upper-cased log level and whether the input was rejected.

    Parameters
    ----------
    level : str | None
        Raw level string, typically read from the environment.

    Returns
    -------
    tuple[str, bool]
        ``(level, invalid)``. Unknown or empty input yields ``("INFO", True)``.

    """
    if not level:
        return ("INFO", True)

    candidate = level.strip().upper()
    if candidate in LogLevel.__members__:
        return (candidate, False)
    return ("INFO", True)


def configure_logging(level: str, *, force: bool = False) -> tuple[str, bool]:
    """Install the femtologging root configuration at *level*.

    Returns the same ``(level, invalid)`` pair as :func:`normalize_log_level`
    so callers can warn about a rejected value after logging is live.
    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Interpolate *args* into *template* using ``%`` formatting."""
    return template % args


class _SupportsLog(typ.Protocol):
    """Structural type for femtologging loggers and test doubles."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def _emit(
    logger: _SupportsLog,
    level: str,
    template: str,
    args: tuple[object, ...],
    exc_info: object | None,
) -> None:
    logger.log(
        level,
        format_log_message(template, *args),
        exc_info=exc_info,
        stack_info=False,
    )


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an INFO message built from *template* and *args*."""
    _emit(logger, "INFO", template, args, exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a WARNING message built from *template* and *args*."""
    _emit(logger, "WARNING", template, args, exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an ERROR message built from *template* and *args*."""
    _emit(logger, "ERROR", template, args, exc_info)


def log_exception(logger: _SupportsLog, message: str, exc: BaseException) -> None:
    """Log *message* at ERROR with *exc* attached as ``exc_info``.

    Parameters
    ----------
    logger : _SupportsLog
        Destination logger.
    message : str
        Already formatted description of the failure.
    exc : BaseException
        Exception whose traceback should accompany the record.

    """
    logger.log("ERROR", message, exc_info=exc, stack_info=False)


__all__ = [
    "LogLevel",
    "configure_logging",
    "format_log_message",
    "get_logger",
    "log_error",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
