"""Structured dispatch events and error categorisation.

Each outcome of the dispatch pipeline is logged as a single
``[<event type>] key=value ...`` line so log aggregators can count
commands, denials and API failures per repository.

Usage
-----
>>> event_logger = DispatchEventLogger()
>>> event_logger.log_unknown_command(event, "frobnicate")

"""

from __future__ import annotations

import enum
import typing as typ

from herald.github.errors import ExternalAPIError
from herald.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    import datetime as dt

    from herald.logging import _SupportsLog
    from herald.webhook.models import Event

_module_logger = get_logger(__name__)


class DispatchEventType(enum.StrEnum):
    """Structured log event types for the dispatch pipeline."""

    COMMAND_UNKNOWN = "dispatch.command.unknown"
    COMMAND_UNAUTHORIZED = "dispatch.command.unauthorized"
    REACTION_FAILED = "dispatch.reaction.failed"
    COMMAND_EXECUTED = "dispatch.command.executed"
    COMMAND_FAILED = "dispatch.command.failed"
    REPLY_FAILED = "dispatch.reply.failed"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorise *exc* for alert routing.

    Server errors and timeouts are transient; other API failures are the
    caller's problem (bad token scope, missing issue, blocked user).
    """
    if isinstance(exc, ExternalAPIError):
        if exc.is_transient:
            return ErrorCategory.TRANSIENT
        if exc.status_code is not None:
            return ErrorCategory.CLIENT_ERROR
        return ErrorCategory.TRANSIENT
    if isinstance(exc, (ValueError, LookupError)):
        return ErrorCategory.CONFIGURATION
    return ErrorCategory.UNKNOWN


class DispatchEventLogger:
    """Emit structured dispatch events via femtologging."""

    def __init__(self, logger: _SupportsLog | None = None) -> None:
        """Use *logger*, or this module's logger when omitted."""
        self._logger = logger if logger is not None else _module_logger

    def log_unknown_command(self, event: Event, token: str) -> None:
        """Log a slash command with no registered handler."""
        log_info(
            self._logger,
            "[%s] repo=%s issue=%d actor=%s token=%s delivery=%s",
            DispatchEventType.COMMAND_UNKNOWN,
            event.repository,
            event.issue_number,
            event.actor,
            token,
            event.delivery_id,
        )

    def log_unauthorized(
        self, event: Event, token: str, held: str, required: str
    ) -> None:
        """Log a command refused for insufficient permission."""
        log_warning(
            self._logger,
            "[%s] repo=%s issue=%d actor=%s token=%s held=%s required=%s",
            DispatchEventType.COMMAND_UNAUTHORIZED,
            event.repository,
            event.issue_number,
            event.actor,
            token,
            held,
            required,
        )

    def log_reaction_failed(
        self, event: Event, token: str, error: BaseException
    ) -> None:
        """Log a failed acknowledgement; the command still runs."""
        log_warning(
            self._logger,
            "[%s] repo=%s comment=%d token=%s error_category=%s error_message=%s",
            DispatchEventType.REACTION_FAILED,
            event.repository,
            event.comment_id,
            token,
            categorize_error(error),
            str(error),
        )

    def log_executed(self, event: Event, token: str, duration: dt.timedelta) -> None:
        """Log a handler that completed."""
        log_info(
            self._logger,
            "[%s] repo=%s issue=%d actor=%s token=%s duration_seconds=%.3f",
            DispatchEventType.COMMAND_EXECUTED,
            event.repository,
            event.issue_number,
            event.actor,
            token,
            duration.total_seconds(),
        )

    def log_failed(
        self,
        event: Event,
        token: str,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log a handler failure with its category and traceback."""
        log_error(
            self._logger,
            "[%s] repo=%s issue=%d actor=%s token=%s duration_seconds=%.3f "
            "error_type=%s error_category=%s error_message=%s",
            DispatchEventType.COMMAND_FAILED,
            event.repository,
            event.issue_number,
            event.actor,
            token,
            duration.total_seconds(),
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )

    def log_reply_failed(
        self, event: Event, purpose: str, error: BaseException
    ) -> None:
        """Log a denial or failure notice that could not be posted."""
        log_warning(
            self._logger,
            "[%s] repo=%s issue=%d purpose=%s error_message=%s",
            DispatchEventType.REPLY_FAILED,
            event.repository,
            event.issue_number,
            purpose,
            str(error),
        )
