"""Dispatch pipeline and its observability events."""

from __future__ import annotations

from .dispatcher import (
    DispatchOutcome,
    DispatchPolicy,
    Dispatcher,
    DispatcherDrainingError,
)
from .observability import (
    DispatchEventLogger,
    DispatchEventType,
    ErrorCategory,
    categorize_error,
)

__all__ = [
    "DispatchEventLogger",
    "DispatchEventType",
    "DispatchOutcome",
    "DispatchPolicy",
    "Dispatcher",
    "DispatcherDrainingError",
    "ErrorCategory",
    "categorize_error",
]
