"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from herald.commands.config import build_registry, default_commands_config
from herald.commands.registry import CommandRegistry
from herald.dispatch.dispatcher import DispatchPolicy, Dispatcher
from herald.dispatch.observability import DispatchEventLogger
from tests.helpers.github_fakes import FakeIssuesClient


class RecordingLogger:
    """Collects femtologging-style ``log`` calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message

    @property
    def messages(self) -> list[str]:
        """Return logged messages in order."""
        return [message for _level, message, _exc, _stack in self.calls]


@pytest.fixture
def fake_client() -> FakeIssuesClient:
    """Return a client that records calls and grants read access."""
    return FakeIssuesClient()


@pytest.fixture
def registry(fake_client: FakeIssuesClient) -> CommandRegistry:
    """Return the built-in registry wired to ``fake_client``."""
    return build_registry(default_commands_config(), fake_client)


@pytest.fixture
def event_log() -> RecordingLogger:
    """Return a logger capturing dispatch events."""
    return RecordingLogger()


@pytest.fixture
def dispatcher(
    registry: CommandRegistry,
    fake_client: FakeIssuesClient,
    event_log: RecordingLogger,
) -> Dispatcher:
    """Return a dispatcher over the built-in registry."""
    return Dispatcher(
        registry,
        fake_client,
        policy=DispatchPolicy(handler_timeout_s=1.0),
        event_logger=DispatchEventLogger(event_log),
    )
