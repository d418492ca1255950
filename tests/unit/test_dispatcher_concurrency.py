"""Background submission and draining tests for Dispatcher."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from herald.commands.registry import CommandRegistry
from herald.dispatch.dispatcher import (
    DispatcherDrainingError,
    DispatchOutcome,
    Dispatcher,
)
from herald.permissions import PermissionLevel
from tests.helpers.github_fakes import FakeIssuesClient
from tests.helpers.webhook_payloads import make_event

if typ.TYPE_CHECKING:
    from herald.commands.parser import Command
    from herald.webhook.models import Event


class _GatedHandler:
    """Handler that blocks until its gate opens."""

    def __init__(self, gate: asyncio.Event) -> None:
        self.gate = gate
        self.started = asyncio.Event()
        self.finished: list[int] = []

    async def handle(self, event: Event, command: Command) -> None:
        del command
        self.started.set()
        await self.gate.wait()
        self.finished.append(event.comment_id)


class _RecordingHandler:
    def __init__(self) -> None:
        self.handled: list[int] = []

    async def handle(self, event: Event, command: Command) -> None:
        del command
        self.handled.append(event.comment_id)


class _ExplodingHandler:
    async def handle(self, event: Event, command: Command) -> None:
        del event, command
        msg = "handler bug"
        raise RuntimeError(msg)


@pytest.fixture
def gate() -> asyncio.Event:
    """Return a closed gate for the slow handler."""
    return asyncio.Event()


@pytest.fixture
def slow(gate: asyncio.Event) -> _GatedHandler:
    """Return the handler registered as ``/slow``."""
    return _GatedHandler(gate)


@pytest.fixture
def fast() -> _RecordingHandler:
    """Return the handler registered as ``/fast``."""
    return _RecordingHandler()


@pytest.fixture
def background_dispatcher(
    slow: _GatedHandler, fast: _RecordingHandler
) -> Dispatcher:
    """Return a dispatcher with slow, fast and broken commands."""
    registry = CommandRegistry()
    registry.register("slow", PermissionLevel.READ, slow, reaction=None)
    registry.register("fast", PermissionLevel.READ, fast, reaction=None)
    registry.register("boom", PermissionLevel.READ, _ExplodingHandler(), reaction=None)
    registry.freeze()
    return Dispatcher(registry, FakeIssuesClient())


def _event(body: str, comment_id: int) -> Event:
    return make_event(body, comment_id=comment_id, permission=PermissionLevel.READ)


class TestSubmit:
    """Tests for Dispatcher.submit."""

    async def test_slow_event_does_not_block_others(
        self,
        background_dispatcher: Dispatcher,
        slow: _GatedHandler,
        fast: _RecordingHandler,
        gate: asyncio.Event,
    ) -> None:
        """A stalled handler leaves later events free to complete."""
        slow_task = background_dispatcher.submit(_event("/slow", 1))
        await slow.started.wait()

        fast_task = background_dispatcher.submit(_event("/fast", 2))
        assert await fast_task is DispatchOutcome.EXECUTED

        assert fast.handled == [2]
        assert not slow_task.done()
        assert background_dispatcher.in_flight == 1

        gate.set()
        assert await slow_task is DispatchOutcome.EXECUTED
        assert slow.finished == [1]

    async def test_unexpected_errors_are_contained(
        self, background_dispatcher: Dispatcher, fast: _RecordingHandler
    ) -> None:
        """A non-API exception fails only its own event."""
        broken = background_dispatcher.submit(_event("/boom", 1))
        healthy = background_dispatcher.submit(_event("/fast", 2))

        assert await broken is DispatchOutcome.FAILED
        assert await healthy is DispatchOutcome.EXECUTED
        assert fast.handled == [2]

    async def test_finished_tasks_are_released(
        self, background_dispatcher: Dispatcher
    ) -> None:
        """Completed tasks drop out of the in-flight set."""
        await background_dispatcher.submit(_event("/fast", 1))
        await asyncio.sleep(0)

        assert background_dispatcher.in_flight == 0


class TestDrain:
    """Tests for Dispatcher.drain."""

    async def test_drain_with_nothing_in_flight(
        self, background_dispatcher: Dispatcher
    ) -> None:
        """Draining an idle dispatcher returns immediately."""
        assert await background_dispatcher.drain(timeout=0.1) == 0
        assert background_dispatcher.draining

    async def test_drain_waits_for_in_flight_events(
        self,
        background_dispatcher: Dispatcher,
        slow: _GatedHandler,
        gate: asyncio.Event,
    ) -> None:
        """Events accepted before shutdown run to completion."""
        task = background_dispatcher.submit(_event("/slow", 7))
        await slow.started.wait()

        drain = asyncio.create_task(background_dispatcher.drain(timeout=5.0))
        await asyncio.sleep(0)
        assert not drain.done()

        gate.set()
        assert await drain == 0
        assert task.result() is DispatchOutcome.EXECUTED
        assert slow.finished == [7]

    async def test_drain_timeout_leaves_tasks_running(
        self,
        background_dispatcher: Dispatcher,
        slow: _GatedHandler,
        gate: asyncio.Event,
    ) -> None:
        """Expired drains report stragglers without cancelling them."""
        task = background_dispatcher.submit(_event("/slow", 3))
        await slow.started.wait()

        assert await background_dispatcher.drain(timeout=0.01) == 1
        assert not task.cancelled()

        gate.set()
        assert await task is DispatchOutcome.EXECUTED

    async def test_draining_refuses_new_events(
        self, background_dispatcher: Dispatcher
    ) -> None:
        """submit raises once drain has begun."""
        await background_dispatcher.drain()

        with pytest.raises(DispatcherDrainingError):
            background_dispatcher.submit(_event("/fast", 1))
