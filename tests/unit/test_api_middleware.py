"""Unit tests for herald.api.middleware.DispatcherLifecycle.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_middleware.py

"""

from __future__ import annotations

import asyncio
from unittest import mock

import pytest

from herald.api.middleware import DispatcherLifecycle
from herald.dispatch.dispatcher import Dispatcher
from tests.helpers.github_fakes import FakeIssuesClient


@pytest.fixture
def lifecycle(
    dispatcher: Dispatcher, fake_client: FakeIssuesClient
) -> DispatcherLifecycle:
    """Return middleware bound to the fixture dispatcher and client."""
    return DispatcherLifecycle(dispatcher, fake_client, drain_timeout_s=0.5)


class TestShutdown:
    """process_shutdown drains then closes."""

    async def test_drains_and_closes_client(
        self,
        lifecycle: DispatcherLifecycle,
        dispatcher: Dispatcher,
        fake_client: FakeIssuesClient,
    ) -> None:
        """Shutdown stops intake and releases the client."""
        await lifecycle.process_shutdown({}, {})

        assert dispatcher.draining
        assert fake_client.closed

    async def test_passes_drain_timeout(
        self, dispatcher: Dispatcher, fake_client: FakeIssuesClient
    ) -> None:
        """The configured bound is forwarded to Dispatcher.drain."""
        middleware = DispatcherLifecycle(dispatcher, fake_client, drain_timeout_s=7.0)

        with mock.patch.object(
            dispatcher, "drain", mock.AsyncMock(return_value=0)
        ) as drain:
            await middleware.process_shutdown({}, {})

        drain.assert_awaited_once_with(7.0)

    async def test_client_closed_even_if_drain_fails(
        self, dispatcher: Dispatcher, fake_client: FakeIssuesClient
    ) -> None:
        """The client is released when draining raises."""
        middleware = DispatcherLifecycle(dispatcher, fake_client)

        with (
            mock.patch.object(
                dispatcher,
                "drain",
                mock.AsyncMock(side_effect=asyncio.CancelledError),
            ),
            pytest.raises(asyncio.CancelledError),
        ):
            await middleware.process_shutdown({}, {})

        assert fake_client.closed

    async def test_client_left_open_for_stragglers(
        self, dispatcher: Dispatcher, fake_client: FakeIssuesClient
    ) -> None:
        """Handlers still running after the timeout keep a usable client."""
        middleware = DispatcherLifecycle(dispatcher, fake_client)

        with (
            mock.patch.object(dispatcher, "drain", mock.AsyncMock(return_value=2)),
            mock.patch("herald.api.middleware.log_warning") as log_warning,
        ):
            await middleware.process_shutdown({}, {})

        assert not fake_client.closed
        _logger, template, remaining = log_warning.call_args.args
        assert "open" in template
        assert remaining == 2

    async def test_without_client(self, dispatcher: Dispatcher) -> None:
        """A missing client is not an error."""
        await DispatcherLifecycle(dispatcher).process_shutdown({}, {})

        assert dispatcher.draining


async def test_startup_logs_commands(lifecycle: DispatcherLifecycle) -> None:
    """Startup reports the registered commands."""
    with mock.patch("herald.api.middleware.log_info") as log_info:
        await lifecycle.process_startup({}, {})

    _logger, template, tokens = log_info.call_args.args
    assert "accepting deliveries" in template
    assert tokens == "/assignme, /contributing-agreement"
