"""ASGI lifespan middleware that drains in-flight commands on shutdown.

Falcon calls ``process_shutdown`` when the server (Granian) delivers the
ASGI ``lifespan.shutdown`` event. The middleware stops the dispatcher from
accepting new events, waits for running handlers so none is cut off
between its reaction and its effect, then closes the GitHub client
unless some handler outlived the drain timeout.

Usage
-----
Register the middleware when creating the Falcon app::

    lifecycle = DispatcherLifecycle(dispatcher, client, drain_timeout_s=30.0)
    app = falcon.asgi.App(middleware=[lifecycle])

"""

from __future__ import annotations

import typing as typ

from herald.logging import get_logger, log_info, log_warning

if typ.TYPE_CHECKING:
    from herald.dispatch.dispatcher import Dispatcher

__all__ = ["DispatcherLifecycle", "SupportsAclose"]

logger = get_logger(__name__)


class SupportsAclose(typ.Protocol):
    """Resource released with ``await resource.aclose()``."""

    async def aclose(self) -> None:
        """Release the resource."""
        ...


class DispatcherLifecycle:
    """Falcon lifespan middleware for the dispatcher and its client.

    Parameters
    ----------
    dispatcher
        Dispatcher whose in-flight events are drained at shutdown.
    client
        Optional client closed once draining finishes.
    drain_timeout_s
        Upper bound on the wait for in-flight events.

    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        client: SupportsAclose | None = None,
        *,
        drain_timeout_s: float = 30.0,
    ) -> None:
        """Initialise the middleware with its dispatcher and client."""
        self._dispatcher = dispatcher
        self._client = client
        self._drain_timeout_s = drain_timeout_s

    async def process_startup(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Log the commands the service will answer to."""
        tokens = ", ".join(f"/{token}" for token in self._dispatcher.registry.tokens)
        log_info(logger, "Herald accepting deliveries for %s", tokens or "no commands")

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Drain in-flight events, then close the client.

        The client stays open when handlers are still running after the
        drain timeout, so they can finish their GitHub calls while the
        process exits.
        """
        remaining = 0
        try:
            remaining = await self._dispatcher.drain(self._drain_timeout_s)
            log_info(
                logger,
                "Dispatcher drained (%d still running at timeout)",
                remaining,
            )
        finally:
            if self._client is not None:
                if remaining:
                    log_warning(
                        logger,
                        "Leaving GitHub client open for %d running dispatches",
                        remaining,
                    )
                else:
                    await self._client.aclose()
