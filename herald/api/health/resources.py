"""Liveness and readiness probes.

Usage
-----
Register health endpoints on the Falcon app::

    from herald.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(dispatcher))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from herald.dispatch.dispatcher import Dispatcher

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe; always ``{"status": "ok"}`` while the process runs."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe reflecting the dispatcher's state.

    Reports ``ready`` with the registered commands while deliveries are
    accepted and ``draining`` (HTTP 503) once shutdown has begun. Without a
    dispatcher the app runs in health-only mode and is always ready.

    """

    def __init__(self, dispatcher: Dispatcher | None = None) -> None:
        """Attach the dispatcher whose state is reported."""
        self._dispatcher = dispatcher

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status.

        """
        if self._dispatcher is None:
            resp.media = {"status": "ready"}
            resp.status = HTTPStatus.OK
            return

        if self._dispatcher.draining:
            resp.media = {
                "status": "draining",
                "in_flight": self._dispatcher.in_flight,
            }
            resp.status = HTTPStatus.SERVICE_UNAVAILABLE
            return

        resp.media = {
            "status": "ready",
            "commands": list(self._dispatcher.registry.tokens),
        }
        resp.status = HTTPStatus.OK
