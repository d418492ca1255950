"""Application factory for the Herald Falcon ASGI application.

Usage
-----
Create a health-only app (no credentials configured)::

    app = create_app()

Create the full webhook service::

    from herald.api.app import AppDependencies, create_app

    deps = AppDependencies(
        dispatcher=dispatcher,
        webhook_secret=secret,
        github_client=client,
    )
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from herald.api.errors import handle_authentication, handle_malformed_payload
from herald.api.health.resources import HealthResource, ReadyResource
from herald.webhook.errors import AuthenticationError, MalformedPayloadError

if typ.TYPE_CHECKING:
    from herald.api.middleware import SupportsAclose
    from herald.dispatch.dispatcher import Dispatcher

__all__ = ["WEBHOOK_ROUTE", "AppDependencies", "create_app"]

WEBHOOK_ROUTE = "/webhooks/github"


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    The webhook route is registered only when both ``dispatcher`` and
    ``webhook_secret`` are provided.

    Attributes
    ----------
    dispatcher
        Dispatcher receiving decoded events.
    webhook_secret
        Shared secret for signature verification.
    github_client
        Client closed after the dispatcher drains at shutdown.
    drain_timeout_s
        Upper bound on the shutdown drain.

    """

    dispatcher: Dispatcher | None = None
    webhook_secret: str | None = None
    github_client: SupportsAclose | None = None
    drain_timeout_s: float = 30.0


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None``, only ``/health``
        and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    deps = dependencies or AppDependencies()
    dispatcher = deps.dispatcher
    serving = dispatcher is not None and bool(deps.webhook_secret)

    middleware: list[object] = []
    if serving and dispatcher is not None:
        from herald.api.middleware import DispatcherLifecycle

        middleware.append(
            DispatcherLifecycle(
                dispatcher,
                deps.github_client,
                drain_timeout_s=deps.drain_timeout_s,
            )
        )

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(dispatcher))

    if serving and dispatcher is not None:
        from herald.api.webhook.resources import WebhookResource

        secret = typ.cast("str", deps.webhook_secret)
        app.add_route(WEBHOOK_ROUTE, WebhookResource(secret, dispatcher))

    app.add_error_handler(AuthenticationError, handle_authentication)
    app.add_error_handler(MalformedPayloadError, handle_malformed_payload)

    return app
