"""Herald HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application: the GitHub webhook receiver plus liveness and
readiness probes.

Usage
-----
Create and run the application::

    from herald.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # webhook receiver enabled

Public API
----------
create_app
    Application factory that registers the health endpoints and, when a
    dispatcher and webhook secret are provided, the webhook receiver and
    the shutdown drain middleware.
"""

from herald.api.app import create_app

__all__ = ["create_app"]
