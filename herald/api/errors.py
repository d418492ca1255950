"""Falcon error handlers for webhook receipt failures.

Usage
-----
Register error handlers on the Falcon app::

    from herald.api.errors import handle_authentication, handle_malformed_payload
    from herald.webhook import AuthenticationError, MalformedPayloadError

    app.add_error_handler(AuthenticationError, handle_authentication)
    app.add_error_handler(MalformedPayloadError, handle_malformed_payload)

"""

from __future__ import annotations

import typing as typ

import falcon

from herald.logging import get_logger, log_warning

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from herald.webhook.errors import AuthenticationError, MalformedPayloadError

__all__ = ["handle_authentication", "handle_malformed_payload"]

logger = get_logger(__name__)


async def handle_authentication(
    req: Request,
    resp: Response,
    ex: AuthenticationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``AuthenticationError`` to an HTTP 401 JSON response.

    Parameters
    ----------
    req
        Falcon request, used for the delivery id in the log line.
    resp
        Falcon response whose status and media are set.
    ex
        The signature failure.
    _params
        URI template parameters (unused).

    """
    log_warning(
        logger,
        "Rejected webhook delivery %s: %s",
        req.get_header("X-GitHub-Delivery"),
        ex,
    )
    resp.status = falcon.HTTP_401
    resp.media = {
        "title": "Unauthorized",
        "description": str(ex),
    }


async def handle_malformed_payload(
    _req: Request,
    resp: Response,
    ex: MalformedPayloadError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``MalformedPayloadError`` to an HTTP 400 JSON response."""
    resp.status = falcon.HTTP_400
    resp.media = {
        "title": "Malformed payload",
        "description": ex.reason,
    }
