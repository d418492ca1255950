"""GitHub webhook receiver resource.

The receiver verifies the delivery signature, decodes the payload, hands
the resulting event to the dispatcher and answers ``202 Accepted`` without
waiting for the command to run.

Usage
-----
Register the receiver on the Falcon app::

    from herald.api.webhook.resources import WebhookResource

    app.add_route("/webhooks/github", WebhookResource(secret, dispatcher))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import falcon

from herald.dispatch.dispatcher import DispatcherDrainingError
from herald.logging import get_logger, log_info
from herald.webhook.models import decode_payload, event_from_payload
from herald.webhook.signature import SIGNATURE_HEADER, verify_signature

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from herald.webhook.models import Event

__all__ = ["EventSubmitter", "WebhookResource"]

logger = get_logger(__name__)

EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"

_COMMENT_EVENT = "issue_comment"
_PING_EVENT = "ping"
_CREATED_ACTION = "created"


class EventSubmitter(typ.Protocol):
    """Anything that accepts events for background dispatch."""

    def submit(self, event: Event) -> object:
        """Schedule *event* and return without waiting for it."""
        ...


class WebhookResource:
    """Receive ``issue_comment`` deliveries at ``POST /webhooks/github``.

    Parameters
    ----------
    secret
        Shared webhook secret used for signature verification.
    dispatcher
        Receiver of decoded events.

    """

    def __init__(self, secret: str, dispatcher: EventSubmitter) -> None:
        """Initialise the resource with its secret and dispatcher."""
        if not secret:
            msg = "webhook secret must be non-empty"
            raise ValueError(msg)
        self._secret = secret
        self._dispatcher = dispatcher

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle a webhook delivery.

        Raises
        ------
        AuthenticationError
            If the signature header is missing or does not match (401).
        MalformedPayloadError
            If the body cannot be decoded into an event (400).
        falcon.HTTPServiceUnavailable
            If the service is draining for shutdown (503).

        """
        body = await req.stream.read()
        verify_signature(self._secret, body, req.get_header(SIGNATURE_HEADER))

        delivery_id = req.get_header(DELIVERY_HEADER)
        event_type = req.get_header(EVENT_HEADER) or _COMMENT_EVENT

        if event_type == _PING_EVENT:
            resp.media = {"status": "pong"}
            resp.status = HTTPStatus.OK
            return

        if event_type != _COMMENT_EVENT:
            _ignore(resp, delivery_id, f"event {event_type}")
            return

        payload = decode_payload(body)
        if payload.action != _CREATED_ACTION:
            _ignore(resp, delivery_id, f"action {payload.action}")
            return

        event = event_from_payload(payload, delivery_id=delivery_id)
        try:
            self._dispatcher.submit(event)
        except DispatcherDrainingError as exc:
            raise falcon.HTTPServiceUnavailable(
                title="Shutting down",
                description=str(exc),
            ) from exc

        resp.media = {"status": "accepted", "delivery": delivery_id}
        resp.status = HTTPStatus.ACCEPTED


def _ignore(resp: Response, delivery_id: str | None, reason: str) -> None:
    log_info(logger, "Ignoring webhook delivery %s: %s", delivery_id, reason)
    resp.media = {"status": "ignored", "delivery": delivery_id}
    resp.status = HTTPStatus.ACCEPTED
