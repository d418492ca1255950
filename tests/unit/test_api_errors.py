"""Unit tests for herald.api.errors error handlers.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_errors.py

"""

from __future__ import annotations

import falcon
import falcon.asgi
import falcon.testing
import pytest

from herald.api.errors import handle_authentication, handle_malformed_payload
from herald.webhook.errors import AuthenticationError, MalformedPayloadError


class _UnsignedResource:
    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        raise AuthenticationError.missing_signature()


class _MalformedResource:
    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        msg = "Object missing required field `comment`"
        raise MalformedPayloadError(msg)


@pytest.fixture
def client() -> falcon.testing.TestClient:
    """Build a test client with the webhook error handlers registered."""
    app = falcon.asgi.App()
    app.add_route("/unsigned", _UnsignedResource())
    app.add_route("/malformed", _MalformedResource())
    app.add_error_handler(AuthenticationError, handle_authentication)
    app.add_error_handler(MalformedPayloadError, handle_malformed_payload)
    return falcon.testing.TestClient(app)


def test_authentication_error_is_401(client: falcon.testing.TestClient) -> None:
    """Signature failures map to 401 with a JSON body."""
    result = client.simulate_post(
        "/unsigned", headers={"X-GitHub-Delivery": "abc"}
    )

    assert result.status == falcon.HTTP_401
    assert result.json == {
        "title": "Unauthorized",
        "description": "Missing X-Hub-Signature-256 header",
    }


def test_malformed_payload_is_400(client: falcon.testing.TestClient) -> None:
    """Decoding failures map to 400 carrying the reason."""
    result = client.simulate_post("/malformed")

    assert result.status == falcon.HTTP_400
    assert result.json == {
        "title": "Malformed payload",
        "description": "Object missing required field `comment`",
    }
