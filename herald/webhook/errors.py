"""Errors raised while accepting webhook deliveries."""

from __future__ import annotations


class WebhookError(Exception):
    """Base class for webhook receipt errors."""


class AuthenticationError(WebhookError):
    """Raised when a delivery's signature is absent or does not verify."""

    @classmethod
    def missing_signature(cls) -> AuthenticationError:
        """Return an error for a request without ``X-Hub-Signature-256``."""
        return cls("Missing X-Hub-Signature-256 header")

    @classmethod
    def invalid_signature(cls) -> AuthenticationError:
        """Return an error for a signature that does not match the body."""
        return cls("Webhook signature does not match payload")


class MalformedPayloadError(WebhookError):
    """Raised when a verified body cannot be decoded into an event.

    Attributes
    ----------
    reason
        Human-readable description of the decoding failure.

    """

    def __init__(self, reason: str) -> None:
        """Initialise with the decoding failure reason."""
        self.reason = reason
        super().__init__(f"Malformed webhook payload: {reason}")
