"""Webhook decoding and signature verification."""

from __future__ import annotations

from .errors import AuthenticationError, MalformedPayloadError, WebhookError
from .models import Event, IssueCommentPayload, decode_payload, event_from_payload
from .signature import SIGNATURE_HEADER, sign_payload, verify_signature

__all__ = [
    "SIGNATURE_HEADER",
    "AuthenticationError",
    "Event",
    "IssueCommentPayload",
    "MalformedPayloadError",
    "WebhookError",
    "decode_payload",
    "event_from_payload",
    "sign_payload",
    "verify_signature",
]
