"""Unit tests for webhook payload decoding."""

from __future__ import annotations

import pytest

from herald.github.models import RepositoryRef
from herald.permissions import PermissionLevel
from herald.webhook.errors import MalformedPayloadError
from herald.webhook.models import Event, decode_payload, event_from_payload
from tests.helpers.webhook_payloads import comment_payload, encode


class TestDecodePayload:
    """Tests for decode_payload."""

    def test_extracts_required_fields(self) -> None:
        """The fields the dispatcher needs survive decoding."""
        payload = decode_payload(encode(comment_payload("/assignme", login="mona")))

        assert payload.action == "created"
        assert payload.comment.body == "/assignme"
        assert payload.issue.number == 42
        assert payload.sender.login == "mona"
        assert payload.repository.full_name == "xline-kv/Xline"

    def test_invalid_json_rejected(self) -> None:
        """Non-JSON bodies are malformed."""
        with pytest.raises(MalformedPayloadError):
            decode_payload(b"not json")

    def test_missing_comment_rejected(self) -> None:
        """A payload without a comment object is malformed."""
        raw = comment_payload("/assignme")
        del raw["comment"]

        with pytest.raises(MalformedPayloadError) as excinfo:
            decode_payload(encode(raw))

        assert "comment" in excinfo.value.reason

    def test_invalid_utf8_rejected(self) -> None:
        """Bodies that are not UTF-8 are malformed, not server errors."""
        body = encode(comment_payload("PLACEHOLDER")).replace(
            b"PLACEHOLDER", b"\xff\xfe"
        )

        with pytest.raises(MalformedPayloadError):
            decode_payload(body)

    def test_wrong_type_rejected(self) -> None:
        """Type mismatches are reported, not coerced."""
        raw = comment_payload("/assignme")
        raw["issue"]["number"] = "forty-two"

        with pytest.raises(MalformedPayloadError):
            decode_payload(encode(raw))


class TestEventFromPayload:
    """Tests for event_from_payload."""

    def test_builds_event(self) -> None:
        """Payload fields map onto the immutable event."""
        payload = decode_payload(
            encode(
                comment_payload(
                    "/assignme",
                    login="mona",
                    issue_number=7,
                    comment_id=55,
                    permission="write",
                )
            )
        )

        event = event_from_payload(payload, delivery_id="abc")

        assert event == Event(
            actor="mona",
            issue_number=7,
            comment_id=55,
            body="/assignme",
            repository=RepositoryRef(owner="xline-kv", name="Xline"),
            permission=PermissionLevel.WRITE,
            delivery_id="abc",
        )

    def test_absent_permission_left_for_lookup(self) -> None:
        """Payloads without sender.permission produce no permission."""
        payload = decode_payload(encode(comment_payload("hi", permission=None)))

        assert event_from_payload(payload).permission is None

    def test_null_body_becomes_empty(self) -> None:
        """A null comment body is treated as an empty comment."""
        raw = comment_payload("ignored")
        raw["comment"]["body"] = None

        event = event_from_payload(decode_payload(encode(raw)))

        assert event.body == ""

    def test_unknown_permission_rejected(self) -> None:
        """Unrecognised permission strings are malformed input."""
        payload = decode_payload(encode(comment_payload("hi", permission="owner")))

        with pytest.raises(MalformedPayloadError, match="owner"):
            event_from_payload(payload)

    def test_bad_repository_name_rejected(self) -> None:
        """Repository names must be owner/name."""
        payload = decode_payload(encode(comment_payload("hi", full_name="Xline")))

        with pytest.raises(MalformedPayloadError, match="owner/name"):
            event_from_payload(payload)
