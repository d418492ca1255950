"""Typed webhook payloads and the immutable event handed to the dispatcher.

Only the fields Herald needs are declared; msgspec ignores the rest of
GitHub's ``issue_comment`` payload.
"""

from __future__ import annotations

import dataclasses

import msgspec

from herald.github.models import RepositoryRef
from herald.permissions import PermissionLevel

from .errors import MalformedPayloadError


class CommentPayload(msgspec.Struct, kw_only=True):
    """The ``comment`` object of an ``issue_comment`` delivery."""

    id: int
    body: str | None = None


class IssuePayload(msgspec.Struct, kw_only=True):
    """The ``issue`` object; pull requests share the issue numbering."""

    number: int


class RepositoryPayload(msgspec.Struct, kw_only=True):
    """The ``repository`` object."""

    full_name: str


class SenderPayload(msgspec.Struct, kw_only=True):
    """The ``sender`` object.

    ``permission`` is not part of GitHub's own payload. Proxies that
    enrich deliveries may supply it; otherwise the dispatcher looks the
    level up through the API.
    """

    login: str
    permission: str | None = None


class IssueCommentPayload(msgspec.Struct, kw_only=True):
    """An ``issue_comment`` webhook delivery."""

    action: str = "created"
    comment: CommentPayload
    issue: IssuePayload
    repository: RepositoryPayload
    sender: SenderPayload


@dataclasses.dataclass(frozen=True, slots=True)
class Event:
    """One comment delivery, read-only for the lifetime of its dispatch."""

    actor: str
    issue_number: int
    comment_id: int
    body: str
    repository: RepositoryRef
    permission: PermissionLevel | None = None
    delivery_id: str | None = None


def decode_payload(body: bytes) -> IssueCommentPayload:
    """Decode raw JSON into an :class:`IssueCommentPayload`.

    Raises
    ------
    MalformedPayloadError
        If the body is not UTF-8 JSON or lacks a required field.

    """
    try:
        return msgspec.json.decode(body, type=IssueCommentPayload)
    except (msgspec.DecodeError, UnicodeDecodeError) as exc:
        raise MalformedPayloadError(str(exc)) from exc


def event_from_payload(
    payload: IssueCommentPayload, *, delivery_id: str | None = None
) -> Event:
    """Build an :class:`Event` from a decoded payload.

    Raises
    ------
    MalformedPayloadError
        If the repository name or the permission string is invalid.

    """
    try:
        repository = RepositoryRef.parse(payload.repository.full_name)
    except ValueError as exc:
        raise MalformedPayloadError(str(exc)) from exc

    permission: PermissionLevel | None = None
    if payload.sender.permission is not None:
        try:
            permission = PermissionLevel.parse(payload.sender.permission)
        except ValueError as exc:
            reason = f"unknown sender.permission {payload.sender.permission!r}"
            raise MalformedPayloadError(reason) from exc

    return Event(
        actor=payload.sender.login,
        issue_number=payload.issue.number,
        comment_id=payload.comment.id,
        body=payload.comment.body or "",
        repository=repository,
        permission=permission,
        delivery_id=delivery_id,
    )
