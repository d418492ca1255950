"""Command handlers.

Handlers carry out a command's effect through a :class:`GitHubIssuesClient`.
They raise :class:`~herald.github.errors.ExternalAPIError` on failure and
leave reporting to the dispatcher.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from herald.github.client import GitHubIssuesClient
    from herald.webhook.models import Event

    from .parser import Command


@typ.runtime_checkable
class CommandHandler(typ.Protocol):
    """A unit of logic run for one authorised command."""

    async def handle(self, event: Event, command: Command) -> None:
        """Perform the command's effect for *event*."""
        ...


class AssignActor:
    """Assign the commenting actor to the issue they commented on."""

    def __init__(self, client: GitHubIssuesClient) -> None:
        """Bind the handler to an issue-tracker client."""
        self._client = client

    async def handle(self, event: Event, command: Command) -> None:
        """Add ``event.actor`` as an assignee of ``event.issue_number``."""
        del command
        await self._client.add_assignees(
            event.repository, event.issue_number, [event.actor]
        )


class PostTemplatedReply:
    """Reply to the issue with a fixed body.

    Command arguments are accepted and ignored; the body never varies.
    """

    def __init__(self, client: GitHubIssuesClient, body: str) -> None:
        """Bind the handler to a client and the reply text."""
        if not body.strip():
            msg = "reply body must be non-empty"
            raise ValueError(msg)
        self._client = client
        self._body = body

    @property
    def body(self) -> str:
        """Return the reply text."""
        return self._body

    async def handle(self, event: Event, command: Command) -> None:
        """Post the fixed body as a new comment on ``event.issue_number``."""
        del command
        await self._client.create_comment(
            event.repository, event.issue_number, self._body
        )


__all__ = ["AssignActor", "CommandHandler", "PostTemplatedReply"]
