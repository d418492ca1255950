"""Unit tests for the built-in command handlers."""

from __future__ import annotations

import pytest

from herald.commands.handlers import AssignActor, CommandHandler, PostTemplatedReply
from herald.commands.parser import parse_command
from herald.github.errors import ExternalAPIError
from tests.helpers.github_fakes import FakeIssuesClient, RecordedCall
from tests.helpers.webhook_payloads import REPO, make_event


async def test_assign_actor_assigns_commenter() -> None:
    """AssignActor adds the event's actor to the event's issue."""
    client = FakeIssuesClient()
    event = make_event("/assignme", actor="mona", issue_number=7)
    command = parse_command(event.body)
    assert command is not None

    await AssignActor(client).handle(event, command)

    assert client.calls == [RecordedCall("add_assignees", (REPO, 7, ("mona",)))]


async def test_reply_ignores_arguments() -> None:
    """PostTemplatedReply posts its fixed body whatever the arguments."""
    client = FakeIssuesClient()
    event = make_event("/contributing-agreement extra text", issue_number=12)
    command = parse_command(event.body)
    assert command is not None
    assert command.arguments == ("extra", "text")

    await PostTemplatedReply(client, "Read the guide.").handle(event, command)

    assert client.calls == [
        RecordedCall("create_comment", (REPO, 12, "Read the guide."))
    ]


async def test_handler_propagates_api_errors() -> None:
    """Handlers leave ExternalAPIError for the dispatcher to report."""
    error = ExternalAPIError.http_error("POST", "/x", 422)
    client = FakeIssuesClient(failures={"add_assignees": error})
    event = make_event("/assignme")
    command = parse_command(event.body)
    assert command is not None

    with pytest.raises(ExternalAPIError) as excinfo:
        await AssignActor(client).handle(event, command)
    assert excinfo.value is error


def test_reply_requires_body() -> None:
    """A blank reply body is refused at construction."""
    with pytest.raises(ValueError, match="non-empty"):
        PostTemplatedReply(FakeIssuesClient(), "   ")


def test_handlers_satisfy_protocol() -> None:
    """Both handlers are structural CommandHandler implementations."""
    client = FakeIssuesClient()
    assert isinstance(AssignActor(client), CommandHandler)
    assert isinstance(PostTemplatedReply(client, "hi"), CommandHandler)
