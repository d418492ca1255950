"""Slash-command grammar.

A comment carries a command when, after leading whitespace, its first line
reads ``/<token> [args...]`` with ``token`` matching
``[a-zA-Z][a-zA-Z0-9-]*``. The token must end at whitespace or the end of
the line, so ``/assignme!`` is not a command. Lines end at a line
feed or carriage return; later lines are ignored.
"""

from __future__ import annotations

import dataclasses
import re

TOKEN_PATTERN = re.compile(r"[a-zA-Z][a-zA-Z0-9-]*")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_COMMAND_LINE = re.compile(r"/(?P<token>[a-zA-Z][a-zA-Z0-9-]*)(?:\s+(?P<rest>.*))?")


@dataclasses.dataclass(frozen=True, slots=True)
class Command:
    """A parsed slash command.

    Attributes
    ----------
    token
        Command name without the leading slash.
    arguments
        Whitespace-delimited words following the token on the first line.
    raw_body
        The full comment body the command was parsed from.

    """

    token: str
    arguments: tuple[str, ...]
    raw_body: str


def is_valid_token(token: str) -> bool:
    """Return True when *token* satisfies the command token grammar."""
    return TOKEN_PATTERN.fullmatch(token) is not None


def parse_command(body: str) -> Command | None:
    """Parse *body* into a :class:`Command`.

    Returns ``None`` when the body holds no command; that is the normal
    outcome for ordinary comments, not an error.

    Examples
    --------
    >>> parse_command("/contributing-agreement extra text").arguments
    ('extra', 'text')
    >>> parse_command("thanks! /assignme") is None
    True

    """
    stripped = body.lstrip()
    if not stripped:
        return None

    first_line = _LINE_BREAK.split(stripped, maxsplit=1)[0].rstrip()
    match = _COMMAND_LINE.fullmatch(first_line)
    if match is None:
        return None

    rest = match.group("rest") or ""
    return Command(
        token=match.group("token"),
        arguments=tuple(rest.split()),
        raw_body=body,
    )
