"""Typed values shared by the GitHub client and the webhook layer."""

from __future__ import annotations

import dataclasses
import enum


class ReactionContent(enum.StrEnum):
    """Reaction types accepted by the GitHub reactions API."""

    PLUS_ONE = "+1"
    MINUS_ONE = "-1"
    LAUGH = "laugh"
    CONFUSED = "confused"
    HEART = "heart"
    HOORAY = "hooray"
    ROCKET = "rocket"
    EYES = "eyes"


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryRef:
    """A GitHub repository addressed by owner and name.

    Repository full names use ``/`` as a separator but are not paths, so
    they are parsed here rather than with ``pathlib``.
    """

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        """Return the ``owner/name`` notation used in webhook payloads."""
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, full_name: str) -> RepositoryRef:
        """Parse an ``owner/name`` string.

        Raises
        ------
        ValueError
            If *full_name* is not exactly two non-empty segments.

        Examples
        --------
        >>> RepositoryRef.parse("xline-kv/Xline")
        RepositoryRef(owner='xline-kv', name='Xline')

        """
        owner, sep, name = full_name.partition("/")
        if not sep or not owner or not name or "/" in name:
            msg = (
                "Invalid repository full name: expected 'owner/name', "
                f"got {full_name!r}"
            )
            raise ValueError(msg)
        return cls(owner=owner, name=name)

    def __str__(self) -> str:
        """Return the full name."""
        return self.full_name
