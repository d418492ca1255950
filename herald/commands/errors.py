"""Errors raised while building the command registry and its configuration."""

from __future__ import annotations


class CommandError(Exception):
    """Base class for command registry and configuration errors."""


class DuplicateCommandError(CommandError):
    """Raised when a token is registered twice."""

    def __init__(self, token: str) -> None:
        """Initialise with the duplicated token."""
        self.token = token
        super().__init__(f"Command already registered: /{token}")


class InvalidCommandTokenError(CommandError):
    """Raised when a token does not match ``[a-zA-Z][a-zA-Z0-9-]*``."""

    def __init__(self, token: str) -> None:
        """Initialise with the rejected token."""
        self.token = token
        super().__init__(f"Invalid command token: {token!r}")


class RegistryFrozenError(CommandError):
    """Raised when registering into a registry that is already serving."""

    def __init__(self, token: str) -> None:
        """Initialise with the token whose registration was refused."""
        self.token = token
        super().__init__(f"Registry is frozen; cannot register /{token}")


class InsufficientPermissionError(CommandError):
    """Raised when an actor's permission is below a command's floor."""

    def __init__(self, actor: str, token: str, held: str, required: str) -> None:
        """Initialise with the actor, command and the two permission levels."""
        self.actor = actor
        self.token = token
        self.held = held
        self.required = required
        super().__init__(
            f"{actor} holds {held!r} but /{token} requires {required!r}"
        )


class CommandConfigError(CommandError, ValueError):
    """Raised when the command configuration file is invalid.

    All problems found are collected in ``issues`` and joined into the
    message.
    """

    def __init__(self, issues: list[str]) -> None:
        """Capture validation issues while keeping an aggregated message."""
        self.issues = issues
        super().__init__("\n".join(issues))
