"""Slash-command parsing, handlers and the command registry.

Quick examples
--------------

Parse a comment::

    >>> from herald.commands import parse_command
    >>> parse_command("/assignme").token
    'assignme'

Build the default registry around a GitHub client::

    >>> from herald.commands import build_registry, default_commands_config
    >>> registry = build_registry(default_commands_config(), client)
    >>> registry.tokens
    ('assignme', 'contributing-agreement')

"""

from __future__ import annotations

from .config import (
    CommandEntry,
    CommandsConfig,
    build_registry,
    default_commands_config,
    load_commands_config,
    validate_commands_config,
)
from .errors import (
    CommandConfigError,
    CommandError,
    DuplicateCommandError,
    InsufficientPermissionError,
    InvalidCommandTokenError,
    RegistryFrozenError,
)
from .handlers import AssignActor, CommandHandler, PostTemplatedReply
from .parser import Command, is_valid_token, parse_command
from .registry import CommandRegistry, HandlerSpec

__all__ = [
    "AssignActor",
    "Command",
    "CommandConfigError",
    "CommandEntry",
    "CommandError",
    "CommandHandler",
    "CommandRegistry",
    "CommandsConfig",
    "DuplicateCommandError",
    "HandlerSpec",
    "InsufficientPermissionError",
    "InvalidCommandTokenError",
    "PostTemplatedReply",
    "RegistryFrozenError",
    "build_registry",
    "default_commands_config",
    "is_valid_token",
    "load_commands_config",
    "parse_command",
    "validate_commands_config",
]
