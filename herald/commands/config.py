"""Command configuration: schema, YAML loading and registry construction.

The built-in configuration mirrors the two slash commands Herald replaces:
``/assignme`` and ``/contributing-agreement``, both open to anyone with
read access and acknowledged with a rocket reaction. Deployments can
supply their own YAML file through ``HERALD_COMMANDS_FILE``.

Example file::

    report_failures: true
    commands:
      - token: assignme
        handler: assign-actor
        permission: triage
      - token: contributing-agreement
        handler: reply
        reaction: "+1"          # quote it, YAML reads +1 as a number
        body: |
          Please read CONTRIBUTING.md before opening a pull request.

"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from herald.github.models import ReactionContent
from herald.permissions import PermissionLevel

from .errors import CommandConfigError
from .handlers import AssignActor, PostTemplatedReply
from .parser import is_valid_token
from .registry import CommandRegistry

if typ.TYPE_CHECKING:
    from herald.github.client import GitHubIssuesClient

    from .handlers import CommandHandler

YAML_VERSION = (1, 2)

HandlerKind = typ.Literal["assign-actor", "reply"]

CONTRIBUTING_AGREEMENT_BODY = """\
Contributing Agreements:

- [pull request](https://github.com/xline-kv/Xline/blob/master/CONTRIBUTING.md#pull-requests)
- [merge policy](https://docs.github.com/en/pull-requests/collaborating-with-pull-requests/incorporating-changes-from-a-pull-request/about-pull-request-merges#rebase-and-merge-your-commits)
"""


class CommandEntry(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """One configured slash command.

    Attributes
    ----------
    token : str
        Command token without the slash.
    handler : Literal["assign-actor", "reply"]
        Effect carried out by the command.
    permission : PermissionLevel
        Minimum repository permission required to run it.
    reaction : ReactionContent | None
        Acknowledgement reaction; ``null`` disables it.
    body : str, optional
        Reply text, required for ``reply`` handlers.

    """

    token: str
    handler: HandlerKind
    permission: PermissionLevel = PermissionLevel.READ
    reaction: ReactionContent | None = ReactionContent.ROCKET
    body: str | None = None


class CommandsConfig(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Top-level command configuration.

    Attributes
    ----------
    commands : list[CommandEntry]
        Commands to register, in order.
    report_failures : bool
        Post a follow-up comment when a command's API call fails.
    deny_message : str, optional
        Reply posted when an actor lacks permission; silent when unset.

    """

    commands: list[CommandEntry]
    report_failures: bool = False
    deny_message: str | None = None


def default_commands_config() -> CommandsConfig:
    """Return the built-in ``/assignme`` and ``/contributing-agreement`` setup."""
    return CommandsConfig(
        commands=[
            CommandEntry(token="assignme", handler="assign-actor"),
            CommandEntry(
                token="contributing-agreement",
                handler="reply",
                body=CONTRIBUTING_AGREEMENT_BODY,
            ),
        ],
    )


def validate_commands_config(config: CommandsConfig) -> CommandsConfig:
    """Return *config* when it is internally consistent.

    Raises
    ------
    CommandConfigError
        Listing every invalid token, duplicate, and misplaced or missing body.

    """
    issues: list[str] = []
    seen: set[str] = set()

    if not config.commands:
        issues.append("no commands configured")

    for index, entry in enumerate(config.commands):
        where = f"commands[{index}]"
        if not is_valid_token(entry.token):
            issues.append(f"{where}: invalid token {entry.token!r}")
        elif entry.token in seen:
            issues.append(f"{where}: duplicate token {entry.token!r}")
        seen.add(entry.token)

        has_body = entry.body is not None and bool(entry.body.strip())
        if entry.handler == "reply" and not has_body:
            issues.append(f"{where}: reply command {entry.token!r} needs a body")
        if entry.handler != "reply" and entry.body is not None:
            issues.append(f"{where}: body is only valid for reply commands")

    if config.deny_message is not None and not config.deny_message.strip():
        issues.append("deny_message must be non-empty when set")

    if issues:
        raise CommandConfigError(issues)
    return config


def load_commands_config(path: Path | str) -> CommandsConfig:
    """Parse and validate a YAML command configuration file."""
    yaml = _yaml()
    path_obj = Path(path)

    try:
        loaded = yaml.load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise CommandConfigError([f"failed to parse YAML: {exc}"]) from exc

    if loaded is None:
        raise CommandConfigError(["command configuration file is empty"])

    try:
        config = msgspec.convert(loaded, type=CommandsConfig)
    except msgspec.ValidationError as exc:
        raise CommandConfigError([f"schema validation failed: {exc}"]) from exc

    return validate_commands_config(config)


def _build_handler(entry: CommandEntry, client: GitHubIssuesClient) -> CommandHandler:
    if entry.handler == "assign-actor":
        return AssignActor(client)
    return PostTemplatedReply(client, typ.cast("str", entry.body))


def build_registry(
    config: CommandsConfig,
    client: GitHubIssuesClient,
    *,
    enabled: cabc.Collection[str] | None = None,
) -> CommandRegistry:
    """Register the configured commands and return a frozen registry.

    Parameters
    ----------
    config
        Validated command configuration.
    client
        Client the handlers use for their API calls.
    enabled
        Optional subset of tokens to register. ``None`` registers all.

    Raises
    ------
    CommandConfigError
        If *enabled* names a token absent from *config*.
    DuplicateCommandError
        If *config* repeats a token and skipped validation.

    """
    configured = {entry.token for entry in config.commands}
    if enabled is not None:
        unknown = sorted(set(enabled) - configured)
        if unknown:
            raise CommandConfigError(
                [f"enabled command not configured: {token!r}" for token in unknown]
            )

    registry = CommandRegistry()
    for entry in config.commands:
        if enabled is not None and entry.token not in enabled:
            continue
        registry.register(
            entry.token,
            entry.permission,
            _build_handler(entry, client),
            reaction=entry.reaction,
        )
    registry.freeze()
    return registry


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
