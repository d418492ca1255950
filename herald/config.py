"""Service configuration read once from the environment at startup."""

from __future__ import annotations

import dataclasses
import os
import typing as typ
from pathlib import Path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_DEFAULT_API_URL = "https://api.github.com"
_DEFAULT_HTTP_TIMEOUT_S = 10.0
_DEFAULT_HTTP_MAX_RETRIES = 2
_DEFAULT_HTTP_BACKOFF_S = 0.5
_DEFAULT_HANDLER_TIMEOUT_S = 10.0
_DEFAULT_DRAIN_TIMEOUT_S = 30.0


class HeraldConfigError(RuntimeError):
    """Raised when required settings are missing or malformed."""

    @classmethod
    def missing(cls, name: str) -> HeraldConfigError:
        """Return an error for an unset or blank required variable."""
        return cls(f"{name} is required")

    @classmethod
    def invalid(cls, name: str, value: str, expected: str) -> HeraldConfigError:
        """Return an error for a variable that fails validation."""
        return cls(f"{name}={value!r} is invalid: expected {expected}")


@dataclasses.dataclass(frozen=True, slots=True)
class HeraldConfig:
    """Settings shared by the receiver, dispatcher and GitHub client.

    Attributes
    ----------
    webhook_secret
        Shared secret for ``X-Hub-Signature-256`` verification.
    github_token
        Credential for the GitHub REST API.
    github_api_url
        REST API base URL; override for GitHub Enterprise.
    commands_file
        Optional YAML command configuration; built-in commands otherwise.
    enabled_commands
        Optional subset of configured commands to register.
    http_timeout_s, http_max_retries, http_backoff_s
        Per-request timeout and 5xx retry policy.
    handler_timeout_s
        Deadline for one handler invocation.
    drain_timeout_s
        Time allowed for in-flight commands at shutdown.

    """

    webhook_secret: str
    github_token: str
    github_api_url: str = _DEFAULT_API_URL
    commands_file: Path | None = None
    enabled_commands: tuple[str, ...] | None = None
    http_timeout_s: float = _DEFAULT_HTTP_TIMEOUT_S
    http_max_retries: int = _DEFAULT_HTTP_MAX_RETRIES
    http_backoff_s: float = _DEFAULT_HTTP_BACKOFF_S
    handler_timeout_s: float = _DEFAULT_HANDLER_TIMEOUT_S
    drain_timeout_s: float = _DEFAULT_DRAIN_TIMEOUT_S

    @classmethod
    def from_env(
        cls, environ: cabc.Mapping[str, str] | None = None
    ) -> HeraldConfig:
        """Build configuration from ``HERALD_*`` environment variables.

        Parameters
        ----------
        environ
            Mapping to read instead of ``os.environ``.

        Raises
        ------
        HeraldConfigError
            If the secret or token is missing, or a numeric value is
            malformed or out of range.

        """
        env = os.environ if environ is None else environ

        commands_file = env.get("HERALD_COMMANDS_FILE", "").strip()
        return cls(
            webhook_secret=_required(env, "HERALD_WEBHOOK_SECRET"),
            github_token=_required(env, "HERALD_GITHUB_TOKEN"),
            github_api_url=env.get(
                "HERALD_GITHUB_API_URL", _DEFAULT_API_URL
            ).rstrip("/"),
            commands_file=Path(commands_file) if commands_file else None,
            enabled_commands=_token_list(env.get("HERALD_ENABLED_COMMANDS")),
            http_timeout_s=_positive_float(
                env, "HERALD_HTTP_TIMEOUT_S", _DEFAULT_HTTP_TIMEOUT_S
            ),
            http_max_retries=_non_negative_int(
                env, "HERALD_HTTP_MAX_RETRIES", _DEFAULT_HTTP_MAX_RETRIES
            ),
            http_backoff_s=_non_negative_float(
                env, "HERALD_HTTP_BACKOFF_S", _DEFAULT_HTTP_BACKOFF_S
            ),
            handler_timeout_s=_positive_float(
                env, "HERALD_HANDLER_TIMEOUT_S", _DEFAULT_HANDLER_TIMEOUT_S
            ),
            drain_timeout_s=_non_negative_float(
                env, "HERALD_DRAIN_TIMEOUT_S", _DEFAULT_DRAIN_TIMEOUT_S
            ),
        )


def _required(env: cabc.Mapping[str, str], name: str) -> str:
    value = env.get(name, "").strip()
    if not value:
        raise HeraldConfigError.missing(name)
    return value


def _token_list(raw: str | None) -> tuple[str, ...] | None:
    if raw is None or not raw.strip():
        return None
    return tuple(token.strip().lstrip("/") for token in raw.split(",") if token.strip())


def _parse_float(env: cabc.Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise HeraldConfigError.invalid(name, raw, "a number") from exc


def _positive_float(env: cabc.Mapping[str, str], name: str, default: float) -> float:
    value = _parse_float(env, name, default)
    if value <= 0:
        raise HeraldConfigError.invalid(name, str(value), "a positive number")
    return value


def _non_negative_float(
    env: cabc.Mapping[str, str], name: str, default: float
) -> float:
    value = _parse_float(env, name, default)
    if value < 0:
        raise HeraldConfigError.invalid(name, str(value), "zero or more")
    return value


def _non_negative_int(env: cabc.Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise HeraldConfigError.invalid(name, raw, "an integer") from exc
    if value < 0:
        raise HeraldConfigError.invalid(name, raw, "zero or more")
    return value
