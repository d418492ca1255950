"""Herald runtime entrypoint.

This module provides the ASGI application factory used by Granian
(``herald.runtime:create_app``) and the ``herald`` console script.

Configuration is driven by environment variables:

- ``HERALD_HOST``: Bind address (default ``0.0.0.0``)
- ``HERALD_PORT``: Listen port (default ``8080``)
- ``HERALD_LOG_LEVEL``: Log level (default ``INFO``)
- ``HERALD_WEBHOOK_SECRET`` and ``HERALD_GITHUB_TOKEN``: required
- further ``HERALD_*`` settings as described in :mod:`herald.config`

A missing or invalid setting terminates startup with exit status 1.

Run the service directly with ``python -m herald.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from herald.commands.errors import CommandError
from herald.config import HeraldConfig, HeraldConfigError
from herald.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "load_config", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid HERALD_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def load_config() -> HeraldConfig:
    """Read :class:`HeraldConfig` from the environment or exit with status 1."""
    try:
        return HeraldConfig.from_env()
    except HeraldConfigError as exc:
        log_error(logger, "Invalid Herald configuration: %s", exc)
        raise SystemExit(1) from exc


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application with the webhook receiver enabled.

    The command registry is built and frozen here, before the server starts
    accepting requests.

    Raises
    ------
    SystemExit
        With status 1 if configuration or the command file is invalid.

    """
    from herald.api.app import create_app as _create_api_app
    from herald.api.factory import build_dependencies

    config = load_config()
    try:
        deps = build_dependencies(config)
    except CommandError as exc:
        log_error(logger, "Invalid command configuration: %s", exc)
        raise SystemExit(1) from exc
    return _create_api_app(deps)


def main() -> None:
    """Start the Herald webhook service using Granian.

    Configuration is validated before the server starts so that a missing
    secret or token fails fast in the parent process.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("HERALD_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("HERALD_PORT", "8080"))
    log_level_str = os.environ.get("HERALD_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid HERALD_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    config = load_config()
    if config.commands_file is not None:
        from herald.commands.config import load_commands_config

        try:
            load_commands_config(config.commands_file)
        except CommandError as exc:
            log_error(logger, "Invalid command configuration: %s", exc)
            raise SystemExit(1) from exc

    log_info(
        logger,
        "Starting Herald on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "herald.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
