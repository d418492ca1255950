"""Build application dependencies from a :class:`HeraldConfig`.

This is where the process-wide command registry is created: it is loaded,
built and frozen here, before the Falcon app accepts any delivery, and then
passed by reference into the dispatcher.

Usage
-----
Build dependencies for the API layer::

    from herald.api.factory import build_dependencies
    from herald.config import HeraldConfig

    deps = build_dependencies(HeraldConfig.from_env())

"""

from __future__ import annotations

import typing as typ

from herald.api.app import AppDependencies
from herald.commands.config import (
    build_registry,
    default_commands_config,
    load_commands_config,
)
from herald.dispatch.dispatcher import DispatchPolicy, Dispatcher
from herald.github.client import GitHubRESTClient, GitHubRESTConfig

if typ.TYPE_CHECKING:
    import httpx

    from herald.config import HeraldConfig

__all__ = ["build_dependencies"]


def build_dependencies(
    config: HeraldConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> AppDependencies:
    """Assemble the GitHub client, frozen registry and dispatcher.

    Parameters
    ----------
    config
        Validated service configuration.
    http_client
        Optional ``httpx.AsyncClient`` for the GitHub client.

    Returns
    -------
    AppDependencies
        Dependencies for :func:`herald.api.app.create_app`.

    Raises
    ------
    CommandConfigError
        If the command file is invalid or enabled commands are unknown.

    """
    commands = (
        load_commands_config(config.commands_file)
        if config.commands_file is not None
        else default_commands_config()
    )

    client = GitHubRESTClient(
        GitHubRESTConfig(
            token=config.github_token,
            api_url=config.github_api_url,
            timeout_s=config.http_timeout_s,
            max_retries=config.http_max_retries,
            backoff_s=config.http_backoff_s,
        ),
        http_client=http_client,
    )
    registry = build_registry(commands, client, enabled=config.enabled_commands)
    dispatcher = Dispatcher(
        registry,
        client,
        policy=DispatchPolicy(
            handler_timeout_s=config.handler_timeout_s,
            report_failures=commands.report_failures,
            deny_message=commands.deny_message,
        ),
    )
    return AppDependencies(
        dispatcher=dispatcher,
        webhook_secret=config.webhook_secret,
        github_client=client,
        drain_timeout_s=config.drain_timeout_s,
    )
