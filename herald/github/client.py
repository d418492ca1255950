"""GitHub REST client used by command handlers and the dispatcher."""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

import httpx

from herald.logging import get_logger, log_warning
from herald.permissions import PermissionLevel

from .errors import ExternalAPIError, GitHubResponseShapeError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import ReactionContent, RepositoryRef

logger = get_logger(__name__)

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_SERVER_ERROR_THRESHOLD = 500
_HTTP_NOT_FOUND = 404


class GitHubIssuesClient(typ.Protocol):
    """Outbound operations Herald performs against an issue tracker."""

    async def add_reaction(
        self, repo: RepositoryRef, comment_id: int, content: ReactionContent
    ) -> None:
        """React to an issue comment."""
        ...

    async def add_assignees(
        self, repo: RepositoryRef, issue_number: int, logins: typ.Sequence[str]
    ) -> None:
        """Add users as assignees of an issue or pull request."""
        ...

    async def create_comment(
        self, repo: RepositoryRef, issue_number: int, body: str
    ) -> None:
        """Post a new comment on an issue or pull request."""
        ...

    async def get_permission_level(
        self, repo: RepositoryRef, login: str
    ) -> PermissionLevel:
        """Return the repository permission level held by *login*."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRESTConfig:
    """Connection and retry settings for :class:`GitHubRESTClient`.

    Attributes
    ----------
    token
        Token sent as a bearer credential.
    api_url
        Base URL of the REST API.
    timeout_s
        Timeout applied to each HTTP request.
    max_retries
        Additional attempts made after a 5xx response.
    backoff_s
        Delay before the first retry; doubled for each further retry.

    """

    token: str
    api_url: str = "https://api.github.com"
    timeout_s: float = 10.0
    max_retries: int = 2
    backoff_s: float = 0.5
    user_agent: str = "herald/0.1"
    api_version: str = "2022-11-28"


class GitHubRESTClient:
    """httpx implementation of :class:`GitHubIssuesClient`.

    Parameters
    ----------
    config
        API location, credential and retry policy.
    http_client
        Optional preconfigured ``httpx.AsyncClient``; tests pass one built on
        ``httpx.MockTransport``. When omitted the instance owns its client.
    sleep
        Awaitable used between retries.

    """

    def __init__(
        self,
        config: GitHubRESTConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: cabc.Callable[[float], cabc.Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            msg = "GitHub token must be non-empty"
            raise ValueError(msg)

        self._config = config
        self._sleep = sleep
        self._owns_client = http_client is None
        self._base_url = config.api_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {config.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": config.api_version,
            "User-Agent": config.user_agent,
        }
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def add_reaction(
        self, repo: RepositoryRef, comment_id: int, content: ReactionContent
    ) -> None:
        """React to an issue comment."""
        await self._request(
            "POST",
            f"/repos/{repo.owner}/{repo.name}/issues/comments/{comment_id}/reactions",
            json={"content": str(content)},
        )

    async def add_assignees(
        self, repo: RepositoryRef, issue_number: int, logins: typ.Sequence[str]
    ) -> None:
        """Add users as assignees of an issue or pull request."""
        await self._request(
            "POST",
            f"/repos/{repo.owner}/{repo.name}/issues/{issue_number}/assignees",
            json={"assignees": list(logins)},
        )

    async def create_comment(
        self, repo: RepositoryRef, issue_number: int, body: str
    ) -> None:
        """Post a new comment on an issue or pull request."""
        await self._request(
            "POST",
            f"/repos/{repo.owner}/{repo.name}/issues/{issue_number}/comments",
            json={"body": body},
        )

    async def get_permission_level(
        self, repo: RepositoryRef, login: str
    ) -> PermissionLevel:
        """Return the repository permission level held by *login*.

        ``role_name`` carries the fine-grained role (``triage``,
        ``maintain``) and is preferred over the coarse ``permission`` field.
        Non-collaborators (HTTP 404) are reported as ``none``.
        """
        path = f"/repos/{repo.owner}/{repo.name}/collaborators/{login}/permission"
        try:
            response = await self._request("GET", path)
        except ExternalAPIError as exc:
            if exc.status_code == _HTTP_NOT_FOUND:
                return PermissionLevel.NONE
            raise
        try:
            payload = response.json()
        except ValueError as exc:
            raise GitHubResponseShapeError.missing("permission") from exc
        return _permission_from_payload(payload)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, typ.Any] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying 5xx responses with exponential backoff."""
        operation = f"{method} {path}"
        attempt = 0
        while True:
            response = await self._send(method, path, json=json, operation=operation)
            status = response.status_code
            if status < _HTTP_ERROR_STATUS_THRESHOLD:
                return response
            retryable = status >= _HTTP_SERVER_ERROR_THRESHOLD
            if not retryable or attempt >= self._config.max_retries:
                raise ExternalAPIError.http_error(method, path, status)

            delay = self._config.backoff_s * (2**attempt)
            attempt += 1
            log_warning(
                logger,
                "GitHub API %s returned HTTP %d; retry %d/%d in %.2fs",
                operation,
                status,
                attempt,
                self._config.max_retries,
                delay,
            )
            await self._sleep(delay)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, typ.Any] | None,
        operation: str,
    ) -> httpx.Response:
        try:
            return await self._client.request(
                method,
                f"{self._base_url}{path}",
                json=json,
                headers=self._headers,
                timeout=self._config.timeout_s,
            )
        except httpx.TimeoutException as exc:
            raise ExternalAPIError.timeout(operation) from exc
        except httpx.RequestError as exc:
            raise ExternalAPIError.network_error(operation, str(exc)) from exc


def _permission_from_payload(payload: object) -> PermissionLevel:
    if not isinstance(payload, dict):
        raise GitHubResponseShapeError.missing("permission")

    for field in ("role_name", "permission"):
        raw = payload.get(field)
        if isinstance(raw, str):
            try:
                return PermissionLevel.parse(raw)
            except ValueError:
                continue
    raise GitHubResponseShapeError.missing("permission")


__all__ = ["GitHubIssuesClient", "GitHubRESTClient", "GitHubRESTConfig"]
