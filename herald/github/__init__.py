"""GitHub REST client and supporting types."""

from __future__ import annotations

from .client import GitHubIssuesClient, GitHubRESTClient, GitHubRESTConfig
from .errors import ExternalAPIError, GitHubResponseShapeError
from .models import ReactionContent, RepositoryRef

__all__ = [
    "ExternalAPIError",
    "GitHubIssuesClient",
    "GitHubRESTClient",
    "GitHubRESTConfig",
    "GitHubResponseShapeError",
    "ReactionContent",
    "RepositoryRef",
]
