"""GitHub REST client errors."""

from __future__ import annotations


class ExternalAPIError(RuntimeError):
    """Raised when a call to the GitHub REST API fails.

    Covers HTTP error responses, timeouts and transport failures. The
    dispatcher contains these per event; they never stop the service.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        timed_out: bool = False,
    ) -> None:
        """Initialise with a message, optional HTTP status and timeout flag."""
        self.status_code = status_code
        self.timed_out = timed_out
        super().__init__(message)

    @classmethod
    def http_error(cls, method: str, path: str, status_code: int) -> ExternalAPIError:
        """Return an error for a non-2xx response."""
        return cls(
            f"GitHub API {method} {path} returned HTTP {status_code}",
            status_code=status_code,
        )

    @classmethod
    def timeout(cls, operation: str) -> ExternalAPIError:
        """Return an error for a request or handler that ran out of time."""
        return cls(f"GitHub API {operation} timed out", timed_out=True)

    @classmethod
    def network_error(cls, operation: str, detail: str) -> ExternalAPIError:
        """Return an error for DNS, connection or TLS failures."""
        return cls(f"GitHub API {operation} network error: {detail}")

    @property
    def is_transient(self) -> bool:
        """Return True for failures worth retrying later (5xx or timeout)."""
        return self.timed_out or (
            self.status_code is not None and self.status_code >= 500  # noqa: PLR2004
        )


class GitHubResponseShapeError(ExternalAPIError):
    """Raised when a GitHub response lacks an expected field."""

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error naming the missing response field."""
        return cls(f"GitHub API response missing expected field: {field}")
