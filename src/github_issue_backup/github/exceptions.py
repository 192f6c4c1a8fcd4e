"""GitHub client exceptions."""

from datetime import datetime


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class GitHubApiError(GitHubClientError):
    """Raised when GitHub answered but rejected the request.

    This is the only error family the rate limit executor retries: a
    rejected request may be caused by an exhausted rate limit quota.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubAuthenticationError(GitHubApiError):
    """Raised when authentication fails (401) or no token is available."""

    pass


class GitHubRateLimitError(GitHubApiError):
    """Raised when rate limit is exceeded (403/429 with rate limit headers)."""

    def __init__(
        self,
        message: str,
        reset_at: datetime | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.reset_at = reset_at


class GitHubNotFoundError(GitHubApiError):
    """Raised when a resource is not found (404)."""

    pass


class GitHubTransportError(GitHubClientError):
    """Raised when the request never got a response (network, timeout)."""

    pass


class GitHubResponseError(GitHubClientError):
    """Raised when a response body cannot be decoded or validated."""

    pass
