"""Custom exception hierarchy for threadfeed."""


class ThreadFeedError(Exception):
    """Base exception for all threadfeed errors."""

    pass


class ConfigError(ThreadFeedError):
    """Raised when configuration validation fails."""

    pass


class GitHubAPIError(ThreadFeedError):
    """Raised when a GitHub API request fails.

    Attributes:
        status: HTTP status code, or None when no response was received
        path: Request path (with query string), or None when no request was made
    """

    def __init__(self, message: str, status: int | None = None, path: str | None = None) -> None:
        self.status = status
        self.path = path
        super().__init__(message)


class UnauthorizedError(GitHubAPIError):
    """Raised on 401, or 403 without a rate-limit signal."""

    pass


class NotFoundError(GitHubAPIError):
    """Raised when the requested resource does not exist (404)."""

    pass


class RateLimitedError(GitHubAPIError):
    """Raised when GitHub rejects a request because of rate limiting."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        remaining: str | None = None,
        reset: str | None = None,
        path: str | None = None,
    ) -> None:
        """Initialize rate limit error.

        Args:
            message: Error message
            status: HTTP status code (403 or 429)
            remaining: Value of the x-ratelimit-remaining header
            reset: Value of the x-ratelimit-reset header (unix seconds)
            path: Request path that was rejected
        """
        self.remaining = remaining
        self.reset = reset
        super().__init__(message, status, path)


class RemoteError(GitHubAPIError):
    """Raised for any other non-2xx response."""

    pass


class TransportError(GitHubAPIError):
    """Raised on network failure or when the response body cannot be decoded."""

    pass
