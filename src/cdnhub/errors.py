"""cdnhub error types."""

import httpx

# Remote failures (status, auth, permission, conflict, rate limit, transport)
# propagate as raised by httpx.
RemoteFailure = httpx.HTTPError


class CdnHubError(Exception):
    """Base class for errors raised by cdnhub itself."""


class InvalidArgument(CdnHubError, ValueError):
    """Malformed client argument, such as a bad repository identifier."""


class NotFound(CdnHubError, LookupError):
    """Path does not resolve to a single file."""

    def __init__(self, path: str):
        super().__init__(f"File at path {path} not found.")
        self.path = path


class ContentUnavailable(CdnHubError):
    """File exists but the remote returned neither inline content nor a download URL."""

    def __init__(self, path: str, encoding: str | None):
        super().__init__(f"Content of {path} is unavailable (encoding={encoding}).")
        self.path = path
        self.encoding = encoding
