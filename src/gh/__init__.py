"""GitHub API client utilities."""

from .client import GitHubClient, get_token
from .models import (
    ContentListing,
    ContentRecord,
    ContentResult,
    GitHubCommit,
    GitHubCommitInfo,
    GitHubContent,
)

__all__ = [
    "GitHubClient",
    "GitHubContent",
    "GitHubCommit",
    "GitHubCommitInfo",
    "ContentRecord",
    "ContentListing",
    "ContentResult",
    "get_token",
]
