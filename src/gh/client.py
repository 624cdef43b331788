"""GitHub API client."""

import logging
import os
import subprocess
from typing import Any
from urllib.parse import quote

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from .models import ContentListing, ContentRecord, ContentResult, GitHubCommit, GitHubContent

logger = logging.getLogger(__name__)

# Retry configuration
DEFAULT_MAX_RETRIES = 1  # single attempt
DEFAULT_MIN_WAIT = 1  # seconds
DEFAULT_MAX_WAIT = 10  # seconds

# Only failures where the request never reached the server
RETRYABLE_EXCEPTIONS = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.PoolTimeout,
)


def get_token_from_gh_cli() -> str | None:
    """
    Get GitHub token from gh cli.

    Returns:
        Token string or None if gh cli not available/authenticated
    """
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0 and result.stdout.strip():
            logger.info("Using token from gh cli")
            return result.stdout.strip()
    except (subprocess.TimeoutExpired, FileNotFoundError) as e:
        logger.debug("gh cli not available: %s", e)
    return None


def get_token(token: str | None = None, use_gh_cli: bool = False) -> str | None:
    """
    Get GitHub token from various sources.

    Priority:
    1. Explicitly provided token
    2. Environment variable GH_TOKEN / GITHUB_TOKEN
    3. gh cli (`gh auth token`) - only if use_gh_cli=True

    Args:
        token: Explicitly provided token
        use_gh_cli: Whether to use gh cli credentials (requires user consent)

    Returns:
        GitHub token or None
    """
    if token:
        logger.debug("Using explicitly provided token")
        return token

    env_token = os.environ.get("GH_TOKEN") or os.environ.get("GITHUB_TOKEN")
    if env_token:
        logger.info("Using token from environment variable")
        return env_token

    if use_gh_cli:
        return get_token_from_gh_cli()

    return None


def create_retry_decorator(max_retries: int = DEFAULT_MAX_RETRIES):
    """Create a retry decorator with specified max attempts."""
    return retry(
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=1, min=DEFAULT_MIN_WAIT, max=DEFAULT_MAX_WAIT),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def contents_endpoint(owner: str, repo: str, path: str = "") -> str:
    """Build the contents endpoint for a repository path."""
    endpoint = f"/repos/{quote(owner)}/{quote(repo)}/contents"
    path = path.strip("/")
    if path:
        endpoint = f"{endpoint}/{quote(path, safe='/')}"
    return endpoint


class GitHubClient:
    """Async client for the GitHub repository contents API."""

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        use_gh_cli: bool = False,
        max_retries: int = DEFAULT_MAX_RETRIES,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token (optional)
            base_url: Custom base URL (defaults to GitHub API)
            timeout: Request timeout in seconds
            use_gh_cli: Use gh cli credentials (requires user consent)
            max_retries: Maximum number of attempts for connection failures (default: 1)
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.transport = transport
        self.headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "cdnhub-github-client",
        }

        resolved_token = get_token(token, use_gh_cli=use_gh_cli)

        if resolved_token:
            self.headers["Authorization"] = f"token {resolved_token}"
            logger.debug("GitHub client initialized with token")
        else:
            logger.warning("GitHub client initialized without token (rate limited, read-only)")
        logger.info("GitHub client ready, base_url=%s, max_retries=%d", self.base_url, max_retries)

    async def _request(
        self, method: str, endpoint: str, **kwargs: Any
    ) -> httpx.Response:
        """Make HTTP request to GitHub API; non-2xx raises httpx.HTTPStatusError."""
        url = f"{self.base_url}{endpoint}"

        @create_retry_decorator(self.max_retries)
        async def do_request() -> httpx.Response:
            logger.debug("Request: %s %s", method, url)
            async with httpx.AsyncClient(
                timeout=self.timeout, headers=self.headers, transport=self.transport
            ) as client:
                response = await client.request(method, url, **kwargs)
                logger.debug(
                    "Response: %s %s (status=%d)",
                    method,
                    endpoint,
                    response.status_code,
                )
                response.raise_for_status()
                return response

        return await do_request()

    async def download(self, url: str) -> bytes:
        """Download raw file content from a download_url."""
        @create_retry_decorator(self.max_retries)
        async def do_download() -> bytes:
            logger.debug("Downloading: %s", url)
            async with httpx.AsyncClient(
                timeout=self.timeout, headers=self.headers, transport=self.transport
            ) as client:
                response = await client.get(url, follow_redirects=True)
                response.raise_for_status()
                return response.content

        return await do_download()

    async def get_content(
        self, owner: str, repo: str, path: str = "", ref: str | None = None
    ) -> ContentResult:
        """
        Get repository contents.

        Args:
            owner: Repository owner
            repo: Repository name
            path: Path in repository (empty for root)
            ref: Branch/tag/commit (default: repository default branch)

        Returns:
            ContentRecord for a single object, ContentListing for a directory
        """
        endpoint = contents_endpoint(owner, repo, path)
        params = {"ref": ref} if ref else {}
        logger.info("Fetching contents: %s/%s path=%s ref=%s", owner, repo, path, ref)
        response = await self._request("GET", endpoint, params=params)
        data = response.json()

        if isinstance(data, list):
            logger.debug("Directory listing: %d items", len(data))
            return ContentListing(path=path, items=[GitHubContent(**item) for item in data])

        logger.debug("Single item response: %s (%s)", data.get("name"), data.get("type"))
        return ContentRecord(item=GitHubContent(**data))

    async def create_or_update_file_contents(
        self,
        owner: str,
        repo: str,
        path: str,
        message: str,
        content: str,
        branch: str | None = None,
        sha: str | None = None,
    ) -> GitHubCommit:
        """
        Create a file, or update it when the current blob sha is given.

        Args:
            owner: Repository owner
            repo: Repository name
            path: File path in repository
            message: Commit message
            content: Base64 encoded file content
            branch: Target branch (default: repository default branch)
            sha: Blob sha of the file being replaced (required for updates)

        Returns:
            GitHubCommit describing the new commit
        """
        body: dict[str, Any] = {"message": message, "content": content}
        if branch:
            body["branch"] = branch
        if sha:
            body["sha"] = sha
        logger.info(
            "%s file: %s/%s path=%s branch=%s",
            "Updating" if sha else "Creating", owner, repo, path, branch,
        )
        response = await self._request("PUT", contents_endpoint(owner, repo, path), json=body)
        commit = GitHubCommit(**response.json())
        logger.debug("Commit created: %s", commit.commit.sha)
        return commit

    async def delete_file(
        self,
        owner: str,
        repo: str,
        path: str,
        message: str,
        sha: str,
        branch: str | None = None,
    ) -> GitHubCommit:
        """
        Delete a file.

        Args:
            owner: Repository owner
            repo: Repository name
            path: File path in repository
            message: Commit message
            sha: Blob sha of the file being deleted
            branch: Target branch (default: repository default branch)

        Returns:
            GitHubCommit describing the new commit
        """
        body: dict[str, Any] = {"message": message, "sha": sha}
        if branch:
            body["branch"] = branch
        logger.info("Deleting file: %s/%s path=%s branch=%s", owner, repo, path, branch)
        response = await self._request("DELETE", contents_endpoint(owner, repo, path), json=body)
        commit = GitHubCommit(**response.json())
        logger.debug("Commit created: %s", commit.commit.sha)
        return commit
