"""Repository-backed content store."""

import base64
import logging
import os

import httpx

from gh import ContentListing, ContentRecord, ContentResult, GitHubClient, GitHubContent, get_token
from gh.client import DEFAULT_MAX_RETRIES

from .config import BRANCH_ENV, REPO_ENV, RepositoryContext
from .errors import ContentUnavailable, InvalidArgument, NotFound
from .models import FileEntry

logger = logging.getLogger(__name__)

TOOL_TAG = "[pypi/cdnhub]: "


def commit_message(message: str | None, default: str) -> str:
    """Prefix a commit message with the tool tag."""
    return TOOL_TAG + (message or default)


def revision_of(result: ContentResult) -> str | None:
    """Blob sha of a single-record result, None for a directory listing."""
    if isinstance(result, ContentListing):
        return None
    return result.item.sha


class Box:
    """
    Simple file store on top of a GitHub repository.

    Every operation is an independent round-trip to the contents API on the
    configured branch. Writes and deletes each create one commit.
    """

    def __init__(
        self,
        repo: str,
        branch: str | None = None,
        token: str | None = None,
        *,
        use_gh_cli: bool = False,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: float = 30.0,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the store.

        Args:
            repo: Repository as ``owner/repo``
            branch: Target branch (default: main)
            token: GitHub token; falls back to GH_TOKEN / GITHUB_TOKEN
            use_gh_cli: Use gh cli credentials when no other token is found
            max_retries: Attempts per request for connection failures
            timeout: Request timeout in seconds
            base_url: Custom API base URL (GitHub Enterprise)
            transport: Custom httpx transport (used by tests)

        Raises:
            InvalidArgument: repo is not ``owner/repo``
        """
        self.context = RepositoryContext.parse(
            repo, branch=branch, token=get_token(token, use_gh_cli=use_gh_cli)
        )
        self.client = GitHubClient(
            token=self.context.token,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )
        logger.info("Box ready: %s@%s", self.context.full_name, self.context.branch)

    @classmethod
    def from_env(cls, **kwargs) -> "Box":
        """Create a store from CDNHUB_REPO / CDNHUB_BRANCH and the token chain."""
        repo = os.environ.get(REPO_ENV)
        if not repo:
            raise InvalidArgument(f"{REPO_ENV} is not set")
        return cls(repo, branch=os.environ.get(BRANCH_ENV), **kwargs)

    @property
    def owner(self) -> str:
        return self.context.owner

    @property
    def repo(self) -> str:
        return self.context.repo

    @property
    def branch(self) -> str:
        return self.context.branch

    async def _fetch(self, path: str) -> ContentResult:
        return await self.client.get_content(self.owner, self.repo, path, ref=self.branch)

    async def _get_file(self, path: str) -> GitHubContent:
        """Fetch the record of a single file, NotFound otherwise."""
        try:
            result = await self._fetch(path)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise NotFound(path) from e
            raise

        if isinstance(result, ContentRecord) and result.item.type == "file":
            return result.item
        logger.debug("Not a single file: %s", path)
        raise NotFound(path)

    async def _raw_content(self, item: GitHubContent) -> str:
        """Base64 content of a file, fetching it when the item lacks it."""
        if item.content is not None and item.encoding == "base64":
            return item.content
        record = await self._get_file(item.path)
        if record.content is not None and record.encoding == "base64":
            return record.content
        # Files over 1 MB come back with encoding "none"
        if record.download_url:
            data = await self.client.download(record.download_url)
            return base64.b64encode(data).decode("ascii")
        if record.size == 0:
            return ""
        raise ContentUnavailable(record.path, record.encoding)

    async def put(self, path: str, content: bytes | str, message: str | None = None) -> None:
        """
        Create or overwrite a file.

        Args:
            path: File path in repository
            content: File content (str is UTF-8 encoded)
            message: Commit message (default: "Add <path>")
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        encoded = base64.b64encode(content).decode("ascii")

        sha: str | None = None
        try:
            sha = revision_of(await self._fetch(path))
        except httpx.HTTPStatusError as e:
            if e.response.status_code != 404:
                raise
            logger.debug("No existing file at %s", path)

        logger.info("Putting %s (%d bytes, %s)", path, len(content), "update" if sha else "create")
        await self.client.create_or_update_file_contents(
            self.owner,
            self.repo,
            path,
            message=commit_message(message, f"Add {path}"),
            content=encoded,
            branch=self.branch,
            sha=sha,
        )

    async def get(self, path: str) -> bytes:
        """
        Read a file.

        Raises:
            NotFound: path is missing or not a single file
            ContentUnavailable: remote returned no content for a non-empty file
        """
        logger.info("Getting %s", path)
        record = await self._get_file(path)
        return base64.b64decode(await self._raw_content(record))

    async def drop(self, path: str, message: str | None = None) -> None:
        """
        Delete a file.

        Args:
            path: File path in repository
            message: Commit message (default: "Delete <path>")

        Raises:
            NotFound: path is missing or not a single file
        """
        record = await self._get_file(path)
        logger.info("Dropping %s", path)
        await self.client.delete_file(
            self.owner,
            self.repo,
            path,
            message=commit_message(message, f"Delete {path}"),
            sha=record.sha,
            branch=self.branch,
        )

    async def contents(self, path: str = "", with_content: bool = False) -> list[FileEntry]:
        """
        List the immediate entries of a directory.

        Args:
            path: Directory path (empty for root)
            with_content: Include base64 raw content of files

        Returns:
            Entries in remote order; empty when path is a file
        """
        result = await self._fetch(path)
        if isinstance(result, ContentRecord):
            logger.debug("Path is not a directory: %s", path)
            return []

        entries: list[FileEntry] = []
        for item in result.items:
            if item.type not in ("file", "dir"):
                logger.debug("Skipping %s entry: %s", item.type, item.path)
                continue
            raw_content = None
            if with_content and item.type == "file":
                raw_content = await self._raw_content(item)
            entries.append(
                FileEntry(
                    name=item.name,
                    path=item.path,
                    type=item.type,
                    size=item.size,
                    raw_content=raw_content,
                )
            )
        return entries

    async def tree(self, with_content: bool = False) -> list[FileEntry]:
        """List the whole repository depth-first, directories carrying children."""
        logger.info("Walking tree: %s@%s", self.context.full_name, self.branch)
        return await self._traverse("", with_content)

    async def _traverse(self, path: str, with_content: bool) -> list[FileEntry]:
        result: list[FileEntry] = []
        for entry in await self.contents(path, with_content=with_content):
            if entry.is_dir:
                children = await self._traverse(entry.path, with_content)
                result.append(entry.model_copy(update={"content": children}))
            else:
                result.append(entry)
        return result
