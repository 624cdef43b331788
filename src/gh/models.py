"""GitHub API data models."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class GitHubContent(BaseModel):
    """GitHub content item (file, directory, symlink or submodule)."""

    name: str
    path: str
    sha: str
    size: int = 0
    url: str | None = None
    html_url: str | None = None
    git_url: str | None = None
    download_url: str | None = None
    type: Literal["file", "dir", "symlink", "submodule"]
    content: str | None = None  # Base64 encoded content for files
    encoding: str | None = None  # Usually "base64" for files


class ContentRecord(BaseModel):
    """Single item returned when the path resolves to one object."""

    kind: Literal["record"] = "record"
    item: GitHubContent


class ContentListing(BaseModel):
    """Directory listing returned when the path resolves to a directory."""

    kind: Literal["listing"] = "listing"
    path: str
    items: list[GitHubContent] = Field(default_factory=list)


ContentResult = Annotated[ContentRecord | ContentListing, Field(discriminator="kind")]


class GitHubCommitInfo(BaseModel):
    """Commit created by a contents write."""

    sha: str
    message: str | None = None
    html_url: str | None = None


class GitHubCommit(BaseModel):
    """Result of a create, update or delete on the contents API."""

    content: GitHubContent | None = None  # None after a delete
    commit: GitHubCommitInfo
