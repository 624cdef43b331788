"""Repository context for the content store."""

import logging

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidArgument

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"

# Environment variables read by Box.from_env and the CLI
REPO_ENV = "CDNHUB_REPO"
BRANCH_ENV = "CDNHUB_BRANCH"


class RepositoryContext(BaseModel):
    """Owner, repository, branch and credential shared by every operation."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    branch: str = DEFAULT_BRANCH
    token: str | None = Field(default=None, repr=False)

    @classmethod
    def parse(
        cls, identifier: str, branch: str | None = None, token: str | None = None
    ) -> "RepositoryContext":
        """
        Build a context from an ``owner/repo`` identifier.

        Raises:
            InvalidArgument: identifier is not exactly a non-empty owner and repo
        """
        parts = identifier.split("/")
        if len(parts) != 2 or not all(parts):
            logger.error("Invalid repository identifier: %r", identifier)
            raise InvalidArgument("Invalid repository format. Use 'owner/repo'.")
        owner, repo = parts
        return cls(owner=owner, repo=repo, branch=branch or DEFAULT_BRANCH, token=token)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"
