"""Use a GitHub repository as a simple file store."""

from .box import TOOL_TAG, Box
from .config import RepositoryContext
from .errors import CdnHubError, ContentUnavailable, InvalidArgument, NotFound, RemoteFailure
from .models import FileEntry

__all__ = [
    "Box",
    "RepositoryContext",
    "FileEntry",
    "CdnHubError",
    "InvalidArgument",
    "NotFound",
    "ContentUnavailable",
    "RemoteFailure",
    "TOOL_TAG",
]
