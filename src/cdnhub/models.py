"""cdnhub data models."""

import base64
from typing import Literal

from pydantic import BaseModel, model_validator


class FileEntry(BaseModel):
    """File or directory in the store."""

    name: str
    path: str  # Relative to the repository root
    type: Literal["file", "dir"]
    size: int = 0
    raw_content: str | None = None  # Base64 text, files only
    content: list["FileEntry"] | None = None  # Children, directories in tree() only

    @model_validator(mode="after")
    def check_shape(self) -> "FileEntry":
        if self.type == "dir" and self.raw_content is not None:
            raise ValueError(f"Directory entry cannot carry raw content: {self.path}")
        if self.type == "file" and self.content is not None:
            raise ValueError(f"File entry cannot carry children: {self.path}")
        return self

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"

    def decoded(self) -> bytes | None:
        """Raw content decoded to bytes, None when it was not requested."""
        if self.raw_content is None:
            return None
        return base64.b64decode(self.raw_content)


FileEntry.model_rebuild()
