"""
Identifier types.

Every identifier is an opaque string. New identifiers are short GUIDs: the 16 bytes of a
random UUID, URL-safe base64 encoded, with the padding removed (22 characters).
"""

import base64
import uuid
from typing import NewType

from pydantic import BaseModel, ConfigDict, Field

WebLogId = NewType("WebLogId", str)
CategoryId = NewType("CategoryId", str)
PageId = NewType("PageId", str)
PostId = NewType("PostId", str)
CommentId = NewType("CommentId", str)
TagMapId = NewType("TagMapId", str)
WebLogUserId = NewType("WebLogUserId", str)
UploadId = NewType("UploadId", str)
ThemeId = NewType("ThemeId", str)
CustomFeedId = NewType("CustomFeedId", str)


def new_id() -> str:
    """Create a new 22-character URL-safe identifier."""
    return base64.urlsafe_b64encode(uuid.uuid4().bytes).decode("ascii").rstrip("=")


class ThemeAssetId(BaseModel):
    """Composite key of a theme asset: the owning theme and the asset's path within it."""

    model_config = ConfigDict(frozen=True)

    theme_id: str = Field(..., description="Owning theme")
    path: str = Field(..., description="Path of the asset inside the theme")

    def __str__(self) -> str:
        return f"{self.theme_id}/{self.path}"

    @classmethod
    def parse(cls, value: str) -> "ThemeAssetId":
        """Split `"theme/path/to/file"` into its theme and path parts."""
        theme_id, _, path = value.partition("/")
        if not theme_id or not path:
            raise ValueError(f"Invalid theme asset id '{value}'")
        return cls(theme_id=theme_id, path=path)
