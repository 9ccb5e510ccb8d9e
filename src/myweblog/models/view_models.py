"""Read-side shapes returned by the storage ports."""

from typing import List, Optional

from pydantic import BaseModel, Field


class DisplayCategory(BaseModel):
    """A category positioned in its hierarchy, with the count of published posts beneath it."""

    id: str
    slug: str = Field(..., description="Full slug: ancestor slugs and this slug joined by '/'")
    name: str
    description: Optional[str] = None
    parent_names: List[str] = Field(default_factory=list, description="Ancestor names, root first")
    post_count: int = 0


class UserDisplayName(BaseModel):
    """A user id paired with the name shown for that user."""

    id: str
    display_name: str
