"""
# Permalink Resolution

Pages and posts are addressed by a permalink relative to the web log's URL base. When a
permalink changes, the old value is kept in the entity's prior permalinks so links that
are already out there keep working.

`PermalinkResolver.resolve()` turns a requested path into the content to show or the
current location to redirect to, trying in order:

1. a post whose current permalink matches
2. a page whose current permalink matches
3. a post or page whose current permalink matches with the trailing slash toggled
4. a post or page listing the path (or its toggled form) as a prior permalink

Steps 3 and 4 produce redirects.
"""

from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel

from myweblog.managers.logging_manager import get_logger
from myweblog.models.weblog_models import Page, Post

if TYPE_CHECKING:
    from myweblog.data.interfaces import Data

logger = get_logger(prefix="[Permalinks]")


def alternate_permalink(permalink: str) -> str:
    """Toggle the trailing slash: `about` becomes `about/` and `about/` becomes `about`."""
    if permalink.endswith("/"):
        return permalink[:-1]
    return f"{permalink}/"


def permalink_candidates(permalink: str) -> List[str]:
    """The permalink and its trailing-slash alternate, without duplicates or empties."""
    candidates: List[str] = []
    for candidate in (permalink, alternate_permalink(permalink)):
        if candidate and candidate not in candidates:
            candidates.append(candidate)
    return candidates


def with_prior_permalink(prior_permalinks: List[str], old_permalink: str) -> List[str]:
    """Append a permalink that is being replaced to a prior permalink list, once."""
    if not old_permalink or old_permalink in prior_permalinks:
        return list(prior_permalinks)
    return list(prior_permalinks) + [old_permalink]


class PermalinkResolution(BaseModel):
    """What a requested permalink resolved to.

    `kind` is `"post"` or `"page"` with the entity set, or `"redirect"` with
    `redirect_to` holding the current permalink.
    """

    kind: str
    post: Optional[Post] = None
    page: Optional[Page] = None
    redirect_to: Optional[str] = None


class PermalinkResolver:
    """Resolve requested paths against the posts and pages of a web log."""

    def __init__(self, data: "Data"):
        self.data = data

    async def resolve(self, permalink: str, web_log_id: str) -> Optional[PermalinkResolution]:
        post = await self.data.post.find_by_permalink(permalink, web_log_id)
        if post:
            return PermalinkResolution(kind="post", post=post)

        page = await self.data.page.find_by_permalink(permalink, web_log_id)
        if page:
            return PermalinkResolution(kind="page", page=page)

        alternate = alternate_permalink(permalink)
        if alternate:
            if await self.data.post.find_by_permalink(alternate, web_log_id):
                return self._redirect(permalink, alternate)
            if await self.data.page.find_by_permalink(alternate, web_log_id):
                return self._redirect(permalink, alternate)

        candidates = permalink_candidates(permalink)
        current = await self.data.post.find_current_permalink(candidates, web_log_id)
        if current:
            return self._redirect(permalink, current)
        current = await self.data.page.find_current_permalink(candidates, web_log_id)
        if current:
            return self._redirect(permalink, current)

        logger.debug("No content found for permalink %s in web log %s", permalink, web_log_id)
        return None

    @staticmethod
    def _redirect(requested: str, current: str) -> PermalinkResolution:
        logger.debug("Redirecting %s to %s", requested, current)
        return PermalinkResolution(kind="redirect", redirect_to=current)
