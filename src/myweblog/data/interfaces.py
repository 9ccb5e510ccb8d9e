"""
# Storage Interface

One abstract port per entity plus the `Data` facade that groups them. Every backend
implements all of them with the same observable behavior.

## Conventions

- Every scoped operation takes the owning `web_log_id`; it is never inferred. A record
  that belongs to another web log is reported exactly like a missing one.
- Reads return `None` or an empty list when nothing matches.
- Mutations return `bool` (did anything change), `CategoryDeleteResult` or `DataResult`.
- Unique key violations raise `ConflictError`; connection failures raise
  `BackendUnavailableError`.
- Paged finders take a 1-based page number and return up to `page_size + 1` items; the
  extra item only signals that another page exists.
- `restore()` writes in batches, continues past failed batches and reports them.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from myweblog.data.serialization import DocumentSerializer
from myweblog.models.ids import ThemeAssetId
from myweblog.models.results import CategoryDeleteResult, DataResult, RestoreReport, StartUpReport
from myweblog.models.view_models import DisplayCategory, UserDisplayName
from myweblog.models.weblog_models import (
    Category,
    Page,
    Post,
    PostStatus,
    TagMap,
    Theme,
    ThemeAsset,
    Upload,
    WebLog,
    WebLogUser,
)


class CategoryData(ABC):
    """Category persistence."""

    @abstractmethod
    async def add(self, category: Category) -> None:
        """Add a category."""

    @abstractmethod
    async def count_all(self, web_log_id: str) -> int:
        """Count all categories of a web log."""

    @abstractmethod
    async def count_top_level(self, web_log_id: str) -> int:
        """Count the categories of a web log that have no parent."""

    @abstractmethod
    async def find_all_for_view(self, web_log_id: str) -> List[DisplayCategory]:
        """Categories in hierarchy order with the published post count of each subtree."""

    @abstractmethod
    async def find_by_id(self, category_id: str, web_log_id: str) -> Optional[Category]:
        ...

    @abstractmethod
    async def find_by_web_log(self, web_log_id: str) -> List[Category]:
        ...

    @abstractmethod
    async def delete(self, category_id: str, web_log_id: str) -> CategoryDeleteResult:
        """Delete a category, moving its children to its parent and removing it from posts."""

    @abstractmethod
    async def restore(self, categories: List[Category]) -> RestoreReport:
        ...

    @abstractmethod
    async def update(self, category: Category) -> bool:
        """Update name, slug, description and parent of an existing category."""


class PageData(ABC):
    """Page persistence."""

    @abstractmethod
    async def add(self, page: Page) -> None:
        ...

    @abstractmethod
    async def all(self, web_log_id: str) -> List[Page]:
        """All pages, without text, metadata, revisions or prior permalinks, ordered by title."""

    @abstractmethod
    async def count_all(self, web_log_id: str) -> int:
        ...

    @abstractmethod
    async def count_listed(self, web_log_id: str) -> int:
        """Count the pages shown in the page list."""

    @abstractmethod
    async def delete(self, page_id: str, web_log_id: str) -> bool:
        ...

    @abstractmethod
    async def find_by_id(self, page_id: str, web_log_id: str) -> Optional[Page]:
        """A page without its revisions or prior permalinks."""

    @abstractmethod
    async def find_by_permalink(self, permalink: str, web_log_id: str) -> Optional[Page]:
        """The page whose current permalink is `permalink` (no revisions or prior permalinks)."""

    @abstractmethod
    async def find_current_permalink(self, permalinks: List[str], web_log_id: str) -> Optional[str]:
        """The current permalink of the first page that lists any of `permalinks` as prior."""

    @abstractmethod
    async def find_full_by_id(self, page_id: str, web_log_id: str) -> Optional[Page]:
        ...

    @abstractmethod
    async def find_full_by_web_log(self, web_log_id: str) -> List[Page]:
        ...

    @abstractmethod
    async def find_listed(self, web_log_id: str) -> List[Page]:
        """Pages shown in the page list, without text, ordered by title."""

    @abstractmethod
    async def find_page_of_pages(self, web_log_id: str, page_nbr: int) -> List[Page]:
        """One admin page of pages, ordered by title (case-insensitive)."""

    @abstractmethod
    async def restore(self, pages: List[Page]) -> RestoreReport:
        ...

    @abstractmethod
    async def update(self, page: Page) -> bool:
        ...

    @abstractmethod
    async def update_prior_permalinks(self, page_id: str, web_log_id: str, permalinks: List[str]) -> bool:
        ...


class PostData(ABC):
    """Post persistence."""

    @abstractmethod
    async def add(self, post: Post) -> None:
        ...

    @abstractmethod
    async def count_by_status(self, status: PostStatus, web_log_id: str) -> int:
        ...

    @abstractmethod
    async def delete(self, post_id: str, web_log_id: str) -> bool:
        """Delete a post and its comments."""

    @abstractmethod
    async def find_by_id(self, post_id: str, web_log_id: str) -> Optional[Post]:
        """A post without its revisions or prior permalinks."""

    @abstractmethod
    async def find_by_permalink(self, permalink: str, web_log_id: str) -> Optional[Post]:
        ...

    @abstractmethod
    async def find_current_permalink(self, permalinks: List[str], web_log_id: str) -> Optional[str]:
        ...

    @abstractmethod
    async def find_full_by_id(self, post_id: str, web_log_id: str) -> Optional[Post]:
        ...

    @abstractmethod
    async def find_full_by_web_log(self, web_log_id: str) -> List[Post]:
        ...

    @abstractmethod
    async def find_page_of_categorized_posts(
        self, web_log_id: str, category_ids: List[str], page_nbr: int, posts_per_page: int
    ) -> List[Post]:
        """Published posts in any of the categories, newest first."""

    @abstractmethod
    async def find_page_of_posts(self, web_log_id: str, page_nbr: int, posts_per_page: int) -> List[Post]:
        """Posts of every status, without text, newest (published, else updated) first."""

    @abstractmethod
    async def find_page_of_published_posts(
        self, web_log_id: str, page_nbr: int, posts_per_page: int
    ) -> List[Post]:
        ...

    @abstractmethod
    async def find_page_of_tagged_posts(
        self, web_log_id: str, tag: str, page_nbr: int, posts_per_page: int
    ) -> List[Post]:
        ...

    @abstractmethod
    async def find_surrounding_posts(
        self, web_log_id: str, published_on: datetime
    ) -> Tuple[Optional[Post], Optional[Post]]:
        """The nearest published posts strictly before and strictly after `published_on`."""

    @abstractmethod
    async def restore(self, posts: List[Post]) -> RestoreReport:
        ...

    @abstractmethod
    async def update(self, post: Post) -> bool:
        """Replace a post that exists in its web log."""

    @abstractmethod
    async def update_prior_permalinks(self, post_id: str, web_log_id: str, permalinks: List[str]) -> bool:
        ...


class TagMapData(ABC):
    """Tag mapping persistence."""

    @abstractmethod
    async def delete(self, tag_map_id: str, web_log_id: str) -> bool:
        ...

    @abstractmethod
    async def find_by_id(self, tag_map_id: str, web_log_id: str) -> Optional[TagMap]:
        ...

    @abstractmethod
    async def find_by_url_value(self, url_value: str, web_log_id: str) -> Optional[TagMap]:
        ...

    @abstractmethod
    async def find_by_web_log(self, web_log_id: str) -> List[TagMap]:
        ...

    @abstractmethod
    async def find_mapping_for_tags(self, tags: List[str], web_log_id: str) -> List[TagMap]:
        ...

    @abstractmethod
    async def restore(self, tag_maps: List[TagMap]) -> RestoreReport:
        ...

    @abstractmethod
    async def save(self, tag_map: TagMap) -> None:
        """Insert or replace a tag mapping."""


class ThemeData(ABC):
    """Theme persistence."""

    @abstractmethod
    async def all(self) -> List[Theme]:
        """Every theme except the admin theme, with template text left out."""

    @abstractmethod
    async def exists(self, theme_id: str) -> bool:
        ...

    @abstractmethod
    async def find_by_id(self, theme_id: str) -> Optional[Theme]:
        ...

    @abstractmethod
    async def find_by_id_without_text(self, theme_id: str) -> Optional[Theme]:
        ...

    @abstractmethod
    async def delete(self, theme_id: str) -> bool:
        """Delete a theme and its assets."""

    @abstractmethod
    async def save(self, theme: Theme) -> None:
        ...


class ThemeAssetData(ABC):
    """Theme asset persistence."""

    @abstractmethod
    async def all(self) -> List[ThemeAsset]:
        """Every asset without its data."""

    @abstractmethod
    async def delete_by_theme(self, theme_id: str) -> None:
        ...

    @abstractmethod
    async def find_by_id(self, asset_id: ThemeAssetId) -> Optional[ThemeAsset]:
        ...

    @abstractmethod
    async def find_by_theme(self, theme_id: str) -> List[ThemeAsset]:
        """Assets of a theme without their data."""

    @abstractmethod
    async def find_by_theme_with_data(self, theme_id: str) -> List[ThemeAsset]:
        ...

    @abstractmethod
    async def save(self, asset: ThemeAsset) -> None:
        ...


class UploadData(ABC):
    """Uploaded file persistence."""

    @abstractmethod
    async def add(self, upload: Upload) -> None:
        ...

    @abstractmethod
    async def delete(self, upload_id: str, web_log_id: str) -> DataResult:
        """Delete an upload; a successful result carries the removed path."""

    @abstractmethod
    async def find_by_path(self, path: str, web_log_id: str) -> Optional[Upload]:
        ...

    @abstractmethod
    async def find_by_web_log(self, web_log_id: str) -> List[Upload]:
        """Uploads of a web log without their data."""

    @abstractmethod
    async def find_by_web_log_with_data(self, web_log_id: str) -> List[Upload]:
        ...

    @abstractmethod
    async def restore(self, uploads: List[Upload]) -> RestoreReport:
        ...


class WebLogData(ABC):
    """Web log persistence."""

    @abstractmethod
    async def add(self, web_log: WebLog) -> None:
        ...

    @abstractmethod
    async def all(self) -> List[WebLog]:
        ...

    @abstractmethod
    async def delete(self, web_log_id: str) -> DataResult:
        """Delete a web log and everything that belongs to it."""

    @abstractmethod
    async def find_by_host(self, url_base: str) -> Optional[WebLog]:
        ...

    @abstractmethod
    async def find_by_id(self, web_log_id: str) -> Optional[WebLog]:
        ...

    @abstractmethod
    async def update_redirect_rules(self, web_log: WebLog) -> bool:
        ...

    @abstractmethod
    async def update_rss_options(self, web_log: WebLog) -> bool:
        ...

    @abstractmethod
    async def update_settings(self, web_log: WebLog) -> bool:
        ...


class WebLogUserData(ABC):
    """Web log user persistence."""

    @abstractmethod
    async def add(self, user: WebLogUser) -> None:
        ...

    @abstractmethod
    async def delete(self, user_id: str, web_log_id: str) -> DataResult:
        """Delete a user unless they authored pages or posts."""

    @abstractmethod
    async def find_by_email(self, email: str, web_log_id: str) -> Optional[WebLogUser]:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: str, web_log_id: str) -> Optional[WebLogUser]:
        ...

    @abstractmethod
    async def find_by_web_log(self, web_log_id: str) -> List[WebLogUser]:
        ...

    @abstractmethod
    async def find_names(self, user_ids: List[str], web_log_id: str) -> List[UserDisplayName]:
        ...

    @abstractmethod
    async def restore(self, users: List[WebLogUser]) -> RestoreReport:
        ...

    @abstractmethod
    async def set_last_seen(self, user_id: str, web_log_id: str) -> None:
        """Record that the user was seen now; does nothing if the user does not exist."""

    @abstractmethod
    async def update(self, user: WebLogUser) -> bool:
        ...


class Data(ABC):
    """Facade over the per-entity ports of one backend."""

    category: CategoryData
    page: PageData
    post: PostData
    tag_map: TagMapData
    theme: ThemeData
    theme_asset: ThemeAssetData
    upload: UploadData
    web_log: WebLogData
    web_log_user: WebLogUserData
    serializer: DocumentSerializer

    @abstractmethod
    async def start_up(self) -> StartUpReport:
        """Create missing tables/collections and indexes, then apply pending migrations."""

    @abstractmethod
    async def close(self) -> None:
        ...
