"""
# Web Log Content Models

This module defines the **document model** of the multi-tenant web log platform: the
entities every storage backend persists and returns, and the value types embedded in them.

## Domain Model Overview

- **WebLog**: A tenant. Every other scoped entity carries its `web_log_id`.
- **Category**: Hierarchical (parent id) grouping of posts.
- **Page**: Static content with current and prior permalinks and a revision history.
- **Post**: Dated content with a publishing status, categories, tags and an optional podcast episode.
- **Comment**: Reader feedback attached to a post, removed along with it.
- **TagMap**: Translation of a tag to the value used in its URL.
- **WebLogUser**: An author/administrator of one web log.
- **Upload**: A file stored in the database for one web log.
- **Theme** / **ThemeAsset**: Shared presentation templates and files.

## Conventions

- Enumerations are `str` enums and are stored as their value.
- All timestamps are timezone-aware UTC; naive values are taken to be UTC.
- `Post.tags` is a set of lowercase strings; `Post.category_ids` is a set of ids.
  Both keep their insertion order.

## Usage Example

```python
post = Post(
    id=new_id(),
    web_log_id=web_log.id,
    author_id=user.id,
    title="Hello",
    permalink="2024/hello.html",
    updated_on=datetime.now(timezone.utc),
    tags=["Python", "python", "Async"],
)
assert post.tags == ["python", "async"]
```
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from myweblog.models.ids import ThemeAssetId


def as_utc(value: datetime) -> datetime:
    """
    Attach UTC to a naive datetime, or convert an aware one to UTC.

    Microseconds are cut to whole milliseconds, the precision BSON dates keep, so a
    timestamp reads back equal from either backend.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def utc_now() -> datetime:
    return as_utc(datetime.now(timezone.utc))


UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]


# Enums
class PostStatus(str, Enum):
    """Publishing status of a post."""

    DRAFT = "Draft"
    PUBLISHED = "Published"


class CommentStatus(str, Enum):
    """Moderation status of a comment."""

    PENDING = "Pending"
    APPROVED = "Approved"
    SPAM = "Spam"


class AccessLevel(str, Enum):
    """Access level of a web log user; each level includes the ones below it."""

    AUTHOR = "Author"
    EDITOR = "Editor"
    WEB_LOG_ADMIN = "WebLogAdmin"
    ADMINISTRATOR = "Administrator"

    @property
    def weight(self) -> int:
        return _ACCESS_WEIGHTS[self]

    @staticmethod
    def has_access(needed: "AccessLevel", held: "AccessLevel") -> bool:
        """Whether a user holding `held` may perform an action that requires `needed`."""
        return AccessLevel(held).weight >= AccessLevel(needed).weight


_ACCESS_WEIGHTS = {
    AccessLevel.AUTHOR: 10,
    AccessLevel.EDITOR: 20,
    AccessLevel.WEB_LOG_ADMIN: 30,
    AccessLevel.ADMINISTRATOR: 40,
}


class UploadDestination(str, Enum):
    """Where new uploads for a web log are stored."""

    DATABASE = "Database"
    DISK = "Disk"


class MarkupSource(str, Enum):
    """Source format of page or post text."""

    MARKDOWN = "Markdown"
    HTML = "HTML"


class ExplicitRating(str, Enum):
    YES = "yes"
    NO = "no"
    CLEAN = "clean"


class PodcastMedium(str, Enum):
    PODCAST = "podcast"
    MUSIC = "music"
    VIDEO = "video"
    FILM = "film"
    AUDIOBOOK = "audiobook"
    NEWSLETTER = "newsletter"
    BLOG = "blog"


class WebLogModel(BaseModel):
    """Base for all stored models; enum fields hold their string values."""

    model_config = ConfigDict(
        use_enum_values=True,
        validate_default=True,
        populate_by_name=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )


# Value types
class MetaItem(WebLogModel):
    """A name/value pair attached to a page or post."""

    name: str
    value: str = ""


class Revision(WebLogModel):
    """A saved version of page or post text."""

    as_of: UtcDateTime = Field(..., description="When this revision was saved")
    source_type: MarkupSource = Field(default=MarkupSource.HTML, description="Format of the text")
    text: str = ""


class Episode(WebLogModel):
    """Podcast episode details attached to a post."""

    media: str
    length: int = 0
    duration: Optional[str] = Field(None, description="Running time as H:MM:SS")
    media_type: Optional[str] = None
    image_url: Optional[str] = None
    subtitle: Optional[str] = None
    explicit: Optional[ExplicitRating] = None
    chapter_file: Optional[str] = None
    chapter_type: Optional[str] = None
    transcript_url: Optional[str] = None
    transcript_type: Optional[str] = None
    transcript_lang: Optional[str] = None
    transcript_captions: Optional[bool] = None
    season_number: Optional[int] = None
    season_description: Optional[str] = None
    episode_number: Optional[float] = None
    episode_description: Optional[str] = None


class PodcastOptions(WebLogModel):
    """Settings for a custom feed that is a podcast."""

    title: str
    subtitle: Optional[str] = None
    items_in_feed: int = 25
    summary: str = ""
    displayed_author: str = ""
    email: str = ""
    image_url: str = ""
    apple_category: str = ""
    apple_subcategory: Optional[str] = None
    explicit: ExplicitRating = ExplicitRating.NO
    default_media_type: Optional[str] = None
    media_base_url: Optional[str] = None
    podcast_guid: Optional[str] = None
    funding_url: Optional[str] = None
    funding_text: Optional[str] = None
    medium: Optional[PodcastMedium] = None


class CustomFeed(WebLogModel):
    """An additional RSS feed; `source` is `category:<id>` or `tag:<tag>`."""

    id: str
    source: str
    path: str
    podcast: Optional[PodcastOptions] = None


class RssOptions(WebLogModel):
    """RSS settings of a web log."""

    is_feed_enabled: bool = True
    feed_name: str = "feed.xml"
    items_in_feed: Optional[int] = None
    is_category_enabled: bool = True
    is_tag_enabled: bool = True
    copyright: Optional[str] = None
    custom_feeds: List[CustomFeed] = Field(default_factory=list)


class RedirectRule(WebLogModel):
    """A URL rewrite applied before permalink resolution."""

    from_url: str
    to_url: str
    is_regex: bool = False


# Entities
class WebLog(WebLogModel):
    """A web log (tenant)."""

    id: str
    name: str
    slug: str
    subtitle: Optional[str] = None
    default_page: str = "posts"
    posts_per_page: int = 10
    theme_id: str = "default"
    url_base: str = Field(..., description="Base URL; unique across all web logs")
    time_zone: str = "Etc/UTC"
    auto_htmx: bool = False
    uploads: UploadDestination = UploadDestination.DATABASE
    rss: RssOptions = Field(default_factory=RssOptions)
    redirect_rules: List[RedirectRule] = Field(default_factory=list)


class Category(WebLogModel):
    """A post category; `parent_id` points to another category of the same web log."""

    id: str
    web_log_id: str
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[str] = None


class Page(WebLogModel):
    """A page of content."""

    id: str
    web_log_id: str
    author_id: str
    title: str
    permalink: str
    prior_permalinks: List[str] = Field(default_factory=list)
    published_on: UtcDateTime
    updated_on: UtcDateTime
    show_in_page_list: bool = False
    template: Optional[str] = None
    text: str = ""
    metadata: List[MetaItem] = Field(default_factory=list)
    revisions: List[Revision] = Field(default_factory=list)


class Post(WebLogModel):
    """A post of content."""

    id: str
    web_log_id: str
    author_id: str
    status: PostStatus = PostStatus.DRAFT
    title: str
    permalink: str
    prior_permalinks: List[str] = Field(default_factory=list)
    published_on: Optional[UtcDateTime] = None
    updated_on: UtcDateTime
    template: Optional[str] = None
    text: str = ""
    category_ids: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    metadata: List[MetaItem] = Field(default_factory=list)
    episode: Optional[Episode] = None
    revisions: List[Revision] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v):
        if v is None:
            return []
        seen = []
        for tag in v:
            lowered = str(tag).strip().lower()
            if lowered and lowered not in seen:
                seen.append(lowered)
        return seen

    @field_validator("category_ids", mode="before")
    @classmethod
    def unique_category_ids(cls, v):
        if v is None:
            return []
        return list(dict.fromkeys(v))


class Comment(WebLogModel):
    """A comment on a post."""

    id: str
    post_id: str
    in_reply_to_id: Optional[str] = None
    name: str
    email: str
    url: Optional[str] = None
    status: CommentStatus = CommentStatus.PENDING
    posted_on: UtcDateTime
    text: str = ""


class TagMap(WebLogModel):
    """Maps a tag to the value used for it in URLs (e.g. `c#` to `c-sharp`)."""

    id: str
    web_log_id: str
    tag: str
    url_value: str


class WebLogUser(WebLogModel):
    """A user of a web log."""

    id: str
    web_log_id: str
    email: str
    first_name: str
    last_name: str
    preferred_name: str = ""
    password_hash: str = ""
    salt: str = ""
    url: Optional[str] = None
    access_level: AccessLevel = AccessLevel.AUTHOR
    created_on: UtcDateTime = Field(default_factory=utc_now)
    last_seen_on: Optional[UtcDateTime] = None

    @property
    def display_name(self) -> str:
        """Preferred name (or first name) followed by the last name."""
        return f"{self.preferred_name or self.first_name} {self.last_name}".strip()


class Upload(WebLogModel):
    """A file uploaded to a web log and stored in the database."""

    id: str
    web_log_id: str
    path: str
    updated_on: UtcDateTime
    data: bytes = b""


class ThemeTemplate(WebLogModel):
    name: str
    text: str = ""


class Theme(WebLogModel):
    """A theme; `templates` keep the order in which they were loaded."""

    id: str
    name: str
    version: str = ""
    templates: List[ThemeTemplate] = Field(default_factory=list)


class ThemeAsset(WebLogModel):
    """A static file belonging to a theme."""

    id: ThemeAssetId
    updated_on: UtcDateTime
    data: bytes = b""
