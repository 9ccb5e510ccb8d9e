"""
# Relational Schema

SQLAlchemy Core tables of the relational backend. Collections that are embedded arrays in
the document store are child tables here:

| Document field | Table |
|----------------|-------|
| `Page.prior_permalinks` | `page_permalink` |
| `Page.revisions` | `page_revision` |
| `Post.category_ids` | `post_category` |
| `Post.tags` | `post_tag` |
| `Post.prior_permalinks` | `post_permalink` |
| `Post.revisions` | `post_revision` |
| `Theme.templates` | `theme_template` |

Document-shaped values without their own identity (metadata items, podcast episode, RSS
options, redirect rules) are JSON columns, stored as `JSONB` on PostgreSQL.

Child tables that keep an order carry a `seq` column.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB

metadata = MetaData()

JSON_DOCUMENT = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


def _timestamp(name: str, nullable: bool = False) -> Column:
    return Column(name, DateTime(timezone=True), nullable=nullable)


theme = Table(
    "theme",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("version", String, nullable=False, default=""),
)

theme_template = Table(
    "theme_template",
    metadata,
    Column("theme_id", String, ForeignKey("theme.id"), primary_key=True),
    Column("name", String, primary_key=True),
    Column("seq", Integer, nullable=False),
    Column("template", Text, nullable=False),
)

theme_asset = Table(
    "theme_asset",
    metadata,
    Column("theme_id", String, ForeignKey("theme.id"), primary_key=True),
    Column("path", String, primary_key=True),
    _timestamp("updated_on"),
    Column("data", LargeBinary, nullable=False),
)

web_log = Table(
    "web_log",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("slug", String, nullable=False),
    Column("subtitle", String),
    Column("default_page", String, nullable=False),
    Column("posts_per_page", Integer, nullable=False),
    Column("theme_id", String, nullable=False),
    Column("url_base", String, nullable=False),
    Column("time_zone", String, nullable=False),
    Column("auto_htmx", Boolean, nullable=False, default=False),
    Column("uploads", String, nullable=False),
    Column("rss", JSON_DOCUMENT),
    Column("redirect_rules", JSON_DOCUMENT),
    UniqueConstraint("url_base", name="web_log_url_base_uq"),
)

category = Table(
    "category",
    metadata,
    Column("id", String, primary_key=True),
    Column("web_log_id", String, ForeignKey("web_log.id"), nullable=False),
    Column("name", String, nullable=False),
    Column("slug", String, nullable=False),
    Column("description", Text),
    Column("parent_id", String),
    Index("category_web_log_idx", "web_log_id"),
    Index("category_parent_idx", "web_log_id", "parent_id"),
)

web_log_user = Table(
    "web_log_user",
    metadata,
    Column("id", String, primary_key=True),
    Column("web_log_id", String, ForeignKey("web_log.id"), nullable=False),
    Column("email", String, nullable=False),
    Column("first_name", String, nullable=False),
    Column("last_name", String, nullable=False),
    Column("preferred_name", String, nullable=False, default=""),
    Column("password_hash", String, nullable=False, default=""),
    Column("salt", String, nullable=False, default=""),
    Column("url", String),
    Column("access_level", String, nullable=False),
    _timestamp("created_on"),
    _timestamp("last_seen_on", nullable=True),
    UniqueConstraint("web_log_id", "email", name="web_log_user_email_uq"),
    Index("web_log_user_web_log_idx", "web_log_id"),
)

page = Table(
    "page",
    metadata,
    Column("id", String, primary_key=True),
    Column("web_log_id", String, ForeignKey("web_log.id"), nullable=False),
    Column("author_id", String, ForeignKey("web_log_user.id"), nullable=False),
    Column("title", String, nullable=False),
    Column("permalink", String, nullable=False),
    _timestamp("published_on"),
    _timestamp("updated_on"),
    Column("show_in_page_list", Boolean, nullable=False, default=False),
    Column("template", String),
    Column("page_text", Text, nullable=False),
    Column("meta_items", JSON_DOCUMENT),
    UniqueConstraint("web_log_id", "permalink", name="page_permalink_uq"),
    Index("page_web_log_idx", "web_log_id"),
    Index("page_author_idx", "web_log_id", "author_id"),
)

page_permalink = Table(
    "page_permalink",
    metadata,
    Column("page_id", String, ForeignKey("page.id"), primary_key=True),
    Column("seq", Integer, primary_key=True),
    Column("permalink", String, nullable=False),
    Index("page_permalink_idx", "permalink"),
)

page_revision = Table(
    "page_revision",
    metadata,
    Column("page_id", String, ForeignKey("page.id"), primary_key=True),
    Column("as_of", DateTime(timezone=True), primary_key=True),
    Column("source_type", String, nullable=False),
    Column("revision_text", Text, nullable=False),
)

post = Table(
    "post",
    metadata,
    Column("id", String, primary_key=True),
    Column("web_log_id", String, ForeignKey("web_log.id"), nullable=False),
    Column("author_id", String, ForeignKey("web_log_user.id"), nullable=False),
    Column("status", String, nullable=False),
    Column("title", String, nullable=False),
    Column("permalink", String, nullable=False),
    _timestamp("published_on", nullable=True),
    _timestamp("updated_on"),
    Column("template", String),
    Column("post_text", Text, nullable=False),
    Column("meta_items", JSON_DOCUMENT),
    Column("episode", JSON_DOCUMENT),
    UniqueConstraint("web_log_id", "permalink", name="post_permalink_uq"),
    Index("post_web_log_idx", "web_log_id"),
    Index("post_author_idx", "web_log_id", "author_id"),
    Index("post_status_published_idx", "web_log_id", "status", "published_on"),
)

post_category = Table(
    "post_category",
    metadata,
    Column("post_id", String, ForeignKey("post.id"), primary_key=True),
    Column("category_id", String, ForeignKey("category.id"), primary_key=True),
    Column("seq", Integer, nullable=False),
    Index("post_category_category_idx", "category_id"),
)

post_tag = Table(
    "post_tag",
    metadata,
    Column("post_id", String, ForeignKey("post.id"), primary_key=True),
    Column("tag", String, primary_key=True),
    Column("seq", Integer, nullable=False),
    Index("post_tag_tag_idx", "tag"),
)

post_permalink = Table(
    "post_permalink",
    metadata,
    Column("post_id", String, ForeignKey("post.id"), primary_key=True),
    Column("seq", Integer, primary_key=True),
    Column("permalink", String, nullable=False),
    Index("post_permalink_idx", "permalink"),
)

post_revision = Table(
    "post_revision",
    metadata,
    Column("post_id", String, ForeignKey("post.id"), primary_key=True),
    Column("as_of", DateTime(timezone=True), primary_key=True),
    Column("source_type", String, nullable=False),
    Column("revision_text", Text, nullable=False),
)

post_comment = Table(
    "post_comment",
    metadata,
    Column("id", String, primary_key=True),
    Column("post_id", String, ForeignKey("post.id"), nullable=False),
    Column("in_reply_to_id", String),
    Column("name", String, nullable=False),
    Column("email", String, nullable=False),
    Column("url", String),
    Column("status", String, nullable=False),
    _timestamp("posted_on"),
    Column("comment_text", Text, nullable=False),
    Index("post_comment_post_idx", "post_id"),
)

tag_map = Table(
    "tag_map",
    metadata,
    Column("id", String, primary_key=True),
    Column("web_log_id", String, ForeignKey("web_log.id"), nullable=False),
    Column("tag", String, nullable=False),
    Column("url_value", String, nullable=False),
    UniqueConstraint("web_log_id", "tag", name="tag_map_tag_uq"),
    UniqueConstraint("web_log_id", "url_value", name="tag_map_url_value_uq"),
)

upload = Table(
    "upload",
    metadata,
    Column("id", String, primary_key=True),
    Column("web_log_id", String, ForeignKey("web_log.id"), nullable=False),
    Column("path", String, nullable=False),
    _timestamp("updated_on"),
    Column("data", LargeBinary, nullable=False),
    UniqueConstraint("web_log_id", "path", name="upload_path_uq"),
)

db_version = Table(
    "db_version",
    metadata,
    Column("id", String, primary_key=True),
)
