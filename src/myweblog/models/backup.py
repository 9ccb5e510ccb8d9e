"""
Backup archive model.

An `Archive` is a snapshot of one web log with everything that belongs to it, plus the
themes it uses. It serializes to JSON with `model_dump_json()` (upload and asset bytes
are base64 encoded) and is read back with `Archive.model_validate_json()`.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from myweblog.models.weblog_models import (
    Category,
    Page,
    Post,
    TagMap,
    Theme,
    ThemeAsset,
    Upload,
    UtcDateTime,
    WebLog,
    WebLogUser,
    utc_now,
)


class Archive(BaseModel):
    """Snapshot of one web log; restored by `myweblog.data.restore.restore_archive`."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    created_on: UtcDateTime = Field(default_factory=utc_now)
    web_log: WebLog
    users: List[WebLogUser] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)
    tag_mappings: List[TagMap] = Field(default_factory=list)
    pages: List[Page] = Field(default_factory=list)
    posts: List[Post] = Field(default_factory=list)
    uploads: List[Upload] = Field(default_factory=list)
    themes: List[Theme] = Field(default_factory=list)
    theme_assets: List[ThemeAsset] = Field(default_factory=list)
