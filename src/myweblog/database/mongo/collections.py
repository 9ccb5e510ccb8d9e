"""
# Document Store Collections and Indexes

Collection names used by the MongoDB backend and the index catalog created at start-up.

## Index Catalog

| Collection | Index | Fields | Options |
|------------|-------|--------|---------|
| `category` | `category_web_log_idx` | `web_log_id` | |
| `category` | `category_parent_idx` | `web_log_id`, `parent_id` | |
| `comment` | `comment_post_idx` | `post_id` | |
| `page` | `page_web_log_idx` | `web_log_id` | |
| `page` | `page_author_idx` | `web_log_id`, `author_id` | |
| `page` | `page_permalink_idx` | `web_log_id`, `permalink` | unique |
| `page` | `page_prior_permalink_idx` | `web_log_id`, `prior_permalinks` | multikey |
| `post` | `post_web_log_idx` | `web_log_id` | |
| `post` | `post_author_idx` | `web_log_id`, `author_id` | |
| `post` | `post_permalink_idx` | `web_log_id`, `permalink` | unique |
| `post` | `post_prior_permalink_idx` | `web_log_id`, `prior_permalinks` | multikey |
| `post` | `post_status_published_idx` | `web_log_id`, `status`, `published_on` desc | |
| `post` | `post_category_idx` | `web_log_id`, `category_ids` | multikey |
| `post` | `post_tag_idx` | `web_log_id`, `tags` | multikey |
| `tag_map` | `tag_map_tag_idx` | `web_log_id`, `tag` | unique |
| `tag_map` | `tag_map_url_value_idx` | `web_log_id`, `url_value` | unique |
| `theme_asset` | `theme_asset_theme_idx` | `theme_id` | |
| `upload` | `upload_path_idx` | `web_log_id`, `path` | unique |
| `web_log` | `web_log_url_base_idx` | `url_base` | unique |
| `web_log_user` | `web_log_user_web_log_idx` | `web_log_id` | |
| `web_log_user` | `web_log_user_email_idx` | `web_log_id`, `email` | unique |

Every index carries an explicit name so its existence can be checked with
`index_information()` before it is created.
"""

import time
from typing import List, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import CollectionInvalid, OperationFailure

from myweblog.managers.logging_manager import get_logger

logger = get_logger(prefix="[MongoSchema]")

CATEGORY = "category"
COMMENT = "comment"
DB_VERSION = "db_version"
PAGE = "page"
POST = "post"
TAG_MAP = "tag_map"
THEME = "theme"
THEME_ASSET = "theme_asset"
UPLOAD = "upload"
WEB_LOG = "web_log"
WEB_LOG_USER = "web_log_user"

ALL_COLLECTIONS = [
    CATEGORY,
    COMMENT,
    DB_VERSION,
    PAGE,
    POST,
    TAG_MAP,
    THEME,
    THEME_ASSET,
    UPLOAD,
    WEB_LOG,
    WEB_LOG_USER,
]

# Server error codes meaning an equivalent index is already in place
INDEX_EXISTS_CODES = {68, 85, 86}

MONGO_INDEXES = [
    # Categories
    {"collection": CATEGORY, "index": [("web_log_id", 1)], "options": {"name": "category_web_log_idx"}},
    {
        "collection": CATEGORY,
        "index": [("web_log_id", 1), ("parent_id", 1)],
        "options": {"name": "category_parent_idx"},
    },
    # Comments
    {"collection": COMMENT, "index": [("post_id", 1)], "options": {"name": "comment_post_idx"}},
    # Pages
    {"collection": PAGE, "index": [("web_log_id", 1)], "options": {"name": "page_web_log_idx"}},
    {"collection": PAGE, "index": [("web_log_id", 1), ("author_id", 1)], "options": {"name": "page_author_idx"}},
    {
        "collection": PAGE,
        "index": [("web_log_id", 1), ("permalink", 1)],
        "options": {"name": "page_permalink_idx", "unique": True},
    },
    {
        "collection": PAGE,
        "index": [("web_log_id", 1), ("prior_permalinks", 1)],
        "options": {"name": "page_prior_permalink_idx"},
    },
    # Posts
    {"collection": POST, "index": [("web_log_id", 1)], "options": {"name": "post_web_log_idx"}},
    {"collection": POST, "index": [("web_log_id", 1), ("author_id", 1)], "options": {"name": "post_author_idx"}},
    {
        "collection": POST,
        "index": [("web_log_id", 1), ("permalink", 1)],
        "options": {"name": "post_permalink_idx", "unique": True},
    },
    {
        "collection": POST,
        "index": [("web_log_id", 1), ("prior_permalinks", 1)],
        "options": {"name": "post_prior_permalink_idx"},
    },
    {
        "collection": POST,
        "index": [("web_log_id", 1), ("status", 1), ("published_on", -1)],
        "options": {"name": "post_status_published_idx"},
    },
    {"collection": POST, "index": [("web_log_id", 1), ("category_ids", 1)], "options": {"name": "post_category_idx"}},
    {"collection": POST, "index": [("web_log_id", 1), ("tags", 1)], "options": {"name": "post_tag_idx"}},
    # Tag mappings
    {
        "collection": TAG_MAP,
        "index": [("web_log_id", 1), ("tag", 1)],
        "options": {"name": "tag_map_tag_idx", "unique": True},
    },
    {
        "collection": TAG_MAP,
        "index": [("web_log_id", 1), ("url_value", 1)],
        "options": {"name": "tag_map_url_value_idx", "unique": True},
    },
    # Theme assets
    {"collection": THEME_ASSET, "index": [("theme_id", 1)], "options": {"name": "theme_asset_theme_idx"}},
    # Uploads
    {
        "collection": UPLOAD,
        "index": [("web_log_id", 1), ("path", 1)],
        "options": {"name": "upload_path_idx", "unique": True},
    },
    # Web logs
    {"collection": WEB_LOG, "index": [("url_base", 1)], "options": {"name": "web_log_url_base_idx", "unique": True}},
    # Users
    {"collection": WEB_LOG_USER, "index": [("web_log_id", 1)], "options": {"name": "web_log_user_web_log_idx"}},
    {
        "collection": WEB_LOG_USER,
        "index": [("web_log_id", 1), ("email", 1)],
        "options": {"name": "web_log_user_email_idx", "unique": True},
    },
]


async def ensure_collections(database: AsyncIOMotorDatabase) -> List[str]:
    """
    Create every collection that does not exist yet.

    A collection created by another process between the check and the create counts as
    present.

    Returns:
        List[str]: Names of the collections this call created.
    """
    existing = set(await database.list_collection_names())
    created: List[str] = []
    for name in ALL_COLLECTIONS:
        if name in existing:
            continue
        try:
            await database.create_collection(name)
            created.append(name)
            logger.info("Created collection %s", name)
        except CollectionInvalid:
            logger.debug("Collection %s was created concurrently", name)
    return created


async def ensure_indexes(database: AsyncIOMotorDatabase) -> List[str]:
    """
    Create every index in `MONGO_INDEXES` that does not exist yet.

    Returns:
        List[str]: `collection.index_name` for each index this call created.
    """
    start_time = time.time()
    created: List[str] = []
    existing_by_collection = {}

    for index_spec in MONGO_INDEXES:
        collection_name = index_spec["collection"]
        options = index_spec.get("options", {})
        index_name = options["name"]

        if collection_name not in existing_by_collection:
            existing_by_collection[collection_name] = set(
                (await database[collection_name].index_information()).keys()
            )
        if index_name in existing_by_collection[collection_name]:
            logger.debug("Index %s on %s already exists", index_name, collection_name)
            continue

        try:
            await database[collection_name].create_index(index_spec["index"], **options)
        except OperationFailure as e:
            if e.code in INDEX_EXISTS_CODES or "already exists" in str(e):
                logger.debug("Index %s on %s was created concurrently", index_name, collection_name)
                continue
            logger.error("Failed to create index %s on %s: %s", index_name, collection_name, e)
            raise
        existing_by_collection[collection_name].add(index_name)
        created.append(f"{collection_name}.{index_name}")
        logger.info("Created index %s on %s", index_name, collection_name)

    logger.debug("Index check completed in %.3fs (%d created)", time.time() - start_time, len(created))
    return created


async def ensure_schema(database: AsyncIOMotorDatabase) -> Tuple[List[str], List[str]]:
    """Create missing collections and indexes; returns both lists of created names."""
    collections = await ensure_collections(database)
    indexes = await ensure_indexes(database)
    return collections, indexes
