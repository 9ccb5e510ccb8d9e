"""
# Web-Log-Scoped Collection Wrapper

`WebLogScopedCollection` wraps a Motor collection so every operation is confined to one
web log. Reads, updates and deletes get `{"web_log_id": ...}` added to their filter;
inserts and replacements get the field set on the document; aggregations get a leading
`$match` stage.

```
┌──────────────┐     ┌────────────────────────────┐     ┌────────────────────────┐
│  Mongo*Data  │────▶│   WebLogScopedCollection   │────▶│  AsyncIOMotorCollection│
│   (ports)    │     │  + {"web_log_id": "wl_1"}  │     │                        │
└──────────────┘     └────────────────────────────┘     └────────────────────────┘
```

## Usage

```python
posts = WebLogScopedCollection(database["post"], web_log_id)

# Actual query: {"status": "Published", "web_log_id": web_log_id}
count = await posts.count_documents({"status": "Published"})

# Actual pipeline: [{"$match": {"web_log_id": web_log_id}}, {"$sort": ...}]
cursor = posts.aggregate([{"$sort": {"published_on": -1}}])
```

Operations that span web logs (themes, start-up, migrations, web log lookup by host)
use the raw collection instead.

Attributes:
    logger (Logger): Logger for scoped operations (`[WebLog Collection]`).
"""

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorCommandCursor, AsyncIOMotorCursor

from myweblog.managers.logging_manager import get_logger

logger = get_logger(prefix="[WebLog Collection]")

WEB_LOG_FIELD = "web_log_id"


class WebLogScopedCollection:
    """
    A wrapper around `AsyncIOMotorCollection` that confines every operation to one web log.

    Attributes:
        _collection (`AsyncIOMotorCollection`): The underlying Motor collection.
        _web_log_id (`str`): The web log every operation is scoped to.
    """

    def __init__(self, collection: AsyncIOMotorCollection, web_log_id: str):
        self._collection = collection
        self._web_log_id = web_log_id

    def _scope_filter(self, filter_dict: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Copy of the filter with the web log id constraint added."""
        scoped = dict(filter_dict or {})
        scoped[WEB_LOG_FIELD] = self._web_log_id
        return scoped

    def _scope_document(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Copy of the document carrying this collection's web log id."""
        scoped = dict(document)
        scoped[WEB_LOG_FIELD] = self._web_log_id
        return scoped

    async def find_one(self, filter: Optional[Dict[str, Any]] = None, *args, **kwargs) -> Optional[Dict[str, Any]]:
        result = await self._collection.find_one(self._scope_filter(filter), *args, **kwargs)
        logger.debug(
            "find_one on %s for web log %s: %s", self.name, self._web_log_id, "found" if result else "not found"
        )
        return result

    def find(self, filter: Optional[Dict[str, Any]] = None, *args, **kwargs) -> AsyncIOMotorCursor:
        scoped = self._scope_filter(filter)
        logger.debug("find on %s for web log %s with filter: %s", self.name, self._web_log_id, scoped)
        return self._collection.find(scoped, *args, **kwargs)

    async def insert_one(self, document: Dict[str, Any], *args, **kwargs):
        result = await self._collection.insert_one(self._scope_document(document), *args, **kwargs)
        logger.debug("insert_one on %s for web log %s: %s", self.name, self._web_log_id, result.inserted_id)
        return result

    async def insert_many(self, documents: List[Dict[str, Any]], *args, **kwargs):
        scoped = [self._scope_document(document) for document in documents]
        result = await self._collection.insert_many(scoped, *args, **kwargs)
        logger.debug(
            "insert_many on %s for web log %s: inserted %d", self.name, self._web_log_id, len(result.inserted_ids)
        )
        return result

    async def replace_one(self, filter: Dict[str, Any], replacement: Dict[str, Any], *args, **kwargs):
        """Replace one document of this web log; the replacement keeps the web log id."""
        result = await self._collection.replace_one(
            self._scope_filter(filter), self._scope_document(replacement), *args, **kwargs
        )
        logger.debug(
            "replace_one on %s for web log %s: matched=%d", self.name, self._web_log_id, result.matched_count
        )
        return result

    async def update_one(self, filter: Dict[str, Any], update: Dict[str, Any], *args, **kwargs):
        result = await self._collection.update_one(self._scope_filter(filter), update, *args, **kwargs)
        logger.debug(
            "update_one on %s for web log %s: matched=%d, modified=%d",
            self.name,
            self._web_log_id,
            result.matched_count,
            result.modified_count,
        )
        return result

    async def update_many(self, filter: Dict[str, Any], update: Dict[str, Any], *args, **kwargs):
        result = await self._collection.update_many(self._scope_filter(filter), update, *args, **kwargs)
        logger.debug(
            "update_many on %s for web log %s: matched=%d, modified=%d",
            self.name,
            self._web_log_id,
            result.matched_count,
            result.modified_count,
        )
        return result

    async def delete_one(self, filter: Dict[str, Any], *args, **kwargs):
        result = await self._collection.delete_one(self._scope_filter(filter), *args, **kwargs)
        logger.debug("delete_one on %s for web log %s: deleted=%d", self.name, self._web_log_id, result.deleted_count)
        return result

    async def delete_many(self, filter: Optional[Dict[str, Any]] = None, *args, **kwargs):
        result = await self._collection.delete_many(self._scope_filter(filter), *args, **kwargs)
        logger.debug(
            "delete_many on %s for web log %s: deleted=%d", self.name, self._web_log_id, result.deleted_count
        )
        return result

    async def count_documents(self, filter: Optional[Dict[str, Any]] = None, *args, **kwargs) -> int:
        count = await self._collection.count_documents(self._scope_filter(filter), *args, **kwargs)
        logger.debug("count_documents on %s for web log %s: %d", self.name, self._web_log_id, count)
        return count

    def aggregate(self, pipeline: List[Dict[str, Any]], *args, **kwargs) -> AsyncIOMotorCommandCursor:
        """Run a pipeline that starts with a `$match` on this web log."""
        scoped = [{"$match": {WEB_LOG_FIELD: self._web_log_id}}] + list(pipeline)
        logger.debug("aggregate on %s for web log %s with %d stage(s)", self.name, self._web_log_id, len(scoped))
        return self._collection.aggregate(scoped, *args, **kwargs)

    @property
    def name(self) -> str:
        return self._collection.name

    @property
    def web_log_id(self) -> str:
        return self._web_log_id
