"""
MongoDB implementation of `WebLogData`.

## Delete Cascade

Deleting a web log removes everything that belongs to it, dependents first:

1. comments on the web log's posts
2. tag mappings
3. uploads
4. posts
5. categories
6. pages
7. users
8. the web log itself

On a replica set or mongos the whole cascade runs in one transaction. On a standalone
server the steps run in order; if one fails, the delete reports `UNRESOLVED` with the
steps that completed and the one that failed. Every step deletes by web log id, so running
the delete again finishes the job.
"""

import time
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from pymongo.errors import ConnectionFailure, PyMongoError

from myweblog.data.interfaces import WebLogData
from myweblog.database.mongo.collections import (
    CATEGORY,
    COMMENT,
    PAGE,
    POST,
    TAG_MAP,
    UPLOAD,
    WEB_LOG,
    WEB_LOG_USER,
)
from myweblog.database.mongo.helpers import MongoPort, logger, mongo_operation, session_kwargs
from myweblog.models.results import DataResult
from myweblog.models.weblog_models import WebLog

SETTINGS_FIELDS = [
    "name",
    "slug",
    "subtitle",
    "default_page",
    "posts_per_page",
    "time_zone",
    "theme_id",
    "auto_htmx",
    "uploads",
]


class MongoWebLogData(MongoPort, WebLogData):
    collection_name = WEB_LOG

    @mongo_operation("WebLog.add")
    async def add(self, web_log: WebLog) -> None:
        await self.collection.insert_one(self.serializer.to_document(web_log))

    @mongo_operation("WebLog.all")
    async def all(self) -> List[WebLog]:
        return await self.to_models(WebLog, self.collection.find({}).sort("name", 1))

    def _cascade_steps(self, web_log_id: str) -> List[Tuple[str, Callable[[Any], Awaitable[Any]]]]:
        async def comments(session) -> None:
            kwargs = session_kwargs(session)
            post_ids = [
                document["_id"]
                async for document in self.scoped(web_log_id, POST).find({}, {"_id": 1}, **kwargs)
            ]
            if post_ids:
                await self.database[COMMENT].delete_many({"post_id": {"$in": post_ids}}, **kwargs)

        def delete_all(collection_name: str) -> Callable[[Any], Awaitable[Any]]:
            async def step(session) -> None:
                await self.scoped(web_log_id, collection_name).delete_many({}, **session_kwargs(session))

            return step

        async def web_log(session) -> None:
            await self.collection.delete_one({"_id": web_log_id}, **session_kwargs(session))

        return [
            ("comments", comments),
            ("tag maps", delete_all(TAG_MAP)),
            ("uploads", delete_all(UPLOAD)),
            ("posts", delete_all(POST)),
            ("categories", delete_all(CATEGORY)),
            ("pages", delete_all(PAGE)),
            ("users", delete_all(WEB_LOG_USER)),
            ("web log", web_log),
        ]

    @mongo_operation("WebLog.delete")
    async def delete(self, web_log_id: str) -> DataResult:
        if await self.collection.count_documents({"_id": web_log_id}) == 0:
            return DataResult.not_found(f"Web log {web_log_id} not found")

        start_time = time.time()
        steps = self._cascade_steps(web_log_id)

        if self.transactions_supported:

            async def work(session) -> None:
                for _, step in steps:
                    await step(session)

            await self.in_transaction(work)
            logger.info("Deleted web log %s in a transaction in %.3fs", web_log_id, time.time() - start_time)
            return DataResult.success(web_log_id)

        completed: List[str] = []
        for name, step in steps:
            try:
                await step(None)
            except ConnectionFailure:
                raise
            except PyMongoError as e:
                logger.error(
                    "Deleting web log %s stopped at %s after %s: %s",
                    web_log_id,
                    name,
                    ", ".join(completed) or "no steps",
                    e,
                )
                return DataResult.unresolved(
                    f"Delete of web log {web_log_id} stopped at {name}; run it again to finish", value=completed
                )
            completed.append(name)

        logger.info("Deleted web log %s in %.3fs", web_log_id, time.time() - start_time)
        return DataResult.success(web_log_id)

    @mongo_operation("WebLog.find_by_host")
    async def find_by_host(self, url_base: str) -> Optional[WebLog]:
        return self.to_model(WebLog, await self.collection.find_one({"url_base": url_base}))

    @mongo_operation("WebLog.find_by_id")
    async def find_by_id(self, web_log_id: str) -> Optional[WebLog]:
        return self.to_model(WebLog, await self.collection.find_one({"_id": web_log_id}))

    async def _set(self, web_log: WebLog, fields: List[str]) -> bool:
        document = self.serializer.to_document(web_log)
        result = await self.collection.update_one(
            {"_id": web_log.id}, {"$set": {field: document[field] for field in fields}}
        )
        return result.matched_count > 0

    @mongo_operation("WebLog.update_redirect_rules")
    async def update_redirect_rules(self, web_log: WebLog) -> bool:
        return await self._set(web_log, ["redirect_rules"])

    @mongo_operation("WebLog.update_rss_options")
    async def update_rss_options(self, web_log: WebLog) -> bool:
        return await self._set(web_log, ["rss"])

    @mongo_operation("WebLog.update_settings")
    async def update_settings(self, web_log: WebLog) -> bool:
        return await self._set(web_log, SETTINGS_FIELDS)
