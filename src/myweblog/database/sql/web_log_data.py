"""
SQL implementation of `WebLogData`.

## Delete Cascade

Deleting a web log removes, inside one transaction and dependents first: comments, post
categories, tags, prior permalinks and revisions, posts, page prior permalinks and
revisions, pages, categories, tag mappings, uploads, users, then the web log. A failure
rolls the whole delete back.
"""

import time
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update

from myweblog.data.interfaces import WebLogData
from myweblog.database.sql.helpers import SqlPort, logger, sql_operation
from myweblog.database.sql.tables import (
    category,
    page,
    page_permalink,
    page_revision,
    post,
    post_category,
    post_comment,
    post_permalink,
    post_revision,
    post_tag,
    tag_map,
    upload,
    web_log,
    web_log_user,
)
from myweblog.models.results import DataResult
from myweblog.models.weblog_models import RedirectRule, RssOptions, WebLog

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


class SqlWebLogData(SqlPort, WebLogData):
    def _to_row(self, item: WebLog) -> Dict[str, Any]:
        row = item.model_dump(exclude={"rss", "redirect_rules"})
        row["rss"] = self.serializer.to_json_value(item.rss)
        row["redirect_rules"] = self.serializer.to_json_value(item.redirect_rules)
        return row

    def _from_row(self, row) -> WebLog:
        values = dict(row)
        values["rss"] = self.serializer.from_json_value(RssOptions, values["rss"]) or RssOptions()
        values["redirect_rules"] = self.serializer.from_json_value(List[RedirectRule], values["redirect_rules"]) or []
        return WebLog.model_validate(values)

    async def _find(self, *criteria) -> List[WebLog]:
        rows = await self.fetch_all(select(web_log).where(*criteria).order_by(web_log.c.name, web_log.c.id))
        return [self._from_row(row) for row in rows]

    @sql_operation("WebLog.add")
    async def add(self, item: WebLog) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(web_log.insert().values(**self._to_row(item)))

    @sql_operation("WebLog.all")
    async def all(self) -> List[WebLog]:
        return await self._find()

    @sql_operation("WebLog.delete")
    async def delete(self, web_log_id: str) -> DataResult:
        if not await self.any_rows(web_log, web_log.c.id == web_log_id):
            return DataResult.not_found(f"Web log {web_log_id} not found")

        start_time = time.time()
        post_ids = select(post.c.id).where(post.c.web_log_id == web_log_id).scalar_subquery()
        page_ids = select(page.c.id).where(page.c.web_log_id == web_log_id).scalar_subquery()
        async with self.engine.begin() as conn:
            for child in (post_comment, post_category, post_tag, post_permalink, post_revision):
                await conn.execute(delete(child).where(child.c.post_id.in_(post_ids)))
            await conn.execute(delete(post).where(post.c.web_log_id == web_log_id))
            for child in (page_permalink, page_revision):
                await conn.execute(delete(child).where(child.c.page_id.in_(page_ids)))
            await conn.execute(delete(page).where(page.c.web_log_id == web_log_id))
            for table in (category, tag_map, upload, web_log_user):
                await conn.execute(delete(table).where(table.c.web_log_id == web_log_id))
            await conn.execute(delete(web_log).where(web_log.c.id == web_log_id))

        logger.info("Deleted web log %s in %.3fs", web_log_id, time.time() - start_time)
        return DataResult.success(web_log_id)

    @sql_operation("WebLog.find_by_host")
    async def find_by_host(self, url_base: str) -> Optional[WebLog]:
        found = await self._find(web_log.c.url_base == url_base)
        return found[0] if found else None

    @sql_operation("WebLog.find_by_id")
    async def find_by_id(self, web_log_id: str) -> Optional[WebLog]:
        found = await self._find(web_log.c.id == web_log_id)
        return found[0] if found else None

    async def _set(self, item: WebLog, fields: List[str]) -> bool:
        row = self._to_row(item)
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(web_log).where(web_log.c.id == item.id).values(**{field: row[field] for field in fields})
            )
        return result.rowcount > 0

    @sql_operation("WebLog.update_redirect_rules")
    async def update_redirect_rules(self, item: WebLog) -> bool:
        return await self._set(item, ["redirect_rules"])

    @sql_operation("WebLog.update_rss_options")
    async def update_rss_options(self, item: WebLog) -> bool:
        return await self._set(item, ["rss"])

    @sql_operation("WebLog.update_settings")
    async def update_settings(self, item: WebLog) -> bool:
        return await self._set(item, SETTINGS_FIELDS)
