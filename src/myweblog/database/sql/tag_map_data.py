"""SQL implementation of `TagMapData`."""

from typing import List, Optional

from sqlalchemy import delete, select, update

from myweblog.data.interfaces import TagMapData
from myweblog.data.utils import restore_in_batches
from myweblog.database.sql.helpers import SqlPort, sql_operation
from myweblog.database.sql.tables import tag_map
from myweblog.models.results import RestoreReport
from myweblog.models.weblog_models import TagMap


class SqlTagMapData(SqlPort, TagMapData):
    async def _find(self, *criteria) -> List[TagMap]:
        rows = await self.fetch_all(select(tag_map).where(*criteria).order_by(tag_map.c.tag))
        return [TagMap.model_validate(dict(row)) for row in rows]

    @sql_operation("TagMap.delete")
    async def delete(self, tag_map_id: str, web_log_id: str) -> bool:
        async with self.engine.begin() as conn:
            result = await conn.execute(
                delete(tag_map).where(tag_map.c.id == tag_map_id, tag_map.c.web_log_id == web_log_id)
            )
        return result.rowcount > 0

    @sql_operation("TagMap.find_by_id")
    async def find_by_id(self, tag_map_id: str, web_log_id: str) -> Optional[TagMap]:
        found = await self._find(tag_map.c.id == tag_map_id, tag_map.c.web_log_id == web_log_id)
        return found[0] if found else None

    @sql_operation("TagMap.find_by_url_value")
    async def find_by_url_value(self, url_value: str, web_log_id: str) -> Optional[TagMap]:
        found = await self._find(tag_map.c.url_value == url_value, tag_map.c.web_log_id == web_log_id)
        return found[0] if found else None

    @sql_operation("TagMap.find_by_web_log")
    async def find_by_web_log(self, web_log_id: str) -> List[TagMap]:
        return await self._find(tag_map.c.web_log_id == web_log_id)

    @sql_operation("TagMap.find_mapping_for_tags")
    async def find_mapping_for_tags(self, tags: List[str], web_log_id: str) -> List[TagMap]:
        if not tags:
            return []
        return await self._find(tag_map.c.web_log_id == web_log_id, tag_map.c.tag.in_(list(tags)))

    @sql_operation("TagMap.restore")
    async def restore(self, tag_maps: List[TagMap]) -> RestoreReport:
        async def write(batch: List[TagMap]) -> None:
            async with self.engine.begin() as conn:
                await conn.execute(tag_map.insert(), [item.model_dump() for item in batch])

        return await restore_in_batches("tag map", tag_maps, self.batch_size, write)

    @sql_operation("TagMap.save")
    async def save(self, item: TagMap) -> None:
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(tag_map)
                .where(tag_map.c.id == item.id, tag_map.c.web_log_id == item.web_log_id)
                .values(tag=item.tag, url_value=item.url_value)
            )
            if result.rowcount == 0:
                await conn.execute(tag_map.insert().values(**item.model_dump()))
