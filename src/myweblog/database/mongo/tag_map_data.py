"""MongoDB implementation of `TagMapData`."""

from typing import List, Optional

from myweblog.data.interfaces import TagMapData
from myweblog.data.utils import restore_in_batches
from myweblog.database.mongo.collections import TAG_MAP
from myweblog.database.mongo.helpers import MongoPort, mongo_operation
from myweblog.models.results import RestoreReport
from myweblog.models.weblog_models import TagMap


class MongoTagMapData(MongoPort, TagMapData):
    collection_name = TAG_MAP

    @mongo_operation("TagMap.delete")
    async def delete(self, tag_map_id: str, web_log_id: str) -> bool:
        result = await self.scoped(web_log_id).delete_one({"_id": tag_map_id})
        return result.deleted_count > 0

    @mongo_operation("TagMap.find_by_id")
    async def find_by_id(self, tag_map_id: str, web_log_id: str) -> Optional[TagMap]:
        document = await self.collection.find_one({"_id": tag_map_id})
        return self.to_model(TagMap, self.owned(document, web_log_id))

    @mongo_operation("TagMap.find_by_url_value")
    async def find_by_url_value(self, url_value: str, web_log_id: str) -> Optional[TagMap]:
        return self.to_model(TagMap, await self.scoped(web_log_id).find_one({"url_value": url_value}))

    @mongo_operation("TagMap.find_by_web_log")
    async def find_by_web_log(self, web_log_id: str) -> List[TagMap]:
        return await self.to_models(TagMap, self.scoped(web_log_id).find({}).sort("tag", 1))

    @mongo_operation("TagMap.find_mapping_for_tags")
    async def find_mapping_for_tags(self, tags: List[str], web_log_id: str) -> List[TagMap]:
        if not tags:
            return []
        return await self.to_models(TagMap, self.scoped(web_log_id).find({"tag": {"$in": list(tags)}}))

    @mongo_operation("TagMap.restore")
    async def restore(self, tag_maps: List[TagMap]) -> RestoreReport:
        return await restore_in_batches(
            "tag map",
            tag_maps,
            self.batch_size,
            lambda batch: self.insert_batch([self.serializer.to_document(tag_map) for tag_map in batch]),
        )

    @mongo_operation("TagMap.save")
    async def save(self, tag_map: TagMap) -> None:
        await self.scoped(tag_map.web_log_id).replace_one(
            {"_id": tag_map.id}, self.serializer.to_document(tag_map), upsert=True
        )
