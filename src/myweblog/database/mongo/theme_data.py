"""MongoDB implementations of `ThemeData` and `ThemeAssetData`.

Theme assets are stored with the string form of their id (`theme/path`) as `_id`, and
with `theme_id` and `path` as separate fields so they can be found by theme.
"""

from typing import Any, Dict, List, Optional

from myweblog.data.interfaces import ThemeAssetData, ThemeData
from myweblog.database.mongo.collections import THEME, THEME_ASSET
from myweblog.database.mongo.helpers import WITHOUT_DATA, MongoPort, logger, mongo_operation
from myweblog.models.ids import ThemeAssetId
from myweblog.models.weblog_models import Theme, ThemeAsset

ADMIN_THEME_ID = "admin"


def _without_text(theme: Theme) -> Theme:
    return theme.model_copy(
        update={"templates": [template.model_copy(update={"text": ""}) for template in theme.templates]}
    )


class MongoThemeData(MongoPort, ThemeData):
    collection_name = THEME

    @mongo_operation("Theme.all")
    async def all(self) -> List[Theme]:
        themes = await self.to_models(Theme, self.collection.find({"_id": {"$ne": ADMIN_THEME_ID}}).sort("_id", 1))
        return [_without_text(theme) for theme in themes]

    @mongo_operation("Theme.exists")
    async def exists(self, theme_id: str) -> bool:
        return await self.collection.count_documents({"_id": theme_id}) > 0

    @mongo_operation("Theme.find_by_id")
    async def find_by_id(self, theme_id: str) -> Optional[Theme]:
        return self.to_model(Theme, await self.collection.find_one({"_id": theme_id}))

    @mongo_operation("Theme.find_by_id_without_text")
    async def find_by_id_without_text(self, theme_id: str) -> Optional[Theme]:
        theme = await self.find_by_id(theme_id)
        return _without_text(theme) if theme else None

    @mongo_operation("Theme.delete")
    async def delete(self, theme_id: str) -> bool:
        if not await self.exists(theme_id):
            return False
        assets = await self.database[THEME_ASSET].delete_many({"theme_id": theme_id})
        await self.collection.delete_one({"_id": theme_id})
        logger.info("Deleted theme %s and %d asset(s)", theme_id, assets.deleted_count)
        return True

    @mongo_operation("Theme.save")
    async def save(self, theme: Theme) -> None:
        await self.collection.replace_one({"_id": theme.id}, self.serializer.to_document(theme), upsert=True)


class MongoThemeAssetData(MongoPort, ThemeAssetData):
    collection_name = THEME_ASSET

    def _to_document(self, asset: ThemeAsset) -> Dict[str, Any]:
        document = self.serializer.to_document(asset, exclude={"id"})
        document.update({"_id": str(asset.id), "theme_id": asset.id.theme_id, "path": asset.id.path})
        return document

    @staticmethod
    def _from_document(document: Dict[str, Any]) -> ThemeAsset:
        return ThemeAsset(
            id=ThemeAssetId(theme_id=document["theme_id"], path=document["path"]),
            updated_on=document["updated_on"],
            data=document.get("data", b""),
        )

    async def _assets(self, query: Dict[str, Any], projection: Optional[Dict[str, Any]] = None) -> List[ThemeAsset]:
        cursor = self.collection.find(query, projection).sort("_id", 1)
        return [self._from_document(document) async for document in cursor]

    @mongo_operation("ThemeAsset.all")
    async def all(self) -> List[ThemeAsset]:
        return await self._assets({}, WITHOUT_DATA)

    @mongo_operation("ThemeAsset.delete_by_theme")
    async def delete_by_theme(self, theme_id: str) -> None:
        await self.collection.delete_many({"theme_id": theme_id})

    @mongo_operation("ThemeAsset.find_by_id")
    async def find_by_id(self, asset_id: ThemeAssetId) -> Optional[ThemeAsset]:
        document = await self.collection.find_one({"_id": str(asset_id)})
        return self._from_document(document) if document else None

    @mongo_operation("ThemeAsset.find_by_theme")
    async def find_by_theme(self, theme_id: str) -> List[ThemeAsset]:
        return await self._assets({"theme_id": theme_id}, WITHOUT_DATA)

    @mongo_operation("ThemeAsset.find_by_theme_with_data")
    async def find_by_theme_with_data(self, theme_id: str) -> List[ThemeAsset]:
        return await self._assets({"theme_id": theme_id})

    @mongo_operation("ThemeAsset.save")
    async def save(self, asset: ThemeAsset) -> None:
        await self.collection.replace_one({"_id": str(asset.id)}, self._to_document(asset), upsert=True)
