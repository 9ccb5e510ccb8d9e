"""SQL implementations of `ThemeData` and `ThemeAssetData`."""

from typing import List, Optional

from sqlalchemy import delete, select, update

from myweblog.data.interfaces import ThemeAssetData, ThemeData
from myweblog.database.sql.helpers import SqlPort, group_rows, logger, sql_operation
from myweblog.database.sql.tables import theme, theme_asset, theme_template
from myweblog.models.ids import ThemeAssetId
from myweblog.models.weblog_models import Theme, ThemeAsset, ThemeTemplate

ADMIN_THEME_ID = "admin"


class SqlThemeData(SqlPort, ThemeData):
    async def _find(self, *criteria, with_text: bool = True) -> List[Theme]:
        async with self.engine.connect() as conn:
            rows = (await conn.execute(select(theme).where(*criteria).order_by(theme.c.id))).mappings().all()
            ids = [row["id"] for row in rows]
            if not ids:
                return []
            templates = group_rows(
                (
                    await conn.execute(
                        select(theme_template)
                        .where(theme_template.c.theme_id.in_(ids))
                        .order_by(theme_template.c.theme_id, theme_template.c.seq)
                    )
                ).mappings(),
                "theme_id",
                lambda row: ThemeTemplate(name=row["name"], text=row["template"] if with_text else ""),
            )
        return [
            Theme(id=row["id"], name=row["name"], version=row["version"], templates=templates.get(row["id"], []))
            for row in rows
        ]

    @sql_operation("Theme.all")
    async def all(self) -> List[Theme]:
        return await self._find(theme.c.id != ADMIN_THEME_ID, with_text=False)

    @sql_operation("Theme.exists")
    async def exists(self, theme_id: str) -> bool:
        return await self.any_rows(theme, theme.c.id == theme_id)

    @sql_operation("Theme.find_by_id")
    async def find_by_id(self, theme_id: str) -> Optional[Theme]:
        found = await self._find(theme.c.id == theme_id)
        return found[0] if found else None

    @sql_operation("Theme.find_by_id_without_text")
    async def find_by_id_without_text(self, theme_id: str) -> Optional[Theme]:
        found = await self._find(theme.c.id == theme_id, with_text=False)
        return found[0] if found else None

    @sql_operation("Theme.delete")
    async def delete(self, theme_id: str) -> bool:
        async with self.engine.begin() as conn:
            assets = await conn.execute(delete(theme_asset).where(theme_asset.c.theme_id == theme_id))
            await conn.execute(delete(theme_template).where(theme_template.c.theme_id == theme_id))
            result = await conn.execute(delete(theme).where(theme.c.id == theme_id))
        if result.rowcount == 0:
            return False
        logger.info("Deleted theme %s and %d asset(s)", theme_id, assets.rowcount)
        return True

    @sql_operation("Theme.save")
    async def save(self, item: Theme) -> None:
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(theme).where(theme.c.id == item.id).values(name=item.name, version=item.version)
            )
            if result.rowcount == 0:
                await conn.execute(theme.insert().values(id=item.id, name=item.name, version=item.version))
            await self.replace_children(
                conn,
                theme_template,
                "theme_id",
                [item.id],
                [
                    {"theme_id": item.id, "name": template.name, "seq": seq, "template": template.text}
                    for seq, template in enumerate(item.templates)
                ],
            )


class SqlThemeAssetData(SqlPort, ThemeAssetData):
    async def _find(self, *criteria, with_data: bool = False) -> List[ThemeAsset]:
        columns = [theme_asset.c.theme_id, theme_asset.c.path, theme_asset.c.updated_on]
        if with_data:
            columns.append(theme_asset.c.data)
        rows = await self.fetch_all(
            select(*columns).where(*criteria).order_by(theme_asset.c.theme_id, theme_asset.c.path)
        )
        return [
            ThemeAsset(
                id=ThemeAssetId(theme_id=row["theme_id"], path=row["path"]),
                updated_on=row["updated_on"],
                data=row["data"] if with_data else b"",
            )
            for row in rows
        ]

    @sql_operation("ThemeAsset.all")
    async def all(self) -> List[ThemeAsset]:
        return await self._find()

    @sql_operation("ThemeAsset.delete_by_theme")
    async def delete_by_theme(self, theme_id: str) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(delete(theme_asset).where(theme_asset.c.theme_id == theme_id))

    @sql_operation("ThemeAsset.find_by_id")
    async def find_by_id(self, asset_id: ThemeAssetId) -> Optional[ThemeAsset]:
        found = await self._find(
            theme_asset.c.theme_id == asset_id.theme_id, theme_asset.c.path == asset_id.path, with_data=True
        )
        return found[0] if found else None

    @sql_operation("ThemeAsset.find_by_theme")
    async def find_by_theme(self, theme_id: str) -> List[ThemeAsset]:
        return await self._find(theme_asset.c.theme_id == theme_id)

    @sql_operation("ThemeAsset.find_by_theme_with_data")
    async def find_by_theme_with_data(self, theme_id: str) -> List[ThemeAsset]:
        return await self._find(theme_asset.c.theme_id == theme_id, with_data=True)

    @sql_operation("ThemeAsset.save")
    async def save(self, asset: ThemeAsset) -> None:
        key = (theme_asset.c.theme_id == asset.id.theme_id, theme_asset.c.path == asset.id.path)
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(theme_asset).where(*key).values(updated_on=asset.updated_on, data=asset.data)
            )
            if result.rowcount == 0:
                await conn.execute(
                    theme_asset.insert().values(
                        theme_id=asset.id.theme_id, path=asset.id.path, updated_on=asset.updated_on, data=asset.data
                    )
                )
