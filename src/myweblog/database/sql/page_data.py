"""SQL implementation of `PageData`."""

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select, update

from myweblog.config import settings
from myweblog.data.interfaces import PageData
from myweblog.data.utils import page_window, restore_in_batches
from myweblog.database.sql.helpers import SqlPort, group_rows, sql_operation
from myweblog.database.sql.tables import page, page_permalink, page_revision
from myweblog.models.results import RestoreReport
from myweblog.models.weblog_models import MetaItem, Page

BY_TITLE = (func.lower(page.c.title), page.c.id)


class SqlPageData(SqlPort, PageData):
    def __init__(self, *args, admin_page_size: Optional[int] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.admin_page_size = admin_page_size or settings.ADMIN_PAGE_SIZE

    def _to_row(self, item: Page) -> Dict[str, Any]:
        row = item.model_dump(exclude={"text", "metadata", "prior_permalinks", "revisions"})
        row["page_text"] = item.text
        row["meta_items"] = self.meta_items_value(item.metadata)
        return row

    def _child_rows(self, item: Page):
        return (
            self.permalink_rows("page_id", item.id, item.prior_permalinks),
            self.revision_rows("page_id", item.id, item.revisions),
        )

    async def _load(
        self,
        *criteria,
        full: bool = False,
        with_text: bool = True,
        with_metadata: bool = True,
        window=None,
    ) -> List[Page]:
        query = select(page).where(*criteria).order_by(*BY_TITLE)
        if window is not None:
            query = query.offset(window[0]).limit(window[1])
        async with self.engine.connect() as conn:
            rows = (await conn.execute(query)).mappings().all()
            ids = [row["id"] for row in rows]
            permalinks: Dict[str, List[Any]] = {}
            revisions: Dict[str, List[Any]] = {}
            if full and ids:
                permalinks = group_rows(
                    (
                        await conn.execute(
                            select(page_permalink)
                            .where(page_permalink.c.page_id.in_(ids))
                            .order_by(page_permalink.c.page_id, page_permalink.c.seq)
                        )
                    ).mappings(),
                    "page_id",
                    lambda row: row["permalink"],
                )
                revisions = group_rows(
                    (
                        await conn.execute(
                            select(page_revision)
                            .where(page_revision.c.page_id.in_(ids))
                            .order_by(page_revision.c.page_id, page_revision.c.as_of.desc())
                        )
                    ).mappings(),
                    "page_id",
                    self.to_revision,
                )

        pages = []
        for row in rows:
            values = dict(row)
            text = values.pop("page_text")
            meta_items = values.pop("meta_items")
            values["text"] = text if with_text else ""
            values["metadata"] = (self.serializer.from_json_value(List[MetaItem], meta_items) or []) if with_metadata else []
            values["prior_permalinks"] = permalinks.get(row["id"], [])
            values["revisions"] = revisions.get(row["id"], [])
            pages.append(Page.model_validate(values))
        return pages

    async def _one(self, page_id: str, web_log_id: str, full: bool) -> Optional[Page]:
        found = await self._load(page.c.id == page_id, page.c.web_log_id == web_log_id, full=full)
        return found[0] if found else None

    @sql_operation("Page.add")
    async def add(self, item: Page) -> None:
        permalinks, revisions = self._child_rows(item)
        async with self.engine.begin() as conn:
            await conn.execute(page.insert().values(**self._to_row(item)))
            await self.replace_children(conn, page_permalink, "page_id", [], permalinks)
            await self.replace_children(conn, page_revision, "page_id", [], revisions)

    @sql_operation("Page.all")
    async def all(self, web_log_id: str) -> List[Page]:
        return await self._load(page.c.web_log_id == web_log_id, with_text=False, with_metadata=False)

    @sql_operation("Page.count_all")
    async def count_all(self, web_log_id: str) -> int:
        return await self.scalar(select(func.count()).select_from(page).where(page.c.web_log_id == web_log_id))

    @sql_operation("Page.count_listed")
    async def count_listed(self, web_log_id: str) -> int:
        return await self.scalar(
            select(func.count())
            .select_from(page)
            .where(page.c.web_log_id == web_log_id, page.c.show_in_page_list.is_(True))
        )

    @sql_operation("Page.delete")
    async def delete(self, page_id: str, web_log_id: str) -> bool:
        async with self.engine.begin() as conn:
            owned = await conn.scalar(
                select(func.count()).select_from(page).where(page.c.id == page_id, page.c.web_log_id == web_log_id)
            )
            if owned == 0:
                return False
            await conn.execute(delete(page_permalink).where(page_permalink.c.page_id == page_id))
            await conn.execute(delete(page_revision).where(page_revision.c.page_id == page_id))
            await conn.execute(delete(page).where(page.c.id == page_id))
        return True

    @sql_operation("Page.find_by_id")
    async def find_by_id(self, page_id: str, web_log_id: str) -> Optional[Page]:
        return await self._one(page_id, web_log_id, full=False)

    @sql_operation("Page.find_by_permalink")
    async def find_by_permalink(self, permalink: str, web_log_id: str) -> Optional[Page]:
        found = await self._load(page.c.permalink == permalink, page.c.web_log_id == web_log_id)
        return found[0] if found else None

    @sql_operation("Page.find_current_permalink")
    async def find_current_permalink(self, permalinks: List[str], web_log_id: str) -> Optional[str]:
        if not permalinks:
            return None
        return await self.scalar(
            select(page.c.permalink)
            .select_from(page.join(page_permalink, page_permalink.c.page_id == page.c.id))
            .where(page.c.web_log_id == web_log_id, page_permalink.c.permalink.in_(list(permalinks)))
            .limit(1)
        )

    @sql_operation("Page.find_full_by_id")
    async def find_full_by_id(self, page_id: str, web_log_id: str) -> Optional[Page]:
        return await self._one(page_id, web_log_id, full=True)

    @sql_operation("Page.find_full_by_web_log")
    async def find_full_by_web_log(self, web_log_id: str) -> List[Page]:
        return await self._load(page.c.web_log_id == web_log_id, full=True)

    @sql_operation("Page.find_listed")
    async def find_listed(self, web_log_id: str) -> List[Page]:
        return await self._load(
            page.c.web_log_id == web_log_id, page.c.show_in_page_list.is_(True), with_text=False
        )

    @sql_operation("Page.find_page_of_pages")
    async def find_page_of_pages(self, web_log_id: str, page_nbr: int) -> List[Page]:
        return await self._load(
            page.c.web_log_id == web_log_id,
            with_metadata=False,
            window=page_window(page_nbr, self.admin_page_size),
        )

    @sql_operation("Page.restore")
    async def restore(self, pages: List[Page]) -> RestoreReport:
        async def write(batch: List[Page]) -> None:
            permalinks: List[Dict[str, Any]] = []
            revisions: List[Dict[str, Any]] = []
            for item in batch:
                item_permalinks, item_revisions = self._child_rows(item)
                permalinks.extend(item_permalinks)
                revisions.extend(item_revisions)
            async with self.engine.begin() as conn:
                await conn.execute(page.insert(), [self._to_row(item) for item in batch])
                await self.replace_children(conn, page_permalink, "page_id", [], permalinks)
                await self.replace_children(conn, page_revision, "page_id", [], revisions)

        return await restore_in_batches("page", pages, self.batch_size, write)

    @sql_operation("Page.update")
    async def update(self, item: Page) -> bool:
        row = self._to_row(item)
        fields = ["title", "permalink", "updated_on", "show_in_page_list", "template", "page_text", "meta_items"]
        permalinks, revisions = self._child_rows(item)
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(page)
                .where(page.c.id == item.id, page.c.web_log_id == item.web_log_id)
                .values(**{field: row[field] for field in fields})
            )
            if result.rowcount == 0:
                return False
            await self.replace_children(conn, page_permalink, "page_id", [item.id], permalinks)
            await self.replace_children(conn, page_revision, "page_id", [item.id], revisions)
        return True

    @sql_operation("Page.update_prior_permalinks")
    async def update_prior_permalinks(self, page_id: str, web_log_id: str, permalinks: List[str]) -> bool:
        async with self.engine.begin() as conn:
            owned = await conn.scalar(
                select(func.count()).select_from(page).where(page.c.id == page_id, page.c.web_log_id == web_log_id)
            )
            if owned == 0:
                return False
            await self.replace_children(
                conn, page_permalink, "page_id", [page_id], self.permalink_rows("page_id", page_id, permalinks)
            )
        return True
