"""SQL implementation of `CategoryData`."""

from typing import List, Optional

from sqlalchemy import delete, func, select, update

from myweblog.data.hierarchy import build_hierarchy, subtree_ids, with_post_counts
from myweblog.data.interfaces import CategoryData
from myweblog.data.utils import restore_in_batches
from myweblog.database.sql.helpers import SqlPort, logger, sql_operation
from myweblog.database.sql.tables import category, post, post_category
from myweblog.models.results import CategoryDeleteResult, RestoreReport
from myweblog.models.view_models import DisplayCategory
from myweblog.models.weblog_models import Category, PostStatus


def _row(item: Category) -> dict:
    return item.model_dump()


class SqlCategoryData(SqlPort, CategoryData):
    @sql_operation("Category.add")
    async def add(self, item: Category) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(category.insert().values(**_row(item)))

    @sql_operation("Category.count_all")
    async def count_all(self, web_log_id: str) -> int:
        return await self.scalar(select(func.count()).select_from(category).where(category.c.web_log_id == web_log_id))

    @sql_operation("Category.count_top_level")
    async def count_top_level(self, web_log_id: str) -> int:
        return await self.scalar(
            select(func.count())
            .select_from(category)
            .where(category.c.web_log_id == web_log_id, category.c.parent_id.is_(None))
        )

    @sql_operation("Category.find_all_for_view")
    async def find_all_for_view(self, web_log_id: str) -> List[DisplayCategory]:
        categories = await self._find(category.c.web_log_id == web_log_id)
        ordered = build_hierarchy(categories)
        counts = {}
        async with self.engine.connect() as conn:
            for node in ordered:
                query = (
                    select(func.count(func.distinct(post.c.id)))
                    .select_from(post.join(post_category, post_category.c.post_id == post.c.id))
                    .where(
                        post.c.web_log_id == web_log_id,
                        post.c.status == PostStatus.PUBLISHED.value,
                        post_category.c.category_id.in_(sorted(subtree_ids(categories, node.id))),
                    )
                )
                counts[node.id] = await conn.scalar(query)
        return with_post_counts(ordered, counts)

    async def _find(self, *criteria) -> List[Category]:
        rows = await self.fetch_all(select(category).where(*criteria).order_by(category.c.name, category.c.id))
        return [Category.model_validate(dict(row)) for row in rows]

    @sql_operation("Category.find_by_id")
    async def find_by_id(self, category_id: str, web_log_id: str) -> Optional[Category]:
        found = await self._find(category.c.id == category_id, category.c.web_log_id == web_log_id)
        return found[0] if found else None

    @sql_operation("Category.find_by_web_log")
    async def find_by_web_log(self, web_log_id: str) -> List[Category]:
        return await self._find(category.c.web_log_id == web_log_id)

    @sql_operation("Category.delete")
    async def delete(self, category_id: str, web_log_id: str) -> CategoryDeleteResult:
        existing = await self.find_by_id(category_id, web_log_id)
        if existing is None:
            return CategoryDeleteResult.NOT_FOUND

        async with self.engine.begin() as conn:
            children = await conn.execute(
                update(category)
                .where(category.c.web_log_id == web_log_id, category.c.parent_id == category_id)
                .values(parent_id=existing.parent_id)
            )
            await conn.execute(delete(post_category).where(post_category.c.category_id == category_id))
            await conn.execute(delete(category).where(category.c.id == category_id))

        result = (
            CategoryDeleteResult.REASSIGNED_CHILD_CATEGORIES if children.rowcount > 0 else CategoryDeleteResult.DELETED
        )
        logger.info("Deleted category %s of web log %s (%s)", category_id, web_log_id, result.value)
        return result

    @sql_operation("Category.restore")
    async def restore(self, categories: List[Category]) -> RestoreReport:
        async def write(batch: List[Category]) -> None:
            async with self.engine.begin() as conn:
                await conn.execute(category.insert(), [_row(item) for item in batch])

        return await restore_in_batches("category", categories, self.batch_size, write)

    @sql_operation("Category.update")
    async def update(self, item: Category) -> bool:
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(category)
                .where(category.c.id == item.id, category.c.web_log_id == item.web_log_id)
                .values(name=item.name, slug=item.slug, description=item.description, parent_id=item.parent_id)
            )
        return result.rowcount > 0
