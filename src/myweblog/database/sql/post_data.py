"""
SQL implementation of `PostData`.

A post row carries its scalar fields plus JSON `meta_items` and `episode`; category ids,
tags, prior permalinks and revisions live in child tables. Child rows for a page of
posts are loaded with one `IN` query per child table.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from myweblog.data.interfaces import PostData
from myweblog.data.utils import page_window, restore_in_batches
from myweblog.database.sql.helpers import SqlPort, group_rows, logger, sql_operation
from myweblog.database.sql.tables import (
    post,
    post_category,
    post_comment,
    post_permalink,
    post_revision,
    post_tag,
)
from myweblog.models.results import RestoreReport
from myweblog.models.weblog_models import Episode, MetaItem, Post, PostStatus, as_utc

PUBLISHED = PostStatus.PUBLISHED.value
NEWEST_FIRST = (post.c.published_on.desc(), post.c.id)
CHILD_TABLES = (post_category, post_tag, post_permalink, post_revision)


class SqlPostData(SqlPort, PostData):
    def _to_row(self, item: Post) -> Dict[str, Any]:
        row = item.model_dump(
            exclude={"text", "metadata", "episode", "category_ids", "tags", "prior_permalinks", "revisions"}
        )
        row["post_text"] = item.text
        row["meta_items"] = self.meta_items_value(item.metadata)
        row["episode"] = self.serializer.to_json_value(item.episode)
        return row

    def _child_rows(self, item: Post) -> Dict[Any, List[Dict[str, Any]]]:
        return {
            post_category: [
                {"post_id": item.id, "category_id": category_id, "seq": seq}
                for seq, category_id in enumerate(item.category_ids)
            ],
            post_tag: [{"post_id": item.id, "tag": tag, "seq": seq} for seq, tag in enumerate(item.tags)],
            post_permalink: self.permalink_rows("post_id", item.id, item.prior_permalinks),
            post_revision: self.revision_rows("post_id", item.id, item.revisions),
        }

    async def _write_children(self, conn: AsyncConnection, items: List[Post], replace: bool) -> None:
        rows: Dict[Any, List[Dict[str, Any]]] = {table: [] for table in CHILD_TABLES}
        for item in items:
            for table, child_rows in self._child_rows(item).items():
                rows[table].extend(child_rows)
        parent_ids = [item.id for item in items] if replace else []
        for table in CHILD_TABLES:
            await self.replace_children(conn, table, "post_id", parent_ids, rows[table])

    async def _children(self, conn: AsyncConnection, table, ids: List[str], value, *order) -> Dict[str, List[Any]]:
        rows = await conn.execute(select(table).where(table.c.post_id.in_(ids)).order_by(table.c.post_id, *order))
        return group_rows(rows.mappings(), "post_id", value)

    async def _load(self, query, full: bool = False, with_text: bool = True) -> List[Post]:
        async with self.engine.connect() as conn:
            rows = (await conn.execute(query)).mappings().all()
            ids = [row["id"] for row in rows]
            if not ids:
                return []
            categories = await self._children(
                conn, post_category, ids, lambda row: row["category_id"], post_category.c.seq
            )
            tags = await self._children(conn, post_tag, ids, lambda row: row["tag"], post_tag.c.seq)
            permalinks: Dict[str, List[Any]] = {}
            revisions: Dict[str, List[Any]] = {}
            if full:
                permalinks = await self._children(
                    conn, post_permalink, ids, lambda row: row["permalink"], post_permalink.c.seq
                )
                revisions = await self._children(
                    conn, post_revision, ids, self.to_revision, post_revision.c.as_of.desc()
                )

        posts = []
        for row in rows:
            values = dict(row)
            text = values.pop("post_text")
            values["text"] = text if with_text else ""
            values["metadata"] = self.serializer.from_json_value(List[MetaItem], values.pop("meta_items")) or []
            values["episode"] = self.serializer.from_json_value(Episode, values["episode"])
            values["category_ids"] = categories.get(row["id"], [])
            values["tags"] = tags.get(row["id"], [])
            values["prior_permalinks"] = permalinks.get(row["id"], [])
            values["revisions"] = revisions.get(row["id"], [])
            posts.append(Post.model_validate(values))
        return posts

    async def _page_of(self, web_log_id: str, page_nbr: int, posts_per_page: int, *criteria) -> List[Post]:
        skip, limit = page_window(page_nbr, posts_per_page)
        query = (
            select(post)
            .where(post.c.web_log_id == web_log_id, post.c.status == PUBLISHED, *criteria)
            .order_by(*NEWEST_FIRST)
            .offset(skip)
            .limit(limit)
        )
        return await self._load(query)

    async def _owned(self, conn: AsyncConnection, post_id: str, web_log_id: str) -> bool:
        count = await conn.scalar(
            select(func.count()).select_from(post).where(post.c.id == post_id, post.c.web_log_id == web_log_id)
        )
        return count > 0

    @sql_operation("Post.add")
    async def add(self, item: Post) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(post.insert().values(**self._to_row(item)))
            await self._write_children(conn, [item], replace=False)

    @sql_operation("Post.count_by_status")
    async def count_by_status(self, status: PostStatus, web_log_id: str) -> int:
        return await self.scalar(
            select(func.count())
            .select_from(post)
            .where(post.c.web_log_id == web_log_id, post.c.status == PostStatus(status).value)
        )

    @sql_operation("Post.delete")
    async def delete(self, post_id: str, web_log_id: str) -> bool:
        async with self.engine.begin() as conn:
            if not await self._owned(conn, post_id, web_log_id):
                return False
            comments = await conn.execute(delete(post_comment).where(post_comment.c.post_id == post_id))
            for table in CHILD_TABLES:
                await conn.execute(delete(table).where(table.c.post_id == post_id))
            await conn.execute(delete(post).where(post.c.id == post_id))
        logger.debug("Deleted post %s with %d comment(s)", post_id, comments.rowcount)
        return True

    @sql_operation("Post.find_by_id")
    async def find_by_id(self, post_id: str, web_log_id: str) -> Optional[Post]:
        found = await self._load(select(post).where(post.c.id == post_id, post.c.web_log_id == web_log_id))
        return found[0] if found else None

    @sql_operation("Post.find_by_permalink")
    async def find_by_permalink(self, permalink: str, web_log_id: str) -> Optional[Post]:
        found = await self._load(select(post).where(post.c.permalink == permalink, post.c.web_log_id == web_log_id))
        return found[0] if found else None

    @sql_operation("Post.find_current_permalink")
    async def find_current_permalink(self, permalinks: List[str], web_log_id: str) -> Optional[str]:
        if not permalinks:
            return None
        return await self.scalar(
            select(post.c.permalink)
            .select_from(post.join(post_permalink, post_permalink.c.post_id == post.c.id))
            .where(post.c.web_log_id == web_log_id, post_permalink.c.permalink.in_(list(permalinks)))
            .limit(1)
        )

    @sql_operation("Post.find_full_by_id")
    async def find_full_by_id(self, post_id: str, web_log_id: str) -> Optional[Post]:
        found = await self._load(
            select(post).where(post.c.id == post_id, post.c.web_log_id == web_log_id), full=True
        )
        return found[0] if found else None

    @sql_operation("Post.find_full_by_web_log")
    async def find_full_by_web_log(self, web_log_id: str) -> List[Post]:
        return await self._load(select(post).where(post.c.web_log_id == web_log_id).order_by(post.c.id), full=True)

    @sql_operation("Post.find_page_of_categorized_posts")
    async def find_page_of_categorized_posts(
        self, web_log_id: str, category_ids: List[str], page_nbr: int, posts_per_page: int
    ) -> List[Post]:
        if not category_ids:
            return []
        in_categories = select(post_category.c.post_id).where(post_category.c.category_id.in_(list(category_ids)))
        return await self._page_of(web_log_id, page_nbr, posts_per_page, post.c.id.in_(in_categories))

    @sql_operation("Post.find_page_of_posts")
    async def find_page_of_posts(self, web_log_id: str, page_nbr: int, posts_per_page: int) -> List[Post]:
        skip, limit = page_window(page_nbr, posts_per_page)
        query = (
            select(post)
            .where(post.c.web_log_id == web_log_id)
            .order_by(func.coalesce(post.c.published_on, post.c.updated_on).desc(), post.c.id)
            .offset(skip)
            .limit(limit)
        )
        return await self._load(query, with_text=False)

    @sql_operation("Post.find_page_of_published_posts")
    async def find_page_of_published_posts(self, web_log_id: str, page_nbr: int, posts_per_page: int) -> List[Post]:
        return await self._page_of(web_log_id, page_nbr, posts_per_page)

    @sql_operation("Post.find_page_of_tagged_posts")
    async def find_page_of_tagged_posts(
        self, web_log_id: str, tag: str, page_nbr: int, posts_per_page: int
    ) -> List[Post]:
        tagged = select(post_tag.c.post_id).where(post_tag.c.tag == tag.lower())
        return await self._page_of(web_log_id, page_nbr, posts_per_page, post.c.id.in_(tagged))

    @sql_operation("Post.find_surrounding_posts")
    async def find_surrounding_posts(
        self, web_log_id: str, published_on: datetime
    ) -> Tuple[Optional[Post], Optional[Post]]:
        published_on = as_utc(published_on)
        published = select(post).where(post.c.web_log_id == web_log_id, post.c.status == PUBLISHED)
        older = await self._load(
            published.where(post.c.published_on < published_on).order_by(post.c.published_on.desc()).limit(1)
        )
        newer = await self._load(
            published.where(post.c.published_on > published_on).order_by(post.c.published_on.asc()).limit(1)
        )
        return (older[0] if older else None, newer[0] if newer else None)

    @sql_operation("Post.restore")
    async def restore(self, posts: List[Post]) -> RestoreReport:
        async def write(batch: List[Post]) -> None:
            async with self.engine.begin() as conn:
                await conn.execute(post.insert(), [self._to_row(item) for item in batch])
                await self._write_children(conn, batch, replace=False)

        return await restore_in_batches("post", posts, self.batch_size, write)

    @sql_operation("Post.update")
    async def update(self, item: Post) -> bool:
        row = self._to_row(item)
        del row["id"]
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(post).where(post.c.id == item.id, post.c.web_log_id == item.web_log_id).values(**row)
            )
            if result.rowcount == 0:
                return False
            await self._write_children(conn, [item], replace=True)
        return True

    @sql_operation("Post.update_prior_permalinks")
    async def update_prior_permalinks(self, post_id: str, web_log_id: str, permalinks: List[str]) -> bool:
        async with self.engine.begin() as conn:
            if not await self._owned(conn, post_id, web_log_id):
                return False
            await self.replace_children(
                conn, post_permalink, "post_id", [post_id], self.permalink_rows("post_id", post_id, permalinks)
            )
        return True
