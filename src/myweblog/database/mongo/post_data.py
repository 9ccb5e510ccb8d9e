"""MongoDB implementation of `PostData`."""

from datetime import datetime
from typing import List, Optional, Tuple

from myweblog.data.interfaces import PostData
from myweblog.data.utils import page_window, restore_in_batches
from myweblog.database.mongo.collections import COMMENT, POST
from myweblog.database.mongo.helpers import WITHOUT_HISTORY, MongoPort, logger, mongo_operation
from myweblog.models.results import RestoreReport
from myweblog.models.weblog_models import Post, PostStatus, as_utc

PUBLISHED = PostStatus.PUBLISHED.value


class MongoPostData(MongoPort, PostData):
    collection_name = POST

    async def _page_of(self, web_log_id: str, query: dict, page_nbr: int, posts_per_page: int) -> List[Post]:
        skip, limit = page_window(page_nbr, posts_per_page)
        cursor = (
            self.scoped(web_log_id)
            .find({"status": PUBLISHED, **query}, WITHOUT_HISTORY)
            .sort([("published_on", -1), ("_id", 1)])
            .skip(skip)
            .limit(limit)
        )
        return await self.to_models(Post, cursor)

    @mongo_operation("Post.add")
    async def add(self, post: Post) -> None:
        await self.collection.insert_one(self.serializer.to_document(post))

    @mongo_operation("Post.count_by_status")
    async def count_by_status(self, status: PostStatus, web_log_id: str) -> int:
        return await self.scoped(web_log_id).count_documents({"status": PostStatus(status).value})

    @mongo_operation("Post.delete")
    async def delete(self, post_id: str, web_log_id: str) -> bool:
        posts = self.scoped(web_log_id)
        if await posts.count_documents({"_id": post_id}) == 0:
            return False
        comments = await self.database[COMMENT].delete_many({"post_id": post_id})
        result = await posts.delete_one({"_id": post_id})
        logger.debug("Deleted post %s with %d comment(s)", post_id, comments.deleted_count)
        return result.deleted_count > 0

    @mongo_operation("Post.find_by_id")
    async def find_by_id(self, post_id: str, web_log_id: str) -> Optional[Post]:
        document = await self.collection.find_one({"_id": post_id}, WITHOUT_HISTORY)
        return self.to_model(Post, self.owned(document, web_log_id))

    @mongo_operation("Post.find_by_permalink")
    async def find_by_permalink(self, permalink: str, web_log_id: str) -> Optional[Post]:
        document = await self.scoped(web_log_id).find_one({"permalink": permalink}, WITHOUT_HISTORY)
        return self.to_model(Post, document)

    @mongo_operation("Post.find_current_permalink")
    async def find_current_permalink(self, permalinks: List[str], web_log_id: str) -> Optional[str]:
        if not permalinks:
            return None
        document = await self.scoped(web_log_id).find_one(
            {"prior_permalinks": {"$in": list(permalinks)}}, {"permalink": 1}
        )
        return document["permalink"] if document else None

    @mongo_operation("Post.find_full_by_id")
    async def find_full_by_id(self, post_id: str, web_log_id: str) -> Optional[Post]:
        document = await self.collection.find_one({"_id": post_id})
        return self.to_model(Post, self.owned(document, web_log_id))

    @mongo_operation("Post.find_full_by_web_log")
    async def find_full_by_web_log(self, web_log_id: str) -> List[Post]:
        return await self.to_models(Post, self.scoped(web_log_id).find({}))

    @mongo_operation("Post.find_page_of_categorized_posts")
    async def find_page_of_categorized_posts(
        self, web_log_id: str, category_ids: List[str], page_nbr: int, posts_per_page: int
    ) -> List[Post]:
        if not category_ids:
            return []
        return await self._page_of(web_log_id, {"category_ids": {"$in": list(category_ids)}}, page_nbr, posts_per_page)

    @mongo_operation("Post.find_page_of_posts")
    async def find_page_of_posts(self, web_log_id: str, page_nbr: int, posts_per_page: int) -> List[Post]:
        skip, limit = page_window(page_nbr, posts_per_page)
        cursor = self.scoped(web_log_id).aggregate(
            [
                {"$addFields": {"_sort_on": {"$ifNull": ["$published_on", "$updated_on"]}}},
                {"$sort": {"_sort_on": -1, "_id": 1}},
                {"$skip": skip},
                {"$limit": limit},
                {"$project": {"_sort_on": 0, "text": 0, **WITHOUT_HISTORY}},
            ]
        )
        return await self.to_models(Post, cursor)

    @mongo_operation("Post.find_page_of_published_posts")
    async def find_page_of_published_posts(self, web_log_id: str, page_nbr: int, posts_per_page: int) -> List[Post]:
        return await self._page_of(web_log_id, {}, page_nbr, posts_per_page)

    @mongo_operation("Post.find_page_of_tagged_posts")
    async def find_page_of_tagged_posts(
        self, web_log_id: str, tag: str, page_nbr: int, posts_per_page: int
    ) -> List[Post]:
        return await self._page_of(web_log_id, {"tags": tag.lower()}, page_nbr, posts_per_page)

    @mongo_operation("Post.find_surrounding_posts")
    async def find_surrounding_posts(
        self, web_log_id: str, published_on: datetime
    ) -> Tuple[Optional[Post], Optional[Post]]:
        posts = self.scoped(web_log_id)
        published_on = as_utc(published_on)
        older = await self.to_models(
            Post,
            posts.find({"status": PUBLISHED, "published_on": {"$lt": published_on}}, WITHOUT_HISTORY)
            .sort("published_on", -1)
            .limit(1),
        )
        newer = await self.to_models(
            Post,
            posts.find({"status": PUBLISHED, "published_on": {"$gt": published_on}}, WITHOUT_HISTORY)
            .sort("published_on", 1)
            .limit(1),
        )
        return (older[0] if older else None, newer[0] if newer else None)

    @mongo_operation("Post.restore")
    async def restore(self, posts: List[Post]) -> RestoreReport:
        return await restore_in_batches(
            "post",
            posts,
            self.batch_size,
            lambda batch: self.insert_batch([self.serializer.to_document(post) for post in batch]),
        )

    @mongo_operation("Post.update")
    async def update(self, post: Post) -> bool:
        result = await self.scoped(post.web_log_id).replace_one({"_id": post.id}, self.serializer.to_document(post))
        return result.matched_count > 0

    @mongo_operation("Post.update_prior_permalinks")
    async def update_prior_permalinks(self, post_id: str, web_log_id: str, permalinks: List[str]) -> bool:
        result = await self.scoped(web_log_id).update_one(
            {"_id": post_id}, {"$set": {"prior_permalinks": list(permalinks)}}
        )
        return result.matched_count > 0
