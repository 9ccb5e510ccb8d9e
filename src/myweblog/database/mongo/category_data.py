"""MongoDB implementation of `CategoryData`."""

import asyncio
from typing import List, Optional

from myweblog.data.hierarchy import build_hierarchy, subtree_ids, with_post_counts
from myweblog.data.interfaces import CategoryData
from myweblog.data.utils import restore_in_batches
from myweblog.database.mongo.collections import CATEGORY, POST
from myweblog.database.mongo.helpers import MongoPort, logger, mongo_operation, session_kwargs
from myweblog.models.results import CategoryDeleteResult, RestoreReport
from myweblog.models.view_models import DisplayCategory
from myweblog.models.weblog_models import Category, PostStatus


class MongoCategoryData(MongoPort, CategoryData):
    collection_name = CATEGORY

    @mongo_operation("Category.add")
    async def add(self, category: Category) -> None:
        await self.collection.insert_one(self.serializer.to_document(category))

    @mongo_operation("Category.count_all")
    async def count_all(self, web_log_id: str) -> int:
        return await self.scoped(web_log_id).count_documents({})

    @mongo_operation("Category.count_top_level")
    async def count_top_level(self, web_log_id: str) -> int:
        return await self.scoped(web_log_id).count_documents({"parent_id": None})

    @mongo_operation("Category.find_all_for_view")
    async def find_all_for_view(self, web_log_id: str) -> List[DisplayCategory]:
        categories = await self.to_models(Category, self.scoped(web_log_id).find({}))
        ordered = build_hierarchy(categories)
        posts = self.scoped(web_log_id, POST)

        async def count_for(category_id: str) -> int:
            return await posts.count_documents(
                {
                    "status": PostStatus.PUBLISHED.value,
                    "category_ids": {"$in": sorted(subtree_ids(categories, category_id))},
                }
            )

        counts = await asyncio.gather(*(count_for(category.id) for category in ordered))
        return with_post_counts(ordered, {category.id: count for category, count in zip(ordered, counts)})

    @mongo_operation("Category.find_by_id")
    async def find_by_id(self, category_id: str, web_log_id: str) -> Optional[Category]:
        document = await self.collection.find_one({"_id": category_id})
        return self.to_model(Category, self.owned(document, web_log_id))

    @mongo_operation("Category.find_by_web_log")
    async def find_by_web_log(self, web_log_id: str) -> List[Category]:
        return await self.to_models(Category, self.scoped(web_log_id).find({}).sort([("name", 1), ("_id", 1)]))

    @mongo_operation("Category.delete")
    async def delete(self, category_id: str, web_log_id: str) -> CategoryDeleteResult:
        category = await self.find_by_id(category_id, web_log_id)
        if category is None:
            return CategoryDeleteResult.NOT_FOUND

        categories = self.scoped(web_log_id)
        posts = self.scoped(web_log_id, POST)

        async def work(session) -> CategoryDeleteResult:
            kwargs = session_kwargs(session)
            children = await categories.count_documents({"parent_id": category_id}, **kwargs)
            if children > 0:
                await categories.update_many(
                    {"parent_id": category_id}, {"$set": {"parent_id": category.parent_id}}, **kwargs
                )
            await posts.update_many({"category_ids": category_id}, {"$pull": {"category_ids": category_id}}, **kwargs)
            await categories.delete_one({"_id": category_id}, **kwargs)
            return CategoryDeleteResult.REASSIGNED_CHILD_CATEGORIES if children > 0 else CategoryDeleteResult.DELETED

        result = await self.in_transaction(work)
        logger.info("Deleted category %s of web log %s (%s)", category_id, web_log_id, result.value)
        return result

    @mongo_operation("Category.restore")
    async def restore(self, categories: List[Category]) -> RestoreReport:
        return await restore_in_batches(
            "category",
            categories,
            self.batch_size,
            lambda batch: self.insert_batch([self.serializer.to_document(category) for category in batch]),
        )

    @mongo_operation("Category.update")
    async def update(self, category: Category) -> bool:
        result = await self.scoped(category.web_log_id).update_one(
            {"_id": category.id},
            {
                "$set": {
                    "name": category.name,
                    "slug": category.slug,
                    "description": category.description,
                    "parent_id": category.parent_id,
                }
            },
        )
        return result.matched_count > 0
