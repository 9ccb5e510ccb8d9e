"""MongoDB implementation of `PageData`."""

from typing import List, Optional

from myweblog.config import settings
from myweblog.data.interfaces import PageData
from myweblog.data.utils import page_window, restore_in_batches
from myweblog.database.mongo.collections import PAGE
from myweblog.database.mongo.helpers import WITHOUT_HISTORY, MongoPort, mongo_operation
from myweblog.models.results import RestoreReport
from myweblog.models.weblog_models import Page

# List views leave out the page text as well as its history
WITHOUT_TEXT = {"text": 0, "metadata": 0, **WITHOUT_HISTORY}


def _by_title(pages: List[Page]) -> List[Page]:
    return sorted(pages, key=lambda page: (page.title.lower(), page.id))


class MongoPageData(MongoPort, PageData):
    collection_name = PAGE

    def __init__(self, *args, admin_page_size: Optional[int] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.admin_page_size = admin_page_size or settings.ADMIN_PAGE_SIZE

    @mongo_operation("Page.add")
    async def add(self, page: Page) -> None:
        await self.collection.insert_one(self.serializer.to_document(page))

    @mongo_operation("Page.all")
    async def all(self, web_log_id: str) -> List[Page]:
        return _by_title(await self.to_models(Page, self.scoped(web_log_id).find({}, WITHOUT_TEXT)))

    @mongo_operation("Page.count_all")
    async def count_all(self, web_log_id: str) -> int:
        return await self.scoped(web_log_id).count_documents({})

    @mongo_operation("Page.count_listed")
    async def count_listed(self, web_log_id: str) -> int:
        return await self.scoped(web_log_id).count_documents({"show_in_page_list": True})

    @mongo_operation("Page.delete")
    async def delete(self, page_id: str, web_log_id: str) -> bool:
        result = await self.scoped(web_log_id).delete_one({"_id": page_id})
        return result.deleted_count > 0

    @mongo_operation("Page.find_by_id")
    async def find_by_id(self, page_id: str, web_log_id: str) -> Optional[Page]:
        document = await self.collection.find_one({"_id": page_id}, WITHOUT_HISTORY)
        return self.to_model(Page, self.owned(document, web_log_id))

    @mongo_operation("Page.find_by_permalink")
    async def find_by_permalink(self, permalink: str, web_log_id: str) -> Optional[Page]:
        document = await self.scoped(web_log_id).find_one({"permalink": permalink}, WITHOUT_HISTORY)
        return self.to_model(Page, document)

    @mongo_operation("Page.find_current_permalink")
    async def find_current_permalink(self, permalinks: List[str], web_log_id: str) -> Optional[str]:
        if not permalinks:
            return None
        document = await self.scoped(web_log_id).find_one(
            {"prior_permalinks": {"$in": list(permalinks)}}, {"permalink": 1}
        )
        return document["permalink"] if document else None

    @mongo_operation("Page.find_full_by_id")
    async def find_full_by_id(self, page_id: str, web_log_id: str) -> Optional[Page]:
        document = await self.collection.find_one({"_id": page_id})
        return self.to_model(Page, self.owned(document, web_log_id))

    @mongo_operation("Page.find_full_by_web_log")
    async def find_full_by_web_log(self, web_log_id: str) -> List[Page]:
        return await self.to_models(Page, self.scoped(web_log_id).find({}))

    @mongo_operation("Page.find_listed")
    async def find_listed(self, web_log_id: str) -> List[Page]:
        cursor = self.scoped(web_log_id).find({"show_in_page_list": True}, {"text": 0, **WITHOUT_HISTORY})
        return _by_title(await self.to_models(Page, cursor))

    @mongo_operation("Page.find_page_of_pages")
    async def find_page_of_pages(self, web_log_id: str, page_nbr: int) -> List[Page]:
        skip, limit = page_window(page_nbr, self.admin_page_size)
        cursor = self.scoped(web_log_id).aggregate(
            [
                {"$addFields": {"_title_sort": {"$toLower": "$title"}}},
                {"$sort": {"_title_sort": 1, "_id": 1}},
                {"$skip": skip},
                {"$limit": limit},
                {"$project": {"_title_sort": 0, "metadata": 0, **WITHOUT_HISTORY}},
            ]
        )
        return await self.to_models(Page, cursor)

    @mongo_operation("Page.restore")
    async def restore(self, pages: List[Page]) -> RestoreReport:
        return await restore_in_batches(
            "page",
            pages,
            self.batch_size,
            lambda batch: self.insert_batch([self.serializer.to_document(page) for page in batch]),
        )

    @mongo_operation("Page.update")
    async def update(self, page: Page) -> bool:
        document = self.serializer.to_document(page)
        fields = [
            "title",
            "permalink",
            "updated_on",
            "show_in_page_list",
            "template",
            "text",
            "prior_permalinks",
            "metadata",
            "revisions",
        ]
        result = await self.scoped(page.web_log_id).update_one(
            {"_id": page.id}, {"$set": {field: document[field] for field in fields}}
        )
        return result.matched_count > 0

    @mongo_operation("Page.update_prior_permalinks")
    async def update_prior_permalinks(self, page_id: str, web_log_id: str, permalinks: List[str]) -> bool:
        result = await self.scoped(web_log_id).update_one(
            {"_id": page_id}, {"$set": {"prior_permalinks": list(permalinks)}}
        )
        return result.matched_count > 0
