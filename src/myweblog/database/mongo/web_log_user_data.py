"""MongoDB implementation of `WebLogUserData`."""

from typing import List, Optional

from myweblog.data.interfaces import WebLogUserData
from myweblog.data.utils import restore_in_batches
from myweblog.database.mongo.collections import PAGE, POST, WEB_LOG_USER
from myweblog.database.mongo.helpers import MongoPort, mongo_operation
from myweblog.models.results import DataResult, RestoreReport
from myweblog.models.view_models import UserDisplayName
from myweblog.models.weblog_models import WebLogUser, utc_now

UPDATE_FIELDS = [
    "email",
    "first_name",
    "last_name",
    "preferred_name",
    "password_hash",
    "salt",
    "url",
    "access_level",
]


class MongoWebLogUserData(MongoPort, WebLogUserData):
    collection_name = WEB_LOG_USER

    @mongo_operation("WebLogUser.add")
    async def add(self, user: WebLogUser) -> None:
        await self.collection.insert_one(self.serializer.to_document(user))

    @mongo_operation("WebLogUser.delete")
    async def delete(self, user_id: str, web_log_id: str) -> DataResult:
        users = self.scoped(web_log_id)
        if await users.count_documents({"_id": user_id}) == 0:
            return DataResult.not_found(f"User {user_id} not found")

        pages = await self.scoped(web_log_id, PAGE).count_documents({"author_id": user_id})
        posts = await self.scoped(web_log_id, POST).count_documents({"author_id": user_id})
        if pages + posts > 0:
            return DataResult.blocked(f"User has pages ({pages}) or posts ({posts}); cannot delete")

        await users.delete_one({"_id": user_id})
        return DataResult.success(user_id)

    @mongo_operation("WebLogUser.find_by_email")
    async def find_by_email(self, email: str, web_log_id: str) -> Optional[WebLogUser]:
        return self.to_model(WebLogUser, await self.scoped(web_log_id).find_one({"email": email}))

    @mongo_operation("WebLogUser.find_by_id")
    async def find_by_id(self, user_id: str, web_log_id: str) -> Optional[WebLogUser]:
        document = await self.collection.find_one({"_id": user_id})
        return self.to_model(WebLogUser, self.owned(document, web_log_id))

    @mongo_operation("WebLogUser.find_by_web_log")
    async def find_by_web_log(self, web_log_id: str) -> List[WebLogUser]:
        users = await self.to_models(WebLogUser, self.scoped(web_log_id).find({}))
        return sorted(users, key=lambda user: (user.preferred_name.lower(), user.id))

    @mongo_operation("WebLogUser.find_names")
    async def find_names(self, user_ids: List[str], web_log_id: str) -> List[UserDisplayName]:
        if not user_ids:
            return []
        users = await self.to_models(WebLogUser, self.scoped(web_log_id).find({"_id": {"$in": list(user_ids)}}))
        return [UserDisplayName(id=user.id, display_name=user.display_name) for user in users]

    @mongo_operation("WebLogUser.restore")
    async def restore(self, users: List[WebLogUser]) -> RestoreReport:
        return await restore_in_batches(
            "user",
            users,
            self.batch_size,
            lambda batch: self.insert_batch([self.serializer.to_document(user) for user in batch]),
        )

    @mongo_operation("WebLogUser.set_last_seen")
    async def set_last_seen(self, user_id: str, web_log_id: str) -> None:
        await self.scoped(web_log_id).update_one({"_id": user_id}, {"$set": {"last_seen_on": utc_now()}})

    @mongo_operation("WebLogUser.update")
    async def update(self, user: WebLogUser) -> bool:
        document = self.serializer.to_document(user)
        result = await self.scoped(user.web_log_id).update_one(
            {"_id": user.id}, {"$set": {field: document[field] for field in UPDATE_FIELDS}}
        )
        return result.matched_count > 0
