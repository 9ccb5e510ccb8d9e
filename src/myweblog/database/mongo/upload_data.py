"""MongoDB implementation of `UploadData`."""

from typing import List, Optional

from myweblog.data.interfaces import UploadData
from myweblog.data.utils import restore_in_batches
from myweblog.database.mongo.collections import UPLOAD
from myweblog.database.mongo.helpers import WITHOUT_DATA, MongoPort, mongo_operation
from myweblog.models.results import DataResult, RestoreReport
from myweblog.models.weblog_models import Upload


class MongoUploadData(MongoPort, UploadData):
    collection_name = UPLOAD

    def __init__(self, *args, upload_batch_size: int = 5, **kwargs):
        super().__init__(*args, **kwargs)
        self.upload_batch_size = upload_batch_size

    @mongo_operation("Upload.add")
    async def add(self, upload: Upload) -> None:
        await self.collection.insert_one(self.serializer.to_document(upload))

    @mongo_operation("Upload.delete")
    async def delete(self, upload_id: str, web_log_id: str) -> DataResult:
        uploads = self.scoped(web_log_id)
        document = await uploads.find_one({"_id": upload_id}, {"path": 1})
        if document is None:
            return DataResult.not_found(f"Upload {upload_id} not found")
        await uploads.delete_one({"_id": upload_id})
        return DataResult.success(document["path"])

    @mongo_operation("Upload.find_by_path")
    async def find_by_path(self, path: str, web_log_id: str) -> Optional[Upload]:
        return self.to_model(Upload, await self.scoped(web_log_id).find_one({"path": path}))

    @mongo_operation("Upload.find_by_web_log")
    async def find_by_web_log(self, web_log_id: str) -> List[Upload]:
        return await self.to_models(Upload, self.scoped(web_log_id).find({}, WITHOUT_DATA).sort("path", 1))

    @mongo_operation("Upload.find_by_web_log_with_data")
    async def find_by_web_log_with_data(self, web_log_id: str) -> List[Upload]:
        return await self.to_models(Upload, self.scoped(web_log_id).find({}).sort("path", 1))

    @mongo_operation("Upload.restore")
    async def restore(self, uploads: List[Upload]) -> RestoreReport:
        return await restore_in_batches(
            "upload",
            uploads,
            self.upload_batch_size,
            lambda batch: self.insert_batch([self.serializer.to_document(upload) for upload in batch]),
        )
