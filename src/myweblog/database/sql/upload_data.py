"""SQL implementation of `UploadData`."""

from typing import List, Optional

from sqlalchemy import delete, select

from myweblog.data.interfaces import UploadData
from myweblog.data.utils import restore_in_batches
from myweblog.database.sql.helpers import SqlPort, sql_operation
from myweblog.database.sql.tables import upload
from myweblog.models.results import DataResult, RestoreReport
from myweblog.models.weblog_models import Upload

WITHOUT_DATA = [upload.c.id, upload.c.web_log_id, upload.c.path, upload.c.updated_on]


class SqlUploadData(SqlPort, UploadData):
    def __init__(self, *args, upload_batch_size: int = 5, **kwargs):
        super().__init__(*args, **kwargs)
        self.upload_batch_size = upload_batch_size

    async def _find(self, *criteria, with_data: bool = True) -> List[Upload]:
        columns = [upload] if with_data else WITHOUT_DATA
        rows = await self.fetch_all(select(*columns).where(*criteria).order_by(upload.c.path))
        return [Upload.model_validate(dict(row)) for row in rows]

    @sql_operation("Upload.add")
    async def add(self, item: Upload) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(upload.insert().values(**item.model_dump()))

    @sql_operation("Upload.delete")
    async def delete(self, upload_id: str, web_log_id: str) -> DataResult:
        key = (upload.c.id == upload_id, upload.c.web_log_id == web_log_id)
        async with self.engine.begin() as conn:
            path = await conn.scalar(select(upload.c.path).where(*key))
            if path is None:
                return DataResult.not_found(f"Upload {upload_id} not found")
            await conn.execute(delete(upload).where(*key))
        return DataResult.success(path)

    @sql_operation("Upload.find_by_path")
    async def find_by_path(self, path: str, web_log_id: str) -> Optional[Upload]:
        found = await self._find(upload.c.path == path, upload.c.web_log_id == web_log_id)
        return found[0] if found else None

    @sql_operation("Upload.find_by_web_log")
    async def find_by_web_log(self, web_log_id: str) -> List[Upload]:
        return await self._find(upload.c.web_log_id == web_log_id, with_data=False)

    @sql_operation("Upload.find_by_web_log_with_data")
    async def find_by_web_log_with_data(self, web_log_id: str) -> List[Upload]:
        return await self._find(upload.c.web_log_id == web_log_id)

    @sql_operation("Upload.restore")
    async def restore(self, uploads: List[Upload]) -> RestoreReport:
        async def write(batch: List[Upload]) -> None:
            async with self.engine.begin() as conn:
                await conn.execute(upload.insert(), [item.model_dump() for item in batch])

        return await restore_in_batches("upload", uploads, self.upload_batch_size, write)
