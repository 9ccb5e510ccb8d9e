"""
# MongoDB Backend

`MongoData` wires the MongoDB port implementations to one database and runs the
document-store start-up: collections, indexes, then version migrations. An empty database
is stamped with the current version instead; one holding content without a version marker
predates versioning and runs every migration.

```python
await db_manager.connect()
data = MongoData(
    db_manager.database,
    DocumentSerializer(),
    transactions_supported=db_manager.transactions_supported,
)
report = await data.start_up()
```
"""

import time
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from myweblog.config import Settings, settings
from myweblog.data.interfaces import Data
from myweblog.data.migrations import CURRENT_DB_VERSION, MigrationRunner, build_steps
from myweblog.data.serialization import DocumentSerializer
from myweblog.database.mongo.category_data import MongoCategoryData
from myweblog.database.mongo.collections import ALL_COLLECTIONS, DB_VERSION, WEB_LOG, ensure_schema
from myweblog.database.mongo.helpers import mongo_operation
from myweblog.database.mongo.page_data import MongoPageData
from myweblog.database.mongo.post_data import MongoPostData
from myweblog.database.mongo.tag_map_data import MongoTagMapData
from myweblog.database.mongo.theme_data import MongoThemeAssetData, MongoThemeData
from myweblog.database.mongo.upload_data import MongoUploadData
from myweblog.database.mongo.web_log_data import MongoWebLogData
from myweblog.database.mongo.web_log_user_data import MongoWebLogUserData
from myweblog.managers.logging_manager import get_logger
from myweblog.models.results import StartUpReport

logger = get_logger(prefix="[MongoStartUp]")

VERSION_DOCUMENT_ID = "db_version"


class MongoData(Data):
    """Document-store `Data` implementation on a Motor database."""

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        serializer: DocumentSerializer,
        transactions_supported: bool = False,
        config: Optional[Settings] = None,
        manager=None,
    ):
        config = config or settings
        self.database = database
        self.serializer = serializer
        self.manager = manager
        common = {
            "transactions_supported": bool(transactions_supported),
            "batch_size": config.RESTORE_BATCH_SIZE,
        }
        self.category = MongoCategoryData(database, serializer, **common)
        self.page = MongoPageData(database, serializer, admin_page_size=config.ADMIN_PAGE_SIZE, **common)
        self.post = MongoPostData(database, serializer, **common)
        self.tag_map = MongoTagMapData(database, serializer, **common)
        self.theme = MongoThemeData(database, serializer, **common)
        self.theme_asset = MongoThemeAssetData(database, serializer, **common)
        self.upload = MongoUploadData(
            database, serializer, upload_batch_size=config.UPLOAD_RESTORE_BATCH_SIZE, **common
        )
        self.web_log = MongoWebLogData(database, serializer, **common)
        self.web_log_user = MongoWebLogUserData(database, serializer, **common)

    async def _read_version(self) -> Optional[str]:
        document = await self.database[DB_VERSION].find_one({"_id": VERSION_DOCUMENT_ID})
        return document["version"] if document else None

    async def _write_version(self, version: str) -> None:
        await self.database[DB_VERSION].replace_one(
            {"_id": VERSION_DOCUMENT_ID}, {"_id": VERSION_DOCUMENT_ID, "version": version}, upsert=True
        )

    async def _add_redirect_rules(self) -> None:
        result = await self.database[WEB_LOG].update_many(
            {"redirect_rules": {"$exists": False}}, {"$set": {"redirect_rules": []}}
        )
        logger.info("Added empty redirect rules to %d web log(s)", result.modified_count)

    @mongo_operation("Data.start_up")
    async def start_up(self) -> StartUpReport:
        start_time = time.time()
        logger.info("Starting document store start-up checks")

        collections, indexes = await ensure_schema(self.database)
        if set(collections) == set(ALL_COLLECTIONS):
            logger.info("Empty database; recording version %s", CURRENT_DB_VERSION)
            await self._write_version(CURRENT_DB_VERSION)
        runner = MigrationRunner(build_steps(self._add_redirect_rules), self._read_version, self._write_version)
        applied = await runner.run()

        report = StartUpReport(
            created_tables=collections,
            created_indexes=indexes,
            migrations_applied=applied,
            version=await self._read_version(),
        )
        logger.info(
            "Start-up completed in %.3fs: %d collection(s), %d index(es), %d migration(s)",
            time.time() - start_time,
            len(collections),
            len(indexes),
            len(applied),
        )
        return report

    async def close(self) -> None:
        if self.manager is not None:
            await self.manager.disconnect()
