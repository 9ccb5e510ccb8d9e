"""
# SQL Backend

`SqlData` wires the SQL port implementations to one `AsyncEngine` (PostgreSQL through
`asyncpg`, SQLite through `aiosqlite`) and runs the relational start-up:

1. **Tables**: every table missing from the database is created, in foreign key order,
   each in its own transaction. A table created concurrently by another process counts
   as present.
2. **Indexes**: named indexes missing from tables that already existed are created.
3. **Migrations**: the shared version chain, with the version kept in `db_version`. A
   database whose tables were all created by this run is stamped with the current version;
   one holding tables but no version marker predates versioning and runs every migration.

```python
manager = SqlEngineManager(settings.SQL_DATABASE_URL)
data = SqlData(await manager.connect(), DocumentSerializer(), manager=manager)
report = await data.start_up()
```
"""

import time
from typing import List, Optional, Tuple

from sqlalchemy import delete, inspect, select, update
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.ext.asyncio import AsyncEngine

from myweblog.config import Settings, settings
from myweblog.data.interfaces import Data
from myweblog.data.migrations import CURRENT_DB_VERSION, MigrationRunner, build_steps
from myweblog.data.serialization import DocumentSerializer
from myweblog.database.sql.category_data import SqlCategoryData
from myweblog.database.sql.helpers import sql_operation
from myweblog.database.sql.page_data import SqlPageData
from myweblog.database.sql.post_data import SqlPostData
from myweblog.database.sql.tables import db_version, metadata, web_log
from myweblog.database.sql.tag_map_data import SqlTagMapData
from myweblog.database.sql.theme_data import SqlThemeAssetData, SqlThemeData
from myweblog.database.sql.upload_data import SqlUploadData
from myweblog.database.sql.web_log_data import SqlWebLogData
from myweblog.database.sql.web_log_user_data import SqlWebLogUserData
from myweblog.managers.logging_manager import get_logger
from myweblog.models.results import StartUpReport

logger = get_logger(prefix="[SqlStartUp]")


def _existing_schema(sync_conn) -> dict:
    inspector = inspect(sync_conn)
    return {
        name: {index["name"] for index in inspector.get_indexes(name)}
        for name in inspector.get_table_names()
    }


class SqlData(Data):
    """Relational `Data` implementation on a SQLAlchemy async engine."""

    def __init__(
        self,
        engine: AsyncEngine,
        serializer: DocumentSerializer,
        config: Optional[Settings] = None,
        manager=None,
    ):
        config = config or settings
        self.engine = engine
        self.serializer = serializer
        self.manager = manager
        batch_size = config.RESTORE_BATCH_SIZE
        self.category = SqlCategoryData(engine, serializer, batch_size)
        self.page = SqlPageData(engine, serializer, batch_size, admin_page_size=config.ADMIN_PAGE_SIZE)
        self.post = SqlPostData(engine, serializer, batch_size)
        self.tag_map = SqlTagMapData(engine, serializer, batch_size)
        self.theme = SqlThemeData(engine, serializer, batch_size)
        self.theme_asset = SqlThemeAssetData(engine, serializer, batch_size)
        self.upload = SqlUploadData(engine, serializer, batch_size, upload_batch_size=config.UPLOAD_RESTORE_BATCH_SIZE)
        self.web_log = SqlWebLogData(engine, serializer, batch_size)
        self.web_log_user = SqlWebLogUserData(engine, serializer, batch_size)

    async def _ensure_schema(self) -> Tuple[List[str], List[str]]:
        async with self.engine.connect() as conn:
            existing = await conn.run_sync(_existing_schema)

        created_tables: List[str] = []
        created_indexes: List[str] = []
        for table in metadata.sorted_tables:
            if table.name not in existing:
                try:
                    async with self.engine.begin() as conn:
                        await conn.run_sync(table.create, checkfirst=True)
                except (OperationalError, ProgrammingError) as e:
                    if "already exists" not in str(e).lower():
                        raise
                    logger.info("Table %s was created concurrently", table.name)
                    continue
                logger.info("Created table %s", table.name)
                created_tables.append(table.name)
                continue

            for index in table.indexes:
                if index.name in existing[table.name]:
                    continue
                try:
                    async with self.engine.begin() as conn:
                        await conn.run_sync(index.create, checkfirst=True)
                except (OperationalError, ProgrammingError) as e:
                    if "already exists" not in str(e).lower():
                        raise
                    continue
                logger.info("Created index %s on %s", index.name, table.name)
                created_indexes.append(index.name)
        return created_tables, created_indexes

    async def _read_version(self) -> Optional[str]:
        async with self.engine.connect() as conn:
            return await conn.scalar(select(db_version.c.id).limit(1))

    async def _write_version(self, version: str) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(delete(db_version))
            await conn.execute(db_version.insert().values(id=version))

    async def _add_redirect_rules(self) -> None:
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(web_log).where(web_log.c.redirect_rules.is_(None)).values(redirect_rules=[])
            )
        logger.info("Added empty redirect rules to %d web log(s)", result.rowcount)

    @sql_operation("Data.start_up")
    async def start_up(self) -> StartUpReport:
        start_time = time.time()
        logger.info("Starting relational start-up checks")

        tables, indexes = await self._ensure_schema()
        if set(tables) == {table.name for table in metadata.sorted_tables}:
            logger.info("Empty database; recording version %s", CURRENT_DB_VERSION)
            await self._write_version(CURRENT_DB_VERSION)
        runner = MigrationRunner(build_steps(self._add_redirect_rules), self._read_version, self._write_version)
        applied = await runner.run()

        report = StartUpReport(
            created_tables=tables,
            created_indexes=indexes,
            migrations_applied=applied,
            version=await self._read_version(),
        )
        logger.info(
            "Start-up completed in %.3fs: %d table(s), %d index(es), %d migration(s)",
            time.time() - start_time,
            len(tables),
            len(indexes),
            len(applied),
        )
        return report

    async def close(self) -> None:
        if self.manager is not None:
            await self.manager.disconnect()
        else:
            await self.engine.dispose()
