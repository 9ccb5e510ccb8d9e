import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import create_async_engine

from myweblog.data.migrations import CURRENT_DB_VERSION
from myweblog.data.serialization import DocumentSerializer
from myweblog.database.mongo import MongoData
from myweblog.database.sql import SqlData
from myweblog.database.sql.tables import db_version, metadata, web_log
from myweblog.exceptions import MigrationRequiredError
from myweblog.models.weblog_models import WebLog


@pytest.mark.asyncio
async def test_second_start_up_changes_nothing(data):
    report = await data.start_up()

    assert report.changed is False
    assert report.created_tables == []
    assert report.migrations_applied == []
    assert report.version == CURRENT_DB_VERSION


# ============================================================================
# Relational start-up and migrations
# ============================================================================


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'start-up.db'}")
    yield engine
    await engine.dispose()


@pytest.mark.asyncio
async def test_fresh_database_is_stamped_current(engine):
    report = await SqlData(engine, DocumentSerializer()).start_up()

    assert set(report.created_tables) == {table.name for table in metadata.sorted_tables}
    assert report.migrations_applied == []
    assert report.version == CURRENT_DB_VERSION


@pytest.mark.asyncio
async def test_missing_index_is_recreated(engine):
    data = SqlData(engine, DocumentSerializer())
    await data.start_up()
    async with engine.begin() as conn:
        await conn.exec_driver_sql("DROP INDEX post_status_published_idx")

    report = await data.start_up()

    assert report.created_tables == []
    assert report.created_indexes == ["post_status_published_idx"]


@pytest.mark.asyncio
async def test_v2_database_gets_redirect_rules(engine):
    data = SqlData(engine, DocumentSerializer())
    await data.start_up()
    await data.web_log.add(WebLog(id="wl-old", name="Old", slug="old", url_base="https://old.example.com"))
    async with engine.begin() as conn:
        await conn.execute(update(web_log).values(redirect_rules=None))
        await conn.execute(delete(db_version))
        await conn.execute(db_version.insert().values(id="v2"))

    report = await data.start_up()

    assert report.migrations_applied == ["v2.1", "v2.1.1"]
    assert report.version == CURRENT_DB_VERSION
    async with engine.connect() as conn:
        assert await conn.scalar(select(web_log.c.redirect_rules)) == []


@pytest.mark.asyncio
async def test_unversioned_database_runs_whole_chain(engine):
    data = SqlData(engine, DocumentSerializer())
    await data.start_up()
    async with engine.begin() as conn:
        await conn.execute(delete(db_version))

    report = await data.start_up()

    assert report.migrations_applied == ["v2-rc2", "v2", "v2.1", "v2.1.1"]


@pytest.mark.asyncio
async def test_unknown_version_needs_manual_migration(engine):
    data = SqlData(engine, DocumentSerializer())
    await data.start_up()
    async with engine.begin() as conn:
        await conn.execute(delete(db_version))
        await conn.execute(db_version.insert().values(id="v1.5"))

    with pytest.raises(MigrationRequiredError) as exc_info:
        await data.start_up()
    assert exc_info.value.version == "v1.5"


@pytest.mark.asyncio
async def test_content_without_version_table_runs_whole_chain(engine):
    data = SqlData(engine, DocumentSerializer())
    await data.start_up()
    await data.web_log.add(WebLog(id="wl-old", name="Old", slug="old", url_base="https://old.example.com"))
    async with engine.begin() as conn:
        await conn.execute(update(web_log).values(redirect_rules=None))
        await conn.run_sync(db_version.drop)

    report = await data.start_up()

    assert report.created_tables == ["db_version"]
    assert report.migrations_applied == ["v2-rc2", "v2", "v2.1", "v2.1.1"]
    assert report.version == CURRENT_DB_VERSION
    async with engine.connect() as conn:
        assert await conn.scalar(select(web_log.c.redirect_rules)) == []


# ============================================================================
# Document store start-up and migrations
# ============================================================================


@pytest.mark.asyncio
async def test_empty_document_store_is_stamped_current():
    database = AsyncMongoMockClient()["fresh"]

    report = await MongoData(database, DocumentSerializer()).start_up()

    assert report.migrations_applied == []
    assert report.version == CURRENT_DB_VERSION


@pytest.mark.asyncio
async def test_document_store_without_version_marker_runs_whole_chain():
    database = AsyncMongoMockClient()["legacy"]
    await database["web_log"].insert_one(
        {"_id": "wl-old", "name": "Old", "slug": "old", "url_base": "https://old.example.com"}
    )

    report = await MongoData(database, DocumentSerializer()).start_up()

    assert "web_log" not in report.created_tables
    assert report.migrations_applied == ["v2-rc2", "v2", "v2.1", "v2.1.1"]
    assert report.version == CURRENT_DB_VERSION
    stored = await database["web_log"].find_one({"_id": "wl-old"})
    assert stored["redirect_rules"] == []
