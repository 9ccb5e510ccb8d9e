from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from myweblog.config import Settings
from myweblog.data.factory import create_data
from myweblog.database.mongo import MongoData
from myweblog.database.sql import SqlData


@pytest.mark.asyncio
async def test_sql_backend(tmp_path):
    config = Settings(DATA_BACKEND="sql", SQL_DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'factory.db'}")

    data = await create_data(config)
    try:
        assert isinstance(data, SqlData)
        report = await data.start_up()
        assert report.version == "v2.1.1"
    finally:
        await data.close()
    assert data.manager.engine is None


@pytest.mark.asyncio
async def test_mongodb_backend_uses_its_own_manager():
    config = Settings(DATA_BACKEND="mongodb", MONGODB_DATABASE="blog", UPLOAD_RESTORE_BATCH_SIZE=3)
    with patch("myweblog.data.factory.DatabaseManager") as manager_class:
        manager = manager_class.return_value
        manager.connect = AsyncMock()
        manager.database = MagicMock()
        manager.transactions_supported = True

        data = await create_data(config)

    manager_class.assert_called_once_with(config)
    manager.connect.assert_awaited_once()
    assert isinstance(data, MongoData)
    assert data.database is manager.database
    assert data.web_log.transactions_supported is True
    assert data.upload.upload_batch_size == 3
    assert data.manager is manager


@pytest.mark.asyncio
async def test_mongodb_backend_defaults_to_shared_manager():
    with patch("myweblog.data.factory.settings", Settings(DATA_BACKEND="mongodb")), patch(
        "myweblog.data.factory.db_manager"
    ) as shared:
        shared.connect = AsyncMock()
        shared.transactions_supported = None

        data = await create_data()

    shared.connect.assert_awaited_once()
    assert data.web_log.transactions_supported is False
