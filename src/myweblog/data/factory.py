"""
# Backend Factory

`create_data()` builds the `Data` implementation named by `DATA_BACKEND`:

| `DATA_BACKEND` | Implementation | Connection |
|----------------|----------------|------------|
| `mongodb` | `MongoData` | `DatabaseManager` (Motor) |
| `sql` | `SqlData` | `SqlEngineManager` (SQLAlchemy async engine) |

The returned facade is connected but not started; callers run `start_up()` once before
serving requests and `close()` on shutdown.

```python
data = await create_data()
await data.start_up()
...
await data.close()
```
"""

from typing import Optional

from myweblog.config import Settings, settings
from myweblog.data.interfaces import Data
from myweblog.data.serialization import DocumentSerializer
from myweblog.database.manager import DatabaseManager, db_manager
from myweblog.database.mongo import MongoData
from myweblog.database.sql import SqlData, SqlEngineManager
from myweblog.managers.logging_manager import get_logger

logger = get_logger(prefix="[DataFactory]")


async def create_data(config: Optional[Settings] = None) -> Data:
    """
    Connect to the configured backend and wrap it in its `Data` facade.

    Args:
        config: Settings to use; the module-level `settings` when omitted. Passing
            settings also gives the document store its own `DatabaseManager` instead of
            the shared `db_manager`.

    Raises:
        `BackendUnavailableError`: If the backend cannot be reached.
    """
    active = config or settings
    serializer = DocumentSerializer()

    if active.DATA_BACKEND == "sql":
        manager = SqlEngineManager(config=active)
        engine = await manager.connect()
        logger.info("Using the %s backend", manager.dialect)
        return SqlData(engine, serializer, config=active, manager=manager)

    manager = DatabaseManager(config) if config is not None else db_manager
    await manager.connect()
    logger.info("Using the MongoDB backend (database %s)", active.MONGODB_DATABASE)
    return MongoData(
        manager.database,
        serializer,
        transactions_supported=bool(manager.transactions_supported),
        config=active,
        manager=manager,
    )
