"""
# Database Management Module

This module provides the **MongoDB connection layer** for the myWebLog document-store
backend. `DatabaseManager` owns the Motor client, the selected database and the
deployment facts the adapters need (whether multi-document transactions are available).

## Architecture Overview

```
┌──────────────┐      ┌───────────────────────────────┐
│  MongoData   │─────▶│        DatabaseManager        │
│   (ports)    │      │          (Singleton)          │
└──────────────┘      └──────────────┬────────────────┘
                                     │
                      ┌──────────────▼──────────────┐
                      │      Connection Pool        │
                      │  (Motor/PyMongo Internal)   │
                      └──────────────┬──────────────┘
                                     │
            ┌────────────────────────┼────────────────────────┐
            ▼                        ▼                        ▼
    ┌──────────────┐         ┌──────────────┐         ┌──────────────┐
    │  Replica Set │         │  Standalone  │         │    Mongos    │
    └──────────────┘         └──────────────┘         └──────────────┘
```

## Key Features

### 1. Connection Lifecycle
- **Retries**: Up to 3 connection attempts with exponential backoff (1s, 2s, 4s)
- **Graceful Shutdown**: `disconnect()` closes the pool
- **Health Check**: `health_check()` pings the server without raising

### 2. Transaction Detection
After connecting, the `hello` command tells whether the deployment is a replica set or a
mongos router. Only those support multi-document transactions; the web log cascade and
category delete run inside a transaction when `transactions_supported` is true.

### 3. Web Log Scoping
`get_web_log_collection()` returns a `WebLogScopedCollection` so every query it runs is
confined to one web log.

## Usage Examples

```python
from myweblog.database import db_manager

await db_manager.connect()
posts = db_manager.get_web_log_collection("post", web_log_id)
count = await posts.count_documents({"status": "Published"})
await db_manager.disconnect()
```

## Configuration

- `MONGODB_URL`, `MONGODB_DATABASE`
- `MONGODB_USERNAME`, `MONGODB_PASSWORD` (optional credentials)
- `MONGODB_MIN_POOL_SIZE`, `MONGODB_MAX_POOL_SIZE`
- `MONGODB_SERVER_SELECTION_TIMEOUT`, `MONGODB_CONNECTION_TIMEOUT` (ms)

## Module Attributes

Attributes:
    db_logger (Logger): Database operations (`[DATABASE]`).
    perf_logger (Logger): Timings (`[DB_PERFORMANCE]`).
    health_logger (Logger): Health checks (`[DB_HEALTH]`).
    db_manager (DatabaseManager): Global instance used by the backend factory.
"""

import asyncio
import time
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, OperationFailure, ServerSelectionTimeoutError

from myweblog.config import Settings, settings
from myweblog.database.tenant_collection import WebLogScopedCollection
from myweblog.exceptions import BackendUnavailableError
from myweblog.managers.logging_manager import get_logger

db_logger = get_logger(prefix="[DATABASE]")
perf_logger = get_logger(prefix="[DB_PERFORMANCE]")
health_logger = get_logger(prefix="[DB_HEALTH]")


class DatabaseManager:
    """
    Owns the Motor client and database for the document-store backend.

    Attributes:
        client (`Optional[AsyncIOMotorClient]`): The Motor client; `None` until `connect()`.
        database (`Optional[AsyncIOMotorDatabase]`): The configured database.
        transactions_supported (`Optional[bool]`): Whether multi-document transactions are
            available; `None` until connected.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self._connection_retries = 3
        self.transactions_supported: Optional[bool] = None

    def _connection_string(self) -> str:
        if self.config.MONGODB_USERNAME and self.config.MONGODB_PASSWORD:
            password = self.config.MONGODB_PASSWORD.get_secret_value()
            db_logger.debug("Using authenticated connection to MongoDB")
            return (
                f"mongodb://{self.config.MONGODB_USERNAME}:{password}@"
                f"{self.config.MONGODB_URL.replace('mongodb://', '')}"
            )
        db_logger.debug("Using unauthenticated connection to MongoDB")
        return self.config.MONGODB_URL

    async def connect(self):
        """
        Establish the connection to MongoDB, retrying with exponential backoff.

        **Steps:**
        1. Build the connection string, adding credentials when configured
        2. Create the Motor client with the configured pool and timeouts
        3. Ping the server
        4. Detect transaction support from the `hello` response

        Raises:
            `BackendUnavailableError`: If MongoDB is unreachable after all attempts.
        """
        if self.client is not None and self.database is not None:
            db_logger.debug("connect() called on an already connected manager")
            return

        start_time = time.time()
        db_logger.info("Starting MongoDB connection process")

        for attempt in range(self._connection_retries):
            attempt_start = time.time()
            try:
                db_logger.info("Connection attempt %d/%d to MongoDB", attempt + 1, self._connection_retries)
                db_logger.info(
                    "MongoDB connection config - URL: %s, Database: %s, MaxPool: %d, MinPool: %d, ServerTimeout: %dms, ConnTimeout: %dms",
                    self.config.MONGODB_URL,
                    self.config.MONGODB_DATABASE,
                    self.config.MONGODB_MAX_POOL_SIZE,
                    self.config.MONGODB_MIN_POOL_SIZE,
                    self.config.MONGODB_SERVER_SELECTION_TIMEOUT,
                    self.config.MONGODB_CONNECTION_TIMEOUT,
                )

                self.client = AsyncIOMotorClient(
                    self._connection_string(),
                    serverSelectionTimeoutMS=self.config.MONGODB_SERVER_SELECTION_TIMEOUT,
                    connectTimeoutMS=self.config.MONGODB_CONNECTION_TIMEOUT,
                    maxPoolSize=self.config.MONGODB_MAX_POOL_SIZE,
                    minPoolSize=self.config.MONGODB_MIN_POOL_SIZE,
                )
                self.database = self.client[self.config.MONGODB_DATABASE]

                ping_start = time.time()
                await self.client.admin.command("ping")
                ping_duration = time.time() - ping_start

                self.transactions_supported = await self._detect_transactions()

                total_duration = time.time() - start_time
                perf_logger.info(
                    "MongoDB connection established successfully in %.3fs (ping: %.3fs)", total_duration, ping_duration
                )
                db_logger.info(
                    "Successfully connected to MongoDB database: %s (transactions supported: %s)",
                    self.config.MONGODB_DATABASE,
                    self.transactions_supported,
                )
                return

            except (ServerSelectionTimeoutError, ConnectionFailure) as e:
                attempt_duration = time.time() - attempt_start
                perf_logger.warning("Connection attempt %d failed after %.3fs", attempt + 1, attempt_duration)
                db_logger.warning(
                    "Failed to connect to MongoDB (attempt %d/%d): %s", attempt + 1, self._connection_retries, e
                )
                if attempt == self._connection_retries - 1:
                    db_logger.error("All connection attempts failed after %.3fs", time.time() - start_time)
                    self.client = None
                    self.database = None
                    raise BackendUnavailableError(f"Could not connect to MongoDB: {e}") from e

                backoff_time = 2**attempt
                db_logger.info("Waiting %.1fs before retry (exponential backoff)", backoff_time)
                await asyncio.sleep(backoff_time)

    async def _detect_transactions(self) -> bool:
        """Replica set members (`setName`) and mongos routers (`isdbgrid`) support transactions."""
        try:
            hello = await self.client.admin.command({"hello": 1})
        except OperationFailure:
            hello = await self.client.admin.command({"isMaster": 1})
        return bool(hello.get("setName") or hello.get("msg") == "isdbgrid")

    async def disconnect(self):
        """Close the Motor client and release its pooled connections."""
        start_time = time.time()
        db_logger.info("Starting MongoDB disconnection process")

        if self.client:
            self.client.close()
            self.client = None
            self.database = None
            perf_logger.info("MongoDB disconnection completed in %.3fs", time.time() - start_time)
            db_logger.info("Successfully disconnected from MongoDB")
        else:
            db_logger.warning("Disconnect called but no active MongoDB connection found")

    async def health_check(self) -> bool:
        """
        Ping MongoDB.

        Returns:
            `bool`: `True` if the server answered, `False` otherwise (never raises).
        """
        start_time = time.time()
        health_logger.debug("Starting database health check")

        if self.client is None:
            health_logger.warning("Health check failed: No database client available")
            return False

        try:
            await self.client.admin.command("ping")
            perf_logger.debug("Database health check completed successfully in %.3fs", time.time() - start_time)
            return True
        except (ServerSelectionTimeoutError, ConnectionFailure) as e:
            perf_logger.warning("Database health check failed after %.3fs", time.time() - start_time)
            health_logger.error("Database health check failed: %s", e)
            return False

    def get_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        """
        Retrieve a collection of the connected database.

        Raises:
            `BackendUnavailableError`: If `connect()` has not been called.
        """
        if self.database is None:
            db_logger.error("Attempted to get collection '%s' without database connection", collection_name)
            raise BackendUnavailableError("Database not connected. Call connect() first.")
        return self.database[collection_name]

    def get_web_log_collection(self, collection_name: str, web_log_id: str) -> WebLogScopedCollection:
        """Retrieve a collection whose operations are confined to one web log."""
        return WebLogScopedCollection(self.get_collection(collection_name), web_log_id)


# Global database manager instance
db_manager = DatabaseManager()
