"""Shared plumbing for the MongoDB port implementations."""

import functools
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import BulkWriteError, ConnectionFailure, DuplicateKeyError, ServerSelectionTimeoutError

from myweblog.data.serialization import DocumentSerializer
from myweblog.database.tenant_collection import WebLogScopedCollection
from myweblog.exceptions import BackendUnavailableError, ConflictError
from myweblog.managers.logging_manager import get_logger

logger = get_logger(prefix="[MongoData]")

T = TypeVar("T")

DUPLICATE_KEY = 11000

# Projections leaving out the parts listing views do not need
WITHOUT_HISTORY = {"revisions": 0, "prior_permalinks": 0}
WITHOUT_DATA = {"data": 0}


def mongo_operation(name: str):
    """
    Decorate a port coroutine: log it at trace level and translate driver errors.

    - `DuplicateKeyError` (and bulk writes failing on a duplicate key) become `ConflictError`
    - `ConnectionFailure` / `ServerSelectionTimeoutError` become `BackendUnavailableError`
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            logger.debug(name)
            try:
                return await func(*args, **kwargs)
            except DuplicateKeyError as e:
                raise ConflictError(f"{name}: duplicate key ({e})", entity=name.split(".")[0]) from e
            except BulkWriteError as e:
                write_errors = (e.details or {}).get("writeErrors", [])
                if any(error.get("code") == DUPLICATE_KEY for error in write_errors):
                    raise ConflictError(f"{name}: duplicate key ({e})", entity=name.split(".")[0]) from e
                raise
            except (ServerSelectionTimeoutError, ConnectionFailure) as e:
                logger.error("%s failed; MongoDB unavailable: %s", name, e)
                raise BackendUnavailableError(f"{name}: {e}") from e

        return wrapper

    return decorator


def session_kwargs(session: Any) -> Dict[str, Any]:
    """Driver keyword arguments for an optional session."""
    return {"session": session} if session is not None else {}


class MongoPort:
    """Base for the MongoDB ports: holds the database, the serializer and the collection name."""

    collection_name: str = ""

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        serializer: DocumentSerializer,
        transactions_supported: bool = False,
        batch_size: int = 100,
    ):
        self.database = database
        self.serializer = serializer
        self.transactions_supported = transactions_supported
        self.batch_size = batch_size

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self.database[self.collection_name]

    def scoped(self, web_log_id: str, collection_name: Optional[str] = None) -> WebLogScopedCollection:
        return WebLogScopedCollection(self.database[collection_name or self.collection_name], web_log_id)

    def owned(self, document: Optional[Dict[str, Any]], web_log_id: str) -> Optional[Dict[str, Any]]:
        """The document if it belongs to `web_log_id`, else `None`."""
        if document is not None and document.get("web_log_id") == web_log_id:
            return document
        return None

    def to_model(self, model_type: Type[T], document: Optional[Dict[str, Any]]) -> Optional[T]:
        return self.serializer.from_document(model_type, document) if document is not None else None

    async def to_models(self, model_type: Type[T], cursor) -> List[T]:
        return [self.serializer.from_document(model_type, document) async for document in cursor]

    async def in_transaction(self, work: Callable[[Any], Awaitable[T]]) -> T:
        """Run `work(session)` in a transaction when the deployment supports one, else `work(None)`."""
        if not self.transactions_supported:
            return await work(None)
        async with await self.database.client.start_session() as session:
            async with session.start_transaction():
                return await work(session)

    async def insert_batch(self, documents: List[Dict[str, Any]]) -> None:
        await self.collection.insert_many(documents, ordered=True)
