"""Shared plumbing for the SQL port implementations."""

import functools
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from sqlalchemy import Table, delete, func, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from myweblog.data.serialization import DocumentSerializer
from myweblog.exceptions import BackendUnavailableError, ConflictError
from myweblog.managers.logging_manager import get_logger
from myweblog.models.weblog_models import Revision

logger = get_logger(prefix="[SqlData]")

T = TypeVar("T")


def sql_operation(name: str):
    """
    Decorate a port coroutine: log it at trace level and translate driver errors.

    - `IntegrityError` (unique or key violations) becomes `ConflictError`
    - Lost or refused connections become `BackendUnavailableError`
    """

    def decorator(method: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(method)
        async def wrapper(*args, **kwargs) -> T:
            logger.debug(name)
            try:
                return await method(*args, **kwargs)
            except IntegrityError as e:
                raise ConflictError(f"{name}: {e.orig}", entity=name.split(".")[0]) from e
            except OperationalError as e:
                if not e.connection_invalidated:
                    raise
                logger.error("%s failed; database connection lost: %s", name, e)
                raise BackendUnavailableError(f"{name}: {e}") from e
            except (InterfaceError, ConnectionError) as e:
                logger.error("%s failed; database unavailable: %s", name, e)
                raise BackendUnavailableError(f"{name}: {e}") from e

        return wrapper

    return decorator


def group_rows(rows: Iterable[Any], key: str, value: Callable[[Any], Any]) -> Dict[str, List[Any]]:
    """Group child rows (already in `seq` order) by their parent id."""
    grouped: Dict[str, List[Any]] = {}
    for row in rows:
        grouped.setdefault(row[key], []).append(value(row))
    return grouped


class SqlPort:
    """Base for the SQL ports: holds the engine, the serializer and the restore batch size."""

    def __init__(self, engine: AsyncEngine, serializer: DocumentSerializer, batch_size: int = 100):
        self.engine = engine
        self.serializer = serializer
        self.batch_size = batch_size

    async def fetch_all(self, query) -> List[Any]:
        async with self.engine.connect() as conn:
            return list((await conn.execute(query)).mappings().all())

    async def fetch_one(self, query) -> Optional[Any]:
        async with self.engine.connect() as conn:
            return (await conn.execute(query)).mappings().first()

    async def scalar(self, query) -> Any:
        async with self.engine.connect() as conn:
            return await conn.scalar(query)

    async def any_rows(self, table: Table, *criteria) -> bool:
        return await self.scalar(select(func.count()).select_from(table).where(*criteria)) > 0

    async def replace_children(
        self,
        conn: AsyncConnection,
        table: Table,
        parent_column: str,
        parent_ids: Sequence[str],
        rows: List[Dict[str, Any]],
    ) -> None:
        """Swap the child rows of `parent_ids` for `rows`."""
        if parent_ids:
            await conn.execute(delete(table).where(table.c[parent_column].in_(list(parent_ids))))
        if rows:
            await conn.execute(table.insert(), rows)

    def meta_items_value(self, items) -> Any:
        return self.serializer.to_json_value(list(items))

    @staticmethod
    def revision_rows(parent_column: str, parent_id: str, revisions: List[Revision]) -> List[Dict[str, Any]]:
        return [
            {
                parent_column: parent_id,
                "as_of": revision.as_of,
                "source_type": revision.source_type,
                "revision_text": revision.text,
            }
            for revision in revisions
        ]

    @staticmethod
    def permalink_rows(parent_column: str, parent_id: str, permalinks: List[str]) -> List[Dict[str, Any]]:
        return [
            {parent_column: parent_id, "seq": seq, "permalink": permalink}
            for seq, permalink in enumerate(permalinks)
        ]

    @staticmethod
    def to_revision(row) -> Revision:
        return Revision(as_of=row["as_of"], source_type=row["source_type"], text=row["revision_text"])
