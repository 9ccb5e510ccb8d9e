"""Paging and batching helpers shared by the storage adapters."""

import time
from typing import Any, Awaitable, Callable, Iterator, List, Sequence, Tuple, TypeVar

from pymongo.errors import ConnectionFailure
from sqlalchemy.exc import InterfaceError, OperationalError

from myweblog.exceptions import BackendUnavailableError
from myweblog.managers.logging_manager import get_logger
from myweblog.models.results import BatchFailure, RestoreReport

T = TypeVar("T")

logger = get_logger(prefix="[Restore]")


def is_connection_error(error: BaseException) -> bool:
    """Whether `error` means the store could not be reached, rather than that the data was refused."""
    if isinstance(error, (BackendUnavailableError, ConnectionFailure, InterfaceError, ConnectionError)):
        return True
    return isinstance(error, OperationalError) and bool(error.connection_invalidated)


def page_window(page_nbr: int, page_size: int) -> Tuple[int, int]:
    """
    Rows to skip and to fetch for a 1-based page.

    One row more than the page size is fetched so the caller can tell whether another page
    follows; page numbers below 1 are treated as 1.

    Example:
        ```python
        page_window(3, 10)  # (20, 11)
        ```
    """
    page_nbr = max(page_nbr, 1)
    return (page_nbr - 1) * page_size, page_size + 1


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Split `items` into lists of at most `size` elements, in order."""
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


async def restore_in_batches(
    entity: str,
    items: Sequence[T],
    batch_size: int,
    write_batch: Callable[[List[T]], Awaitable[Any]],
    id_of: Callable[[T], Any] = lambda item: item.id,
) -> RestoreReport:
    """
    Write `items` in fixed-size batches, continuing past batches that fail.

    Args:
        entity: Name used in logs and in the report (e.g. `"post"`).
        items: Entities to restore.
        batch_size: Maximum entities per batch.
        write_batch: Coroutine writing one batch; an exception marks the batch failed.
        id_of: Extracts an id for the failure report.

    Returns:
        RestoreReport: Counts of restored entities and the batches that failed.

    Raises:
        Connection failures (see `is_connection_error`) stop the restore and propagate, so
        the port can report the store as unavailable.
    """
    start_time = time.time()
    report = RestoreReport(entity=entity, total=len(items), batch_size=batch_size)
    for number, batch in enumerate(chunked(items, batch_size), start=1):
        try:
            await write_batch(batch)
            report.restored += len(batch)
        except Exception as e:
            if is_connection_error(e):
                logger.error(
                    "Stopped restoring %s at batch %d after %d record(s); store unavailable: %s",
                    entity,
                    number,
                    report.restored,
                    e,
                )
                raise
            failure = BatchFailure(
                batch=number, first_id=str(id_of(batch[0])), last_id=str(id_of(batch[-1])), error=str(e)
            )
            report.failed_batches.append(failure)
            logger.error(
                "Failed to restore %s batch %d (%s .. %s): %s",
                entity,
                number,
                failure.first_id,
                failure.last_id,
                e,
            )
    duration = time.time() - start_time
    logger.info(
        "Restored %d of %d %s record(s) in %.3fs (%d failed batch(es))",
        report.restored,
        report.total,
        entity,
        duration,
        len(report.failed_batches),
    )
    return report
