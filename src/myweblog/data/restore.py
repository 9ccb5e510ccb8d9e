"""
# Backup and Restore

`create_archive()` snapshots one web log through the `Data` ports; `restore_archive()`
writes an `Archive` back, in dependency order:

1. themes, then theme assets (saved one at a time; themes are shared between web logs)
2. the web log
3. users, categories, tag mappings, pages, posts, uploads (each through the port's
   batched `restore`)

Every step returns a `RestoreReport`; failed batches are reported, not raised, so one bad
record does not stop the rest of the archive.
"""

import time
from typing import List

from myweblog.data.interfaces import Data
from myweblog.data.utils import restore_in_batches
from myweblog.exceptions import ConflictError, WebLogDataError
from myweblog.managers.logging_manager import get_logger
from myweblog.models.backup import Archive
from myweblog.models.results import RestoreReport

logger = get_logger(prefix="[Restore]")


async def create_archive(data: Data, web_log_id: str) -> Archive:
    """
    Snapshot a web log with its users, categories, tag mappings, pages, posts, uploads
    and the theme it uses.

    Raises:
        `WebLogDataError`: If the web log does not exist.
    """
    web_log = await data.web_log.find_by_id(web_log_id)
    if web_log is None:
        raise WebLogDataError(f"Web log {web_log_id} not found")

    theme = await data.theme.find_by_id(web_log.theme_id)
    archive = Archive(
        web_log=web_log,
        users=await data.web_log_user.find_by_web_log(web_log_id),
        categories=await data.category.find_by_web_log(web_log_id),
        tag_mappings=await data.tag_map.find_by_web_log(web_log_id),
        pages=await data.page.find_full_by_web_log(web_log_id),
        posts=await data.post.find_full_by_web_log(web_log_id),
        uploads=await data.upload.find_by_web_log_with_data(web_log_id),
        themes=[theme] if theme else [],
        theme_assets=await data.theme_asset.find_by_theme_with_data(theme.id) if theme else [],
    )
    logger.info(
        "Archived web log %s: %d page(s), %d post(s), %d upload(s)",
        web_log_id,
        len(archive.pages),
        len(archive.posts),
        len(archive.uploads),
    )
    return archive


async def restore_archive(data: Data, archive: Archive, overwrite: bool = False) -> List[RestoreReport]:
    """
    Restore an archive into `data`.

    Args:
        data: Target backend, already started.
        archive: The snapshot to restore.
        overwrite: Delete an existing web log with the archive's id first.

    Returns:
        List[RestoreReport]: One report per entity, in restore order.

    Raises:
        `ConflictError`: If the web log already exists and `overwrite` is false.
        `WebLogDataError`: If the existing web log could not be deleted completely.
    """
    start_time = time.time()
    web_log = archive.web_log

    if await data.web_log.find_by_id(web_log.id) is not None:
        if not overwrite:
            raise ConflictError(f"Web log {web_log.id} already exists", entity="WebLog")
        result = await data.web_log.delete(web_log.id)
        if not result.ok:
            raise WebLogDataError(f"Could not replace web log {web_log.id}: {result.message}")
        logger.info("Deleted existing web log %s before restoring", web_log.id)

    reports = [
        await restore_in_batches("theme", archive.themes, 1, lambda batch: data.theme.save(batch[0])),
        await restore_in_batches(
            "theme asset",
            archive.theme_assets,
            1,
            lambda batch: data.theme_asset.save(batch[0]),
            id_of=lambda asset: str(asset.id),
        ),
    ]
    await data.web_log.add(web_log)
    reports.extend(
        [
            await data.web_log_user.restore(archive.users),
            await data.category.restore(archive.categories),
            await data.tag_map.restore(archive.tag_mappings),
            await data.page.restore(archive.pages),
            await data.post.restore(archive.posts),
            await data.upload.restore(archive.uploads),
        ]
    )

    failed = [report.entity for report in reports if not report.ok]
    if failed:
        logger.warning("Restored web log %s with failures in: %s", web_log.id, ", ".join(failed))
    logger.info("Restored web log %s in %.3fs", web_log.id, time.time() - start_time)
    return reports
