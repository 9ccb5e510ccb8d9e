"""
# Database Version Migrations

The store records its schema version in a single marker (the `db_version` table or
collection). At start-up `MigrationRunner` walks the known chain from the stored version
to `CURRENT_DB_VERSION`, one step at a time:

```
(no marker) -> v2-rc1 -> v2-rc2 -> v2 -> v2.1 -> v2.1.1
```

- No marker means the store predates versioning; every step is applied.
- Before each step the marker is read again; if another process has moved it on, the
  runner continues from the new version instead of repeating work.
- A step applies its transform and then writes the new marker.
- A marker outside the chain raises `MigrationRequiredError`.

Backends provide the steps (`MigrationStep`) and the marker accessors.
"""

import time
from typing import Awaitable, Callable, Dict, List, NamedTuple, Optional

from myweblog.exceptions import MigrationRequiredError
from myweblog.managers.logging_manager import get_logger

logger = get_logger(prefix="[Migrations]")

CURRENT_DB_VERSION = "v2.1.1"

VERSION_CHAIN = ["v2-rc1", "v2-rc2", "v2", "v2.1", "v2.1.1"]

BACKUP_NOTICE = (
    "Upgrading from a v2 release candidate; take a backup of each web log before continuing "
    "so it can be restored if the upgrade has to be rolled back"
)


class MigrationStep(NamedTuple):
    from_version: str
    to_version: str
    description: str
    apply: Callable[[], Awaitable[None]]


class MigrationRunner:
    """Applies migration steps in order until the marker reaches the current version."""

    def __init__(
        self,
        steps: List[MigrationStep],
        read_version: Callable[[], Awaitable[Optional[str]]],
        write_version: Callable[[str], Awaitable[None]],
        current_version: str = CURRENT_DB_VERSION,
    ):
        self.steps: Dict[str, MigrationStep] = {step.from_version: step for step in steps}
        self.first_version = steps[0].from_version if steps else current_version
        self.read_version = read_version
        self.write_version = write_version
        self.current_version = current_version

    async def run(self) -> List[str]:
        """
        Bring the store up to the current version.

        Returns:
            List[str]: The versions written, in order; empty if nothing was needed.

        Raises:
            MigrationRequiredError: If the stored version is not part of the chain.
        """
        start_time = time.time()
        applied: List[str] = []

        version = await self.read_version()
        if version is None:
            logger.info("No database version found; applying all migrations")
            version = self.first_version

        while version != self.current_version:
            step = self.steps.get(version)
            if step is None:
                logger.error("Unknown database version %s; cannot migrate automatically", version)
                raise MigrationRequiredError(version)

            marker = await self.read_version()
            if marker is not None and marker != version:
                logger.info("Database version moved to %s by another process; continuing from there", marker)
                version = marker
                continue

            logger.info("Migrating %s to %s: %s", step.from_version, step.to_version, step.description)
            await step.apply()
            await self.write_version(step.to_version)
            applied.append(step.to_version)
            version = step.to_version

        if applied:
            logger.info(
                "Database migrated to %s in %.3fs (%d step(s))", self.current_version, time.time() - start_time, len(applied)
            )
        else:
            logger.debug("Database version %s is current", version)
        return applied


def build_steps(
    add_redirect_rules: Callable[[], Awaitable[None]],
) -> List[MigrationStep]:
    """
    The migration chain shared by every backend.

    Args:
        add_redirect_rules: Backend transform giving every web log without redirect rules
            an empty rule list (v2 to v2.1).
    """

    async def notice_backup() -> None:
        logger.warning(BACKUP_NOTICE)

    async def marker_only() -> None:
        return None

    return [
        MigrationStep("v2-rc1", "v2-rc2", "release candidate 2", notice_backup),
        MigrationStep("v2-rc2", "v2", "v2 release", marker_only),
        MigrationStep("v2", "v2.1", "add redirect rules to web logs", add_redirect_rules),
        MigrationStep("v2.1", "v2.1.1", "v2.1.1 release", marker_only),
    ]
