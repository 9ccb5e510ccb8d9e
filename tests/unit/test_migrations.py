from unittest.mock import AsyncMock

import pytest

from myweblog.data.migrations import CURRENT_DB_VERSION, VERSION_CHAIN, MigrationRunner, build_steps
from myweblog.exceptions import MigrationRequiredError


class VersionStore:
    """In-memory version marker; `moves` maps a read number to a version written by another process."""

    def __init__(self, version=None, moves=None):
        self.version = version
        self.moves = dict(moves or {})
        self.reads = 0
        self.writes = []

    async def read(self):
        self.reads += 1
        if self.reads in self.moves:
            self.version = self.moves[self.reads]
        return self.version

    async def write(self, version):
        self.writes.append(version)
        self.version = version


def runner_for(store, add_redirect_rules=None):
    steps = build_steps(add_redirect_rules or AsyncMock())
    return MigrationRunner(steps, store.read, store.write)


def test_chain_ends_at_current_version():
    steps = build_steps(AsyncMock())
    assert [steps[0].from_version] + [step.to_version for step in steps] == VERSION_CHAIN
    assert VERSION_CHAIN[-1] == CURRENT_DB_VERSION


@pytest.mark.asyncio
async def test_current_version_does_nothing():
    store = VersionStore(CURRENT_DB_VERSION)
    add_redirect_rules = AsyncMock()

    assert await runner_for(store, add_redirect_rules).run() == []
    assert store.writes == []
    add_redirect_rules.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_marker_applies_every_step():
    store = VersionStore(None)
    add_redirect_rules = AsyncMock()

    applied = await runner_for(store, add_redirect_rules).run()

    assert applied == ["v2-rc2", "v2", "v2.1", "v2.1.1"]
    assert store.version == CURRENT_DB_VERSION
    add_redirect_rules.assert_awaited_once()


@pytest.mark.asyncio
async def test_v2_1_only_writes_marker():
    store = VersionStore("v2.1")
    add_redirect_rules = AsyncMock()

    assert await runner_for(store, add_redirect_rules).run() == ["v2.1.1"]
    add_redirect_rules.assert_not_awaited()


@pytest.mark.asyncio
async def test_marker_moved_by_another_process():
    """The runner continues from a version another process wrote instead of repeating steps."""
    store = VersionStore("v2-rc2", moves={2: "v2.1"})
    add_redirect_rules = AsyncMock()

    applied = await runner_for(store, add_redirect_rules).run()

    assert applied == ["v2.1.1"]
    add_redirect_rules.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_version_raises():
    store = VersionStore("v1.0")

    with pytest.raises(MigrationRequiredError) as exc_info:
        await runner_for(store).run()

    assert exc_info.value.version == "v1.0"
    assert store.writes == []


@pytest.mark.asyncio
async def test_failed_step_keeps_previous_marker():
    store = VersionStore("v2")
    failing = AsyncMock(side_effect=RuntimeError("boom"))

    with pytest.raises(RuntimeError):
        await runner_for(store, failing).run()

    assert store.version == "v2"
