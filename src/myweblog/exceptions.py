"""
Exceptions raised by the myWebLog data layer.

Expected absence is not exceptional: reads return `None` or an empty list and mutations
return a `bool` or a result value. Exceptions are reserved for constraint violations,
an unreachable backend and a database that needs manual migration.
"""

from typing import Optional


class WebLogDataError(Exception):
    """Base class for all data layer errors."""


class ConflictError(WebLogDataError):
    """A unique key (id, permalink, tag, url value, url base, e-mail, path) is already taken."""

    def __init__(self, message: str, entity: Optional[str] = None):
        super().__init__(message)
        self.entity = entity


class BackendUnavailableError(WebLogDataError):
    """The database could not be reached or the connection failed mid-operation."""


class MigrationRequiredError(WebLogDataError):
    """The stored version marker is not part of the known migration chain."""

    def __init__(self, version: str):
        super().__init__(
            f"Unknown database version {version}; the database must be migrated manually before start-up"
        )
        self.version = version
