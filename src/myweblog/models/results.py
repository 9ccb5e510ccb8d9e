"""
Result values returned by mutating storage operations.

A `DataResult` tells the caller what happened without raising for expected outcomes:

```python
result = await data.upload.delete(upload_id, web_log_id)
if result.ok:
    logger.info("Deleted %s", result.value)
elif result.kind == ResultKind.NOT_FOUND:
    ...
```
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ResultKind(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    REFERENTIAL_BLOCK = "referential_block"
    UNRESOLVED = "unresolved"


class DataResult(BaseModel):
    """Outcome of a mutation: a kind, an optional value and an optional message."""

    kind: ResultKind
    value: Any = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.kind == ResultKind.OK

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "DataResult":
        return cls(kind=ResultKind.OK, value=value, message=message)

    @classmethod
    def not_found(cls, message: str = "") -> "DataResult":
        return cls(kind=ResultKind.NOT_FOUND, message=message)

    @classmethod
    def blocked(cls, message: str) -> "DataResult":
        return cls(kind=ResultKind.REFERENTIAL_BLOCK, message=message)

    @classmethod
    def unresolved(cls, message: str, value: Any = None) -> "DataResult":
        return cls(kind=ResultKind.UNRESOLVED, message=message, value=value)


class CategoryDeleteResult(str, Enum):
    """Outcome of deleting a category."""

    DELETED = "deleted"
    REASSIGNED_CHILD_CATEGORIES = "reassigned_child_categories"
    NOT_FOUND = "not_found"


class BatchFailure(BaseModel):
    """A restore batch that could not be written."""

    batch: int = Field(..., description="1-based batch number")
    first_id: str
    last_id: str
    error: str


class RestoreReport(BaseModel):
    """Summary of a batched restore of one entity type."""

    entity: str
    total: int = 0
    batch_size: int
    restored: int = 0
    failed_batches: List[BatchFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_batches


class StartUpReport(BaseModel):
    """What a start-up run changed; empty lists mean the store was already initialized."""

    created_tables: List[str] = Field(default_factory=list)
    created_indexes: List[str] = Field(default_factory=list)
    migrations_applied: List[str] = Field(default_factory=list)
    version: Optional[str] = None

    @property
    def changed(self) -> bool:
        return bool(self.created_tables or self.created_indexes or self.migrations_applied)
