"""
# Document Serializer

Converts between the pydantic models and the shapes the backends store:

- **Documents** (MongoDB): `model_dump(mode="python")` with `id` stored as `_id`, so
  datetimes and bytes reach the driver as native BSON values.
- **JSON values** (SQL JSON/JSONB columns): JSON-compatible dicts and lists for the
  document-shaped parts of a row (metadata, podcast episode, RSS options, redirect rules).

There is no process-wide serializer. Each `Data` implementation receives a
`DocumentSerializer` when it is constructed and hands it to its ports:

```python
serializer = DocumentSerializer()
data = MongoData(database, serializer)
assert data.serializer is serializer
```
"""

from functools import lru_cache
from typing import Any, Mapping, Optional, Set, Type, TypeVar

from pydantic import BaseModel, TypeAdapter

M = TypeVar("M", bound=BaseModel)


@lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


class DocumentSerializer:
    """Model to document/JSON conversion used by the storage adapters."""

    def __init__(self, id_field: str = "_id"):
        self.id_field = id_field

    def to_document(self, model: BaseModel, exclude: Optional[Set[str]] = None) -> dict:
        """Dump a model to a document, renaming `id` to the document id field."""
        document = model.model_dump(mode="python", exclude=exclude)
        if "id" in document:
            document[self.id_field] = document.pop("id")
        return document

    def from_document(self, model_type: Type[M], document: Mapping[str, Any]) -> M:
        """Build a model from a stored document; unknown fields are ignored."""
        values = dict(document)
        if self.id_field in values:
            values["id"] = values.pop(self.id_field)
        return model_type.model_validate(values)

    def to_json_value(self, value: Any) -> Any:
        """Dump a model, a list of models or a plain value to JSON-compatible data."""
        if value is None:
            return None
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if isinstance(value, (list, tuple)):
            return [self.to_json_value(item) for item in value]
        return value

    def from_json_value(self, target: Any, value: Any) -> Any:
        """Validate JSON data read from a column into `target` (a model or typing construct)."""
        if value is None:
            return None
        return _adapter(target).validate_python(value)
