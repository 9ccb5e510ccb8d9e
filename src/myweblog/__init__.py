"""
# myWebLog Data Layer

Persistence for the myWebLog multi-tenant blogging engine: domain models, a storage
interface with one port per entity, and two interchangeable backends.

## Package Layout

- **`models`**: pydantic models for web logs, pages, posts, categories, users, uploads and
  themes, plus view, result and backup models.
- **`data`**: the storage interface (`Data` and its ports), shared algorithms (category
  hierarchy, permalink resolution, migrations), the backend factory and restore.
- **`database`**: the MongoDB backend (`database.mongo`, Motor) and the relational
  backend (`database.sql`, SQLAlchemy on PostgreSQL or SQLite).
- **`config`** / **`managers.logging_manager`** / **`exceptions`**: settings, logging and
  the error hierarchy.

## Usage

```python
from myweblog.data.factory import create_data

data = await create_data()
await data.start_up()
web_log = await data.web_log.find_by_host("https://example.com")
```
"""

__version__ = "2.1.1"
