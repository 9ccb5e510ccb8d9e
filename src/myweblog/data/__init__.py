"""
# Data Package

Backend-independent parts of the data layer.

- **`interfaces`**: `Data` and the per-entity ports every backend implements.
- **`serialization`**: `DocumentSerializer`, model to document/JSON conversion.
- **`hierarchy`** / **`permalinks`**: category tree and permalink resolution.
- **`migrations`**: the database version chain and `MigrationRunner`.
- **`utils`**: paging windows and batched restore.
- **`factory`**: `create_data()`, picks the backend from settings.
- **`restore`**: backup archives (`create_archive`, `restore_archive`).
"""
