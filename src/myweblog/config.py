"""
# Configuration Management Module

Configuration for the myWebLog data layer, built on **Pydantic Settings**.

## Loading Hierarchy

Higher layers override lower layers:

1. Environment variables
2. The file named by `MYWEBLOG_CONFIG_PATH`
3. `.myweblog` in the project root
4. `.env` in the project root
5. Defaults declared on `Settings`

If no configuration file is found the settings are read from the environment only.

## Configuration Groups

| Group | Fields | Purpose |
|-------|--------|---------|
| **Backend** | `DATA_BACKEND` | Selects the `mongodb` or `sql` adapter |
| **MongoDB** | `MONGODB_*` | Document store connection and pool |
| **SQL** | `SQL_DATABASE_URL`, `SQL_ECHO` | SQLAlchemy async engine |
| **Data** | `RESTORE_BATCH_SIZE`, `UPLOAD_RESTORE_BATCH_SIZE`, `ADMIN_PAGE_SIZE` | Batching and paging |
| **Logging** | `LOG_LEVEL` | Root level for `myweblog` loggers |

Attributes:
    settings (Settings): Global settings instance.
"""

import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Constants ---
MYWEBLOG_FILENAME: str = ".myweblog"
DEFAULT_ENV_FILENAME: str = ".env"
CONFIG_ENV_VAR: str = "MYWEBLOG_CONFIG_PATH"
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

SUPPORTED_BACKENDS = ("mongodb", "sql")


# --- Config file discovery (no logging) ---
def get_config_path() -> Optional[str]:
    """
    Determines the configuration file path based on a predefined precedence order.

    1.  **Environment Variable**: `MYWEBLOG_CONFIG_PATH` (if set and the file exists).
    2.  **Project Config**: `.myweblog` file in the project root directory.
    3.  **Dotenv Config**: `.env` file in the project root directory.
    4.  **Fallback**: `None`, which means environment-variable-only mode.

    Returns:
        Optional[str]: The path to the configuration file, or `None` if not found.
    """
    env_path: Optional[str] = os.environ.get(CONFIG_ENV_VAR)
    if env_path and os.path.exists(env_path):
        return env_path
    project_path: Path = PROJECT_ROOT / MYWEBLOG_FILENAME
    if project_path.exists():
        return str(project_path)
    env_path_file: Path = PROJECT_ROOT / DEFAULT_ENV_FILENAME
    if env_path_file.exists():
        return str(env_path_file)
    return None


CONFIG_PATH: Optional[str] = get_config_path()
if CONFIG_PATH:
    load_dotenv(dotenv_path=CONFIG_PATH, override=True)


class Settings(BaseSettings):
    """
    Data layer configuration settings model.

    Values come from environment variables or the discovered configuration file. The
    validators reject unknown backends, an empty connection URL for the selected backend,
    and non-positive batch or page sizes.
    """

    model_config = SettingsConfigDict(
        env_file=CONFIG_PATH if CONFIG_PATH else None,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Backend selection
    DATA_BACKEND: str = "mongodb"

    # MongoDB configuration
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "myweblog"
    MONGODB_CONNECTION_TIMEOUT: int = 10000
    MONGODB_SERVER_SELECTION_TIMEOUT: int = 5000
    MONGODB_MIN_POOL_SIZE: int = 5
    MONGODB_MAX_POOL_SIZE: int = 50

    # Authentication (optional)
    MONGODB_USERNAME: Optional[str] = None
    MONGODB_PASSWORD: Optional[SecretStr] = None

    # SQL configuration (PostgreSQL via asyncpg, SQLite via aiosqlite)
    SQL_DATABASE_URL: str = "sqlite+aiosqlite:///myweblog.db"
    SQL_ECHO: bool = False

    # Data operations
    RESTORE_BATCH_SIZE: int = 100
    UPLOAD_RESTORE_BATCH_SIZE: int = 5
    ADMIN_PAGE_SIZE: int = 25

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("DATA_BACKEND", mode="before")
    @classmethod
    def known_backend(cls, v: Any) -> str:
        """
        Normalizes and validates the backend name.

        Raises:
            ValueError: If the backend is not one of `mongodb` or `sql`.
        """
        value = str(v or "").strip().lower()
        if value not in SUPPORTED_BACKENDS:
            raise ValueError(f"DATA_BACKEND must be one of {', '.join(SUPPORTED_BACKENDS)}; got '{v}'")
        return value

    @field_validator("RESTORE_BATCH_SIZE", "UPLOAD_RESTORE_BATCH_SIZE", "ADMIN_PAGE_SIZE", mode="before")
    @classmethod
    def validate_positive_integers(cls, v: Any, info: Any) -> int:
        """
        Validates that numeric settings are positive integers.

        Raises:
            ValueError: If the value is not a positive integer.
        """
        value = int(v)
        if value <= 0:
            raise ValueError(f"{info.field_name} must be a positive integer")
        return value

    @model_validator(mode="after")
    def no_empty_urls(self) -> "Settings":
        """Ensures the connection URL of the selected backend is set."""
        url = self.MONGODB_URL if self.DATA_BACKEND == "mongodb" else self.SQL_DATABASE_URL
        if not url or not url.strip():
            field = "MONGODB_URL" if self.DATA_BACKEND == "mongodb" else "SQL_DATABASE_URL"
            raise ValueError(f"{field} must be set via environment or .myweblog and not empty!")
        return self

    @property
    def is_sqlite(self) -> bool:
        """Whether the SQL backend points at a SQLite database."""
        return self.SQL_DATABASE_URL.startswith("sqlite")


# Global settings instance
settings: Settings = Settings()
