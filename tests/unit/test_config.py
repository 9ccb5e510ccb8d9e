import pytest
from pydantic import ValidationError

from myweblog.config import Settings


def test_defaults():
    config = Settings()
    assert config.RESTORE_BATCH_SIZE > 0
    assert config.UPLOAD_RESTORE_BATCH_SIZE > 0


def test_backend_name_is_normalized():
    config = Settings(DATA_BACKEND=" SQL ", SQL_DATABASE_URL="sqlite+aiosqlite:///x.db")
    assert config.DATA_BACKEND == "sql"
    assert config.is_sqlite is True


def test_postgres_is_not_sqlite():
    config = Settings(DATA_BACKEND="sql", SQL_DATABASE_URL="postgresql+asyncpg://blog@localhost/blog")
    assert config.is_sqlite is False


def test_unknown_backend_is_rejected():
    with pytest.raises(ValidationError):
        Settings(DATA_BACKEND="redis")


@pytest.mark.parametrize("field", ["RESTORE_BATCH_SIZE", "UPLOAD_RESTORE_BATCH_SIZE", "ADMIN_PAGE_SIZE"])
def test_sizes_must_be_positive(field):
    with pytest.raises(ValidationError):
        Settings(**{field: 0})


def test_selected_backend_needs_a_url():
    with pytest.raises(ValidationError):
        Settings(DATA_BACKEND="sql", SQL_DATABASE_URL="  ")

    # The unused backend's URL may be empty
    assert Settings(DATA_BACKEND="sql", MONGODB_URL="").DATA_BACKEND == "sql"
