from myweblog.database.manager import DatabaseManager, db_manager
from myweblog.database.tenant_collection import WebLogScopedCollection

__all__ = ["DatabaseManager", "WebLogScopedCollection", "db_manager"]
