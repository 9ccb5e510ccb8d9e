from myweblog.database.sql.data import SqlData
from myweblog.database.sql.engine import SqlEngineManager

__all__ = ["SqlData", "SqlEngineManager"]
