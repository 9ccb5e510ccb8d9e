"""
# Logging Manager

Central logger factory for the data layer. Every module obtains its logger once at import
time with a component prefix:

```python
from myweblog.managers.logging_manager import get_logger

logger = get_logger(prefix="[MongoPostData]")
logger.info("Restored %d posts", count)
# 2024-01-01 12:00:00,000 INFO myweblog: [MongoPostData] Restored 12 posts
```

The handler and level are configured the first time a logger is requested, using
`settings.LOG_LEVEL`. Applications embedding the data layer can configure the
`myweblog` logger themselves beforehand; an existing handler is left untouched.
"""

import logging
from typing import Any, MutableMapping, Tuple

from myweblog.config import settings

DEFAULT_LOGGER_NAME = "myweblog"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


class PrefixedLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that prepends a fixed component prefix to every message."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        prefix = self.extra.get("prefix") if self.extra else ""
        if prefix:
            return f"{prefix} {msg}", kwargs
        return msg, kwargs


def _configure_root(name: str) -> None:
    global _configured
    if _configured:
        return
    base = logging.getLogger(name.split(".")[0])
    if not base.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        base.addHandler(handler)
    level = logging.getLevelName(str(settings.LOG_LEVEL).upper())
    base.setLevel(level if isinstance(level, int) else logging.INFO)
    _configured = True


def get_logger(name: str = DEFAULT_LOGGER_NAME, prefix: str = "") -> PrefixedLoggerAdapter:
    """
    Return a logger for the given name whose messages carry `prefix`.

    Args:
        name: Logger name; defaults to the package logger.
        prefix: Component tag such as `"[DATABASE]"`.
    """
    _configure_root(name)
    return PrefixedLoggerAdapter(logging.getLogger(name), {"prefix": prefix})
