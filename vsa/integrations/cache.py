"""
Local Cache.

Best-effort JSON-file key/value store. Datetimes are written as ISO strings
and revived on read, either because the string looks like an ISO date or
because the key names a date field. Read and write failures are logged and
never raised.
"""

import json
import logging
import re
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}(\.\d{1,6})?(Z|[+-]\d{2}:\d{2})?)?$")
DATE_FIELDS = ("date", "lastupdated", "createdat", "updatedat", "uploadedat")


def _parse_datetime(value: str):
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def revive_dates(key: str, value: Any) -> Any:
    """Datetime for date-like strings, the value unchanged otherwise."""
    if isinstance(value, str):
        is_date_field = any(name in key.lower() for name in DATE_FIELDS)
        if ISO_DATE.match(value) or is_date_field:
            parsed = _parse_datetime(value)
            if parsed is not None:
                return parsed
    return value


def _revive(obj: Dict[str, Any]) -> Dict[str, Any]:
    return {key: revive_dates(key, value) for key, value in obj.items()}


def _encode(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", by_alias=True)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class LocalCache:
    """
    JSON-file backed key/value cache.

    Usage:
        cache = LocalCache(config.cache.path)
        cache.set("catalog", services)
        services = cache.get("catalog", [])
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f, object_hook=_revive)
        except (OSError, ValueError) as e:
            logger.warning(f"Error reading cache {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=_encode)
            tmp.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Error saving cache {self.path}: {e}")
            return False
        return True

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._read().get(key, default)

    def set(self, key: str, value: Any) -> bool:
        """Store a value; returns False when the write failed."""
        with self._lock:
            data = self._read()
            data[key] = value
            saved = self._write(data)
        if saved:
            logger.debug(f"Cached '{key}' to {self.path}")
        return saved

    def delete(self, key: str) -> bool:
        with self._lock:
            data = self._read()
            if key not in data:
                return False
            del data[key]
            return self._write(data)

    def clear(self) -> bool:
        with self._lock:
            return self._write({})

    def keys(self):
        with self._lock:
            return list(self._read().keys())
