"""
JSON File Store
Persists dashboard resources (stock, alerts, maintenance, schedules, ...) as
one pretty-printed JSON list per resource, plus a key/value settings file.

No cross-process locking: a single backend process owns the data directory.
"""

import json
import logging
import os
import re
import tempfile
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SETTINGS_RESOURCE = "settings"

_RESOURCE_NAME = re.compile(r"^[A-Za-z0-9_-]+$")


class StorageError(Exception):
    """Base error for the file store"""

    pass


class InvalidResourceError(StorageError):
    """Raised when a resource name could escape the data directory"""

    pass


class ItemNotFoundError(StorageError):
    """Raised when no item has the requested id"""

    pass


def _same_id(stored: Any, requested: Any) -> bool:
    # Path params arrive as strings while ids are stored as numbers
    return str(stored) == str(requested)


class JsonFileStore:
    """Generic CRUD over `<data_dir>/<resource>.json` files"""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    def _path(self, resource: str) -> Path:
        if not isinstance(resource, str) or not _RESOURCE_NAME.match(resource):
            raise InvalidResourceError(f"Invalid resource name: {resource!r}")
        return self.data_dir / f"{resource}.json"

    def _read(self, resource: str) -> List[Any]:
        path = self._path(resource)
        if not path.exists():
            self._write(resource, [])
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable storage file {path.name}, treating as empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Storage file {path.name} does not hold a list")
            return []
        return data

    def _write(self, resource: str, data: List[Any]) -> None:
        path = self._path(resource)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.data_dir, prefix=f".{resource}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    # ═══════════════════════════════════════════════════════════════════════════
    # LIST RESOURCES
    # ═══════════════════════════════════════════════════════════════════════════

    def list_items(self, resource: str) -> List[Any]:
        with self._lock:
            return self._read(resource)

    def create_item(self, resource: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Append a new item stamped with a millisecond id and created_at"""
        with self._lock:
            data = self._read(resource)

            item_id = int(time.time() * 1000)
            existing = {
                item.get("id") for item in data if isinstance(item, dict)
            }
            if item_id in existing:
                item_id = max(i for i in existing if isinstance(i, int)) + 1

            item = {
                "id": item_id,
                **payload,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            data.append(item)
            self._write(resource, data)

        logger.debug(f"Created {resource}/{item_id}")
        return item

    def update_item(
        self, resource: str, item_id: Any, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Shallow-merge payload into an existing item"""
        with self._lock:
            data = self._read(resource)
            for index, item in enumerate(data):
                if isinstance(item, dict) and _same_id(item.get("id"), item_id):
                    data[index] = {**item, **payload}
                    self._write(resource, data)
                    return data[index]

        raise ItemNotFoundError(f"{resource}/{item_id} not found")

    def delete_item(self, resource: str, item_id: Any) -> bool:
        """Remove every item with this id; True even when nothing matched"""
        with self._lock:
            data = self._read(resource)
            kept = [
                item
                for item in data
                if not (isinstance(item, dict) and _same_id(item.get("id"), item_id))
            ]
            self._write(resource, kept)

        if len(kept) == len(data):
            logger.debug(f"Delete of {resource}/{item_id} matched nothing")
        return True

    # ═══════════════════════════════════════════════════════════════════════════
    # KEY/VALUE SETTINGS
    # ═══════════════════════════════════════════════════════════════════════════

    def get_setting(self, key: str) -> Optional[Any]:
        with self._lock:
            for entry in self._read(SETTINGS_RESOURCE):
                if isinstance(entry, dict) and entry.get("key") == key:
                    return entry.get("value")
        return None

    def set_setting(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read(SETTINGS_RESOURCE)
            for entry in data:
                if isinstance(entry, dict) and entry.get("key") == key:
                    entry["value"] = value
                    break
            else:
                data.append({"key": key, "value": value})
            self._write(SETTINGS_RESOURCE, data)


_store: Optional[JsonFileStore] = None


def get_file_store() -> JsonFileStore:
    """Get singleton store rooted at the configured data directory"""
    global _store
    if _store is None:
        from settings import settings

        _store = JsonFileStore(settings.storage.data_dir)
    return _store
