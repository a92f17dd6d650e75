"""
JSON collection storage

Every collection (users, notices, reports, ...) lives in <DATA_DIR>/<name>.json
as a single top-level array. In "memory" mode the files are only read once to
seed an in-process cache and writes never touch disk.
"""

import copy
import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional, Union

from .config import DATA_DIR, STORAGE_MODE

logger = logging.getLogger(__name__)

STORAGE_MODES = ("file", "memory")
COLLECTION_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")


class StorageError(Exception):
    """Raised when a collection cannot be read from or written to disk"""


class JsonStore:
    """Key-value access to JSON array collections with per-collection locking"""

    def __init__(self, data_dir: Union[str, Path], mode: str = "file"):
        if mode not in STORAGE_MODES:
            raise ValueError(f"Unknown storage mode '{mode}', expected one of {STORAGE_MODES}")
        self.data_dir = Path(data_dir)
        self.mode = mode
        self._memory: dict[str, list[dict[str, Any]]] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def lock(self, collection: str) -> threading.RLock:
        """Lock guarding read-modify-write cycles on one collection"""
        with self._locks_guard:
            if collection not in self._locks:
                self._locks[collection] = threading.RLock()
            return self._locks[collection]

    def path_for(self, collection: str) -> Path:
        if not COLLECTION_NAME_PATTERN.match(collection):
            raise ValueError(f"Invalid collection name: {collection!r}")
        return self.data_dir / f"{collection}.json"

    def read(self, collection: str) -> list[dict[str, Any]]:
        """Return a copy of every record in the collection"""
        with self.lock(collection):
            if self.mode == "memory":
                if collection not in self._memory:
                    self._memory[collection] = self._load(collection, create=False)
                    logger.info(
                        f"📥 Seeded in-memory collection '{collection}' "
                        f"with {len(self._memory[collection])} records"
                    )
                return copy.deepcopy(self._memory[collection])
            return self._load(collection, create=True)

    def write(self, collection: str, items: list[dict[str, Any]]) -> None:
        """Replace the whole collection"""
        with self.lock(collection):
            if self.mode == "memory":
                self._memory[collection] = copy.deepcopy(list(items))
                return
            self._dump(collection, list(items))

    def _load(self, collection: str, create: bool) -> list[dict[str, Any]]:
        path = self.path_for(collection)

        if not path.exists():
            if create:
                try:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    path.write_text("[]", encoding="utf-8")
                except OSError as e:
                    logger.error(f"❌ Could not create collection file {path}: {e}")
                    raise StorageError(f"Could not create collection '{collection}'") from e
                logger.info(f"📁 Created empty collection file {path}")
            return []

        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"❌ Failed to read collection '{collection}' from {path}: {e}")
            raise StorageError(f"Could not read collection '{collection}'") from e

        if not isinstance(data, list):
            logger.error(f"❌ Collection file {path} does not contain a JSON array")
            raise StorageError(f"Collection '{collection}' is not a JSON array")

        return data

    def _dump(self, collection: str, items: list[dict[str, Any]]) -> None:
        path = self.path_for(collection)
        tmp_path: Optional[str] = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{collection}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"❌ Failed to write collection '{collection}' to {path}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"Could not write collection '{collection}'") from e

        logger.debug(f"💾 Wrote {len(items)} records to {path}")


_store: Optional[JsonStore] = None


def get_store() -> JsonStore:
    """FastAPI dependency returning the process-wide store"""
    global _store
    if _store is None:
        _store = JsonStore(DATA_DIR, STORAGE_MODE)
        logger.info(f"✅ JSON store ready: dir={_store.data_dir}, mode={_store.mode}")
    return _store
