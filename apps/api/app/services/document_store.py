from __future__ import annotations

"""JSON-file document store with thread-safety for the pickup tracker mock."""

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT: Dict[str, Any] = {
    "pickers": [],
    "users": [],
    "bins": [],
    "pickups": [],
    "pointsHistory": [],
    "pickerRoutes": {},
    "meta": {},
}


def same_id(left: Any, right: Any) -> bool:
    """Compare ids the way URL segments see them (``7`` matches ``"7"``)."""
    return left is not None and right is not None and str(left) == str(right)


def resolve_data_path(path_str: str) -> Path:
    """Resolve relative data paths against the API root."""
    path = Path(path_str)
    if path.is_absolute():
        return path
    api_root = Path(__file__).resolve().parents[2]
    return api_root / path


class DocumentStore:
    """Thread-safe JSON document of named collections, persisted on every write.

    Top-level values are either lists of records carrying an ``id`` or plain
    objects (``pickerRoutes``, ``meta``). Reads hand out deep copies; every
    mutating method does its read-modify-write under ``lock`` and saves the
    document before returning. ``lock`` is re-entrant so handlers can hold it
    across several calls to make a compound update atomic.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.path: Path | None = None
        self.reset()

    def reset(self) -> None:
        """Replace the document with the empty collection layout."""
        with self.lock:
            self.data: Dict[str, Any] = copy.deepcopy(EMPTY_DOCUMENT)

    def load(self, path: str | Path) -> None:
        """Load the document from ``path``, creating the file if missing."""
        path_obj = resolve_data_path(str(path))
        with self.lock:
            self.path = path_obj
            if not path_obj.exists():
                logger.info("No database at %s, creating an empty one", path_obj)
                self.reset()
                self.save()
                return
            payload = json.loads(path_obj.read_text(encoding="utf-8"))
            for name, default in EMPTY_DOCUMENT.items():
                payload.setdefault(name, copy.deepcopy(default))
            self.data = payload
        logger.info(
            "Loaded %s (%s)",
            path_obj,
            ", ".join(f"{name}={len(value)}" for name, value in self.data.items() if isinstance(value, list)),
        )

    def save(self) -> None:
        """Write the whole document to disk; no-op for an unbound store."""
        with self.lock:
            if self.path is None:
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2)
            os.replace(tmp_path, self.path)

    def snapshot(self) -> dict:
        """Return a copy of the full document."""
        with self.lock:
            return copy.deepcopy(self.data)

    def names(self) -> List[str]:
        with self.lock:
            return list(self.data.keys())

    def has(self, name: str) -> bool:
        with self.lock:
            return name in self.data

    def is_collection(self, name: str) -> bool:
        """True when ``name`` holds a list of records rather than an object."""
        with self.lock:
            return isinstance(self.data.get(name), list)

    # --- collections ---

    def _records(self, name: str) -> List[dict]:
        records = self.data.get(name)
        if not isinstance(records, list):
            raise KeyError(name)
        return records

    def _index(self, name: str, item_id: Any) -> int | None:
        for idx, record in enumerate(self._records(name)):
            if same_id(record.get("id"), item_id):
                return idx
        return None

    def list(self, name: str) -> List[dict]:
        """All records of a collection (empty for an unknown name)."""
        with self.lock:
            records = self.data.get(name)
            if not isinstance(records, list):
                return []
            return copy.deepcopy(records)

    def get(self, name: str, item_id: Any) -> dict | None:
        with self.lock:
            if not self.is_collection(name):
                return None
            idx = self._index(name, item_id)
            if idx is None:
                return None
            return copy.deepcopy(self._records(name)[idx])

    def find(self, name: str, **fields: Any) -> List[dict]:
        """Records whose fields equal every given value."""
        return [
            record
            for record in self.list(name)
            if all(key in record and record[key] == value for key, value in fields.items())
        ]

    def next_id(self, name: str) -> int:
        """One more than the largest integer id in the collection."""
        with self.lock:
            ids = [r.get("id") for r in self._records(name)]
            numeric = [i for i in ids if isinstance(i, int) and not isinstance(i, bool)]
            return max(numeric, default=0) + 1

    def insert(self, name: str, item: dict) -> dict:
        """Append a record, assigning the next id when it has none."""
        with self.lock:
            records = self._records(name)
            record = copy.deepcopy(item)
            if record.get("id") is None:
                record["id"] = self.next_id(name)
            records.append(record)
            self.save()
            return copy.deepcopy(record)

    def update(self, name: str, item_id: Any, changes: dict) -> dict | None:
        """Merge ``changes`` into a record; ``None`` when it does not exist."""
        with self.lock:
            idx = self._index(name, item_id)
            if idx is None:
                return None
            record = self._records(name)[idx]
            record.update(copy.deepcopy(changes))
            self.save()
            return copy.deepcopy(record)

    def replace(self, name: str, item_id: Any, item: dict) -> dict | None:
        """Replace a record wholesale, keeping its id."""
        with self.lock:
            idx = self._index(name, item_id)
            if idx is None:
                return None
            records = self._records(name)
            record = copy.deepcopy(item)
            record["id"] = records[idx]["id"]
            records[idx] = record
            self.save()
            return copy.deepcopy(record)

    def delete(self, name: str, item_id: Any) -> bool:
        with self.lock:
            idx = self._index(name, item_id)
            if idx is None:
                return False
            del self._records(name)[idx]
            self.save()
            return True

    # --- singular objects ---

    def get_object(self, name: str) -> dict | None:
        with self.lock:
            value = self.data.get(name)
            if not isinstance(value, dict):
                return None
            return copy.deepcopy(value)

    def set_object(self, name: str, value: dict, merge: bool = False) -> dict:
        """Replace (or merge into) a top-level object, creating it if needed."""
        with self.lock:
            current = self.data.get(name)
            if merge and isinstance(current, dict):
                current.update(copy.deepcopy(value))
            else:
                self.data[name] = copy.deepcopy(value)
            self.save()
            return copy.deepcopy(self.data[name])


_store = DocumentStore()


def get_store() -> DocumentStore:
    """Get the singleton document store."""
    return _store
