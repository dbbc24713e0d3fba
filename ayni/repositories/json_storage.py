"""
Flat-file persistence adapter.

Each collection lives in `<data_dir>/<collection>.json` as
`{"next_id": int, "records": [...]}`. Every write reads the whole file,
mutates it in memory and replaces it atomically (temp file + os.replace), so
a reader never sees a half-written file. Writers inside one process are
serialized by a lock; separate processes sharing the directory still race.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

from ayni.core.errors import UpstreamFailure
from .base import check_collection, now_iso

logger = logging.getLogger(__name__)

_READ_ONLY = {"id", "created_at", "updated_at"}


def _empty() -> dict:
    return {"next_id": 1, "records": []}


class JSONRepository:
    name = "json"

    def __init__(self, data_dir: str | os.PathLike) -> None:
        self.data_dir = Path(data_dir)
        self._lock = threading.RLock()

    # -------------------------- file helpers --------------------------
    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{check_collection(collection)}.json"

    def load(self, collection: str) -> dict:
        path = self._path(collection)
        if not path.exists():
            return _empty()
        try:
            with path.open("r", encoding="utf-8") as f:
                db = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Cannot read %s: %s", path, exc)
            raise UpstreamFailure() from exc
        if not isinstance(db, dict) or not isinstance(db.get("records"), list):
            logger.error("Unexpected layout in %s", path)
            raise UpstreamFailure()
        return db_defaults(db)

    def save(self, collection: str, db: dict) -> None:
        path = self._path(collection)
        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.data_dir, prefix=f".{collection}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                json.dump(db, tmp, ensure_ascii=False, indent=2)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError as exc:
            logger.error("Cannot write %s: %s", path, exc)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise UpstreamFailure() from exc

    # -------------------------- lifecycle --------------------------
    def initialize(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise UpstreamFailure() from exc

    def ping(self) -> bool:
        return self.data_dir.is_dir() and os.access(self.data_dir, os.W_OK)

    # -------------------------- reads --------------------------
    def list_all(self, collection: str, newest_first: bool = False) -> list[dict]:
        records = self.load(collection)["records"]
        if newest_first:
            return sorted(records, key=lambda r: (r.get("created_at") or "", r.get("id") or 0), reverse=True)
        return records

    def get_by_id(self, collection: str, record_id: Any) -> Optional[dict]:
        for record in self.load(collection)["records"]:
            if record.get("id") == record_id:
                return record
        return None

    def find_first(self, collection: str, field: str, value: Any) -> Optional[dict]:
        for record in self.load(collection)["records"]:
            if record.get(field) == value:
                return record
        return None

    # -------------------------- writes --------------------------
    def insert(self, collection: str, record: dict) -> dict:
        with self._lock:
            db = self.load(collection)
            stored = dict(record)
            if stored.get("id") is None:
                stored["id"] = db["next_id"]
            db["next_id"] = max(db["next_id"], int(stored["id"]) + 1)
            stored["created_at"] = stored.get("created_at") or now_iso()
            stored.setdefault("updated_at", None)
            db["records"].append(stored)
            self.save(collection, db)
            return stored

    def update(self, collection: str, record_id: Any, changes: dict) -> Optional[dict]:
        with self._lock:
            db = self.load(collection)
            for record in db["records"]:
                if record.get("id") == record_id:
                    record.update({k: v for k, v in changes.items() if k not in _READ_ONLY})
                    record["updated_at"] = now_iso()
                    self.save(collection, db)
                    return record
            return None

    def delete(self, collection: str, record_id: Any) -> Optional[dict]:
        with self._lock:
            db = self.load(collection)
            for index, record in enumerate(db["records"]):
                if record.get("id") == record_id:
                    removed = db["records"].pop(index)
                    self.save(collection, db)
                    return removed
            return None


def db_defaults(db: dict) -> dict:
    db.setdefault("next_id", 1)
    db.setdefault("records", [])
    return db
