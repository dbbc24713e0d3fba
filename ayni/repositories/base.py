"""
Repository protocol shared by the SQL and JSON persistence strategies.

Records cross this boundary as plain dicts with JSON-friendly values
(timestamps as ISO-8601 UTC strings), so services and routers never see which
backend produced them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Protocol, runtime_checkable

COLLECTIONS = ("usuarios", "productos", "pedidos")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    return utc_now().isoformat()


def check_collection(collection: str) -> str:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")
    return collection


@runtime_checkable
class Repository(Protocol):
    """Uniform CRUD contract over one storage backend."""

    name: str

    def initialize(self) -> None:
        """Prepare the backend (tables, data directory)."""
        ...

    def ping(self) -> bool:
        """Return True when the backend is reachable."""
        ...

    def list_all(self, collection: str, newest_first: bool = False) -> list[dict]:
        """Insertion order, or created_at descending when newest_first."""
        ...

    def get_by_id(self, collection: str, record_id: Any) -> Optional[dict]:
        ...

    def find_first(self, collection: str, field: str, value: Any) -> Optional[dict]:
        ...

    def insert(self, collection: str, record: dict) -> dict:
        """Store the record, assigning id/created_at when missing."""
        ...

    def update(self, collection: str, record_id: Any, changes: dict) -> Optional[dict]:
        """Merge the given fields and stamp updated_at; None when absent."""
        ...

    def delete(self, collection: str, record_id: Any) -> Optional[dict]:
        """Remove the record and return what was stored; None when absent."""
        ...


def build_repository(settings) -> Repository:
    """Pick the persistence strategy configured for this process."""
    backend = settings.storage_backend
    if backend == "sql":
        from ayni.db.session import Database
        from .sql_repository import SQLRepository

        return SQLRepository(Database(settings.database_url))
    if backend == "json":
        from .json_storage import JSONRepository

        return JSONRepository(settings.data_dir)
    raise RuntimeError(f"Unsupported STORAGE_BACKEND: {backend!r} (expected 'sql' or 'json')")
