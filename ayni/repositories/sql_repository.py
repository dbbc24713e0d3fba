"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ayni.core.errors import UpstreamFailure
from ayni.db.models import Order, Product, User
from ayni.db.session import Database
from .base import check_collection, utc_now

logger = logging.getLogger(__name__)

_MODELS = {
    "usuarios": User,
    "productos": Product,
    "pedidos": Order,
}
_READ_ONLY = {"id", "created_at", "updated_at"}
# primary keys are `Integer` columns (INT4 on PostgreSQL)
_MAX_ID = 2**31 - 1


def _valid_id(record_id: Any) -> bool:
    if isinstance(record_id, bool) or not isinstance(record_id, int):
        return False
    return -_MAX_ID - 1 <= record_id <= _MAX_ID


def _as_datetime(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    raw = str(value).strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite drops tzinfo; values are always written in UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    name = "sql"

    def __init__(self, database: Database) -> None:
        self.database = database

    # -------------------------- helpers --------------------------
    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self.database.session() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("SQL backend error: %s", exc)
            raise UpstreamFailure() from exc

    def _model(self, collection: str):
        return _MODELS[check_collection(collection)]

    @staticmethod
    def _to_dict(entity) -> dict:
        data = {}
        for column in entity.__table__.columns:
            value = getattr(entity, column.name)
            if isinstance(value, datetime):
                value = _iso(value)
            data[column.name] = value
        return data

    @staticmethod
    def _columns(model) -> set[str]:
        return {column.name for column in model.__table__.columns}

    # -------------------------- lifecycle --------------------------
    def initialize(self) -> None:
        try:
            self.database.create_all()
        except SQLAlchemyError as exc:
            raise UpstreamFailure() from exc

    def ping(self) -> bool:
        try:
            with self.database.session() as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning("SQL backend unreachable: %s", exc)
            return False

    # -------------------------- reads --------------------------
    def list_all(self, collection: str, newest_first: bool = False) -> list[dict]:
        model = self._model(collection)
        stmt = select(model)
        if newest_first:
            stmt = stmt.order_by(model.created_at.desc(), model.id.desc())
        else:
            stmt = stmt.order_by(model.id)
        with self._session() as session:
            return [self._to_dict(entity) for entity in session.execute(stmt).scalars().all()]

    def get_by_id(self, collection: str, record_id: Any) -> Optional[dict]:
        model = self._model(collection)
        if not _valid_id(record_id):
            return None
        with self._session() as session:
            entity = session.get(model, record_id)
            return self._to_dict(entity) if entity else None

    def find_first(self, collection: str, field: str, value: Any) -> Optional[dict]:
        model = self._model(collection)
        if field not in self._columns(model):
            raise ValueError(f"Unknown field {field!r} for {collection}")
        stmt = select(model).where(getattr(model, field) == value).order_by(model.id).limit(1)
        with self._session() as session:
            entity = session.execute(stmt).scalars().first()
            return self._to_dict(entity) if entity else None

    # -------------------------- writes --------------------------
    def insert(self, collection: str, record: dict) -> dict:
        model = self._model(collection)
        columns = self._columns(model)
        values = {key: value for key, value in record.items() if key in columns}
        values["created_at"] = _as_datetime(values.get("created_at")) or utc_now()
        if "updated_at" in values:
            values["updated_at"] = _as_datetime(values["updated_at"])
        if values.get("id") is None:
            values.pop("id", None)
        entity = model(**values)
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return self._to_dict(entity)

    def update(self, collection: str, record_id: Any, changes: dict) -> Optional[dict]:
        model = self._model(collection)
        columns = self._columns(model) - _READ_ONLY
        if not _valid_id(record_id):
            return None
        with self._session() as session:
            entity = session.get(model, record_id)
            if not entity:
                return None
            for key, value in changes.items():
                if key in columns:
                    setattr(entity, key, value)
            entity.updated_at = utc_now()
            session.commit()
            session.refresh(entity)
            return self._to_dict(entity)

    def delete(self, collection: str, record_id: Any) -> Optional[dict]:
        model = self._model(collection)
        if not _valid_id(record_id):
            return None
        with self._session() as session:
            entity = session.get(model, record_id)
            if not entity:
                return None
            removed = self._to_dict(entity)
            session.delete(entity)
            session.commit()
            return removed
