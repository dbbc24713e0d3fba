#!/usr/bin/env python3
"""
One-off migration: JSON data directory -> SQL database.

Copies usuarios, productos and pedidos keeping ids and timestamps, so image
references and client bookmarks stay valid. Records whose id already exists
in the database are skipped.

Uso:
  DATABASE_URL=postgresql://... python scripts/migrate_json_to_sql.py --data-dir ./data
"""
from __future__ import annotations

import argparse

from sqlalchemy import text

from ayni.core.config import get_settings
from ayni.db.session import Database
from ayni.repositories.base import COLLECTIONS
from ayni.repositories.json_storage import JSONRepository
from ayni.repositories.sql_repository import SQLRepository


def migrate(source: JSONRepository, target: SQLRepository) -> dict[str, int]:
    copied: dict[str, int] = {}
    for collection in COLLECTIONS:
        count = 0
        for record in source.list_all(collection):
            if target.get_by_id(collection, record.get("id")) is not None:
                continue
            target.insert(collection, record)
            count += 1
        copied[collection] = count
    return copied


def sync_sequences(database: Database) -> None:
    """Explicit ids do not advance PostgreSQL serial sequences; realign them."""
    if database.engine.dialect.name != "postgresql":
        return
    with database.session() as session:
        for table in COLLECTIONS:
            session.execute(
                text(
                    f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                    f"COALESCE((SELECT MAX(id) FROM {table}), 0) + 1, false)"
                )
            )
        session.commit()


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Migrar datos JSON a la base SQL")
    ap.add_argument("--data-dir", default=settings.data_dir, help="Directorio con los .json")
    ap.add_argument("--database-url", default=settings.database_url, help="Destino (default: DATABASE_URL)")
    args = ap.parse_args(argv)

    database = Database(args.database_url)
    target = SQLRepository(database)
    target.initialize()
    try:
        copied = migrate(JSONRepository(args.data_dir), target)
        sync_sequences(database)
    finally:
        database.dispose()
    for collection, count in copied.items():
        print(f"{collection}: {count} registros migrados")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
