# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: SQL-backed collections (Postgres/Supabase in production, SQLite
for local runs). One row per record in ``chama_records``; a save replaces the
collection's rows inside a single transaction.

Writers serialise per collection on a ``chama_collections`` row lock taken
before the revision is read, so two app instances sharing one database see
each other's writes as stale instead of colliding on the primary key.
"""

import json
import threading
from typing import List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from chama.core.errors import StaleWrite, StoreUnavailable
from chama.core.logging import get_logger
from chama.repositories.base import CollectionStore, Record, parse_rows, row_revision

logger = get_logger(__name__)

_DDL = (
    """
    CREATE TABLE IF NOT EXISTS chama_records (
        collection VARCHAR(64) NOT NULL,
        position   INTEGER     NOT NULL,
        body       TEXT        NOT NULL,
        PRIMARY KEY (collection, position)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS chama_collections (
        collection VARCHAR(64) PRIMARY KEY
    )
    """,
)


class SqlStore(CollectionStore):
    backend = "sql"

    def __init__(self, engine: Engine):
        self._engine = engine
        self._lock = threading.Lock()

    # ── Lifecycle ──

    def open(self) -> None:
        try:
            with self._engine.begin() as conn:
                for ddl in _DDL:
                    conn.execute(text(ddl))
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Database unavailable: {exc}")
        logger.info("SQL store ready (%s)", self._engine.url.get_backend_name())

    def close(self) -> None:
        self._engine.dispose()

    def ping(self) -> None:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Database unavailable: {exc}")

    # ── Hooks ──

    def _names(self) -> List[str]:
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(text("SELECT DISTINCT collection FROM chama_records")).fetchall()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Database unavailable: {exc}")
        return [row[0] for row in rows]

    def _snapshot(self, name: str) -> Tuple[List[Record], str]:
        try:
            with self._engine.connect() as conn:
                bodies = self._bodies(conn, name)
        except SQLAlchemyError as exc:
            logger.error("Load %s failed: %s", name, exc)
            raise StoreUnavailable(f"Cannot read collection '{name}'")
        return parse_rows(name, bodies), row_revision(bodies)

    def _save(self, name: str, records: List[Record],
              expected_revision: Optional[str]) -> str:
        bodies = [json.dumps(r, ensure_ascii=False) for r in records]
        try:
            with self._lock, self._engine.begin() as conn:
                self._lock_collection(conn, name)
                if expected_revision is not None:
                    if row_revision(self._bodies(conn, name)) != expected_revision:
                        logger.warning("Stale write rejected for collection %s", name)
                        raise StaleWrite()
                conn.execute(
                    text("DELETE FROM chama_records WHERE collection = :c"), {"c": name},
                )
                if bodies:
                    conn.execute(
                        text("""
                            INSERT INTO chama_records (collection, position, body)
                            VALUES (:c, :p, :b)
                        """),
                        [{"c": name, "p": i, "b": b} for i, b in enumerate(bodies)],
                    )
        except IntegrityError:
            # Another writer committed rows for this collection under us
            logger.warning("Concurrent write detected for collection %s", name)
            raise StaleWrite()
        except SQLAlchemyError as exc:
            logger.error("Save %s failed: %s", name, exc)
            raise StoreUnavailable(f"Cannot write collection '{name}'")
        return row_revision(bodies)

    @staticmethod
    def _lock_collection(conn, name: str) -> None:
        conn.execute(
            text("INSERT INTO chama_collections (collection) VALUES (:c) ON CONFLICT DO NOTHING"),
            {"c": name},
        )
        # SQLite already serialises writers on the database file
        if conn.dialect.name != "sqlite":
            conn.execute(
                text("SELECT collection FROM chama_collections WHERE collection = :c FOR UPDATE"),
                {"c": name},
            )

    @staticmethod
    def _bodies(conn, name: str) -> List[str]:
        rows = conn.execute(
            text("SELECT body FROM chama_records WHERE collection = :c ORDER BY position"),
            {"c": name},
        ).fetchall()
        return [row[0] for row in rows]
