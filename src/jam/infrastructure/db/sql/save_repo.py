from __future__ import annotations

import json
import logging
import time
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from jam.domain.repositories import SaveRepository, SaveStoreError


logger = logging.getLogger(__name__)

SAVE_TABLE = "save_slot"


def _dialect(session) -> str:
    return session.bind.dialect.name if session.bind is not None else "mysql"


def _blob_version(blob: str) -> int:
    try:
        payload = json.loads(blob)
    except (TypeError, ValueError):
        return 0
    if not isinstance(payload, dict):
        return 0
    version = payload.get("version")
    if isinstance(version, bool) or not isinstance(version, int):
        return 0
    return version


class SqlSaveRepository(SaveRepository):
    """Save slots in a ``save_slot`` table, one row per key."""

    def __init__(self, session_factory, *, ensure_schema: bool = True) -> None:
        self._session_factory = session_factory
        if ensure_schema:
            self.ensure_table()

    def ensure_table(self) -> None:
        try:
            with self._session_factory.begin() as session:
                payload_type = "MEDIUMTEXT" if _dialect(session) == "mysql" else "TEXT"
                session.execute(
                    text(
                        f"""
                        CREATE TABLE IF NOT EXISTS {SAVE_TABLE} (
                            save_key VARCHAR(128) PRIMARY KEY,
                            payload {payload_type} NOT NULL,
                            version INTEGER NOT NULL,
                            updated_at INTEGER NOT NULL
                        )
                        """
                    )
                )
        except SQLAlchemyError as exc:
            raise SaveStoreError("Could not prepare the save table") from exc

    def get(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as session:
                row = session.execute(
                    text(f"SELECT payload FROM {SAVE_TABLE} WHERE save_key = :key"),
                    {"key": str(key)},
                ).first()
        except SQLAlchemyError as exc:
            raise SaveStoreError(f"Could not read save {key}") from exc
        if row is None:
            return None
        return str(row.payload)

    def put(self, key: str, blob: str) -> None:
        params = {
            "key": str(key),
            "payload": str(blob),
            "version": _blob_version(blob),
            "updated_at": int(time.time()),
        }
        try:
            with self._session_factory.begin() as session:
                if _dialect(session) == "mysql":
                    statement = f"""
                        INSERT INTO {SAVE_TABLE} (save_key, payload, version, updated_at)
                        VALUES (:key, :payload, :version, :updated_at)
                        ON DUPLICATE KEY UPDATE
                            payload = VALUES(payload),
                            version = VALUES(version),
                            updated_at = VALUES(updated_at)
                    """
                else:
                    statement = f"""
                        INSERT INTO {SAVE_TABLE} (save_key, payload, version, updated_at)
                        VALUES (:key, :payload, :version, :updated_at)
                        ON CONFLICT(save_key) DO UPDATE SET
                            payload = excluded.payload,
                            version = excluded.version,
                            updated_at = excluded.updated_at
                    """
                session.execute(text(statement), params)
        except SQLAlchemyError as exc:
            raise SaveStoreError(f"Could not write save {key}") from exc
        logger.debug("Stored save %s (version %s)", key, params["version"])

    def delete(self, key: str) -> None:
        try:
            with self._session_factory.begin() as session:
                session.execute(text(f"DELETE FROM {SAVE_TABLE} WHERE save_key = :key"), {"key": str(key)})
        except SQLAlchemyError as exc:
            raise SaveStoreError(f"Could not delete save {key}") from exc
