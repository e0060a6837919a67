"""
local_storage.py — Durable key/value storage for client-side state.
get / set / remove over the local_state table; synchronous from the caller's
point of view. Each call commits on its own.
"""

import logging

from sqlalchemy.orm import sessionmaker

from studytracker.database import SessionLocal
from studytracker.models.local_state import LocalState

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        with self._session_factory() as db:
            row = db.get(LocalState, key)
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            try:
                row = db.get(LocalState, key)
                if row is None:
                    db.add(LocalState(key=key, value=value))
                else:
                    row.value = value
                db.commit()
            except Exception:
                db.rollback()
                logger.exception(f"Failed to write local state '{key}'")
                raise

    def remove(self, key: str) -> None:
        with self._session_factory() as db:
            try:
                row = db.get(LocalState, key)
                if row is not None:
                    db.delete(row)
                    db.commit()
            except Exception:
                db.rollback()
                logger.exception(f"Failed to remove local state '{key}'")
                raise
