"""
services/kv_store.py

Key-value blob store used for all durable state.

Every collection is one JSON string under a fixed key. Two backends:
  - SqlKeyValueStore:  SQLAlchemy table (``stored_items`` / ``secure_items``)
  - InMemoryKeyValueStore: process-local dict, for tests and ephemeral runs

Backend errors surface as StorageError; callers decide whether to recover.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Protocol

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.db.models import SecureItem, StoredItem
from app.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

CASES_STORAGE_KEY = "cases_data"
USER_DATA_KEY = "user_data"
AUTH_TOKEN_KEY = "auth_token"
NOTIFICATIONS_KEY = "app_notifications"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def ping(self) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove(self, key: str) -> None:
        self._items.pop(key, None)

    async def ping(self) -> None:
        return None


class SqlKeyValueStore:
    """
    Blob store on a SQLAlchemy table keyed by ``key``.

    Sessions are synchronous, so each call runs in a worker thread to keep
    the event loop free.
    """

    model = StoredItem

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._get_sync, key)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._set_sync, key, value)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write '{key}': {e}") from e

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._remove_sync, key)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to remove '{key}': {e}") from e

    async def ping(self) -> None:
        try:
            await asyncio.to_thread(self._ping_sync)
        except SQLAlchemyError as e:
            raise StorageError(f"Store unavailable: {e}") from e

    def _get_sync(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            row = db.get(self.model, key)
            return row.value if row is not None else None

    def _set_sync(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            db.merge(self.model(key=key, value=value))
            db.commit()

    def _remove_sync(self, key: str) -> None:
        with self._session_factory() as db:
            db.query(self.model).filter(self.model.key == key).delete(synchronize_session=False)
            db.commit()

    def _ping_sync(self) -> None:
        with self._session_factory() as db:
            db.execute(text("SELECT 1"))


class SqlSecureStore(SqlKeyValueStore):
    """Credential store; may live in its own database via SECURE_STORE_URL"""

    model = SecureItem


async def resolve_token_store(
    secure: Optional[KeyValueStore],
    fallback: KeyValueStore,
) -> KeyValueStore:
    """
    Pick where the session token lives.

    Falls back to the general store when the secure store is missing or
    fails its probe; the fallback is always logged.
    """
    if secure is None:
        logger.warning("Secure store not configured; session token will be kept in the general store")
        return fallback
    try:
        await secure.ping()
    except StorageError as e:
        logger.warning("Secure store unavailable (%s); session token will be kept in the general store", e)
        return fallback
    return secure
