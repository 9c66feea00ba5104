# core/local_store.py

import asyncio
import json
import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union
from pydantic import BaseModel

from .config import settings
from .errors import StoreNotInitializedError, StoreVersionError, UnknownCollectionError

logger = logging.getLogger(__name__)

SOIL_LOGS = "soil_logs"
TASKS = "tasks"
PROFILE = "profile"
IRRIGATION_LOGS = "irrigation_logs"

_CATALOG = "_collections"


@dataclass(frozen=True)
class CollectionSpec:
    name: str
    key_path: str


@dataclass(frozen=True)
class StoreSchema:
    """Declared collections plus a version that must only ever increase."""
    version: int
    collections: Tuple[CollectionSpec, ...]

    def key_path(self, collection: str) -> str:
        for spec in self.collections:
            if spec.name == collection:
                return spec.key_path
        raise UnknownCollectionError(collection)


DEFAULT_SCHEMA = StoreSchema(
    version=3,
    collections=(
        CollectionSpec(SOIL_LOGS, "id"),
        CollectionSpec(TASKS, "id"),
        CollectionSpec(PROFILE, "key"),
        CollectionSpec(IRRIGATION_LOGS, "id"),
    ),
)


class StoreState(str, Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"
    FAILED = "failed"


def _table(collection: str) -> str:
    return '"c_' + collection.replace('"', '""') + '"'


class LocalStore:
    """
    Embedded key-value store for offline records, backed by one sqlite file.

    Each collection is a table of (key, JSON document). The persisted schema
    version lives in sqlite's `user_version`. Opening at a higher declared
    version creates the collections that are missing and leaves the existing
    ones alone. Every operation runs in its own transaction on a worker thread.
    """

    def __init__(self, path: Optional[str] = None, schema: Optional[StoreSchema] = None):
        self.path = path or settings.local_store_path
        self.schema = schema or StoreSchema(settings.local_store_version, DEFAULT_SCHEMA.collections)
        self.state = StoreState.CLOSED
        self.open_error: Optional[BaseException] = None
        self._opening: Optional[asyncio.Future] = None
        self._collections: Dict[str, str] = {}

    # --- OPENING ---

    async def open(self):
        """Opens the store once per process. Concurrent callers share the same open."""
        if self.state is StoreState.OPEN:
            return
        if self.state is StoreState.FAILED:
            raise StoreNotInitializedError() from self.open_error
        if self._opening is None:
            self.state = StoreState.OPENING
            self._opening = asyncio.ensure_future(self._open())
        await asyncio.shield(self._opening)

    async def _open(self):
        try:
            self._collections = await asyncio.to_thread(self._open_sync)
        except Exception as e:
            self.state = StoreState.FAILED
            self.open_error = e
            logger.error(f"---LOCAL STORE: Failed to open {self.path}: {type(e).__name__} - {e}---")
            raise StoreNotInitializedError() from e
        self.state = StoreState.OPEN
        logger.info(f"---LOCAL STORE: Opened {self.path} at version {self.schema.version}---")

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path, timeout=30)

    def _open_sync(self) -> Dict[str, str]:
        with closing(self._connect()) as conn:
            with conn:
                conn.execute(f"CREATE TABLE IF NOT EXISTS {_CATALOG} (name TEXT PRIMARY KEY, key_path TEXT NOT NULL)")
                persisted = conn.execute("PRAGMA user_version").fetchone()[0]
                if self.schema.version < persisted:
                    raise StoreVersionError(
                        f"Requested version {self.schema.version} is lower than the stored version {persisted}."
                    )
                if self.schema.version > persisted:
                    self._upgrade(conn, persisted)
            return dict(conn.execute(f"SELECT name, key_path FROM {_CATALOG}").fetchall())

    def _upgrade(self, conn: sqlite3.Connection, old_version: int):
        """Creates newly declared collections. Never drops or renames existing ones."""
        existing = {row[0] for row in conn.execute(f"SELECT name FROM {_CATALOG}")}
        for spec in self.schema.collections:
            if spec.name in existing:
                continue
            conn.execute(f"CREATE TABLE {_table(spec.name)} (key TEXT PRIMARY KEY, value TEXT NOT NULL)")
            conn.execute(f"INSERT INTO {_CATALOG} (name, key_path) VALUES (?, ?)", (spec.name, spec.key_path))
            logger.info(f"---LOCAL STORE: Created collection '{spec.name}' keyed by '{spec.key_path}'---")
        conn.execute(f"PRAGMA user_version = {int(self.schema.version)}")
        logger.info(f"---LOCAL STORE: Upgraded schema from v{old_version} to v{self.schema.version}---")

    async def _ready(self) -> bool:
        try:
            await self.open()
        except StoreNotInitializedError:
            return False
        return True

    def _key_path(self, collection: str) -> str:
        try:
            return self._collections[collection]
        except KeyError:
            raise UnknownCollectionError(collection) from None

    # --- OPERATIONS ---

    async def put(self, collection: str, record: Union[dict, BaseModel]):
        """Upserts a record by the collection's key field. Last write wins."""
        if not await self._ready():
            raise StoreNotInitializedError()
        document = record.model_dump(mode="json") if isinstance(record, BaseModel) else dict(record)
        key_path = self._key_path(collection)
        key = document.get(key_path)
        if key is None:
            raise ValueError(f"Record for '{collection}' has no '{key_path}' field.")
        await asyncio.to_thread(self._put_sync, collection, str(key), json.dumps(document))

    def _put_sync(self, collection: str, key: str, value: str):
        with closing(self._connect()) as conn, conn:
            conn.execute(
                f"INSERT INTO {_table(collection)} (key, value) VALUES (?, ?) "
                f"ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    async def get_all(self, collection: str) -> List[dict]:
        """Every record in the collection. An unopened or failed store reads as empty."""
        if not await self._ready():
            return []
        self._key_path(collection)
        return await asyncio.to_thread(self._get_all_sync, collection)

    def _get_all_sync(self, collection: str) -> List[dict]:
        with closing(self._connect()) as conn:
            rows = conn.execute(f"SELECT value FROM {_table(collection)}").fetchall()
        return [json.loads(row[0]) for row in rows]

    async def delete(self, collection: str, key: str):
        """Removes the record with this key. Missing keys are ignored."""
        if not await self._ready():
            raise StoreNotInitializedError()
        self._key_path(collection)
        await asyncio.to_thread(self._delete_sync, collection, str(key))

    def _delete_sync(self, collection: str, key: str):
        with closing(self._connect()) as conn, conn:
            conn.execute(f"DELETE FROM {_table(collection)} WHERE key = ?", (key,))
