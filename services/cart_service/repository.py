"""
Persistent cart storage.

JsonFileCartRepository keeps every user's cart in one JSON document that is
rewritten wholesale on each save. Saves inside one process are serialized by
a lock and land atomically (temp file + os.replace), but separate processes
sharing the same file still race and the last writer wins.

SqlCartRepository stores one row per user, so concurrent writers for
different users never overwrite each other. Its saves are also serialized
in-process, so snapshots of one user's cart commit in the order they were
taken.
"""
import asyncio
import json
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from shared.config.database import build_engine, build_sessionmaker, create_tables
from shared.config.settings import Settings
from .exceptions import CartPersistenceError
from .models import CartRecord
from .schemas import CartItem


def serialize_cart(items: list[CartItem]) -> list[dict]:
    return [item.model_dump(by_alias=True) for item in items]


def deserialize_cart(rows) -> list[CartItem]:
    try:
        return [CartItem.model_validate(row) for row in rows or []]
    except (ValidationError, TypeError) as e:
        raise CartPersistenceError(f"Malformed cart data: {e}") from e


class CartRepository:

    async def init(self) -> None:
        return None

    async def load(self, user_id: str) -> list[CartItem]:
        raise NotImplementedError

    async def save(self, user_id: str, items: list[CartItem]) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class JsonFileCartRepository(CartRepository):

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read_all(self) -> dict:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise CartPersistenceError(f"Could not read {self.path}: {e}") from e

        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CartPersistenceError(f"Corrupt cart file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise CartPersistenceError(f"Corrupt cart file {self.path}: expected an object")
        return data

    def _write_all(self, data: dict) -> None:
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise CartPersistenceError(f"Could not write {self.path}: {e}") from e

    async def load(self, user_id: str) -> list[CartItem]:
        data = await asyncio.to_thread(self._read_all)
        return deserialize_cart(data.get(user_id))

    async def save(self, user_id: str, items: list[CartItem]) -> None:
        payload = serialize_cart(items)
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
            data[user_id] = payload
            await asyncio.to_thread(self._write_all, data)


class SqlCartRepository(CartRepository):

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessionmaker = build_sessionmaker(engine)
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        try:
            await create_tables(self.engine)
        except SQLAlchemyError as e:
            raise CartPersistenceError(f"Could not create cart tables: {e}") from e

    async def load(self, user_id: str) -> list[CartItem]:
        try:
            async with self._sessionmaker() as db:
                record = await db.get(CartRecord, user_id)
                rows = record.items if record is not None else []
        except SQLAlchemyError as e:
            raise CartPersistenceError(f"Could not load cart for {user_id}: {e}") from e
        return deserialize_cart(rows)

    async def save(self, user_id: str, items: list[CartItem]) -> None:
        payload = serialize_cart(items)
        try:
            async with self._lock, self._sessionmaker() as db:
                record = await db.get(CartRecord, user_id)
                if record is None:
                    db.add(CartRecord(user_id=user_id, items=payload))
                else:
                    record.items = payload
                await db.commit()
        except SQLAlchemyError as e:
            raise CartPersistenceError(f"Could not save cart for {user_id}: {e}") from e

    async def close(self) -> None:
        await self.engine.dispose()


def build_cart_repository(settings: Settings) -> CartRepository:
    if settings.cart_store_backend == "json":
        return JsonFileCartRepository(settings.cart_data_file)
    if settings.cart_store_backend == "sql":
        return SqlCartRepository(build_engine(settings.database_url, echo=settings.debug))
    raise ValueError(f"Unknown CART_STORE_BACKEND: {settings.cart_store_backend!r}")
