"""
asyncpg pool management for the live shopping store.

Pools are keyed by label. ``POSTGRES_URL_<LABEL>`` variables declare extra
labels; the ``default`` label falls back to ``POSTGRES_URL``.

    manager = get_postgres_manager()
    async with manager.session() as client:
        row = await client.fetchrow("SELECT 1 AS ok")
"""

import asyncio
from typing import Any

import asyncpg
import orjson
from asyncpg import Connection
from loguru import logger

from ..config import config

URL_PREFIX = "POSTGRES_URL_"


def _log_query(record) -> None:
    """asyncpg query logger hook, routed to loguru at DEBUG."""
    logger.debug(
        "SQL: {} | args={} | elapsed={:.4f}s | exception={}",
        record.query,
        record.args,
        record.elapsed,
        record.exception,
    )


async def _init_connection(conn: Connection) -> None:
    """Decode json/jsonb columns with orjson and attach the query logger."""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=lambda value: orjson.dumps(value).decode(),
            decoder=orjson.loads,
            schema="pg_catalog",
        )
    conn.add_query_logger(_log_query)


def mask_password(url: str) -> str:
    """Hide the password part of a connection URL for logging."""
    if "://" not in url or "@" not in url:
        return url
    scheme, rest = url.split("://", 1)
    credentials, _, host = rest.rpartition("@")
    user, sep, password = credentials.partition(":")
    if not sep or not password:
        return url
    return f"{scheme}://{user}:***@{host}"


class AsyncPGClient:
    """Query helpers over one pooled connection."""

    def __init__(self, conn: Connection):
        self.conn = conn

    async def execute(self, query: str, *args: Any) -> str:
        return await self.conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        return await self.conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        return await self.conn.fetchrow(query, *args)

    def transaction(self):
        return self.conn.transaction()


class PgSession:
    """
    Acquires a connection from a labeled pool on enter and releases it on exit.
    """

    def __init__(self, manager: "PostgresManager", label: str):
        self._manager = manager
        self._label = label
        self._conn: Connection | None = None

    async def __aenter__(self) -> AsyncPGClient:
        pool = await self._manager.get_pool(self._label)
        self._conn = await pool.acquire()
        return AsyncPGClient(self._conn)

    async def __aexit__(self, exc_type, exc, tb):
        if self._conn is None:
            return
        pool = await self._manager.get_pool(self._label)
        await pool.release(self._conn)
        self._conn = None


class PostgresManager:
    """Lazily opened asyncpg pools, one per connection label."""

    def __init__(self, connection_strings: dict[str, str] | None = None):
        self._pools: dict[str, asyncpg.Pool] = {}
        self._lock = asyncio.Lock()
        if connection_strings is None:
            connection_strings = self._connection_strings_from_config()
        self._connection_strings = dict(connection_strings)

    @staticmethod
    def _connection_strings_from_config() -> dict[str, str]:
        urls = {
            key[len(URL_PREFIX):].lower(): value
            for key, value in config.items()
            if key.startswith(URL_PREFIX) and value
        }
        urls.setdefault("default", config.get_postgres_url("default"))
        for label, url in urls.items():
            logger.info("Postgres label '{}': {}", label, mask_password(url))
        return urls

    async def get_pool(self, label: str = "default") -> asyncpg.Pool:
        if label not in self._connection_strings:
            raise ValueError(f"No Postgres connection string found for label '{label}'")

        async with self._lock:
            pool = self._pools.get(label)
            if pool is None:
                logger.info("Open Postgres pool for label '{}'", label)
                pool = await asyncpg.create_pool(
                    self._connection_strings[label], init=_init_connection
                )
                self._pools[label] = pool
        return pool

    async def close_all(self) -> None:
        pools, self._pools = self._pools, {}
        for label, pool in pools.items():
            await pool.close()
            logger.info("Closed Postgres pool for label '{}'", label)

    def session(self, label: str = "default") -> PgSession:
        return PgSession(self, label)


_pg_manager: PostgresManager | None = None


def get_postgres_manager() -> PostgresManager:
    global _pg_manager
    if _pg_manager is None:
        _pg_manager = PostgresManager()
    return _pg_manager
