"""
Async database access helpers (raw SQL) using asyncpg.

The pool is an explicit object: `create_pool()` builds it during the FastAPI
lifespan (see `api/main.py`), it lives on `app.state.pool`, and routes get it
through the `get_pool` dependency.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg
from fastapi import Request

from .config import Settings

logger = logging.getLogger(__name__)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def connect_kwargs(settings: Settings) -> dict[str, Any]:
    """
    Connection arguments for asyncpg: a DSN when DATABASE_URL is set,
    otherwise the discrete DATABASE_* values.
    """
    if settings.database_url:
        return {"dsn": _sanitize_database_url(settings.database_url)}

    kwargs: dict[str, Any] = {
        "user": settings.database_user,
        "host": settings.database_host,
        "database": settings.database_name,
        "password": settings.database_password,
        "port": settings.database_port,
    }
    # Let asyncpg fall back to libpq env vars / defaults for anything unset.
    return {k: v for k, v in kwargs.items() if v not in (None, "")}


async def create_pool(settings: Settings) -> asyncpg.Pool:
    # min_size=0 keeps startup alive when the database is unreachable.
    return await asyncpg.create_pool(
        **connect_kwargs(settings),
        min_size=0,
        max_size=settings.pool_max_size,
        max_inactive_connection_lifetime=settings.pool_idle_timeout_s,
        timeout=settings.acquire_timeout_s,
    )


async def close_pool(pool: asyncpg.Pool | None) -> None:
    if pool is None:
        return None
    await pool.close()


async def probe(pool: asyncpg.Pool, *, timeout_s: float) -> bool:
    """
    Borrow one connection and run `SELECT 1`. Failures are logged, never raised.
    """
    try:
        async with pool.acquire(timeout=timeout_s) as conn:
            await conn.fetchval("SELECT 1")
    except Exception:
        logger.exception("Error acquiring client")
        return False
    logger.info("Connected to PostgreSQL database")
    return True


def get_pool(request: Request) -> asyncpg.Pool:
    pool = getattr(request.app.state, "pool", None)
    if pool is None:
        raise RuntimeError("DB pool is not initialized. It is created in the app lifespan.")
    return pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(
    pool: asyncpg.Pool,
    sql: str,
    *args: Any,
    timeout_s: float | None = None,
) -> dict[str, Any] | None:
    """
    Run a query on a pooled connection and return a single row as a dict (or None).
    """
    async with pool.acquire(timeout=timeout_s) as conn:
        row = await conn.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(
    pool: asyncpg.Pool,
    sql: str,
    *args: Any,
    timeout_s: float | None = None,
) -> list[dict[str, Any]]:
    """
    Run a query on a pooled connection and return all rows as a list of dicts.
    """
    async with pool.acquire(timeout=timeout_s) as conn:
        rows = await conn.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]
