"""In-memory stand-in for the asyncpg pool, plus an ASGI client builder.

The fake understands exactly the SQL shapes `commits.repository` emits
(date filter, ORDER BY created_at, LIMIT/OFFSET, COUNT(*)) and applies them to
a list of dict rows, so route tests check real filtering/paging behaviour.
"""

from __future__ import annotations

import asyncio
import re
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import asyncpg
from httpx import ASGITransport, AsyncClient


BASE_TS = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_rows(n: int) -> list[dict]:
    return [
        {
            "id": i + 1,
            "sha": f"{i + 1:040x}",
            "message": f"commit {i + 1}",
            "author": "dev",
            "created_at": BASE_TS + timedelta(days=i),
        }
        for i in range(n)
    ]


def _parse_ts(raw: str) -> datetime:
    try:
        ts = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise asyncpg.exceptions.InvalidDatetimeFormatError(
            f'invalid input syntax for type timestamp with time zone: "{raw}"'
        ) from exc
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class FakeConnection:
    def __init__(self, pool: "FakePool"):
        self._pool = pool

    def _filtered(self, sql: str, args: tuple) -> list[dict]:
        rows = sorted(self._pool.rows, key=lambda r: r["created_at"])
        if re.search(r"BETWEEN \$1::text::timestamptz AND \$2::text::timestamptz", sql):
            lo, hi = _parse_ts(args[0]), _parse_ts(args[1])
            return [r for r in rows if lo <= r["created_at"] <= hi]
        if re.search(r"created_at >= \$1::text::timestamptz", sql):
            lo = _parse_ts(args[0])
            return [r for r in rows if r["created_at"] >= lo]
        if re.search(r"created_at <= \$1::text::timestamptz", sql):
            hi = _parse_ts(args[0])
            return [r for r in rows if r["created_at"] <= hi]
        return rows

    async def _enter_query(self, sql: str, args: tuple) -> None:
        sql = " ".join(sql.split())
        self._pool.queries.append((sql, args))
        self._pool.active += 1
        self._pool.max_active = max(self._pool.max_active, self._pool.active)
        try:
            # Yield so a concurrently started query can overlap with this one.
            await asyncio.sleep(0)
            if self._pool.fail_with is not None:
                raise self._pool.fail_with
        finally:
            self._pool.active -= 1

    async def fetch(self, sql: str, *args):
        await self._enter_query(sql, args)
        rows = self._filtered(sql, args)
        match = re.search(r"LIMIT \$(\d+) OFFSET \$(\d+)", sql)
        assert match is not None, "page query must bind LIMIT/OFFSET"
        limit = args[int(match.group(1)) - 1]
        offset = args[int(match.group(2)) - 1]
        return [dict(r) for r in rows[offset : offset + limit]]

    async def fetchrow(self, sql: str, *args):
        await self._enter_query(sql, args)
        assert "COUNT(*) AS total" in sql
        return {"total": len(self._filtered(sql, args))}

    async def fetchval(self, sql: str, *args):
        await self._enter_query(sql, args)
        return 1


class FakePool:
    def __init__(self, rows: list[dict] | None = None):
        self.rows = rows if rows is not None else []
        self.queries: list[tuple[str, tuple]] = []
        self.acquire_timeouts: list[float | None] = []
        self.fail_with: BaseException | None = None
        self.active = 0
        self.max_active = 0
        self.closed = False

    @asynccontextmanager
    async def acquire(self, *, timeout: float | None = None):
        self.acquire_timeouts.append(timeout)
        yield FakeConnection(self)

    async def close(self) -> None:
        self.closed = True


def build_client(app) -> AsyncClient:
    # No lifespan: callers override db.get_pool (or test the missing-pool path).
    return AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    )
