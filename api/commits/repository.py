"""
Commit listing SQL (raw).

Every caller-supplied value is a bind parameter. Date filters are bound as
text and cast by Postgres ($n::text::timestamptz), so any timestamp format
Postgres understands is accepted and nothing the caller sends becomes SQL.
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from core import db

logger = logging.getLogger(__name__)


def build_date_filter(
    *,
    start_date: str | None = None,
    end_date: str | None = None,
) -> tuple[str, list[Any]]:
    """
    Return a WHERE clause over `created_at` and its positional args.

    Both bounds are inclusive; an empty clause means no filter.
    """
    if start_date and end_date:
        return (
            "WHERE created_at BETWEEN $1::text::timestamptz AND $2::text::timestamptz",
            [start_date, end_date],
        )
    if start_date:
        return "WHERE created_at >= $1::text::timestamptz", [start_date]
    if end_date:
        return "WHERE created_at <= $1::text::timestamptz", [end_date]
    return "", []


def build_page_query(
    *,
    start_date: str | None = None,
    end_date: str | None = None,
    limit: int,
    offset: int,
) -> tuple[str, list[Any]]:
    where_clause, args = build_date_filter(start_date=start_date, end_date=end_date)
    n = len(args)
    sql = f"""
        SELECT *
        FROM commits
        {where_clause}
        ORDER BY created_at ASC
        LIMIT ${n + 1} OFFSET ${n + 2}
        """
    return sql, [*args, limit, offset]


def build_count_query(
    *,
    start_date: str | None = None,
    end_date: str | None = None,
) -> tuple[str, list[Any]]:
    where_clause, args = build_date_filter(start_date=start_date, end_date=end_date)
    sql = f"""
        SELECT COUNT(*) AS total
        FROM commits
        {where_clause}
        """
    return sql, args


async def list_commits(
    pool: asyncpg.Pool,
    *,
    start_date: str | None = None,
    end_date: str | None = None,
    limit: int,
    offset: int,
    timeout_s: float | None = None,
) -> list[dict[str, Any]]:
    """
    One page of commit rows, all columns passed through as-is.
    """
    sql, args = build_page_query(
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    logger.debug("commits_query sql=%s args=%s", " ".join(sql.split()), args)
    return await db.fetch_all(pool, sql, *args, timeout_s=timeout_s)


async def count_commits(
    pool: asyncpg.Pool,
    *,
    start_date: str | None = None,
    end_date: str | None = None,
    timeout_s: float | None = None,
) -> int:
    sql, args = build_count_query(start_date=start_date, end_date=end_date)
    logger.debug("commits_count_query sql=%s args=%s", " ".join(sql.split()), args)
    row = await db.fetch_one(pool, sql, *args, timeout_s=timeout_s)
    if row is None:
        return 0
    return int(row["total"])
