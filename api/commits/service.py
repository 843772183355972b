"""
Commit listing service (orchestration).

This is where we:
- turn raw query params into a validated PageRequest
- run the page query and the count query concurrently
- derive pagination metadata
"""

from __future__ import annotations

import asyncio
import math
import re
from dataclasses import dataclass

import asyncpg

from . import repository, schemas


DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# OFFSET is bound as int8.
MAX_OFFSET = 2**63 - 1

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class PaginationError(ValueError):
    pass


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    start_date: str | None = None
    end_date: str | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_int(raw: str | None, default: int) -> int:
    """
    Leading integer of `raw` ("10.5" -> 10, "7abc" -> 7); `default` when there is none.
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(raw)
    if match is None:
        return default
    return int(match.group(1))


def _blank_to_none(value: str | None) -> str | None:
    return value if value else None


def parse_page_request(
    *,
    page: str | None = None,
    limit: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> PageRequest:
    page_n = parse_int(page, DEFAULT_PAGE)
    limit_n = parse_int(limit, DEFAULT_LIMIT)

    if page_n < 1 or limit_n < 1:
        raise PaginationError("Page and limit must be positive integers")
    if limit_n > MAX_LIMIT:
        raise PaginationError(f"Maximum limit is {MAX_LIMIT} records per request")

    return PageRequest(
        page=page_n,
        limit=limit_n,
        start_date=_blank_to_none(start_date),
        end_date=_blank_to_none(end_date),
    )


def paginate(*, total: int, page: int, limit: int) -> schemas.Pagination:
    total_pages = math.ceil(total / limit)
    return schemas.Pagination(
        total=total,
        page=page,
        limit=limit,
        totalPages=total_pages,
        hasNextPage=page < total_pages,
        hasPrevPage=page > 1,
    )


async def list_commits_page(
    pool: asyncpg.Pool,
    request: PageRequest,
    *,
    acquire_timeout_s: float | None = None,
) -> schemas.CommitPage:
    count = repository.count_commits(
        pool,
        start_date=request.start_date,
        end_date=request.end_date,
        timeout_s=acquire_timeout_s,
    )
    if request.offset > MAX_OFFSET:
        # No table holds that many rows: the page is empty, only the total matters.
        rows, total = [], await count
    else:
        # Independent reads, each on its own pooled connection.
        rows, total = await asyncio.gather(
            repository.list_commits(
                pool,
                start_date=request.start_date,
                end_date=request.end_date,
                limit=request.limit,
                offset=request.offset,
                timeout_s=acquire_timeout_s,
            ),
            count,
        )

    return schemas.CommitPage(
        data=rows,
        pagination=paginate(total=total, page=request.page, limit=request.limit),
        filters=schemas.Filters(startDate=request.start_date, endDate=request.end_date),
    )
