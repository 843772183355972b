"""
Commit listing API endpoint.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from core import db
from core.config import Settings

from . import service

logger = logging.getLogger(__name__)

router = APIRouter()

# Pass-through columns the default encoder cannot handle (non-UTF-8 bytea, ranges, bit strings).
_ROW_ENCODERS = {
    bytes: bytes.hex,
    asyncpg.Range: str,
    asyncpg.BitString: str,
}

_DATE_CAST_ERRORS = (
    asyncpg.exceptions.InvalidDatetimeFormatError,
    asyncpg.exceptions.DatetimeFieldOverflowError,
)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _error(status_code: int, error: str, *, message: str | None = None) -> JSONResponse:
    content: dict = {"success": False, "error": error}
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


@router.get("/api/commits")
async def list_commits(
    # Raw strings: unparsable page/limit fall back to defaults instead of a 422.
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    pool: asyncpg.Pool = Depends(db.get_pool),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Paginated commits ordered by `created_at`, optionally limited to a date range.
    """
    try:
        page_request = service.parse_page_request(
            page=page,
            limit=limit,
            start_date=start_date,
            end_date=end_date,
        )
    except service.PaginationError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    try:
        result = await service.list_commits_page(
            pool,
            page_request,
            acquire_timeout_s=settings.acquire_timeout_s,
        )
        content = jsonable_encoder(result.model_dump(), custom_encoder=_ROW_ENCODERS)
    except _DATE_CAST_ERRORS as exc:
        # Postgres could not read a date filter as a timestamp.
        logger.warning(
            "commits_invalid_filter start_date=%r end_date=%r error=%s",
            page_request.start_date,
            page_request.end_date,
            exc,
        )
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Invalid date filter value",
            message=str(exc) if settings.is_development else None,
        )
    except Exception as exc:
        logger.exception("Error fetching commits")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            message=str(exc) if settings.is_development else None,
        )

    return JSONResponse(content=content)
