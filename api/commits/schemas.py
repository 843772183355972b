"""
Pydantic schemas for the commit listing response.

Field names are camelCase because they are the wire format.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1, le=100)
    totalPages: int = Field(..., ge=0)
    hasNextPage: bool
    hasPrevPage: bool


class Filters(BaseModel):
    startDate: str | None = None
    endDate: str | None = None


class CommitPage(BaseModel):
    success: bool = True
    data: list[dict[str, Any]]
    pagination: Pagination
    filters: Filters
