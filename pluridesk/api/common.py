"""
Shared API plumbing - owner context, pagination and the request and response
schemas used by more than one router.
"""
import math
from dataclasses import dataclass
from typing import Literal, Optional

from fastapi import Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.config import Settings, get_settings

CurrencyCode = Literal["USD", "EUR", "CAD", "MAD", "GBP"]


@dataclass(frozen=True)
class Owner:
    """Identity every query is scoped to"""
    id: str


def get_owner(settings: Settings = Depends(get_settings)) -> Owner:
    """Resolve the owner for the current request.

    Single-tenant deployments read it from configuration; swap this
    dependency for one that reads an authenticated principal.
    """
    return Owner(id=settings.OWNER_ID)


@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> PageParams:
    return PageParams(page=page, limit=limit)


def page_metadata(params: PageParams, total: int) -> dict:
    return {
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "totalPages": math.ceil(total / params.limit) if total else 0,
    }


async def count_rows(db: AsyncSession, query) -> int:
    result = await db.execute(
        select(func.count()).select_from(query.order_by(None).subquery())
    )
    return result.scalar() or 0


async def paginate(db: AsyncSession, query, params: PageParams) -> tuple[list, dict]:
    """Run ``query`` for one page and count all matching rows"""
    total = await count_rows(db, query)

    result = await db.execute(query.offset(params.offset).limit(params.limit))
    rows = result.scalars().all()
    return rows, page_metadata(params, total)


# --- Shared request schemas ---

class LineItemIn(BaseModel):
    """Quote/invoice line; amount is always recomputed server-side"""
    description: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    rate: float = Field(..., gt=0)
    amount: Optional[float] = None


# --- Shared response schemas ---

class PageMetadata(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class LineItemResponse(BaseModel):
    description: str
    quantity: Optional[float] = None
    rate: Optional[float] = None
    amount: float

    class Config:
        from_attributes = True
