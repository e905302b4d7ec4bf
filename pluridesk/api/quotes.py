"""
Quotes API endpoints
"""
import logging
import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pluridesk.database import get_db
from pluridesk.models.client import Client
from pluridesk.models.quote import Quote, QuoteItem, QuoteStatus
from pluridesk.services.conversion import convert_quote_to_job
from pluridesk.services.lifecycle import INITIAL_STATUS, QUOTE, transition
from pluridesk.services.line_items import calculate_totals
from pluridesk.api.common import (
    CurrencyCode, LineItemIn, Owner, PageMetadata, PageParams, get_owner, page_params, paginate,
)
from pluridesk.api.jobs import JobOut, job_response

logger = logging.getLogger(__name__)

router = APIRouter()


class QuoteCreate(BaseModel):
    client_id: int
    quote_number: str = Field(..., min_length=1)
    date: Optional[datetime.date] = None
    expiry_date: Optional[datetime.date] = None
    currency: CurrencyCode = "USD"
    status: Optional[QuoteStatus] = None
    notes: Optional[str] = None
    items: List[LineItemIn] = Field(..., min_length=1)


class QuoteUpdate(BaseModel):
    quote_number: Optional[str] = Field(None, min_length=1)
    date: Optional[datetime.date] = None
    expiry_date: Optional[datetime.date] = None
    currency: Optional[CurrencyCode] = None
    status: Optional[QuoteStatus] = None
    notes: Optional[str] = None
    items: Optional[List[LineItemIn]] = Field(None, min_length=1)


class QuoteResponse(BaseModel):
    id: int
    client_id: int
    client_name: Optional[str] = None
    quote_number: str
    date: Optional[datetime.date]
    expiry_date: Optional[datetime.date]
    currency: str
    total: float
    status: str
    notes: Optional[str]
    created_at: Optional[datetime.datetime]

    class Config:
        from_attributes = True


class QuoteItemResponse(BaseModel):
    id: int
    position: int
    description: str
    quantity: float
    rate: float
    amount: float

    class Config:
        from_attributes = True


class QuoteOut(BaseModel):
    quote: QuoteResponse


class QuoteDetail(QuoteOut):
    items: List[QuoteItemResponse]


class QuotePage(BaseModel):
    data: List[QuoteResponse]
    metadata: PageMetadata


def quote_response(quote: Quote, client_name: Optional[str] = None) -> QuoteResponse:
    return QuoteResponse.model_validate(quote).model_copy(update={"client_name": client_name})


def _build_items(items: List[LineItemIn]) -> tuple[List[QuoteItem], float]:
    totals = calculate_totals(items)
    rows = [
        QuoteItem(
            position=position,
            description=item.description,
            quantity=item.quantity,
            rate=item.rate,
            amount=amount,
        )
        for position, (item, amount) in enumerate(zip(items, totals.amounts))
    ]
    return rows, totals.total


async def _get_quote(db: AsyncSession, owner: Owner, quote_id: int) -> Quote:
    result = await db.execute(
        select(Quote)
        .options(selectinload(Quote.items))
        .where(Quote.id == quote_id, Quote.owner_id == owner.id)
        .execution_options(populate_existing=True)
    )
    quote = result.scalar_one_or_none()
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    return quote


async def _client_names(db: AsyncSession, client_ids) -> dict:
    if not client_ids:
        return {}
    result = await db.execute(select(Client.id, Client.name).where(Client.id.in_(client_ids)))
    return {row.id: row.name for row in result}


@router.get("", response_model=QuotePage)
async def list_quotes(
    status: Optional[QuoteStatus] = None,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """List quotes, newest first"""
    query = select(Quote).where(Quote.owner_id == owner.id)
    if status:
        query = query.where(Quote.status == status.value)
    query = query.order_by(Quote.created_at.desc(), Quote.id.desc())

    quotes, metadata = await paginate(db, query, params)
    names = await _client_names(db, {q.client_id for q in quotes})
    return {
        "data": [quote_response(q, names.get(q.client_id)) for q in quotes],
        "metadata": metadata,
    }


@router.post("", status_code=201, response_model=QuoteOut)
async def create_quote(
    data: QuoteCreate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Create a quote with its items in one transaction"""
    result = await db.execute(
        select(Client).where(Client.id == data.client_id, Client.owner_id == owner.id)
    )
    client = result.scalar_one_or_none()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    status = transition(QUOTE, INITIAL_STATUS[QUOTE], data.status or INITIAL_STATUS[QUOTE])
    items, total = _build_items(data.items)

    quote = Quote(
        owner_id=owner.id,
        client_id=data.client_id,
        quote_number=data.quote_number,
        date=data.date or datetime.date.today(),
        expiry_date=data.expiry_date,
        currency=data.currency,
        total=total,
        status=status,
        notes=data.notes,
        items=items,
    )
    db.add(quote)
    await db.commit()

    logger.info(f"Created quote {quote.quote_number} ({quote.total} {quote.currency})")
    return {"quote": quote_response(quote, client.name)}


@router.get("/{quote_id}", response_model=QuoteDetail)
async def get_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Get a single quote with its items in position order"""
    quote = await _get_quote(db, owner, quote_id)
    names = await _client_names(db, {quote.client_id})
    return {
        "quote": quote_response(quote, names.get(quote.client_id)),
        "items": quote.items,
    }


@router.patch("/{quote_id}")
async def update_quote(
    quote_id: int,
    data: QuoteUpdate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Update a quote; replacing the items recomputes the total"""
    quote = await _get_quote(db, owner, quote_id)
    updates = data.model_dump(exclude_unset=True, exclude={"items", "status"})

    if data.status is not None:
        quote.status = transition(QUOTE, quote.status, data.status)

    for field, value in updates.items():
        if value is not None:
            setattr(quote, field, value)

    if data.items is not None:
        items, total = _build_items(data.items)
        quote.items = items
        quote.total = total

    await db.commit()
    return {"success": True}


@router.delete("/{quote_id}")
async def delete_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Delete a quote and its items"""
    quote = await _get_quote(db, owner, quote_id)
    await db.delete(quote)
    await db.commit()
    return {"success": True}


@router.post("/{quote_id}/convert", response_model=JobOut)
async def convert_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Accept a quote and create a flat-fee job from it"""
    job = await convert_quote_to_job(db, owner.id, quote_id)
    return {"job": job_response(job)}
