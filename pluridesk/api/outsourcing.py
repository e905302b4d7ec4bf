"""
Outsourcing API endpoints - supplier hand-offs and what is owed for them
"""
import logging
import datetime
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.database import get_db
from pluridesk.models.job import Job
from pluridesk.models.outsourcing import Outsourcing, OutsourcingStatus
from pluridesk.models.supplier import Supplier
from pluridesk.services.aggregation import sum_by_currency, unpaid
from pluridesk.utils.money import round2
from pluridesk.api.common import (
    CurrencyCode, Owner, PageMetadata, PageParams, count_rows, get_owner, page_metadata, page_params,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class OutsourcingCreate(BaseModel):
    job_id: int
    supplier_id: int
    service_type: Optional[str] = None
    unit: Optional[str] = None
    quantity: Optional[float] = Field(None, ge=0)
    status: OutsourcingStatus = OutsourcingStatus.PENDING
    due_date: Optional[datetime.date] = None
    supplier_rate: Optional[float] = Field(None, ge=0)
    supplier_currency: CurrencyCode = "USD"
    supplier_total: Optional[float] = Field(None, ge=0)
    paid: bool = False
    notes: Optional[str] = None


class OutsourcingUpdate(BaseModel):
    service_type: Optional[str] = None
    unit: Optional[str] = None
    quantity: Optional[float] = Field(None, ge=0)
    status: Optional[OutsourcingStatus] = None
    due_date: Optional[datetime.date] = None
    supplier_rate: Optional[float] = Field(None, ge=0)
    supplier_currency: Optional[CurrencyCode] = None
    supplier_total: Optional[float] = Field(None, ge=0)
    paid: Optional[bool] = None
    notes: Optional[str] = None


class OutsourcingResponse(BaseModel):
    id: int
    job_id: int
    job_code: Optional[str] = None
    supplier_id: int
    supplier_name: Optional[str] = None
    purchase_order_id: Optional[int] = None
    service_type: Optional[str]
    unit: Optional[str]
    quantity: Optional[float]
    status: str
    due_date: Optional[datetime.date]
    supplier_rate: Optional[float]
    supplier_currency: str
    supplier_total: Optional[float]
    paid: bool
    notes: Optional[str]
    created_at: Optional[datetime.datetime]

    class Config:
        from_attributes = True


class OutsourcingOut(BaseModel):
    outsourcing: OutsourcingResponse


class PendingPayout(BaseModel):
    pending_payout: Dict[str, float]


class OutsourcingPage(PendingPayout):
    data: List[OutsourcingResponse]
    metadata: PageMetadata


def outsourcing_response(row: Outsourcing, supplier_name: Optional[str] = None, job_code: Optional[str] = None) -> OutsourcingResponse:
    return OutsourcingResponse.model_validate(row).model_copy(
        update={"supplier_name": supplier_name, "job_code": job_code}
    )


def _with_names(owner: Owner):
    return (
        select(Outsourcing, Supplier.name, Job.job_code)
        .join(Supplier, Supplier.id == Outsourcing.supplier_id, isouter=True)
        .join(Job, Job.id == Outsourcing.job_id, isouter=True)
        .where(Outsourcing.owner_id == owner.id)
    )


async def _get_row(db: AsyncSession, owner: Owner, outsourcing_id: int):
    result = await db.execute(_with_names(owner).where(Outsourcing.id == outsourcing_id))
    row = result.first()
    if not row:
        raise HTTPException(status_code=404, detail="Outsourcing record not found")
    return row


async def _pending_payout(db: AsyncSession, owner: Owner, job_id: Optional[int] = None) -> dict:
    query = select(Outsourcing.supplier_total, Outsourcing.supplier_currency, Outsourcing.paid).where(
        Outsourcing.owner_id == owner.id
    )
    if job_id:
        query = query.where(Outsourcing.job_id == job_id)
    result = await db.execute(query)
    rows = [row._mapping for row in result]
    return sum_by_currency(rows, "supplier_total", "supplier_currency", where=unpaid)


@router.get("", response_model=OutsourcingPage)
async def list_outsourcing(
    paid: Literal["all", "paid", "unpaid"] = "all",
    job_id: Optional[int] = None,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """List supplier hand-offs with the unpaid balance per currency"""
    query = _with_names(owner)
    if paid == "paid":
        query = query.where(Outsourcing.paid == True)
    elif paid == "unpaid":
        query = query.where(Outsourcing.paid == False)
    if job_id:
        query = query.where(Outsourcing.job_id == job_id)
    query = query.order_by(Outsourcing.created_at.desc(), Outsourcing.id.desc())

    total = await count_rows(db, query.with_only_columns(Outsourcing.id))
    result = await db.execute(query.offset(params.offset).limit(params.limit))

    return {
        "data": [outsourcing_response(*row) for row in result.all()],
        "metadata": page_metadata(params, total),
        "pending_payout": await _pending_payout(db, owner, job_id),
    }


@router.get("/payable", response_model=PendingPayout)
async def payable_summary(
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Unpaid supplier totals per currency"""
    return {"pending_payout": await _pending_payout(db, owner)}


@router.post("", status_code=201, response_model=OutsourcingOut)
async def create_outsourcing(
    data: OutsourcingCreate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Hand work on a job to a supplier and flag the job"""
    result = await db.execute(select(Job).where(Job.id == data.job_id, Job.owner_id == owner.id))
    job = result.scalar_one_or_none()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    result = await db.execute(
        select(Supplier).where(Supplier.id == data.supplier_id, Supplier.owner_id == owner.id)
    )
    supplier = result.scalar_one_or_none()
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")

    values = data.model_dump()
    values["status"] = data.status.value
    if values["supplier_total"] is None and data.quantity is not None and data.supplier_rate is not None:
        values["supplier_total"] = round2(data.quantity * data.supplier_rate)

    row = Outsourcing(owner_id=owner.id, **values)
    db.add(row)
    job.has_outsourcing = True

    await db.commit()
    await db.refresh(row)

    logger.info(f"Outsourced job {job.job_code} to {supplier.name} (id={row.id})")
    return {"outsourcing": outsourcing_response(row, supplier.name, job.job_code)}


@router.get("/{outsourcing_id}", response_model=OutsourcingOut)
async def get_outsourcing(
    outsourcing_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    return {"outsourcing": outsourcing_response(*await _get_row(db, owner, outsourcing_id))}


@router.patch("/{outsourcing_id}", response_model=OutsourcingOut)
async def update_outsourcing(
    outsourcing_id: int,
    data: OutsourcingUpdate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Partial update, e.g. marking the supplier paid"""
    row, supplier_name, job_code = await _get_row(db, owner, outsourcing_id)

    updates = data.model_dump(exclude_unset=True)
    for field, value in updates.items():
        if field in ("status", "supplier_currency", "paid") and value is None:
            continue
        if field == "status":
            value = value.value
        setattr(row, field, value)

    if "supplier_total" not in updates and updates.keys() & {"quantity", "supplier_rate"}:
        if row.quantity is not None and row.supplier_rate is not None:
            row.supplier_total = round2(row.quantity * row.supplier_rate)

    await db.commit()
    await db.refresh(row)
    return {"outsourcing": outsourcing_response(row, supplier_name, job_code)}


@router.delete("/{outsourcing_id}")
async def delete_outsourcing(
    outsourcing_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Remove a hand-off; the job loses its flag with its last one"""
    row, _, _ = await _get_row(db, owner, outsourcing_id)
    job_id = row.job_id

    await db.delete(row)
    await db.flush()

    result = await db.execute(
        select(func.count()).select_from(Outsourcing).where(Outsourcing.job_id == job_id)
    )
    if not result.scalar():
        job = await db.get(Job, job_id)
        if job is not None:
            job.has_outsourcing = False

    await db.commit()
    return {"success": True}
