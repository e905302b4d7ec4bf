"""
Purchase Orders API endpoints - orders sent to suppliers for outsourced work
"""
import logging
import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.database import get_db
from pluridesk.models.job import Job
from pluridesk.models.outsourcing import Outsourcing
from pluridesk.models.purchase_order import PurchaseOrder
from pluridesk.models.supplier import Supplier
from pluridesk.api.common import (
    CurrencyCode, Owner, PageMetadata, PageParams, count_rows, get_owner, page_metadata, page_params,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class PurchaseOrderCreate(BaseModel):
    po_number: str = Field(..., min_length=1)
    job_id: int
    supplier_id: Optional[int] = None
    date: Optional[datetime.date] = None
    amount: Optional[float] = Field(None, ge=0)
    currency: CurrencyCode = "USD"
    notes: Optional[str] = None
    outsourcing_ids: List[int] = []


class PurchaseOrderResponse(BaseModel):
    id: int
    po_number: str
    job_id: int
    job_code: Optional[str] = None
    supplier_id: Optional[int]
    supplier_name: Optional[str] = None
    date: Optional[datetime.date]
    amount: Optional[float]
    currency: str
    notes: Optional[str]
    outsourcing_ids: List[int] = []
    created_at: Optional[datetime.datetime]

    class Config:
        from_attributes = True


class PurchaseOrderOut(BaseModel):
    purchase_order: PurchaseOrderResponse


class PurchaseOrderPage(BaseModel):
    data: List[PurchaseOrderResponse]
    metadata: PageMetadata


def _linked_ids(rows) -> Dict[int, List[int]]:
    linked: Dict[int, List[int]] = {}
    for outsourcing_id, purchase_order_id in rows:
        linked.setdefault(purchase_order_id, []).append(outsourcing_id)
    return linked


@router.get("", response_model=PurchaseOrderPage)
async def list_purchase_orders(
    supplier_id: Optional[int] = None,
    search: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """List purchase orders, newest first, with the outsourcing rows each one covers"""
    query = (
        select(PurchaseOrder, Job.job_code, Supplier.name)
        .join(Job, Job.id == PurchaseOrder.job_id, isouter=True)
        .join(Supplier, Supplier.id == PurchaseOrder.supplier_id, isouter=True)
        .where(PurchaseOrder.owner_id == owner.id)
    )
    if supplier_id:
        query = query.where(PurchaseOrder.supplier_id == supplier_id)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(PurchaseOrder.po_number.ilike(pattern), PurchaseOrder.notes.ilike(pattern)))
    query = query.order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.id.desc())

    total = await count_rows(db, query.with_only_columns(PurchaseOrder.id))
    rows = (await db.execute(query.offset(params.offset).limit(params.limit))).all()

    result = await db.execute(
        select(Outsourcing.id, Outsourcing.purchase_order_id)
        .where(
            Outsourcing.owner_id == owner.id,
            Outsourcing.purchase_order_id.in_([po.id for po, _, _ in rows]),
        )
        .order_by(Outsourcing.id)
    )
    linked = _linked_ids(result.all())

    data = [
        PurchaseOrderResponse.model_validate(po).model_copy(update={
            "job_code": job_code,
            "supplier_name": supplier_name,
            "outsourcing_ids": linked.get(po.id, []),
        })
        for po, job_code, supplier_name in rows
    ]
    return {"data": data, "metadata": page_metadata(params, total)}


@router.post("", status_code=201, response_model=PurchaseOrderOut)
async def create_purchase_order(
    data: PurchaseOrderCreate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Create a purchase order and attach the listed outsourcing rows to it"""
    result = await db.execute(select(Job).where(Job.id == data.job_id, Job.owner_id == owner.id))
    job = result.scalar_one_or_none()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    supplier = None
    if data.supplier_id is not None:
        result = await db.execute(
            select(Supplier).where(Supplier.id == data.supplier_id, Supplier.owner_id == owner.id)
        )
        supplier = result.scalar_one_or_none()
        if not supplier:
            raise HTTPException(status_code=404, detail="Supplier not found")

    outsourcing_ids = sorted(set(data.outsourcing_ids))
    rows = []
    if outsourcing_ids:
        result = await db.execute(
            select(Outsourcing).where(
                Outsourcing.id.in_(outsourcing_ids), Outsourcing.owner_id == owner.id
            )
        )
        rows = result.scalars().all()
        if len(rows) != len(outsourcing_ids):
            raise HTTPException(status_code=404, detail="Outsourcing record not found")

    po = PurchaseOrder(
        owner_id=owner.id,
        **data.model_dump(exclude={"outsourcing_ids"}),
    )
    po.date = po.date or datetime.date.today()
    db.add(po)
    await db.flush()

    for row in rows:
        row.purchase_order_id = po.id

    await db.commit()
    await db.refresh(po)

    logger.info(f"Created purchase order {po.po_number} covering {len(rows)} outsourcing rows")
    return {
        "purchase_order": PurchaseOrderResponse.model_validate(po).model_copy(update={
            "job_code": job.job_code,
            "supplier_name": supplier.name if supplier else None,
            "outsourcing_ids": outsourcing_ids,
        })
    }
