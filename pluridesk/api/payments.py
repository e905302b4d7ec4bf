"""
Payments API endpoints
"""
import logging
import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.database import get_db
from pluridesk.models.invoice import Invoice
from pluridesk.models.payment import Payment
from pluridesk.api.common import Owner, get_owner

logger = logging.getLogger(__name__)

router = APIRouter()


class PaymentCreate(BaseModel):
    invoice_id: int
    amount: float = Field(..., gt=0)
    date: datetime.date
    method: str = Field(..., min_length=1)
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: int
    invoice_id: int
    amount: float
    date: datetime.date
    method: str
    notes: Optional[str]
    created_at: Optional[datetime.datetime]

    class Config:
        from_attributes = True


class PaymentOut(BaseModel):
    payment: PaymentResponse


class PaymentList(BaseModel):
    payments: List[PaymentResponse]


async def _owned_invoice(db: AsyncSession, owner: Owner, invoice_id: int) -> Invoice:
    result = await db.execute(
        select(Invoice).where(Invoice.id == invoice_id, Invoice.owner_id == owner.id)
    )
    invoice = result.scalar_one_or_none()
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found or access denied")
    return invoice


@router.get("", response_model=PaymentList)
async def list_payments(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """List the payments recorded against one invoice"""
    await _owned_invoice(db, owner, invoice_id)
    result = await db.execute(
        select(Payment)
        .where(Payment.invoice_id == invoice_id, Payment.owner_id == owner.id)
        .order_by(Payment.date, Payment.id)
    )
    return {"payments": result.scalars().all()}


@router.post("", status_code=201, response_model=PaymentOut)
async def record_payment(
    data: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Record a payment; amounts above the outstanding balance are accepted"""
    invoice = await _owned_invoice(db, owner, data.invoice_id)

    payment = Payment(owner_id=owner.id, **data.model_dump())
    db.add(payment)
    await db.commit()
    await db.refresh(payment)

    logger.info(
        f"Recorded payment of {payment.amount} {invoice.currency} "
        f"on invoice {invoice.invoice_number} ({payment.method})"
    )
    return {"payment": payment}
