"""
Invoices API endpoints
"""
import logging
import datetime
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pluridesk.database import get_db
from pluridesk.models.client import Client
from pluridesk.models.invoice import Invoice, InvoiceStatus
from pluridesk.models.job import Job
from pluridesk.services.aggregation import status_in, sum_by_currency
from pluridesk.services.invoicing import create_invoice, generate_invoice_from_jobs, update_invoice
from pluridesk.services.ledger import amount_paid, outstanding_balance
from pluridesk.services.lifecycle import INVOICE, transition
from pluridesk.services.numbering import peek_next_invoice_number
from pluridesk.api.common import (
    CurrencyCode, LineItemIn, LineItemResponse, Owner, PageMetadata, PageParams, count_rows, get_owner,
    page_metadata, page_params,
)
from pluridesk.api.payments import PaymentResponse

logger = logging.getLogger(__name__)

router = APIRouter()

# Columns that cannot be cleared through PATCH
REQUIRED_FIELDS = {"invoice_number", "currency", "items", "tax_amount", "status"}


class InvoiceCreate(BaseModel):
    client_id: int
    invoice_number: Optional[str] = None
    date: Optional[datetime.date] = None
    due_date: Optional[datetime.date] = None
    currency: CurrencyCode = "USD"
    items: List[LineItemIn] = Field(..., min_length=1)
    tax_amount: float = Field(0, ge=0)
    status: Optional[InvoiceStatus] = None
    notes: Optional[str] = None


class InvoiceUpdate(BaseModel):
    invoice_number: Optional[str] = Field(None, min_length=1)
    date: Optional[datetime.date] = None
    due_date: Optional[datetime.date] = None
    currency: Optional[CurrencyCode] = None
    items: Optional[List[LineItemIn]] = Field(None, min_length=1)
    tax_amount: Optional[float] = Field(None, ge=0)
    status: Optional[InvoiceStatus] = None
    notes: Optional[str] = None


class GenerateInvoiceRequest(BaseModel):
    # Both optional so missing values get the generation error messages
    job_ids: Optional[List[int]] = None
    client_id: Optional[int] = None


class InvoiceBulkAction(BaseModel):
    ids: List[int] = Field(default_factory=list)
    action: Literal["status", "delete"]
    status: Optional[InvoiceStatus] = None


class InvoiceResponse(BaseModel):
    id: int
    client_id: int
    client_name: Optional[str] = None
    invoice_number: str
    date: Optional[datetime.date]
    due_date: Optional[datetime.date]
    currency: str
    items: List[LineItemResponse]
    subtotal: float
    tax_amount: float
    total: float
    status: str
    notes: Optional[str]
    created_at: Optional[datetime.datetime]

    class Config:
        from_attributes = True


class ClientSummary(BaseModel):
    id: int
    name: str
    email: Optional[str]
    default_currency: str

    class Config:
        from_attributes = True


class InvoiceDetailResponse(InvoiceResponse):
    clients: Optional[ClientSummary] = None
    payments: List[PaymentResponse] = []
    amount_paid: float = 0
    outstanding: float = 0


class InvoiceOut(BaseModel):
    invoice: InvoiceResponse


class InvoiceDetailOut(BaseModel):
    invoice: InvoiceDetailResponse


class InvoiceSummary(BaseModel):
    outstanding: Dict[str, float]
    collected: Dict[str, float]
    draft: Dict[str, float]


class InvoicePage(BaseModel):
    data: List[InvoiceResponse]
    metadata: PageMetadata
    summary: InvoiceSummary


def invoice_response(invoice: Invoice, client_name: Optional[str] = None) -> InvoiceResponse:
    return InvoiceResponse.model_validate(invoice).model_copy(update={"client_name": client_name})


async def _get_invoice(db: AsyncSession, owner: Owner, invoice_id: int, with_relations: bool = False) -> Invoice:
    query = select(Invoice).where(Invoice.id == invoice_id, Invoice.owner_id == owner.id)
    if with_relations:
        query = query.options(
            selectinload(Invoice.client),
            selectinload(Invoice.payments),
        ).execution_options(populate_existing=True)

    result = await db.execute(query)
    invoice = result.scalar_one_or_none()
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


async def _owned_client(db: AsyncSession, owner: Owner, client_id: int) -> Client:
    result = await db.execute(
        select(Client).where(Client.id == client_id, Client.owner_id == owner.id)
    )
    client = result.scalar_one_or_none()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


async def _delete_invoice(db: AsyncSession, invoice: Invoice) -> None:
    # Jobs keep their status but lose the link; payments go with the invoice
    await db.execute(update(Job).where(Job.invoice_id == invoice.id).values(invoice_id=None))
    await db.delete(invoice)


@router.get("", response_model=InvoicePage)
async def list_invoices(
    status: Optional[InvoiceStatus] = None,
    search: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """List invoices with per-currency totals for the filtered set"""
    filters = [Invoice.owner_id == owner.id]
    if status:
        filters.append(Invoice.status == status.value)
    if search:
        pattern = f"%{search}%"
        filters.append(or_(Invoice.invoice_number.ilike(pattern), Client.name.ilike(pattern)))

    query = (
        select(Invoice, Client.name)
        .join(Client, Client.id == Invoice.client_id, isouter=True)
        .where(*filters)
        .order_by(Invoice.invoice_number.desc())
    )

    total = await count_rows(db, query.with_only_columns(Invoice.id))
    result = await db.execute(query.offset(params.offset).limit(params.limit))
    rows = result.all()

    summary_result = await db.execute(
        select(Invoice.total, Invoice.status, Invoice.currency)
        .join(Client, Client.id == Invoice.client_id, isouter=True)
        .where(*filters)
    )
    summary_rows = [row._mapping for row in summary_result]

    return {
        "data": [invoice_response(invoice, client_name) for invoice, client_name in rows],
        "metadata": page_metadata(params, total),
        "summary": {
            "outstanding": sum_by_currency(
                summary_rows, "total", where=status_in(InvoiceStatus.SENT, InvoiceStatus.OVERDUE)
            ),
            "collected": sum_by_currency(summary_rows, "total", where=status_in(InvoiceStatus.PAID)),
            "draft": sum_by_currency(summary_rows, "total", where=status_in(InvoiceStatus.DRAFT)),
        },
    }


@router.post("", status_code=201, response_model=InvoiceOut)
async def create_invoice_endpoint(
    data: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Create an invoice; totals are derived from the items"""
    client = await _owned_client(db, owner, data.client_id)
    invoice = await create_invoice(db, owner.id, data.model_dump())
    return {"invoice": invoice_response(invoice, client.name)}


@router.get("/next-number")
async def next_invoice_number(
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Preview the number the next invoice will get"""
    return {"nextNumber": await peek_next_invoice_number(db, owner.id)}


@router.post("/generate", response_model=InvoiceOut)
async def generate_invoice(
    data: GenerateInvoiceRequest,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Create one draft invoice from a batch of jobs"""
    invoice = await generate_invoice_from_jobs(db, owner.id, data.client_id, data.job_ids)
    return {"invoice": invoice_response(invoice)}


@router.post("/bulk")
async def bulk_invoices(
    data: InvoiceBulkAction,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Change the status of, or delete, several invoices"""
    if not data.ids:
        raise HTTPException(status_code=400, detail="No invoice IDs provided")
    if data.action == "status" and data.status is None:
        raise HTTPException(status_code=400, detail="Status is required for status update")

    result = await db.execute(
        select(Invoice).where(Invoice.id.in_(data.ids), Invoice.owner_id == owner.id)
    )
    invoices = result.scalars().all()

    if data.action == "delete":
        for invoice in invoices:
            await _delete_invoice(db, invoice)
    else:
        # One illegal change rejects the whole batch before any row is touched
        targets = [transition(INVOICE, invoice.status, data.status) for invoice in invoices]
        for invoice, target in zip(invoices, targets):
            invoice.status = target

    await db.commit()
    logger.info(f"Bulk {data.action} applied to {len(invoices)} invoice(s)")
    return {"success": True}


@router.get("/{invoice_id}", response_model=InvoiceDetailOut)
async def get_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Get an invoice with its client, payments and outstanding balance"""
    invoice = await _get_invoice(db, owner, invoice_id, with_relations=True)
    payments = list(invoice.payments)

    client = invoice.client
    body = InvoiceDetailResponse(
        **invoice_response(invoice, client.name if client else None).__dict__,
        clients=ClientSummary.model_validate(client) if client else None,
        payments=[PaymentResponse.model_validate(p) for p in payments],
        amount_paid=amount_paid(payments),
        outstanding=outstanding_balance(invoice.total, payments),
    )
    return {"invoice": body}


@router.patch("/{invoice_id}", response_model=InvoiceOut)
async def update_invoice_endpoint(
    invoice_id: int,
    data: InvoiceUpdate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Update an invoice; status changes follow the invoice lifecycle"""
    invoice = await _get_invoice(db, owner, invoice_id)
    updates = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key not in REQUIRED_FIELDS
    }

    update_invoice(invoice, updates)
    await db.commit()
    await db.refresh(invoice)

    logger.info(f"Updated invoice {invoice.invoice_number}")
    return {"invoice": invoice_response(invoice)}


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Delete an invoice together with its payments"""
    invoice = await _get_invoice(db, owner, invoice_id)
    await _delete_invoice(db, invoice)
    await db.commit()

    logger.info(f"Deleted invoice {invoice.invoice_number}")
    return {"success": True}
