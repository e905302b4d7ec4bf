"""
Dashboard API - headline figures for the home screen
"""
from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.database import get_db
from pluridesk.models.invoice import InvoiceStatus
from pluridesk.models.job import Job, JobStatus
from pluridesk.models.quote import Quote, QuoteStatus
from pluridesk.services.aggregation import status_in, sum_by_currency, unpaid
from pluridesk.api.common import Owner, get_owner
from pluridesk.api.reports import (
    REVENUE_STATUSES, load_expense_rows, load_invoice_rows, load_outsourcing_rows,
)

router = APIRouter()

ACTIVE_JOB_STATUSES = (JobStatus.CREATED, JobStatus.IN_PROGRESS, JobStatus.ON_HOLD)
OPEN_QUOTE_STATUSES = (QuoteStatus.DRAFT, QuoteStatus.SENT)


async def _count(db: AsyncSession, model, owner: Owner, statuses) -> int:
    result = await db.execute(
        select(func.count(model.id)).where(
            model.owner_id == owner.id,
            model.status.in_([s.value for s in statuses]),
        )
    )
    return result.scalar() or 0


@router.get("")
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Per-currency money figures plus open work counts"""
    invoices = await load_invoice_rows(db, owner)
    expenses = await load_expense_rows(db, owner)
    outsourcing = await load_outsourcing_rows(db, owner)

    return {
        "revenue": sum_by_currency(invoices, "total", where=status_in(*REVENUE_STATUSES)),
        "expenses": sum_by_currency(expenses, "amount"),
        "outsourcing_costs": sum_by_currency(outsourcing, "supplier_total", "supplier_currency"),
        "outstanding_invoices": sum_by_currency(
            invoices, "total", where=status_in(InvoiceStatus.SENT, InvoiceStatus.OVERDUE)
        ),
        "pending_payouts": sum_by_currency(
            outsourcing, "supplier_total", "supplier_currency", where=unpaid
        ),
        "counts": {
            "active_jobs": await _count(db, Job, owner, ACTIVE_JOB_STATUSES),
            "open_quotes": await _count(db, Quote, owner, OPEN_QUOTE_STATUSES),
        },
    }
