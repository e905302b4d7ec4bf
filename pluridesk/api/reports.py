"""
Reports API - per-currency revenue, supplier cost and expense totals
"""
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.database import get_db
from pluridesk.models.expense import Expense
from pluridesk.models.invoice import Invoice, InvoiceStatus
from pluridesk.models.outsourcing import Outsourcing
from pluridesk.services.aggregation import status_in, sum_by_currency
from pluridesk.utils.db_compat import extract_year_month, year_equals
from pluridesk.api.common import Owner, get_owner

router = APIRouter()

# Invoices that count as earned, whether or not the money has arrived
REVENUE_STATUSES = (InvoiceStatus.PAID, InvoiceStatus.SENT)


async def load_invoice_rows(db: AsyncSession, owner: Owner, year: Optional[int] = None) -> list:
    query = select(
        Invoice.total, Invoice.currency, Invoice.status,
        extract_year_month(Invoice.date).label("month"),
    ).where(Invoice.owner_id == owner.id)
    if year:
        query = query.where(year_equals(Invoice.date, year))
    result = await db.execute(query)
    return [row._mapping for row in result]


async def load_expense_rows(db: AsyncSession, owner: Owner, year: Optional[int] = None) -> list:
    query = select(Expense.amount, Expense.currency).where(Expense.owner_id == owner.id)
    if year:
        query = query.where(year_equals(Expense.date, year))
    result = await db.execute(query)
    return [row._mapping for row in result]


async def load_outsourcing_rows(db: AsyncSession, owner: Owner, year: Optional[int] = None) -> list:
    query = select(
        Outsourcing.supplier_total, Outsourcing.supplier_currency, Outsourcing.paid,
    ).where(Outsourcing.owner_id == owner.id)
    if year:
        query = query.where(year_equals(Outsourcing.created_at, year))
    result = await db.execute(query)
    return [row._mapping for row in result]


def monthly_revenue(invoice_rows: list) -> Dict[str, Dict[str, float]]:
    """Revenue per YYYY-MM, each month split by currency"""
    by_month: Dict[str, list] = {}
    for row in invoice_rows:
        if row["month"]:
            by_month.setdefault(row["month"], []).append(row)

    is_revenue = status_in(*REVENUE_STATUSES)
    months = {}
    for month in sorted(by_month):
        totals = sum_by_currency(by_month[month], "total", where=is_revenue)
        if totals:
            months[month] = totals
    return months


@router.get("")
async def get_reports(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Revenue, supplier costs and expenses, never mixed across currencies"""
    invoices = await load_invoice_rows(db, owner, year)
    expenses = await load_expense_rows(db, owner, year)
    outsourcing = await load_outsourcing_rows(db, owner, year)

    return {
        "revenue": sum_by_currency(invoices, "total", where=status_in(*REVENUE_STATUSES)),
        "supplier_costs": sum_by_currency(outsourcing, "supplier_total", "supplier_currency"),
        "expenses": sum_by_currency(expenses, "amount"),
        "monthly_revenue": monthly_revenue(invoices),
    }
