"""
Invoice creation, updates and batch generation from jobs.
"""
import logging
from datetime import date, timedelta
from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.config import get_settings
from pluridesk.exceptions import OperationFailed, ValidationError
from pluridesk.models.invoice import Invoice
from pluridesk.models.job import Job, JobStatus
from pluridesk.services.lifecycle import INITIAL_STATUS, INVOICE, transition
from pluridesk.services.line_items import build_line_items, calculate_totals
from pluridesk.services.numbering import next_invoice_number
from pluridesk.utils.money import round2

logger = logging.getLogger(__name__)


def job_line_item(job: Job) -> dict:
    """One invoice line for one job"""
    prefix = f"[{job.job_code}] " if job.job_code else ""
    return {
        "description": f"{prefix}{job.title}",
        "quantity": job.quantity or 1,
        "rate": job.rate or 0,
        "amount": job.total_amount or 0,
    }


def validate_job_batch(jobs: Sequence[Job], client_id: int) -> str:
    """Check every job belongs to the client and shares one currency; returns it"""
    if any(job.client_id != client_id for job in jobs):
        raise ValidationError("All jobs must belong to the same client")

    currency = jobs[0].currency
    if any(job.currency != currency for job in jobs):
        raise ValidationError("All jobs must have the same currency")

    return currency


async def generate_invoice_from_jobs(
    db: AsyncSession,
    owner_id: str,
    client_id: Optional[int],
    job_ids: Optional[List[int]],
) -> Invoice:
    """Fold a batch of jobs into one draft invoice and mark them invoiced.

    Validation runs before anything is written. The invoice insert and the
    job updates commit in one transaction.
    """
    if not job_ids:
        raise ValidationError("No jobs selected")
    if not client_id:
        raise ValidationError("Client ID is required")

    result = await db.execute(
        select(Job).where(Job.id.in_(job_ids), Job.owner_id == owner_id)
    )
    fetched = {job.id: job for job in result.scalars().all()}
    # Duplicated ids also land here: the lookup returns each row once
    if len(fetched) != len(job_ids):
        raise ValidationError("Some jobs could not be found or you don't have access to them")

    # Invoice lines follow the order the jobs were selected in
    jobs = [fetched[job_id] for job_id in job_ids]
    currency = validate_job_batch(jobs, client_id)

    items = [job_line_item(job) for job in jobs]
    total = round2(sum(item["amount"] for item in items))
    today = date.today()

    try:
        invoice = Invoice(
            owner_id=owner_id,
            client_id=client_id,
            invoice_number=await next_invoice_number(db, owner_id),
            date=today,
            due_date=today + timedelta(days=get_settings().INVOICE_DUE_DAYS),
            currency=currency,
            items=items,
            subtotal=total,
            tax_amount=0,
            total=total,
            status=INITIAL_STATUS[INVOICE],
        )
        db.add(invoice)
        await db.flush()

        for job in jobs:
            job.status = JobStatus.INVOICED.value
            job.invoice_id = invoice.id

        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Invoice generation for jobs {job_ids} failed: {e}")
        raise OperationFailed(f"Failed to generate invoice: {e}") from e

    await db.refresh(invoice)
    logger.info(
        f"Generated invoice {invoice.invoice_number} for client {client_id}: "
        f"{len(jobs)} job(s), {invoice.total} {invoice.currency}"
    )
    return invoice


def apply_line_items(invoice: Invoice, items: Optional[Iterable[Any]], tax_amount: Optional[float]) -> None:
    """Recompute subtotal/total after items or tax change"""
    if items is not None:
        invoice.items = build_line_items(items)
    if tax_amount is not None:
        invoice.tax_amount = tax_amount

    totals = calculate_totals(invoice.items or [], invoice.tax_amount or 0)
    invoice.subtotal = totals.subtotal
    invoice.tax_amount = totals.tax_amount
    invoice.total = totals.total


async def create_invoice(db: AsyncSession, owner_id: str, data: dict) -> Invoice:
    """Create an invoice from validated form data; totals are always derived"""
    items = data.pop("items")
    tax_amount = data.pop("tax_amount", 0) or 0
    status = data.pop("status", None) or INITIAL_STATUS[INVOICE]
    # New invoices start as draft; any other initial status must be reachable from it
    status = transition(INVOICE, INITIAL_STATUS[INVOICE], status)

    invoice = Invoice(owner_id=owner_id, status=status, **data)
    apply_line_items(invoice, items, tax_amount)

    if not invoice.invoice_number:
        invoice.invoice_number = await next_invoice_number(db, owner_id)
    if invoice.date is None:
        invoice.date = date.today()
    if invoice.due_date is None:
        invoice.due_date = invoice.date + timedelta(days=get_settings().INVOICE_DUE_DAYS)

    db.add(invoice)
    await db.commit()
    await db.refresh(invoice)
    logger.info(f"Created invoice {invoice.invoice_number} ({invoice.total} {invoice.currency})")
    return invoice


def update_invoice(invoice: Invoice, updates: dict) -> None:
    """Apply a partial update in place; status goes through the lifecycle"""
    items = updates.pop("items", None)
    tax_amount = updates.pop("tax_amount", None)
    status = updates.pop("status", None)

    if status is not None:
        invoice.status = transition(INVOICE, invoice.status, status)

    for key, value in updates.items():
        setattr(invoice, key, value)

    if items is not None or tax_amount is not None:
        apply_line_items(invoice, items, tax_amount)
