"""
Human-facing document numbers.

Invoice numbers come from a per-owner counter that only moves forward, so a
deleted invoice never frees its number.
"""
import logging
import random
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.config import get_settings
from pluridesk.models.invoice import Invoice, InvoiceCounter

logger = logging.getLogger(__name__)


def format_invoice_number(number: int, prefix: Optional[str] = None) -> str:
    prefix = prefix or get_settings().INVOICE_NUMBER_PREFIX
    return f"{prefix}-{number:04d}"


async def _counter(db: AsyncSession, owner_id: str) -> Optional[InvoiceCounter]:
    result = await db.execute(
        select(InvoiceCounter).where(InvoiceCounter.owner_id == owner_id)
    )
    return result.scalar_one_or_none()


async def _number_taken(db: AsyncSession, owner_id: str, invoice_number: str) -> bool:
    result = await db.execute(
        select(Invoice.id).where(
            Invoice.owner_id == owner_id,
            Invoice.invoice_number == invoice_number,
        )
    )
    return result.first() is not None


async def peek_next_invoice_number(db: AsyncSession, owner_id: str) -> str:
    """Number the next invoice would get, without reserving it"""
    counter = await _counter(db, owner_id)
    number = (counter.last_number if counter else 0) + 1
    while await _number_taken(db, owner_id, format_invoice_number(number)):
        number += 1
    return format_invoice_number(number)


async def next_invoice_number(db: AsyncSession, owner_id: str) -> str:
    """Reserve the next invoice number for ``owner_id``.

    Numbers typed in by hand are skipped. The counter update is flushed with
    the caller's transaction.
    """
    counter = await _counter(db, owner_id)
    if counter is None:
        counter = InvoiceCounter(owner_id=owner_id, last_number=0)
        db.add(counter)

    number = counter.last_number + 1
    while await _number_taken(db, owner_id, format_invoice_number(number)):
        number += 1

    counter.last_number = number
    await db.flush()
    return format_invoice_number(number)


def generate_job_code(today: Optional[date] = None) -> str:
    """JOB-<year>-<4 random digits>; collisions are possible"""
    year = (today or date.today()).year
    return f"JOB-{year}-{random.randint(0, 9999):04d}"
