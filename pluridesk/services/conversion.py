"""
Quote -> Job conversion
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.exceptions import NotFoundError, OperationFailed
from pluridesk.models.job import Job, JobStatus, PricingType, ServiceType
from pluridesk.models.quote import Quote, QuoteStatus
from pluridesk.services.lifecycle import QUOTE, transition
from pluridesk.services.numbering import generate_job_code

logger = logging.getLogger(__name__)


def _job_notes(quote: Quote) -> str:
    return f"Converted from Quote {quote.quote_number}\n\n{quote.notes or ''}"


async def convert_quote_to_job(db: AsyncSession, owner_id: str, quote_id: int) -> Job:
    """Accept a quote and materialize it as a flat-fee job.

    The job insert and the quote status change commit together; if either
    fails neither is kept.
    """
    result = await db.execute(
        select(Quote).where(Quote.id == quote_id, Quote.owner_id == owner_id)
    )
    quote = result.scalar_one_or_none()
    if not quote:
        raise NotFoundError("Quote not found")

    accepted = transition(QUOTE, quote.status, QuoteStatus.ACCEPTED)

    job = Job(
        owner_id=owner_id,
        client_id=quote.client_id,
        title=f"Job from Quote {quote.quote_number}",
        job_code=generate_job_code(),
        status=JobStatus.CREATED.value,
        service_type=ServiceType.TRANSLATION.value,
        pricing_type=PricingType.FLAT_FEE.value,
        quantity=1,
        rate=quote.total,
        currency=quote.currency,
        total_amount=quote.total,
        notes=_job_notes(quote),
    )
    db.add(job)
    quote.status = accepted

    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Converting quote {quote_id} failed: {e}")
        raise OperationFailed(f"Failed to convert quote: {e}") from e

    await db.refresh(job)
    logger.info(f"Quote {quote.quote_number} converted to job {job.job_code} (id={job.id})")
    return job
