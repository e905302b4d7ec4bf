"""
Jobs API endpoints
"""
import logging
import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.database import get_db
from pluridesk.models.client import Client
from pluridesk.models.job import Job, JobStatus, PricingType, ServiceType
from pluridesk.models.outsourcing import Outsourcing
from pluridesk.services.line_items import job_total
from pluridesk.services.numbering import generate_job_code
from pluridesk.api.common import (
    CurrencyCode, Owner, PageMetadata, PageParams, count_rows, get_owner, page_metadata,
)

logger = logging.getLogger(__name__)

router = APIRouter()

SORT_COLUMNS = {
    "created_at": Job.created_at,
    "title": Job.title,
    "job_code": Job.job_code,
    "status": Job.status,
    "total_amount": Job.total_amount,
    "start_date": Job.start_date,
    "due_date": Job.due_date,
    "client": Client.name,
}

PRICING_FIELDS = {"pricing_type", "quantity", "rate"}


class JobCreate(BaseModel):
    client_id: int
    title: str = Field(..., min_length=1)
    job_code: Optional[str] = None
    service_type: ServiceType = ServiceType.TRANSLATION
    pricing_type: PricingType = PricingType.PER_WORD
    quantity: Optional[float] = Field(None, ge=0)
    rate: Optional[float] = Field(None, ge=0)
    currency: CurrencyCode = "USD"
    status: JobStatus = JobStatus.CREATED
    start_date: Optional[datetime.date] = None
    due_date: Optional[datetime.date] = None
    notes: Optional[str] = None


class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    job_code: Optional[str] = None
    service_type: Optional[ServiceType] = None
    pricing_type: Optional[PricingType] = None
    quantity: Optional[float] = Field(None, ge=0)
    rate: Optional[float] = Field(None, ge=0)
    currency: Optional[CurrencyCode] = None
    status: Optional[JobStatus] = None
    start_date: Optional[datetime.date] = None
    due_date: Optional[datetime.date] = None
    notes: Optional[str] = None


class JobBulkUpdate(BaseModel):
    ids: List[int] = Field(..., min_length=1)
    status: JobStatus


class JobBulkDelete(BaseModel):
    ids: List[int] = Field(..., min_length=1)


class JobResponse(BaseModel):
    id: int
    client_id: int
    client_name: Optional[str] = None
    job_code: Optional[str]
    title: str
    service_type: str
    pricing_type: str
    quantity: Optional[float]
    rate: Optional[float]
    currency: str
    total_amount: float
    status: str
    invoice_id: Optional[int]
    has_outsourcing: Optional[bool] = False
    start_date: Optional[datetime.date]
    due_date: Optional[datetime.date]
    notes: Optional[str]
    created_at: Optional[datetime.datetime]

    class Config:
        from_attributes = True


class JobOut(BaseModel):
    job: JobResponse


class JobPage(BaseModel):
    data: List[JobResponse]
    metadata: PageMetadata


def job_response(job: Job, client_name: Optional[str] = None) -> JobResponse:
    return JobResponse.model_validate(job).model_copy(update={"client_name": client_name})


async def _get_job(db: AsyncSession, owner: Owner, job_id: int) -> Job:
    result = await db.execute(
        select(Job).where(Job.id == job_id, Job.owner_id == owner.id)
    )
    job = result.scalar_one_or_none()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


async def _client_name(db: AsyncSession, client_id: int) -> Optional[str]:
    result = await db.execute(select(Client.name).where(Client.id == client_id))
    return result.scalar_one_or_none()


def _job_page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> PageParams:
    return PageParams(page=page, limit=limit)


@router.get("", response_model=JobPage)
async def list_jobs(
    status: Optional[JobStatus] = None,
    client_id: Optional[int] = None,
    search: Optional[str] = None,
    outsourcing: Literal["all", "with_outsourcing"] = "all",
    sort: str = "created_at",
    order: Literal["asc", "desc"] = "desc",
    params: PageParams = Depends(_job_page_params),
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """List jobs with filters"""
    query = select(Job, Client.name).join(Client, Client.id == Job.client_id, isouter=True)
    query = query.where(Job.owner_id == owner.id)

    if status:
        query = query.where(Job.status == status.value)
    if client_id:
        query = query.where(Job.client_id == client_id)
    if outsourcing == "with_outsourcing":
        query = query.where(Job.has_outsourcing == True)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Job.title.ilike(pattern), Job.job_code.ilike(pattern)))

    column = SORT_COLUMNS.get(sort, Job.created_at)
    query = query.order_by(column.asc() if order == "asc" else column.desc(), Job.id.desc())

    total = await count_rows(db, query.with_only_columns(Job.id))
    result = await db.execute(query.offset(params.offset).limit(params.limit))

    return {
        "data": [job_response(job, client_name) for job, client_name in result.all()],
        "metadata": page_metadata(params, total),
    }


@router.post("", status_code=201, response_model=JobOut)
async def create_job(
    data: JobCreate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Create a job; total_amount is derived from the pricing fields"""
    result = await db.execute(
        select(Client).where(Client.id == data.client_id, Client.owner_id == owner.id)
    )
    client = result.scalar_one_or_none()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    values = data.model_dump()
    for key in ("service_type", "pricing_type", "status"):
        values[key] = values[key].value

    job = Job(owner_id=owner.id, **values)
    job.job_code = job.job_code or generate_job_code()
    job.total_amount = job_total(job.pricing_type, job.quantity, job.rate)

    db.add(job)
    await db.commit()
    await db.refresh(job)

    logger.info(f"Created job {job.job_code} (id={job.id}) for client {client.id}")
    return {"job": job_response(job, client.name)}


@router.patch("/bulk")
async def bulk_update_jobs(
    data: JobBulkUpdate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Set the status of several jobs at once"""
    result = await db.execute(
        select(Job).where(Job.id.in_(data.ids), Job.owner_id == owner.id)
    )
    jobs = result.scalars().all()
    for job in jobs:
        job.status = data.status.value

    await db.commit()
    logger.info(f"Bulk status {data.status.value} applied to {len(jobs)} job(s)")
    return {"success": True}


@router.delete("/bulk")
async def bulk_delete_jobs(
    data: JobBulkDelete,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Delete several jobs and their outsourcing rows"""
    result = await db.execute(
        select(Job.id).where(Job.id.in_(data.ids), Job.owner_id == owner.id)
    )
    job_ids = result.scalars().all()
    if job_ids:
        await db.execute(delete(Outsourcing).where(Outsourcing.job_id.in_(job_ids)))
        await db.execute(delete(Job).where(Job.id.in_(job_ids)))

    await db.commit()
    logger.info(f"Deleted {len(job_ids)} job(s)")
    return {"success": True}


@router.get("/{job_id}", response_model=JobOut)
async def get_job(
    job_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Get a single job"""
    job = await _get_job(db, owner, job_id)
    return {"job": job_response(job, await _client_name(db, job.client_id))}


@router.patch("/{job_id}", response_model=JobOut)
async def update_job(
    job_id: int,
    data: JobUpdate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Update a job; changing pricing fields recomputes the total"""
    job = await _get_job(db, owner, job_id)
    updates = data.model_dump(exclude_unset=True)

    for field, value in updates.items():
        if field in ("service_type", "pricing_type", "status") and value is not None:
            value = value.value
        if value is None and field in ("title", "service_type", "pricing_type", "currency", "status"):
            continue
        setattr(job, field, value)

    if PRICING_FIELDS & updates.keys():
        job.total_amount = job_total(job.pricing_type, job.quantity, job.rate)

    await db.commit()
    await db.refresh(job)
    return {"job": job_response(job, await _client_name(db, job.client_id))}
