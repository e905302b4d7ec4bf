"""
Expenses API endpoints
"""
import logging
import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from pluridesk.database import get_db
from pluridesk.models.expense import Expense, EXPENSE_CATEGORIES
from pluridesk.models.supplier import Supplier
from pluridesk.api.common import (
    CurrencyCode, Owner, PageMetadata, PageParams, get_owner, page_params, paginate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class ExpenseCreate(BaseModel):
    date: Optional[datetime.date] = None
    category: str = "Other"
    amount: float = Field(..., gt=0)
    currency: CurrencyCode = "USD"
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = None
    notes: Optional[str] = None


class ExpenseResponse(BaseModel):
    id: int
    date: Optional[datetime.date]
    category: str
    amount: float
    currency: str
    supplier_id: Optional[int]
    supplier_name: Optional[str]
    notes: Optional[str]
    created_at: Optional[datetime.datetime]

    class Config:
        from_attributes = True


class ExpenseOut(BaseModel):
    expense: ExpenseResponse


class ExpensePage(BaseModel):
    data: List[ExpenseResponse]
    metadata: PageMetadata


async def _get_expense(db: AsyncSession, owner: Owner, expense_id: int) -> Expense:
    result = await db.execute(
        select(Expense).where(Expense.id == expense_id, Expense.owner_id == owner.id)
    )
    expense = result.scalar_one_or_none()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


async def _apply(db: AsyncSession, owner: Owner, expense: Expense, data: ExpenseCreate) -> None:
    if data.category not in EXPENSE_CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Unknown expense category: {data.category}")

    values = data.model_dump()
    if data.supplier_id is not None:
        result = await db.execute(
            select(Supplier).where(Supplier.id == data.supplier_id, Supplier.owner_id == owner.id)
        )
        supplier = result.scalar_one_or_none()
        if not supplier:
            raise HTTPException(status_code=404, detail="Supplier not found")
        values["supplier_name"] = values["supplier_name"] or supplier.name

    values["date"] = values["date"] or datetime.date.today()
    for field, value in values.items():
        setattr(expense, field, value)


@router.get("", response_model=ExpensePage)
async def list_expenses(
    category: Optional[str] = None,
    supplier_id: Optional[int] = None,
    from_date: Optional[datetime.date] = Query(None, alias="from"),
    to_date: Optional[datetime.date] = Query(None, alias="to"),
    search: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """List expenses, most recent first"""
    query = select(Expense).where(Expense.owner_id == owner.id)

    if category and category != "all":
        query = query.where(Expense.category == category)
    if supplier_id:
        query = query.where(Expense.supplier_id == supplier_id)
    if from_date:
        query = query.where(Expense.date >= from_date)
    if to_date:
        query = query.where(Expense.date <= to_date)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Expense.notes.ilike(pattern), Expense.supplier_name.ilike(pattern)))

    query = query.order_by(Expense.date.desc(), Expense.id.desc())
    expenses, metadata = await paginate(db, query, params)
    return {"data": expenses, "metadata": metadata}


@router.get("/categories")
async def list_categories():
    return {"categories": EXPENSE_CATEGORIES}


@router.post("", status_code=201, response_model=ExpenseOut)
async def create_expense(
    data: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Record a business expense"""
    expense = Expense(owner_id=owner.id)
    await _apply(db, owner, expense, data)
    db.add(expense)
    await db.commit()
    await db.refresh(expense)

    logger.info(f"Recorded {expense.category} expense of {expense.amount} {expense.currency}")
    return {"expense": expense}


@router.get("/{expense_id}", response_model=ExpenseOut)
async def get_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    expense = await _get_expense(db, owner, expense_id)
    return {"expense": expense}


@router.put("/{expense_id}", response_model=ExpenseOut)
async def replace_expense(
    expense_id: int,
    data: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    """Replace every field of an expense"""
    expense = await _get_expense(db, owner, expense_id)
    await _apply(db, owner, expense, data)
    await db.commit()
    await db.refresh(expense)
    return {"expense": expense}


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    owner: Owner = Depends(get_owner),
):
    expense = await _get_expense(db, owner, expense_id)
    await db.delete(expense)
    await db.commit()
    return {"success": True}
