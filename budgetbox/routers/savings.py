from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from budgetbox.models import Expense
from budgetbox.routers.schemas import ProjectionOut, SavingsOut
from budgetbox.services import savings
from budgetbox.services.store import BudgetStore
from budgetbox.services.store_context import get_store

"""Savings router: current value and projections of a budget's savings items."""

router = APIRouter(prefix="/budgets/{budget_id}/savings", tags=["savings"])


def _savings_out(expense: Expense, as_of: Optional[datetime]) -> SavingsOut:
    summary = savings.summarize(expense, as_of=as_of)
    return SavingsOut(
        expense_id=str(expense.id),
        name=expense.name,
        currency=expense.currency,
        category=expense.category,
        monthly_contribution=expense.amount,
        starting_balance=expense.starting_balance,
        annual_rate=summary.annual_rate,
        months_active=summary.months_active,
        current_value=summary.current_value,
        total_contributions=summary.total_contributions,
        interest_earned=summary.interest_earned,
        projections=[ProjectionOut(**p.__dict__) for p in summary.projections],
    )


@router.get("/", response_model=List[SavingsOut], summary="Savings items with projections")
async def list_savings(
    budget_id: UUID,
    as_of: Optional[datetime] = Query(None, description="Valuation time (defaults to now)"),
    store: BudgetStore = Depends(get_store),
):
    budget = store.get_budget(budget_id)
    if budget is None:
        raise HTTPException(status_code=404, detail="budget not found")
    return [_savings_out(e, as_of) for e in budget.savings_expenses()]


@router.get(
    "/{expense_id}/projection",
    response_model=ProjectionOut,
    summary="Projected value a custom number of months ahead",
)
async def project_savings(
    budget_id: UUID,
    expense_id: UUID,
    months_ahead: int = Query(..., ge=0, le=1200),
    as_of: Optional[datetime] = Query(None),
    store: BudgetStore = Depends(get_store),
):
    budget = store.get_budget(budget_id)
    expense = budget.find_expense(expense_id) if budget else None
    if expense is None or not expense.is_savings:
        raise HTTPException(status_code=404, detail="savings expense not found")
    summary = savings.summarize(
        expense, as_of=as_of, periods=((months_ahead, f"{months_ahead} Months"),)
    )
    return ProjectionOut(**summary.projections[0].__dict__)
