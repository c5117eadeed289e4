from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from budgetbox.models import ExpenseIn, ExpenseUpdateIn
from budgetbox.routers.schemas import ExpenseOut
from budgetbox.services.store import BudgetStore
from budgetbox.services.store_context import ensure_applied, get_store

router = APIRouter(prefix="/budgets/{budget_id}/expenses", tags=["expenses"])


def _budget_or_404(store: BudgetStore, budget_id: UUID):
    budget = store.get_budget(budget_id)
    if budget is None:
        raise HTTPException(status_code=404, detail="budget not found")
    return budget


@router.get("/", response_model=List[ExpenseOut], summary="List a budget's expenses")
async def list_expenses(budget_id: UUID, store: BudgetStore = Depends(get_store)):
    budget = _budget_or_404(store, budget_id)
    return [ExpenseOut.from_expense(e, budget.currency) for e in budget.expenses]


@router.post(
    "/", response_model=ExpenseOut, status_code=201, summary="Add an expense to a budget"
)
async def create_expense(
    budget_id: UUID, payload: ExpenseIn, store: BudgetStore = Depends(get_store)
):
    expense = payload.to_expense()
    ensure_applied(store.add_expense(budget_id, expense), "budget not found")
    budget = _budget_or_404(store, budget_id)
    return ExpenseOut.from_expense(expense, budget.currency)


@router.patch(
    "/{expense_id}", response_model=ExpenseOut, summary="Edit an expense (partial)"
)
async def patch_expense(
    budget_id: UUID,
    expense_id: UUID,
    payload: ExpenseUpdateIn,
    store: BudgetStore = Depends(get_store),
):
    budget = _budget_or_404(store, budget_id)
    existing = budget.find_expense(expense_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="expense not found")
    updated = payload.apply(existing)
    ensure_applied(store.update_expense(budget_id, updated), "expense not found")
    return ExpenseOut.from_expense(updated, budget.currency)


@router.delete("/{expense_id}", summary="Delete an expense")
async def delete_expense(
    budget_id: UUID, expense_id: UUID, store: BudgetStore = Depends(get_store)
):
    ensure_applied(store.delete_expense(budget_id, expense_id), "expense not found")
    return {"status": "deleted", "id": str(expense_id)}
