from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from budgetbox.models import BudgetIn, BudgetUpdateIn
from budgetbox.routers.schemas import BudgetOut
from budgetbox.services.store import BudgetStore
from budgetbox.services.store_context import ensure_applied, get_store

router = APIRouter(prefix="/budgets", tags=["budgets"])


def _out(store: BudgetStore, budget_id: UUID) -> BudgetOut:
    budget = store.get_budget(budget_id)
    if budget is None:
        raise HTTPException(status_code=404, detail="budget not found")
    return BudgetOut.from_budget(budget, store.can_add_expense(budget_id))


@router.get("/", response_model=List[BudgetOut], summary="List budgets")
async def list_budgets(
    include_inactive: Optional[bool] = Query(
        None,
        description="Include inactive budgets (defaults to the inactive-visibility setting)",
    ),
    store: BudgetStore = Depends(get_store),
):
    if include_inactive is None:
        budgets = store.visible_budgets()
    elif include_inactive:
        budgets = list(store.budgets)
    else:
        budgets = store.active_budgets()
    return [BudgetOut.from_budget(b, store.can_add_expense(b.id)) for b in budgets]


@router.post("/", response_model=BudgetOut, status_code=201, summary="Create a budget")
async def create_budget(payload: BudgetIn, store: BudgetStore = Depends(get_store)):
    budget = payload.to_budget()
    ensure_applied(store.add_budget(budget))
    return _out(store, budget.id)


@router.get("/{budget_id}", response_model=BudgetOut, summary="Get one budget")
async def get_budget(budget_id: UUID, store: BudgetStore = Depends(get_store)):
    return _out(store, budget_id)


@router.patch("/{budget_id}", response_model=BudgetOut, summary="Edit a budget (partial)")
async def patch_budget(
    budget_id: UUID, payload: BudgetUpdateIn, store: BudgetStore = Depends(get_store)
):
    existing = store.get_budget(budget_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="budget not found")
    ensure_applied(store.update_budget(payload.apply(existing)), "budget not found")
    return _out(store, budget_id)


@router.delete("/{budget_id}", summary="Delete a budget and its expenses")
async def delete_budget(budget_id: UUID, store: BudgetStore = Depends(get_store)):
    ensure_applied(store.delete_budget(budget_id), "budget not found")
    return {"status": "deleted", "id": str(budget_id)}


@router.post(
    "/{budget_id}/duplicate",
    response_model=BudgetOut,
    status_code=201,
    summary="Duplicate a budget with its expenses",
)
async def duplicate_budget(budget_id: UUID, store: BudgetStore = Depends(get_store)):
    result = ensure_applied(store.duplicate_budget(budget_id), "budget not found")
    return _out(store, result.subject_id)  # type: ignore[arg-type]


@router.post(
    "/{budget_id}/toggle-active",
    response_model=BudgetOut,
    summary="Flip a budget between active and inactive",
)
async def toggle_active(budget_id: UUID, store: BudgetStore = Depends(get_store)):
    ensure_applied(store.toggle_budget_active(budget_id), "budget not found")
    return _out(store, budget_id)
