from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from budgetbox.models import CollectionSettings, StudentLoan
from budgetbox.models.constants import InsightType
from budgetbox.services.loans import estimate_payoff
from budgetbox.services.store import BudgetStore
from budgetbox.services.store_context import ensure_applied, get_store

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsOut(CollectionSettings):
    max_insights: int
    expense_item_limit: int


class StudentLoanOut(BaseModel):
    loan: StudentLoan
    annual_rate: float
    months_remaining: Optional[int]
    payoff_date: Optional[datetime]
    total_interest: Optional[float]


def _settings_out(store: BudgetStore) -> SettingsOut:
    return SettingsOut(
        **store.settings.model_dump(),
        max_insights=store.max_insights,
        expense_item_limit=store.expense_limit,
    )


@router.get("/", response_model=SettingsOut, summary="Current collection settings")
async def get_collection_settings(store: BudgetStore = Depends(get_store)):
    return _settings_out(store)


@router.post(
    "/toggle/{flag}",
    response_model=SettingsOut,
    summary="Flip a boolean setting (show_values, item_limit, show_inactive)",
)
async def toggle_setting(flag: str, store: BudgetStore = Depends(get_store)):
    ensure_applied(store.toggle_flag(flag), f"unknown setting '{flag}'")
    return _settings_out(store)


@router.put(
    "/insights/{kind}",
    response_model=SettingsOut,
    summary="Select or deselect an insight (409 when the selection is full)",
)
async def toggle_insight(kind: InsightType, store: BudgetStore = Depends(get_store)):
    ensure_applied(store.toggle_insight(kind))
    return _settings_out(store)


def _loan_out(store: BudgetStore, as_of: Optional[datetime]) -> StudentLoanOut:
    loan = store.settings.student_loan
    estimate = estimate_payoff(loan, as_of=as_of)
    return StudentLoanOut(
        loan=loan,
        annual_rate=estimate.annual_rate,
        months_remaining=estimate.months_remaining,
        payoff_date=estimate.payoff_date,
        total_interest=estimate.total_interest,
    )


@router.get("/student-loan", response_model=StudentLoanOut, summary="Student loan and payoff estimate")
async def get_student_loan(
    as_of: Optional[datetime] = Query(None), store: BudgetStore = Depends(get_store)
):
    return _loan_out(store, as_of)


@router.put("/student-loan", response_model=StudentLoanOut, summary="Update student loan tracking")
async def put_student_loan(payload: StudentLoan, store: BudgetStore = Depends(get_store)):
    ensure_applied(store.update_student_loan(payload))
    return _loan_out(store, None)
