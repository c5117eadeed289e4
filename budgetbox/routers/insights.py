from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from budgetbox.models.constants import Currency, ExpenseCategory, InsightType
from budgetbox.services import insights
from budgetbox.services.store import BudgetStore
from budgetbox.services.store_context import get_store

router = APIRouter(prefix="/insights", tags=["insights"])


class InsightOut(BaseModel):
    kind: InsightType
    title: str
    icon: str
    color: str
    display: str


class CategoryTotalOut(BaseModel):
    category: ExpenseCategory
    amount: float
    percent: float


class CurrencyExposureOut(BaseModel):
    currency: Currency
    amount_total: float
    converted_total: float
    percent: float


class SummaryOut(BaseModel):
    primary_currency: Currency
    budget_count: int
    expense_count: int
    savings_rate: float
    essential_percentage: float
    top_category: Optional[CategoryTotalOut]
    budgets_exceeding: int
    total_spent: float
    monthly_average: float
    largest_expense_id: Optional[str]
    recent_activity_id: Optional[str]
    upcoming_payments: int
    savings_goal: float
    spending_trend: Optional[float]
    category_distribution: List[CategoryTotalOut]


def _budgets(store: BudgetStore, include_inactive: bool):
    return list(store.budgets) if include_inactive else store.active_budgets()


def _category(item: Any) -> CategoryTotalOut:
    return CategoryTotalOut(category=item.category, amount=item.amount, percent=item.percent)


@router.get("/", response_model=List[InsightOut], summary="Selected insights for display")
async def selected_insights(
    include_inactive: bool = Query(False),
    now: Optional[datetime] = Query(None),
    store: BudgetStore = Depends(get_store),
):
    """Render the user's selected insights in selection order.

    Values are masked when the show-values setting is off.
    """
    settings = store.settings
    rendered = insights.compute_insights(
        _budgets(store, include_inactive),
        settings.selected_insights,
        show_values=settings.show_values,
        now=now,
    )
    return [
        InsightOut(kind=v.kind, title=v.title, icon=v.icon, color=v.color, display=v.display)
        for v in rendered.values()
    ]


@router.get("/summary", response_model=SummaryOut, summary="Raw insight values")
async def insight_summary(
    include_inactive: bool = Query(False),
    now: Optional[datetime] = Query(None),
    store: BudgetStore = Depends(get_store),
):
    s = insights.summarize(_budgets(store, include_inactive), now=now)
    return SummaryOut(
        primary_currency=s.primary_currency,
        budget_count=s.budget_count,
        expense_count=s.expense_count,
        savings_rate=s.savings_rate,
        essential_percentage=s.essential_percentage,
        top_category=_category(s.top_category) if s.top_category else None,
        budgets_exceeding=s.budgets_exceeding,
        total_spent=s.total_spent,
        monthly_average=s.monthly_average,
        largest_expense_id=str(s.largest_expense.id) if s.largest_expense else None,
        recent_activity_id=str(s.recent_activity.id) if s.recent_activity else None,
        upcoming_payments=len(s.upcoming_payments),
        savings_goal=s.savings_goal,
        spending_trend=s.spending_trend,
        category_distribution=[_category(c) for c in s.category_distribution],
    )


@router.get(
    "/category-breakdown",
    response_model=List[CategoryTotalOut],
    summary="Spend per category, largest first",
)
async def category_breakdown(
    include_inactive: bool = Query(False), store: BudgetStore = Depends(get_store)
):
    expenses = insights.all_expenses(_budgets(store, include_inactive))
    return [_category(c) for c in insights.category_distribution(expenses)]


@router.get(
    "/currency-breakdown",
    response_model=List[CurrencyExposureOut],
    summary="Spend per currency with primary-currency equivalents",
)
async def currency_breakdown(
    include_inactive: bool = Query(False), store: BudgetStore = Depends(get_store)
):
    return [
        CurrencyExposureOut(**item.__dict__)
        for item in insights.currency_breakdown(_budgets(store, include_inactive))
    ]
