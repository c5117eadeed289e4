"""Response models shared by the routers.

Derived budget metrics are attached here, at the boundary, so the domain
model never serializes them.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from budgetbox.models import Budget, Expense
from budgetbox.models.constants import Currency, ExpenseCategory
from budgetbox.services.money import round2


class ExpenseOut(Expense):
    converted_to_budget: float

    @classmethod
    def from_expense(cls, expense: Expense, budget_currency: Currency) -> "ExpenseOut":
        return cls(
            **expense.model_dump(),
            converted_to_budget=round2(expense.converted_amount(budget_currency)),
        )


class BudgetOut(BaseModel):
    id: str
    name: str
    amount: float
    currency: Currency
    icon_name: str
    color_hex: str
    is_monthly: bool
    start_month: int
    start_year: int
    is_active: bool
    remaining_amount: float
    percent_remaining: int
    is_exceeded: bool
    expense_count: int
    can_add_expense: bool
    expenses: List[ExpenseOut]

    @classmethod
    def from_budget(cls, budget: Budget, can_add_expense: bool) -> "BudgetOut":
        return cls(
            id=str(budget.id),
            name=budget.name,
            amount=budget.amount,
            currency=budget.currency,
            icon_name=budget.icon_name,
            color_hex=budget.color_hex,
            is_monthly=budget.is_monthly,
            start_month=budget.start_month,
            start_year=budget.start_year,
            is_active=budget.is_active,
            remaining_amount=round2(budget.remaining_amount),
            percent_remaining=budget.percent_remaining,
            is_exceeded=budget.is_exceeded,
            expense_count=len(budget.expenses),
            can_add_expense=can_add_expense,
            expenses=[ExpenseOut.from_expense(e, budget.currency) for e in budget.expenses],
        )


class ProjectionOut(BaseModel):
    months_ahead: int
    label: str
    horizon: datetime
    total_months: int
    projected_value: float
    total_contributions: float
    interest_gained: float


class SavingsOut(BaseModel):
    expense_id: str
    name: str
    currency: Currency
    category: ExpenseCategory
    monthly_contribution: float
    starting_balance: Optional[float]
    annual_rate: float
    months_active: int
    current_value: float
    total_contributions: float
    interest_earned: float
    projections: List[ProjectionOut]
