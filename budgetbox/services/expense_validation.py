"""Domain-level validation for budgets and expenses entering the store.

Pydantic payload models already enforce field-level rules at the HTTP
boundary (amount > 0, non-blank names, enumerations). The store accepts
domain objects directly, so the same rules are rechecked here and reported as
messages instead of exceptions; the store turns a non-empty result into a
``rejected_invalid`` outcome.
"""

from __future__ import annotations
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from budgetbox.models import Budget, Expense


def validate_budget_domain(budget: "Budget") -> List[str]:
    problems: List[str] = []
    if not budget.name or not budget.name.strip():
        problems.append("budget name cannot be empty")
    if budget.amount <= 0:
        problems.append("budget amount must be greater than 0")
    ids = [e.id for e in budget.expenses]
    if len(ids) != len(set(ids)):
        problems.append("budget contains duplicate expense ids")
    for expense in budget.expenses:
        problems.extend(validate_expense_domain(expense))
    return problems


def validate_expense_domain(expense: "Expense") -> List[str]:
    problems: List[str] = []
    if not expense.name or not expense.name.strip():
        problems.append("expense name cannot be empty")
    if expense.amount <= 0:
        problems.append("expense amount must be greater than 0")
    if expense.starting_balance is not None and expense.starting_balance < 0:
        problems.append("starting balance cannot be negative")
    return problems
