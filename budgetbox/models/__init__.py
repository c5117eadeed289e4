"""Pydantic domain models for BudgetBox."""

from .constants import (
    Currency,
    ExpenseCategory,
    InsightType,
    ReminderFrequency,
    DisplayMeta,
    CURRENCY_SYMBOLS,
    CATEGORY_DISPLAY,
    INSIGHT_DISPLAY,
)  # re-export
from .reminder import Reminder
from .expense import Expense, ExpenseIn, ExpenseUpdateIn
from .budget import Budget, BudgetIn, BudgetUpdateIn
from .settings import CollectionSettings, StudentLoan

__all__ = [
    "Currency",
    "ExpenseCategory",
    "InsightType",
    "ReminderFrequency",
    "DisplayMeta",
    "CURRENCY_SYMBOLS",
    "CATEGORY_DISPLAY",
    "INSIGHT_DISPLAY",
    "Reminder",
    "Expense",
    "ExpenseIn",
    "ExpenseUpdateIn",
    "Budget",
    "BudgetIn",
    "BudgetUpdateIn",
    "CollectionSettings",
    "StudentLoan",
]
