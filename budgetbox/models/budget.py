from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from budgetbox.services.money import round_half_up
from budgetbox.services.rates import conversion
from .constants import Currency
from .expense import Expense


def _current_month() -> int:
    return datetime.now().month


def _current_year() -> int:
    return datetime.now().year


class Budget(BaseModel):
    """Spending envelope owning an insertion-ordered list of expenses.

    Remaining amount and percent remaining are derived on access and never
    serialized.
    """

    id: UUID = Field(default_factory=uuid4)
    name: str
    amount: float
    currency: Currency
    icon_name: str = "dollarsign.circle"
    color_hex: str = "A169F7"
    is_monthly: bool = True
    start_month: int = Field(default_factory=_current_month, ge=1, le=12)
    start_year: int = Field(default_factory=_current_year)
    is_active: bool = True
    expenses: List[Expense] = Field(default_factory=list)

    def spent_amount(self, table: conversion.SupportsConvert | None = None) -> float:
        return sum(e.converted_amount(self.currency, table) for e in self.expenses)

    def remaining(self, table: conversion.SupportsConvert | None = None) -> float:
        return self.amount - self.spent_amount(table)

    def percent_remaining_with(self, table: conversion.SupportsConvert | None = None) -> int:
        if self.amount <= 0:
            return 0
        pct = round_half_up(self.remaining(table) / self.amount * 100)
        return max(0, min(100, pct))

    @property
    def remaining_amount(self) -> float:
        return self.remaining()

    @property
    def percent_remaining(self) -> int:
        return self.percent_remaining_with()

    @property
    def is_exceeded(self) -> bool:
        return self.remaining_amount < 0

    def find_expense(self, expense_id: UUID) -> Optional[Expense]:
        return next((e for e in self.expenses if e.id == expense_id), None)

    def savings_expenses(self) -> List[Expense]:
        return [e for e in self.expenses if e.is_savings]


class BudgetIn(BaseModel):
    name: str
    amount: float = Field(..., gt=0)
    currency: Currency
    icon_name: str = "dollarsign.circle"
    color_hex: str = "A169F7"
    is_monthly: bool = True
    start_month: Optional[int] = Field(None, ge=1, le=12)
    start_year: Optional[int] = Field(None, ge=1900)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name cannot be empty")
        return value.strip()

    def to_budget(self) -> Budget:
        data = self.model_dump(exclude_none=True)
        return Budget(**data)


class BudgetUpdateIn(BaseModel):
    name: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    currency: Optional[Currency] = None
    icon_name: Optional[str] = None
    color_hex: Optional[str] = None
    is_monthly: Optional[bool] = None
    start_month: Optional[int] = Field(None, ge=1, le=12)
    start_year: Optional[int] = Field(None, ge=1900)
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def _at_least_one(self) -> "BudgetUpdateIn":
        if not any(getattr(self, f) is not None for f in type(self).model_fields):
            raise ValueError("at least one field must be provided")
        return self

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("name cannot be empty")
        return value.strip() if value is not None else None

    def apply(self, budget: Budget) -> Budget:
        return budget.model_copy(update=self.model_dump(exclude_none=True))
