from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from budgetbox.services import savings
from budgetbox.services.rates import conversion
from budgetbox.services.timeline import naive_local
from .constants import Currency, ExpenseCategory
from .reminder import Reminder


class Expense(BaseModel):
    """A single recorded cost owned by exactly one budget.

    ``interest_rate`` and ``expected_annual_return`` stay raw text: an empty or
    unparseable value means "not provided", which is different from "0".
    """

    id: UUID = Field(default_factory=uuid4)
    name: str
    amount: float
    currency: Currency
    category: ExpenseCategory
    date: datetime = Field(default_factory=datetime.now)
    is_essential: bool = False
    is_flagged: bool = False
    notes: str = ""
    reminder: Optional[Reminder] = None
    interest_rate: Optional[str] = None
    expected_annual_return: Optional[str] = None
    starting_balance: Optional[float] = None
    is_student_loan_payment: bool = False

    @field_validator("date")
    @classmethod
    def _naive_date(cls, value: datetime) -> datetime:
        return naive_local(value)

    @property
    def is_savings(self) -> bool:
        return self.category == ExpenseCategory.SAVINGS

    def converted_amount(
        self, target: Currency, table: conversion.SupportsConvert | None = None
    ) -> float:
        return conversion.convert(self.amount, self.currency, target, table)

    def converted_starting_balance(
        self, target: Currency, table: conversion.SupportsConvert | None = None
    ) -> Optional[float]:
        if self.starting_balance is None:
            return None
        return conversion.convert(self.starting_balance, self.currency, target, table)

    def current_value(self, as_of: Optional[datetime] = None) -> float:
        return savings.current_value(self, as_of=as_of)

    def projected_value(self, months_ahead: int, as_of: Optional[datetime] = None) -> float:
        return savings.projected_value(self, months_ahead, as_of=as_of)

    # Editing workflow: the two rate inputs are mutually exclusive
    def with_interest_rate(self, rate: Optional[str]) -> "Expense":
        return self.model_copy(
            update={"interest_rate": rate, "expected_annual_return": None}
        )

    def with_expected_annual_return(self, rate: Optional[str]) -> "Expense":
        return self.model_copy(
            update={"expected_annual_return": rate, "interest_rate": None}
        )


def _naive_or_none(value: Optional[datetime]) -> Optional[datetime]:
    return naive_local(value) if value is not None else None


def _name_not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("name cannot be empty")
    return value.strip()


class ExpenseIn(BaseModel):
    name: str
    amount: float = Field(..., gt=0)
    currency: Currency
    category: ExpenseCategory
    date: Optional[datetime] = None
    is_essential: bool = False
    is_flagged: bool = False
    notes: str = ""
    reminder: Optional[Reminder] = None
    interest_rate: Optional[str] = None
    expected_annual_return: Optional[str] = None
    starting_balance: Optional[float] = Field(None, ge=0)
    is_student_loan_payment: bool = False

    @field_validator("name")
    @classmethod
    def valid_name(cls, v: str) -> str:
        return _name_not_blank(v)

    @field_validator("date")
    @classmethod
    def _naive_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _naive_or_none(value)

    def to_expense(self) -> Expense:
        data = self.model_dump(exclude={"date"})
        if self.date is not None:
            data["date"] = self.date
        return Expense(**data)


class ExpenseUpdateIn(BaseModel):
    """Partial update. All fields optional; at least one must be provided.

    Setting one of the two rate fields clears the other on the stored expense.
    Optional values are removed with the ``clear_*`` flags, since ``None``
    means "leave unchanged".
    """

    name: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    currency: Optional[Currency] = None
    category: Optional[ExpenseCategory] = None
    date: Optional[datetime] = None
    is_essential: Optional[bool] = None
    is_flagged: Optional[bool] = None
    notes: Optional[str] = None
    reminder: Optional[Reminder] = None
    clear_reminder: bool = False
    interest_rate: Optional[str] = None
    expected_annual_return: Optional[str] = None
    clear_rates: bool = False
    starting_balance: Optional[float] = Field(None, ge=0)
    clear_starting_balance: bool = False
    is_student_loan_payment: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def valid_name(cls, v: Optional[str]) -> Optional[str]:
        return _name_not_blank(v) if v is not None else None

    @field_validator("date")
    @classmethod
    def _naive_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _naive_or_none(value)

    @model_validator(mode="after")
    def at_least_one(self) -> "ExpenseUpdateIn":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        if self.interest_rate is not None and self.expected_annual_return is not None:
            raise ValueError(
                "interest_rate and expected_annual_return cannot both be set"
            )
        if self.clear_rates and (
            self.interest_rate is not None or self.expected_annual_return is not None
        ):
            raise ValueError("clear_rates cannot be combined with a new rate")
        if self.clear_starting_balance and self.starting_balance is not None:
            raise ValueError(
                "clear_starting_balance cannot be combined with a new starting_balance"
            )
        return self

    def apply(self, expense: Expense) -> Expense:
        changes = {
            k: v
            for k, v in self.model_dump(
                exclude={
                    "reminder",
                    "clear_reminder",
                    "clear_rates",
                    "clear_starting_balance",
                    "interest_rate",
                    "expected_annual_return",
                }
            ).items()
            if v is not None
        }
        updated = expense.model_copy(update=changes)
        if self.reminder is not None:
            updated = updated.model_copy(update={"reminder": self.reminder})
        elif self.clear_reminder:
            updated = updated.model_copy(update={"reminder": None})
        if self.interest_rate is not None:
            updated = updated.with_interest_rate(self.interest_rate)
        elif self.expected_annual_return is not None:
            updated = updated.with_expected_annual_return(self.expected_annual_return)
        elif self.clear_rates:
            updated = updated.model_copy(
                update={"interest_rate": None, "expected_annual_return": None}
            )
        if self.clear_starting_balance:
            updated = updated.model_copy(update={"starting_balance": None})
        return updated
