from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_SELECTED_INSIGHTS, Currency, InsightType


class StudentLoan(BaseModel):
    balance: float = Field(0, ge=0)
    currency: Currency = Currency.USD
    monthly_payment: float = Field(0, ge=0)
    interest_rate: Optional[str] = None


class CollectionSettings(BaseModel):
    """User preferences persisted alongside the budget collection."""

    show_values: bool = True
    item_limit_enabled: bool = True
    show_inactive_budgets: bool = True
    selected_insights: List[InsightType] = Field(
        default_factory=lambda: list(DEFAULT_SELECTED_INSIGHTS)
    )
    student_loan: StudentLoan = Field(default_factory=StudentLoan)

    @field_validator("selected_insights")
    @classmethod
    def _unique_insights(cls, value: List[InsightType]) -> List[InsightType]:
        # Drop duplicates while preserving order
        seen = set()
        unique = []
        for kind in value:
            if kind not in seen:
                seen.add(kind)
                unique.append(kind)
        return unique


TOGGLE_FLAGS = {
    "show_values": "show_values",
    "item_limit": "item_limit_enabled",
    "show_inactive": "show_inactive_budgets",
}
