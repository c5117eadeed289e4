"""Savings projection engine.

A savings expense is modeled as a stream of equal monthly contributions of
``amount`` starting in the month of ``date``, plus an optional lump-sum
``starting_balance`` placed at that same date. Values are annuity future
values compounded monthly:

    contributions = amount * ((1 + i) ** n - 1) / i
    balance       = starting_balance * (1 + i) ** n

with ``i = annual_rate / 100 / 12``. When ``i`` is not positive the stream
accumulates linearly (``amount * n + starting_balance``).

Projections are always computed from the original start month through the
future horizon (``n = months_active + months_ahead``), never compounded forward
from the current value, so a projection zero months ahead equals the current
value.

Annual rate selection (first match wins):
    1. ``interest_rate`` when present and parseable
    2. ``expected_annual_return`` when present and parseable
    3. 0
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Tuple

from budgetbox.services.money import parse_percent, round2
from budgetbox.services.timeline import add_months, calendar_month_span, naive_local

PROJECTION_PERIODS: Tuple[Tuple[int, str], ...] = (
    (6, "6 Months"),
    (12, "1 Year"),
    (24, "2 Years"),
    (60, "5 Years"),
    (120, "10 Years"),
)


class SavingsContribution(Protocol):
    amount: float
    date: datetime
    interest_rate: Optional[str]
    expected_annual_return: Optional[str]
    starting_balance: Optional[float]


def select_annual_rate(item: SavingsContribution) -> float:
    for raw in (item.interest_rate, item.expected_annual_return):
        parsed = parse_percent(raw)
        if parsed is not None:
            return parsed
    return 0.0


def monthly_rate(annual_rate: float) -> float:
    return annual_rate / 100 / 12


def months_active(start: date | datetime, as_of: date | datetime | None = None) -> int:
    as_of = naive_local(as_of or datetime.now())
    return max(1, calendar_month_span(start, as_of))


def accumulated_value(
    amount: float, starting_balance: float, rate: float, months: int
) -> float:
    """Future value after ``months`` contributions at monthly ``rate``."""
    if rate > 0:
        growth = (1 + rate) ** months
        contributions_fv = amount * (growth - 1) / rate
        balance_fv = starting_balance * growth
        return contributions_fv + balance_fv
    return amount * months + starting_balance


def current_value(
    item: SavingsContribution, as_of: date | datetime | None = None
) -> float:
    return projected_value(item, 0, as_of=as_of)


def projected_value(
    item: SavingsContribution,
    months_ahead: int,
    as_of: date | datetime | None = None,
) -> float:
    if months_ahead < 0:
        raise ValueError("months_ahead cannot be negative")
    n = months_active(item.date, as_of) + months_ahead
    rate = monthly_rate(select_annual_rate(item))
    return accumulated_value(item.amount, item.starting_balance or 0.0, rate, n)


@dataclass(frozen=True)
class ProjectionPoint:
    months_ahead: int
    label: str
    horizon: datetime
    total_months: int
    projected_value: float
    total_contributions: float
    interest_gained: float


@dataclass(frozen=True)
class SavingsSummary:
    annual_rate: float
    monthly_rate: float
    months_active: int
    current_value: float
    total_contributions: float
    interest_earned: float
    projections: Tuple[ProjectionPoint, ...]


def _contributions(item: SavingsContribution, months: int) -> float:
    return item.amount * months + (item.starting_balance or 0.0)


def summarize(
    item: SavingsContribution,
    as_of: datetime | None = None,
    periods: Sequence[Tuple[int, str]] = PROJECTION_PERIODS,
) -> SavingsSummary:
    """Current value plus the standard projection horizons for one savings item.

    Monetary fields are rounded to cents; ``interest_gained`` is floored at 0.
    """
    as_of = naive_local(as_of or datetime.now())
    annual = select_annual_rate(item)
    active = months_active(item.date, as_of)
    current = current_value(item, as_of=as_of)
    contributed = _contributions(item, active)
    points = []
    for months_ahead, label in periods:
        total_months = active + months_ahead
        projection = projected_value(item, months_ahead, as_of=as_of)
        contributions = _contributions(item, total_months)
        points.append(
            ProjectionPoint(
                months_ahead=months_ahead,
                label=label,
                horizon=add_months(as_of, months_ahead),
                total_months=total_months,
                projected_value=round2(projection),
                total_contributions=round2(contributions),
                interest_gained=round2(max(0.0, projection - contributions)),
            )
        )
    return SavingsSummary(
        annual_rate=annual,
        monthly_rate=monthly_rate(annual),
        months_active=active,
        current_value=round2(current),
        total_contributions=round2(contributed),
        interest_earned=round2(max(0.0, current - contributed)),
        projections=tuple(points),
    )
