from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from budgetbox.models import Budget, Expense
from budgetbox.models.constants import (
    Currency,
    ExpenseCategory,
    InsightType,
)
from budgetbox.services.money import (
    MASKED_PERCENT,
    MASKED_VALUE,
    format_money,
    format_percent,
    round2,
)
from budgetbox.services.rates.conversion import SupportsConvert
from budgetbox.services.timeline import (
    month_key,
    previous_month_key,
    naive_local,
    whole_months_between,
)

"""Cross-budget insight aggregation.

All expenses of the given budgets are pooled into one flat list. Each insight
is computed independently and returns a zero/empty default on empty input
rather than failing. The caller decides which budgets to pass (normally the
active ones) and whether values are masked for display; raw values are always
computed.

Known limitations kept on purpose:
    - Savings rate, essential %, top category, total spent, monthly average and
      largest expense sum or compare raw amounts without currency conversion.
      Totals are labelled with the primary currency only.
    - Budgets exceeding and savings goal do convert (via budget remaining and
      the conversion table respectively).

Tie-breaks:
    - Top category: first category in declaration order among the maxima.
    - Primary currency: most used by budgets; ties go to the currency seen
      first; USD when there are no budgets.
    - Largest expense / recent activity: first expense among the maxima.
"""

UPCOMING_WINDOW = timedelta(days=30)
DISTRIBUTION_DISPLAY_LIMIT = 3


@dataclass(frozen=True)
class CategoryTotal:
    category: ExpenseCategory
    amount: float
    percent: float


@dataclass(frozen=True)
class CurrencyExposure:
    currency: Currency
    amount_total: float
    converted_total: float
    percent: float


@dataclass(frozen=True)
class UpcomingPayment:
    expense: Expense
    due_at: datetime


@dataclass(frozen=True)
class InsightSummary:
    primary_currency: Currency
    budget_count: int
    expense_count: int
    savings_rate: float
    essential_percentage: float
    top_category: Optional[CategoryTotal]
    budgets_exceeding: int
    total_spent: float
    monthly_average: float
    largest_expense: Optional[Expense]
    recent_activity: Optional[Expense]
    upcoming_payments: Tuple[UpcomingPayment, ...]
    savings_goal: float
    spending_trend: Optional[float]
    category_distribution: Tuple[CategoryTotal, ...]


@dataclass(frozen=True)
class InsightValue:
    kind: InsightType
    title: str
    icon: str
    color: str
    value: Any
    display: str


# ---------------- Pooling & currency -----------------


def all_expenses(budgets: Iterable[Budget]) -> List[Expense]:
    return [e for b in budgets for e in b.expenses]


def primary_currency(budgets: Sequence[Budget]) -> Currency:
    counts: Dict[Currency, int] = {}
    for b in budgets:
        counts[b.currency] = counts.get(b.currency, 0) + 1
    best: Optional[Currency] = None
    for currency, count in counts.items():
        if best is None or count > counts[best]:
            best = currency
    return best or Currency.USD


def _share(part: float, total: float) -> float:
    return part / total * 100 if total > 0 else 0.0


# ---------------- Individual insights -----------------


def total_spent(expenses: Sequence[Expense]) -> float:
    return sum(e.amount for e in expenses)


def savings_rate(expenses: Sequence[Expense]) -> float:
    saved = sum(e.amount for e in expenses if e.is_savings)
    return _share(saved, total_spent(expenses))


def essential_percentage(expenses: Sequence[Expense]) -> float:
    essential = sum(e.amount for e in expenses if e.is_essential)
    return _share(essential, total_spent(expenses))


def category_totals(expenses: Sequence[Expense]) -> Dict[ExpenseCategory, float]:
    """Totals per category, keyed in declaration order (categories without expenses omitted)."""
    present = {e.category for e in expenses}
    return {
        c: sum(e.amount for e in expenses if e.category == c)
        for c in ExpenseCategory
        if c in present
    }


def top_category(expenses: Sequence[Expense]) -> Optional[CategoryTotal]:
    totals = category_totals(expenses)
    if not totals:
        return None
    best = None
    for category, amount in totals.items():
        if best is None or amount > totals[best]:
            best = category
    return CategoryTotal(
        category=best,
        amount=totals[best],
        percent=_share(totals[best], total_spent(expenses)),
    )


def budgets_exceeding(
    budgets: Sequence[Budget], table: SupportsConvert | None = None
) -> int:
    return sum(1 for b in budgets if b.remaining(table) < 0)


def monthly_average(expenses: Sequence[Expense], now: Optional[datetime] = None) -> float:
    if not expenses:
        return 0.0
    now = naive_local(now or datetime.now())
    earliest = min(e.date for e in expenses)
    months = max(1, whole_months_between(earliest, now))
    return total_spent(expenses) / months


def largest_expense(expenses: Sequence[Expense]) -> Optional[Expense]:
    # Raw amounts compared across currencies
    return max(expenses, key=lambda e: e.amount, default=None)


def recent_activity(expenses: Sequence[Expense]) -> Optional[Expense]:
    return max(expenses, key=lambda e: e.date, default=None)


def upcoming_payments(
    expenses: Sequence[Expense],
    now: Optional[datetime] = None,
    window: timedelta = UPCOMING_WINDOW,
) -> List[UpcomingPayment]:
    """Expenses whose reminder next fires within ``window`` of ``now``, soonest first."""
    now = naive_local(now or datetime.now())
    upcoming = []
    for e in expenses:
        if e.reminder is None:
            continue
        due = e.reminder.next_occurrence(now)
        if due is not None and due - now <= window:
            upcoming.append(UpcomingPayment(expense=e, due_at=due))
    upcoming.sort(key=lambda p: p.due_at)
    return upcoming


def savings_goal(
    expenses: Sequence[Expense],
    currency: Currency,
    table: SupportsConvert | None = None,
) -> float:
    """Savings contributions plus starting balances, converted to ``currency``."""
    total = 0.0
    for e in expenses:
        if not e.is_savings:
            continue
        total += e.converted_amount(currency, table)
        total += e.converted_starting_balance(currency, table) or 0.0
    return total


def spending_trend(expenses: Sequence[Expense], now: Optional[datetime] = None) -> Optional[float]:
    """Percent change of this calendar month's spend against last month's.

    None when last month has no spend to compare against.
    """
    now = naive_local(now or datetime.now())
    current_key = month_key(now)
    previous_key = previous_month_key(now)
    by_month: Counter = Counter()
    for e in expenses:
        by_month[month_key(e.date)] += e.amount
    previous = by_month.get(previous_key, 0.0)
    if previous <= 0:
        return None
    return (by_month.get(current_key, 0.0) - previous) / previous * 100


def category_distribution(expenses: Sequence[Expense]) -> List[CategoryTotal]:
    totals = category_totals(expenses)
    grand = total_spent(expenses)
    ordered = sorted(
        ((c, amount) for c, amount in totals.items() if amount > 0),
        key=lambda item: -item[1],
    )
    return [
        CategoryTotal(category=c, amount=amount, percent=round2(_share(amount, grand)))
        for c, amount in ordered
    ]


def currency_breakdown(
    budgets: Sequence[Budget], table: SupportsConvert | None = None
) -> List[CurrencyExposure]:
    """Per-currency spend, converted into the primary currency, ordered by currency code."""
    target = primary_currency(budgets)
    expenses = all_expenses(budgets)
    raw: Dict[Currency, float] = {}
    converted: Dict[Currency, float] = {}
    for e in expenses:
        raw[e.currency] = raw.get(e.currency, 0.0) + e.amount
        converted[e.currency] = converted.get(e.currency, 0.0) + e.converted_amount(target, table)
    grand = sum(converted.values())
    return [
        CurrencyExposure(
            currency=c,
            amount_total=round2(raw[c]),
            converted_total=round2(converted[c]),
            percent=round2(_share(converted[c], grand)),
        )
        for c in sorted(raw, key=lambda c: c.value)
    ]


# ---------------- Aggregate -----------------


def summarize(
    budgets: Sequence[Budget],
    now: Optional[datetime] = None,
    table: SupportsConvert | None = None,
) -> InsightSummary:
    now = naive_local(now or datetime.now())
    expenses = all_expenses(budgets)
    currency = primary_currency(budgets)
    return InsightSummary(
        primary_currency=currency,
        budget_count=len(budgets),
        expense_count=len(expenses),
        savings_rate=savings_rate(expenses),
        essential_percentage=essential_percentage(expenses),
        top_category=top_category(expenses),
        budgets_exceeding=budgets_exceeding(budgets, table),
        total_spent=total_spent(expenses),
        monthly_average=monthly_average(expenses, now),
        largest_expense=largest_expense(expenses),
        recent_activity=recent_activity(expenses),
        upcoming_payments=tuple(upcoming_payments(expenses, now)),
        savings_goal=savings_goal(expenses, currency, table),
        spending_trend=spending_trend(expenses, now),
        category_distribution=tuple(category_distribution(expenses)),
    )


def _format_trend(trend: Optional[float]) -> str:
    if trend is None:
        return "No data"
    sign = "+" if trend > 0 else ""
    return f"{sign}{format_percent(trend)}"


def _format_distribution(items: Sequence[CategoryTotal]) -> str:
    if not items:
        return "None"
    shown = items[:DISTRIBUTION_DISPLAY_LIMIT]
    return ", ".join(f"{i.category.display.title} {format_percent(i.percent)}" for i in shown)


def render_insight(kind: InsightType, summary: InsightSummary, show_values: bool = True) -> InsightValue:
    meta = kind.display
    symbol = summary.primary_currency.symbol
    icon = meta.icon

    if kind == InsightType.SAVINGS_RATE:
        value: Any = summary.savings_rate
        display = format_percent(value) if show_values else MASKED_PERCENT
    elif kind == InsightType.ESSENTIAL_EXPENSES:
        value = summary.essential_percentage
        display = format_percent(value) if show_values else MASKED_PERCENT
    elif kind == InsightType.TOP_CATEGORY:
        top = summary.top_category
        value = top.category if top else None
        if top:
            icon = top.category.display.icon
        display = (top.category.display.title if top else "None") if show_values else MASKED_VALUE
    elif kind == InsightType.BUDGETS_EXCEEDING:
        value = summary.budgets_exceeding
        icon = "exclamationmark.circle" if value > 0 else "checkmark.circle"
        display = f"{value}/{summary.budget_count}"
    elif kind == InsightType.TOTAL_SPENT:
        value = summary.total_spent
        display = format_money(value, symbol) if show_values else MASKED_VALUE
    elif kind == InsightType.MONTHLY_AVERAGE:
        value = summary.monthly_average
        display = format_money(value, symbol) if show_values else MASKED_VALUE
    elif kind == InsightType.LARGEST_EXPENSE:
        largest = summary.largest_expense
        value = largest
        if largest:
            icon = largest.category.display.icon
            text = format_money(largest.amount, largest.currency.symbol)
        else:
            text = "None"
        display = text if show_values else MASKED_VALUE
    elif kind == InsightType.RECENT_ACTIVITY:
        recent = summary.recent_activity
        value = recent
        if recent:
            icon = recent.category.display.icon
        display = (recent.name if recent else "None") if show_values else MASKED_VALUE
    elif kind == InsightType.UPCOMING_PAYMENTS:
        value = len(summary.upcoming_payments)
        display = str(value)
    elif kind == InsightType.SAVINGS_GOAL:
        value = summary.savings_goal
        display = format_money(value, symbol) if show_values else MASKED_VALUE
    elif kind == InsightType.SPENDING_TREND:
        value = summary.spending_trend
        display = _format_trend(value) if show_values else MASKED_PERCENT
    else:
        value = summary.category_distribution
        display = _format_distribution(value) if show_values else MASKED_VALUE

    return InsightValue(
        kind=kind,
        title=meta.title,
        icon=icon,
        color=meta.color,
        value=value,
        display=display,
    )


def compute_insights(
    budgets: Sequence[Budget],
    selected: Sequence[InsightType] = tuple(InsightType),
    show_values: bool = True,
    now: Optional[datetime] = None,
    table: SupportsConvert | None = None,
) -> Dict[InsightType, InsightValue]:
    """Map each selected insight kind (in selection order) to its display value."""
    summary = summarize(budgets, now=now, table=table)
    return {kind: render_insight(kind, summary, show_values) for kind in selected}


def toggle_selection(
    selected: Sequence[InsightType], kind: InsightType, max_insights: int
) -> Tuple[List[InsightType], bool]:
    """Toggle ``kind`` in an ordered selection capped at ``max_insights``.

    Returns the new selection and whether it changed. Adding at capacity is
    rejected without evicting anything.
    """
    current = list(selected)
    if kind in current:
        current.remove(kind)
        return current, True
    if len(current) >= max_insights:
        return current, False
    current.append(kind)
    return current, True
