"""
Tests for cross-budget insight aggregation
"""
from datetime import datetime, timezone

import pytest

from budgetbox.models import Reminder
from budgetbox.models.constants import (
    Currency,
    ExpenseCategory,
    InsightType,
    ReminderFrequency,
)
from budgetbox.services import insights


@pytest.fixture
def household(make_budget, make_expense):
    budget = make_budget(amount=1000)
    budget.expenses.extend(
        [
            make_expense(name="Rent", amount=500, category=ExpenseCategory.HOUSING,
                         is_essential=True, date=datetime(2026, 1, 5)),
            make_expense(name="Groceries", amount=200, category=ExpenseCategory.FOOD,
                         is_essential=True, date=datetime(2026, 2, 10)),
            make_expense(name="Pension", amount=150, category=ExpenseCategory.SAVINGS,
                         date=datetime(2026, 3, 1)),
            make_expense(name="Concert", amount=100, category=ExpenseCategory.ENTERTAINMENT,
                         date=datetime(2026, 3, 20)),
        ]
    )
    return budget


def test_empty_input_defaults(now):
    summary = insights.summarize([], now=now)
    assert summary.savings_rate == 0
    assert summary.essential_percentage == 0
    assert summary.total_spent == 0
    assert summary.budgets_exceeding == 0
    assert summary.monthly_average == 0
    assert summary.top_category is None
    assert summary.largest_expense is None
    assert summary.recent_activity is None
    assert summary.primary_currency == Currency.USD
    assert summary.spending_trend is None
    assert summary.category_distribution == ()

    rendered = insights.compute_insights([], now=now)
    assert rendered[InsightType.TOP_CATEGORY].display == "None"
    assert rendered[InsightType.LARGEST_EXPENSE].display == "None"
    assert rendered[InsightType.RECENT_ACTIVITY].display == "None"
    assert rendered[InsightType.BUDGETS_EXCEEDING].display == "0/0"


def test_household_summary(household, now):
    summary = insights.summarize([household], now=now)
    assert summary.total_spent == 950
    assert summary.savings_rate == pytest.approx(150 / 950 * 100)
    assert summary.essential_percentage == pytest.approx(700 / 950 * 100)
    assert summary.top_category.category == ExpenseCategory.HOUSING
    assert summary.top_category.amount == 500
    assert summary.largest_expense.name == "Rent"
    assert summary.recent_activity.name == "Concert"
    # Jan 5 -> Apr 15 is three whole months
    assert summary.monthly_average == pytest.approx(950 / 3)
    assert summary.spending_trend == pytest.approx(-100)
    assert summary.budgets_exceeding == 0


def test_monthly_average_floors_months_at_one(make_budget, make_expense, now):
    budget = make_budget()
    budget.expenses.append(make_expense(amount=120, date=datetime(2026, 4, 1)))
    assert insights.summarize([budget], now=now).monthly_average == 120


def test_budgets_exceeding_counts_converted_overspend(make_budget, make_expense, now):
    over = make_budget(amount=100, currency=Currency.USD)
    over.expenses.append(make_expense(amount=90, currency=Currency.EUR))  # 106.2 USD
    fine = make_budget(amount=100)
    fine.expenses.append(make_expense(amount=90))
    assert insights.summarize([over, fine], now=now).budgets_exceeding == 1


def test_top_category_tie_breaks_by_declaration_order(make_budget, make_expense):
    budget = make_budget()
    budget.expenses.append(make_expense(amount=100, category=ExpenseCategory.FOOD))
    budget.expenses.append(make_expense(amount=100, category=ExpenseCategory.HOUSING))
    assert insights.top_category(budget.expenses).category == ExpenseCategory.HOUSING


@pytest.mark.parametrize(
    "currencies, expected",
    [
        ([], Currency.USD),
        ([Currency.EUR, Currency.USD], Currency.EUR),
        ([Currency.USD, Currency.EUR, Currency.EUR], Currency.EUR),
        ([Currency.GBP, Currency.JPY, Currency.JPY, Currency.GBP], Currency.GBP),
    ],
)
def test_primary_currency_mode(make_budget, currencies, expected):
    budgets = [make_budget(currency=c) for c in currencies]
    assert insights.primary_currency(budgets) == expected


def test_largest_expense_compares_raw_amounts(make_budget, make_expense):
    budget = make_budget()
    budget.expenses.append(make_expense(name="Yen", amount=5000, currency=Currency.JPY))
    budget.expenses.append(make_expense(name="Pounds", amount=1000, currency=Currency.GBP))
    assert insights.largest_expense(budget.expenses).name == "Yen"


def test_savings_goal_converts_contributions_and_balances(make_budget, make_expense):
    budget = make_budget(currency=Currency.USD)
    budget.expenses.append(
        make_expense(amount=100, currency=Currency.EUR, category=ExpenseCategory.SAVINGS,
                     starting_balance=1000)
    )
    budget.expenses.append(make_expense(amount=999))
    assert insights.savings_goal(budget.expenses, Currency.USD) == pytest.approx(1298)


def test_category_distribution_sorted(household):
    items = insights.category_distribution(household.expenses)
    assert [i.category for i in items] == [
        ExpenseCategory.HOUSING,
        ExpenseCategory.FOOD,
        ExpenseCategory.SAVINGS,
        ExpenseCategory.ENTERTAINMENT,
    ]
    assert sum(i.percent for i in items) == pytest.approx(100, abs=0.05)


def test_currency_breakdown(make_budget, make_expense):
    budget = make_budget(currency=Currency.USD)
    budget.expenses.append(make_expense(amount=200))
    budget.expenses.append(make_expense(amount=100, currency=Currency.EUR))
    items = insights.currency_breakdown([budget])
    assert [i.currency for i in items] == [Currency.EUR, Currency.USD]
    eur, usd = items
    assert eur.amount_total == 100
    assert eur.converted_total == pytest.approx(118)
    assert eur.percent == pytest.approx(37.11)
    assert usd.percent == pytest.approx(62.89)


def test_upcoming_payments_window(make_budget, make_expense, now):
    budget = make_budget()
    budget.expenses.extend(
        [
            make_expense(name="Insurance", reminder=Reminder(due_at=datetime(2026, 4, 20))),
            make_expense(name="Gym", reminder=Reminder(
                due_at=datetime(2026, 1, 10), frequency=ReminderFrequency.MONTHLY)),
            make_expense(name="Old bill", reminder=Reminder(due_at=datetime(2026, 3, 1))),
            make_expense(name="Far off", reminder=Reminder(due_at=datetime(2026, 8, 1))),
            make_expense(name="No reminder"),
        ]
    )
    upcoming = insights.upcoming_payments(budget.expenses, now=now)
    assert [p.expense.name for p in upcoming] == ["Insurance", "Gym"]
    assert upcoming[1].due_at == datetime(2026, 5, 10)


def test_spending_trend(make_budget, make_expense, now):
    budget = make_budget()
    budget.expenses.append(make_expense(amount=100, date=datetime(2026, 3, 5)))
    budget.expenses.append(make_expense(amount=150, date=datetime(2026, 4, 2)))
    assert insights.spending_trend(budget.expenses, now=now) == pytest.approx(50)


def test_rendered_values_and_masking(household, now):
    selected = [
        InsightType.SAVINGS_RATE,
        InsightType.TOTAL_SPENT,
        InsightType.BUDGETS_EXCEEDING,
        InsightType.TOP_CATEGORY,
    ]
    shown = insights.compute_insights([household], selected, now=now)
    assert list(shown) == selected
    assert shown[InsightType.SAVINGS_RATE].display == "15%"
    assert shown[InsightType.TOTAL_SPENT].display == "$950.00"
    assert shown[InsightType.TOP_CATEGORY].display == "Housing"
    assert shown[InsightType.TOP_CATEGORY].icon == "house.fill"
    assert shown[InsightType.BUDGETS_EXCEEDING].icon == "checkmark.circle"

    hidden = insights.compute_insights([household], selected, show_values=False, now=now)
    assert hidden[InsightType.SAVINGS_RATE].display == "**%"
    assert hidden[InsightType.TOTAL_SPENT].display == "****"
    assert hidden[InsightType.TOP_CATEGORY].display == "****"
    assert hidden[InsightType.BUDGETS_EXCEEDING].display == "0/1"
    # raw values are still computed
    assert hidden[InsightType.TOTAL_SPENT].value == 950


def test_toggle_selection_caps_without_evicting():
    full = list(InsightType)[:6]
    selection, changed = insights.toggle_selection(full, InsightType.SPENDING_TREND, 6)
    assert not changed
    assert selection == full

    selection, changed = insights.toggle_selection(full, full[0], 6)
    assert changed
    assert selection == full[1:]

    selection, changed = insights.toggle_selection(selection, InsightType.SPENDING_TREND, 6)
    assert changed
    assert selection[-1] == InsightType.SPENDING_TREND


def test_mixed_timezone_inputs_do_not_fail(household, make_expense):
    household.expenses.append(
        make_expense(
            name="Abroad",
            date=datetime(2026, 4, 1, tzinfo=timezone.utc),
            reminder=Reminder(
                due_at=datetime(2026, 4, 20, tzinfo=timezone.utc),
                frequency=ReminderFrequency.MONTHLY,
            ),
        )
    )
    aware_now = datetime(2026, 4, 15, 12, 0, tzinfo=timezone.utc)
    summary = insights.summarize([household], now=aware_now)
    assert summary.expense_count == 5
    assert summary.recent_activity.name == "Abroad"
    assert len(summary.upcoming_payments) == 1
    rendered = insights.compute_insights([household], now=aware_now)
    assert rendered[InsightType.UPCOMING_PAYMENTS].display == "1"
