"""
Tests for Budget / Expense derived metrics and payload models
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from budgetbox.models import (
    BudgetIn,
    BudgetUpdateIn,
    ExpenseIn,
    ExpenseUpdateIn,
    Reminder,
)
from budgetbox.models.constants import (
    CATEGORY_DISPLAY,
    CURRENCY_SYMBOLS,
    INSIGHT_DISPLAY,
    Currency,
    ExpenseCategory,
    InsightType,
    ReminderFrequency,
)
from budgetbox.services.rates.conversion import ConversionTable


def test_empty_budget_remaining_equals_amount(make_budget):
    budget = make_budget(amount=500)
    assert budget.remaining_amount == 500
    assert budget.percent_remaining == 100


def test_mixed_currency_remaining(make_budget, make_expense):
    budget = make_budget(amount=1000, currency=Currency.USD)
    budget.expenses.append(make_expense(amount=200, currency=Currency.USD))
    budget.expenses.append(
        make_expense(amount=100, currency=Currency.EUR, category=ExpenseCategory.ENTERTAINMENT)
    )
    assert budget.remaining_amount == pytest.approx(682.0)
    assert budget.percent_remaining == 68


def test_percent_remaining_clamped_when_overspent(make_budget, make_expense):
    budget = make_budget(amount=100)
    budget.expenses.append(make_expense(amount=1000))
    assert budget.remaining_amount == pytest.approx(-900)
    assert budget.is_exceeded
    assert budget.percent_remaining == 0


def test_percent_remaining_rounds_half_up(make_budget, make_expense):
    budget = make_budget(amount=8)
    budget.expenses.append(make_expense(amount=1))  # 87.5%
    assert budget.percent_remaining == 88
    budget.expenses.append(make_expense(amount=2))  # 62.5%
    assert budget.percent_remaining == 63


@pytest.mark.parametrize("amount", [0, -10])
def test_percent_remaining_non_positive_amount(make_budget, amount):
    assert make_budget(amount=amount).percent_remaining == 0


def test_adding_expense_never_increases_remaining(make_budget, make_expense):
    budget = make_budget(amount=300)
    previous = budget.remaining_amount
    for currency in Currency:
        budget.expenses.append(make_expense(amount=5, currency=currency))
        assert budget.remaining_amount <= previous
        previous = budget.remaining_amount


def test_remaining_with_injected_table(make_budget, make_expense):
    table = ConversionTable.from_nested({"EUR": {"USD": 2.0}})
    budget = make_budget(amount=100)
    budget.expenses.append(make_expense(amount=10, currency=Currency.EUR))
    assert budget.remaining(table) == pytest.approx(80)
    assert budget.percent_remaining_with(table) == 80


def test_converted_starting_balance_absent_is_none(make_expense):
    expense = make_expense(currency=Currency.EUR, category=ExpenseCategory.SAVINGS)
    assert expense.converted_starting_balance(Currency.USD) is None
    with_balance = expense.model_copy(update={"starting_balance": 100.0})
    assert with_balance.converted_starting_balance(Currency.USD) == pytest.approx(118.0)
    assert with_balance.converted_amount(Currency.USD) == pytest.approx(11.8)


def test_rate_inputs_are_mutually_exclusive_when_editing(make_expense):
    expense = make_expense(category=ExpenseCategory.SAVINGS, interest_rate="4")
    switched = expense.with_expected_annual_return("7")
    assert switched.interest_rate is None
    assert switched.expected_annual_return == "7"
    back = switched.with_interest_rate("3")
    assert back.interest_rate == "3"
    assert back.expected_annual_return is None


def test_display_tables_are_complete():
    assert set(CURRENCY_SYMBOLS) == set(Currency)
    assert set(CATEGORY_DISPLAY) == set(ExpenseCategory)
    assert set(INSIGHT_DISPLAY) == set(InsightType)
    assert len(InsightType) == 12
    assert Currency.GBP.symbol == "£"
    assert ExpenseCategory.FOOD.display.icon == "fork.knife"


def test_budget_in_validation():
    with pytest.raises(ValidationError):
        BudgetIn(name="  ", amount=10, currency="USD")
    with pytest.raises(ValidationError):
        BudgetIn(name="Rent", amount=0, currency="USD")
    with pytest.raises(ValidationError):
        BudgetIn(name="Rent", amount=10, currency="CHF")
    budget = BudgetIn(name=" Rent ", amount=10, currency="USD", start_month=3, start_year=2026).to_budget()
    assert budget.name == "Rent"
    assert budget.start_month == 3
    assert budget.is_active is True


def test_budget_update_requires_a_field(make_budget):
    with pytest.raises(ValidationError):
        BudgetUpdateIn()
    updated = BudgetUpdateIn(amount=50).apply(make_budget(amount=10))
    assert updated.amount == 50
    assert updated.name == "Monthly"


def test_expense_in_validation():
    with pytest.raises(ValidationError):
        ExpenseIn(name="", amount=5, currency="USD", category="food")
    with pytest.raises(ValidationError):
        ExpenseIn(name="Tea", amount=-1, currency="USD", category="food")
    with pytest.raises(ValidationError):
        ExpenseIn(name="Tea", amount=1, currency="USD", category="debt")
    expense = ExpenseIn(name="Tea", amount=1, currency="USD", category="food").to_expense()
    assert expense.category == ExpenseCategory.FOOD
    assert isinstance(expense.date, datetime)


def test_expense_update_applies_rate_exclusivity(make_expense):
    expense = make_expense(category=ExpenseCategory.SAVINGS, expected_annual_return="8")
    updated = ExpenseUpdateIn(interest_rate="2", amount=25).apply(expense)
    assert updated.interest_rate == "2"
    assert updated.expected_annual_return is None
    assert updated.amount == 25
    assert updated.id == expense.id
    with pytest.raises(ValidationError):
        ExpenseUpdateIn(interest_rate="2", expected_annual_return="3")


def test_expense_update_reminder_set_and_clear(make_expense):
    reminder = Reminder(due_at=datetime(2026, 5, 1), frequency=ReminderFrequency.MONTHLY)
    expense = ExpenseUpdateIn(reminder=reminder).apply(make_expense())
    assert expense.reminder == reminder
    cleared = ExpenseUpdateIn(clear_reminder=True).apply(expense)
    assert cleared.reminder is None


def test_expense_update_clears_optional_values(make_expense):
    expense = make_expense(
        category=ExpenseCategory.SAVINGS, interest_rate="4", starting_balance=500
    )
    untouched = ExpenseUpdateIn(amount=20).apply(expense)
    assert untouched.interest_rate == "4"
    assert untouched.starting_balance == 500

    cleared = ExpenseUpdateIn(clear_rates=True, clear_starting_balance=True).apply(expense)
    assert cleared.interest_rate is None
    assert cleared.expected_annual_return is None
    assert cleared.starting_balance is None
    assert cleared.amount == expense.amount


@pytest.mark.parametrize(
    "payload",
    [
        {"clear_rates": True, "interest_rate": "3"},
        {"clear_rates": True, "expected_annual_return": "3"},
        {"clear_starting_balance": True, "starting_balance": 10},
    ],
)
def test_expense_update_rejects_clear_with_new_value(payload):
    with pytest.raises(ValidationError):
        ExpenseUpdateIn(**payload)


def test_aware_datetimes_stored_as_naive_local(make_expense):
    aware = datetime(2026, 1, 1, tzinfo=timezone.utc)
    local = aware.astimezone().replace(tzinfo=None)

    expense = make_expense(date=aware)
    assert expense.date.tzinfo is None
    assert expense.date == local

    payload = ExpenseIn(
        name="Gym",
        amount=30,
        currency=Currency.USD,
        category=ExpenseCategory.HEALTHCARE,
        date="2026-01-01T00:00:00Z",
        reminder={"due_at": "2026-01-01T00:00:00+00:00", "frequency": "monthly"},
    )
    created = payload.to_expense()
    assert created.date == local
    assert created.reminder.due_at == local

    edited = ExpenseUpdateIn(date="2026-01-01T00:00:00Z").apply(expense)
    assert edited.date == local
