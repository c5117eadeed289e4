"""Domain constants, enumerations and display metadata tables.

Display metadata (symbols, icons, colors) lives in static lookup tables keyed
by enumerant rather than per-case branching, so completeness can be checked
directly.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, NamedTuple


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"

    @property
    def symbol(self) -> str:
        return CURRENCY_SYMBOLS[self]


class ExpenseCategory(str, Enum):
    SAVINGS = "savings"
    HOUSING = "housing"
    FOOD = "food"
    TRANSPORTATION = "transportation"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    HEALTHCARE = "healthcare"
    SHOPPING = "shopping"
    SUBSCRIPTIONS = "subscriptions"
    OTHER = "other"

    @property
    def display(self) -> "DisplayMeta":
        return CATEGORY_DISPLAY[self]


class ReminderFrequency(str, Enum):
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class InsightType(str, Enum):
    SAVINGS_RATE = "savings_rate"
    ESSENTIAL_EXPENSES = "essential_expenses"
    TOP_CATEGORY = "top_category"
    BUDGETS_EXCEEDING = "budgets_exceeding"
    TOTAL_SPENT = "total_spent"
    MONTHLY_AVERAGE = "monthly_average"
    LARGEST_EXPENSE = "largest_expense"
    RECENT_ACTIVITY = "recent_activity"
    UPCOMING_PAYMENTS = "upcoming_payments"
    SAVINGS_GOAL = "savings_goal"
    SPENDING_TREND = "spending_trend"
    CATEGORY_DISTRIBUTION = "category_distribution"

    @property
    def display(self) -> "DisplayMeta":
        return INSIGHT_DISPLAY[self]


class DisplayMeta(NamedTuple):
    title: str
    icon: str
    color: str


CURRENCY_SYMBOLS: Dict[Currency, str] = {
    Currency.USD: "$",
    Currency.EUR: "€",
    Currency.GBP: "£",
    Currency.JPY: "¥",
}

CATEGORY_DISPLAY: Dict[ExpenseCategory, DisplayMeta] = {
    ExpenseCategory.SAVINGS: DisplayMeta("Savings", "chart.line.uptrend.xyaxis.circle.fill", "FFD700"),
    ExpenseCategory.HOUSING: DisplayMeta("Housing", "house.fill", "FF5252"),
    ExpenseCategory.FOOD: DisplayMeta("Food", "fork.knife", "4CAF50"),
    ExpenseCategory.TRANSPORTATION: DisplayMeta("Transportation", "car.fill", "2196F3"),
    ExpenseCategory.UTILITIES: DisplayMeta("Utilities", "bolt.fill", "FF5252"),
    ExpenseCategory.ENTERTAINMENT: DisplayMeta("Entertainment", "gamecontroller.fill", "9C27B0"),
    ExpenseCategory.HEALTHCARE: DisplayMeta("Healthcare", "heart.fill", "E91E63"),
    ExpenseCategory.SHOPPING: DisplayMeta("Shopping", "bag.fill", "FF9800"),
    ExpenseCategory.SUBSCRIPTIONS: DisplayMeta("Subscriptions", "tv.fill", "607D8B"),
    ExpenseCategory.OTHER: DisplayMeta("Other", "ellipsis.circle.fill", "795548"),
}

INSIGHT_DISPLAY: Dict[InsightType, DisplayMeta] = {
    InsightType.SAVINGS_RATE: DisplayMeta("Savings Rate", "chart.line.uptrend.xyaxis", "4CAF50"),
    InsightType.ESSENTIAL_EXPENSES: DisplayMeta("Essential Expenses", "staroflife.fill", "FF9800"),
    InsightType.TOP_CATEGORY: DisplayMeta("Top Category", "list.bullet.rectangle", "9C27B0"),
    InsightType.BUDGETS_EXCEEDING: DisplayMeta("Budgets Exceeding", "exclamationmark.circle", "FF5252"),
    InsightType.TOTAL_SPENT: DisplayMeta("Total Spent", "banknote", "2196F3"),
    InsightType.MONTHLY_AVERAGE: DisplayMeta("Monthly Average", "calendar.badge.clock", "00BCD4"),
    InsightType.LARGEST_EXPENSE: DisplayMeta("Largest Expense", "arrow.up.forward", "FFC107"),
    InsightType.RECENT_ACTIVITY: DisplayMeta("Recent Activity", "clock", "3F51B5"),
    InsightType.UPCOMING_PAYMENTS: DisplayMeta("Upcoming Payments", "calendar.badge.exclamationmark", "E91E63"),
    InsightType.SAVINGS_GOAL: DisplayMeta("Savings Goal", "flag.fill", "8BC34A"),
    InsightType.SPENDING_TREND: DisplayMeta("Spending Trend", "chart.xyaxis.line", "FF5722"),
    InsightType.CATEGORY_DISTRIBUTION: DisplayMeta("Category Distribution", "chart.pie.fill", "607D8B"),
}

DEFAULT_SELECTED_INSIGHTS = (
    InsightType.SAVINGS_RATE,
    InsightType.ESSENTIAL_EXPENSES,
    InsightType.TOP_CATEGORY,
    InsightType.BUDGETS_EXCEEDING,
    InsightType.TOTAL_SPENT,
    InsightType.MONTHLY_AVERAGE,
)
