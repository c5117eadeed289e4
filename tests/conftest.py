"""
Pytest fixtures for testing
"""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from budgetbox.core.config import Settings
from budgetbox.db.kv import InMemoryKeyValueStore
from budgetbox.main import create_app
from budgetbox.models import Budget, Expense
from budgetbox.models.constants import Currency, ExpenseCategory
from budgetbox.services.store import BudgetStore


@pytest.fixture
def now():
    """Fixed 'now' so month arithmetic is deterministic."""
    return datetime(2026, 4, 15, 12, 0)


@pytest.fixture
def adapter():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(adapter):
    return BudgetStore.load(adapter)


@pytest.fixture
def make_budget():
    def _make(amount=1000.0, currency=Currency.USD, name="Monthly", **kwargs):
        return Budget(name=name, amount=amount, currency=currency, **kwargs)

    return _make


@pytest.fixture
def make_expense():
    def _make(
        amount=10.0,
        currency=Currency.USD,
        category=ExpenseCategory.FOOD,
        name="Item",
        **kwargs,
    ):
        return Expense(
            name=name, amount=amount, currency=currency, category=category, **kwargs
        )

    return _make


@pytest.fixture
def app_settings(tmp_path):
    return Settings(storage_backend="memory", debug=False, data_dir=tmp_path)


@pytest.fixture
def client(app_settings):
    """Test client over an app with in-memory storage"""
    return TestClient(create_app(settings_override=app_settings))
