"""
Tests for configuration, logging and the sqlite key/value adapter
"""
import json
import logging

import pytest

from budgetbox.core.config import Settings
from budgetbox.core.logging import JsonFormatter, RequestIdFilter, request_id_ctx
from budgetbox.db.kv import SQLiteKeyValueStore
from budgetbox.services.store import BudgetStore


def test_settings_derive_db_path(tmp_path):
    settings = Settings(data_dir=tmp_path / "nested", storage_backend="sqlite")
    settings.init_post_load()
    assert settings.db_path == tmp_path / "nested" / "budgetbox.sqlite3"
    assert settings.db_path.parent.is_dir()


@pytest.mark.parametrize(
    "overrides",
    [
        {"storage_backend": "redis"},
        {"expense_item_limit": 0},
        {"max_insights": 0},
    ],
)
def test_settings_reject_bad_values(tmp_path, overrides):
    settings = Settings(data_dir=tmp_path, **overrides)
    with pytest.raises(ValueError):
        settings.init_post_load()


def test_json_formatter_includes_request_id_and_extras():
    record = logging.LogRecord(
        "budgetbox.test", logging.INFO, __file__, 1, "hello %s", ("world",), None
    )
    record.status = 201
    token = request_id_ctx.set("rid-1")
    try:
        RequestIdFilter().filter(record)
    finally:
        request_id_ctx.reset(token)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello world"
    assert payload["request_id"] == "rid-1"
    assert payload["status"] == 201
    assert "exc_info" not in payload


def test_request_id_header_is_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_sqlite_adapter_round_trip(tmp_path, make_budget, make_expense):
    adapter = SQLiteKeyValueStore(tmp_path / "kv.sqlite3")
    assert adapter.load("missing") is None
    adapter.save("k", "v1")
    adapter.save("k", "v2")
    assert adapter.load("k") == "v2"

    store = BudgetStore.load(adapter)
    budget = make_budget(name="Disk")
    store.add_budget(budget)
    store.add_expense(budget.id, make_expense())

    reopened = BudgetStore.load(SQLiteKeyValueStore(tmp_path / "kv.sqlite3"))
    assert reopened.budgets == store.budgets
