"""Process-wide store wiring for the HTTP layer.

The app factory builds one store per application and keeps it on
``app.state``; routers reach it through the ``get_store`` dependency.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from budgetbox.core.config import Settings
from budgetbox.db.kv import InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore
from budgetbox.services.store import BudgetStore, MutationResult, MutationStatus

_STATUS_CODES = {
    MutationStatus.NOT_FOUND: 404,
    MutationStatus.REJECTED_LIMIT: 409,
    MutationStatus.REJECTED_INVALID: 422,
}


def build_adapter(settings: Settings) -> KeyValueStore:
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore()
    return SQLiteKeyValueStore(settings.db_path)  # type: ignore[arg-type]


def build_store(settings: Settings, adapter: KeyValueStore | None = None) -> BudgetStore:
    return BudgetStore.load(
        adapter or build_adapter(settings),
        expense_limit=settings.expense_item_limit,
        max_insights=settings.max_insights,
        budgets_key=settings.storage_key_budgets,
        settings_key=settings.storage_key_settings,
    )


def get_store(request: Request) -> BudgetStore:
    return request.app.state.store


def ensure_applied(result: MutationResult, not_found: str = "not found") -> MutationResult:
    if result.applied:
        return result
    status_code = _STATUS_CODES[result.status]
    if result.status == MutationStatus.NOT_FOUND:
        detail: object = not_found
    else:
        detail = {"status": result.status.value, "errors": list(result.errors)}
    raise HTTPException(status_code=status_code, detail=detail)
