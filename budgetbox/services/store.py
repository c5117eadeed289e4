"""In-memory budget collection with write-through persistence.

The store owns the ordered list of budgets and the collection settings. Every
applied mutation writes the full state to the key/value adapter (no batching,
no dirty tracking) and then notifies subscribers. Rejections and lookup misses
are reported through ``MutationResult.status`` and never raise.

Callers are expected to serialize mutations (one logical writer).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple
from uuid import UUID, uuid4

from pydantic import TypeAdapter, ValidationError

from budgetbox.db.kv import KeyValueStore
from budgetbox.models import Budget, CollectionSettings, Expense, StudentLoan
from budgetbox.models.constants import InsightType
from budgetbox.models.settings import TOGGLE_FLAGS
from budgetbox.services.expense_validation import (
    validate_budget_domain,
    validate_expense_domain,
)
from budgetbox.services.insights import toggle_selection

logger = logging.getLogger("budgetbox.store")

DEFAULT_EXPENSE_LIMIT = 10
DEFAULT_MAX_INSIGHTS = 6
DEFAULT_BUDGETS_KEY = "saved_budgets"
DEFAULT_SETTINGS_KEY = "app_settings"

_BUDGET_LIST = TypeAdapter(List[Budget])


class MutationStatus(str, Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    REJECTED_LIMIT = "rejected_limit"
    REJECTED_INVALID = "rejected_invalid"


@dataclass(frozen=True)
class MutationResult:
    status: MutationStatus
    budgets: Tuple[Budget, ...]
    errors: Tuple[str, ...] = ()
    subject_id: Optional[UUID] = None

    @property
    def applied(self) -> bool:
        return self.status == MutationStatus.APPLIED


@dataclass(frozen=True)
class StoreEvent:
    action: str
    budget_id: Optional[UUID] = None


Listener = Callable[[StoreEvent], None]


class BudgetStore:
    def __init__(
        self,
        adapter: KeyValueStore,
        expense_limit: int = DEFAULT_EXPENSE_LIMIT,
        max_insights: int = DEFAULT_MAX_INSIGHTS,
        budgets_key: str = DEFAULT_BUDGETS_KEY,
        settings_key: str = DEFAULT_SETTINGS_KEY,
    ):
        self._adapter = adapter
        self.expense_limit = expense_limit
        self.max_insights = max_insights
        self._budgets_key = budgets_key
        self._settings_key = settings_key
        self._budgets: List[Budget] = []
        self._settings = CollectionSettings()
        self._listeners: List[Listener] = []

    @classmethod
    def load(cls, adapter: KeyValueStore, **kwargs) -> "BudgetStore":
        store = cls(adapter, **kwargs)
        store.reload()
        return store

    # Persistence ----------------------------------------------
    def reload(self) -> None:
        """Replace in-memory state with what the adapter holds.

        Missing or undecodable blobs fall back to an empty collection and
        default settings.
        """
        raw_budgets = self._adapter.load(self._budgets_key)
        budgets: List[Budget] = []
        if raw_budgets:
            try:
                budgets = _BUDGET_LIST.validate_json(raw_budgets)
            except ValidationError:
                logger.warning("stored budgets could not be decoded; starting empty")
        raw_settings = self._adapter.load(self._settings_key)
        settings = CollectionSettings()
        if raw_settings:
            try:
                settings = CollectionSettings.model_validate_json(raw_settings)
            except ValidationError:
                logger.warning("stored settings could not be decoded; using defaults")
        if len(settings.selected_insights) > self.max_insights:
            settings.selected_insights = settings.selected_insights[: self.max_insights]
        self._budgets = budgets
        self._settings = settings
        logger.debug("loaded %d budgets", len(budgets))

    def _persist(self) -> None:
        self._adapter.save(
            self._budgets_key, _BUDGET_LIST.dump_json(self._budgets).decode("utf-8")
        )
        self._adapter.save(self._settings_key, self._settings.model_dump_json())

    # Notifications --------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, action: str, budget_id: Optional[UUID] = None) -> MutationResult:
        self._persist()
        logger.debug(
            "%s applied", action, extra={"action": action, "budget_id": budget_id}
        )
        event = StoreEvent(action=action, budget_id=budget_id)
        for listener in list(self._listeners):
            listener(event)
        return self._result(MutationStatus.APPLIED, subject_id=budget_id)

    def _result(
        self,
        status: MutationStatus,
        errors: Iterable[str] = (),
        subject_id: Optional[UUID] = None,
    ) -> MutationResult:
        return MutationResult(
            status=status,
            budgets=self.budgets,
            errors=tuple(errors),
            subject_id=subject_id,
        )

    def _reject(self, status: MutationStatus, action: str, errors: Iterable[str] = ()) -> MutationResult:
        errors = tuple(errors)
        logger.info(
            "%s ignored: %s %s",
            action,
            status.value,
            "; ".join(errors),
            extra={"action": action},
        )
        return self._result(status, errors)

    # Reads ----------------------------------------------------
    @property
    def budgets(self) -> Tuple[Budget, ...]:
        return tuple(b.model_copy(deep=True) for b in self._budgets)

    @property
    def settings(self) -> CollectionSettings:
        return self._settings.model_copy(deep=True)

    def _index_of(self, budget_id: UUID) -> Optional[int]:
        return next(
            (i for i, b in enumerate(self._budgets) if b.id == budget_id), None
        )

    def get_budget(self, budget_id: UUID) -> Optional[Budget]:
        index = self._index_of(budget_id)
        return self._budgets[index].model_copy(deep=True) if index is not None else None

    def active_budgets(self) -> List[Budget]:
        return [b for b in self.budgets if b.is_active]

    def visible_budgets(self) -> List[Budget]:
        if self._settings.show_inactive_budgets:
            return list(self.budgets)
        return self.active_budgets()

    def can_add_expense(self, budget_id: UUID) -> bool:
        index = self._index_of(budget_id)
        if index is None:
            return False
        if not self._settings.item_limit_enabled:
            return True
        return len(self._budgets[index].expenses) < self.expense_limit

    # Budget mutations -----------------------------------------
    def add_budget(self, budget: Budget) -> MutationResult:
        problems = validate_budget_domain(budget)
        if self._index_of(budget.id) is not None:
            problems.append("a budget with this id already exists")
        if problems:
            return self._reject(MutationStatus.REJECTED_INVALID, "add_budget", problems)
        self._budgets.append(budget.model_copy(deep=True))
        return self._commit("add_budget", budget.id)

    def update_budget(self, budget: Budget) -> MutationResult:
        index = self._index_of(budget.id)
        if index is None:
            return self._reject(MutationStatus.NOT_FOUND, "update_budget")
        problems = validate_budget_domain(budget)
        if problems:
            return self._reject(MutationStatus.REJECTED_INVALID, "update_budget", problems)
        self._budgets[index] = budget.model_copy(deep=True)
        return self._commit("update_budget", budget.id)

    def delete_budget(self, budget_id: UUID) -> MutationResult:
        index = self._index_of(budget_id)
        if index is None:
            return self._reject(MutationStatus.NOT_FOUND, "delete_budget")
        # Expenses (and their reminders) go with the budget
        del self._budgets[index]
        return self._commit("delete_budget", budget_id)

    def delete_budgets_at(self, indexes: Iterable[int]) -> MutationResult:
        targets = {i for i in indexes if 0 <= i < len(self._budgets)}
        if not targets:
            return self._reject(MutationStatus.NOT_FOUND, "delete_budgets_at")
        self._budgets = [b for i, b in enumerate(self._budgets) if i not in targets]
        return self._commit("delete_budgets_at")

    def duplicate_budget(self, budget_id: UUID) -> MutationResult:
        index = self._index_of(budget_id)
        if index is None:
            return self._reject(MutationStatus.NOT_FOUND, "duplicate_budget")
        source = self._budgets[index]
        copy = source.model_copy(
            deep=True,
            update={
                "id": uuid4(),
                "name": f"{source.name} (Copy)",
                "expenses": [
                    e.model_copy(deep=True, update={"id": uuid4()})
                    for e in source.expenses
                ],
            },
        )
        self._budgets.append(copy)
        return self._commit("duplicate_budget", copy.id)

    def toggle_budget_active(self, budget_id: UUID) -> MutationResult:
        index = self._index_of(budget_id)
        if index is None:
            return self._reject(MutationStatus.NOT_FOUND, "toggle_budget_active")
        budget = self._budgets[index]
        budget.is_active = not budget.is_active
        return self._commit("toggle_budget_active", budget_id)

    # Expense mutations ----------------------------------------
    def add_expense(self, budget_id: UUID, expense: Expense) -> MutationResult:
        index = self._index_of(budget_id)
        if index is None:
            return self._reject(MutationStatus.NOT_FOUND, "add_expense")
        budget = self._budgets[index]
        if self._settings.item_limit_enabled and len(budget.expenses) >= self.expense_limit:
            return self._reject(
                MutationStatus.REJECTED_LIMIT,
                "add_expense",
                [f"budget already holds {self.expense_limit} expenses"],
            )
        problems = validate_expense_domain(expense)
        if budget.find_expense(expense.id) is not None:
            problems.append("an expense with this id already exists in the budget")
        if problems:
            return self._reject(MutationStatus.REJECTED_INVALID, "add_expense", problems)
        budget.expenses.append(expense.model_copy(deep=True))
        return self._commit("add_expense", budget_id)

    def update_expense(self, budget_id: UUID, expense: Expense) -> MutationResult:
        index = self._index_of(budget_id)
        if index is None:
            return self._reject(MutationStatus.NOT_FOUND, "update_expense")
        budget = self._budgets[index]
        position = next(
            (i for i, e in enumerate(budget.expenses) if e.id == expense.id), None
        )
        if position is None:
            return self._reject(MutationStatus.NOT_FOUND, "update_expense")
        problems = validate_expense_domain(expense)
        if problems:
            return self._reject(MutationStatus.REJECTED_INVALID, "update_expense", problems)
        budget.expenses[position] = expense.model_copy(deep=True)
        return self._commit("update_expense", budget_id)

    def delete_expense(self, budget_id: UUID, expense_id: UUID) -> MutationResult:
        index = self._index_of(budget_id)
        if index is None:
            return self._reject(MutationStatus.NOT_FOUND, "delete_expense")
        budget = self._budgets[index]
        kept = [e for e in budget.expenses if e.id != expense_id]
        if len(kept) == len(budget.expenses):
            return self._reject(MutationStatus.NOT_FOUND, "delete_expense")
        budget.expenses = kept
        return self._commit("delete_expense", budget_id)

    # Settings mutations ---------------------------------------
    def toggle_flag(self, flag: str) -> MutationResult:
        """Flip one of the boolean settings named in ``TOGGLE_FLAGS``."""
        field = TOGGLE_FLAGS.get(flag)
        if field is None:
            return self._reject(MutationStatus.NOT_FOUND, "toggle_flag", [f"unknown flag '{flag}'"])
        setattr(self._settings, field, not getattr(self._settings, field))
        return self._commit(f"toggle_{flag}")

    def toggle_show_values(self) -> MutationResult:
        return self.toggle_flag("show_values")

    def toggle_item_limit(self) -> MutationResult:
        return self.toggle_flag("item_limit")

    def toggle_show_inactive(self) -> MutationResult:
        return self.toggle_flag("show_inactive")

    def toggle_insight(self, kind: InsightType) -> MutationResult:
        selection, changed = toggle_selection(
            self._settings.selected_insights, kind, self.max_insights
        )
        if not changed:
            return self._reject(
                MutationStatus.REJECTED_LIMIT,
                "toggle_insight",
                [f"at most {self.max_insights} insights can be selected"],
            )
        self._settings.selected_insights = selection
        return self._commit("toggle_insight")

    def update_student_loan(self, loan: StudentLoan) -> MutationResult:
        self._settings.student_loan = loan.model_copy(deep=True)
        return self._commit("update_student_loan")
