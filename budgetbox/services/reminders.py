"""Reminder occurrence schedule.

Notification delivery is handled elsewhere; this module only answers "when is
the next due date" so insights and schedulers agree on the same dates.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional, Protocol

from budgetbox.models.constants import ReminderFrequency
from budgetbox.services.timeline import add_months, naive_local


class SupportsSchedule(Protocol):
    due_at: datetime
    frequency: ReminderFrequency


def occurrence(reminder: SupportsSchedule, index: int) -> datetime:
    """Return the ``index``-th due date (0 is the first)."""
    due = reminder.due_at
    freq = reminder.frequency
    if index == 0 or freq == ReminderFrequency.ONCE:
        return due
    if freq == ReminderFrequency.DAILY:
        return due + timedelta(days=index)
    if freq == ReminderFrequency.WEEKLY:
        return due + timedelta(weeks=index)
    if freq == ReminderFrequency.MONTHLY:
        return add_months(due, index)
    return add_months(due, 12 * index)


def next_occurrence(reminder: SupportsSchedule, after: datetime) -> Optional[datetime]:
    """First due date strictly after ``after`` (None for a past one-off reminder)."""
    after = naive_local(after)
    due = reminder.due_at
    if due > after:
        return due
    freq = reminder.frequency
    if freq == ReminderFrequency.ONCE:
        return None
    if freq in (ReminderFrequency.DAILY, ReminderFrequency.WEEKLY):
        step = timedelta(days=1 if freq == ReminderFrequency.DAILY else 7)
        skipped = (after - due) // step
        candidate = due + step * skipped
        while candidate <= after:
            candidate += step
        return candidate
    months = 1 if freq == ReminderFrequency.MONTHLY else 12
    span = (after.year - due.year) * 12 + (after.month - due.month)
    index = max(0, span // months - 1)
    candidate = occurrence(reminder, index)
    while candidate <= after:
        index += 1
        candidate = occurrence(reminder, index)
    return candidate


def occurrences(reminder: SupportsSchedule, count: int) -> List[datetime]:
    if count <= 0:
        return []
    if reminder.frequency == ReminderFrequency.ONCE:
        return [reminder.due_at]
    return [occurrence(reminder, i) for i in range(count)]
