from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from budgetbox.services import reminders
from budgetbox.services.timeline import naive_local
from .constants import ReminderFrequency


class Reminder(BaseModel):
    """Due date plus repeat frequency, owned by a single expense."""

    model_config = ConfigDict(frozen=True)

    due_at: datetime
    frequency: ReminderFrequency = ReminderFrequency.ONCE

    @field_validator("due_at")
    @classmethod
    def _naive_due_at(cls, value: datetime) -> datetime:
        return naive_local(value)

    def next_occurrence(self, after: Optional[datetime] = None) -> Optional[datetime]:
        return reminders.next_occurrence(self, after or datetime.now())

    def occurrences(self, count: int) -> List[datetime]:
        return reminders.occurrences(self, count)
