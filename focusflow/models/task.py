"""Task data models."""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, FrozenSet, Optional


class TaskStatus(Enum):
    """Task status enumeration."""
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    ARCHIVED = "archived"


class TaskPriority(Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


TASK_STATUSES = frozenset(status.value for status in TaskStatus)
TASK_PRIORITIES = frozenset(priority.value for priority in TaskPriority)

# Statuses counted as open work
ACTIVE_STATUSES = frozenset({TaskStatus.TODO, TaskStatus.IN_PROGRESS})


@dataclass(frozen=True)
class Task:
    """A single unit of tracked work.

    Records are immutable; transitions build a new record with
    ``dataclasses.replace``.
    """
    id: str
    title: str
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime
    updated_at: datetime
    description: str = ""
    project_id: Optional[str] = None  # Weak reference to a Project
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None  # Set exactly while status is DONE
    is_pinned: bool = False
    tags: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_done(self) -> bool:
        return self.status is TaskStatus.DONE


def is_well_formed_task(value: Any) -> bool:
    """Check a raw (decoded JSON) task record.

    A record is well formed when ``id`` and ``title`` are non-empty strings,
    ``status`` and ``priority`` are known values and ``completedAt`` is set
    exactly when the status is done.
    """
    if not isinstance(value, dict):
        return False

    task_id = value.get("id")
    title = value.get("title")
    if not isinstance(task_id, str) or not task_id:
        return False
    if not isinstance(title, str) or not title.strip():
        return False

    status = value.get("status")
    priority = value.get("priority")
    if not isinstance(status, str) or status not in TASK_STATUSES:
        return False
    if not isinstance(priority, str) or priority not in TASK_PRIORITIES:
        return False

    has_completed_at = value.get("completedAt") is not None
    return has_completed_at == (status == TaskStatus.DONE.value)
