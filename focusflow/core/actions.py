"""Actions accepted by the task engine."""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, Optional, Union

from ..models.state import PersistedState
from ..models.task import TaskPriority, TaskStatus


@dataclass(frozen=True)
class Hydrate:
    """Replace the whole state with previously loaded data."""
    payload: PersistedState


@dataclass(frozen=True)
class CreateTask:
    """Add a new task at the top of the list."""
    title: str
    description: Optional[str] = None
    project_id: Optional[str] = None  # Falls back to settings.default_project_id
    priority: Optional[Union[TaskPriority, str]] = None
    due_date: Optional[date] = None
    tags: Iterable[str] = ()


@dataclass(frozen=True)
class UpdateTask:
    """Merge ``patch`` (field name -> value) onto one task."""
    id: str
    patch: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteTask:
    """Remove a task, keeping it in the undo slot."""
    id: str


@dataclass(frozen=True)
class BulkUpdateStatus:
    """Set the same status on several tasks at once."""
    ids: Iterable[str]
    status: Union[TaskStatus, str]


@dataclass(frozen=True)
class ToggleComplete:
    """Flip a task between done and todo."""
    id: str


@dataclass(frozen=True)
class RestoreLastDeleted:
    """Put the task from the undo slot back at the top of the list."""


@dataclass(frozen=True)
class UpdateSettings:
    """Shallow-merge ``patch`` onto the settings."""
    patch: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CreateProject:
    """Append a new project."""
    name: str
    color: str


Action = Union[
    Hydrate,
    CreateTask,
    UpdateTask,
    DeleteTask,
    BulkUpdateStatus,
    ToggleComplete,
    RestoreLastDeleted,
    UpdateSettings,
    CreateProject,
]
