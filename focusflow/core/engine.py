"""Task engine: the single reducer that owns every state transition."""
import copy
import logging
from dataclasses import replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import ValidationError

from ..models.project import Project
from ..models.state import EngineState, PersistedState
from ..models.task import Task, TaskPriority, TaskStatus
from ..utils.clock import as_utc, new_id, parse_date, utc_now
from .actions import (
    BulkUpdateStatus,
    CreateProject,
    CreateTask,
    DeleteTask,
    Hydrate,
    RestoreLastDeleted,
    ToggleComplete,
    UpdateSettings,
    UpdateTask,
)
from .analytics import compute_completion_history
from .constants import DEFAULT_PROJECT_COLOR

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def _coerce_enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    """Convert ``value`` to ``enum_cls``, None when it is not a member."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _clean_tags(values: Any) -> frozenset:
    if isinstance(values, str):
        values = [values]
    try:
        return frozenset(
            tag.strip() for tag in values
            if isinstance(tag, str) and tag.strip()
        )
    except TypeError:
        return frozenset()


def _coerce_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    try:
        return as_utc(value)
    except OverflowError:
        return None


def _coerce_due_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value)


class TaskEngine:
    """Applies actions to an EngineState.

    ``reduce`` is a total function: unknown actions and actions that refer to
    missing tasks return the input state object unchanged, and no action
    raises. Every transition that changes a task builds a new Task record and
    a new task tuple.
    """

    def __init__(self,
                 clock: Callable[[], datetime] = utc_now,
                 id_factory: Callable[[], str] = new_id):
        """Initialize the engine.

        Args:
            clock: Returns the current time; injected for deterministic tests
            id_factory: Returns fresh task and project ids
        """
        self.clock = clock
        self.id_factory = id_factory
        self._handlers: Dict[type, Callable[[EngineState, Any], EngineState]] = {
            Hydrate: self._hydrate,
            CreateTask: self._create_task,
            UpdateTask: self._update_task,
            DeleteTask: self._delete_task,
            BulkUpdateStatus: self._bulk_update_status,
            ToggleComplete: self._toggle_complete,
            RestoreLastDeleted: self._restore_last_deleted,
            UpdateSettings: self._update_settings,
            CreateProject: self._create_project,
        }

    def reduce(self, state: EngineState, action: Any) -> EngineState:
        """Apply ``action`` to ``state`` and return the resulting state."""
        handler = self._handlers.get(type(action))
        if handler is None:
            logger.debug(f"Ignoring unknown action: {action!r}")
            return state
        return handler(state, action)

    def now(self) -> datetime:
        return as_utc(self.clock())

    @staticmethod
    def _touched_at(task: Task, now: datetime) -> datetime:
        # updated_at never goes below created_at, even if the clock moves back
        return max(now, as_utc(task.created_at))

    @staticmethod
    def _with_tasks(state: EngineState, tasks: tuple, **changes) -> EngineState:
        return replace(
            state,
            tasks=tasks,
            completion_history=compute_completion_history(tasks),
            **changes,
        )

    def _hydrate(self, state: EngineState, action: Hydrate) -> EngineState:
        if not isinstance(action.payload, PersistedState):
            return state
        return EngineState.from_persisted(action.payload)

    def _create_task(self, state: EngineState, action: CreateTask) -> EngineState:
        title = action.title.strip() if isinstance(action.title, str) else ""
        if not title:
            return state

        now = self.now()
        description = action.description.strip() if isinstance(action.description, str) else ""
        priority = TaskPriority.MEDIUM
        if action.priority is not None:
            priority = _coerce_enum(TaskPriority, action.priority) or TaskPriority.MEDIUM

        task = Task(
            id=self.id_factory(),
            title=title,
            description=description,
            status=TaskStatus.TODO,
            priority=priority,
            project_id=action.project_id or state.settings.default_project_id,
            due_date=_coerce_due_date(action.due_date),
            created_at=now,
            updated_at=now,
            completed_at=None,
            is_pinned=False,
            tags=_clean_tags(action.tags),
        )
        return self._with_tasks(state, (task,) + state.tasks)

    def _apply_patch(self, task: Task, patch: Dict[str, Any], now: datetime) -> Task:
        """Build the patched copy of ``task``, keeping its invariants."""
        changes: Dict[str, Any] = {}

        title = patch.get("title")
        if isinstance(title, str) and title.strip():
            changes["title"] = title.strip()

        if "description" in patch:
            description = patch["description"]
            if description is None or isinstance(description, str):
                changes["description"] = (description or "").strip()

        if "status" in patch:
            status = _coerce_enum(TaskStatus, patch["status"])
            if status is not None:
                changes["status"] = status

        if "priority" in patch:
            priority = _coerce_enum(TaskPriority, patch["priority"])
            if priority is not None:
                changes["priority"] = priority

        if "project_id" in patch:
            project_id = patch["project_id"]
            if project_id is None or isinstance(project_id, str):
                changes["project_id"] = project_id or None

        if "due_date" in patch:
            due_date = patch["due_date"]
            if due_date is None:
                changes["due_date"] = None
            elif _coerce_due_date(due_date) is not None:
                changes["due_date"] = _coerce_due_date(due_date)

        if isinstance(patch.get("is_pinned"), bool):
            changes["is_pinned"] = patch["is_pinned"]

        if patch.get("tags") is not None:
            changes["tags"] = _clean_tags(patch["tags"])

        status = changes.get("status", task.status)
        if status is TaskStatus.DONE:
            supplied = _coerce_timestamp(patch.get("completed_at"))
            if supplied is not None:
                changes["completed_at"] = supplied
            elif task.completed_at is None:
                changes["completed_at"] = now
        else:
            changes["completed_at"] = None

        changes["updated_at"] = self._touched_at(task, now)
        return replace(task, **changes)

    def _update_task(self, state: EngineState, action: UpdateTask) -> EngineState:
        if state.find_task(action.id) is None or not isinstance(action.patch, dict):
            return state

        now = self.now()
        tasks = tuple(
            self._apply_patch(task, action.patch, now) if task.id == action.id else task
            for task in state.tasks
        )
        return self._with_tasks(state, tasks)

    def _delete_task(self, state: EngineState, action: DeleteTask) -> EngineState:
        task = state.find_task(action.id)
        if task is None:
            return state

        tasks = tuple(t for t in state.tasks if t.id != action.id)
        return self._with_tasks(state, tasks, last_deleted_task=copy.deepcopy(task))

    def _set_status(self, task: Task, status: TaskStatus, now: datetime) -> Task:
        if status is TaskStatus.DONE:
            # Re-marking a done task keeps its original completion time
            completed_at = task.completed_at or now
        else:
            completed_at = None
        return replace(
            task,
            status=status,
            completed_at=completed_at,
            updated_at=self._touched_at(task, now),
        )

    def _bulk_update_status(self, state: EngineState, action: BulkUpdateStatus) -> EngineState:
        status = _coerce_enum(TaskStatus, action.status)
        if status is None:
            return state
        try:
            ids = {task_id for task_id in action.ids if isinstance(task_id, str)}
        except TypeError:
            return state
        if not any(task.id in ids for task in state.tasks):
            return state

        now = self.now()
        tasks = tuple(
            self._set_status(task, status, now) if task.id in ids else task
            for task in state.tasks
        )
        return self._with_tasks(state, tasks)

    def _toggle_complete(self, state: EngineState, action: ToggleComplete) -> EngineState:
        if state.find_task(action.id) is None:
            return state

        now = self.now()
        tasks = tuple(
            self._set_status(task, TaskStatus.TODO if task.is_done else TaskStatus.DONE, now)
            if task.id == action.id else task
            for task in state.tasks
        )
        return self._with_tasks(state, tasks)

    def _restore_last_deleted(self, state: EngineState, action: RestoreLastDeleted) -> EngineState:
        if state.last_deleted_task is None:
            return state
        tasks = (state.last_deleted_task,) + state.tasks
        return self._with_tasks(state, tasks, last_deleted_task=None)

    def _update_settings(self, state: EngineState, action: UpdateSettings) -> EngineState:
        if not isinstance(action.patch, dict):
            return state
        try:
            settings = state.settings.merged(action.patch)
        except ValidationError as e:
            logger.debug(f"Ignoring invalid settings patch: {e}")
            return state
        if settings is state.settings:
            return state
        return replace(state, settings=settings)

    def _create_project(self, state: EngineState, action: CreateProject) -> EngineState:
        name = action.name.strip() if isinstance(action.name, str) else ""
        if not name:
            return state

        color = action.color.strip() if isinstance(action.color, str) else ""
        project = Project(
            id=self.id_factory(),
            name=name,
            color=color or DEFAULT_PROJECT_COLOR,
            created_at=self.now(),
        )
        return replace(state, projects=state.projects + (project,))
