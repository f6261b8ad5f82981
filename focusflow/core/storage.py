"""State gateway: loads and saves the persisted state blob."""
import json
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from ..models.project import Project
from ..models.settings import Settings
from ..models.state import PersistedState
from ..models.task import Task, TaskPriority, TaskStatus, is_well_formed_task
from ..services.exceptions import StorageError
from ..services.kv_store import KeyValueStore
from ..utils.clock import as_utc, format_timestamp, parse_date, parse_timestamp, utc_now
from .analytics import compute_completion_history
from .constants import (
    CURRENT_VERSION,
    DATA_RESET_MESSAGE,
    DEFAULT_PROJECT_COLOR,
    DEFAULT_PROJECT_ID,
    DEFAULT_PROJECT_NAME,
    SAVE_FAILED_MESSAGE,
    STORAGE_KEY,
    WELCOME_TASK_DESCRIPTION,
    WELCOME_TASK_ID,
    WELCOME_TASK_TAGS,
    WELCOME_TASK_TITLE,
)

logger = logging.getLogger(__name__)


class StateGateway:
    """Reads and writes the whole persisted state under a single key.

    Loading is total: any missing, unreadable or malformed data degrades to
    safe defaults. Saving never raises; failures are logged and reported
    through ``warning_sink``.
    """

    def __init__(self, store: KeyValueStore,
                 key: str = STORAGE_KEY,
                 clock: Callable[[], datetime] = utc_now,
                 warning_sink: Optional[Callable[[str], None]] = None):
        """Initialize state gateway.

        Args:
            store: Backing key-value store
            key: Storage key of the state blob
            clock: Returns the current time, used for first-run timestamps
            warning_sink: Receives user-facing advisory messages
        """
        self.store = store
        self.key = key
        self.clock = clock
        self.warning_sink = warning_sink

    def _warn(self, message: str) -> None:
        if self.warning_sink is not None:
            self.warning_sink(message)

    def get_initial_state(self) -> PersistedState:
        """Build the first-run state: an Inbox project and a welcome task."""
        now = as_utc(self.clock())

        default_project = Project(
            id=DEFAULT_PROJECT_ID,
            name=DEFAULT_PROJECT_NAME,
            color=DEFAULT_PROJECT_COLOR,
            created_at=now,
        )
        sample_task = Task(
            id=WELCOME_TASK_ID,
            title=WELCOME_TASK_TITLE,
            description=WELCOME_TASK_DESCRIPTION,
            status=TaskStatus.TODO,
            priority=TaskPriority.MEDIUM,
            project_id=default_project.id,
            created_at=now,
            updated_at=now,
            completed_at=None,
            is_pinned=True,
            tags=frozenset(WELCOME_TASK_TAGS),
        )
        settings = Settings(
            confirm_before_delete=True,
            enable_sounds=False,
            show_onboarding=True,
            default_project_id=default_project.id,
        )
        return PersistedState(
            version=CURRENT_VERSION,
            tasks=(sample_task,),
            projects=(default_project,),
            settings=settings,
            completion_history=(),
        )

    # Serialization

    def _serialize_task(self, task: Task) -> dict:
        """Serialize a task to JSON-compatible dict."""
        return {
            "id": task.id,
            "title": task.title,
            "description": task.description,
            "status": task.status.value,
            "priority": task.priority.value,
            "projectId": task.project_id,
            "dueDate": task.due_date.isoformat() if task.due_date else None,
            "createdAt": format_timestamp(task.created_at),
            "updatedAt": format_timestamp(task.updated_at),
            "completedAt": format_timestamp(task.completed_at),
            "isPinned": task.is_pinned,
            "tags": sorted(task.tags),
        }

    def _serialize_project(self, project: Project) -> dict:
        """Serialize a project to JSON-compatible dict."""
        return {
            "id": project.id,
            "name": project.name,
            "color": project.color,
            "createdAt": format_timestamp(project.created_at),
        }

    def serialize(self, state: PersistedState) -> str:
        """Serialize the persisted fields of ``state``; the undo slot is never written."""
        return json.dumps({
            "version": state.version,
            "tasks": [self._serialize_task(task) for task in state.tasks],
            "projects": [self._serialize_project(project) for project in state.projects],
            "settings": state.settings.to_dict(),
            "completionHistory": [
                {"date": entry.date, "count": entry.count}
                for entry in state.completion_history
            ],
        })

    # Coercion of untrusted data

    def _deserialize_task(self, data: Any) -> Optional[Task]:
        """Deserialize a task, None when the record cannot be trusted."""
        if not is_well_formed_task(data):
            return None

        created_at = parse_timestamp(data.get("createdAt"))
        if created_at is None:
            return None
        updated_at = parse_timestamp(data.get("updatedAt")) or created_at

        completed_at = None
        if data["status"] == TaskStatus.DONE.value:
            completed_at = parse_timestamp(data.get("completedAt"))
            if completed_at is None:
                return None

        description = data.get("description")
        project_id = data.get("projectId")
        tags = data.get("tags")

        return Task(
            id=data["id"],
            title=data["title"].strip(),
            description=description if isinstance(description, str) else "",
            status=TaskStatus(data["status"]),
            priority=TaskPriority(data["priority"]),
            project_id=project_id if isinstance(project_id, str) and project_id else None,
            due_date=parse_date(data.get("dueDate")),
            created_at=created_at,
            updated_at=max(updated_at, created_at),
            completed_at=completed_at,
            is_pinned=data.get("isPinned") is True,
            tags=frozenset(t for t in tags if isinstance(t, str)) if isinstance(tags, list) else frozenset(),
        )

    def _deserialize_project(self, data: Any) -> Optional[Project]:
        """Deserialize a project, None when the record cannot be trusted."""
        if not isinstance(data, dict):
            return None

        project_id = data.get("id")
        name = data.get("name")
        if not isinstance(project_id, str) or not project_id:
            return None
        if not isinstance(name, str) or not name.strip():
            return None
        created_at = parse_timestamp(data.get("createdAt"))
        if created_at is None:
            return None

        color = data.get("color")
        return Project(
            id=project_id,
            name=name,
            color=color if isinstance(color, str) and color else DEFAULT_PROJECT_COLOR,
            created_at=created_at,
        )

    @staticmethod
    def _coerce_list(value: Any) -> List[Any]:
        return value if isinstance(value, list) else []

    @staticmethod
    def _coerce_settings(value: Any) -> Settings:
        """Coerce settings field by field, keeping every valid value."""
        if not isinstance(value, dict):
            return Settings()

        defaults = Settings()

        def flag(alias: str, default: bool) -> bool:
            raw = value.get(alias)
            return raw if isinstance(raw, bool) else default

        default_project_id = value.get("defaultProjectId")
        if not isinstance(default_project_id, str):
            default_project_id = None

        return Settings(
            confirm_before_delete=flag("confirmBeforeDelete", defaults.confirm_before_delete),
            enable_sounds=flag("enableSounds", defaults.enable_sounds),
            show_onboarding=flag("showOnboarding", defaults.show_onboarding),
            default_project_id=default_project_id,
        )

    @staticmethod
    def _coerce_version(value: Any) -> int:
        # bool is an int subclass but never a valid version
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return CURRENT_VERSION

    def _unique(self, records: list) -> tuple:
        seen = set()
        unique = []
        for record in records:
            if record is not None and record.id not in seen:
                seen.add(record.id)
                unique.append(record)
        return tuple(unique)

    def from_document(self, document: Any) -> Optional[PersistedState]:
        """Turn a decoded JSON document into a valid state.

        Returns None when the top level is not an object.
        """
        if not isinstance(document, dict):
            return None

        raw_tasks = self._coerce_list(document.get("tasks"))
        raw_projects = self._coerce_list(document.get("projects"))
        tasks = self._unique([self._deserialize_task(item) for item in raw_tasks])
        projects = self._unique([self._deserialize_project(item) for item in raw_projects])

        dropped = (len(raw_tasks) - len(tasks)) + (len(raw_projects) - len(projects))
        if dropped:
            logger.warning(f"Dropped {dropped} malformed record(s) from stored state")

        return PersistedState(
            version=self._coerce_version(document.get("version")),
            tasks=tasks,
            projects=projects,
            settings=self._coerce_settings(document.get("settings")),
            # History is derived, never trusted from storage
            completion_history=compute_completion_history(tasks),
        )

    # Public API

    def load(self) -> PersistedState:
        """Load the stored state.

        Returns:
            The stored state after validation, or the initial state when
            nothing usable is stored. Never raises.
        """
        try:
            raw = self.store.get_item(self.key)
        except StorageError as e:
            logger.warning(f"Could not read stored state, using defaults: {e}")
            return self.get_initial_state()

        if not raw:
            logger.debug(f"No stored state under '{self.key}', using defaults")
            return self.get_initial_state()

        try:
            document = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Stored state is not valid JSON, resetting: {e}")
            self._warn(DATA_RESET_MESSAGE)
            return self.get_initial_state()

        state = self.from_document(document)
        if state is None:
            logger.warning("Stored state had an unexpected shape, resetting")
            self._warn(DATA_RESET_MESSAGE)
            return self.get_initial_state()
        return state

    def save(self, state: PersistedState) -> None:
        """Write ``state``; failures are logged and reported, never raised."""
        try:
            payload = self.serialize(state)
            self.store.set_item(self.key, payload)
        except (StorageError, TypeError, ValueError) as e:
            logger.warning(f"Failed to save state: {e}")
            self._warn(SAVE_FAILED_MESSAGE)

    def clear(self) -> None:
        """Remove the stored blob so the next load starts fresh."""
        try:
            self.store.remove_item(self.key)
        except StorageError as e:
            logger.warning(f"Failed to clear stored state: {e}")
            self._warn(SAVE_FAILED_MESSAGE)
