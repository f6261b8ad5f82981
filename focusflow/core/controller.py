"""Dashboard controller: owns the live state for one session."""
import logging
from collections import deque
from datetime import date
from typing import Any, Deque, Dict, Iterable, Optional

from ..models.state import AnalyticsSummary, EngineState
from ..models.task import Task
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
from .analytics import compute_analytics
from .engine import TaskEngine
from .storage import StateGateway

logger = logging.getLogger(__name__)


class DashboardController:
    """Single owner of the engine state for a session.

    The controller hydrates from the gateway once, routes every change
    through the engine, keeps an analytics snapshot in step with the state
    and writes the state back after every committed transition other than
    hydration itself.
    """

    def __init__(self, gateway: StateGateway, engine: Optional[TaskEngine] = None):
        """Initialize dashboard controller.

        Args:
            gateway: Persistence gateway used for hydration and write-back
            engine: Reducer to use (defaults to a TaskEngine on the gateway clock)
        """
        self.gateway = gateway
        self.engine = engine or TaskEngine(clock=gateway.clock)
        self.storage_warning: Optional[str] = None

        # Advisory messages from the gateway land on the controller
        if gateway.warning_sink is None:
            gateway.warning_sink = self._on_storage_warning

        self._state = EngineState.from_persisted(gateway.get_initial_state())
        self._analytics = self._compute_analytics()
        self._hydrated = False
        self._pending: Deque[Any] = deque()
        self._dispatching = False

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def analytics(self) -> AnalyticsSummary:
        return self._analytics

    @property
    def is_hydrated(self) -> bool:
        return self._hydrated

    def _on_storage_warning(self, message: str) -> None:
        self.storage_warning = message

    def _compute_analytics(self) -> AnalyticsSummary:
        today: date = self.engine.now().date()
        return compute_analytics(self._state.tasks, self._state.completion_history, today)

    def activate(self) -> None:
        """Hydrate from storage. Only the first call has any effect."""
        if self._hydrated:
            return
        self._hydrated = True
        persisted = self.gateway.load()
        logger.debug(f"Hydrating with {len(persisted.tasks)} task(s)")
        self.dispatch(Hydrate(persisted))

    def dispatch(self, action: Any) -> EngineState:
        """Apply ``action`` and persist the result.

        Actions dispatched while another transition is being committed are
        queued and applied afterwards, in order.

        Returns:
            The state after all queued actions have been applied
        """
        if not self._hydrated:
            self.activate()

        self._pending.append(action)
        if self._dispatching:
            return self._state

        self._dispatching = True
        try:
            while self._pending:
                self._commit(self._pending.popleft())
        finally:
            self._dispatching = False
        return self._state

    def _commit(self, action: Any) -> None:
        next_state = self.engine.reduce(self._state, action)
        if next_state is self._state:
            logger.debug(f"No-op action: {type(action).__name__}")
            return

        self._state = next_state
        self._analytics = self._compute_analytics()
        logger.debug(f"Committed {type(action).__name__}")
        # Hydrated state came from storage and is not written back
        if isinstance(action, Hydrate):
            return
        self.gateway.save(next_state)

    def refresh_analytics(self) -> AnalyticsSummary:
        """Recompute the snapshot, e.g. after midnight rolls over."""
        self._analytics = self._compute_analytics()
        return self._analytics

    def dismiss_storage_warning(self) -> None:
        self.storage_warning = None

    # Action entry points used by front ends

    def create_task(self, title: str, description: Optional[str] = None,
                    project_id: Optional[str] = None, priority: Any = None,
                    due_date: Optional[date] = None, tags: Iterable[str] = ()) -> EngineState:
        return self.dispatch(CreateTask(
            title=title,
            description=description,
            project_id=project_id,
            priority=priority,
            due_date=due_date,
            tags=tuple(tags),
        ))

    def update_task(self, task_id: str, patch: Dict[str, Any]) -> EngineState:
        return self.dispatch(UpdateTask(id=task_id, patch=dict(patch)))

    def delete_task(self, task_id: str) -> EngineState:
        return self.dispatch(DeleteTask(id=task_id))

    def bulk_update_status(self, task_ids: Iterable[str], status: Any) -> EngineState:
        return self.dispatch(BulkUpdateStatus(ids=tuple(task_ids), status=status))

    def toggle_complete(self, task_id: str) -> EngineState:
        return self.dispatch(ToggleComplete(id=task_id))

    def restore_last_deleted(self) -> EngineState:
        return self.dispatch(RestoreLastDeleted())

    def update_settings(self, patch: Dict[str, Any]) -> EngineState:
        return self.dispatch(UpdateSettings(patch=dict(patch)))

    def create_project(self, name: str, color: str) -> EngineState:
        return self.dispatch(CreateProject(name=name, color=color))

    def get_task(self, task_id: str) -> Optional[Task]:
        return self._state.find_task(task_id)
