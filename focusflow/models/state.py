"""Persisted and live state models."""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .project import Project
from .settings import Settings
from .task import Task


@dataclass(frozen=True)
class CompletionEntry:
    """Number of tasks completed on one calendar day."""
    date: str  # yyyy-mm-dd
    count: int


@dataclass(frozen=True)
class PersistedState:
    """The durable unit: everything written to storage in one blob."""
    version: int
    tasks: Tuple[Task, ...] = ()  # Newest first
    projects: Tuple[Project, ...] = ()
    settings: Settings = field(default_factory=Settings)
    completion_history: Tuple[CompletionEntry, ...] = ()

    def find_task(self, task_id: str) -> Optional[Task]:
        """Look up a task by id."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def find_project(self, project_id: Optional[str]) -> Optional[Project]:
        """Look up a project by id, None when missing."""
        if project_id is None:
            return None
        for project in self.projects:
            if project.id == project_id:
                return project
        return None


@dataclass(frozen=True)
class EngineState(PersistedState):
    """Live engine state: the persisted data plus the volatile undo slot."""
    last_deleted_task: Optional[Task] = None

    def to_persisted(self) -> PersistedState:
        """Drop the undo slot."""
        return PersistedState(
            version=self.version,
            tasks=self.tasks,
            projects=self.projects,
            settings=self.settings,
            completion_history=self.completion_history,
        )

    @classmethod
    def from_persisted(cls, state: PersistedState) -> "EngineState":
        """Wrap persisted data with an empty undo slot."""
        return cls(
            version=state.version,
            tasks=tuple(state.tasks),
            projects=tuple(state.projects),
            settings=state.settings,
            completion_history=tuple(state.completion_history),
        )


class AnalyticsSummary(BaseModel):
    """Read-only analytics snapshot computed from the task list."""

    model_config = ConfigDict(frozen=True)

    total_tasks: int = 0
    completed_tasks: int = 0
    active_tasks: int = 0
    completion_rate: float = 0.0  # 0-1
    streak_days: int = 0
    tasks_completed_today: int = 0
