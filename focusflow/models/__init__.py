"""Models for FocusFlow."""

from .project import Project
from .settings import Settings
from .state import AnalyticsSummary, CompletionEntry, EngineState, PersistedState
from .task import Task, TaskPriority, TaskStatus, is_well_formed_task

__all__ = [
    'Task',
    'TaskStatus',
    'TaskPriority',
    'is_well_formed_task',
    'Project',
    'Settings',
    'CompletionEntry',
    'PersistedState',
    'EngineState',
    'AnalyticsSummary',
]
