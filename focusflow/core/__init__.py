"""Core engine, analytics and persistence for FocusFlow."""

from .actions import (
    Action,
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
from .analytics import compute_analytics, compute_completion_history
from .controller import DashboardController
from .engine import TaskEngine
from .storage import StateGateway

__all__ = [
    'Action',
    'Hydrate',
    'CreateTask',
    'UpdateTask',
    'DeleteTask',
    'BulkUpdateStatus',
    'ToggleComplete',
    'RestoreLastDeleted',
    'UpdateSettings',
    'CreateProject',
    'TaskEngine',
    'StateGateway',
    'DashboardController',
    'compute_analytics',
    'compute_completion_history',
]
