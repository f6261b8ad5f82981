import pytest
from click.testing import CliRunner
from datetime import datetime, timedelta, timezone
from itertools import count

from focusflow.core.engine import TaskEngine
from focusflow.core.storage import StateGateway
from focusflow.models.state import EngineState
from focusflow.models.task import Task, TaskPriority, TaskStatus
from focusflow.services.kv_store import MemoryStore


NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock for deterministic timestamps."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def now():
    """The fixed current time used by the clock fixture."""
    return NOW


@pytest.fixture
def make_task():
    """Provides a factory building Tasks with sensible defaults."""
    def factory(task_id="t1", title="Task", status=TaskStatus.TODO, completed_at=None,
                created_at=NOW - timedelta(days=10), **kwargs):
        if status is TaskStatus.DONE and completed_at is None:
            completed_at = created_at
        return Task(
            id=task_id,
            title=title,
            status=status,
            priority=kwargs.pop("priority", TaskPriority.MEDIUM),
            created_at=created_at,
            updated_at=kwargs.pop("updated_at", created_at),
            completed_at=completed_at,
            **kwargs
        )
    return factory


@pytest.fixture
def cli_runner():
    """Provides a Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def clock():
    """Provides a clock fixed at NOW."""
    return FakeClock()


@pytest.fixture
def engine(clock):
    """Provides an engine with a fixed clock and sequential ids."""
    ids = count(1)
    return TaskEngine(clock=clock, id_factory=lambda: f"id-{next(ids)}")


@pytest.fixture
def empty_state():
    """Provides an engine state without tasks or projects."""
    return EngineState(version=1)


@pytest.fixture
def memory_store():
    """Provides an empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def gateway(memory_store, clock):
    """Provides a gateway over the in-memory store."""
    return StateGateway(memory_store, clock=clock)
