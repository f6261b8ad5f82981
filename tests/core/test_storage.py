"""Tests for StateGateway."""

import json
import pytest
from datetime import date, timedelta
from unittest.mock import MagicMock

from focusflow.core.actions import BulkUpdateStatus, CreateProject, CreateTask, DeleteTask, UpdateSettings
from focusflow.core.constants import CURRENT_VERSION, DATA_RESET_MESSAGE, SAVE_FAILED_MESSAGE, STORAGE_KEY
from focusflow.core.storage import StateGateway
from focusflow.models.settings import Settings
from focusflow.models.state import CompletionEntry, EngineState
from focusflow.models.task import TaskStatus
from focusflow.services.exceptions import StorageReadError, StorageWriteError
from focusflow.services.kv_store import FileStore


def assert_initial_shape(state):
    """Check a state satisfies the first-run contract."""
    assert state.version == CURRENT_VERSION
    assert [p.id for p in state.projects] == ["inbox"]
    assert len(state.tasks) <= 1
    assert state.settings.show_onboarding is True
    assert state.completion_history == ()


@pytest.fixture
def populated_state(engine, gateway):
    """A well-formed state built through the engine."""
    state = EngineState.from_persisted(gateway.get_initial_state())
    state = engine.reduce(state, CreateProject("Work", "violet"))
    state = engine.reduce(state, CreateTask(title="Write report", priority="high",
                                            due_date=date(2024, 3, 20), tags=["work", "q1"],
                                            project_id="id-1"))
    state = engine.reduce(state, CreateTask(title="Buy milk", description="2 litres"))
    state = engine.reduce(state, BulkUpdateStatus(["id-3"], "done"))
    state = engine.reduce(state, UpdateSettings({"enable_sounds": True}))
    return state


class TestInitialState:
    """Test cases for the first-run state."""

    def test_initial_state(self, gateway, now):
        """Test the default project, welcome task and settings."""
        state = gateway.get_initial_state()

        assert_initial_shape(state)
        welcome = state.tasks[0]
        assert welcome.status == TaskStatus.TODO
        assert welcome.project_id == "inbox"
        assert welcome.is_pinned is True
        assert welcome.completed_at is None
        assert welcome.created_at == now
        assert state.settings.default_project_id == "inbox"
        assert state.settings.confirm_before_delete is True


class TestLoad:
    """Test cases for loading stored state."""

    def test_missing_key_returns_initial_state(self, gateway):
        """Test an empty store gives the initial state."""
        assert gateway.load() == gateway.get_initial_state()

    @pytest.mark.parametrize("raw", [
        "{not json", "[]", "null", "42", '"text"',
        pytest.param("[" * 100000 + "]" * 100000, id="deeply-nested"),
    ])
    def test_corrupt_blob_returns_initial_state(self, gateway, memory_store, raw):
        """Test corrupt or wrongly-shaped blobs reset to defaults without raising."""
        memory_store.set_item(STORAGE_KEY, raw)

        state = gateway.load()

        assert_initial_shape(state)
        assert state == gateway.get_initial_state()

    def test_corrupt_blob_reports_reset(self, memory_store, clock):
        """Test a reset caused by corrupt data is reported to the sink."""
        messages = []
        gateway = StateGateway(memory_store, clock=clock, warning_sink=messages.append)
        memory_store.set_item(STORAGE_KEY, "{not json")

        gateway.load()

        assert messages == [DATA_RESET_MESSAGE]

    def test_read_error_returns_initial_state(self, clock):
        """Test an unreadable store falls back to defaults."""
        store = MagicMock()
        store.get_item.side_effect = StorageReadError("disabled")
        gateway = StateGateway(store, clock=clock)

        assert_initial_shape(gateway.load())

    def test_non_list_collections_become_empty(self, gateway, memory_store):
        """Test collections of the wrong type coerce to empty."""
        memory_store.set_item(STORAGE_KEY, json.dumps({
            "version": 1,
            "tasks": {"id": "a"},
            "projects": "inbox",
            "completionHistory": 5,
        }))

        state = gateway.load()

        assert state.tasks == ()
        assert state.projects == ()
        assert state.completion_history == ()
        assert state.settings == Settings()

    def test_malformed_settings_coerce_per_field(self, gateway, memory_store):
        """Test valid settings fields survive next to invalid ones."""
        memory_store.set_item(STORAGE_KEY, json.dumps({
            "settings": {
                "confirmBeforeDelete": False,
                "enableSounds": "loud",
                "showOnboarding": None,
                "defaultProjectId": 7,
            },
        }))

        settings = gateway.load().settings

        assert settings.confirm_before_delete is False
        assert settings.enable_sounds is False
        assert settings.show_onboarding is True
        assert settings.default_project_id is None

    @pytest.mark.parametrize("version", [None, "1", 1.5, True])
    def test_bad_version_is_current(self, gateway, memory_store, version):
        """Test unknown versions are read as the current one."""
        memory_store.set_item(STORAGE_KEY, json.dumps({"version": version}))
        assert gateway.load().version == CURRENT_VERSION

    def test_future_version_is_kept(self, gateway, memory_store):
        """Test integer versions are accepted as-is."""
        memory_store.set_item(STORAGE_KEY, json.dumps({"version": 3}))
        assert gateway.load().version == 3

    def test_malformed_tasks_are_dropped(self, gateway, memory_store):
        """Test only well-formed task records are loaded."""
        good = {
            "id": "ok", "title": "Fine", "status": "todo", "priority": "low",
            "createdAt": "2024-03-01T09:00:00Z", "updatedAt": "2024-03-01T09:00:00Z",
            "completedAt": None,
        }
        memory_store.set_item(STORAGE_KEY, json.dumps({
            "tasks": [
                good,
                {**good, "id": ""},
                {**good, "id": "bad-status", "status": "finished"},
                {**good, "id": "bad-done", "status": "done"},
                {**good, "id": "bad-created", "createdAt": "yesterday"},
                {**good, "title": "Duplicate id"},
                "not a task",
            ],
        }))

        state = gateway.load()

        assert [t.id for t in state.tasks] == ["ok"]
        assert state.tasks[0].title == "Fine"

    @pytest.mark.parametrize("field, value", [
        ("createdAt", "0001-01-01T00:00:00+05:00"),
        ("completedAt", "9999-12-31T23:00:00-05:00"),
    ])
    def test_out_of_range_timestamps_drop_the_task(self, gateway, memory_store, field, value):
        """Test timestamps that overflow when converted to UTC drop only their record."""
        good = {
            "id": "ok", "title": "Fine", "status": "done", "priority": "low",
            "createdAt": "2024-03-01T09:00:00Z", "updatedAt": "2024-03-01T09:00:00Z",
            "completedAt": "2024-03-02T09:00:00Z",
        }
        memory_store.set_item(STORAGE_KEY, json.dumps({
            "tasks": [{**good, "id": "broken", field: value}, good],
        }))

        state = gateway.load()

        assert [t.id for t in state.tasks] == ["ok"]
        assert state.completion_history == (CompletionEntry(date="2024-03-02", count=1),)

    def test_out_of_range_updated_at_falls_back_to_created_at(self, gateway, memory_store):
        """Test an overflowing updatedAt is replaced rather than raising."""
        memory_store.set_item(STORAGE_KEY, json.dumps({
            "tasks": [{
                "id": "x", "title": "Ship", "status": "todo", "priority": "low",
                "createdAt": "2024-03-01T09:00:00Z",
                "updatedAt": "9999-12-31T23:00:00-05:00",
                "completedAt": None,
            }],
        }))

        task = gateway.load().tasks[0]

        assert task.updated_at == task.created_at

    def test_invalid_store_key_returns_initial_state(self, tmp_path, clock):
        """Test a key the file store rejects reads as a storage failure."""
        gateway = StateGateway(FileStore(tmp_path), key="../escape", clock=clock)

        assert_initial_shape(gateway.load())

    def test_task_field_coercion(self, gateway, memory_store):
        """Test optional task fields are normalized."""
        memory_store.set_item(STORAGE_KEY, json.dumps({
            "tasks": [{
                "id": "x", "title": "Ship", "status": "done", "priority": "high",
                "createdAt": "2024-03-10T09:00:00Z",
                "updatedAt": "2024-03-01T09:00:00Z",
                "completedAt": "2024-03-11T09:00:00Z",
                "dueDate": "2024-03-12",
                "tags": ["a", 3, None],
                "isPinned": "yes",
            }],
        }))

        state = gateway.load()
        task = state.tasks[0]

        assert task.updated_at == task.created_at
        assert task.due_date == date(2024, 3, 12)
        assert task.tags == frozenset({"a"})
        assert task.is_pinned is False
        assert state.completion_history == (CompletionEntry(date="2024-03-11", count=1),)

    def test_history_is_rederived(self, gateway, memory_store):
        """Test stored history entries are replaced by the derived history."""
        memory_store.set_item(STORAGE_KEY, json.dumps({
            "tasks": [],
            "completionHistory": [{"date": "2024-03-01", "count": 99}],
        }))

        assert gateway.load().completion_history == ()


class TestSave:
    """Test cases for saving state."""

    def test_round_trip(self, gateway, populated_state):
        """Test loading a saved well-formed state gives the same state."""
        gateway.save(populated_state)

        assert gateway.load() == populated_state.to_persisted()

    def test_round_trip_initial_state(self, gateway):
        """Test the initial state survives a save and load."""
        state = gateway.get_initial_state()
        gateway.save(state)
        assert gateway.load() == state

    def test_undo_slot_is_not_persisted(self, gateway, memory_store, engine, populated_state):
        """Test the deleted task held for undo is never written."""
        state = engine.reduce(populated_state, DeleteTask("welcome-task"))
        gateway.save(state)

        document = json.loads(memory_store.get_item(STORAGE_KEY))
        assert set(document) == {"version", "tasks", "projects", "settings", "completionHistory"}
        assert "welcome-task" not in [t["id"] for t in document["tasks"]]

    def test_document_format(self, gateway, memory_store, populated_state):
        """Test the stored document uses the camelCase schema."""
        gateway.save(populated_state)

        document = json.loads(memory_store.get_item(STORAGE_KEY))
        task = document["tasks"][0]
        assert set(task) == {
            "id", "title", "description", "status", "priority", "projectId", "dueDate",
            "createdAt", "updatedAt", "completedAt", "isPinned", "tags",
        }
        assert document["settings"]["enableSounds"] is True
        assert document["completionHistory"] == [{"date": "2024-03-15", "count": 1}]

    def test_write_error_is_swallowed(self, clock, populated_state):
        """Test a failing store does not raise and reports an advisory."""
        store = MagicMock()
        store.set_item.side_effect = StorageWriteError("quota exceeded")
        messages = []
        gateway = StateGateway(store, clock=clock, warning_sink=messages.append)

        gateway.save(populated_state)

        store.set_item.assert_called_once()
        assert messages == [SAVE_FAILED_MESSAGE]

    def test_invalid_store_key_is_reported(self, tmp_path, clock, populated_state):
        """Test a key the file store rejects is reported as a failed save."""
        messages = []
        gateway = StateGateway(FileStore(tmp_path), key="../escape", clock=clock,
                               warning_sink=messages.append)

        gateway.save(populated_state)

        assert messages == [SAVE_FAILED_MESSAGE]
        assert list(tmp_path.iterdir()) == []

    def test_clear_removes_blob(self, gateway, memory_store, populated_state):
        """Test clear removes the stored state."""
        gateway.save(populated_state)
        gateway.clear()

        assert memory_store.get_item(STORAGE_KEY) is None
