import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shift_workflow.data_manager import DataManager
from shift_workflow.notifications import NotificationCenter, ReminderScheduler, EventBus
from shift_workflow.shift_form import ShiftFormController, UiState
from shift_workflow.sound import SoundEffects


class FakeTkHost:
    """Stand-in for a Tk widget's after/after_cancel with a manual clock"""

    def __init__(self):
        self.now_ms = 0
        self._next_id = 0
        self._pending = {}  # after_id -> (due_ms, func)

    def after(self, delay_ms, func):
        self._next_id += 1
        after_id = f"after#{self._next_id}"
        self._pending[after_id] = (self.now_ms + delay_ms, func)
        return after_id

    def after_cancel(self, after_id):
        self._pending.pop(after_id, None)

    @property
    def pending_count(self):
        return len(self._pending)

    def advance(self, ms):
        """Move the clock forward, running due callbacks in order"""
        target = self.now_ms + ms
        while True:
            due = [(when, after_id) for after_id, (when, _) in self._pending.items() if when <= target]
            if not due:
                break
            when, after_id = min(due)
            _, func = self._pending.pop(after_id)
            self.now_ms = when
            func()
        self.now_ms = target


@pytest.fixture
def host():
    return FakeTkHost()


@pytest.fixture
def data_manager():
    """Roster with one employee per role and an empty shift store."""
    dm = DataManager()
    dm.set_selected_date("2025-08-15")
    dm.add_employee("Alice", "Manager")
    dm.add_employee("Bob", "Server")
    dm.add_employee("Carol", "Cook")
    return dm


@pytest.fixture
def notifications():
    return NotificationCenter()


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def sounds():
    return SoundEffects()


@pytest.fixture
def controller(data_manager, host, notifications, sounds, events):
    return ShiftFormController(
        data_manager, host,
        notifications=notifications,
        sounds=sounds,
        reminders=ReminderScheduler(notifications),
        events=events,
        ui_state=UiState()
    )
