"""
Shift Form Controller

Owns the lifecycle of the add/edit shift form: draft creation or
hydration, field input, step navigation, validation gating, submission and
teardown. Rendering lives in ui.py; this module has no widget code.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .data_manager import DataManager, Shift, DEFAULT_ROLE, DEFAULT_STATUS, role_color
from .form_logic import (
    StepMachine, ValidationOutcome, CONFIRM_KEYS,
    apply_field_change, format_time_range, validate_draft
)
from .notifications import NotificationCenter, ReminderScheduler, EventBus
from .sound import SoundEffects
from .submission import SubmissionPipeline, new_shift_id, SUBMIT_DELAY_MS, ONBOARDING_DELAY_MS
from .tasks import SessionTasks

logger = logging.getLogger(__name__)

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "17:00"

ADD_MODAL = "addShift"
EDIT_MODAL = "editShift"


def new_draft(target_date: str) -> Shift:
    """Fresh draft from the default template, with its own id"""
    return Shift(
        id=new_shift_id(),
        employee_name="",
        role=DEFAULT_ROLE,
        time_range=format_time_range(DEFAULT_START_TIME, DEFAULT_END_TIME),
        start_time=DEFAULT_START_TIME,
        end_time=DEFAULT_END_TIME,
        status=DEFAULT_STATUS,
        date=target_date,
        color=role_color(DEFAULT_ROLE)
    )


@dataclass
class UiState:
    """Application-level UI state the form reads and clears"""
    selected_shift_id: Optional[str] = None
    modal_open: Dict[str, bool] = field(default_factory=lambda: {ADD_MODAL: False, EDIT_MODAL: False})


@dataclass
class FormSession:
    draft: Shift
    is_edit: bool
    opened_for_edit: bool
    steps: StepMachine = field(default_factory=StepMachine)
    is_submitting: bool = False
    show_success: bool = False
    is_priority: bool = False
    validation: Optional[ValidationOutcome] = None

    @property
    def step(self) -> int:
        return int(self.steps.current)


class ShiftFormController:
    """Single entry point for every user action on the shift form"""

    def __init__(self, data_manager: DataManager, host,
                 notifications: Optional[NotificationCenter] = None,
                 sounds: Optional[SoundEffects] = None,
                 reminders: Optional[ReminderScheduler] = None,
                 events: Optional[EventBus] = None,
                 ui_state: Optional[UiState] = None):
        self.data_manager = data_manager
        self.host = host
        self.notifications = notifications or NotificationCenter()
        self.sounds = sounds or SoundEffects()
        self.reminders = reminders or ReminderScheduler(self.notifications)
        self.events = events or EventBus()
        self.ui_state = ui_state or UiState()

        self.pipeline = SubmissionPipeline(
            data_manager,
            self.notifications,
            self.sounds,
            self.reminders,
            self.events,
            submit_delay_ms=data_manager.get_setting("submitDelayMs", SUBMIT_DELAY_MS),
            onboarding_delay_ms=data_manager.get_setting("onboardingDelayMs", ONBOARDING_DELAY_MS)
        )

        self.session: Optional[FormSession] = None
        self.tasks: Optional[SessionTasks] = None
        self._listeners: List[Callable[[], None]] = []

    def add_listener(self, callback: Callable[[], None]):
        self._listeners.append(callback)

    def _notify(self):
        for callback in list(self._listeners):
            callback()

    def _require_session(self) -> FormSession:
        if self.session is None:
            raise RuntimeError("Shift form is not open")
        return self.session

    # Lifecycle
    def open(self, is_edit: bool, selected_shift_id: Optional[str] = None,
             target_date: Optional[str] = None) -> FormSession:
        """
        Open the form in add or edit mode.

        Args:
            is_edit: Open for editing the shift identified by selected_shift_id
            selected_shift_id: Id of the shift being edited
            target_date: Date for a new shift; defaults to the store's selected date
        """
        if self.session is not None:
            self._discard()

        target_date = target_date or self.data_manager.get_selected_date()
        existing = self.data_manager.get_shift_by_id(selected_shift_id) if is_edit and selected_shift_id else None

        if existing:
            draft = existing
            logger.info(f"Opening shift form to edit {existing.id}")
        else:
            if is_edit:
                logger.warning(f"Shift {selected_shift_id} not found, opening a new draft instead")
            draft = new_draft(target_date)

        self.session = FormSession(draft=draft, is_edit=existing is not None, opened_for_edit=is_edit)
        self.tasks = SessionTasks(self.host)
        if is_edit:
            self.ui_state.selected_shift_id = selected_shift_id
        self.ui_state.modal_open[EDIT_MODAL if is_edit else ADD_MODAL] = True

        self.sounds.play("notification")
        self._notify()
        return self.session

    def close(self):
        """Close via cancel, backdrop or success acknowledgement"""
        if self.session is None:
            return
        self.sounds.play("click")
        opened_for_edit = self.session.opened_for_edit
        self._discard()
        self.ui_state.modal_open[EDIT_MODAL if opened_for_edit else ADD_MODAL] = False
        if opened_for_edit:
            self.ui_state.selected_shift_id = None
        self._notify()

    def _discard(self):
        if self.tasks is not None:
            self.tasks.cancel_all()
        self.tasks = None
        self.session = None

    def acknowledge_success(self):
        self.close()

    # Input
    def change_field(self, field_name: str, value: str) -> Shift:
        session = self._require_session()
        self.sounds.play("click", 0.2)
        session.draft = apply_field_change(session.draft, field_name, value, self.data_manager)
        self._notify()
        return session.draft

    def select_registered_employee(self, name: str) -> Optional[Shift]:
        """Fill in an employee registered from the form; ignored once the form is closed"""
        if self.session is None:
            logger.info(f"Form closed before employee {name} was registered, not applying")
            return None
        return self.change_field("employee_name", name)

    def set_priority(self, is_priority: bool):
        self._require_session().is_priority = is_priority
        self._notify()

    # Navigation
    def next_step(self) -> bool:
        changed = self._require_session().steps.next_step()
        if changed:
            self.sounds.play("click")
            self._notify()
        return changed

    def previous_step(self) -> bool:
        changed = self._require_session().steps.previous_step()
        if changed:
            self.sounds.play("click")
            self._notify()
        return changed

    def handle_key(self, key: str) -> bool:
        """Returns True when the key was consumed as an advance to the next step"""
        session = self._require_session()
        if key in CONFIRM_KEYS and not session.steps.is_terminal:
            self.next_step()
            return True
        return False

    # Validation and submission
    def dismiss_validation(self):
        self._require_session().validation = None
        self._notify()

    def submit(self) -> Optional[ValidationOutcome]:
        """
        Submit from the current step.

        Before the terminal step this only advances the form and returns
        None. On the terminal step the draft is validated and, if valid,
        handed to the submission pipeline; the outcome is returned.
        """
        session = self._require_session()

        if not session.steps.is_terminal:
            self.next_step()
            return None

        if session.is_submitting:
            logger.info("Submit ignored, submission already in progress")
            return None

        if session.show_success:
            logger.info("Submit ignored, shift already saved")
            return None

        outcome = validate_draft(session.draft, self.data_manager)
        if not outcome.is_valid:
            logger.info(f"Shift validation failed: {outcome.message}")
            session.validation = outcome
            self.sounds.play("error")
            self._notify()
            return outcome

        session.validation = None
        self.pipeline.start(session, self.tasks, on_finished=lambda success: self._notify())
        self._notify()
        return outcome
