"""
Submission Pipeline for Shift Form Workflow

Persists a validated draft after a simulated latency and dispatches the
ordered side effects: completion cue, success presentation, notifications,
first-shift onboarding nudge and reminder check.
"""

import logging
import uuid
from dataclasses import replace
from typing import Callable, Optional, TYPE_CHECKING

from .data_manager import DataManager, Shift, role_color
from .form_logic import format_time_range
from .notifications import NotificationCenter, ReminderScheduler, EventBus, TUTORIAL_PROMPT_EVENT
from .sound import SoundEffects
from .tasks import SessionTasks

if TYPE_CHECKING:
    from .shift_form import FormSession

logger = logging.getLogger(__name__)

SUBMIT_DELAY_MS = 800
ONBOARDING_DELAY_MS = 1500

MSG_SHIFT_ADDED = "Shift added successfully"
MSG_SHIFT_UPDATED = "Shift updated successfully"
MSG_SAVE_FAILED = "There was an error saving the shift"
MSG_ONBOARDING = "Ready to explore advanced features? You've completed the basics!"


def new_shift_id() -> str:
    return uuid.uuid4().hex


def normalize_for_persistence(draft: Shift, is_edit: bool) -> Shift:
    """
    Prepare a draft for the store.

    Whitespace is stripped from the date, creations get a fresh id while
    edits keep theirs, the display range is rebuilt from start/end and a
    missing color falls back to the role color.
    """
    return replace(
        draft,
        date="".join(draft.date.split()),
        id=draft.id if is_edit else new_shift_id(),
        time_range=format_time_range(draft.start_time, draft.end_time),
        color=draft.color or role_color(draft.role)
    )


class SubmissionPipeline:
    """Runs one submission per call to start() for a given form session"""

    def __init__(self, data_manager: DataManager, notifications: NotificationCenter,
                 sounds: SoundEffects, reminders: ReminderScheduler, events: EventBus,
                 submit_delay_ms: int = SUBMIT_DELAY_MS,
                 onboarding_delay_ms: int = ONBOARDING_DELAY_MS):
        self.data_manager = data_manager
        self.notifications = notifications
        self.sounds = sounds
        self.reminders = reminders
        self.events = events
        self.submit_delay_ms = submit_delay_ms
        self.onboarding_delay_ms = onboarding_delay_ms

    def start(self, session: 'FormSession', tasks: SessionTasks,
              on_finished: Optional[Callable[[bool], None]] = None) -> bool:
        """
        Begin submitting an already validated draft.

        Returns False when a submission is already in flight or when
        normalization fails. on_finished receives True after a successful
        commit and False after a failed one.
        """
        if session.is_submitting:
            logger.info("Ignoring duplicate submit while a submission is in flight")
            return False

        session.is_submitting = True
        logger.info(f"Submitting shift draft {session.draft.id} (edit={session.is_edit})")

        try:
            record = normalize_for_persistence(session.draft, session.is_edit)
        except Exception as e:
            self._handle_failure(session, e)
            if on_finished:
                on_finished(False)
            return False

        tasks.schedule(
            self.submit_delay_ms,
            lambda: self._commit(session, tasks, record, on_finished),
            name="commit"
        )
        return True

    def _commit(self, session: 'FormSession', tasks: SessionTasks, record: Shift,
                on_finished: Optional[Callable[[bool], None]]):
        try:
            is_first_shift = not session.is_edit and not self.data_manager.has_shifts()
            if session.is_edit:
                self.data_manager.update_shift(record)
            else:
                self.data_manager.add_shift(record)
        except Exception as e:
            self._handle_failure(session, e)
            if on_finished:
                on_finished(False)
            return

        session.draft = record
        self.sounds.play("complete")
        session.show_success = True

        prefs = self.notifications.preferences
        if prefs.allows("shifts"):
            self.notifications.enqueue(
                MSG_SHIFT_UPDATED if session.is_edit else MSG_SHIFT_ADDED,
                "success",
                "shifts"
            )
            if is_first_shift:
                tasks.schedule(self.onboarding_delay_ms, self._prompt_onboarding, name="onboarding")

        try:
            self.reminders.check_shift_reminder(record)
        except Exception as e:
            logger.error(f"Reminder check failed for shift {record.id}: {e}", exc_info=True)

        session.is_submitting = False
        logger.info(f"Shift {record.id} saved")
        if on_finished:
            on_finished(True)

    def _prompt_onboarding(self):
        self.notifications.enqueue(MSG_ONBOARDING, "info", "general")
        self.events.emit(TUTORIAL_PROMPT_EVENT)

    def _handle_failure(self, session: 'FormSession', error: Exception):
        logger.error(f"Error submitting shift: {error}", exc_info=True)
        session.is_submitting = False
        session.show_success = False
        if self.notifications.preferences.allows("shifts"):
            self.notifications.enqueue(MSG_SAVE_FAILED, "error", "shifts")
        self.sounds.play("error")
