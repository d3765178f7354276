"""
Notifications for Shift Form Workflow

Notification preferences, the in-app notification queue with per-category
gating, shift reminders and a small process-wide event bus.
"""

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Any

from .data_manager import Shift

logger = logging.getLogger(__name__)

TUTORIAL_PROMPT_EVENT = "showTutorialPrompt"

LEAD_TIME_HOURS = {
    "1hour": 1,
    "3hours": 3,
    "12hours": 12,
    "24hours": 24,
}


def _default_types() -> Dict[str, bool]:
    return {
        "shifts": True,
        "scheduleChanges": True,
        "reminders": True,
        "timeOff": True,
        "publication": True,
    }


@dataclass
class NotificationPreferences:
    """User-facing notification settings"""
    enabled: bool = True
    sound_enabled: bool = True
    sound_volume: float = 0.7
    types: Dict[str, bool] = field(default_factory=_default_types)
    reminder_lead_time: str = "1hour"

    def is_category_enabled(self, category: Optional[str]) -> bool:
        # Categories without an explicit switch (e.g. "general") are always on
        if not category:
            return True
        return self.types.get(category) is not False

    def allows(self, category: str) -> bool:
        return self.enabled and self.is_category_enabled(category)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "sound": {"enabled": self.sound_enabled, "volume": self.sound_volume},
            "types": dict(self.types),
            "timing": {"reminderLeadTime": self.reminder_lead_time}
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NotificationPreferences':
        sound = data.get("sound", {})
        types = _default_types()
        types.update(data.get("types", {}))
        return cls(
            enabled=data.get("enabled", True),
            sound_enabled=sound.get("enabled", True),
            sound_volume=sound.get("volume", 0.7),
            types=types,
            reminder_lead_time=data.get("timing", {}).get("reminderLeadTime", "1hour")
        )


@dataclass
class Notification:
    id: int
    message: str
    severity: str  # "success", "info", "warning" or "error"
    category: Optional[str] = None
    read: bool = False
    created_at: datetime = field(default_factory=datetime.now)


class NotificationCenter:
    """Notification sink; enqueue is fire-and-forget for callers"""

    def __init__(self, preferences: Optional[NotificationPreferences] = None):
        self.preferences = preferences or NotificationPreferences()
        self.notifications: List[Notification] = []
        self._ids = itertools.count(1)
        self._subscribers: List[Callable[[Notification], None]] = []

    def subscribe(self, callback: Callable[[Notification], None]):
        self._subscribers.append(callback)

    def enqueue(self, message: str, severity: str = "info",
                category: Optional[str] = None) -> Optional[Notification]:
        """Add a notification unless its category has been switched off"""
        if not self.preferences.is_category_enabled(category):
            logger.debug(f"Dropping notification in disabled category '{category}': {message}")
            return None

        notification = Notification(next(self._ids), message, severity, category)
        self.notifications.append(notification)
        logger.info(f"Notification [{severity}/{category}]: {message}")

        for callback in list(self._subscribers):
            try:
                callback(notification)
            except Exception as e:
                logger.error(f"Notification subscriber failed: {e}", exc_info=True)
        return notification

    def remove(self, notification_id: int) -> bool:
        before = len(self.notifications)
        self.notifications = [n for n in self.notifications if n.id != notification_id]
        return len(self.notifications) != before

    def mark_all_read(self):
        for notification in self.notifications:
            notification.read = True

    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.read)

    def clear(self):
        self.notifications.clear()


def combine_date_and_time(date_str: str, time_str: str) -> datetime:
    """Local datetime from "YYYY-MM-DD" and either "HH:MM" or "h:mm AM/PM" """
    year, month, day = (int(part) for part in date_str.split("-"))

    if "AM" in time_str or "PM" in time_str:
        clock, period = time_str.split(" ")
        hours, minutes = (int(part) for part in clock.split(":"))
        if period == "PM" and hours != 12:
            hours += 12
        if period == "AM" and hours == 12:
            hours = 0
    else:
        hours, minutes = (int(part) for part in time_str.split(":"))

    return datetime(year, month, day, hours, minutes)


class ReminderScheduler:
    """Sends a one-time reminder for shifts starting within the lead time"""

    def __init__(self, notifications: NotificationCenter,
                 now: Callable[[], datetime] = datetime.now):
        self.notifications = notifications
        self.now = now
        self.processed_reminders = set()

    @property
    def preferences(self) -> NotificationPreferences:
        return self.notifications.preferences

    def check_shift_reminder(self, shift: Shift) -> bool:
        """Returns True when a reminder was sent"""
        if not self.preferences.allows("reminders"):
            logger.debug("Notifications or reminders are disabled in preferences")
            return False

        reminder_id = f"reminder-{shift.id}"
        if reminder_id in self.processed_reminders:
            logger.debug(f"Skipping shift {shift.id} - reminder already sent")
            return False

        if not self.should_send_reminder(shift):
            logger.debug(f"No reminder needed yet for shift {shift.id}")
            return False

        message = (f"Reminder: You have a shift as {shift.role} starting at "
                   f"{shift.start_time} ({self.format_time_from_now(shift)})")
        self.notifications.enqueue(message, "info", "reminders")
        self.processed_reminders.add(reminder_id)
        return True

    def should_send_reminder(self, shift: Shift) -> bool:
        try:
            start = combine_date_and_time(shift.date, shift.start_time)
        except ValueError as e:
            logger.warning(f"Cannot compute start of shift {shift.id}: {e}")
            return False

        hours_diff = (start - self.now()).total_seconds() / 3600
        lead_hours = LEAD_TIME_HOURS.get(self.preferences.reminder_lead_time, 0)
        return 0 < hours_diff <= lead_hours

    def format_time_from_now(self, shift: Shift) -> str:
        start = combine_date_and_time(shift.date, shift.start_time)
        minutes_diff = int((start - self.now()).total_seconds() // 60)

        if minutes_diff < 60:
            return f"in {minutes_diff} minutes"

        hours, minutes = divmod(minutes_diff, 60)
        text = f"in {hours} hour{'s' if hours > 1 else ''}"
        if minutes:
            text += f" and {minutes} minute{'s' if minutes > 1 else ''}"
        return text

    def reset_processed_reminders(self):
        logger.info(f"Resetting {len(self.processed_reminders)} processed reminder(s)")
        self.processed_reminders.clear()


class EventBus:
    """Process-wide named signals"""

    def __init__(self):
        self._listeners: Dict[str, List[Callable[[], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[], None]) -> Callable[[], None]:
        self._listeners.setdefault(event, []).append(callback)

        def unsubscribe():
            listeners = self._listeners.get(event, [])
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def emit(self, event: str):
        logger.info(f"Broadcasting '{event}'")
        for callback in list(self._listeners.get(event, [])):
            try:
                callback()
            except Exception as e:
                logger.error(f"Listener for '{event}' failed: {e}", exc_info=True)
