import pytest
from datetime import datetime

from shift_workflow.data_manager import Shift
from shift_workflow.notifications import (
    NotificationCenter, NotificationPreferences, ReminderScheduler, EventBus, combine_date_and_time
)
from shift_workflow.sound import SoundEffects


NOW = datetime(2025, 8, 15, 8, 0)


def make_shift(start_time, date_str="2025-08-15", shift_id="s1"):
    return Shift(id=shift_id, employee_name="Alice", role="Manager", time_range="",
                 start_time=start_time, end_time="17:00", status="Confirmed",
                 date=date_str, color="bg-yellow-500")


@pytest.fixture
def center():
    return NotificationCenter()


@pytest.fixture
def reminders(center):
    return ReminderScheduler(center, now=lambda: NOW)


def test_enqueue_respects_disabled_category(center):
    center.preferences.types["shifts"] = False
    assert center.enqueue("Shift added", "success", "shifts") is None
    assert center.enqueue("Welcome", "info", "general") is not None
    assert [n.message for n in center.notifications] == ["Welcome"]


def test_notification_bookkeeping(center):
    received = []
    center.subscribe(received.append)
    first = center.enqueue("one", "info")
    center.enqueue("two", "error", "shifts")
    assert [n.message for n in received] == ["one", "two"]
    assert center.unread_count() == 2

    center.mark_all_read()
    assert center.unread_count() == 0
    assert center.remove(first.id)
    assert not center.remove(first.id)
    center.clear()
    assert center.notifications == []


def test_failing_subscriber_does_not_block_enqueue(center):
    def broken(notification):
        raise RuntimeError("listener down")

    center.subscribe(broken)
    assert center.enqueue("still queued") is not None
    assert len(center.notifications) == 1


def test_preferences_round_trip_from_stored_dict():
    prefs = NotificationPreferences.from_dict({
        "enabled": True,
        "types": {"reminders": False},
        "timing": {"reminderLeadTime": "3hours"},
    })
    assert not prefs.allows("reminders")
    assert prefs.allows("shifts")
    assert prefs.reminder_lead_time == "3hours"
    assert prefs.to_dict()["types"]["reminders"] is False


@pytest.mark.parametrize(
    "time_str, expected",
    [("08:30", datetime(2025, 8, 15, 8, 30)),
     ("12:15 AM", datetime(2025, 8, 15, 0, 15)),
     ("12:15 PM", datetime(2025, 8, 15, 12, 15)),
     ("7:05 PM", datetime(2025, 8, 15, 19, 5))],
)
def test_combine_date_and_time(time_str, expected):
    assert combine_date_and_time("2025-08-15", time_str) == expected


def test_reminder_sent_within_lead_time(center, reminders):
    assert reminders.check_shift_reminder(make_shift("08:45"))
    assert center.notifications[0].message == (
        "Reminder: You have a shift as Manager starting at 08:45 (in 45 minutes)"
    )
    assert center.notifications[0].category == "reminders"


def test_reminder_sent_only_once(center, reminders):
    shift = make_shift("08:45")
    assert reminders.check_shift_reminder(shift)
    assert not reminders.check_shift_reminder(shift)
    reminders.reset_processed_reminders()
    assert reminders.check_shift_reminder(shift)
    assert len(center.notifications) == 2


@pytest.mark.parametrize("start_time", ["07:00", "08:00", "09:30", "23:00"])
def test_reminder_not_sent_outside_window(center, reminders, start_time):
    assert not reminders.check_shift_reminder(make_shift(start_time))
    assert center.notifications == []


def test_reminder_lead_time_preference(center, reminders):
    center.preferences.reminder_lead_time = "3hours"
    assert reminders.check_shift_reminder(make_shift("10:30"))
    assert center.notifications[0].message.endswith("(in 2 hours and 30 minutes)")


def test_reminder_disabled(center, reminders):
    center.preferences.types["reminders"] = False
    assert not reminders.check_shift_reminder(make_shift("08:45"))


def test_reminder_with_bad_date_is_skipped(center, reminders):
    assert not reminders.check_shift_reminder(make_shift("08:45", date_str="someday"))


def test_format_time_from_now(reminders):
    assert reminders.format_time_from_now(make_shift("09:00")) == "in 1 hour"
    assert reminders.format_time_from_now(make_shift("10:01")) == "in 2 hours and 1 minute"


def test_event_bus_subscribe_and_unsubscribe():
    bus = EventBus()
    calls = []
    unsubscribe = bus.subscribe("showTutorialPrompt", lambda: calls.append("a"))
    bus.subscribe("showTutorialPrompt", lambda: 1 / 0)
    bus.subscribe("showTutorialPrompt", lambda: calls.append("b"))

    bus.emit("showTutorialPrompt")
    assert calls == ["a", "b"]

    unsubscribe()
    bus.emit("showTutorialPrompt")
    assert calls == ["a", "b", "b"]


def test_sound_backend_failure_is_contained():
    def broken_backend(cue, volume):
        raise OSError("no audio device")

    sounds = SoundEffects(backend=broken_backend)
    sounds.play("complete")
    assert list(sounds.played) == [("complete", 0.5)]


def test_sound_disabled_and_unknown_cue():
    calls = []
    sounds = SoundEffects(backend=lambda cue, volume: calls.append(cue))
    sounds.play("fanfare")
    sounds.toggle()
    sounds.play("click")
    assert calls == []
