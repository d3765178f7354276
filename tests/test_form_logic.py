"""
Tests for the pure form rules: time formatting, field cascade,
roster validation and step navigation.
"""

import pytest

from shift_workflow.data_manager import Shift
from shift_workflow.form_logic import (
    FormStep, StepMachine, ValidationKind,
    allowed_roles, apply_field_change, format_time, format_time_range, validate_draft
)
from shift_workflow.shift_form import new_draft


@pytest.fixture
def draft():
    return new_draft("2025-08-15")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("00:00", "12:00 AM"),
        ("13:05", "1:05 PM"),
        ("12:30", "12:30 PM"),
        ("09:00", "9:00 AM"),
        ("23:59", "11:59 PM"),
        ("9:15 AM", "9:15 AM"),
        ("12:00 PM", "12:00 PM"),
    ],
)
def test_format_time(value, expected):
    assert format_time(value) == expected


@pytest.mark.parametrize("value", ["", "noon", "25:00", "7", "10:5x"])
def test_format_time_unparseable_is_echoed(value):
    """Bad input must degrade to an echo, never raise."""
    assert format_time(value) == value


def test_format_time_is_idempotent():
    once = format_time("18:45")
    assert format_time(once) == once == "6:45 PM"


def test_new_draft_template(draft):
    assert draft.id
    assert draft.role == "Front Desk"
    assert draft.color == "bg-blue-500"
    assert draft.status == "Confirmed"
    assert draft.time_range == "9:00 AM - 5:00 PM"
    assert draft.date == "2025-08-15"


@pytest.mark.parametrize(
    "field_name, value",
    [("start_time", "07:30"), ("end_time", "00:15"), ("start_time", "bad"), ("end_time", "3:00 PM")],
)
def test_time_change_keeps_range_in_sync(draft, data_manager, field_name, value):
    updated = apply_field_change(draft, field_name, value, data_manager)
    assert getattr(updated, field_name) == value
    assert updated.time_range == format_time(updated.start_time) + " - " + format_time(updated.end_time)


def test_known_employee_overwrites_role_and_color(draft, data_manager):
    """Picking a roster employee normalizes the role even after a manual choice."""
    draft = apply_field_change(draft, "role", "Cook", data_manager)
    assert draft.color == "bg-red-500"

    updated = apply_field_change(draft, "employee_name", "Bob", data_manager)
    assert updated.employee_name == "Bob"
    assert updated.role == "Server"
    assert updated.color == "bg-purple-500"


def test_unknown_employee_only_updates_name(draft, data_manager):
    draft = apply_field_change(draft, "role", "Manager", data_manager)
    updated = apply_field_change(draft, "employee_name", "Ali", data_manager)
    assert updated.employee_name == "Ali"
    assert updated.role == "Manager"
    assert updated.color == "bg-yellow-500"


def test_role_change_leaves_name(draft, data_manager):
    draft = apply_field_change(draft, "employee_name", "Alice", data_manager)
    updated = apply_field_change(draft, "role", "Server", data_manager)
    assert updated.employee_name == "Alice"
    assert updated.role == "Server"
    assert updated.color == "bg-purple-500"


def test_other_fields_overwrite_without_side_effects(draft, data_manager):
    updated = apply_field_change(draft, "status", "Pending", data_manager)
    assert updated.status == "Pending"
    assert updated.time_range == draft.time_range
    assert updated.role == draft.role


def test_apply_field_change_does_not_mutate_input(draft, data_manager):
    before = draft.to_dict()
    apply_field_change(draft, "start_time", "10:00", data_manager)
    assert draft.to_dict() == before


def test_unknown_field_rejected(draft, data_manager):
    with pytest.raises(ValueError):
        apply_field_change(draft, "priority", "yes", data_manager)


def test_allowed_roles(data_manager):
    assert allowed_roles("Alice", data_manager) == ["Manager"]
    assert len(allowed_roles("Nobody", data_manager)) == 4
    assert len(allowed_roles("", data_manager)) == 4


def _shift(name, role):
    return Shift(id="x", employee_name=name, role=role, time_range="", start_time="09:00",
                 end_time="17:00", status="Confirmed", date="2025-08-15", color="")


def test_validation_employee_not_found(data_manager):
    outcome = validate_draft(_shift("Zed", "Manager"), data_manager)
    assert outcome.kind is ValidationKind.EMPLOYEE_NOT_FOUND
    assert outcome.severity == "error"
    assert '"Zed"' in outcome.message
    assert "Employees tab" in outcome.message


def test_validation_employee_check_takes_precedence(data_manager):
    """A missing employee is reported even when the role would also mismatch."""
    outcome = validate_draft(_shift("", "Cook"), data_manager)
    assert outcome.kind is ValidationKind.EMPLOYEE_NOT_FOUND


def test_validation_role_mismatch(data_manager):
    outcome = validate_draft(_shift("Bob", "Manager"), data_manager)
    assert outcome.kind is ValidationKind.ROLE_MISMATCH
    assert outcome.severity == "warning"
    assert outcome.message == "Role mismatch: Bob is a Server, not a Manager."
    assert not outcome.is_valid


def test_validation_valid(data_manager):
    outcome = validate_draft(_shift("Bob", "Server"), data_manager)
    assert outcome.is_valid


def test_step_machine_transitions():
    steps = StepMachine()
    assert steps.current is FormStep.BASIC_INFO
    assert not steps.previous_step()
    assert steps.current is FormStep.BASIC_INFO

    assert steps.next_step()
    assert steps.is_terminal
    assert not steps.next_step()
    assert steps.current is FormStep.DETAILS

    assert steps.previous_step()
    assert steps.current is FormStep.BASIC_INFO

    steps.next_step()
    steps.reset()
    assert steps.current is FormStep.BASIC_INFO


def test_format_time_range():
    assert format_time_range("08:00", "16:30") == "8:00 AM - 4:30 PM"
