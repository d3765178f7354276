"""
Form Logic for Shift Form Workflow

Pure rules behind the shift form: 12-hour time formatting, the field
cascade applied on every input change, roster cross-validation and the
two-step form state machine.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum, IntEnum
from typing import List, Optional
import logging

from .data_manager import DataManager, Shift, ROLE_OPTIONS, role_color

logger = logging.getLogger(__name__)

CONFIRM_KEYS = ("Return", "KP_Enter", "Enter")

_SHIFT_FIELDS = {f.name for f in fields(Shift)}


def format_time(value: str) -> str:
    """
    Convert a 24-hour "HH:MM" value to "h:mm AM/PM".

    Values already carrying AM/PM are returned unchanged. Values that cannot
    be parsed are echoed back as-is.
    """
    if "AM" in value or "PM" in value:
        return value

    try:
        hours, minutes = value.split(":")
        hours_num = int(hours)
        if not 0 <= hours_num <= 23 or len(minutes) != 2 or not minutes.isdigit():
            raise ValueError(f"out of range: {value!r}")
    except (ValueError, AttributeError) as e:
        logger.warning(f"Error formatting time {value!r}: {e}")
        return value

    period = "PM" if hours_num >= 12 else "AM"
    hours12 = hours_num % 12 or 12
    return f"{hours12}:{minutes} {period}"


def format_time_range(start_time: str, end_time: str) -> str:
    return f"{format_time(start_time)} - {format_time(end_time)}"


def apply_field_change(draft: Shift, field_name: str, value: str, roster: DataManager) -> Shift:
    """
    Compute the next draft after a single field change.

    Args:
        draft: Current draft, left untouched
        field_name: Shift attribute being edited
        value: Raw input value
        roster: Employee lookup used for the employee -> role sync

    Picking a known employee always overwrites role and color with the
    employee's own; an unknown name only updates the name. Role changes
    recompute the color, time changes recompute the display range.
    """
    if field_name not in _SHIFT_FIELDS:
        raise ValueError(f"Unknown shift field: {field_name}")

    if field_name == "employee_name":
        employee = roster.get_employee_by_name(value)
        if employee:
            return replace(draft, employee_name=value, role=employee.role,
                           color=role_color(employee.role))
        return replace(draft, employee_name=value)

    if field_name == "role":
        return replace(draft, role=value, color=role_color(value))

    if field_name in ("start_time", "end_time"):
        updated = replace(draft, **{field_name: value})
        return replace(updated, time_range=format_time_range(updated.start_time, updated.end_time))

    return replace(draft, **{field_name: value})


def allowed_roles(employee_name: str, roster: DataManager) -> List[str]:
    """Roles selectable for the given name: only the roster role once the employee is known"""
    employee = roster.get_employee_by_name(employee_name) if employee_name else None
    if employee:
        return [employee.role]
    return list(ROLE_OPTIONS)


class ValidationKind(Enum):
    VALID = "valid"
    EMPLOYEE_NOT_FOUND = "employee_not_found"
    ROLE_MISMATCH = "role_mismatch"


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of cross-checking a draft against the roster"""
    kind: ValidationKind
    message: str = ""
    severity: Optional[str] = None  # "error" or "warning"

    @property
    def is_valid(self) -> bool:
        return self.kind is ValidationKind.VALID


VALID = ValidationOutcome(ValidationKind.VALID)


def validate_draft(draft: Shift, roster: DataManager) -> ValidationOutcome:
    """Employee existence is checked first; a missing employee hides any role mismatch"""
    employee = roster.get_employee_by_name(draft.employee_name)
    if employee is None:
        return ValidationOutcome(
            ValidationKind.EMPLOYEE_NOT_FOUND,
            f'Employee "{draft.employee_name}" does not exist. '
            f'Please add them in the Employees tab first.',
            "error"
        )

    if employee.role != draft.role:
        return ValidationOutcome(
            ValidationKind.ROLE_MISMATCH,
            f"Role mismatch: {draft.employee_name} is a {employee.role}, not a {draft.role}.",
            "warning"
        )

    return VALID


class FormStep(IntEnum):
    BASIC_INFO = 1
    DETAILS = 2


STEP_LABELS = {FormStep.BASIC_INFO: "Basic Info", FormStep.DETAILS: "Details"}


class StepMachine:
    """Two-step form navigation; invalid transitions are no-ops"""

    def __init__(self):
        self.current = FormStep.BASIC_INFO

    @property
    def is_terminal(self) -> bool:
        return self.current is FormStep.DETAILS

    def next_step(self) -> bool:
        if self.current is FormStep.BASIC_INFO:
            self.current = FormStep.DETAILS
            return True
        return False

    def previous_step(self) -> bool:
        if self.current is FormStep.DETAILS:
            self.current = FormStep.BASIC_INFO
            return True
        return False

    def reset(self):
        self.current = FormStep.BASIC_INFO
