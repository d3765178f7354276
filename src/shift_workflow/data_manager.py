"""
Data Manager for Shift Form Workflow

Holds the employee roster, the shift store and application settings in
memory, and defines the record types shared by the form workflow.
"""

import copy
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, List, Optional, Any

logger = logging.getLogger(__name__)


class DataManagerError(Exception):
    """Base exception for DataManager operations"""
    pass


class ShiftNotFoundError(DataManagerError):
    """Raised when a shift id is not present in the store"""
    pass


class DataValidationError(DataManagerError):
    """Raised when a record cannot be stored as given"""
    pass


# Role catalogue: {role: color token}. The first entry is the default role.
ROLE_OPTIONS: Dict[str, str] = {
    "Front Desk": "bg-blue-500",
    "Server": "bg-purple-500",
    "Manager": "bg-yellow-500",
    "Cook": "bg-red-500",
}
DEFAULT_ROLE = next(iter(ROLE_OPTIONS))
FALLBACK_COLOR = "bg-blue-500"

STATUS_OPTIONS = ["Confirmed", "Pending", "Canceled"]
DEFAULT_STATUS = STATUS_OPTIONS[0]

APP_VERSION = "1.0.0"


def role_color(role: str) -> str:
    """Color token for a role, falling back to blue for unknown roles"""
    return ROLE_OPTIONS.get(role, FALLBACK_COLOR)


@dataclass
class Employee:
    """Roster entry; the name is the match key used by the shift form"""
    id: int
    name: str
    role: str
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Employee':
        role = data.get("role", DEFAULT_ROLE)
        return cls(
            id=data["id"],
            name=data["name"],
            role=role,
            color=data.get("color") or role_color(role)
        )


@dataclass
class Shift:
    """A single shift record, also used as the in-progress form draft"""
    id: str
    employee_name: str
    role: str
    time_range: str
    start_time: str
    end_time: str
    status: str
    date: str
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employeeName": self.employee_name,
            "role": self.role,
            "timeRange": self.time_range,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "status": self.status,
            "date": self.date,
            "color": self.color
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Shift':
        return cls(
            id=str(data.get("id", "")),
            employee_name=data.get("employeeName", ""),
            role=data.get("role", DEFAULT_ROLE),
            time_range=data.get("timeRange", ""),
            start_time=data.get("startTime", ""),
            end_time=data.get("endTime", ""),
            status=data.get("status", DEFAULT_STATUS),
            date=data.get("date", ""),
            color=data.get("color", "")
        )


class DataManager:
    """In-memory roster and shift store with CRUD operations"""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = self._validate_and_migrate_data(copy.deepcopy(data) if data else {})

    def _validate_and_migrate_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Fill in any missing sections with defaults"""
        default_data = self._create_default_data()

        for key in default_data:
            if key not in data:
                data[key] = default_data[key]

        for key, value in default_data["settings"].items():
            data["settings"].setdefault(key, value)

        # Older records may lack a color token
        for emp in data["employees"]:
            if not emp.get("color"):
                emp["color"] = role_color(emp.get("role", DEFAULT_ROLE))

        return data

    def _create_default_data(self) -> Dict[str, Any]:
        return {
            "settings": {
                "appVersion": APP_VERSION,
                "submitDelayMs": 800,
                "onboardingDelayMs": 1500
            },
            "employees": [],
            "shifts": [],
            "selectedDate": datetime.now().strftime("%Y-%m-%d")
        }

    def export_data(self) -> Dict[str, Any]:
        """Deep copy of the current data, suitable for JSON serialization"""
        return copy.deepcopy(self.data)

    # Employee Management
    def get_employees(self) -> List[Employee]:
        return [Employee.from_dict(emp_data) for emp_data in self.data["employees"]]

    def get_employee_by_id(self, emp_id: int) -> Optional[Employee]:
        for emp_data in self.data["employees"]:
            if emp_data["id"] == emp_id:
                return Employee.from_dict(emp_data)
        return None

    def get_employee_by_name(self, name: str) -> Optional[Employee]:
        """Get employee by exact name match"""
        for emp_data in self.data["employees"]:
            if emp_data["name"] == name:
                return Employee.from_dict(emp_data)
        return None

    def add_employee(self, name: str, role: str = DEFAULT_ROLE, color: Optional[str] = None) -> Employee:
        """Add new employee to the roster"""
        if self.get_employee_by_name(name) is not None:
            raise DataValidationError(f"An employee with name '{name}' already exists")

        existing_ids = [emp["id"] for emp in self.data["employees"]]
        next_id = max(existing_ids, default=0) + 1

        employee = Employee(id=next_id, name=name, role=role, color=color or role_color(role))
        self.data["employees"].append(employee.to_dict())
        logger.info(f"Added employee '{name}' ({role}) with id {next_id}")
        return employee

    def delete_employee(self, emp_id: int) -> bool:
        employees = self.data["employees"]
        for i, emp_data in enumerate(employees):
            if emp_data["id"] == emp_id:
                del employees[i]
                logger.info(f"Deleted employee '{emp_data['name']}' (ID: {emp_id})")
                return True
        return False

    # Shift Store
    def get_shifts(self, date_str: Optional[str] = None) -> List[Shift]:
        """Get all shifts, or only those on the given date"""
        shifts = [Shift.from_dict(s) for s in self.data["shifts"]]
        if date_str is not None:
            shifts = [s for s in shifts if s.date == date_str]
        return shifts

    def get_shift_by_id(self, shift_id: str) -> Optional[Shift]:
        for shift_data in self.data["shifts"]:
            if shift_data["id"] == shift_id:
                return Shift.from_dict(shift_data)
        return None

    def has_shifts(self) -> bool:
        return bool(self.data["shifts"])

    def add_shift(self, shift: Shift) -> Shift:
        if not shift.id:
            raise DataValidationError("Shift id is required")
        if self.get_shift_by_id(shift.id) is not None:
            raise DataValidationError(f"A shift with id '{shift.id}' already exists")

        self.data["shifts"].append(shift.to_dict())
        logger.info(f"Added shift {shift.id} for {shift.employee_name} on {shift.date}")
        return shift

    def update_shift(self, shift: Shift) -> Shift:
        for i, shift_data in enumerate(self.data["shifts"]):
            if shift_data["id"] == shift.id:
                self.data["shifts"][i] = shift.to_dict()
                logger.info(f"Updated shift {shift.id}")
                return shift
        raise ShiftNotFoundError(f"Shift '{shift.id}' not found")

    def delete_shift(self, shift_id: str) -> bool:
        shifts = self.data["shifts"]
        for i, shift_data in enumerate(shifts):
            if shift_data["id"] == shift_id:
                del shifts[i]
                logger.info(f"Deleted shift {shift_id}")
                return True
        return False

    def get_selected_date(self) -> str:
        return self.data["selectedDate"]

    def set_selected_date(self, date_str: str):
        self.data["selectedDate"] = date_str

    # Settings
    def get_setting(self, key: str, default=None):
        return self.data["settings"].get(key, default)

    def set_setting(self, key: str, value):
        self.data["settings"][key] = value
