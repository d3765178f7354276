import pytest

from shift_workflow.data_manager import (
    DataManager, DataValidationError, Employee, Shift, ShiftNotFoundError, role_color
)


def make_shift(shift_id="s1", date_str="2025-08-15"):
    return Shift(id=shift_id, employee_name="Alice", role="Manager", time_range="9:00 AM - 5:00 PM",
                 start_time="09:00", end_time="17:00", status="Confirmed", date=date_str,
                 color="bg-yellow-500")


def test_roster_lookup(data_manager):
    alice = data_manager.get_employee_by_name("Alice")
    assert alice.role == "Manager"
    assert alice.color == "bg-yellow-500"
    assert data_manager.get_employee_by_name("alice") is None
    assert data_manager.get_employee_by_id(alice.id) == alice
    assert len(data_manager.get_employees()) == 3


def test_duplicate_employee_name_rejected(data_manager):
    with pytest.raises(DataValidationError):
        data_manager.add_employee("Alice", "Cook")


def test_delete_employee(data_manager):
    bob = data_manager.get_employee_by_name("Bob")
    assert data_manager.delete_employee(bob.id)
    assert data_manager.get_employee_by_name("Bob") is None
    assert not data_manager.delete_employee(bob.id)


def test_shift_crud(data_manager):
    assert not data_manager.has_shifts()
    data_manager.add_shift(make_shift())
    data_manager.add_shift(make_shift("s2", "2025-08-16"))
    assert data_manager.has_shifts()
    assert [s.id for s in data_manager.get_shifts("2025-08-15")] == ["s1"]

    updated = make_shift()
    updated.status = "Canceled"
    data_manager.update_shift(updated)
    assert data_manager.get_shift_by_id("s1").status == "Canceled"

    assert data_manager.delete_shift("s2")
    assert data_manager.get_shift_by_id("s2") is None


def test_add_shift_rejects_duplicate_or_missing_id(data_manager):
    data_manager.add_shift(make_shift())
    with pytest.raises(DataValidationError):
        data_manager.add_shift(make_shift())
    with pytest.raises(DataValidationError):
        data_manager.add_shift(make_shift(""))


def test_update_unknown_shift_raises(data_manager):
    with pytest.raises(ShiftNotFoundError):
        data_manager.update_shift(make_shift("nope"))


def test_seed_data_is_migrated_and_copied():
    seed = {
        "employees": [{"id": 7, "name": "Dana", "role": "Cook"}],
        "shifts": [make_shift().to_dict()],
    }
    dm = DataManager(seed)
    assert dm.get_employee_by_name("Dana").color == role_color("Cook")
    assert dm.get_setting("submitDelayMs") == 800
    assert dm.get_shift_by_id("s1").employee_name == "Alice"

    dm.add_shift(make_shift("s2"))
    assert len(seed["shifts"]) == 1


def test_shift_dict_uses_camel_case_keys():
    data = make_shift().to_dict()
    assert data["employeeName"] == "Alice"
    assert data["timeRange"] == "9:00 AM - 5:00 PM"
    assert Shift.from_dict(data) == make_shift()


def test_role_color_fallback():
    assert role_color("Server") == "bg-purple-500"
    assert role_color("Janitor") == "bg-blue-500"
    assert Employee.from_dict({"id": 1, "name": "X", "role": "Janitor"}).color == "bg-blue-500"
