"""Tests for the SQLite employee store."""

from datetime import date

import pytest

from core.errors import InvalidInput


def test_add_and_get_employee(store, make_employee):
    store.add(make_employee(is_cyk=True, cyk_aoid="G3ABC"), cell_phone="703-555-0100")

    employee = store.get(10066)

    assert employee.id == "emp-1"
    assert employee.hire_date == date(2020, 1, 6)
    assert employee.full_time_percentage == 100
    assert employee.phone_number == "+17035550100"
    assert employee.is_cyk
    assert employee.cyk_aoid == "G3ABC"


def test_get_unknown_employee(store):
    with pytest.raises(InvalidInput, match=r"\(0 options\)"):
        store.get(99999)


def test_get_ambiguous_employee(store, make_employee):
    store.add(make_employee(id="a"))
    store.add(make_employee(id="b"))

    with pytest.raises(InvalidInput, match=r"\(2 options\)"):
        store.get(10066)


def test_active_employees_excludes_zero_work_status(store, make_employee):
    store.add(make_employee(id="b", employee_number=2))
    store.add(make_employee(id="a", employee_number=1))
    store.add(make_employee(id="c", employee_number=3, full_time_percentage=0))

    assert [e.employee_number for e in store.active_employees()] == [1, 2]


def test_update_field(store, make_employee):
    store.add(make_employee())

    store.update("emp-1", "unanet_person_key", "1234")
    store.update("emp-1", "hire_date", date(2023, 7, 1))
    store.update("emp-1", "is_cyk", True)

    employee = store.get(10066)
    assert employee.unanet_person_key == "1234"
    assert employee.hire_date == date(2023, 7, 1)
    assert employee.is_cyk


def test_update_rejects_unknown_field(store, make_employee):
    store.add(make_employee())

    with pytest.raises(InvalidInput):
        store.update("emp-1", "employee_number", 1)


def test_update_rejects_unknown_employee(store):
    with pytest.raises(InvalidInput):
        store.update("missing", "email", "someone@example.com")


def test_log_request_writes_details(tmp_path):
    from api.logging import RequestLog, log_request
    from core.database import create_tables, get_connection

    db_path = tmp_path / "portal.db"
    conn = get_connection(db_path)
    create_tables(conn)

    log = RequestLog(endpoint="/v1/timesheets", method="POST", system="tsheets", employee_number=10066)
    log.finish(400)
    log.error_code = "INVALID_INPUT"
    log.details.append(("validation_error", "2024-03-31 > 2024-03-01"))
    log_request(log, db_path)

    row = conn.execute("SELECT endpoint, system, status_code, error_code FROM api_requests").fetchone()
    details = conn.execute("SELECT detail_type, message FROM api_request_details").fetchall()
    conn.close()
    assert row == ("/v1/timesheets", "tsheets", 400, "INVALID_INPUT")
    assert details == [("validation_error", "2024-03-31 > 2024-03-01")]
