"""
SQLite storage: Portal employee records and API request logs.
"""

import sqlite3
from datetime import date
from pathlib import Path
from typing import Any

from core.config import DB_PATH
from core.errors import InvalidInput
from models.timesheets import Employee

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS employees (
        id TEXT PRIMARY KEY,
        employee_number INTEGER NOT NULL,
        hire_date TEXT,
        work_status REAL NOT NULL DEFAULT 100,
        cell_phone TEXT,
        sms_opted_out INTEGER NOT NULL DEFAULT 0,
        is_cyk INTEGER NOT NULL DEFAULT 0,
        cyk_aoid TEXT,
        unanet_person_key TEXT,
        email TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT UNIQUE NOT NULL,
        timestamp TEXT NOT NULL,
        endpoint TEXT NOT NULL,
        method TEXT NOT NULL,
        client_ip TEXT,
        system TEXT,
        employee_number INTEGER,
        status_code INTEGER NOT NULL,
        error_code TEXT,
        error_message TEXT,
        processing_time_ms INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_request_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT NOT NULL,
        detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'vendor_error', 'warning')),
        message TEXT NOT NULL,
        FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_employees_number ON employees(employee_number)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_status ON api_requests(status_code)",
]

# Employee fields callers may update, mapped to their column
UPDATABLE_FIELDS = {
    "hire_date": "hire_date",
    "full_time_percentage": "work_status",
    "phone_number": "cell_phone",
    "is_opted_out": "sms_opted_out",
    "is_cyk": "is_cyk",
    "cyk_aoid": "cyk_aoid",
    "unanet_person_key": "unanet_person_key",
    "email": "email",
}

EMPLOYEE_COLUMNS = (
    "id, employee_number, hire_date, work_status, cell_phone, sms_opted_out, "
    "is_cyk, cyk_aoid, unanet_person_key, email"
)


def get_connection(db_path: Path | str = DB_PATH) -> sqlite3.Connection:
    """Get a database connection."""
    return sqlite3.connect(db_path)


def create_tables(conn: sqlite3.Connection):
    """Create all tables and indexes if they don't exist."""
    conn.execute("PRAGMA foreign_keys = ON")
    for statement in SCHEMA:
        conn.execute(statement)
    conn.commit()


def _row_to_employee(row: tuple) -> Employee:
    from services.notifications import sms_phone_number

    (emp_id, number, hire_date, work_status, phone, opted_out, is_cyk, aoid, person_key, email) = row
    return Employee(
        id=emp_id,
        employee_number=int(number),
        hire_date=date.fromisoformat(hire_date) if hire_date else None,
        full_time_percentage=float(work_status or 0),
        phone_number=sms_phone_number(phone),
        is_opted_out=bool(opted_out),
        is_cyk=bool(is_cyk),
        cyk_aoid=aoid,
        unanet_person_key=person_key,
        email=email,
    )


class EmployeeStore:
    """Portal employee records keyed by employee number."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, employee_number: int) -> Employee:
        """
        Get the single employee with this employee number.

        Raises:
            InvalidInput: if zero or several records match
        """
        cursor = self.conn.execute(
            f"SELECT {EMPLOYEE_COLUMNS} FROM employees WHERE employee_number = ?",
            (int(employee_number),),
        )
        rows = cursor.fetchall()
        if len(rows) != 1:
            raise InvalidInput(
                f"Could not distinguish Portal employee {employee_number} ({len(rows)} options)."
            )
        return _row_to_employee(rows[0])

    def active_employees(self) -> list[Employee]:
        """All employees with a non-zero work status, ordered by employee number."""
        cursor = self.conn.execute(
            f"SELECT {EMPLOYEE_COLUMNS} FROM employees WHERE work_status > 0 ORDER BY employee_number"
        )
        return [_row_to_employee(row) for row in cursor.fetchall()]

    def add(self, employee: Employee, cell_phone: str | None = None):
        """Insert or replace an employee record."""
        self.conn.execute(
            f"INSERT OR REPLACE INTO employees ({EMPLOYEE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                employee.id,
                employee.employee_number,
                employee.hire_date.isoformat() if employee.hire_date else None,
                employee.full_time_percentage,
                cell_phone,
                int(employee.is_opted_out),
                int(employee.is_cyk),
                employee.cyk_aoid,
                employee.unanet_person_key,
                employee.email,
            ),
        )
        self.conn.commit()

    def update(self, employee_id: str, field: str, value: Any):
        """
        Set one field on an employee record.

        Raises:
            InvalidInput: for unknown fields or employee ids
        """
        column = UPDATABLE_FIELDS.get(field)
        if column is None:
            raise InvalidInput(f"Employee field '{field}' cannot be updated")
        if isinstance(value, date):
            value = value.isoformat()
        elif isinstance(value, bool):
            value = int(value)

        cursor = self.conn.execute(
            f"UPDATE employees SET {column} = ? WHERE id = ?", (value, employee_id)
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            raise InvalidInput(f"No employee with id '{employee_id}'")

    def mark_opted_out(self, employee_id: str):
        self.update(employee_id, "is_opted_out", True)
