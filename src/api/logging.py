"""SQLite request logging for API."""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import HTTPException

from core.config import DB_PATH
from core.database import get_connection

LOG_COLUMNS = (
    "request_id",
    "timestamp",
    "endpoint",
    "method",
    "client_ip",
    "system",
    "employee_number",
    "status_code",
    "error_code",
    "error_message",
    "processing_time_ms",
)


@dataclass
class RequestLog:
    """Captured request/response data for logging. Never holds credentials."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    system: str | None = None
    employee_number: int | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    details: list[tuple[str, str]] = field(default_factory=list)  # (type, message)
    started: float = field(default_factory=time.time, repr=False)

    def finish(self, status_code: int):
        self.status_code = status_code
        self.processing_time_ms = int((time.time() - self.started) * 1000)

    def record_http_error(self, error: HTTPException, detail_type: str = "validation_error"):
        """Copy a raised HTTPException (with a dict detail) into the log."""
        self.finish(error.status_code)
        if isinstance(error.detail, dict):
            self.error_code = error.detail.get("code")
            self.error_message = error.detail.get("error")
            for detail in error.detail.get("details", []):
                self.details.append((detail_type, detail))
        else:
            self.error_message = str(error.detail)


def log_request(log: RequestLog, db_path=DB_PATH) -> None:
    """Write a request log row and its detail rows in one transaction."""
    conn = get_connection(db_path)
    try:
        with conn:
            conn.execute(
                f"INSERT INTO api_requests ({', '.join(LOG_COLUMNS)}) VALUES ({', '.join('?' * len(LOG_COLUMNS))})",
                tuple(getattr(log, column) for column in LOG_COLUMNS),
            )
            conn.executemany(
                "INSERT INTO api_request_details (request_id, detail_type, message) VALUES (?, ?, ?)",
                [(log.request_id, detail_type, message) for detail_type, message in log.details],
            )
    finally:
        conn.close()
