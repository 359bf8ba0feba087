"""Pydantic request models for API endpoints."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from core.errors import InvalidInput
from models.timesheets import Period
from services.timesheets import TimesheetRequest


class PeriodBody(BaseModel):
    """A caller-defined period, camelCase as sent by the Portal."""

    model_config = ConfigDict(populate_by_name=True)

    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    title: str = ""


class TimesheetRequestBody(BaseModel):
    """Body of POST /v1/timesheets."""

    model_config = ConfigDict(populate_by_name=True)

    system: str
    employee_number: int = Field(alias="employeeNumber")
    periods: list[PeriodBody] | None = None
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    only_pto: bool = Field(default=False, alias="onlyPto")
    status: list[str] | str | None = None
    account: str = "CYK"

    def to_request(self) -> TimesheetRequest:
        """
        Convert to a service request; startDate/endDate become monthly periods.

        Raises:
            InvalidInput: if neither periods nor a date range is given
        """
        statuses = [self.status] if isinstance(self.status, str) else self.status
        options = {"only_pto": self.only_pto, "statuses": statuses, "account": self.account}

        if self.periods:
            periods = [Period(p.start_date, p.end_date, p.title) for p in self.periods]
            return TimesheetRequest(self.system, self.employee_number, periods, **options)
        if self.start_date and self.end_date:
            return TimesheetRequest.for_range(
                self.system, self.employee_number, self.start_date, self.end_date, **options
            )
        if self.only_pto:
            return TimesheetRequest(self.system, self.employee_number, [], **options)
        raise InvalidInput("Either periods or startDate and endDate are required")
