from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.validators import PayloadReader
from ..core.constants import MAX_HOURS_WORKED


@dataclass(frozen=True)
class MarkAttendanceCommand:
    """Body of ``POST /labor/<id>/attendance``. A missing wage means the standard daily rate."""

    work_date: date
    present: bool
    hours_worked: Optional[Decimal] = None
    wage: Optional[Decimal] = None
    note: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "MarkAttendanceCommand":
        reader = PayloadReader(payload)
        work_date = reader.calendar_date("date", message="Valid date is required")
        present = reader.boolean("present", message="Present must be true or false")
        hours = reader.decimal(
            "hoursWorked",
            required=False,
            exclusive_minimum=Decimal("0"),
            maximum=MAX_HOURS_WORKED,
            message="Hours worked must be a number between 0 and 24",
        )
        wage = reader.money("wage", required=False, minimum=Decimal("0"), message="Wage must be number")
        note = reader.text("notes", message="Notes must be a string")
        reader.raise_if_errors()
        return cls(work_date=work_date, present=present, hours_worked=hours, wage=wage, note=note or None)


@dataclass(frozen=True)
class AttendanceReportQuery:
    start: Optional[date] = None
    end: Optional[date] = None
    worker_id: Optional[int] = None
    worker_name: Optional[str] = None

    @classmethod
    def from_args(cls, args: Optional[Mapping[str, Any]]) -> "AttendanceReportQuery":
        reader = PayloadReader(args)
        start = reader.calendar_date("startDate", required=False)
        end = reader.calendar_date("endDate", required=False)
        worker_id = reader.integer("workerId", minimum=1)
        worker_name = reader.text("workerName")
        reader.raise_if_errors()
        return cls(start=start, end=end, worker_id=worker_id, worker_name=worker_name or None)
