from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import Gender, SkillLevel, WorkType


@dataclass(frozen=True)
class AttendanceEntry:
    """One day of presence/wage for one worker. Unique per (worker, work_date)."""

    attendance_id: int
    worker_id: int
    work_date: date
    present: bool
    hours_worked: Decimal
    wage: Optional[Decimal]
    expense_id: Optional[int] = None
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "date": self.work_date.isoformat(),
            "present": self.present,
            "hoursWorked": float(self.hours_worked),
            "wage": float(self.wage) if self.wage is not None else None,
            "expenseId": self.expense_id,
            "notes": self.note,
        }


@dataclass(frozen=True)
class WeeklyPayment:
    """Settlement record of one pay week. Amounts are snapshots taken at payment time."""

    payment_id: int
    worker_id: int
    week_start: date
    week_end: date
    payment_date: datetime
    total_wages: Decimal
    advance_deducted: Decimal
    net_payment: Decimal
    expense_id: Optional[int] = None
    payment_day: Optional[str] = None
    note: Optional[str] = None

    def covers(self, week_start: date, week_end: date) -> bool:
        return self.week_start == week_start and self.week_end == week_end

    def to_dict(self) -> dict:
        return {
            "id": self.payment_id,
            "weekStartDate": self.week_start.isoformat(),
            "weekEndDate": self.week_end.isoformat(),
            "paymentDate": self.payment_date.isoformat(),
            "totalWages": float(self.total_wages),
            "advanceDeducted": float(self.advance_deducted),
            "netPayment": float(self.net_payment),
            "expenseId": self.expense_id,
            "paymentDay": self.payment_day,
            "notes": self.note,
        }


@dataclass(frozen=True)
class WorkerProfile:
    """Editable profile fields of a worker."""

    worker_name: str
    gender: Gender
    work_type: WorkType
    skill_level: SkillLevel
    daily_rate: Decimal


@dataclass(frozen=True)
class Worker:
    """Domain entity: a laborer owned by one farm account.

    Attendance and weekly payments are owned child collections, loaded with the worker.
    """

    worker_id: int
    owner_id: int
    worker_name: str
    gender: Gender
    work_type: WorkType
    skill_level: SkillLevel
    daily_rate: Decimal
    advance: Decimal = Decimal("0")
    attendance: tuple[AttendanceEntry, ...] = field(default_factory=tuple)
    weekly_payments: tuple[WeeklyPayment, ...] = field(default_factory=tuple)
    version: int = 0
    created_at: Optional[datetime] = None

    def attendance_on(self, work_date: date) -> Optional[AttendanceEntry]:
        for entry in self.attendance:
            if entry.work_date == work_date:
                return entry
        return None

    def payment_for_week(self, week_start: date, week_end: date) -> Optional[WeeklyPayment]:
        for payment in self.weekly_payments:
            if payment.covers(week_start, week_end):
                return payment
        return None

    def to_dict(self, *, include_children: bool = True) -> dict:
        out = {
            "id": self.worker_id,
            "workerName": self.worker_name,
            "gender": self.gender.value,
            "workType": self.work_type.value,
            "skillLevel": self.skill_level.value,
            "dailyRate": float(self.daily_rate),
            "advance": float(self.advance),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if include_children:
            out["attendance"] = [a.to_dict() for a in sorted(self.attendance, key=lambda a: a.work_date)]
            out["weeklyPayments"] = [p.to_dict() for p in self.weekly_payments]
        return out


@dataclass(frozen=True)
class NewWeeklyPayment:
    week_start: date
    week_end: date
    payment_date: datetime
    total_wages: Decimal
    advance_deducted: Decimal
    net_payment: Decimal
    payment_day: Optional[str] = None
    note: Optional[str] = None
