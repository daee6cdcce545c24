from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..common.locks import KeyedLock
from ..core.constants import DEFAULT_HOURS_WORKED
from ..core.exceptions import NotFoundError
from ..logging_config import get_logger
from ..payroll.calculator.base import WageCalculator
from ..payroll.calculator.standard_calculator import StandardWageCalculator
from ..workers.model import Worker
from ..workers.repository import WorkerRepository
from .schemas import AttendanceReportQuery, MarkAttendanceCommand

logger = get_logger(__name__)


class AttendanceService:
    def __init__(
        self,
        workers: WorkerRepository,
        *,
        locks: Optional[KeyedLock] = None,
        calculator: Optional[WageCalculator] = None,
    ):
        self._workers = workers
        self._locks = locks or KeyedLock()
        self._calculator = calculator or StandardWageCalculator()

    def mark_attendance(self, owner_id: int, worker_id: int, cmd: MarkAttendanceCommand) -> Worker:
        """Create or overwrite the attendance entry of one worker for one calendar day.

        No expense is posted for attendance; wages reach the ledger at weekly settlement.
        """
        with self._locks.hold(worker_id):
            worker = self._workers.get_for_owner(owner_id, worker_id)
            if not worker:
                raise NotFoundError("Worker not found")

            existing = worker.attendance_on(cmd.work_date)
            self._workers.upsert_attendance(
                worker_id=worker_id,
                work_date=cmd.work_date,
                present=cmd.present,
                hours_worked=cmd.hours_worked or DEFAULT_HOURS_WORKED,
                wage=cmd.wage if cmd.wage is not None else worker.daily_rate,
                note=cmd.note,
            )

            updated = self._workers.get_for_owner(owner_id, worker_id)
            if not updated:
                raise NotFoundError("Worker not found")

        logger.info(
            "attendance marked",
            extra={
                "worker_id": worker_id,
                "work_date": cmd.work_date,
                "present": cmd.present,
                "updated_existing": existing is not None,
            },
        )
        return updated

    def attendance_report(self, owner_id: int, query: AttendanceReportQuery) -> dict:
        workers = self._workers.list_for_owner(owner_id)
        if query.worker_id is not None:
            workers = [w for w in workers if w.worker_id == query.worker_id]
        if query.worker_name:
            needle = query.worker_name.lower()
            workers = [w for w in workers if needle in w.worker_name.lower()]

        out_workers: list[dict] = []
        grand_total = Decimal("0")
        for w in workers:
            entries = [
                e
                for e in sorted(w.attendance, key=lambda e: e.work_date)
                if (query.start is None or e.work_date >= query.start)
                and (query.end is None or e.work_date <= query.end)
            ]
            rows = []
            total = Decimal("0")
            for e in entries:
                wage = self._calculator.day_wage(w, e)
                total += wage
                row = e.to_dict()
                row["dayName"] = e.work_date.strftime("%A")
                row["wage"] = float(wage)
                rows.append(row)

            grand_total += total
            out_workers.append(
                {
                    "id": w.worker_id,
                    "workerName": w.worker_name,
                    "workType": w.work_type.value,
                    "dailyRate": float(w.daily_rate),
                    "attendance": rows,
                    "totalWages": float(total),
                    "presentDays": sum(1 for e in entries if e.present),
                }
            )

        return {
            "workers": out_workers,
            "grandTotalWages": float(grand_total),
            "totalPresentDays": sum(w["presentDays"] for w in out_workers),
            "dateRange": {
                "startDate": query.start.isoformat() if query.start else None,
                "endDate": query.end.isoformat() if query.end else None,
            },
        }
