from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.enums import SkillLevel
from ..workers.repository import WorkerRepository
from .calculator.base import WageCalculator
from .calculator.standard_calculator import StandardWageCalculator
from .week import day_window, month_window, sunday_week_window


class LaborStatsService:
    """Read-only, full-scan labor statistics for one owner.

    Farm-scale volumes only; no pagination.
    """

    def __init__(self, workers: WorkerRepository, *, calculator: Optional[WageCalculator] = None):
        self._workers = workers
        self._calculator = calculator or StandardWageCalculator()

    def get_stats(self, owner_id: int, *, as_of: Optional[date] = None, now: Optional[datetime] = None) -> dict:
        as_of = as_of or (now or now_local()).date()
        workers = self._workers.list_for_owner(owner_id)

        total_workers = len(workers)
        if total_workers:
            avg_rate = sum((w.daily_rate for w in workers), Decimal("0")) / total_workers
        else:
            avg_rate = Decimal("0")

        day = day_window(as_of)
        week = sunday_week_window(as_of)
        month = month_window(as_of)

        workers_present = 0
        daily_wages = Decimal("0")
        weekly_wages = Decimal("0")
        monthly_wages = Decimal("0")

        for worker in workers:
            for entry in worker.attendance:
                if not entry.present:
                    continue
                wage = self._calculator.day_wage(worker, entry)
                if day.contains(entry.work_date):
                    workers_present += 1
                    daily_wages += wage
                if week.contains(entry.work_date):
                    weekly_wages += wage
                if month.contains(entry.work_date):
                    monthly_wages += wage

        return {
            "stats": {
                "totalWorkers": total_workers,
                "avgDailyRate": float(avg_rate),
                "skilledWorkers": sum(1 for w in workers if w.skill_level == SkillLevel.SKILLED),
                "skillBreakdown": [
                    {"skill": w.skill_level.value, "rate": float(w.daily_rate)} for w in workers
                ],
            },
            "dailyStats": {
                "workersPresent": workers_present,
                "totalDailyWages": float(daily_wages),
                "totalWeeklyWages": float(weekly_wages),
                "totalMonthlyWages": float(monthly_wages),
                "date": as_of.isoformat(),
            },
        }
