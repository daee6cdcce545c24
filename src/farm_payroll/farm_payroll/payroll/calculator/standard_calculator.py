from __future__ import annotations

from decimal import Decimal

from .base import WageCalculator
from ...workers.model import AttendanceEntry, Worker


class StandardWageCalculator(WageCalculator):
    """Standard rule: present days earn the entry's wage, else the worker's daily rate.

    A zero or missing wage falls back to the daily rate.
    """

    def day_wage(self, worker: Worker, entry: AttendanceEntry) -> Decimal:
        if not entry.present:
            return Decimal("0")
        return entry.wage or worker.daily_rate
