from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ...workers.model import AttendanceEntry, Worker


class WageCalculator(ABC):
    """Rule deciding how much one attendance day earns."""

    @abstractmethod
    def day_wage(self, worker: Worker, entry: AttendanceEntry) -> Decimal:
        """Wage counted for one attendance entry (0 when absent)."""

        raise NotImplementedError
