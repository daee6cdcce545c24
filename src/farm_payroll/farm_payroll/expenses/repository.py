from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ExpenseCategory
from .model import Expense


class ExpenseRepository(Protocol):
    """Read side of the expense ledger.

    Payroll writes go through the worker repository so that the expense and the
    worker mutation share one transaction.
    """

    def get_by_id(self, owner_id: int, expense_id: int) -> Optional[Expense]:
        raise NotImplementedError

    def list_for_owner(
        self,
        owner_id: int,
        *,
        worker_id: Optional[int] = None,
        category: Optional[ExpenseCategory] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[Expense]:
        raise NotImplementedError
