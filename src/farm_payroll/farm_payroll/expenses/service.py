from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.validators import PayloadReader
from ..core.enums import ExpenseCategory
from ..core.exceptions import NotFoundError
from ..payroll.week import history_window
from .model import Expense
from .repository import ExpenseRepository


@dataclass(frozen=True)
class ExpenseQuery:
    worker_id: Optional[int] = None
    category: Optional[ExpenseCategory] = None
    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def from_args(cls, args: Optional[Mapping[str, Any]]) -> "ExpenseQuery":
        reader = PayloadReader(args)
        worker_id = reader.integer("workerId", minimum=1)
        category = reader.choice("category", ExpenseCategory, required=False, message="Invalid category")
        start = reader.calendar_date("startDate", required=False)
        end = reader.calendar_date("endDate", required=False)
        if start and end and end < start:
            reader.fail("endDate", "endDate must not be before startDate")
        reader.raise_if_errors()
        return cls(worker_id=worker_id, category=category, start=start, end=end)


class ExpenseService:
    """Read-only view of the expense ledger for one owner."""

    def __init__(self, expenses: ExpenseRepository):
        self._expenses = expenses

    def list_expenses(self, owner_id: int, query: Optional[ExpenseQuery] = None) -> dict:
        query = query or ExpenseQuery()
        lower, upper = history_window(query.start, query.end)
        rows = self._expenses.list_for_owner(
            owner_id,
            worker_id=query.worker_id,
            category=query.category,
            start=lower,
            end=upper,
        )
        total = sum((e.total_amount for e in rows), Decimal("0"))
        return {
            "expenses": [e.to_dict() for e in rows],
            "total": len(rows),
            "totalAmount": float(total),
        }

    def get_expense(self, owner_id: int, expense_id: int) -> Expense:
        expense = self._expenses.get_by_id(owner_id, expense_id)
        if not expense:
            raise NotFoundError("Expense not found")
        return expense
