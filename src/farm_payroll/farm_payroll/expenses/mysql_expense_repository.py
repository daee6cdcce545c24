from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import ExpenseCategory, ExpenseSource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Expense, NewExpense
from .repository import ExpenseRepository

_COLUMNS = """
    expense_id, owner_id, category, item_name, quantity, unit, unit_price, total_amount,
    purchase_date, supplier, notes, worker_id, source
"""


def row_to_expense(r: dict) -> Expense:
    return Expense(
        expense_id=int(r["expense_id"]),
        owner_id=int(r["owner_id"]),
        category=ExpenseCategory(r["category"]),
        item_name=r["item_name"],
        quantity=Decimal(r["quantity"]),
        unit=r["unit"],
        unit_price=Decimal(r["unit_price"]),
        total_amount=Decimal(r["total_amount"]),
        purchase_date=r["purchase_date"],
        worker_id=r.get("worker_id"),
        source=ExpenseSource(r.get("source") or ExpenseSource.MANUAL.value),
        supplier=r.get("supplier"),
        notes=r.get("notes"),
    )


def insert_expense(cur, new: NewExpense) -> Expense:
    """Insert inside the caller's transaction and return the stored entry."""
    cur.execute(
        """
        INSERT INTO expenses(owner_id, category, item_name, quantity, unit, unit_price, total_amount,
                             purchase_date, supplier, notes, worker_id, source)
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            new.owner_id,
            new.category.value,
            new.item_name,
            new.quantity,
            new.unit,
            new.unit_price,
            new.total_amount,
            new.purchase_date,
            new.supplier,
            new.notes,
            new.worker_id,
            new.source.value,
        ),
    )
    return Expense.from_new(int(cur.lastrowid), new)


class MySQLExpenseRepository(ExpenseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, owner_id: int, expense_id: int) -> Optional[Expense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM expenses WHERE owner_id=%s AND expense_id=%s",
                (owner_id, expense_id),
            )
            r = fetchone(cur)
            return row_to_expense(r) if r else None

    def list_for_owner(
        self,
        owner_id: int,
        *,
        worker_id: Optional[int] = None,
        category: Optional[ExpenseCategory] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[Expense]:
        clauses = ["owner_id=%s"]
        params: list[object] = [owner_id]

        if worker_id is not None:
            clauses.append("worker_id=%s")
            params.append(int(worker_id))
        if category is not None:
            clauses.append("category=%s")
            params.append(category.value)
        if start is not None:
            clauses.append("purchase_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("purchase_date <= %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM expenses WHERE {where} ORDER BY purchase_date DESC, expense_id DESC",
                tuple(params),
            )
            return [row_to_expense(r) for r in fetchall(cur)]
