from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.locks import KeyedLock
from ..core.constants import MAX_MONEY
from ..core.enums import ExpenseCategory, ExpenseSource
from ..core.exceptions import NotFoundError, ValidationError
from ..expenses.model import Expense, NewExpense
from ..logging_config import get_logger
from ..workers.model import Worker
from ..workers.repository import WorkerRepository
from .schemas import AddAdvanceCommand, CorrectAdvanceCommand

logger = get_logger(__name__)


@dataclass(frozen=True)
class AdvanceAdded:
    worker: Worker
    expense: Expense
    previous_advance: Decimal
    amount_added: Decimal

    def to_dict(self) -> dict:
        return {
            "message": "Advance payment added successfully",
            "worker": self.worker.to_dict(),
            "expense": self.expense.to_dict(),
            "previousAdvance": float(self.previous_advance),
            "newAdvance": float(self.worker.advance),
            "amountAdded": float(self.amount_added),
        }


@dataclass(frozen=True)
class AdvanceCorrected:
    worker: Worker
    expense: Optional[Expense]
    previous_advance: Decimal
    adjustment: Decimal

    def to_dict(self) -> dict:
        return {
            "message": "Advance payment updated successfully",
            "worker": self.worker.to_dict(),
            "expense": self.expense.to_dict() if self.expense else None,
            "previousAdvance": float(self.previous_advance),
            "newAdvance": float(self.worker.advance),
            "adjustment": float(self.adjustment),
        }


class AdvanceService:
    """Advance account of a worker: money paid ahead of earned wages.

    Every balance change posts a Labor expense in the same transaction, except a
    correction that leaves the balance unchanged.
    """

    def __init__(self, workers: WorkerRepository, *, locks: Optional[KeyedLock] = None):
        self._workers = workers
        self._locks = locks or KeyedLock()

    def _get_worker(self, owner_id: int, worker_id: int) -> Worker:
        worker = self._workers.get_for_owner(owner_id, worker_id)
        if not worker:
            raise NotFoundError("Worker not found")
        return worker

    def add_advance(
        self,
        owner_id: int,
        worker_id: int,
        cmd: AddAdvanceCommand,
        *,
        now: Optional[datetime] = None,
    ) -> AdvanceAdded:
        if cmd.amount <= 0:
            raise ValidationError(
                "Valid amount is required", errors=[{"field": "amount", "message": "Valid amount is required"}]
            )
        now = now or now_local()

        with self._locks.hold(worker_id):
            worker = self._get_worker(owner_id, worker_id)
            if worker.advance + cmd.amount > MAX_MONEY:
                raise ValidationError(
                    "Advance balance would exceed the maximum amount",
                    errors=[{"field": "amount", "message": "Advance balance would exceed the maximum amount"}],
                )
            expense = self._workers.add_advance(
                worker_id=worker_id,
                amount=cmd.amount,
                expense=NewExpense(
                    owner_id=owner_id,
                    category=ExpenseCategory.LABOR,
                    item_name=f"Labor advance for {worker.worker_name}",
                    unit="payment",
                    unit_price=cmd.amount,
                    total_amount=cmd.amount,
                    purchase_date=now,
                    worker_id=worker_id,
                    source=ExpenseSource.ADVANCE,
                    notes=cmd.note or f"Advance payment to {worker.worker_name}",
                ),
            )
            updated = self._get_worker(owner_id, worker_id)

        logger.info(
            "advance added",
            extra={
                "worker_id": worker_id,
                "amount": cmd.amount,
                "advance_balance": updated.advance,
                "expense_id": expense.expense_id,
            },
        )
        return AdvanceAdded(worker=updated, expense=expense, previous_advance=worker.advance, amount_added=cmd.amount)

    def correct_advance(
        self,
        owner_id: int,
        worker_id: int,
        cmd: CorrectAdvanceCommand,
        *,
        now: Optional[datetime] = None,
    ) -> AdvanceCorrected:
        """Administrative overwrite of the balance to an absolute value."""
        if cmd.new_advance < 0:
            raise ValidationError(
                "Advance amount cannot be negative",
                errors=[{"field": "newAdvanceAmount", "message": "Advance amount cannot be negative"}],
            )
        now = now or now_local()

        with self._locks.hold(worker_id):
            worker = self._get_worker(owner_id, worker_id)
            difference = cmd.new_advance - worker.advance

            expense = None
            if difference != 0:
                direction = "increase" if difference > 0 else "decrease"
                expense = NewExpense(
                    owner_id=owner_id,
                    category=ExpenseCategory.LABOR,
                    item_name=f"Labor advance adjustment for {worker.worker_name}",
                    unit="adjustment",
                    unit_price=abs(difference),
                    total_amount=abs(difference),
                    purchase_date=now,
                    worker_id=worker_id,
                    source=ExpenseSource.ADVANCE_ADJUSTMENT,
                    notes=cmd.note or f"Advance adjustment for {worker.worker_name} ({direction})",
                )

            posted = self._workers.replace_advance(
                worker_id=worker_id,
                expected_version=worker.version,
                new_advance=cmd.new_advance,
                expense=expense,
            )
            updated = self._get_worker(owner_id, worker_id)

        logger.info(
            "advance corrected",
            extra={
                "worker_id": worker_id,
                "previous_advance": worker.advance,
                "advance_balance": updated.advance,
                "adjustment": difference,
            },
        )
        return AdvanceCorrected(worker=updated, expense=posted, previous_advance=worker.advance, adjustment=difference)
