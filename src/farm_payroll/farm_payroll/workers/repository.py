from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import SkillLevel, WorkType
from ..expenses.model import Expense, NewExpense
from .model import NewWeeklyPayment, WeeklyPayment, Worker, WorkerProfile


class WorkerRepository(Protocol):
    """Storage of workers and their owned attendance/payment collections.

    Every lookup is scoped by ``owner_id``. Mutating methods are atomic: each one
    commits all of its writes (worker row, child rows, linked expense) or none.
    """

    def list_for_owner(
        self,
        owner_id: int,
        *,
        work_type: Optional[WorkType] = None,
        skill_level: Optional[SkillLevel] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[Worker]:
        raise NotImplementedError

    def count_for_owner(
        self,
        owner_id: int,
        *,
        work_type: Optional[WorkType] = None,
        skill_level: Optional[SkillLevel] = None,
    ) -> int:
        raise NotImplementedError

    def get_for_owner(self, owner_id: int, worker_id: int) -> Optional[Worker]:
        raise NotImplementedError

    def create_worker(self, owner_id: int, profile: WorkerProfile) -> int:
        raise NotImplementedError

    def update_profile(self, owner_id: int, worker_id: int, profile: WorkerProfile) -> bool:
        raise NotImplementedError

    def delete_worker(self, owner_id: int, worker_id: int) -> bool:
        """Delete the worker, its attendance/payments and every expense linked to it."""

        raise NotImplementedError

    def upsert_attendance(
        self,
        *,
        worker_id: int,
        work_date: date,
        present: bool,
        hours_worked: Decimal,
        wage: Optional[Decimal],
        note: Optional[str],
    ) -> None:
        """Insert, or overwrite in place, the single entry for (worker, work_date)."""

        raise NotImplementedError

    def add_advance(self, *, worker_id: int, amount: Decimal, expense: NewExpense) -> Expense:
        raise NotImplementedError

    def replace_advance(
        self,
        *,
        worker_id: int,
        expected_version: int,
        new_advance: Decimal,
        expense: Optional[NewExpense],
    ) -> Optional[Expense]:
        """Overwrite the advance balance if the worker row is still at ``expected_version``.

        Raises ConflictError when another write bumped the version since it was read.
        """

        raise NotImplementedError

    def record_weekly_payment(
        self,
        *,
        worker_id: int,
        payment: NewWeeklyPayment,
        expense: Optional[NewExpense],
    ) -> tuple[WeeklyPayment, Optional[Expense]]:
        """Post expense, deduct advance and append the payment in one transaction.

        Raises InsufficientAdvanceError / DuplicatePaymentError without writing anything.
        """

        raise NotImplementedError
