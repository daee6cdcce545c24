from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from ..common.datetime_utils import now_local
from ..common.locks import KeyedLock
from ..core.constants import DEFAULT_PAYMENT_DAY
from ..core.enums import ExpenseCategory, ExpenseSource, PaymentDay
from ..core.exceptions import DuplicatePaymentError, InsufficientAdvanceError, NotFoundError
from ..expenses.model import Expense, NewExpense
from ..logging_config import get_logger
from ..workers.model import NewWeeklyPayment, WeeklyPayment, Worker
from ..workers.repository import WorkerRepository
from .calculator.base import WageCalculator
from .calculator.standard_calculator import StandardWageCalculator
from .schemas import SettleWeekCommand
from .week import DateWindow, history_window, pay_week, resolve_payment_day

logger = get_logger(__name__)


@dataclass(frozen=True)
class WorkerWeekSummary:
    worker_id: int
    worker_name: str
    total_week_wages: Decimal
    advance: Decimal
    days_worked: int
    week: DateWindow
    payment: Optional[WeeklyPayment]
    daily_rate: Decimal

    @property
    def payment_made(self) -> bool:
        return self.payment is not None

    def to_dict(self) -> dict:
        return {
            "workerId": self.worker_id,
            "workerName": self.worker_name,
            "totalWeekWages": float(self.total_week_wages),
            "advance": float(self.advance),
            "daysWorked": self.days_worked,
            "weekStartDate": self.week.start.isoformat(),
            "weekEndDate": self.week.end.isoformat(),
            "paymentMade": self.payment_made,
            "paymentDetails": self.payment.to_dict() if self.payment else None,
            "dailyRate": float(self.daily_rate),
        }


@dataclass(frozen=True)
class WeeklySummary:
    rows: list[WorkerWeekSummary]
    payment_day: PaymentDay
    week: DateWindow

    def to_dict(self) -> dict:
        return {
            "weeklyWagesSummary": [r.to_dict() for r in self.rows],
            "paymentDay": self.payment_day.value,
            "weekRange": self.week.to_dict(),
        }


@dataclass(frozen=True)
class SettlementResult:
    worker: Worker
    payment: WeeklyPayment
    expense: Optional[Expense]
    remaining_advance: Decimal

    def to_dict(self) -> dict:
        return {
            "message": "Weekly payment marked successfully",
            "worker": self.worker.to_dict(),
            "paymentDetails": self.payment.to_dict(),
            "expense": self.expense.to_dict() if self.expense else None,
            "remainingAdvance": float(self.remaining_advance),
        }


class WeeklyPayrollService:
    """Pay-week summary and settlement of weekly wages."""

    def __init__(
        self,
        workers: WorkerRepository,
        *,
        locks: Optional[KeyedLock] = None,
        calculator: Optional[WageCalculator] = None,
        payment_day: Union[str, PaymentDay] = DEFAULT_PAYMENT_DAY,
    ):
        self._workers = workers
        self._locks = locks or KeyedLock()
        self._calculator = calculator or StandardWageCalculator()
        self._payment_day = resolve_payment_day(payment_day)

    @property
    def payment_day(self) -> PaymentDay:
        return self._payment_day

    def summarize_worker(self, worker: Worker, week: DateWindow) -> WorkerWeekSummary:
        present = [e for e in worker.attendance if e.present and week.contains(e.work_date)]
        total = sum((self._calculator.day_wage(worker, e) for e in present), Decimal("0"))
        return WorkerWeekSummary(
            worker_id=worker.worker_id,
            worker_name=worker.worker_name,
            total_week_wages=total,
            advance=worker.advance,
            days_worked=len(present),
            week=week,
            # Stored week bounds are calendar dates, so this is a calendar-day match.
            payment=worker.payment_for_week(week.start, week.end),
            daily_rate=worker.daily_rate,
        )

    def weekly_summary(
        self,
        owner_id: int,
        *,
        payment_day: Union[str, PaymentDay, None] = None,
        now: Optional[datetime] = None,
    ) -> WeeklySummary:
        day = resolve_payment_day(payment_day, default=self._payment_day)
        week = pay_week(now or now_local(), day)
        rows = [self.summarize_worker(w, week) for w in self._workers.list_for_owner(owner_id)]
        return WeeklySummary(rows=rows, payment_day=day, week=week)

    def settle_week(
        self,
        owner_id: int,
        worker_id: int,
        cmd: SettleWeekCommand,
        *,
        now: Optional[datetime] = None,
    ) -> SettlementResult:
        now = now or now_local()

        with self._locks.hold(worker_id):
            worker = self._workers.get_for_owner(owner_id, worker_id)
            if not worker:
                raise NotFoundError("Worker not found")

            if cmd.advance_deducted > worker.advance:
                logger.info(
                    "settlement rejected: insufficient advance",
                    extra={"worker_id": worker_id, "advance": worker.advance, "requested": cmd.advance_deducted},
                )
                raise InsufficientAdvanceError("Cannot deduct more than available advance amount")

            if worker.payment_for_week(cmd.week_start, cmd.week_end):
                logger.info(
                    "settlement rejected: week already paid",
                    extra={"worker_id": worker_id, "week_start": cmd.week_start, "week_end": cmd.week_end},
                )
                raise DuplicatePaymentError("Payment already marked for this week")

            net_payment = max(Decimal("0.00"), cmd.total_wages - cmd.advance_deducted)

            expense = None
            if net_payment > 0:
                expense = NewExpense(
                    owner_id=owner_id,
                    category=ExpenseCategory.LABOR,
                    item_name=f"Weekly payment for {worker.worker_name}",
                    unit="payment",
                    unit_price=net_payment,
                    total_amount=net_payment,
                    purchase_date=now,
                    worker_id=worker_id,
                    source=ExpenseSource.WEEKLY_PAYMENT,
                    notes=cmd.note
                    or f"Weekly payment to {worker.worker_name} ({cmd.week_start.isoformat()} to {cmd.week_end.isoformat()})",
                )

            payment, posted = self._workers.record_weekly_payment(
                worker_id=worker_id,
                payment=NewWeeklyPayment(
                    week_start=cmd.week_start,
                    week_end=cmd.week_end,
                    payment_date=now,
                    total_wages=cmd.total_wages,
                    advance_deducted=cmd.advance_deducted,
                    net_payment=net_payment,
                    payment_day=cmd.payment_day.value if cmd.payment_day else None,
                    note=cmd.note,
                ),
                expense=expense,
            )

            updated = self._workers.get_for_owner(owner_id, worker_id)
            if not updated:
                raise NotFoundError("Worker not found")

        logger.info(
            "weekly payment recorded",
            extra={
                "worker_id": worker_id,
                "week_start": cmd.week_start,
                "week_end": cmd.week_end,
                "total_wages": cmd.total_wages,
                "advance_deducted": cmd.advance_deducted,
                "net_payment": net_payment,
                "expense_id": posted.expense_id if posted else None,
            },
        )
        return SettlementResult(worker=updated, payment=payment, expense=posted, remaining_advance=updated.advance)

    def payment_history(
        self,
        owner_id: int,
        worker_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> dict:
        worker = self._workers.get_for_owner(owner_id, worker_id)
        if not worker:
            raise NotFoundError("Worker not found")

        lower, upper = history_window(start, end)
        payments = [
            p
            for p in worker.weekly_payments
            if (lower is None or p.payment_date >= lower) and (upper is None or p.payment_date <= upper)
        ]
        payments.sort(key=lambda p: (p.payment_date, p.payment_id), reverse=True)

        return {
            "workerName": worker.worker_name,
            "currentAdvance": float(worker.advance),
            "paymentHistory": [p.to_dict() for p in payments],
            "totalPayments": len(payments),
        }
