from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import Gender, SkillLevel, WorkType
from ..core.exceptions import ConflictError, DuplicatePaymentError, InsufficientAdvanceError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from ..expenses.model import Expense, NewExpense
from ..expenses.mysql_expense_repository import insert_expense
from .model import AttendanceEntry, NewWeeklyPayment, WeeklyPayment, Worker, WorkerProfile
from .repository import WorkerRepository

_WORKER_COLUMNS = """
    worker_id, owner_id, worker_name, gender, work_type, skill_level,
    daily_rate, advance, version, created_at
"""


def _filters(owner_id: int, work_type: Optional[WorkType], skill_level: Optional[SkillLevel]):
    clauses = ["owner_id=%s"]
    params: list[object] = [owner_id]
    if work_type is not None:
        clauses.append("work_type=%s")
        params.append(work_type.value)
    if skill_level is not None:
        clauses.append("skill_level=%s")
        params.append(skill_level.value)
    return " AND ".join(clauses), params


def _row_to_attendance(r: dict) -> AttendanceEntry:
    return AttendanceEntry(
        attendance_id=int(r["attendance_id"]),
        worker_id=int(r["worker_id"]),
        work_date=r["work_date"],
        present=bool(r["present"]),
        hours_worked=Decimal(r["hours_worked"]),
        wage=Decimal(r["wage"]) if r.get("wage") is not None else None,
        expense_id=r.get("expense_id"),
        note=r.get("note"),
    )


def _row_to_payment(r: dict) -> WeeklyPayment:
    return WeeklyPayment(
        payment_id=int(r["payment_id"]),
        worker_id=int(r["worker_id"]),
        week_start=r["week_start"],
        week_end=r["week_end"],
        payment_date=r["payment_date"],
        total_wages=Decimal(r["total_wages"]),
        advance_deducted=Decimal(r["advance_deducted"]),
        net_payment=Decimal(r["net_payment"]),
        expense_id=r.get("expense_id"),
        payment_day=r.get("payment_day"),
        note=r.get("note"),
    )


class MySQLWorkerRepository(WorkerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_children(self, cur, rows: list[dict]) -> list[Worker]:
        if not rows:
            return []
        ids = [int(r["worker_id"]) for r in rows]
        marks = ",".join(["%s"] * len(ids))

        cur.execute(
            f"""
            SELECT attendance_id, worker_id, work_date, present, hours_worked, wage, expense_id, note
            FROM worker_attendance
            WHERE worker_id IN ({marks})
            ORDER BY work_date ASC
            """,
            tuple(ids),
        )
        attendance: dict[int, list[AttendanceEntry]] = {i: [] for i in ids}
        for r in fetchall(cur):
            attendance[int(r["worker_id"])].append(_row_to_attendance(r))

        cur.execute(
            f"""
            SELECT payment_id, worker_id, week_start, week_end, payment_date, total_wages,
                   advance_deducted, net_payment, expense_id, payment_day, note
            FROM weekly_payments
            WHERE worker_id IN ({marks})
            ORDER BY payment_date ASC, payment_id ASC
            """,
            tuple(ids),
        )
        payments: dict[int, list[WeeklyPayment]] = {i: [] for i in ids}
        for r in fetchall(cur):
            payments[int(r["worker_id"])].append(_row_to_payment(r))

        return [
            Worker(
                worker_id=int(r["worker_id"]),
                owner_id=int(r["owner_id"]),
                worker_name=r["worker_name"],
                gender=Gender(r["gender"]),
                work_type=WorkType(r["work_type"]),
                skill_level=SkillLevel(r["skill_level"]),
                daily_rate=Decimal(r["daily_rate"]),
                advance=Decimal(r["advance"]),
                attendance=tuple(attendance[int(r["worker_id"])]),
                weekly_payments=tuple(payments[int(r["worker_id"])]),
                version=int(r.get("version") or 0),
                created_at=r.get("created_at"),
            )
            for r in rows
        ]

    def list_for_owner(
        self,
        owner_id: int,
        *,
        work_type: Optional[WorkType] = None,
        skill_level: Optional[SkillLevel] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[Worker]:
        where, params = _filters(owner_id, work_type, skill_level)
        page = ""
        if limit is not None:
            page = "LIMIT %s OFFSET %s"
            params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_WORKER_COLUMNS}
                FROM workers
                WHERE {where}
                ORDER BY created_at DESC, worker_id DESC
                {page}
                """,
                tuple(params),
            )
            return self._load_children(cur, fetchall(cur))

    def count_for_owner(
        self,
        owner_id: int,
        *,
        work_type: Optional[WorkType] = None,
        skill_level: Optional[SkillLevel] = None,
    ) -> int:
        where, params = _filters(owner_id, work_type, skill_level)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM workers WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def get_for_owner(self, owner_id: int, worker_id: int) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_WORKER_COLUMNS} FROM workers WHERE owner_id=%s AND worker_id=%s",
                (owner_id, worker_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return self._load_children(cur, [r])[0]

    def create_worker(self, owner_id: int, profile: WorkerProfile) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO workers(owner_id, worker_name, gender, work_type, skill_level, daily_rate, advance)
                VALUES(%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    owner_id,
                    profile.worker_name,
                    profile.gender.value,
                    profile.work_type.value,
                    profile.skill_level.value,
                    profile.daily_rate,
                ),
            )
            return int(cur.lastrowid)

    def update_profile(self, owner_id: int, worker_id: int, profile: WorkerProfile) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE workers
                SET worker_name=%s, gender=%s, work_type=%s, skill_level=%s, daily_rate=%s, version=version+1
                WHERE owner_id=%s AND worker_id=%s
                """,
                (
                    profile.worker_name,
                    profile.gender.value,
                    profile.work_type.value,
                    profile.skill_level.value,
                    profile.daily_rate,
                    owner_id,
                    worker_id,
                ),
            )
            return cur.rowcount > 0

    def delete_worker(self, owner_id: int, worker_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM workers WHERE owner_id=%s AND worker_id=%s", (owner_id, worker_id))
            if cur.rowcount == 0:
                return False
            # Attendance and payments go with the FK cascade; expenses only hold a weak reference.
            cur.execute("DELETE FROM expenses WHERE owner_id=%s AND worker_id=%s", (owner_id, worker_id))
            return True

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO worker_attendance(worker_id, work_date, present, hours_worked, wage, note)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    present=VALUES(present), hours_worked=VALUES(hours_worked),
                    wage=VALUES(wage), note=VALUES(note)
                """,
                (worker_id, work_date, int(present), hours_worked, wage, note),
            )
            cur.execute("UPDATE workers SET version=version+1 WHERE worker_id=%s", (worker_id,))

    def add_advance(self, *, worker_id: int, amount: Decimal, expense: NewExpense) -> Expense:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE workers SET advance=advance+%s, version=version+1 WHERE worker_id=%s",
                (amount, worker_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError("Worker not found")
            return insert_expense(cur, expense)

    def replace_advance(
        self,
        *,
        worker_id: int,
        expected_version: int,
        new_advance: Decimal,
        expense: Optional[NewExpense],
    ) -> Optional[Expense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE workers SET advance=%s, version=version+1
                WHERE worker_id=%s AND version=%s
                """,
                (new_advance, worker_id, expected_version),
            )
            if cur.rowcount == 0:
                raise ConflictError("Advance balance changed meanwhile, please retry")
            return insert_expense(cur, expense) if expense is not None else None

    def record_weekly_payment(
        self,
        *,
        worker_id: int,
        payment: NewWeeklyPayment,
        expense: Optional[NewExpense],
    ) -> tuple[WeeklyPayment, Optional[Expense]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE workers SET advance=advance-%s, version=version+1
                WHERE worker_id=%s AND advance >= %s
                """,
                (payment.advance_deducted, worker_id, payment.advance_deducted),
            )
            if cur.rowcount == 0:
                raise InsufficientAdvanceError("Cannot deduct more than available advance amount")

            posted = insert_expense(cur, expense) if expense is not None else None
            expense_id = posted.expense_id if posted else None

            try:
                cur.execute(
                    """
                    INSERT INTO weekly_payments(worker_id, week_start, week_end, payment_date, total_wages,
                                                advance_deducted, net_payment, expense_id, payment_day, note)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        worker_id,
                        payment.week_start,
                        payment.week_end,
                        payment.payment_date,
                        payment.total_wages,
                        payment.advance_deducted,
                        payment.net_payment,
                        expense_id,
                        payment.payment_day,
                        payment.note,
                    ),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc):
                    raise DuplicatePaymentError("Payment already marked for this week") from exc
                raise

            recorded = WeeklyPayment(
                payment_id=int(cur.lastrowid),
                worker_id=worker_id,
                week_start=payment.week_start,
                week_end=payment.week_end,
                payment_date=payment.payment_date,
                total_wages=payment.total_wages,
                advance_deducted=payment.advance_deducted,
                net_payment=payment.net_payment,
                expense_id=expense_id,
                payment_day=payment.payment_day,
                note=payment.note,
            )
            return recorded, posted
