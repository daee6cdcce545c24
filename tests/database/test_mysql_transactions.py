from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.farm_payroll.farm_payroll.core.enums import ExpenseCategory, ExpenseSource
from src.farm_payroll.farm_payroll.core.exceptions import (
    ConflictError,
    DuplicatePaymentError,
    InsufficientAdvanceError,
    NotFoundError,
    PersistenceError,
)
from src.farm_payroll.farm_payroll.database.mysql_base import db_cursor, is_duplicate_key
from src.farm_payroll.farm_payroll.expenses.model import NewExpense
from src.farm_payroll.farm_payroll.workers.model import NewWeeklyPayment
from src.farm_payroll.farm_payroll.workers.mysql_worker_repository import MySQLWorkerRepository


class FakeCursor:
    def __init__(self, script):
        self._script = script
        self.statements: list[str] = []
        self.rowcount = 0
        self.lastrowid = None
        self.closed = False

    def execute(self, sql, params=None):
        statement = " ".join(sql.split())
        self.statements.append(statement)
        self.rowcount, self.lastrowid = 1, len(self.statements)
        if self._script:
            self._script(statement, params, self)

    def fetchone(self):
        return None

    def fetchall(self):
        return []

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, script=None):
        self.cur = FakeCursor(script)
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self.cur

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn=None, error=None):
        self.conn = conn
        self._error = error

    def connect(self):
        if self._error:
            raise self._error
        return self.conn


def _expense(amount="100.00"):
    return NewExpense(
        owner_id=1,
        category=ExpenseCategory.LABOR,
        item_name="Weekly payment for Ravi",
        unit="payment",
        unit_price=Decimal(amount),
        total_amount=Decimal(amount),
        purchase_date=datetime(2024, 6, 12, 15, 0),
        worker_id=7,
        source=ExpenseSource.WEEKLY_PAYMENT,
    )


def _payment(deducted="0.00"):
    return NewWeeklyPayment(
        week_start=date(2024, 6, 9),
        week_end=date(2024, 6, 15),
        payment_date=datetime(2024, 6, 12, 15, 0),
        total_wages=Decimal("100.00"),
        advance_deducted=Decimal(deducted),
        net_payment=Decimal("100.00"),
    )


def test_cursor_commits_and_closes_on_success():
    conn = FakeConnection()
    with db_cursor(FakeFactory(conn)) as (_, cur):
        cur.execute("SELECT 1")
    assert conn.committed and conn.closed and conn.cur.closed
    assert not conn.rolled_back


def test_domain_errors_roll_back_and_pass_through():
    conn = FakeConnection()
    with pytest.raises(NotFoundError):
        with db_cursor(FakeFactory(conn)):
            raise NotFoundError("Worker not found")
    assert conn.rolled_back and conn.closed
    assert not conn.committed


def test_driver_errors_become_persistence_errors():
    conn = FakeConnection()
    with pytest.raises(PersistenceError):
        with db_cursor(FakeFactory(conn)):
            raise mysql.connector.OperationalError(msg="lost connection", errno=2013)
    assert conn.rolled_back


def test_connection_failure_is_persistence_error():
    factory = FakeFactory(error=mysql.connector.InterfaceError(msg="refused", errno=2003))
    with pytest.raises(PersistenceError):
        with db_cursor(factory):
            pass


def test_duplicate_key_detection():
    assert is_duplicate_key(mysql.connector.IntegrityError(msg="dup", errno=errorcode.ER_DUP_ENTRY))
    assert not is_duplicate_key(mysql.connector.IntegrityError(msg="fk", errno=errorcode.ER_NO_REFERENCED_ROW_2))


def test_settlement_writes_advance_expense_and_payment_in_one_transaction():
    conn = FakeConnection()
    repo = MySQLWorkerRepository(FakeFactory(conn))

    payment, posted = repo.record_weekly_payment(worker_id=7, payment=_payment("10.00"), expense=_expense())

    kinds = [s.split()[0] + " " + s.split()[1] for s in conn.cur.statements]
    assert kinds == ["UPDATE workers", "INSERT INTO", "INSERT INTO"]
    assert "INSERT INTO expenses" in conn.cur.statements[1]
    assert "INSERT INTO weekly_payments" in conn.cur.statements[2]
    assert payment.expense_id == posted.expense_id == 2
    assert conn.committed


def test_settlement_with_short_advance_writes_nothing():
    def script(sql, params, cur):
        if sql.startswith("UPDATE workers"):
            cur.rowcount = 0

    conn = FakeConnection(script)
    repo = MySQLWorkerRepository(FakeFactory(conn))

    with pytest.raises(InsufficientAdvanceError):
        repo.record_weekly_payment(worker_id=7, payment=_payment("50.00"), expense=_expense())
    assert len(conn.cur.statements) == 1
    assert conn.rolled_back and not conn.committed


def test_duplicate_week_rolls_back_expense_and_advance():
    def script(sql, params, cur):
        if sql.startswith("INSERT INTO weekly_payments"):
            raise mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)

    conn = FakeConnection(script)
    repo = MySQLWorkerRepository(FakeFactory(conn))

    with pytest.raises(DuplicatePaymentError):
        repo.record_weekly_payment(worker_id=7, payment=_payment("10.00"), expense=_expense())
    assert conn.rolled_back and not conn.committed


def test_advance_correction_is_compare_and_set():
    def script(sql, params, cur):
        if sql.startswith("UPDATE workers SET advance=%s"):
            assert "version=%s" in sql
            assert params == (Decimal("50.00"), 7, 3)
            cur.rowcount = 0

    conn = FakeConnection(script)
    repo = MySQLWorkerRepository(FakeFactory(conn))

    with pytest.raises(ConflictError):
        repo.replace_advance(
            worker_id=7, expected_version=3, new_advance=Decimal("50.00"), expense=_expense("50.00")
        )
    assert conn.rolled_back
