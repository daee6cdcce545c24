from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .advances.service import AdvanceService
from .attendance.service import AttendanceService
from .common.locks import KeyedLock
from .core.constants import DEFAULT_PAYMENT_DAY, DEFAULT_TOKEN_TTL_HOURS
from .core.enums import PaymentDay
from .database.connection import DBConfig, DatabaseConnection
from .expenses.mysql_expense_repository import MySQLExpenseRepository
from .expenses.repository import ExpenseRepository
from .expenses.service import ExpenseService
from .payroll.calculator.standard_calculator import StandardWageCalculator
from .payroll.service import WeeklyPayrollService
from .payroll.stats import LaborStatsService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService
from .workers.mysql_worker_repository import MySQLWorkerRepository
from .workers.repository import WorkerRepository
from .workers.service import WorkerService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    workers_repo: WorkerRepository
    expenses_repo: ExpenseRepository

    auth_service: AuthService
    worker_service: WorkerService
    attendance_service: AttendanceService
    stats_service: LaborStatsService
    payroll_service: WeeklyPayrollService
    advance_service: AdvanceService
    expense_service: ExpenseService


def wire_services(
    *,
    users_repo: UserRepository,
    workers_repo: WorkerRepository,
    expenses_repo: ExpenseRepository,
    secret_key: str,
    payment_day: Union[str, PaymentDay] = DEFAULT_PAYMENT_DAY,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    # One lock table shared by every service that mutates a worker.
    locks = KeyedLock()
    calculator = StandardWageCalculator()

    return Container(
        conn=conn,
        users_repo=users_repo,
        workers_repo=workers_repo,
        expenses_repo=expenses_repo,
        auth_service=AuthService(users_repo, secret_key=secret_key, token_ttl_hours=token_ttl_hours),
        worker_service=WorkerService(workers_repo, locks=locks),
        attendance_service=AttendanceService(workers_repo, locks=locks, calculator=calculator),
        stats_service=LaborStatsService(workers_repo, calculator=calculator),
        payroll_service=WeeklyPayrollService(
            workers_repo, locks=locks, calculator=calculator, payment_day=payment_day
        ),
        advance_service=AdvanceService(workers_repo, locks=locks),
        expense_service=ExpenseService(expenses_repo),
    )


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    payment_day: Union[str, PaymentDay] = DEFAULT_PAYMENT_DAY,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_services(
        users_repo=MySQLUserRepository(conn),
        workers_repo=MySQLWorkerRepository(conn),
        expenses_repo=MySQLExpenseRepository(conn),
        secret_key=secret_key,
        payment_day=payment_day,
        token_ttl_hours=token_ttl_hours,
        conn=conn,
    )
