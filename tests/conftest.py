from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.farm_payroll.farm_payroll.container import wire_services
from src.farm_payroll.farm_payroll.core.enums import Gender, Role, SkillLevel, WorkType
from src.farm_payroll.farm_payroll.core.exceptions import (
    ConflictError,
    DuplicatePaymentError,
    InsufficientAdvanceError,
    NotFoundError,
)
from src.farm_payroll.farm_payroll.expenses.model import Expense, NewExpense
from src.farm_payroll.farm_payroll.logging_config import reset_logging
from src.farm_payroll.farm_payroll.users.model import User
from src.farm_payroll.farm_payroll.workers.model import (
    AttendanceEntry,
    NewWeeklyPayment,
    WeeklyPayment,
    Worker,
    WorkerProfile,
)


class InMemoryUsers:
    def __init__(self):
        self._users: dict[int, User] = {}
        self._next_id = 1

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._users.values() if u.email == email), None)

    def create_user(self, *, full_name: str, email: str, password_hash: str, role: Role) -> int:
        uid = self._next_id
        self._next_id += 1
        self._users[uid] = User(
            user_id=uid,
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            role=role,
        )
        return uid


class InMemoryExpenses:
    def __init__(self):
        self.rows: dict[int, Expense] = {}
        self._next_id = 1

    def post(self, new: NewExpense) -> Expense:
        expense = Expense.from_new(self._next_id, new)
        self._next_id += 1
        self.rows[expense.expense_id] = expense
        return expense

    def delete_for_worker(self, owner_id: int, worker_id: int) -> None:
        for eid in [e.expense_id for e in self.rows.values() if e.owner_id == owner_id and e.worker_id == worker_id]:
            del self.rows[eid]

    def get_by_id(self, owner_id: int, expense_id: int) -> Optional[Expense]:
        expense = self.rows.get(int(expense_id))
        return expense if expense and expense.owner_id == owner_id else None

    def list_for_owner(self, owner_id, *, worker_id=None, category=None, start=None, end=None):
        out = [
            e
            for e in self.rows.values()
            if e.owner_id == owner_id
            and (worker_id is None or e.worker_id == worker_id)
            and (category is None or e.category == category)
            and (start is None or e.purchase_date >= start)
            and (end is None or e.purchase_date <= end)
        ]
        out.sort(key=lambda e: (e.purchase_date, e.expense_id), reverse=True)
        return out


class InMemoryWorkers:
    """Worker store with the same all-or-nothing guarantees as the MySQL repository."""

    def __init__(self, expenses: InMemoryExpenses):
        self._expenses = expenses
        self._lock = threading.RLock()
        self._workers: dict[int, Worker] = {}
        self._attendance: dict[tuple[int, date], AttendanceEntry] = {}
        self._payments: dict[int, list[WeeklyPayment]] = {}
        self._next_worker_id = 1
        self._next_child_id = 1
        self.record_calls = 0

    def _child_id(self) -> int:
        cid = self._next_child_id
        self._next_child_id += 1
        return cid

    def _hydrate(self, w: Worker) -> Worker:
        attendance = sorted(
            (a for (wid, _), a in self._attendance.items() if wid == w.worker_id),
            key=lambda a: a.work_date,
        )
        return replace(w, attendance=tuple(attendance), weekly_payments=tuple(self._payments.get(w.worker_id, [])))

    def _matching(self, owner_id, work_type, skill_level) -> list[Worker]:
        return [
            w
            for w in self._workers.values()
            if w.owner_id == owner_id
            and (work_type is None or w.work_type == work_type)
            and (skill_level is None or w.skill_level == skill_level)
        ]

    def list_for_owner(self, owner_id, *, work_type=None, skill_level=None, limit=None, offset=0):
        with self._lock:
            rows = self._matching(owner_id, work_type, skill_level)
            rows.sort(key=lambda w: (w.created_at, w.worker_id), reverse=True)
            if limit is not None:
                rows = rows[offset : offset + limit]
            return [self._hydrate(w) for w in rows]

    def count_for_owner(self, owner_id, *, work_type=None, skill_level=None) -> int:
        with self._lock:
            return len(self._matching(owner_id, work_type, skill_level))

    def get_for_owner(self, owner_id: int, worker_id: int) -> Optional[Worker]:
        with self._lock:
            w = self._workers.get(int(worker_id))
            if not w or w.owner_id != owner_id:
                return None
            return self._hydrate(w)

    def create_worker(self, owner_id: int, profile: WorkerProfile) -> int:
        with self._lock:
            wid = self._next_worker_id
            self._next_worker_id += 1
            self._workers[wid] = Worker(
                worker_id=wid,
                owner_id=owner_id,
                worker_name=profile.worker_name,
                gender=profile.gender,
                work_type=profile.work_type,
                skill_level=profile.skill_level,
                daily_rate=profile.daily_rate,
                advance=Decimal("0.00"),
                created_at=datetime(2024, 1, 1) + timedelta(minutes=wid),
            )
            return wid

    def update_profile(self, owner_id: int, worker_id: int, profile: WorkerProfile) -> bool:
        with self._lock:
            w = self._workers.get(worker_id)
            if not w or w.owner_id != owner_id:
                return False
            self._workers[worker_id] = replace(
                w,
                worker_name=profile.worker_name,
                gender=profile.gender,
                work_type=profile.work_type,
                skill_level=profile.skill_level,
                daily_rate=profile.daily_rate,
                version=w.version + 1,
            )
            return True

    def delete_worker(self, owner_id: int, worker_id: int) -> bool:
        with self._lock:
            w = self._workers.get(worker_id)
            if not w or w.owner_id != owner_id:
                return False
            del self._workers[worker_id]
            for key in [k for k in self._attendance if k[0] == worker_id]:
                del self._attendance[key]
            self._payments.pop(worker_id, None)
            self._expenses.delete_for_worker(owner_id, worker_id)
            return True

    def upsert_attendance(self, *, worker_id, work_date, present, hours_worked, wage, note) -> None:
        with self._lock:
            key = (worker_id, work_date)
            existing = self._attendance.get(key)
            self._attendance[key] = AttendanceEntry(
                attendance_id=existing.attendance_id if existing else self._child_id(),
                worker_id=worker_id,
                work_date=work_date,
                present=present,
                hours_worked=hours_worked,
                wage=wage,
                note=note,
            )
            w = self._workers.get(worker_id)
            if w:
                self._workers[worker_id] = replace(w, version=w.version + 1)

    def add_advance(self, *, worker_id: int, amount: Decimal, expense: NewExpense) -> Expense:
        with self._lock:
            w = self._workers.get(worker_id)
            if not w:
                raise NotFoundError("Worker not found")
            posted = self._expenses.post(expense)
            self._workers[worker_id] = replace(w, advance=w.advance + amount, version=w.version + 1)
            return posted

    def replace_advance(self, *, worker_id, expected_version, new_advance, expense):
        with self._lock:
            w = self._workers.get(worker_id)
            if not w or w.version != expected_version:
                raise ConflictError("Advance balance changed meanwhile, please retry")
            posted = self._expenses.post(expense) if expense is not None else None
            self._workers[worker_id] = replace(w, advance=new_advance, version=w.version + 1)
            return posted

    def record_weekly_payment(self, *, worker_id: int, payment: NewWeeklyPayment, expense: Optional[NewExpense]):
        with self._lock:
            self.record_calls += 1
            w = self._workers[worker_id]
            if w.advance < payment.advance_deducted:
                raise InsufficientAdvanceError("Cannot deduct more than available advance amount")
            if any(p.covers(payment.week_start, payment.week_end) for p in self._payments.get(worker_id, [])):
                raise DuplicatePaymentError("Payment already marked for this week")

            posted = self._expenses.post(expense) if expense is not None else None
            recorded = WeeklyPayment(
                payment_id=self._child_id(),
                worker_id=worker_id,
                week_start=payment.week_start,
                week_end=payment.week_end,
                payment_date=payment.payment_date,
                total_wages=payment.total_wages,
                advance_deducted=payment.advance_deducted,
                net_payment=payment.net_payment,
                expense_id=posted.expense_id if posted else None,
                payment_day=payment.payment_day,
                note=payment.note,
            )
            self._payments.setdefault(worker_id, []).append(recorded)
            self._workers[worker_id] = replace(
                w, advance=w.advance - payment.advance_deducted, version=w.version + 1
            )
            return recorded, posted

    # test helper
    def set_advance(self, worker_id: int, amount) -> None:
        with self._lock:
            w = self._workers[worker_id]
            self._workers[worker_id] = replace(w, advance=Decimal(str(amount)), version=w.version + 1)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def expenses_repo() -> InMemoryExpenses:
    return InMemoryExpenses()


@pytest.fixture
def workers_repo(expenses_repo) -> InMemoryWorkers:
    return InMemoryWorkers(expenses_repo)


@pytest.fixture
def container(users_repo, workers_repo, expenses_repo):
    return wire_services(
        users_repo=users_repo,
        workers_repo=workers_repo,
        expenses_repo=expenses_repo,
        secret_key="test-secret",
        payment_day="Sunday",
        token_ttl_hours=1,
    )


@pytest.fixture
def owner_id(users_repo) -> int:
    return users_repo.create_user(
        full_name="Owner One",
        email="owner@farm.test",
        password_hash=generate_password_hash("secret123"),
        role=Role.OWNER,
    )


@pytest.fixture
def other_owner_id(users_repo) -> int:
    return users_repo.create_user(
        full_name="Owner Two",
        email="other@farm.test",
        password_hash=generate_password_hash("secret123"),
        role=Role.OWNER,
    )


@pytest.fixture
def make_worker(workers_repo, owner_id):
    def _make(
        name: str = "Ravi",
        *,
        daily_rate: str = "500.00",
        skill_level: SkillLevel = SkillLevel.SKILLED,
        work_type: WorkType = WorkType.HARVESTING,
        owner: Optional[int] = None,
        advance: Optional[str] = None,
    ) -> int:
        wid = workers_repo.create_worker(
            owner if owner is not None else owner_id,
            WorkerProfile(
                worker_name=name,
                gender=Gender.MALE,
                work_type=work_type,
                skill_level=skill_level,
                daily_rate=Decimal(daily_rate),
            ),
        )
        if advance is not None:
            workers_repo.set_advance(wid, advance)
        return wid

    return _make


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.farm_payroll.farm_payroll.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(container, users_repo, owner_id) -> dict:
    token = container.auth_service.issue_token(users_repo.get_by_id(owner_id)).token
    return {"Authorization": f"Bearer {token}"}
