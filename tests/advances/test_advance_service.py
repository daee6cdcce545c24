from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from src.farm_payroll.farm_payroll.advances.schemas import AddAdvanceCommand, CorrectAdvanceCommand
from src.farm_payroll.farm_payroll.core.enums import ExpenseCategory, ExpenseSource
from src.farm_payroll.farm_payroll.core.exceptions import ConflictError, NotFoundError, ValidationError

NOW = datetime(2024, 6, 12, 9, 30)


def test_adding_twice_accumulates_and_posts_two_expenses(container, expenses_repo, make_worker, owner_id):
    wid = make_worker("Lakshmi")
    svc = container.advance_service

    first = svc.add_advance(owner_id, wid, AddAdvanceCommand(amount=Decimal("250.00")), now=NOW)
    second = svc.add_advance(owner_id, wid, AddAdvanceCommand(amount=Decimal("250.00")), now=NOW)

    assert first.previous_advance == Decimal("0.00")
    assert second.previous_advance == Decimal("250.00")
    assert second.worker.advance == Decimal("500.00")
    assert first.expense.expense_id != second.expense.expense_id
    assert len(expenses_repo.rows) == 2
    for e in expenses_repo.rows.values():
        assert e.total_amount == Decimal("250.00")
        assert e.category is ExpenseCategory.LABOR
        assert e.source is ExpenseSource.ADVANCE
        assert e.item_name == "Labor advance for Lakshmi"
        assert e.unit == "payment"
        assert e.worker_id == wid

    out = second.to_dict()
    assert (out["previousAdvance"], out["newAdvance"], out["amountAdded"]) == (250.0, 500.0, 250.0)


@pytest.mark.parametrize("amount", [0, -10, "abc", None, "0.001"])
def test_add_command_requires_positive_amount(amount):
    with pytest.raises(ValidationError) as exc:
        AddAdvanceCommand.from_payload({"amount": amount})
    assert exc.value.errors[0]["field"] == "amount"


@pytest.mark.parametrize("amount", [1e30, "1e30", "10000000000"])
def test_add_command_rejects_amount_beyond_column_range(amount):
    with pytest.raises(ValidationError) as exc:
        AddAdvanceCommand.from_payload({"amount": amount})
    assert exc.value.errors == [{"field": "amount", "message": "Amount must be a positive number"}]


def test_correct_command_rejects_amount_beyond_column_range():
    with pytest.raises(ValidationError) as exc:
        CorrectAdvanceCommand.from_payload({"newAdvanceAmount": "1e30"})
    assert exc.value.errors[0]["field"] == "newAdvanceAmount"


def test_add_refuses_to_push_balance_past_column_range(container, expenses_repo, make_worker, owner_id):
    wid = make_worker(advance="9999999000.00")
    with pytest.raises(ValidationError, match="exceed"):
        container.advance_service.add_advance(owner_id, wid, AddAdvanceCommand(amount=Decimal("1000.00")))
    assert container.worker_service.get_worker(owner_id, wid).advance == Decimal("9999999000.00")
    assert expenses_repo.rows == {}

    top_up = container.advance_service.add_advance(owner_id, wid, AddAdvanceCommand(amount=Decimal("999.99")))
    assert top_up.worker.advance == Decimal("9999999999.99")


def test_add_rejects_non_positive_amount_even_without_schema(container, make_worker, owner_id):
    wid = make_worker()
    with pytest.raises(ValidationError, match="Valid amount is required"):
        container.advance_service.add_advance(owner_id, wid, AddAdvanceCommand(amount=Decimal("0")))


def test_add_to_unknown_worker(container, owner_id):
    with pytest.raises(NotFoundError):
        container.advance_service.add_advance(owner_id, 77, AddAdvanceCommand(amount=Decimal("5")))


def test_correction_posts_adjustment_for_the_difference(container, expenses_repo, make_worker, owner_id):
    wid = make_worker("Lakshmi", advance="500.00")

    result = container.advance_service.correct_advance(
        owner_id, wid, CorrectAdvanceCommand(new_advance=Decimal("320.00")), now=NOW
    )

    assert result.worker.advance == Decimal("320.00")
    assert result.adjustment == Decimal("-180.00")
    assert result.expense.total_amount == Decimal("180.00")
    assert result.expense.source is ExpenseSource.ADVANCE_ADJUSTMENT
    assert result.expense.item_name == "Labor advance adjustment for Lakshmi"
    assert result.expense.unit == "adjustment"
    assert "(decrease)" in result.expense.notes
    assert list(expenses_repo.rows) == [result.expense.expense_id]

    out = result.to_dict()
    assert (out["previousAdvance"], out["newAdvance"], out["adjustment"]) == (500.0, 320.0, -180.0)


def test_correction_upwards_is_an_increase(container, make_worker, owner_id):
    wid = make_worker("Lakshmi", advance="100.00")
    result = container.advance_service.correct_advance(owner_id, wid, CorrectAdvanceCommand(new_advance=Decimal("150.00")))
    assert result.adjustment == Decimal("50.00")
    assert "(increase)" in result.expense.notes


def test_correction_to_same_value_posts_nothing(container, expenses_repo, make_worker, owner_id):
    wid = make_worker(advance="100.00")
    result = container.advance_service.correct_advance(owner_id, wid, CorrectAdvanceCommand(new_advance=Decimal("100.00")))
    assert result.adjustment == Decimal("0")
    assert result.expense is None
    assert expenses_repo.rows == {}


def test_correction_to_zero_is_allowed_but_negative_is_not(container, make_worker, owner_id):
    wid = make_worker(advance="100.00")
    result = container.advance_service.correct_advance(owner_id, wid, CorrectAdvanceCommand(new_advance=Decimal("0")))
    assert result.worker.advance == Decimal("0")

    with pytest.raises(ValidationError):
        CorrectAdvanceCommand.from_payload({"newAdvanceAmount": -1})
    with pytest.raises(ValidationError):
        container.advance_service.correct_advance(owner_id, wid, CorrectAdvanceCommand(new_advance=Decimal("-1")))


def test_correction_detects_concurrent_balance_change(container, workers_repo, make_worker, owner_id):
    wid = make_worker(advance="100.00")
    real_replace = workers_repo.replace_advance

    def replace_after_someone_else(**kwargs):
        # another writer slips in between read and conditional write
        workers_repo.set_advance(wid, "130.00")
        return real_replace(**kwargs)

    workers_repo.replace_advance = replace_after_someone_else

    with pytest.raises(ConflictError):
        container.advance_service.correct_advance(owner_id, wid, CorrectAdvanceCommand(new_advance=Decimal("50.00")))
    assert workers_repo.get_for_owner(owner_id, wid).advance == Decimal("130.00")


def test_correction_detects_change_that_restored_the_same_balance(container, workers_repo, make_worker, owner_id):
    wid = make_worker(advance="100.00")
    real_replace = workers_repo.replace_advance

    def replace_after_round_trip(**kwargs):
        # balance moves away and back; only the version shows it
        workers_repo.set_advance(wid, "40.00")
        workers_repo.set_advance(wid, "100.00")
        return real_replace(**kwargs)

    workers_repo.replace_advance = replace_after_round_trip

    with pytest.raises(ConflictError):
        container.advance_service.correct_advance(owner_id, wid, CorrectAdvanceCommand(new_advance=Decimal("50.00")))
    assert workers_repo.get_for_owner(owner_id, wid).advance == Decimal("100.00")
