from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.validators import PayloadReader


@dataclass(frozen=True)
class AddAdvanceCommand:
    amount: Decimal
    note: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "AddAdvanceCommand":
        reader = PayloadReader(payload)
        amount = reader.money(
            "amount", exclusive_minimum=Decimal("0"), message="Amount must be a positive number"
        )
        if amount is not None and amount <= 0:
            # e.g. 0.001 rounds down to 0.00
            reader.fail("amount", "Amount must be a positive number")
        note = reader.text("notes", message="Notes must be a string")
        reader.raise_if_errors()
        return cls(amount=amount, note=note or None)


@dataclass(frozen=True)
class CorrectAdvanceCommand:
    new_advance: Decimal
    note: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "CorrectAdvanceCommand":
        reader = PayloadReader(payload)
        new_advance = reader.money(
            "newAdvanceAmount",
            minimum=Decimal("0"),
            message="New advance amount must be a non-negative number",
        )
        note = reader.text("notes", message="Notes must be a string")
        reader.raise_if_errors()
        return cls(new_advance=new_advance, note=note or None)
