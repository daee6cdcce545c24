from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.validators import PayloadReader
from ..core.constants import PAY_WEEK_DAYS
from ..core.enums import PaymentDay


@dataclass(frozen=True)
class SettleWeekCommand:
    """Body of ``POST /labor/<id>/weekly-payment``.

    ``total_wages`` is taken as supplied by the caller (normally the weekly
    summary figure); it is not recomputed at settlement time.
    """

    week_start: date
    week_end: date
    total_wages: Decimal
    advance_deducted: Decimal = Decimal("0.00")
    payment_day: Optional[PaymentDay] = None
    note: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "SettleWeekCommand":
        reader = PayloadReader(payload)
        week_start = reader.calendar_date("weekStartDate", message="Valid week start date is required")
        week_end = reader.calendar_date("weekEndDate", message="Valid week end date is required")
        total_wages = reader.money(
            "totalWages", minimum=Decimal("0"), message="Total wages must be a non-negative number"
        )
        advance_deducted = reader.money(
            "advanceDeducted",
            required=False,
            minimum=Decimal("0"),
            message="Advance deducted must be a non-negative number",
        )
        payment_day = reader.choice("paymentDay", PaymentDay, required=False, message="Invalid payment day")
        note = reader.text("notes", message="Notes must be a string")

        if week_start and week_end and week_end - week_start != timedelta(days=PAY_WEEK_DAYS - 1):
            reader.fail("weekEndDate", "Week end date must be 6 days after week start date")

        reader.raise_if_errors()
        return cls(
            week_start=week_start,
            week_end=week_end,
            total_wages=total_wages,
            advance_deducted=advance_deducted if advance_deducted is not None else Decimal("0.00"),
            payment_day=payment_day,
            note=note or None,
        )


@dataclass(frozen=True)
class HistoryQuery:
    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def from_args(cls, args: Optional[Mapping[str, Any]]) -> "HistoryQuery":
        reader = PayloadReader(args)
        start = reader.calendar_date("startDate", required=False)
        end = reader.calendar_date("endDate", required=False)
        if start and end and end < start:
            reader.fail("endDate", "endDate must not be before startDate")
        reader.raise_if_errors()
        return cls(start=start, end=end)


@dataclass(frozen=True)
class StatsQuery:
    as_of: Optional[date] = None

    @classmethod
    def from_args(cls, args: Optional[Mapping[str, Any]]) -> "StatsQuery":
        reader = PayloadReader(args)
        as_of = reader.calendar_date("date", required=False)
        reader.raise_if_errors()
        return cls(as_of=as_of)
