"""Date windows used by payroll aggregation.

Two different week notions exist and must not be mixed up:

* the statistics week is always Sunday..Saturday of the as-of date;
* the pay week is anchored on a configurable payment day, with a noon cutoff
  on the payment day itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..common.datetime_utils import add_days, end_of_day, month_bounds, start_of_day, sunday_based_weekday
from ..core.constants import DEFAULT_PAYMENT_DAY, PAY_WEEK_DAYS, PAYMENT_DAY_CUTOFF_HOUR
from ..core.enums import PaymentDay
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class DateWindow:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    def to_dict(self) -> dict:
        return {"startDate": self.start.isoformat(), "endDate": self.end.isoformat()}


def resolve_payment_day(value: Union[str, PaymentDay, None], default: Union[str, PaymentDay] = DEFAULT_PAYMENT_DAY) -> PaymentDay:
    if value is None or (isinstance(value, str) and not value.strip()):
        return PaymentDay(default)
    try:
        return PaymentDay(value.strip() if isinstance(value, str) else value)
    except ValueError:
        raise ValidationError(
            "Invalid payment day",
            errors=[{"field": "paymentDay", "message": "Invalid payment day"}],
        )


def pay_week(now: datetime, payment_day: PaymentDay) -> DateWindow:
    """Current pay week for ``payment_day`` as seen at ``now``.

    Before noon on the payment day the previous pay week (the one that just
    closed) is still current, so the morning of payment refers to the week
    being paid out. From noon on, a fresh week starting today is current.
    """
    days_since_payment = (sunday_based_weekday(now.date()) - payment_day.number + 7) % 7
    if days_since_payment == 0 and now.hour < PAYMENT_DAY_CUTOFF_HOUR:
        days_since_payment = PAY_WEEK_DAYS

    start = add_days(now.date(), -days_since_payment)
    return DateWindow(start=start, end=add_days(start, PAY_WEEK_DAYS - 1))


def day_window(d: date) -> DateWindow:
    return DateWindow(start=d, end=d)


def sunday_week_window(d: date) -> DateWindow:
    start = add_days(d, -sunday_based_weekday(d))
    return DateWindow(start=start, end=add_days(start, 6))


def month_window(d: date) -> DateWindow:
    first, last = month_bounds(d)
    return DateWindow(start=first, end=last)


def history_window(start: Optional[date], end: Optional[date]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Inclusive datetime bounds for calendar-day filters; either side may be open."""
    return (start_of_day(start) if start else None, end_of_day(end) if end else None)
