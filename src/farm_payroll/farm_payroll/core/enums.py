from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role of the farm owner using the API."""

    OWNER = "owner"
    ADMIN = "admin"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class WorkType(str, Enum):
    """Kind of field work a laborer is registered for."""

    HARVESTING = "Harvesting"
    PRUNING = "Pruning"
    WEEDING = "Weeding"
    PROCESSING = "Processing"
    GENERAL = "General"


class SkillLevel(str, Enum):
    SKILLED = "skilled"
    SEMI_SKILLED = "semi-skilled"
    UNSKILLED = "unskilled"


class PaymentDay(str, Enum):
    """Weekday anchor of the pay week. Numbering is Sunday-based (Sunday=0)."""

    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    @property
    def number(self) -> int:
        return _PAYMENT_DAY_ORDER.index(self)


_PAYMENT_DAY_ORDER = list(PaymentDay)


class ExpenseCategory(str, Enum):
    FERTILIZERS = "Fertilizers"
    PESTICIDES = "Pesticides"
    EQUIPMENT = "Equipment"
    LABOR = "Labor"
    SEEDS = "Seeds"
    IRRIGATION = "Irrigation"
    REPAIR = "Repair"
    PROCESSING = "Processing"
    FUEL = "Fuel"
    OTHER = "Other"


class ExpenseSource(str, Enum):
    """Which payroll operation posted an expense entry."""

    ADVANCE = "advance"
    ADVANCE_ADJUSTMENT = "advance_adjustment"
    WEEKLY_PAYMENT = "weekly_payment"
    MANUAL = "manual"
