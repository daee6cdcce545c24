from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar

from ..core.constants import MAX_MONEY, MONEY_QUANT
from ..core.exceptions import ValidationError
from .datetime_utils import parse_calendar_date

E = TypeVar("E", bound=Enum)

_MISSING = object()


class PayloadReader:
    """Reads fields out of a JSON body (or query args) and collects every error.

    Each accessor returns ``None`` when the field is invalid so that a schema can
    read all of its fields before calling :meth:`raise_if_errors`.
    """

    def __init__(self, payload: Optional[Mapping[str, Any]]):
        self._data = payload if isinstance(payload, Mapping) else {}
        self.errors: list[dict] = []
        if payload is not None and not isinstance(payload, Mapping):
            self.fail(None, "Request body must be a JSON object")

    def fail(self, field: Optional[str], message: str) -> None:
        self.errors.append({"field": field, "message": message})

    def _raw(self, field: str, required: bool, message: str) -> Any:
        value = self._data.get(field, _MISSING)
        if value is _MISSING or value is None or (isinstance(value, str) and not value.strip()):
            if required:
                self.fail(field, message)
            return _MISSING
        return value

    def text(self, field: str, *, required: bool = False, message: Optional[str] = None) -> Optional[str]:
        value = self._raw(field, required, message or f"{field} is required")
        if value is _MISSING:
            return None
        if not isinstance(value, str):
            self.fail(field, message or f"{field} must be a string")
            return None
        return value.strip()

    def decimal(
        self,
        field: str,
        *,
        required: bool = True,
        minimum: Optional[Decimal] = None,
        exclusive_minimum: Optional[Decimal] = None,
        maximum: Optional[Decimal] = None,
        message: Optional[str] = None,
    ) -> Optional[Decimal]:
        value = self._raw(field, required, message or f"{field} is required")
        if value is _MISSING:
            return None
        if isinstance(value, bool):
            self.fail(field, message or f"{field} must be a number")
            return None
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            self.fail(field, message or f"{field} must be a number")
            return None
        if not number.is_finite():
            self.fail(field, message or f"{field} must be a number")
            return None
        if minimum is not None and number < minimum:
            self.fail(field, message or f"{field} must be at least {minimum}")
            return None
        if exclusive_minimum is not None and number <= exclusive_minimum:
            self.fail(field, message or f"{field} must be greater than {exclusive_minimum}")
            return None
        if maximum is not None and number > maximum:
            self.fail(field, message or f"{field} must be at most {maximum}")
            return None
        return number

    def money(self, field: str, **kwargs: Any) -> Optional[Decimal]:
        kwargs.setdefault("maximum", MAX_MONEY)
        number = self.decimal(field, **kwargs)
        if number is None:
            return None
        try:
            return number.quantize(MONEY_QUANT)
        except InvalidOperation:
            # only reachable when a caller lifts the cap with maximum=None
            self.fail(field, kwargs.get("message") or f"{field} is out of range")
            return None

    def integer(self, field: str, *, required: bool = False, minimum: Optional[int] = None) -> Optional[int]:
        value = self._raw(field, required, f"{field} is required")
        if value is _MISSING:
            return None
        try:
            number = int(str(value).strip())
        except ValueError:
            self.fail(field, f"{field} must be an integer")
            return None
        if minimum is not None and number < minimum:
            self.fail(field, f"{field} must be at least {minimum}")
            return None
        return number

    def boolean(self, field: str, *, required: bool = True, message: Optional[str] = None) -> Optional[bool]:
        value = self._raw(field, required, message or f"{field} must be true or false")
        if value is _MISSING:
            return None
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
            return value.strip().lower() == "true"
        self.fail(field, message or f"{field} must be true or false")
        return None

    def calendar_date(self, field: str, *, required: bool = True, message: Optional[str] = None) -> Optional[date]:
        value = self._raw(field, required, message or f"Valid {field} is required")
        if value is _MISSING:
            return None
        try:
            return parse_calendar_date(value)
        except (TypeError, ValueError):
            self.fail(field, message or f"Valid {field} is required")
            return None

    def choice(
        self,
        field: str,
        enum_cls: Type[E],
        *,
        required: bool = True,
        message: Optional[str] = None,
    ) -> Optional[E]:
        value = self._raw(field, required, message or f"Invalid {field}")
        if value is _MISSING:
            return None
        try:
            return enum_cls(value)
        except ValueError:
            self.fail(field, message or f"Invalid {field}")
            return None

    def raise_if_errors(self) -> None:
        if self.errors:
            raise ValidationError(self.errors[0]["message"], errors=self.errors)
