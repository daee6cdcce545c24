from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import ExpenseCategory, ExpenseSource


@dataclass(frozen=True)
class NewExpense:
    """Expense entry about to be posted to the ledger."""

    owner_id: int
    category: ExpenseCategory
    item_name: str
    unit: str
    unit_price: Decimal
    total_amount: Decimal
    purchase_date: datetime
    quantity: Decimal = Decimal("1")
    worker_id: Optional[int] = None
    source: ExpenseSource = ExpenseSource.MANUAL
    supplier: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Expense:
    expense_id: int
    owner_id: int
    category: ExpenseCategory
    item_name: str
    quantity: Decimal
    unit: str
    unit_price: Decimal
    total_amount: Decimal
    purchase_date: datetime
    worker_id: Optional[int] = None
    source: ExpenseSource = ExpenseSource.MANUAL
    supplier: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_new(cls, expense_id: int, new: NewExpense) -> "Expense":
        return cls(
            expense_id=int(expense_id),
            owner_id=new.owner_id,
            category=new.category,
            item_name=new.item_name,
            quantity=new.quantity,
            unit=new.unit,
            unit_price=new.unit_price,
            total_amount=new.total_amount,
            purchase_date=new.purchase_date,
            worker_id=new.worker_id,
            source=new.source,
            supplier=new.supplier,
            notes=new.notes,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.expense_id,
            "category": self.category.value,
            "itemName": self.item_name,
            "quantity": float(self.quantity),
            "unit": self.unit,
            "unitPrice": float(self.unit_price),
            "totalAmount": float(self.total_amount),
            "purchaseDate": self.purchase_date.isoformat(),
            "workerId": self.worker_id,
            "source": self.source.value,
            "supplier": self.supplier,
            "notes": self.notes,
        }
