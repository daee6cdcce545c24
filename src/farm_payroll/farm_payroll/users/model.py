from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Farm owner account. Owns workers and expenses.

    Plain data object; no database access here.
    """

    user_id: int
    full_name: str
    email: str
    password_hash: str
    role: Role = Role.OWNER
    is_active: bool = True
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role.value,
        }
