from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.validators import PayloadReader
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import Gender, SkillLevel, WorkType
from .model import WorkerProfile


def profile_from_payload(payload: Optional[Mapping[str, Any]]) -> WorkerProfile:
    """Validate the body of ``POST /labor`` and ``PUT /labor/<id>``."""
    reader = PayloadReader(payload)
    name = reader.text("workerName", required=True, message="Worker name is required")
    gender = reader.choice("gender", Gender, message="Gender must be male or female")
    work_type = reader.choice("workType", WorkType, message="Invalid work type")
    skill_level = reader.choice("skillLevel", SkillLevel, message="Invalid skill level")
    daily_rate = reader.money(
        "dailyRate", minimum=Decimal("0"), message="Daily rate must be a number"
    )
    reader.raise_if_errors()
    return WorkerProfile(
        worker_name=name,
        gender=gender,
        work_type=work_type,
        skill_level=skill_level,
        daily_rate=daily_rate,
    )


@dataclass(frozen=True)
class WorkerListQuery:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    work_type: Optional[WorkType] = None
    skill_level: Optional[SkillLevel] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, args: Optional[Mapping[str, Any]]) -> "WorkerListQuery":
        reader = PayloadReader(args)
        page = reader.integer("page", minimum=1)
        limit = reader.integer("limit", minimum=1)
        work_type = reader.choice("workType", WorkType, required=False, message="Invalid work type")
        skill_level = reader.choice("skillLevel", SkillLevel, required=False, message="Invalid skill level")
        reader.raise_if_errors()
        return cls(
            page=page or 1,
            limit=min(limit or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE),
            work_type=work_type,
            skill_level=skill_level,
        )
