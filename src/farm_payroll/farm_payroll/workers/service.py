from __future__ import annotations

import math
from typing import Optional

from ..common.locks import KeyedLock
from ..core.exceptions import NotFoundError
from ..logging_config import get_logger
from .model import Worker, WorkerProfile
from .repository import WorkerRepository
from .schemas import WorkerListQuery

logger = get_logger(__name__)


class WorkerService:
    """Use case: the owner's worker registry (list, add, edit, remove)."""

    def __init__(self, workers: WorkerRepository, *, locks: Optional[KeyedLock] = None):
        self._workers = workers
        self._locks = locks or KeyedLock()

    def list_workers(self, owner_id: int, query: Optional[WorkerListQuery] = None) -> dict:
        query = query or WorkerListQuery()
        records = self._workers.list_for_owner(
            owner_id,
            work_type=query.work_type,
            skill_level=query.skill_level,
            limit=query.limit,
            offset=query.offset,
        )
        total = self._workers.count_for_owner(owner_id, work_type=query.work_type, skill_level=query.skill_level)
        return {
            "laborRecords": [w.to_dict() for w in records],
            "totalPages": math.ceil(total / query.limit),
            "currentPage": query.page,
            "total": total,
        }

    def get_worker(self, owner_id: int, worker_id: int) -> Worker:
        worker = self._workers.get_for_owner(owner_id, worker_id)
        if not worker:
            raise NotFoundError("Labor record not found")
        return worker

    def add_worker(self, owner_id: int, profile: WorkerProfile) -> Worker:
        worker_id = self._workers.create_worker(owner_id, profile)
        logger.info("worker added", extra={"owner_id": owner_id, "worker_id": worker_id})
        return self.get_worker(owner_id, worker_id)

    def update_worker(self, owner_id: int, worker_id: int, profile: WorkerProfile) -> Worker:
        with self._locks.hold(worker_id):
            if not self._workers.update_profile(owner_id, worker_id, profile):
                raise NotFoundError("Labor record not found")
            worker = self.get_worker(owner_id, worker_id)
        logger.info("worker updated", extra={"owner_id": owner_id, "worker_id": worker_id})
        return worker

    def delete_worker(self, owner_id: int, worker_id: int) -> None:
        with self._locks.hold(worker_id):
            if not self._workers.delete_worker(owner_id, worker_id):
                raise NotFoundError("Labor record not found")
        self._locks.discard(worker_id)
        logger.info("worker deleted", extra={"owner_id": owner_id, "worker_id": worker_id})

    def worker_names(self, owner_id: int) -> list[dict]:
        return [
            {"id": w.worker_id, "workerName": w.worker_name, "advance": float(w.advance)}
            for w in sorted(self._workers.list_for_owner(owner_id), key=lambda w: w.worker_name.lower())
        ]
