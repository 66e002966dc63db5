from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.core.events import SnapshotBus, Subscription
from jobtracker.core.runtime import get_snapshot_bus
from jobtracker.db.repositories import Repository
from jobtracker.errors import RecordNotFoundError, ValidationError
from jobtracker.types import (
    APPLICATION_STATUSES,
    ApplicationStatistics,
    JobApplicationFields,
    JobApplicationRecord,
    JobApplicationUpdate,
)

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[list[JobApplicationRecord]], None]

REQUIRED_FIELDS_MESSAGE = "Company and Position are required fields"


class JobApplicationStore:
    """Owner-scoped CRUD over job applications with live snapshots.

    Every write re-queries the owner's full record list and pushes it to the
    listeners registered through ``list_for_owner``.
    """

    def __init__(self, session_factory: Callable[[], Session], bus: SnapshotBus | None = None):
        self.session_factory = session_factory
        self.bus = bus or get_snapshot_bus()

    def create(self, owner_id: str, fields: JobApplicationFields | dict[str, Any]) -> int:
        values = _validated_fields(fields)
        with self.session_factory() as session:
            try:
                record = Repository(session).create_job_application(user_id=owner_id, values=values)
            except SQLAlchemyError:
                session.rollback()
                logger.exception("Failed to create job application owner=%s", owner_id)
                raise
            record_id = record.id

        logger.info("Created job application id=%s owner=%s", record_id, owner_id)
        self._publish(owner_id)
        return record_id

    def get(self, owner_id: str, record_id: int) -> JobApplicationRecord:
        with self.session_factory() as session:
            record = Repository(session).get_job_application(user_id=owner_id, record_id=record_id)
            if record is None:
                raise RecordNotFoundError(f"job application {record_id} not found")
            return JobApplicationRecord.model_validate(record)

    def update(self, owner_id: str, record_id: int, fields: JobApplicationUpdate | dict[str, Any]) -> None:
        changes = _validated_changes(fields)
        with self.session_factory() as session:
            repo = Repository(session)
            record = repo.get_job_application(user_id=owner_id, record_id=record_id)
            if record is None:
                raise RecordNotFoundError(f"job application {record_id} not found")
            try:
                repo.update_job_application(record, changes)
            except SQLAlchemyError:
                session.rollback()
                logger.exception("Failed to update job application id=%s", record_id)
                raise

        self._publish(owner_id)

    def delete(self, owner_id: str, record_id: int) -> None:
        with self.session_factory() as session:
            repo = Repository(session)
            record = repo.get_job_application(user_id=owner_id, record_id=record_id)
            if record is None:
                raise RecordNotFoundError(f"job application {record_id} not found")
            try:
                repo.delete_job_application(record)
            except SQLAlchemyError:
                session.rollback()
                logger.exception("Failed to delete job application id=%s", record_id)
                raise

        logger.info("Deleted job application id=%s owner=%s", record_id, owner_id)
        self._publish(owner_id)

    def snapshot(self, owner_id: str) -> list[JobApplicationRecord]:
        with self.session_factory() as session:
            rows = Repository(session).list_job_applications(owner_id)
            return [JobApplicationRecord.model_validate(row) for row in rows]

    def recent_by_application_date(self, owner_id: str, limit: int = 10) -> list[JobApplicationRecord]:
        with self.session_factory() as session:
            rows = Repository(session).list_recent_job_applications(owner_id, limit=limit)
            return [JobApplicationRecord.model_validate(row) for row in rows]

    def list_for_owner(self, owner_id: str, listener: SnapshotListener) -> Subscription:
        with self.bus.ordering_lock(owner_id):
            subscription = self.bus.subscribe(owner_id, listener)
            try:
                listener(self.snapshot(owner_id))
            except Exception:
                subscription.cancel()
                raise
        return subscription

    def _publish(self, owner_id: str) -> None:
        if not self.bus.has_listeners(owner_id):
            return
        with self.bus.ordering_lock(owner_id):
            try:
                snapshot = self.snapshot(owner_id)
            except SQLAlchemyError:
                logger.exception("Failed to load snapshot for owner=%s", owner_id)
                return
            self.bus.publish(owner_id, snapshot)


def _require_text(value: str | None) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)
    return cleaned


def _validated_fields(fields: JobApplicationFields | dict[str, Any]) -> dict[str, Any]:
    if isinstance(fields, dict):
        try:
            fields = JobApplicationFields.model_validate(fields)
        except PydanticValidationError as exc:
            if any(
                error["loc"][:1] in {("company",), ("position",)}
                and (error["type"] == "missing" or error.get("input") is None)
                for error in exc.errors()
            ):
                raise ValidationError(REQUIRED_FIELDS_MESSAGE) from exc
            raise ValidationError(str(exc)) from exc

    values = fields.model_dump()
    values["company"] = _require_text(values["company"])
    values["position"] = _require_text(values["position"])
    return values


def _validated_changes(fields: JobApplicationUpdate | dict[str, Any]) -> dict[str, Any]:
    if isinstance(fields, dict):
        fields = {key: value for key, value in fields.items() if key not in {"user_id", "id"}}
        try:
            fields = JobApplicationUpdate.model_validate(fields)
        except PydanticValidationError as exc:
            raise ValidationError(str(exc)) from exc

    changes = fields.changes()
    for key in ("company", "position"):
        if key in changes:
            changes[key] = _require_text(changes[key])
    return changes


def filter_applications(
    records: Iterable[JobApplicationRecord],
    search: str = "",
    status: str = "all",
) -> list[JobApplicationRecord]:
    term = search.strip().lower()
    matched = []
    for record in records:
        if term and not (
            term in record.company.lower()
            or term in record.position.lower()
            or (record.location and term in record.location.lower())
        ):
            continue
        if status != "all" and record.status != status:
            continue
        matched.append(record)
    return matched


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_statistics(records: Sequence[JobApplicationRecord]) -> ApplicationStatistics:
    counts = Counter(record.status for record in records)
    per_status = {status: counts.get(status, 0) for status in APPLICATION_STATUSES}
    total = len(records)
    success_rate = 0
    if total:
        success_rate = round_half_up(100 * (per_status["offer"] + per_status["interview"]) / total)
    return ApplicationStatistics(total=total, success_rate=success_rate, **per_status)


def recent_applications(records: Iterable[JobApplicationRecord], limit: int = 5) -> list[JobApplicationRecord]:
    def _created(record: JobApplicationRecord) -> float:
        return record.created_at.timestamp() if record.created_at else float("-inf")

    return sorted(records, key=_created, reverse=True)[:limit]


def most_applied_position(records: Iterable[JobApplicationRecord]) -> str | None:
    counts = Counter(record.position for record in records)
    if not counts:
        return None
    return counts.most_common(1)[0][0]
