import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..errors import Forbidden, NotFound, Unauthenticated, UpstreamUnavailable
from ..providers.documents import DocumentStore, DocumentStoreError
from ..schemas.task import TaskRecord
from ..schemas.user import Principal
from ..validation import (
    month_and_year,
    require_fields,
    validate_month_year,
    validate_priority,
    validate_status,
)

logger = logging.getLogger(__name__)

TODOS = "todos"


def _require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise Unauthenticated()
    return principal


def _task_fields(title: str, description: str, status: str, priority: str, date: str) -> Dict[str, Any]:
    """Validate caller-settable fields and derive month/year from the date."""
    require_fields(title=title, description=description)
    month, year = month_and_year(date)
    return {
        "title": title.strip(),
        "description": description.strip(),
        "status": validate_status(status),
        "priority": validate_priority(priority),
        "date": date,
        "month": month,
        "year": year,
    }


def _next_timestamp(previous: Optional[datetime]) -> datetime:
    now = datetime.utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class TaskGateway:
    """Per-user task CRUD over a document store.

    Every operation runs as an explicit principal; ownership is checked
    before any write.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def create(
        self,
        principal: Optional[Principal],
        title: str,
        description: str,
        status: str,
        priority: str,
        date: str,
    ) -> TaskRecord:
        principal = _require_principal(principal)
        data = _task_fields(title, description, status, priority, date)
        now = datetime.utcnow()
        data.update(user_id=principal.user_id, created_at=now, updated_at=now)

        try:
            task_id = self.store.insert(TODOS, data)
        except DocumentStoreError as exc:
            logger.error("Creating task for %s failed: %s", principal.user_id, exc.code)
            raise UpstreamUnavailable("Failed to create todo. Please try again.") from exc

        logger.info("Created task %s for %s", task_id, principal.user_id)
        return TaskRecord(id=task_id, **data)

    def list_all(self, principal: Optional[Principal]) -> List[TaskRecord]:
        principal = _require_principal(principal)
        return self._query(
            principal,
            [("user_id", "==", principal.user_id)],
            ("created_at", "desc"),
            "Failed to load todos. Please try again.",
        )

    def list_by_month(self, principal: Optional[Principal], month: int, year: int) -> List[TaskRecord]:
        principal = _require_principal(principal)
        validate_month_year(month, year)
        return self._query(
            principal,
            [
                ("user_id", "==", principal.user_id),
                ("month", "==", month),
                ("year", "==", year),
            ],
            ("date", "desc"),
            "Failed to filter todos. Please try again.",
        )

    def get(self, principal: Optional[Principal], task_id: str) -> TaskRecord:
        principal = _require_principal(principal)
        return TaskRecord(**self._owned(principal, task_id))

    def update(
        self,
        principal: Optional[Principal],
        task_id: str,
        title: str,
        description: str,
        status: str,
        priority: str,
        date: str,
    ) -> TaskRecord:
        principal = _require_principal(principal)
        fields = _task_fields(title, description, status, priority, date)
        current = self._owned(principal, task_id)
        fields["updated_at"] = _next_timestamp(current["updated_at"])

        try:
            self.store.update(TODOS, task_id, fields)
        except DocumentStoreError as exc:
            if exc.code == "not-found":
                raise NotFound("Todo not found.") from exc
            logger.error("Updating task %s failed: %s", task_id, exc.code)
            raise UpstreamUnavailable("Failed to update todo. Please try again.") from exc

        logger.info("Updated task %s", task_id)
        current.update(fields)
        return TaskRecord(**current)

    def delete(self, principal: Optional[Principal], task_id: str) -> None:
        principal = _require_principal(principal)
        self._owned(principal, task_id)

        try:
            self.store.delete(TODOS, task_id)
        except DocumentStoreError as exc:
            if exc.code == "not-found":
                raise NotFound("Todo not found.") from exc
            logger.error("Deleting task %s failed: %s", task_id, exc.code)
            raise UpstreamUnavailable("Failed to delete todo. Please try again.") from exc

        logger.info("Deleted task %s", task_id)

    def _owned(self, principal: Principal, task_id: str) -> Dict[str, Any]:
        try:
            document = self.store.get(TODOS, task_id)
        except DocumentStoreError as exc:
            logger.error("Fetching task %s failed: %s", task_id, exc.code)
            raise UpstreamUnavailable("Failed to load todo. Please try again.") from exc

        if document is None:
            raise NotFound("Todo not found.")
        if document["user_id"] != principal.user_id:
            logger.warning("User %s attempted to access task %s", principal.user_id, task_id)
            raise Forbidden("You do not have access to this todo.")
        return document

    def _query(self, principal: Principal, where, order_by, failure_message: str) -> List[TaskRecord]:
        try:
            documents = self.store.query(TODOS, where, order_by)
        except DocumentStoreError as exc:
            logger.error("Task query for %s failed: %s", principal.user_id, exc.code)
            raise UpstreamUnavailable(failure_message) from exc
        return [TaskRecord(**document) for document in documents]
