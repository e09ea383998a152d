import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from waypoint.constants import ErrorMessages, HistoryKind
from waypoint.database.store import DocumentStore
from waypoint.models import Task, TaskHistoryItem
from waypoint.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """
    A ledger entry before it is appended.
    Build it with one of the kind-specific constructors.
    """
    kind: HistoryKind
    author_id: Optional[int]
    comment: Optional[str] = None
    work_time: Optional[int] = None
    changes: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def creation(cls, author_id: Optional[int]) -> "HistoryEntry":
        return cls(kind=HistoryKind.creation, author_id=author_id)

    @classmethod
    def update(cls, author_id: Optional[int], changes: Dict[str, Dict[str, Any]]) -> "HistoryEntry":
        if not changes:
            raise ValueError("update entries require a non-empty change set")
        return cls(kind=HistoryKind.update, author_id=author_id, changes=changes)

    @classmethod
    def work_log(cls, author_id: Optional[int], work_time: int) -> "HistoryEntry":
        return cls(kind=HistoryKind.work_log, author_id=author_id, work_time=int(work_time))

    @classmethod
    def comment_entry(cls, author_id: Optional[int], text: str) -> "HistoryEntry":
        return cls(kind=HistoryKind.comment, author_id=author_id, comment=text)


def append(
    store: DocumentStore,
    task_id: int,
    entry: HistoryEntry,
    fields: Optional[Dict[str, Any]] = None,
) -> TaskHistoryItem:
    """
    Appends an entry to a task's history and bumps the task's updated_at.
    The entry, the task field values and updated_at are committed together,
    so a change is never stored without its entry.

    Args:
        store: Document store
        task_id: Task whose ledger receives the entry
        entry: The entry to append
        fields: Task field values written along with the entry

    Returns:
        TaskHistoryItem: The stored entry

    Raises:
        NotFoundError: If the task does not exist
    """
    task = store.find_one(Task, Task.id == task_id)
    if not task:
        raise NotFoundError(ErrorMessages.TASK_NOT_FOUND, metadata={"task_id": task_id})

    item = TaskHistoryItem(
        task_id=task.id,
        kind=entry.kind.value,
        author_id=entry.author_id,
        comment=entry.comment,
        work_time=entry.work_time,
        changes=entry.changes,
        created_at=datetime.utcnow(),
    )
    updates = dict(fields or {})
    updates["updated_at"] = item.created_at
    store.update_one(task, set=updates, add=[item])

    logger.debug("Appended %s entry %s to task %s", entry.kind.value, item.id, task_id)
    return item


def purge_by_author(store: DocumentStore, author_id: int) -> int:
    """
    Removes every entry authored by ``author_id`` from every task's ledger.
    The remaining entries keep their order. Only used when a user is deleted.
    """
    return store.delete_many(TaskHistoryItem, TaskHistoryItem.author_id == author_id)


# ---------------- READ SIDE ---------------- #

def total_time_logged(history: Iterable[TaskHistoryItem]) -> int:
    """Sum of work_log durations in milliseconds."""
    return sum(item.work_time or 0 for item in history if item.kind == HistoryKind.work_log.value)


def has_reached_status(history: Iterable[TaskHistoryItem], status: str) -> bool:
    for item in history:
        if item.kind != HistoryKind.update.value or not item.changes:
            continue
        if (item.changes.get("status") or {}).get("to") == status:
            return True
    return False


def statuses_reached(history: Iterable[TaskHistoryItem]) -> List[str]:
    reached = []
    for item in history:
        if item.kind == HistoryKind.update.value and item.changes and "status" in item.changes:
            status = item.changes["status"].get("to")
            if status not in reached:
                reached.append(status)
    return reached


def work_logs_by_author(
    store: DocumentStore,
    author_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[TaskHistoryItem]:
    """
    Returns the work_log entries written by a user across all tasks,
    optionally bounded by entry creation time.
    """
    criteria = [
        TaskHistoryItem.author_id == author_id,
        TaskHistoryItem.kind == HistoryKind.work_log.value,
    ]
    if start:
        criteria.append(TaskHistoryItem.created_at >= start)
    if end:
        criteria.append(TaskHistoryItem.created_at <= end)
    return store.find(TaskHistoryItem, *criteria)
