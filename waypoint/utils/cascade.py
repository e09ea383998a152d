"""
Cascade engine.

Structural mutations (user deletion, sprint roster/task changes, sprint or
task deletion) are expressed as a saga: an ordered list of small steps, each
of which recomputes its targets from the current data and is a no-op when
applied a second time. There is no cross-collection transaction; a failed
cascade is remedied by running the whole plan again.
"""
import logging
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

from waypoint.database.store import DocumentStore
from waypoint.models import Project, Sprint, Task, User, UserSession
from waypoint.utils import history_ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushToAll:
    """Adds ``value`` to the list field of every document of ``model``."""
    model: Any
    field: str
    value: Any

    def apply(self, store: DocumentStore) -> int:
        return store.update_many(self.model, push={self.field: self.value})


@dataclass(frozen=True)
class PullFromAll:
    """Removes ``value`` from the list field of every document holding it."""
    model: Any
    field: str
    value: Any

    def apply(self, store: DocumentStore) -> int:
        return store.update_many(self.model, contains=(self.field, self.value), pull={self.field: self.value})


@dataclass(frozen=True)
class UnsetWhereEqual:
    """Clears a scalar reference on every document pointing at ``value``."""
    model: Any
    field: str
    value: Any

    def apply(self, store: DocumentStore) -> int:
        column = getattr(self.model, self.field)
        return store.update_many(self.model, column == self.value, unset=[self.field])


@dataclass(frozen=True)
class DeleteWhereEqual:
    model: Any
    field: str
    value: Any

    def apply(self, store: DocumentStore) -> int:
        column = getattr(self.model, self.field)
        return store.delete_many(self.model, column == self.value)


@dataclass(frozen=True)
class DeleteDocument:
    model: Any
    doc_id: int

    def apply(self, store: DocumentStore) -> int:
        return int(store.delete_one(self.model, self.model.id == self.doc_id))


@dataclass(frozen=True)
class PurgeAuthoredHistory:
    author_id: int

    def apply(self, store: DocumentStore) -> int:
        return history_ledger.purge_by_author(store, self.author_id)


@dataclass(frozen=True)
class LinkTasksToSprint:
    """Points every listed task at the sprint."""
    sprint_id: int
    task_ids: Tuple[int, ...]

    def apply(self, store: DocumentStore) -> int:
        if not self.task_ids:
            return 0
        return store.update_many(Task, Task.id.in_(self.task_ids), set={"sprint_id": self.sprint_id})


@dataclass(frozen=True)
class ReleaseTasksFromOtherSprints:
    """A task belongs to one sprint: drop the listed ids from every other sprint's task set."""
    sprint_id: int
    task_ids: Tuple[int, ...]

    def apply(self, store: DocumentStore) -> int:
        affected = 0
        for task_id in self.task_ids:
            affected += store.update_many(
                Sprint,
                Sprint.id != self.sprint_id,
                contains=("tasks", task_id),
                pull={"tasks": task_id},
            )
        return affected


@dataclass(frozen=True)
class UnlinkDroppedTasks:
    """Clears the sprint reference of tasks linked to the sprint but no longer in its task set."""
    sprint_id: int
    kept_task_ids: Tuple[int, ...]

    def apply(self, store: DocumentStore) -> int:
        return store.update_many(
            Task,
            Task.sprint_id == self.sprint_id,
            Task.id.notin_(self.kept_task_ids),
            unset=["sprint_id"],
        )


def run_saga(store: DocumentStore, name: str, steps: Sequence[Any]) -> List[int]:
    """
    Applies the steps in order, each one committed on its own.

    Returns:
        list: Number of documents each step touched
    """
    counts = []
    for step in steps:
        count = step.apply(store)
        logger.info("%s: %s affected %d document(s)", name, type(step).__name__, count)
        counts.append(count)
    return counts


# ---------------- PLANS ---------------- #

def user_creation_plan(user_id: int) -> List[Any]:
    # New users are implicitly members of every project
    return [PushToAll(Project, "team", user_id)]


def user_deletion_plan(user: User) -> List[Any]:
    return [
        PullFromAll(Sprint, "team", user.id),
        UnsetWhereEqual(Sprint, "po_id", user.id),
        UnsetWhereEqual(Sprint, "scrum_master_id", user.id),
        PullFromAll(Project, "team", user.id),
        PullFromAll(Task, "assignees", user.id),
        DeleteWhereEqual(UserSession, "username", user.username),
        PurgeAuthoredHistory(user.id),
        DeleteDocument(User, user.id),
    ]


def sprint_tasks_plan(sprint_id: int, task_ids: Sequence[int]) -> List[Any]:
    task_ids = tuple(task_ids)
    return [
        LinkTasksToSprint(sprint_id, task_ids),
        ReleaseTasksFromOtherSprints(sprint_id, task_ids),
        UnlinkDroppedTasks(sprint_id, task_ids),
    ]


def roster_change_plan(removed_user_ids: Sequence[int]) -> List[Any]:
    # Users dropped from a sprint roster are unassigned from every task
    return [PullFromAll(Task, "assignees", user_id) for user_id in removed_user_ids]


def sprint_deletion_plan(sprint_id: int) -> List[Any]:
    return [
        DeleteDocument(Sprint, sprint_id),
        UnsetWhereEqual(Task, "sprint_id", sprint_id),
    ]


def task_deletion_plan(task_id: int) -> List[Any]:
    return [
        DeleteDocument(Task, task_id),
        PullFromAll(Sprint, "tasks", task_id),
    ]
