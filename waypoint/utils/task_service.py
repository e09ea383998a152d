import logging
from typing import Any, Dict, List, Mapping, Optional

from waypoint.constants import ErrorMessages, TaskStatus
from waypoint.database.store import DocumentStore
from waypoint.models import Project, Task, TaskHistoryItem
from waypoint.schemas import TaskCreate
from waypoint.utils import cascade, history_ledger
from waypoint.utils.common import get_object_or_404
from waypoint.utils.diff_engine import compute_changes, dedupe
from waypoint.utils.exceptions import NotFoundError
from waypoint.utils.history_ledger import HistoryEntry
from waypoint.utils.project_service import resolve_project
from waypoint.utils.utils import task_fields

logger = logging.getLogger(__name__)

def get_task(store: DocumentStore, task_id: int) -> Task:
    return get_object_or_404(store, Task, task_id, ErrorMessages.TASK_NOT_FOUND)

def get_project_task(store: DocumentStore, project: Project, task_id: int) -> Task:
    """
    Fetches a task, treating a task of another project as missing.
    """
    task = get_task(store, task_id)
    if task.project_id != project.id:
        raise NotFoundError(ErrorMessages.TASK_NOT_FOUND, metadata={"task_id": task_id, "project_id": project.id})
    return task

def list_project_tasks(store: DocumentStore, project: Project) -> List[Task]:
    return store.find(Task, Task.project_id == project.id)

def list_sprint_tasks(store: DocumentStore, sprint_id: int) -> List[Task]:
    return store.find(Task, Task.sprint_id == sprint_id)

def create_task(store: DocumentStore, project_ordinal: int, task_data: TaskCreate, author_id: Optional[int]) -> int:
    """
    Creates a task in the project at ``project_ordinal``.

    The task starts as not_started and its ledger starts with a single
    creation entry authored by the creator.

    Returns:
        int: The new task id

    Raises:
        NotFoundError: If the project ordinal does not resolve
    """
    project = resolve_project(store, project_ordinal)

    task = Task(
        project_id=project.id,
        name=task_data.name,
        description=task_data.description,
        status=TaskStatus.not_started.value,
        priority=task_data.priority.value,
        weight=int(task_data.weight),
        tags=dedupe(task_data.tags),
        assignees=dedupe(task_data.assignees),
    )
    store.insert_one(task)
    history_ledger.append(store, task.id, HistoryEntry.creation(author_id))

    logger.info("Created task %s in project %s", task.id, project.id)
    return task.id

def apply_task_patch(
    store: DocumentStore,
    task_id: int,
    patch: Mapping[str, Any],
    author_id: Optional[int],
) -> Dict[str, Dict[str, Any]]:
    """
    Applies a partial update to a task and records it in the ledger.

    Args:
        store: Document store
        task_id: Task to update
        patch: Requested field values
        author_id: User performing the update

    Returns:
        dict: The applied change set. Empty when nothing changed, in which
        case neither the task nor its history is touched.

    Raises:
        NotFoundError: If the task does not exist
        ValidationError: If a numeric field cannot be parsed
    """
    task = get_task(store, task_id)

    changes = compute_changes(task_fields(task), patch)
    if not changes:
        logger.debug("Patch on task %s changed nothing", task_id)
        return {}

    history_ledger.append(
        store,
        task_id,
        HistoryEntry.update(author_id, changes),
        fields={field: change["to"] for field, change in changes.items()},
    )

    logger.info("Task %s updated: %s", task_id, ", ".join(changes))
    return changes

def append_work_log(store: DocumentStore, task_id: int, duration_ms: int, author_id: Optional[int]) -> TaskHistoryItem:
    """
    Records time spent on a task. Bounds are checked by request validation.
    """
    return history_ledger.append(store, task_id, HistoryEntry.work_log(author_id, duration_ms))

def append_comment(store: DocumentStore, task_id: int, text: str, author_id: Optional[int]) -> TaskHistoryItem:
    return history_ledger.append(store, task_id, HistoryEntry.comment_entry(author_id, text))

def delete_task(store: DocumentStore, task_id: int) -> None:
    """
    Deletes a task with its ledger and removes it from every sprint's task set.

    Raises:
        NotFoundError: If the task does not exist
    """
    get_task(store, task_id)
    cascade.run_saga(store, f"delete task {task_id}", cascade.task_deletion_plan(task_id))

def summarize_task(task: Task) -> Dict[str, Any]:
    """
    Read-side reconstruction from the ledger.
    """
    reached = history_ledger.statuses_reached(task.history)
    return {
        "task_id": task.id,
        "total_time_logged": history_ledger.total_time_logged(task.history),
        "statuses_reached": reached,
        "completed": history_ledger.has_reached_status(task.history, TaskStatus.completed.value),
    }
