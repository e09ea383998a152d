from fastapi import APIRouter, Depends

from waypoint.auth.dependencies import get_current_identity, require_author
from waypoint.auth.permissions import Identity
from waypoint.constants import Roles, SuccessMessages
from waypoint.database.store import DocumentStore, get_store
from waypoint.models import User
from waypoint.schemas import TaskCreate, TaskPatch, WorkLogRequest, CommentRequest, TaskSummary
from waypoint.utils import task_service
from waypoint.utils.project_service import resolve_project
from waypoint.utils.utils import history_item_to_dict, task_to_dict

router = APIRouter(prefix="/projects", tags=["Tasks"])

developer = require_author(Roles.DEVELOPER)

@router.get("/{proj_id}/tasks")
def get_tasks(
    proj_id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    project = resolve_project(store, proj_id)
    return [task_to_dict(t) for t in task_service.list_project_tasks(store, project)]

@router.get("/{proj_id}/tasks/{task_id}")
def get_task(
    proj_id: int,
    task_id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    project = resolve_project(store, proj_id)
    return task_to_dict(task_service.get_project_task(store, project, task_id))

@router.get("/{proj_id}/tasks/{task_id}/summary", response_model=TaskSummary)
def get_task_summary(
    proj_id: int,
    task_id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    """
    Time logged and statuses reached, reconstructed from the task history.
    """
    project = resolve_project(store, proj_id)
    return task_service.summarize_task(task_service.get_project_task(store, project, task_id))

@router.post("/{proj_id}/tasks", status_code=201)
def create_task(
    proj_id: int,
    task_data: TaskCreate,
    store: DocumentStore = Depends(get_store),
    author: User = Depends(developer)
):
    task_id = task_service.create_task(store, proj_id, task_data, author.id)
    return {"message": SuccessMessages.TASK_CREATED, "id": task_id}

@router.patch("/{proj_id}/tasks/{task_id}")
def patch_task(
    proj_id: int,
    task_id: int,
    patch: TaskPatch,
    store: DocumentStore = Depends(get_store),
    author: User = Depends(developer)
):
    """
    Updates task fields. Only changed fields are written and recorded.
    """
    task_service.get_project_task(store, resolve_project(store, proj_id), task_id)
    changes = task_service.apply_task_patch(
        store,
        task_id,
        patch.model_dump(exclude_unset=True, mode="json"),
        author.id
    )
    message = SuccessMessages.TASK_UPDATED if changes else SuccessMessages.TASK_UNCHANGED
    return {"message": message, "changes": changes}

@router.delete("/{proj_id}/tasks/{task_id}")
def delete_task(
    proj_id: int,
    task_id: int,
    store: DocumentStore = Depends(get_store),
    author: User = Depends(developer)
):
    task_service.get_project_task(store, resolve_project(store, proj_id), task_id)
    task_service.delete_task(store, task_id)
    return {"message": SuccessMessages.TASK_DELETED}

@router.post("/{proj_id}/tasks/{task_id}/comment", status_code=201)
def post_comment(
    proj_id: int,
    task_id: int,
    request: CommentRequest,
    store: DocumentStore = Depends(get_store),
    author: User = Depends(developer)
):
    task_service.get_project_task(store, resolve_project(store, proj_id), task_id)
    entry = task_service.append_comment(store, task_id, request.comment, author.id)
    return history_item_to_dict(entry)

@router.post("/{proj_id}/tasks/{task_id}/worklog", status_code=201)
def post_worklog(
    proj_id: int,
    task_id: int,
    request: WorkLogRequest,
    store: DocumentStore = Depends(get_store),
    author: User = Depends(developer)
):
    task_service.get_project_task(store, resolve_project(store, proj_id), task_id)
    entry = task_service.append_work_log(store, task_id, request.work_time, author.id)
    return history_item_to_dict(entry)
