from fastapi import APIRouter, Depends

from waypoint.auth.dependencies import get_current_identity, require_role
from waypoint.auth.permissions import Identity
from waypoint.constants import Roles, SuccessMessages
from waypoint.database.store import DocumentStore, get_store
from waypoint.schemas import SprintCreate, SprintPatch
from waypoint.utils import sprint_service, task_service
from waypoint.utils.project_service import resolve_project
from waypoint.utils.utils import sprint_to_dict, task_to_dict

router = APIRouter(prefix="/projects", tags=["Sprints"])

developer = require_role(Roles.DEVELOPER)

@router.post("/{proj_id}/sprints", status_code=201)
def create_sprint(
    proj_id: int,
    sprint_data: SprintCreate,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(developer)
):
    sprint_id = sprint_service.create_sprint(store, proj_id, sprint_data)
    return {"message": SuccessMessages.SPRINT_CREATED, "id": sprint_id}

@router.get("/{proj_id}/sprints")
def get_sprints(
    proj_id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    project = resolve_project(store, proj_id)
    return [sprint_to_dict(s) for s in sprint_service.list_project_sprints(store, project)]

@router.get("/{proj_id}/sprints/{sprint_id}")
def get_sprint(
    proj_id: int,
    sprint_id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    project = resolve_project(store, proj_id)
    return sprint_to_dict(sprint_service.get_project_sprint(store, project, sprint_id))

@router.get("/{proj_id}/sprints/{sprint_id}/tasks")
def get_sprint_tasks(
    proj_id: int,
    sprint_id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(developer)
):
    sprint_service.get_project_sprint(store, resolve_project(store, proj_id), sprint_id)
    return [task_to_dict(t) for t in task_service.list_sprint_tasks(store, sprint_id)]

@router.patch("/{proj_id}/sprints/{sprint_id}")
def patch_sprint(
    proj_id: int,
    sprint_id: int,
    patch: SprintPatch,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(developer)
):
    """
    Updates a sprint and keeps tasks and assignees consistent with it.
    """
    sprint_service.get_project_sprint(store, resolve_project(store, proj_id), sprint_id)
    sprint = sprint_service.apply_sprint_patch(store, sprint_id, patch.model_dump(exclude_unset=True))
    return sprint_to_dict(sprint)

@router.delete("/{proj_id}/sprints/{sprint_id}")
def delete_sprint(
    proj_id: int,
    sprint_id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(developer)
):
    sprint_service.get_project_sprint(store, resolve_project(store, proj_id), sprint_id)
    sprint_service.delete_sprint(store, sprint_id)
    return {"message": SuccessMessages.SPRINT_DELETED}
