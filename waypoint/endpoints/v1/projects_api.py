from fastapi import APIRouter, Depends

from waypoint.auth.dependencies import get_current_identity, require_role
from waypoint.auth.permissions import Identity
from waypoint.constants import Roles
from waypoint.database.store import DocumentStore, get_store
from waypoint.schemas import ProjectCreate
from waypoint.utils import project_service
from waypoint.utils.utils import project_to_dict, user_to_dict

router = APIRouter(prefix="/projects", tags=["Projects"])

@router.get("")
def get_projects(
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    """
    Retrieves all projects in the order used by project ordinals.
    """
    return [project_to_dict(p) for p in project_service.list_projects(store)]

@router.post("", status_code=201)
def create_project(
    project_data: ProjectCreate,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(require_role(Roles.ADMIN))
):
    project = project_service.create_project(store, project_data)
    return project_to_dict(project)

@router.get("/{proj_id}")
def get_project(
    proj_id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    """
    Retrieves the project at a 1-based ordinal.
    """
    return project_to_dict(project_service.resolve_project(store, proj_id))

@router.get("/{proj_id}/tags")
def get_tags(
    proj_id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    project = project_service.resolve_project(store, proj_id)
    return project_service.get_project_tags(store, project)

@router.get("/{proj_id}/team")
def get_team(
    proj_id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    project = project_service.resolve_project(store, proj_id)
    return [user_to_dict(u) for u in project_service.get_project_team(store, project)]
