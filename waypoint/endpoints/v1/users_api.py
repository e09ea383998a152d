from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends

from waypoint.auth.dependencies import get_current_identity, require_role
from waypoint.auth.permissions import Identity
from waypoint.constants import Roles, SuccessMessages
from waypoint.database.store import DocumentStore, get_store
from waypoint.schemas import UserCreate, PasswordUpdate, UserResponse
from waypoint.utils import user_service
from waypoint.utils.utils import history_item_to_dict, user_to_dict

router = APIRouter(prefix="/users", tags=["Users"])

@router.post("", status_code=201)
def create_user(
    user_data: UserCreate,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(require_role(Roles.ADMIN))
):
    """
    Creates a user. The new user joins every project's team.
    """
    user_id = user_service.create_user(store, user_data)
    return {"message": SuccessMessages.USER_CREATED, "id": user_id}

@router.get("", response_model=UserResponse)
def get_user_by_id(
    id: int,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    return user_to_dict(user_service.get_user(store, id))

@router.get("/{username}", response_model=UserResponse)
def get_user_by_username(
    username: str,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(get_current_identity)
):
    return user_to_dict(user_service.get_user_by_username(store, username))

@router.delete("/{username}")
def delete_user(
    username: str,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(require_role(Roles.ADMIN))
):
    """
    Deletes a user and every reference to it.
    """
    user = user_service.get_user_by_username(store, username)
    user_service.delete_user(store, user.id)
    return {"message": SuccessMessages.USER_DELETED}

@router.patch("/{username}/password")
def change_password(
    username: str,
    request: PasswordUpdate,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(require_role(Roles.ADMIN))
):
    user_service.change_password(store, username, request.password)
    return {"message": SuccessMessages.PASSWORD_UPDATED}

@router.get("/{username}/worklogs")
def get_worklogs(
    username: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    store: DocumentStore = Depends(get_store),
    identity: Identity = Depends(require_role(Roles.ADMIN))
):
    """
    Work log entries written by a user, optionally within a date range.
    """
    logs = user_service.get_work_logs(store, username, start_date, end_date)
    return [dict(history_item_to_dict(item), task_id=item.task_id) for item in logs]
