import logging
from datetime import datetime
from typing import List, Optional

from waypoint.auth.auth_utils import hash_password
from waypoint.constants import ErrorMessages
from waypoint.database.store import DocumentStore
from waypoint.models import TaskHistoryItem, User
from waypoint.schemas import UserCreate
from waypoint.utils import cascade, history_ledger
from waypoint.utils.common import get_object_or_404
from waypoint.utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

def get_user(store: DocumentStore, user_id: int) -> User:
    return get_object_or_404(store, User, user_id, ErrorMessages.USER_NOT_FOUND)

def get_user_by_username(store: DocumentStore, username: str) -> User:
    user = store.find_one(User, User.username == username)
    if not user:
        raise NotFoundError(ErrorMessages.USER_NOT_FOUND, metadata={"username": username})
    return user

def create_user(store: DocumentStore, user_data: UserCreate) -> int:
    """
    Creates a user and adds it to the team of every project.

    Returns:
        int: The new user id

    Raises:
        ValidationError: If the username is taken
    """
    if store.find_one(User, User.username == user_data.username):
        raise ValidationError(ErrorMessages.USERNAME_EXISTS, metadata={"username": user_data.username})

    user = User(
        name=user_data.name,
        username=user_data.username,
        hashed_password=hash_password(user_data.password),
        role=user_data.role,
    )
    store.insert_one(user)

    cascade.run_saga(store, f"create user {user.id}", cascade.user_creation_plan(user.id))
    logger.info("Created user %s (%s)", user.username, user.role)
    return user.id

def delete_user(store: DocumentStore, user_id: int) -> None:
    """
    Deletes a user after removing every reference to it: sprint teams,
    PO/scrum master slots, project teams, task assignees, its session and
    every history entry it authored. The user document goes last, so a
    failed run can simply be repeated.

    Raises:
        NotFoundError: If the user does not exist
    """
    user = get_user(store, user_id)
    cascade.run_saga(store, f"delete user {user.username}", cascade.user_deletion_plan(user))

def change_password(store: DocumentStore, username: str, password: str) -> None:
    user = get_user_by_username(store, username)
    store.update_one(user, set={"hashed_password": hash_password(password)})

def get_work_logs(
    store: DocumentStore,
    username: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[TaskHistoryItem]:
    """
    Work log entries a user wrote across all tasks, optionally bounded by date.
    """
    user = get_user_by_username(store, username)
    return history_ledger.work_logs_by_author(store, user.id, start, end)
