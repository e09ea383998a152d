from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from waypoint.auth.auth_utils import decode_token
from waypoint.auth.permissions import Identity, authorize
from waypoint.config.settings import settings
from waypoint.constants import ErrorMessages
from waypoint.database.store import DocumentStore, get_store
from waypoint.models import User

security = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Identity:
    """
    Dependency to get the verified (username, role) pair from the access token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    payload = decode_token(credentials.credentials, settings.ACCESS_SECRET_KEY)
    if not payload or not payload.get("user") or not payload.get("role"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

    return Identity(username=payload["user"], role=payload["role"])


def require_role(role: str):
    """
    Dependency factory running the access policy gate for a role.

    Args:
        role: The role to require (e.g. 'developer')

    Returns:
        function: Dependency function that returns the authorized identity
    """
    def checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        return authorize(identity, role)
    return checker


def require_author(role: str):
    """
    Dependency factory that runs the gate for ``role`` and then resolves the
    requester to its user document, the author of history entries.
    """
    def checker(
        identity: Identity = Depends(require_role(role)),
        store: DocumentStore = Depends(get_store),
    ) -> User:
        user = store.find_one(User, User.username == identity.username)
        if not user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=ErrorMessages.USER_NOT_FOUND)
        return user
    return checker
