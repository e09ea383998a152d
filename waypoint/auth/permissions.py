from dataclasses import dataclass

from waypoint.constants import ErrorMessages
from waypoint.utils.exceptions import UnauthorizedError


@dataclass(frozen=True)
class Identity:
    """Verified requester, as supplied by the token boundary."""
    username: str
    role: str


def authorize(identity: Identity, required_role: str) -> Identity:
    """
    Access policy gate. Every structural mutation requires exactly one role:
    ``developer`` for tasks and sprints, ``admin`` for users.

    Raises:
        UnauthorizedError: If the requester's role differs
    """
    if identity.role != required_role:
        raise UnauthorizedError(
            ErrorMessages.UNAUTHORIZED,
            metadata={"username": identity.username, "role": identity.role, "required": required_role}
        )
    return identity
