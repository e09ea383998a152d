from typing import Any, Dict, Optional


class WaypointError(Exception):
    """
    Base error for the mutation engine. Carries an HTTP status for the API
    layer and metadata for logging.
    """

    status_code: int = 500
    category: str = "runtime"
    retryable: bool = False

    def __init__(self, message: str, *, metadata: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.metadata = metadata or {}


class UnauthorizedError(WaypointError):
    """Raised when the requester's role does not match the operation."""

    status_code = 403
    category = "unauthorized"


class NotFoundError(WaypointError):
    """Raised when a referenced user, project, sprint or task does not exist."""

    status_code = 404
    category = "not_found"


class ValidationError(WaypointError):
    """Raised when a patch or entry is malformed."""

    status_code = 400
    category = "validation"


class StoreError(WaypointError):
    """Raised when the document store fails. Cascade steps are idempotent, so retrying is safe."""

    status_code = 500
    category = "store"
    retryable = True
