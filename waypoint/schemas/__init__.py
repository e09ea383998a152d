from waypoint.schemas.user_schema import LoginRequest, UserCreate, PasswordUpdate, UserResponse, LoginResponse
from waypoint.schemas.project_schema import ProjectCreate, SprintCreate, SprintPatch
from waypoint.schemas.task_schema import TaskCreate, TaskPatch, WorkLogRequest, CommentRequest, TaskSummary

__all__ = [
    "LoginRequest",
    "UserCreate",
    "PasswordUpdate",
    "UserResponse",
    "LoginResponse",
    "ProjectCreate",
    "SprintCreate",
    "SprintPatch",
    "TaskCreate",
    "TaskPatch",
    "WorkLogRequest",
    "CommentRequest",
    "TaskSummary",
]
