from pydantic import BaseModel, Field, field_validator
from typing import Optional, List

from waypoint.config.settings import settings
from waypoint.constants import ErrorMessages, Priority, TaskStatus

class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    priority: Priority = Priority.medium
    weight: int = Field(1, ge=1)
    tags: List[str] = []
    assignees: List[int] = []

class TaskPatch(BaseModel):
    """
    Partial task update. Omitted or null fields are left untouched.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    weight: Optional[int] = Field(None, ge=1)
    tags: Optional[List[str]] = None
    status: Optional[TaskStatus] = None
    assignees: Optional[List[int]] = None

class WorkLogRequest(BaseModel):
    # milliseconds
    work_time: int = Field(..., ge=0, le=settings.MAX_WORK_TIME_MS)

class CommentRequest(BaseModel):
    comment: str

    @field_validator("comment")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError(ErrorMessages.EMPTY_COMMENT)
        return value

class TaskSummary(BaseModel):
    task_id: int
    total_time_logged: int
    statuses_reached: List[str]
    completed: bool
