from waypoint.models.user import User, UserSession
from waypoint.models.project import Project, Sprint
from waypoint.models.task import Task, TaskHistoryItem

# Export everything for easy access
__all__ = [
    "User",
    "UserSession",
    "Project",
    "Sprint",
    "Task",
    "TaskHistoryItem",
]
