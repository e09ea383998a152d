from enum import Enum


class ErrorMessages:
    PROJECT_NOT_FOUND = "Project not found"
    SPRINT_NOT_FOUND = "Sprint not found"
    TASK_NOT_FOUND = "Task not found"
    USER_NOT_FOUND = "User not found"

    # Auth
    INVALID_CREDENTIALS = "Invalid username or password"
    CREDENTIALS_REQUIRED = "Username and password required"
    NOT_LOGGED_IN = "Not logged in"
    INVALID_AUTHENTICATION = "Invalid authentication"
    USERNAME_EXISTS = "Username already exists"

    # Permissions
    UNAUTHORIZED = "Unauthorized"

    # Validation
    INVALID_WEIGHT = "Weight must be a positive whole number"
    EMPTY_COMMENT = "Comment cannot be empty"

    # Store
    STORE_FAILURE = "Internal storage error"


class SuccessMessages:
    USER_CREATED = "User created"
    USER_DELETED = "User deleted"
    PASSWORD_UPDATED = "Password updated"
    TASK_CREATED = "Task created"
    TASK_UPDATED = "Task updated"
    TASK_UNCHANGED = "No changes detected"
    TASK_DELETED = "Task deleted"
    SPRINT_CREATED = "Sprint created"
    SPRINT_DELETED = "Sprint deleted"


class Roles:
    ADMIN = "admin"
    DEVELOPER = "developer"
    ALL_ROLES = [ADMIN, DEVELOPER]


class TaskStatus(str, Enum):
    not_started = "not_started"
    in_progress = "in_progress"
    completed = "completed"


class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class HistoryKind(str, Enum):
    creation = "creation"
    update = "update"
    work_log = "work_log"
    comment = "comment"


class ProjectStatus(str, Enum):
    active = "active"
    completed = "completed"
    archived = "archived"
