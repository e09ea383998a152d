import logging
from typing import List

from waypoint.constants import ErrorMessages, ProjectStatus
from waypoint.database.store import DocumentStore
from waypoint.models import Project, Task, User
from waypoint.schemas import ProjectCreate
from waypoint.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)

def list_projects(store: DocumentStore) -> List[Project]:
    """
    Returns every project in insertion order (ascending id).
    """
    return store.find(Project, order_by=Project.id)

def resolve_project(store: DocumentStore, ordinal: int) -> Project:
    """
    Resolves a 1-based project ordinal to a project.

    Projects are addressed by their position in the id-ordered project list,
    so ordinal 1 is the oldest project.

    Raises:
        NotFoundError: If no project sits at that position
    """
    projects = list_projects(store)
    if ordinal < 1 or ordinal > len(projects):
        raise NotFoundError(ErrorMessages.PROJECT_NOT_FOUND, metadata={"ordinal": ordinal})
    return projects[ordinal - 1]

def create_project(store: DocumentStore, project_data: ProjectCreate) -> Project:
    """
    Creates a project whose team starts with every existing user.
    """
    team = [u.id for u in store.find(User)]
    project = Project(
        name=project_data.name,
        description=project_data.description,
        start_date=project_data.start_date,
        end_date=project_data.end_date,
        status=(project_data.status or ProjectStatus.active).value,
        team=team,
    )
    store.insert_one(project)
    logger.info("Created project %s with %d member(s)", project.id, len(team))
    return project

def get_project_team(store: DocumentStore, project: Project) -> List[User]:
    ids = list(project.team or [])
    if not ids:
        return []
    return store.find(User, User.id.in_(ids))

def get_project_tags(store: DocumentStore, project: Project) -> List[str]:
    """
    Union of the tags used by the project's tasks, in first-seen order.
    """
    tags = []
    for task in store.find(Task, Task.project_id == project.id):
        for tag in task.tags or []:
            if tag not in tags:
                tags.append(tag)
    return tags
