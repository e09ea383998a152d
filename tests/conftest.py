from typing import Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import waypoint.models  # noqa: F401  registers the tables on Base.metadata
from waypoint.auth.auth_utils import create_access_token
from waypoint.constants import Roles
from waypoint.database.base import Base
from waypoint.database.session import get_db
from waypoint.database.store import DocumentStore
from waypoint.main import app
from waypoint.models import Project, Sprint, Task, User
from waypoint.schemas import ProjectCreate, SprintCreate, TaskCreate, UserCreate
from waypoint.utils import project_service, sprint_service, task_service, user_service

PASSWORD = "secret-password"


@pytest.fixture
def db() -> Iterator[Session]:
    # One in-memory database per test, shared by every connection of the pool
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def store(db: Session) -> DocumentStore:
    return DocumentStore(db)


@pytest.fixture
def make_user(store: DocumentStore):
    def _make(username: str, role: str = Roles.DEVELOPER, name: Optional[str] = None) -> User:
        user_id = user_service.create_user(
            store,
            UserCreate(name=name or username.title(), username=username, password=PASSWORD, role=role),
        )
        return user_service.get_user(store, user_id)
    return _make


@pytest.fixture
def make_project(store: DocumentStore):
    def _make(name: str = "Apollo") -> Project:
        return project_service.create_project(store, ProjectCreate(name=name, description=f"{name} project"))
    return _make


@pytest.fixture
def make_task(store: DocumentStore):
    def _make(
        project_ordinal: int = 1,
        author: Optional[User] = None,
        name: str = "Write docs",
        weight: int = 5,
        tags: Optional[List[str]] = None,
        assignees: Optional[List[int]] = None,
    ) -> Task:
        task_id = task_service.create_task(
            store,
            project_ordinal,
            TaskCreate(name=name, weight=weight, tags=tags or [], assignees=assignees or []),
            author.id if author else None,
        )
        return task_service.get_task(store, task_id)
    return _make


@pytest.fixture
def make_sprint(store: DocumentStore):
    def _make(
        project_ordinal: int = 1,
        name: str = "Sprint 1",
        team: Optional[List[int]] = None,
        tasks: Optional[List[int]] = None,
        po_id: Optional[int] = None,
        scrum_master_id: Optional[int] = None,
    ) -> Sprint:
        sprint_id = sprint_service.create_sprint(
            store,
            project_ordinal,
            SprintCreate(
                name=name,
                team=team or [],
                tasks=tasks or [],
                po_id=po_id,
                scrum_master_id=scrum_master_id,
            ),
        )
        return sprint_service.get_sprint(store, sprint_id)
    return _make


@pytest.fixture
def client(db: Session) -> Iterator[TestClient]:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    # Not entered as a context manager: the startup hook targets the configured database
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_header(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.username, user.role)}"}


@pytest.fixture
def auth():
    return auth_header
