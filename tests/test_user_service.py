import pytest

from waypoint.auth.auth_utils import create_refresh_token, verify_password
from waypoint.endpoints.v1.auth_api import upsert_session
from waypoint.models import Project, Sprint, Task, UserSession
from waypoint.schemas import UserCreate, UserResponse
from waypoint.utils import history_ledger, task_service, user_service
from waypoint.utils.exceptions import NotFoundError, ValidationError
from waypoint.utils.history_ledger import HistoryEntry


def test_new_user_joins_every_project(store, make_user, make_project) -> None:
    make_project("Apollo")
    make_project("Gemini")

    user = make_user("ada")

    assert [p.team for p in store.find(Project)] == [[user.id], [user.id]]
    assert user.role == "developer"
    assert verify_password("secret-password", user.hashed_password)


def test_duplicate_username_is_rejected(store, make_user) -> None:
    make_user("ada")
    with pytest.raises(ValidationError):
        user_service.create_user(store, UserCreate(name="Other", username="ada", password="x"))


def test_deleted_user_leaves_no_reference(store, make_user, make_project, make_task, make_sprint) -> None:
    make_project()
    ada = make_user("ada")
    bob = make_user("bob")
    task = make_task(author=bob, assignees=[ada.id, bob.id])
    sprint = make_sprint(team=[ada.id, bob.id], po_id=ada.id, scrum_master_id=ada.id, tasks=[task.id])
    upsert_session(store, ada.username, create_refresh_token(ada.username, ada.role))

    history_ledger.append(store, task.id, HistoryEntry.comment_entry(bob.id, "one"))
    task_service.append_work_log(store, task.id, 1000, ada.id)
    history_ledger.append(store, task.id, HistoryEntry.comment_entry(bob.id, "two"))
    task_service.apply_task_patch(store, task.id, {"name": "Renamed"}, ada.id)
    history_ledger.append(store, task.id, HistoryEntry.comment_entry(bob.id, "three"))
    ada_id = ada.id

    user_service.delete_user(store, ada_id)

    assert store.find_one(Project, Project.id == 1).team == [bob.id]
    sprint = store.find_one(Sprint, Sprint.id == sprint.id)
    assert sprint.team == [bob.id]
    assert sprint.po_id is None
    assert sprint.scrum_master_id is None
    task = store.find_one(Task, Task.id == task.id)
    assert task.assignees == [bob.id]
    assert task.name == "Renamed"
    assert store.find(UserSession) == []
    assert [(h.kind, h.comment) for h in task.history] == [
        ("creation", None),
        ("comment", "one"),
        ("comment", "two"),
        ("comment", "three"),
    ]

    with pytest.raises(NotFoundError):
        user_service.get_user(store, ada_id)
    with pytest.raises(NotFoundError):
        user_service.delete_user(store, ada_id)


def test_change_password(store, make_user) -> None:
    user = make_user("ada")
    user_service.change_password(store, "ada", "new-password")
    assert verify_password("new-password", user.hashed_password)
    assert not verify_password("secret-password", user.hashed_password)


def test_change_password_for_unknown_user(store) -> None:
    with pytest.raises(NotFoundError):
        user_service.change_password(store, "ghost", "x")


def test_work_logs_are_listed_per_user(store, make_user, make_project, make_task) -> None:
    ada = make_user("ada")
    bob = make_user("bob")
    make_project()
    task = make_task(author=ada)
    task_service.append_work_log(store, task.id, 1000, ada.id)
    task_service.append_work_log(store, task.id, 2000, bob.id)
    task_service.append_work_log(store, task.id, 3000, ada.id)

    logs = user_service.get_work_logs(store, "ada")
    assert [item.work_time for item in logs] == [1000, 3000]
    assert {item.task_id for item in logs} == {task.id}


def test_user_response_reads_orm_attributes(make_user) -> None:
    user = make_user("ada", name="Ada Lovelace")
    assert UserResponse.model_validate(user).model_dump() == {
        "id": user.id,
        "name": "Ada Lovelace",
        "username": "ada",
        "role": "developer",
    }
