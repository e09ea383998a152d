from waypoint.auth.auth_utils import create_refresh_token
from waypoint.endpoints.v1.auth_api import upsert_session
from waypoint.models import Project, Sprint, Task, TaskHistoryItem, User, UserSession
from waypoint.utils import cascade, history_ledger
from waypoint.utils.history_ledger import HistoryEntry


def test_user_deletion_plan_is_idempotent(store, make_user, make_project, make_task, make_sprint) -> None:
    ada = make_user("ada")
    bob = make_user("bob")
    make_project()
    task = make_task(author=ada, assignees=[ada.id, bob.id])
    sprint = make_sprint(team=[ada.id, bob.id], po_id=ada.id, scrum_master_id=bob.id, tasks=[task.id])
    history_ledger.append(store, task.id, HistoryEntry.comment_entry(bob.id, "hello"))
    upsert_session(store, ada.username, create_refresh_token(ada.username, ada.role))

    plan = cascade.user_deletion_plan(ada)
    first = cascade.run_saga(store, "delete ada", plan)
    second = cascade.run_saga(store, "delete ada again", plan)

    assert first == [1, 1, 0, 1, 1, 1, 1, 1]
    assert second == [0] * len(plan)

    sprint = store.find_one(Sprint, Sprint.id == sprint.id)
    assert sprint.team == [bob.id]
    assert sprint.po_id is None
    assert sprint.scrum_master_id == bob.id
    assert store.find_one(Project, Project.id == 1).team == [bob.id]
    assert store.find_one(Task, Task.id == task.id).assignees == [bob.id]
    assert store.find(UserSession) == []
    assert [h.author_id for h in store.find(TaskHistoryItem)] == [bob.id]
    assert store.find_one(User, User.username == "ada") is None


def test_user_creation_plan_adds_to_every_project_once(store, make_project) -> None:
    make_project("Apollo")
    make_project("Gemini")

    plan = cascade.user_creation_plan(42)
    cascade.run_saga(store, "create 42", plan)
    cascade.run_saga(store, "create 42 again", plan)

    assert [p.team for p in store.find(Project)] == [[42], [42]]


def test_sprint_deletion_plan_clears_back_references(store, make_user, make_project, make_task, make_sprint) -> None:
    ada = make_user("ada")
    make_project()
    task = make_task(author=ada)
    sprint = make_sprint(tasks=[task.id])
    sprint_id = sprint.id

    plan = cascade.sprint_deletion_plan(sprint_id)
    assert cascade.run_saga(store, "delete sprint", plan) == [1, 1]
    assert cascade.run_saga(store, "delete sprint again", plan) == [0, 0]
    assert store.find_one(Task, Task.id == task.id).sprint_id is None


def test_task_deletion_plan_removes_task_and_ledger(store, make_user, make_project, make_task, make_sprint) -> None:
    ada = make_user("ada")
    make_project()
    task = make_task(author=ada)
    other = make_task(author=ada, name="Other")
    sprint = make_sprint(tasks=[task.id, other.id])
    task_id = task.id

    plan = cascade.task_deletion_plan(task_id)
    assert cascade.run_saga(store, "delete task", plan) == [1, 1]
    assert cascade.run_saga(store, "delete task again", plan) == [0, 0]

    assert store.find_one(Sprint, Sprint.id == sprint.id).tasks == [other.id]
    assert store.find(TaskHistoryItem, TaskHistoryItem.task_id == task_id) == []


def test_roster_change_plan_is_empty_without_removals() -> None:
    assert cascade.roster_change_plan([]) == []
