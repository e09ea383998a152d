import pytest
from sqlalchemy.exc import OperationalError

from waypoint.constants import HistoryKind
from waypoint.models import Sprint
from waypoint.schemas import TaskCreate
from waypoint.utils import history_ledger, task_service
from waypoint.utils.diff_engine import compute_changes
from waypoint.utils.exceptions import NotFoundError, StoreError, ValidationError
from waypoint.utils.history_ledger import HistoryEntry
from waypoint.utils.utils import task_fields


@pytest.fixture
def ada(make_user, make_project):
    user = make_user("ada")
    make_project()
    return user


def test_create_task_starts_not_started_with_creation_entry(store, ada) -> None:
    task_id = task_service.create_task(
        store, 1, TaskCreate(name="Write docs", tags=["docs", "docs"], assignees=[ada.id]), ada.id
    )
    task = task_service.get_task(store, task_id)

    assert task.status == "not_started"
    assert task.tags == ["docs"]
    assert task.sprint_id is None
    assert [(h.kind, h.author_id) for h in task.history] == [("creation", ada.id)]


def test_create_task_in_unknown_project(store, ada) -> None:
    with pytest.raises(NotFoundError):
        task_service.create_task(store, 2, TaskCreate(name="Nowhere"), ada.id)


def test_patch_records_parsed_weight(store, ada, make_task) -> None:
    task = make_task(author=ada, weight=5)

    changes = task_service.apply_task_patch(store, task.id, {"weight": "8"}, ada.id)

    assert changes == {"weight": {"from": 5, "to": 8}}
    assert task.weight == 8
    last = task.history[-1]
    assert last.kind == HistoryKind.update.value
    assert last.changes == {"weight": {"from": 5, "to": 8}}
    assert last.author_id == ada.id


def test_noop_patch_touches_nothing(store, ada, make_task) -> None:
    task = make_task(author=ada, tags=["docs", "api"])
    updated_at = task.updated_at

    assert task_service.apply_task_patch(store, task.id, {"tags": ["api", "docs"], "weight": 5}, ada.id) == {}
    assert len(task.history) == 1
    assert task.updated_at == updated_at


def test_patch_with_invalid_weight_fails(store, ada, make_task) -> None:
    task = make_task(author=ada)
    with pytest.raises(ValidationError):
        task_service.apply_task_patch(store, task.id, {"weight": "heavy"}, ada.id)
    assert len(task.history) == 1


def test_patch_of_missing_task(store, ada) -> None:
    with pytest.raises(NotFoundError):
        task_service.apply_task_patch(store, 404, {"name": "x"}, ada.id)


def test_concurrent_patches_from_stale_snapshot_both_recorded(store, ada, make_task) -> None:
    task = make_task(author=ada, name="Original")
    snapshot = task_fields(task)

    first = compute_changes(snapshot, {"name": "First"})
    second = compute_changes(snapshot, {"name": "Second"})
    for changes in (first, second):
        store.update_one(task, set={field: change["to"] for field, change in changes.items()})
        history_ledger.append(store, task.id, HistoryEntry.update(ada.id, changes))

    assert task.name == "Second"
    updates = [h.changes["name"] for h in task.history if h.kind == "update"]
    assert updates == [{"from": "Original", "to": "First"}, {"from": "Original", "to": "Second"}]


def test_work_log_and_comment_are_appended(store, ada, make_task) -> None:
    task = make_task(author=ada)

    task_service.append_work_log(store, task.id, 90000, ada.id)
    task_service.append_comment(store, task.id, "Looks good", ada.id)

    assert [h.kind for h in task.history] == ["creation", "work_log", "comment"]
    summary = task_service.summarize_task(task)
    assert summary == {
        "task_id": task.id,
        "total_time_logged": 90000,
        "statuses_reached": [],
        "completed": False,
    }


def test_summary_reports_completion(store, ada, make_task) -> None:
    task = make_task(author=ada)
    task_service.apply_task_patch(store, task.id, {"status": "in_progress"}, ada.id)
    task_service.apply_task_patch(store, task.id, {"status": "completed"}, ada.id)

    summary = task_service.summarize_task(task)
    assert summary["statuses_reached"] == ["in_progress", "completed"]
    assert summary["completed"] is True


def test_delete_task_leaves_no_sprint_reference(store, ada, make_task, make_sprint) -> None:
    task = make_task(author=ada)
    sprint = make_sprint(tasks=[task.id])
    task_id = task.id

    task_service.delete_task(store, task_id)

    assert store.find_one(Sprint, Sprint.id == sprint.id).tasks == []
    with pytest.raises(NotFoundError):
        task_service.get_task(store, task_id)
    with pytest.raises(NotFoundError):
        task_service.delete_task(store, task_id)


def test_project_scoping(store, ada, make_project, make_task) -> None:
    other_project = make_project("Gemini")
    task = make_task(project_ordinal=1, author=ada)

    with pytest.raises(NotFoundError):
        task_service.get_project_task(store, other_project, task.id)
    assert task_service.list_project_tasks(store, other_project) == []


def test_patch_and_its_entry_are_committed_together(db, store, ada, make_task, monkeypatch) -> None:
    task = make_task(author=ada, weight=5)

    commit = db.commit
    failures = []

    def failing_once():
        if not failures:
            failures.append(True)
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))
        commit()

    monkeypatch.setattr(db, "commit", failing_once)

    with pytest.raises(StoreError):
        task_service.apply_task_patch(store, task.id, {"weight": 8}, ada.id)
    assert task.weight == 5
    assert [h.kind for h in task.history] == ["creation"]

    changes = task_service.apply_task_patch(store, task.id, {"weight": 8}, ada.id)

    assert changes == {"weight": {"from": 5, "to": 8}}
    assert task.weight == 8
    assert [h.kind for h in task.history] == ["creation", "update"]
