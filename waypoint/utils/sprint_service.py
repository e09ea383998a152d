import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from waypoint.constants import ErrorMessages
from waypoint.database.store import DocumentStore
from waypoint.models import Project, Sprint, Task, User
from waypoint.schemas import SprintCreate
from waypoint.utils import cascade
from waypoint.utils.common import get_object_or_404
from waypoint.utils.diff_engine import canonical_key, dedupe
from waypoint.utils.exceptions import NotFoundError
from waypoint.utils.project_service import resolve_project

logger = logging.getLogger(__name__)

def get_sprint(store: DocumentStore, sprint_id: int) -> Sprint:
    return get_object_or_404(store, Sprint, sprint_id, ErrorMessages.SPRINT_NOT_FOUND)

def get_project_sprint(store: DocumentStore, project: Project, sprint_id: int) -> Sprint:
    sprint = get_sprint(store, sprint_id)
    if sprint.project_id != project.id:
        raise NotFoundError(ErrorMessages.SPRINT_NOT_FOUND, metadata={"sprint_id": sprint_id, "project_id": project.id})
    return sprint

def list_project_sprints(store: DocumentStore, project: Project) -> List[Sprint]:
    return store.find(Sprint, Sprint.project_id == project.id)

def effective_team(team: Iterable[int], po_id: Optional[int], scrum_master_id: Optional[int]) -> List[int]:
    """
    The sprint team with the PO and scrum master folded in.
    """
    members = list(team or [])
    for member in (po_id, scrum_master_id):
        if member is not None:
            members.append(member)
    return dedupe(members)

def _ensure_users_exist(store: DocumentStore, user_ids: Iterable[int]) -> None:
    ids = dedupe(user_ids)
    if not ids:
        return
    found = {u.id for u in store.find(User, User.id.in_(ids))}
    missing = [i for i in ids if i not in found]
    if missing:
        raise NotFoundError(ErrorMessages.USER_NOT_FOUND, metadata={"user_ids": missing})

def _ensure_tasks_exist(store: DocumentStore, project_id: int, task_ids: Iterable[int]) -> None:
    # A sprint only links tasks of its own project
    ids = dedupe(task_ids)
    if not ids:
        return
    found = {t.id for t in store.find(Task, Task.id.in_(ids), Task.project_id == project_id)}
    missing = [i for i in ids if i not in found]
    if missing:
        raise NotFoundError(ErrorMessages.TASK_NOT_FOUND, metadata={"task_ids": missing})

def create_sprint(store: DocumentStore, project_ordinal: int, sprint_data: SprintCreate) -> int:
    """
    Creates a sprint in the project at ``project_ordinal`` and links its tasks.

    Returns:
        int: The new sprint id

    Raises:
        NotFoundError: If the project or a team member does not exist, or a task
            is missing from that project
    """
    project = resolve_project(store, project_ordinal)

    team = effective_team(sprint_data.team, sprint_data.po_id, sprint_data.scrum_master_id)
    task_ids = dedupe(sprint_data.tasks)
    _ensure_users_exist(store, team)
    _ensure_tasks_exist(store, project.id, task_ids)

    sprint = Sprint(
        project_id=project.id,
        name=sprint_data.name,
        team=team,
        po_id=sprint_data.po_id,
        scrum_master_id=sprint_data.scrum_master_id,
        tasks=task_ids,
        start_date=sprint_data.start_date,
        end_date=sprint_data.end_date,
    )
    store.insert_one(sprint)

    cascade.run_saga(store, f"create sprint {sprint.id}", cascade.sprint_tasks_plan(sprint.id, task_ids))
    return sprint.id

def apply_sprint_patch(store: DocumentStore, sprint_id: int, patch: Mapping[str, Any]) -> Sprint:
    """
    Applies a partial update to a sprint and cascades it.

    - A PO or scrum master (new or kept) is always a member of the team.
    - A supplied task set replaces the old one: listed tasks point at this
      sprint (and leave any other sprint), dropped tasks lose their sprint.
    - Users leaving the effective team are unassigned from every task,
      before the new roster is stored.

    Args:
        store: Document store
        sprint_id: Sprint to update
        patch: Requested values (name, team, po_id, scrum_master_id, tasks,
            start_date, end_date); None means "leave as is"

    Returns:
        Sprint: The updated sprint

    Raises:
        NotFoundError: If the sprint or a referenced user does not exist, or a
            task is missing from the sprint's project
    """
    sprint = get_sprint(store, sprint_id)
    updates: Dict[str, Any] = {}

    for field in ("name", "start_date", "end_date"):
        if patch.get(field):
            updates[field] = patch[field]

    new_po = patch.get("po_id")
    new_scrum_master = patch.get("scrum_master_id")
    new_team = patch.get("team")
    roster_changed = new_team is not None or new_po is not None or new_scrum_master is not None

    old_effective = effective_team(sprint.team, sprint.po_id, sprint.scrum_master_id)
    removed: List[int] = []

    if roster_changed:
        po_id = new_po if new_po is not None else sprint.po_id
        scrum_master_id = new_scrum_master if new_scrum_master is not None else sprint.scrum_master_id
        base_team = new_team if new_team is not None else sprint.team
        team = effective_team(base_team, po_id, scrum_master_id)

        _ensure_users_exist(store, team)

        updates["team"] = team
        if new_po is not None:
            updates["po_id"] = new_po
        if new_scrum_master is not None:
            updates["scrum_master_id"] = new_scrum_master

        kept = {canonical_key(member) for member in team}
        removed = [member for member in old_effective if canonical_key(member) not in kept]

    task_ids = None
    if patch.get("tasks") is not None:
        task_ids = dedupe(patch["tasks"])
        _ensure_tasks_exist(store, sprint.project_id, task_ids)
        updates["tasks"] = task_ids

    if not updates:
        return sprint

    # Removed members are derived from the stored roster: unassign them before it is overwritten
    cascade.run_saga(store, f"unassign removed members of sprint {sprint_id}", cascade.roster_change_plan(removed))

    updates["updated_at"] = datetime.utcnow()
    store.update_one(sprint, set=updates)

    if task_ids is not None:
        cascade.run_saga(store, f"patch sprint {sprint_id}", cascade.sprint_tasks_plan(sprint.id, task_ids))

    return sprint

def delete_sprint(store: DocumentStore, sprint_id: int) -> None:
    """
    Deletes a sprint and clears the sprint reference of its tasks.

    Raises:
        NotFoundError: If the sprint does not exist
    """
    get_sprint(store, sprint_id)
    cascade.run_saga(store, f"delete sprint {sprint_id}", cascade.sprint_deletion_plan(sprint_id))
