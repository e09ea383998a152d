from typing import Any, Dict

def _iso(value):
    return value.isoformat() if value else None

def task_fields(t) -> Dict[str, Any]:
    """
    Snapshot of the diffable fields of a task, detached from the ORM row.
    """
    return {
        "name": t.name,
        "description": t.description,
        "priority": t.priority,
        "weight": t.weight,
        "tags": list(t.tags or []),
        "status": t.status,
        "assignees": list(t.assignees or []),
    }

def history_item_to_dict(h):
    if not h: return None
    data = {
        "id": h.id,
        "type": h.kind,
        "created_at": _iso(h.created_at),
        "author_id": h.author_id,
    }
    if h.kind == "comment":
        data["comment"] = h.comment
    elif h.kind == "work_log":
        data["work_time"] = h.work_time
    elif h.kind == "update":
        data["changes"] = h.changes
    return data

def task_to_dict(t, include_history: bool = True):
    if not t: return None
    data = {
        "id": t.id,
        "project_id": t.project_id,
        "name": t.name,
        "description": t.description,
        "status": t.status,
        "priority": t.priority,
        "weight": t.weight,
        "tags": list(t.tags or []),
        "assignees": list(t.assignees or []),
        "sprint_id": t.sprint_id,
        "created_at": _iso(t.created_at),
        "updated_at": _iso(t.updated_at),
    }
    if include_history:
        data["history"] = [history_item_to_dict(h) for h in t.history]
    return data

def sprint_to_dict(s):
    if not s: return None
    return {
        "id": s.id,
        "project_id": s.project_id,
        "name": s.name,
        "team": list(s.team or []),
        "po_id": s.po_id,
        "scrum_master_id": s.scrum_master_id,
        "tasks": list(s.tasks or []),
        "start_date": _iso(s.start_date),
        "end_date": _iso(s.end_date),
        "created_at": _iso(s.created_at),
        "updated_at": _iso(s.updated_at),
    }

def project_to_dict(p):
    if not p: return None
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "start_date": _iso(p.start_date),
        "end_date": _iso(p.end_date),
        "status": p.status,
        "team": list(p.team or []),
        "created_at": _iso(p.created_at),
        "updated_at": _iso(p.updated_at),
    }

def user_to_dict(u):
    if not u: return None
    return {
        "id": u.id,
        "name": u.name,
        "username": u.username,
        "role": u.role,
    }
