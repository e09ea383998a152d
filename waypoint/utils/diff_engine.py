"""
Field-level diffing of task patches.

``compute_changes`` is the only producer of the ``changes`` payload stored in
update history entries, so every caller records diffs the same way.
"""
from typing import Any, Dict, Iterable, List, Mapping

from waypoint.constants import ErrorMessages
from waypoint.utils.exceptions import ValidationError

# Order matters: it is the key order of the produced change set
DIFFABLE_FIELDS = ("name", "description", "priority", "weight", "tags", "status", "assignees")
SET_FIELDS = frozenset({"tags", "assignees"})
INTEGER_FIELDS = frozenset({"weight"})

Change = Dict[str, Any]


def canonical_key(value: Any) -> str:
    """
    Single ordering/equality key for elements of set-valued fields.
    Ids compare by their serialized form, so 3 and "3" are the same element.
    """
    return str(value)


def dedupe(values: Iterable[Any]) -> List[Any]:
    """Drops repeated elements, keeping the first occurrence's position."""
    seen = set()
    result = []
    for value in values:
        key = canonical_key(value)
        if key not in seen:
            seen.add(key)
            result.append(value)
    return result


def canonical_set(values: Iterable[Any]) -> List[str]:
    return sorted({canonical_key(v) for v in values or []})


def sets_equal(left: Iterable[Any], right: Iterable[Any]) -> bool:
    return canonical_set(left) == canonical_set(right)


def parse_int(field: str, value: Any) -> int:
    """
    Parses numeric patch values ("8" -> 8). Booleans and fractional values are rejected.
    """
    if isinstance(value, bool):
        raise ValidationError(ErrorMessages.INVALID_WEIGHT, metadata={"field": field, "value": value})
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(ErrorMessages.INVALID_WEIGHT, metadata={"field": field, "value": value})


def _is_absent(value: Any) -> bool:
    # Empty lists are meaningful (clearing tags or assignees); empty strings are not
    if value is None:
        return True
    return isinstance(value, str) and value == ""


def compute_changes(current: Mapping[str, Any], patch: Mapping[str, Any]) -> Dict[str, Change]:
    """
    Computes the changed fields between a task's current values and a patch.

    Args:
        current: Current task field values (see ``task_fields``)
        patch: Requested partial update; unknown keys are ignored

    Returns:
        dict: ``{field: {"from": old, "to": new}}`` for every field whose value
        differs. Empty when the patch would not change the task.

    Raises:
        ValidationError: If a numeric field cannot be parsed
    """
    changes: Dict[str, Change] = {}

    for field in DIFFABLE_FIELDS:
        if field not in patch or _is_absent(patch[field]):
            continue

        new_value = patch[field]
        old_value = current.get(field)

        if field in INTEGER_FIELDS:
            new_value = parse_int(field, new_value)
            if new_value < 1:
                raise ValidationError(ErrorMessages.INVALID_WEIGHT, metadata={"field": field, "value": new_value})

        if field in SET_FIELDS:
            new_value = dedupe(new_value)
            old_value = list(old_value or [])
            if sets_equal(old_value, new_value):
                continue
        elif new_value == old_value:
            continue

        changes[field] = {"from": old_value, "to": new_value}

    return changes
