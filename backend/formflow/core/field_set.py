"""Field Sets — permitted-attribute filtering and draft merging for raw submissions.

Invariants:
    - permit() never mutates its input and drops every non-permitted key
    - Nested association values always come out as list[dict], ordered by index
    - Nested items keep only their permitted fields plus id and _destroy
    - merge_into_draft() returns a new dict; draft and submission untouched

Design Decisions:
    - Index-keyed mappings accepted for nested lists: HTML forms post
      variants[0][name]=... which decodes to {"0": {...}}
    - _destroy truthiness follows form-checkbox conventions ("1", "true", "on")
"""

from collections.abc import Iterable, Mapping
from typing import Any

from formflow.core.domain_types import DESTROY_FLAG, ID_FIELD, FieldSet

_TRUTHY = frozenset({"1", "true", "t", "on", "yes"})


def is_blank(value: Any) -> bool:
    """None, whitespace-only strings and empty containers are blank."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def marked_for_destruction(item: Mapping[str, Any]) -> bool:
    """Whether a nested item carries a truthy _destroy flag."""
    flag = item.get(DESTROY_FLAG)
    if isinstance(flag, bool):
        return flag
    if isinstance(flag, int):
        return flag == 1
    if isinstance(flag, str):
        return flag.strip().lower() in _TRUTHY
    return False


def normalize_nested(value: Any) -> list[dict]:
    """Coerce a nested association value into an ordered list of dicts.

    Accepts a list of mappings or an index-keyed mapping. Anything else
    (including non-mapping entries) is dropped.
    """
    if isinstance(value, Mapping):
        ordered = sorted(value.items(), key=lambda kv: _index_key(kv[0]))
        items: Iterable[Any] = (v for _, v in ordered)
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return []
    return [dict(item) for item in items if isinstance(item, Mapping)]


def permit(
    raw: Mapping[str, Any],
    permitted_fields: Iterable[str],
    nested_associations: Mapping[str, Iterable[str]] | None = None,
) -> FieldSet:
    """Keep only the permitted attributes of a raw submission.

    Args:
        raw: Submitted values, possibly with extra keys.
        permitted_fields: Scalar and association field names allowed at this step.
        nested_associations: association name -> permitted item field names.
    """
    nested_associations = nested_associations or {}
    allowed = set(permitted_fields)
    permitted: FieldSet = {}
    for key, value in raw.items():
        if key not in allowed:
            continue
        if key in nested_associations:
            item_fields = set(nested_associations[key]) | {ID_FIELD, DESTROY_FLAG}
            permitted[key] = [
                {k: v for k, v in item.items() if k in item_fields}
                for item in normalize_nested(value)
            ]
        else:
            permitted[key] = value
    return permitted


def merge_into_draft(draft: Mapping[str, Any], field_set: Mapping[str, Any]) -> FieldSet:
    """Overlay a submission onto the accumulated draft (submission wins)."""
    merged = dict(draft)
    merged.update(field_set)
    return merged


def live_items(items: Iterable[Mapping[str, Any]]) -> list[dict]:
    """Nested items that are not marked for destruction."""
    return [dict(item) for item in items if not marked_for_destruction(item)]


def _index_key(key: Any) -> tuple[int, Any]:
    try:
        return (0, int(key))
    except (TypeError, ValueError):
        return (1, str(key))
