"""
Non-destructive merge of stage output into a record's research_data.

Later stages add keys; an existing key is only replaced when the new value
is non-empty. Nested dicts merge recursively under the same rule, so a
verify payload that lacks ``companyOverview`` never erases the one written
by the research stage.

Contacts are the exception: a non-empty ``contact`` value at any depth
replaces the stored one whole, so fields of two different people are never
combined.
"""

import copy
from typing import Any, Dict, Iterable, Optional

ATOMIC_KEYS = frozenset({"contact"})


def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def merge_research_data(
    existing: Optional[Dict[str, Any]],
    incoming: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Merge ``incoming`` into a copy of ``existing``.

    Returns:
        New dict; neither argument is mutated.
    """
    merged = copy.deepcopy(existing) if existing else {}
    for key, value in (incoming or {}).items():
        current = merged.get(key)
        if key in ATOMIC_KEYS and not is_empty_value(value):
            merged[key] = copy.deepcopy(value)
        elif isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_research_data(current, value)
        elif not is_empty_value(value):
            merged[key] = copy.deepcopy(value)
        elif key not in merged:
            # Keep the key visible even when nothing was known yet
            merged[key] = copy.deepcopy(value)
    return merged


def merge_scalar_fields(
    existing: Optional[Dict[str, Any]],
    incoming: Dict[str, Any],
    exact: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Select top-level record fields that should be written.

    Empty incoming values never overwrite stored ones. Booleans and
    numbers are always written since False and 0.0 are meaningful. Names
    in ``exact`` are written as given, None included.
    """
    existing = existing or {}
    exact = set(exact)
    updates = {}
    for key, value in incoming.items():
        if key in exact or isinstance(value, (bool, int, float)):
            updates[key] = value
        elif not is_empty_value(value):
            updates[key] = value
        elif key not in existing:
            updates[key] = None
    return updates
