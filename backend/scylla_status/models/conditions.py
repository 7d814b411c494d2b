"""Condition list helpers with last-transition-time semantics."""
from datetime import datetime, timezone
from typing import Callable, List, Optional

from scylla_status.models.datacenter import Condition


def utcnow() -> datetime:
    # Conditions are serialized with second precision.
    return datetime.now(timezone.utc).replace(microsecond=0)


def find_status_condition(conditions: List[Condition], condition_type: str) -> Optional[Condition]:
    """Return the condition of the given type, if present."""
    for condition in conditions:
        if condition.type == condition_type:
            return condition
    return None


def set_status_condition(
    conditions: List[Condition],
    new_condition: Condition,
    now: Callable[[], datetime] = utcnow,
) -> bool:
    """Add or update ``new_condition`` in ``conditions`` in place.

    The transition time of an existing condition only moves when its status changes.
    Returns True if the list was modified.
    """
    existing = find_status_condition(conditions, new_condition.type)
    if existing is None:
        added = new_condition.model_copy()
        if added.last_transition_time is None:
            added.last_transition_time = now()
        conditions.append(added)
        return True

    changed = False
    if existing.status != new_condition.status:
        existing.status = new_condition.status
        existing.last_transition_time = new_condition.last_transition_time or now()
        changed = True

    if existing.reason != new_condition.reason:
        existing.reason = new_condition.reason
        changed = True

    if existing.message != new_condition.message:
        existing.message = new_condition.message
        changed = True

    if existing.observed_generation != new_condition.observed_generation:
        existing.observed_generation = new_condition.observed_generation
        changed = True

    return changed
