from __future__ import annotations

from datetime import datetime
from typing import Dict, FrozenSet, Optional

from ..models.donation import Donation
from ..utils.clock import hours_between
from .errors import InvalidTransition, ValidationError

PENDING_REVIEW = "Pending Review"
APPROVED = "Approved"
REJECTED = "Rejected"
ASSIGNED = "Assigned"
IN_TRANSIT = "In Transit"
COMPLETED = "Completed"

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING_REVIEW: frozenset({APPROVED, REJECTED}),
    APPROVED: frozenset({ASSIGNED}),
    ASSIGNED: frozenset({IN_TRANSIT}),
    IN_TRANSIT: frozenset({COMPLETED}),
    REJECTED: frozenset(),
    COMPLETED: frozenset(),
}

TERMINAL_STATES = frozenset(state for state, targets in TRANSITIONS.items() if not targets)
VOLUNTEER_STATES = frozenset({ASSIGNED, IN_TRANSIT, COMPLETED})
OPEN_STATES = frozenset(TRANSITIONS) - TERMINAL_STATES


def allowed_targets(status: str) -> FrozenSet[str]:
    return TRANSITIONS.get(status, frozenset())


def can_transition(current: str, target: str) -> bool:
    return target in allowed_targets(current)


def advance(
    donation: Donation,
    target: str,
    *,
    reason: Optional[str] = None,
    volunteer_id: Optional[str] = None,
) -> Donation:
    """Return a copy of ``donation`` moved to ``target``.

    The input record is never mutated, so a rejected move leaves it as it was.
    """
    if not can_transition(donation.status, target):
        raise InvalidTransition(donation.status, target)

    update: Dict[str, object] = {"status": target}
    if target == REJECTED:
        if not reason or not reason.strip():
            raise ValidationError(["Rejection reason is required"])
        update["rejection_reason"] = reason.strip()
    elif target == ASSIGNED:
        if not volunteer_id or not volunteer_id.strip():
            raise InvalidTransition(
                donation.status, target, "A volunteer must be named to assign a donation"
            )
        update["assigned_volunteer"] = volunteer_id.strip()
    return donation.model_copy(update=update)


def derive_urgency(
    expiry_time: datetime,
    storage_conditions: str,
    now: datetime,
    forced_high: bool = False,
) -> str:
    if forced_high:
        return "High"
    hours_until_expiry = hours_between(now, expiry_time)
    if hours_until_expiry <= 4 and storage_conditions == "hot":
        return "High"
    if hours_until_expiry <= 2 and storage_conditions == "ambient":
        return "High"
    if hours_until_expiry <= 6:
        return "Medium"
    return "Low"
