from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from loguru import logger

from .clock import utcnow


@dataclass
class AssignmentSnapshot:
    assignment_ids: Set[str] = field(default_factory=set)
    last_checked: Optional[datetime] = None


class AssignmentTracker:
    """Remembers which assignments each volunteer has already been shown.

    Each check compares against the previous snapshot and then replaces it,
    so a skipped or late check only delays a notice.
    """

    def __init__(self) -> None:
        self._snapshots: Dict[str, AssignmentSnapshot] = {}

    def check(self, volunteer_id: str, assignment_ids: Iterable[str], now: datetime | None = None) -> List[str]:
        current = list(dict.fromkeys(assignment_ids))
        previous = self._snapshots.get(volunteer_id, AssignmentSnapshot())
        new_ids = [assignment_id for assignment_id in current if assignment_id not in previous.assignment_ids]
        self._snapshots[volunteer_id] = AssignmentSnapshot(set(current), now or utcnow())
        if new_ids:
            logger.info("Volunteer {} has {} new assignment(s): {}", volunteer_id, len(new_ids), new_ids)
        return new_ids

    def last_checked(self, volunteer_id: str) -> Optional[datetime]:
        snapshot = self._snapshots.get(volunteer_id)
        return snapshot.last_checked if snapshot else None

    def forget(self, volunteer_id: str) -> None:
        self._snapshots.pop(volunteer_id, None)

    def reset(self) -> None:
        self._snapshots.clear()


def assignment_message(count: int) -> str:
    return f"You have {count} new collection{'s' if count != 1 else ''} assigned."


assignment_tracker = AssignmentTracker()
