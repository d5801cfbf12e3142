from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional

from loguru import logger

from ..memory.repository import Repository
from ..models.volunteer import Volunteer, VolunteerCreate, VolunteerStats, VolunteerUpdate
from ..utils.clock import utcnow
from .errors import NotFound, VolunteerUnavailable


def dotted_name(name: str) -> str:
    return re.sub(r"\s+", ".", name.strip().lower())


class VolunteerService:
    def __init__(self, volunteers: Repository[Volunteer]) -> None:
        self.volunteers = volunteers

    def generate_id(self, email: str, name: str, now: datetime | None = None) -> str:
        """Email local-part, then dotted name, then a timestamp fallback."""
        email_id = email.split("@")[0].lower()
        if email_id and not self.volunteers.exists(email_id):
            return email_id
        name_id = dotted_name(name)
        if name_id and not self.volunteers.exists(name_id):
            return name_id
        stamp = int((now or utcnow()).timestamp() * 1000)
        candidate = f"vol_{stamp}"
        while self.volunteers.exists(candidate):
            stamp += 1
            candidate = f"vol_{stamp}"
        return candidate

    def add(self, payload: VolunteerCreate, now: datetime | None = None) -> Volunteer:
        now = now or utcnow()
        volunteer = Volunteer(
            **payload.model_dump(),
            id=self.generate_id(payload.email, payload.name, now),
            join_date=now,
            completed_collections=0,
            rating=0.0,
        )
        self.volunteers.upsert(volunteer)
        logger.info("Registered volunteer {} ({})", volunteer.id, volunteer.status)
        return volunteer

    def find(self, volunteer_id: str) -> Optional[Volunteer]:
        return self.volunteers.get(volunteer_id)

    def get(self, volunteer_id: str) -> Volunteer:
        volunteer = self.volunteers.get(volunteer_id)
        if volunteer is None:
            raise NotFound(f"Volunteer {volunteer_id} not found")
        return volunteer

    def update(self, volunteer_id: str, payload: VolunteerUpdate) -> Volunteer:
        volunteer = self.get(volunteer_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        updated = Volunteer.model_validate({**volunteer.model_dump(), **changes})
        self.volunteers.upsert(updated)
        logger.info("Updated volunteer {}: {}", volunteer_id, sorted(changes))
        return updated

    def remove(self, volunteer_id: str) -> None:
        if not self.volunteers.delete(volunteer_id):
            raise NotFound(f"Volunteer {volunteer_id} not found")
        logger.info("Removed volunteer {}", volunteer_id)

    def list(self) -> List[Volunteer]:
        return self.volunteers.list()

    def active(self) -> List[Volunteer]:
        return [volunteer for volunteer in self.volunteers.list() if volunteer.status == "Active"]

    def resolve(self, identifier: str) -> Optional[Volunteer]:
        """Match by id, then email, then dotted name, all case-insensitive."""
        needle = identifier.strip().lower()
        if not needle:
            return None
        roster = self.volunteers.list()
        for matches in (
            lambda v: v.id.lower() == needle,
            lambda v: v.email.lower() == needle,
            lambda v: dotted_name(v.name) == dotted_name(needle),
        ):
            for volunteer in roster:
                if matches(volunteer):
                    return volunteer
        return None

    def authenticate(self, identifier: str) -> Volunteer:
        volunteer = self.resolve(identifier)
        if volunteer is None:
            raise NotFound("Volunteer not found. Check your volunteer ID or email.")
        if volunteer.status != "Active":
            raise VolunteerUnavailable(
                f"Your volunteer account is currently {volunteer.status.lower()}. Please contact admin."
            )
        return volunteer

    def stats(self) -> VolunteerStats:
        stats = VolunteerStats()
        for volunteer in self.volunteers.list():
            stats.total += 1
            if volunteer.status == "Active":
                stats.active += 1
            elif volunteer.status == "Inactive":
                stats.inactive += 1
            elif volunteer.status == "Suspended":
                stats.suspended += 1
        return stats
