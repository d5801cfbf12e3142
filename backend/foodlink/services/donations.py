from __future__ import annotations

import math
import random
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from loguru import logger

from ..database import settings
from ..memory.repository import Repository
from ..models.donation import (
    REFRIGERATED_STORAGE,
    ComplianceReport,
    Donation,
    DonationDraft,
    DonationStats,
    InsightItem,
    SafetyDashboard,
    SafetyInsights,
    SafetyStats,
)
from ..models.volunteer import Volunteer
from ..utils.clock import ensure_aware, hours_between, utcnow
from . import lifecycle, safety, validation
from .errors import InvalidTransition, NotFound, SafetyAlertPending, VolunteerUnavailable

ID_ATTEMPTS = 50
TEMPERATURE_RISK_HOURS = 4


@dataclass(frozen=True)
class SubmissionCheck:
    """Result of the first submission phase: validated, scored, not stored."""

    report: safety.SafetyReport
    urgency: str

    @property
    def proceedable(self) -> bool:
        return not self.report.requires_confirmation

    @property
    def alerts(self) -> List[str]:
        return self.report.alerts


def _sample(now: Optional[datetime]) -> datetime:
    return ensure_aware(now) if now is not None else utcnow()


class DonationService:
    def __init__(self, donations: Repository[Donation], volunteers: Repository[Volunteer]) -> None:
        self.donations = donations
        self.volunteers = volunteers

    # Submission

    def validate_and_score(self, draft: DonationDraft, now: datetime | None = None) -> SubmissionCheck:
        now = _sample(now)
        validation.validate_draft(draft, now)
        report = safety.assess(draft, now)
        urgency = lifecycle.derive_urgency(draft.expiry_time, draft.storage_conditions, now)
        return SubmissionCheck(report=report, urgency=urgency)

    def commit(
        self,
        draft: DonationDraft,
        override_confirmed: bool = False,
        now: datetime | None = None,
    ) -> Donation:
        now = _sample(now)
        check = self.validate_and_score(draft, now)
        if check.report.requires_confirmation and not override_confirmed:
            raise SafetyAlertPending(check.alerts, check.report.score)

        # Confirming past alerts marks the donation for priority collection.
        urgency = lifecycle.derive_urgency(
            draft.expiry_time,
            draft.storage_conditions,
            now,
            forced_high=check.report.requires_confirmation,
        )
        donation = Donation(
            **draft.model_dump(exclude={"expiry_time", "preparation_time"}),
            id=self._new_id(),
            submitted_at=now,
            expiry_time=ensure_aware(draft.expiry_time),
            preparation_time=ensure_aware(draft.preparation_time) if draft.preparation_time else None,
            status=lifecycle.PENDING_REVIEW,
            urgency=urgency,
            safety_score=check.report.score,
            safety_alerts=check.report.alerts,
        )
        self.donations.upsert(donation)
        logger.info(
            "Donation {} submitted by {} (score {}, urgency {}, override {})",
            donation.id,
            donation.donor,
            donation.safety_score,
            donation.urgency,
            check.report.requires_confirmation,
        )
        return donation

    def _new_id(self) -> str:
        for _ in range(ID_ATTEMPTS):
            candidate = f"FD{random.randint(1000, 9999)}"
            if not self.donations.exists(candidate):
                return candidate
        candidate = f"FD{uuid.uuid4().hex[:8].upper()}"
        while self.donations.exists(candidate):
            candidate = f"FD{uuid.uuid4().hex[:8].upper()}"
        return candidate

    # Workflow

    def get(self, donation_id: str) -> Donation:
        donation = self.donations.get(donation_id)
        if donation is None:
            raise NotFound(f"Donation {donation_id} not found")
        return donation

    def list(self, status: str | None = None) -> List[Donation]:
        donations = self.donations.list()
        if status:
            donations = [donation for donation in donations if donation.status == status]
        return donations

    def transition(self, donation_id: str, target: str, reason: str | None = None) -> Donation:
        donation = self.get(donation_id)
        if target == lifecycle.ASSIGNED:
            # Assignment carries a volunteer; route it through assign_volunteer.
            raise InvalidTransition(
                donation.status, target, "Use volunteer assignment to move a donation to Assigned"
            )
        updated = lifecycle.advance(donation, target, reason=reason)
        self.donations.upsert(updated)
        logger.info("Donation {} moved {} -> {}", donation_id, donation.status, updated.status)
        return updated

    def approve(self, donation_id: str) -> Donation:
        return self.transition(donation_id, lifecycle.APPROVED)

    def reject(self, donation_id: str, reason: str) -> Donation:
        return self.transition(donation_id, lifecycle.REJECTED, reason)

    def start_collection(self, donation_id: str) -> Donation:
        return self.transition(donation_id, lifecycle.IN_TRANSIT)

    def complete(self, donation_id: str) -> Donation:
        return self.transition(donation_id, lifecycle.COMPLETED)

    def assign_volunteer(self, donation_id: str, volunteer_id: str) -> Donation:
        donation = self.get(donation_id)
        if not lifecycle.can_transition(donation.status, lifecycle.ASSIGNED):
            raise InvalidTransition(donation.status, lifecycle.ASSIGNED)
        volunteer = self.volunteers.get(volunteer_id)
        if volunteer is None:
            raise NotFound(f"Volunteer {volunteer_id} not found")
        if volunteer.status != "Active":
            raise VolunteerUnavailable(f"Volunteer {volunteer_id} is {volunteer.status} and cannot be assigned")
        updated = lifecycle.advance(donation, lifecycle.ASSIGNED, volunteer_id=volunteer.id)
        self.donations.upsert(updated)
        logger.info("Donation {} assigned to {}", donation_id, volunteer.id)
        return updated

    # Reporting

    def for_volunteer(self, volunteer_id: str) -> List[Donation]:
        return [
            donation
            for donation in self.donations.list()
            if donation.assigned_volunteer == volunteer_id
            and donation.status in (lifecycle.ASSIGNED, lifecycle.IN_TRANSIT)
        ]

    def completed_by(self, volunteer_id: str) -> List[Donation]:
        return [
            donation
            for donation in self.donations.list()
            if donation.assigned_volunteer == volunteer_id and donation.status == lifecycle.COMPLETED
        ]

    def stats(self) -> DonationStats:
        stats = DonationStats()
        for donation in self.donations.list():
            stats.total += 1
            if donation.status == lifecycle.PENDING_REVIEW:
                stats.pending += 1
            elif donation.status in (lifecycle.APPROVED, lifecycle.ASSIGNED):
                stats.approved += 1
            elif donation.status == lifecycle.IN_TRANSIT:
                stats.in_transit += 1
            elif donation.status == lifecycle.COMPLETED:
                stats.completed += 1
            elif donation.status == lifecycle.REJECTED:
                stats.rejected += 1
        return stats

    def safety_stats(self) -> SafetyStats:
        stats = SafetyStats()
        for donation in self.donations.list():
            level = safety.risk_level(donation.safety_score)
            if level == "High Risk":
                stats.high_risk += 1
            elif level == "Medium Risk":
                stats.medium_risk += 1
            else:
                stats.low_risk += 1
            if donation.allergens:
                stats.with_allergens += 1
        return stats

    def expiring_soon(self, now: datetime | None = None) -> List[Donation]:
        now = _sample(now)
        return [
            donation
            for donation in self.donations.list()
            if donation.status in lifecycle.OPEN_STATES
            and 0 < hours_between(now, donation.expiry_time) <= settings.expiring_soon_hours
        ]

    def dashboard(self, now: datetime | None = None) -> SafetyDashboard:
        donations = self.donations.list()
        return SafetyDashboard(
            **self.safety_stats().model_dump(),
            total=len(donations),
            temperature_controlled=sum(1 for d in donations if d.storage_conditions in REFRIGERATED_STORAGE),
            expiring_soon=len(self.expiring_soon(now)),
            with_safety_alerts=sum(1 for d in donations if d.safety_alerts),
        )

    def insights(self, now: datetime | None = None) -> SafetyInsights:
        """Open high-risk items, temperature exposure, imminent expiries and
        the risk-band breakdown used by the admin safety overview."""
        now = _sample(now)
        donations = self.donations.list()
        open_donations = [d for d in donations if d.status in lifecycle.OPEN_STATES]
        high_risk = [d for d in open_donations if d.safety_score < safety.HIGH_RISK_BELOW]
        temperature_risk = [
            d
            for d in open_donations
            if d.preparation_time is not None
            and d.storage_conditions not in REFRIGERATED_STORAGE
            and hours_between(d.preparation_time, now) > TEMPERATURE_RISK_HOURS
        ]
        expiring = sorted(self.expiring_soon(now), key=lambda d: d.expiry_time)
        stats = self.safety_stats()
        return SafetyInsights(
            high_risk_open=len(high_risk),
            high_risk_items=[_insight_item(d, now) for d in high_risk],
            temperature_risk=len(temperature_risk),
            hot_storage=sum(1 for d in donations if d.storage_conditions == "hot"),
            cold_storage=sum(1 for d in donations if d.storage_conditions == "cold"),
            expiring_soon=[_insight_item(d, now) for d in expiring],
            compliance=ComplianceReport(
                low_risk_percent=_percent(stats.low_risk, len(donations)),
                medium_risk_percent=_percent(stats.medium_risk, len(donations)),
                high_risk_percent=_percent(stats.high_risk, len(donations)),
                with_allergens=stats.with_allergens,
            ),
        )


def _insight_item(donation: Donation, now: datetime) -> InsightItem:
    return InsightItem(
        id=donation.id,
        donor=donation.donor,
        food_type=donation.food_type,
        location=donation.location,
        storage_conditions=donation.storage_conditions,
        safety_score=donation.safety_score,
        safety_alerts=donation.safety_alerts,
        hours_left=round(hours_between(now, donation.expiry_time), 1),
    )


def _percent(part: int, total: int) -> int:
    if not total:
        return 0
    # Halves round up.
    return math.floor(part * 100 / total + 0.5)
