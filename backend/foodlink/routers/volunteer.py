from __future__ import annotations

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..models.user import Principal
from ..models.volunteer import Volunteer, VolunteerCreate, VolunteerList, VolunteerStats, VolunteerUpdate
from ..routers.auth import get_current_user, get_volunteer_service, require_roles
from ..routers.donation import get_donation_service
from ..schemas.donation import serialize_donations
from ..services.donations import DonationService
from ..services.safety import HIGH_RISK_BELOW
from ..services.volunteers import VolunteerService
from ..utils.clock import utcnow
from ..utils.notifications import assignment_message, assignment_tracker

router = APIRouter(prefix="/volunteers", tags=["volunteers"])
AdminUser = Annotated[Principal, Depends(require_roles("admin"))]


def _ensure_self_or_admin(user: Principal, volunteer_id: str) -> None:
    if user.role == "volunteer" and user.subject != volunteer_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot view another volunteer's pickups")


@router.get("/", response_model=VolunteerList)
async def list_volunteers(
    _: AdminUser,
    active_only: bool = False,
    volunteers: VolunteerService = Depends(get_volunteer_service),
) -> VolunteerList:
    roster = volunteers.active() if active_only else volunteers.list()
    return VolunteerList(volunteers=roster)


@router.post("/", response_model=Volunteer, status_code=status.HTTP_201_CREATED)
async def create_volunteer(
    _: AdminUser,
    payload: VolunteerCreate,
    volunteers: VolunteerService = Depends(get_volunteer_service),
) -> Volunteer:
    return volunteers.add(payload)


@router.get("/stats", response_model=VolunteerStats)
async def volunteer_stats(_: AdminUser, volunteers: VolunteerService = Depends(get_volunteer_service)) -> VolunteerStats:
    return volunteers.stats()


@router.get("/{volunteer_id}", response_model=Volunteer)
async def get_volunteer(
    volunteer_id: str,
    user: Principal = Depends(get_current_user),
    volunteers: VolunteerService = Depends(get_volunteer_service),
) -> Volunteer:
    _ensure_self_or_admin(user, volunteer_id)
    return volunteers.get(volunteer_id)


@router.patch("/{volunteer_id}", response_model=Volunteer)
async def update_volunteer(
    _: AdminUser,
    volunteer_id: str,
    payload: VolunteerUpdate,
    volunteers: VolunteerService = Depends(get_volunteer_service),
) -> Volunteer:
    return volunteers.update(volunteer_id, payload)


@router.delete("/{volunteer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_volunteer(
    _: AdminUser,
    volunteer_id: str,
    volunteers: VolunteerService = Depends(get_volunteer_service),
) -> Response:
    volunteers.remove(volunteer_id)
    assignment_tracker.forget(volunteer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{volunteer_id}/assignments")
async def volunteer_assignments(
    volunteer_id: str,
    user: Principal = Depends(get_current_user),
    volunteers: VolunteerService = Depends(get_volunteer_service),
    donations: DonationService = Depends(get_donation_service),
) -> Dict[str, Any]:
    """Volunteer dashboard: open pickups, finished pickups and their risk."""
    _ensure_self_or_admin(user, volunteer_id)
    volunteer = volunteers.get(volunteer_id)
    now = utcnow()
    active = donations.for_volunteer(volunteer.id)
    completed = donations.completed_by(volunteer.id)
    return {
        "volunteer": volunteer.model_dump(mode="json"),
        "active": serialize_donations(active, now),
        "completed": serialize_donations(completed, now),
        "high_risk": sum(1 for donation in active if donation.safety_score < HIGH_RISK_BELOW),
        "with_safety_alerts": sum(1 for donation in active if donation.safety_alerts),
    }


@router.get("/{volunteer_id}/notifications")
async def volunteer_notifications(
    volunteer_id: str,
    user: Principal = Depends(get_current_user),
    volunteers: VolunteerService = Depends(get_volunteer_service),
    donations: DonationService = Depends(get_donation_service),
) -> Dict[str, Any]:
    _ensure_self_or_admin(user, volunteer_id)
    volunteer = volunteers.get(volunteer_id)
    active_ids = [donation.id for donation in donations.for_volunteer(volunteer.id)]
    new_ids = assignment_tracker.check(volunteer.id, active_ids)
    return {
        "new_assignments": new_ids,
        "message": assignment_message(len(new_ids)) if new_ids else None,
    }
