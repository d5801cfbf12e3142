from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..database import InMemoryDatabase, get_database
from ..memory.repository import DonationRepository, VolunteerRepository
from ..models.donation import (
    AssignRequest,
    DonationDraft,
    DonationList,
    DonationStats,
    DonationStatus,
    DonationView,
    RejectRequest,
    SafetyCheckResponse,
    SafetyDashboard,
    SafetyInsights,
    SafetyStats,
    SubmitDonationRequest,
)
from ..models.user import Principal
from ..routers.auth import get_current_user, require_roles
from ..schemas.donation import donation_document, serialize_donations
from ..services.donations import DonationService
from ..utils.clock import utcnow

router = APIRouter(prefix="/donations", tags=["donations"])
AdminUser = Annotated[Principal, Depends(require_roles("admin"))]
CollectorUser = Annotated[Principal, Depends(require_roles("admin", "volunteer"))]


def get_donation_service(database: InMemoryDatabase = Depends(get_database)) -> DonationService:
    return DonationService(DonationRepository(database), VolunteerRepository(database))


def _view(donation) -> DonationView:
    return DonationView(**donation_document(donation, utcnow()))


@router.post("/check", response_model=SafetyCheckResponse)
async def check_donation(
    draft: DonationDraft,
    service: DonationService = Depends(get_donation_service),
) -> SafetyCheckResponse:
    """First submission phase: validate and score without storing anything."""
    check = service.validate_and_score(draft)
    return SafetyCheckResponse(
        proceedable=check.proceedable,
        safety_score=check.report.score,
        alerts=check.alerts,
        urgency=check.urgency,
    )


@router.post("/", response_model=DonationView, status_code=status.HTTP_201_CREATED)
async def submit_donation(
    payload: SubmitDonationRequest,
    service: DonationService = Depends(get_donation_service),
) -> DonationView:
    donation = service.commit(payload.draft, override_confirmed=payload.override_confirmed)
    await router.manager.notify("donation_created", {"id": donation.id, "urgency": donation.urgency})
    return _view(donation)


@router.get("/", response_model=DonationList)
async def list_donations(
    _: Principal = Depends(get_current_user),
    status_filter: Optional[DonationStatus] = Query(default=None, alias="status"),
    service: DonationService = Depends(get_donation_service),
) -> DonationList:
    now = utcnow()
    documents = serialize_donations(service.list(status_filter), now)
    return DonationList(donations=[DonationView(**document) for document in documents])


@router.get("/stats", response_model=DonationStats)
async def donation_stats(_: AdminUser, service: DonationService = Depends(get_donation_service)) -> DonationStats:
    return service.stats()


@router.get("/safety-stats", response_model=SafetyStats)
async def safety_stats(_: AdminUser, service: DonationService = Depends(get_donation_service)) -> SafetyStats:
    return service.safety_stats()


@router.get("/dashboard", response_model=SafetyDashboard)
async def safety_dashboard(_: AdminUser, service: DonationService = Depends(get_donation_service)) -> SafetyDashboard:
    return service.dashboard()


@router.get("/insights", response_model=SafetyInsights)
async def safety_insights(_: AdminUser, service: DonationService = Depends(get_donation_service)) -> SafetyInsights:
    return service.insights()


@router.get("/{donation_id}", response_model=DonationView)
async def get_donation(
    donation_id: str,
    _: Principal = Depends(get_current_user),
    service: DonationService = Depends(get_donation_service),
) -> DonationView:
    return _view(service.get(donation_id))


@router.post("/{donation_id}/approve", response_model=DonationView)
async def approve_donation(
    _: AdminUser,
    donation_id: str,
    service: DonationService = Depends(get_donation_service),
) -> DonationView:
    donation = service.approve(donation_id)
    await router.manager.notify("donation_status_changed", {"id": donation.id, "status": donation.status})
    return _view(donation)


@router.post("/{donation_id}/reject", response_model=DonationView)
async def reject_donation(
    _: AdminUser,
    donation_id: str,
    payload: RejectRequest,
    service: DonationService = Depends(get_donation_service),
) -> DonationView:
    donation = service.reject(donation_id, payload.reason)
    await router.manager.notify(
        "donation_status_changed",
        {"id": donation.id, "status": donation.status, "reason": donation.rejection_reason},
    )
    return _view(donation)


@router.post("/{donation_id}/assign", response_model=DonationView)
async def assign_donation(
    _: AdminUser,
    donation_id: str,
    payload: AssignRequest,
    service: DonationService = Depends(get_donation_service),
) -> DonationView:
    donation = service.assign_volunteer(donation_id, payload.volunteer_id)
    await router.manager.notify(
        "donation_assigned",
        {"id": donation.id, "volunteer_id": donation.assigned_volunteer, "urgency": donation.urgency},
    )
    return _view(donation)


def _ensure_collector(user: Principal, service: DonationService, donation_id: str) -> None:
    if user.role != "volunteer":
        return
    donation = service.get(donation_id)
    if donation.assigned_volunteer != user.subject:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the assigned volunteer can update this collection",
        )


@router.post("/{donation_id}/start", response_model=DonationView)
async def start_collection(
    user: CollectorUser,
    donation_id: str,
    service: DonationService = Depends(get_donation_service),
) -> DonationView:
    _ensure_collector(user, service, donation_id)
    donation = service.start_collection(donation_id)
    await router.manager.notify("donation_status_changed", {"id": donation.id, "status": donation.status})
    return _view(donation)


@router.post("/{donation_id}/complete", response_model=DonationView)
async def complete_collection(
    user: CollectorUser,
    donation_id: str,
    service: DonationService = Depends(get_donation_service),
) -> DonationView:
    _ensure_collector(user, service, donation_id)
    donation = service.complete(donation_id)
    await router.manager.notify("donation_status_changed", {"id": donation.id, "status": donation.status})
    return _view(donation)


def init_router(manager) -> None:
    router.manager = manager
