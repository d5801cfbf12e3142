from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


DonationStatus = Literal["Pending Review", "Approved", "Rejected", "Assigned", "In Transit", "Completed"]
Urgency = Literal["High", "Medium", "Low"]
StorageCondition = Literal["hot", "cold", "ambient", "frozen"]
FoodCategory = Literal["prepared", "raw", "packaged"]
OrganizationType = Literal["restaurant", "event-venue", "grocery-store", "individual", "catering", "other"]
Allergen = Literal["Nuts", "Dairy", "Eggs", "Gluten", "Soy", "Shellfish", "Fish", "Sesame"]

ALLERGENS: tuple[str, ...] = ("Nuts", "Dairy", "Eggs", "Gluten", "Soy", "Shellfish", "Fish", "Sesame")
REFRIGERATED_STORAGE: frozenset[str] = frozenset({"cold", "frozen"})


def _dedupe(values: List[str]) -> List[str]:
    seen: set[str] = set()
    unique = []
    for value in values:
        if value not in seen:
            seen.add(value)
            unique.append(value)
    return unique


class DonationDraft(BaseModel):
    """Donor-entered fields before validation.

    Text fields default to empty so missing values surface as validation
    errors instead of parse failures.
    """

    donor: str = ""
    organization_type: OrganizationType = "restaurant"
    food_type: str = ""
    quantity: str = ""
    location: str = ""
    phone: str = ""
    expiry_time: Optional[datetime] = None
    special_instructions: Optional[str] = None
    storage_conditions: StorageCondition = "ambient"
    food_category: FoodCategory = "prepared"
    preparation_time: Optional[datetime] = None
    temperature_log: Optional[str] = None
    allergens: List[Allergen] = Field(default_factory=list)
    handling_notes: Optional[str] = None

    @field_validator("allergens")
    @classmethod
    def _unique_allergens(cls, value: List[str]) -> List[str]:
        return _dedupe(value)


class Donation(BaseModel):
    id: str
    donor: str
    organization_type: OrganizationType
    food_type: str
    quantity: str
    location: str
    phone: str
    urgency: Urgency
    status: DonationStatus = "Pending Review"
    submitted_at: datetime
    expiry_time: datetime
    special_instructions: Optional[str] = None
    rejection_reason: Optional[str] = None
    assigned_volunteer: Optional[str] = None
    storage_conditions: StorageCondition
    food_category: FoodCategory
    preparation_time: Optional[datetime] = None
    temperature_log: Optional[str] = None
    allergens: List[Allergen] = Field(default_factory=list)
    handling_notes: Optional[str] = None
    safety_alerts: List[str] = Field(default_factory=list)
    safety_score: int = Field(ge=0, le=100)

    @field_validator("allergens")
    @classmethod
    def _unique_allergens(cls, value: List[str]) -> List[str]:
        return _dedupe(value)


class DonationView(Donation):
    risk_level: str
    time_until_expiry: str
    expiring_soon: bool


class DonationList(BaseModel):
    donations: List[DonationView]


class SubmitDonationRequest(BaseModel):
    draft: DonationDraft
    override_confirmed: bool = False


class SafetyCheckResponse(BaseModel):
    proceedable: bool
    safety_score: int
    alerts: List[str]
    urgency: Urgency


class RejectRequest(BaseModel):
    reason: str


class AssignRequest(BaseModel):
    volunteer_id: str


class DonationStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    in_transit: int = 0
    completed: int = 0
    rejected: int = 0


class SafetyStats(BaseModel):
    high_risk: int = 0
    medium_risk: int = 0
    low_risk: int = 0
    with_allergens: int = 0


class SafetyDashboard(SafetyStats):
    total: int = 0
    temperature_controlled: int = 0
    expiring_soon: int = 0
    with_safety_alerts: int = 0


class InsightItem(BaseModel):
    id: str
    donor: str
    food_type: str
    location: str
    storage_conditions: StorageCondition
    safety_score: int
    safety_alerts: List[str] = Field(default_factory=list)
    hours_left: float


class ComplianceReport(BaseModel):
    """Share of all donations per risk band, in whole percent."""

    low_risk_percent: int = 0
    medium_risk_percent: int = 0
    high_risk_percent: int = 0
    with_allergens: int = 0


class SafetyInsights(BaseModel):
    high_risk_open: int = 0
    high_risk_items: List[InsightItem] = Field(default_factory=list)
    temperature_risk: int = 0
    hot_storage: int = 0
    cold_storage: int = 0
    expiring_soon: List[InsightItem] = Field(default_factory=list)
    compliance: ComplianceReport = Field(default_factory=ComplianceReport)
