from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field


VolunteerStatus = Literal["Active", "Inactive", "Suspended"]


class Availability(BaseModel):
    days: List[str] = Field(default_factory=list)
    hours: str = ""


class EmergencyContact(BaseModel):
    name: str
    phone: str


class Volunteer(BaseModel):
    id: str
    name: str
    email: EmailStr
    phone: str
    status: VolunteerStatus = "Active"
    join_date: datetime
    completed_collections: int = 0
    rating: float = 0.0
    specializations: List[str] = Field(default_factory=list)
    availability: Availability = Field(default_factory=Availability)
    emergency_contact: Optional[EmergencyContact] = None


class VolunteerCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str
    status: VolunteerStatus = "Active"
    specializations: List[str] = Field(default_factory=list)
    availability: Availability = Field(default_factory=Availability)
    emergency_contact: Optional[EmergencyContact] = None


class VolunteerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    status: Optional[VolunteerStatus] = None
    specializations: Optional[List[str]] = None
    availability: Optional[Availability] = None
    emergency_contact: Optional[EmergencyContact] = None


class VolunteerList(BaseModel):
    volunteers: List[Volunteer]


class VolunteerStats(BaseModel):
    total: int = 0
    active: int = 0
    inactive: int = 0
    suspended: int = 0
