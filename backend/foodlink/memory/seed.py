from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from loguru import logger

from ..database import InMemoryDatabase
from ..models.donation import Donation
from ..models.volunteer import Volunteer
from ..utils.clock import utcnow
from .repository import DonationRepository, VolunteerRepository

DEMO_VOLUNTEERS: List[Dict[str, Any]] = [
    {
        "id": "john.smith",
        "name": "John Smith",
        "email": "john@foodbank.org",
        "phone": "+1 (555) 123-4567",
        "status": "Active",
        "join_date": datetime(2024, 1, 15, tzinfo=timezone.utc),
        "completed_collections": 47,
        "rating": 4.8,
        "specializations": ["Restaurant Pickups", "Large Events"],
        "availability": {"days": ["Monday", "Tuesday", "Wednesday", "Friday"], "hours": "9:00 AM - 6:00 PM"},
        "emergency_contact": {"name": "Jane Smith", "phone": "+1 (555) 123-4568"},
    },
    {
        "id": "sarah.johnson",
        "name": "Sarah Johnson",
        "email": "sarah@foodbank.org",
        "phone": "+1 (555) 987-6543",
        "status": "Active",
        "join_date": datetime(2024, 2, 20, tzinfo=timezone.utc),
        "completed_collections": 32,
        "rating": 4.9,
        "specializations": ["Bakery Items", "Grocery Stores"],
        "availability": {"days": ["Thursday", "Friday", "Saturday", "Sunday"], "hours": "10:00 AM - 8:00 PM"},
    },
    {
        "id": "mike.davis",
        "name": "Mike Davis",
        "email": "mike@foodbank.org",
        "phone": "+1 (555) 456-7890",
        "status": "Active",
        "join_date": datetime(2023, 11, 10, tzinfo=timezone.utc),
        "completed_collections": 89,
        "rating": 4.7,
        "specializations": ["Corporate Events", "Catering Services"],
        "availability": {"days": ["Monday", "Wednesday", "Friday", "Saturday"], "hours": "8:00 AM - 5:00 PM"},
    },
    {
        "id": "emily.brown",
        "name": "Emily Brown",
        "email": "emily@foodbank.org",
        "phone": "+1 (555) 654-3210",
        "status": "Inactive",
        "join_date": datetime(2024, 3, 5, tzinfo=timezone.utc),
        "completed_collections": 15,
        "rating": 4.6,
        "specializations": ["Small Restaurants", "Cafes"],
        "availability": {"days": ["Tuesday", "Thursday", "Sunday"], "hours": "11:00 AM - 7:00 PM"},
    },
    {
        "id": "david.wilson",
        "name": "David Wilson",
        "email": "david@foodbank.org",
        "phone": "+1 (555) 321-0987",
        "status": "Active",
        "join_date": datetime(2023, 9, 18, tzinfo=timezone.utc),
        "completed_collections": 156,
        "rating": 4.9,
        "specializations": ["Emergency Pickups", "Large Venues"],
        "availability": {
            "days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
            "hours": "7:00 AM - 9:00 PM",
        },
        "emergency_contact": {"name": "Lisa Wilson", "phone": "+1 (555) 321-0988"},
    },
]


def demo_donations(now: datetime) -> List[Dict[str, Any]]:
    """Demo records relative to ``now``; scores are as stored, not recomputed."""

    def hours(value: float) -> datetime:
        return now + timedelta(hours=value)

    return [
        {
            "id": "FD1001",
            "donor": "Mario's Restaurant",
            "organization_type": "restaurant",
            "food_type": "Prepared Meals",
            "quantity": "50 portions",
            "location": "123 Main St, Downtown",
            "phone": "+1 (555) 123-4567",
            "urgency": "High",
            "status": "Pending Review",
            "submitted_at": hours(-2),
            "expiry_time": hours(2),
            "special_instructions": "Food is still hot, please collect ASAP",
            "storage_conditions": "hot",
            "food_category": "prepared",
            "preparation_time": hours(-3),
            "temperature_log": "65°C",
            "allergens": ["Gluten", "Dairy"],
            "handling_notes": "Keep hot until pickup, use insulated containers",
            "safety_score": 75,
        },
        {
            "id": "FD1002",
            "donor": "Grand Event Hall",
            "organization_type": "event-venue",
            "food_type": "Buffet Items",
            "quantity": "30kg mixed",
            "location": "456 Event Ave",
            "phone": "+1 (555) 987-6543",
            "urgency": "Medium",
            "status": "Assigned",
            "submitted_at": hours(-4),
            "expiry_time": hours(6),
            "assigned_volunteer": "john.smith",
            "storage_conditions": "cold",
            "food_category": "prepared",
            "preparation_time": hours(-5),
            "temperature_log": "4°C",
            "allergens": ["Nuts", "Eggs"],
            "safety_score": 90,
        },
        {
            "id": "FD1003",
            "donor": "Fresh Bakery",
            "organization_type": "grocery-store",
            "food_type": "Bread & Pastries",
            "quantity": "25 loaves",
            "location": "789 Baker St",
            "phone": "+1 (555) 456-7890",
            "urgency": "Low",
            "status": "In Transit",
            "submitted_at": hours(-6),
            "expiry_time": hours(12),
            "assigned_volunteer": "sarah.johnson",
            "storage_conditions": "ambient",
            "food_category": "packaged",
            "allergens": ["Gluten"],
            "safety_score": 85,
        },
        {
            "id": "FD1004",
            "donor": "Corporate Cafeteria",
            "organization_type": "other",
            "food_type": "Lunch Surplus",
            "quantity": "40 meals",
            "location": "321 Business Blvd",
            "phone": "+1 (555) 654-3210",
            "urgency": "High",
            "status": "Pending Review",
            "submitted_at": hours(-1),
            "expiry_time": hours(1),
            "special_instructions": "Located on 5th floor, ask for manager",
            "storage_conditions": "hot",
            "food_category": "prepared",
            "preparation_time": hours(-2),
            "temperature_log": "70°C",
            "allergens": ["Soy"],
            "safety_alerts": ["CAUTION: Prepared food at serving temperature for 2 hours"],
            "safety_score": 70,
        },
        {
            "id": "FD1005",
            "donor": "Pizza Palace",
            "organization_type": "restaurant",
            "food_type": "Pizza & Sides",
            "quantity": "15 pizzas",
            "location": "555 Food Court",
            "phone": "+1 (555) 111-2222",
            "urgency": "Medium",
            "status": "Completed",
            "submitted_at": hours(-8),
            "expiry_time": hours(-2),
            "assigned_volunteer": "mike.davis",
            "storage_conditions": "ambient",
            "food_category": "prepared",
            "allergens": ["Gluten", "Dairy"],
            "safety_score": 60,
        },
    ]


def seed_demo_data(database: InMemoryDatabase, now: datetime | None = None) -> None:
    """Load the demo roster and donations into empty collections."""
    now = now or utcnow()
    volunteers = VolunteerRepository(database)
    donations = DonationRepository(database)
    if volunteers.list() or donations.list():
        logger.info("Store already populated; skipping demo seed")
        return
    # Oldest first so the newest record lists first.
    for document in reversed(DEMO_VOLUNTEERS):
        volunteers.upsert(Volunteer(**document))
    for document in reversed(demo_donations(now)):
        donations.upsert(Donation(**document))
    logger.info("Seeded {} volunteers and {} donations", len(DEMO_VOLUNTEERS), len(demo_donations(now)))
