"""Shared fixtures for the foodlink test suite.

Service-level tests pin ``now`` so every time window is exact. API tests run
against the real clock with drafts built relative to it.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from foodlink.database import InMemoryDatabase, get_database
from foodlink.memory.repository import DonationRepository, VolunteerRepository
from foodlink.memory.seed import seed_demo_data
from foodlink.models.donation import DonationDraft
from foodlink.services.donations import DonationService
from foodlink.services.volunteers import VolunteerService
from foodlink.utils.clock import utcnow
from foodlink.utils.notifications import assignment_tracker


@pytest.fixture
def now():
    return datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def build_draft(now, **overrides) -> DonationDraft:
    """Valid, low-risk draft: refrigerated packaged food expiring in 30h."""
    fields = dict(
        donor="Fresh Bakery",
        organization_type="grocery-store",
        food_type="Bread & Pastries",
        quantity="25 loaves",
        location="789 Baker St",
        phone="+1 (555) 456-7890",
        expiry_time=now + timedelta(hours=30),
        storage_conditions="cold",
        food_category="packaged",
    )
    fields.update(overrides)
    return DonationDraft(**fields)


@pytest.fixture
def make_draft(now):
    def _make(**overrides) -> DonationDraft:
        return build_draft(now, **overrides)

    return _make


@pytest.fixture
def database():
    return InMemoryDatabase(name="foodlink-test")


@pytest.fixture
def seeded_database(database, now):
    seed_demo_data(database, now)
    return database


@pytest.fixture
def volunteer_service(seeded_database):
    return VolunteerService(VolunteerRepository(seeded_database))


@pytest.fixture
def donation_service(seeded_database):
    return DonationService(DonationRepository(seeded_database), VolunteerRepository(seeded_database))


@pytest.fixture
def empty_donation_service(database):
    return DonationService(DonationRepository(database), VolunteerRepository(database))


@pytest.fixture
def api_database():
    database = InMemoryDatabase(name="foodlink-api-test")
    seed_demo_data(database)
    return database


@pytest.fixture
def client(api_database):
    from foodlink.main import app

    assignment_tracker.reset()
    app.dependency_overrides[get_database] = lambda: api_database
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    assignment_tracker.reset()


@pytest.fixture
def live_draft_payload():
    """JSON draft relative to the real clock, for API submissions."""

    def _payload(**overrides):
        draft = build_draft(utcnow(), **overrides)
        return draft.model_dump(mode="json")

    return _payload
