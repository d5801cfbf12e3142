"""Tests for the volunteer roster and the new-assignment tracker."""

from datetime import timedelta

import pytest

from foodlink.models.volunteer import VolunteerCreate, VolunteerUpdate
from foodlink.services.errors import NotFound, VolunteerUnavailable
from foodlink.utils.notifications import AssignmentTracker, assignment_message


def _create(name="Priya Patel", email="priya@foodbank.org", **overrides) -> VolunteerCreate:
    return VolunteerCreate(name=name, email=email, phone="+1 (555) 000-1111", **overrides)


class TestIdGeneration:
    def test_email_local_part_first(self, now, volunteer_service):
        volunteer = volunteer_service.add(_create(), now)
        assert volunteer.id == "priya"
        assert volunteer.join_date == now
        assert volunteer.completed_collections == 0
        assert volunteer.rating == 0

    def test_falls_back_to_dotted_name(self, now, volunteer_service):
        volunteer = volunteer_service.add(_create(name="John  Smith Jr", email="john.smith@other.org"), now)
        assert volunteer.id == "john.smith.jr"

    def test_falls_back_to_timestamp(self, now, volunteer_service):
        volunteer = volunteer_service.add(_create(name="Sarah Johnson", email="sarah.johnson@other.org"), now)
        assert volunteer.id == f"vol_{int(now.timestamp() * 1000)}"

    def test_timestamp_fallback_stays_unique(self, now, volunteer_service):
        first = volunteer_service.add(_create(name="Sarah Johnson", email="sarah.johnson@a.org"), now)
        second = volunteer_service.add(_create(name="Sarah Johnson", email="sarah.johnson@b.org"), now)
        assert first.id != second.id


class TestRoster:
    def test_update(self, volunteer_service):
        updated = volunteer_service.update("emily.brown", VolunteerUpdate(status="Active"))
        assert updated.status == "Active"
        assert volunteer_service.get("emily.brown").status == "Active"
        assert updated.completed_collections == 15

    def test_remove(self, volunteer_service):
        volunteer_service.remove("emily.brown")
        assert volunteer_service.find("emily.brown") is None
        with pytest.raises(NotFound):
            volunteer_service.remove("emily.brown")

    def test_active_and_stats(self, volunteer_service):
        assert {v.id for v in volunteer_service.active()} == {
            "john.smith",
            "sarah.johnson",
            "mike.davis",
            "david.wilson",
        }
        stats = volunteer_service.stats()
        assert (stats.total, stats.active, stats.inactive, stats.suspended) == (5, 4, 1, 0)

    @pytest.mark.parametrize("identifier", ["john.smith", "JOHN@foodbank.org", "John Smith", " john.smith "])
    def test_resolve(self, volunteer_service, identifier):
        assert volunteer_service.resolve(identifier).id == "john.smith"

    def test_resolve_unknown(self, volunteer_service):
        assert volunteer_service.resolve("nobody") is None
        assert volunteer_service.resolve("") is None

    def test_authenticate_inactive(self, volunteer_service):
        with pytest.raises(VolunteerUnavailable) as excinfo:
            volunteer_service.authenticate("emily@foodbank.org")
        assert "currently inactive" in excinfo.value.message

    def test_authenticate_unknown(self, volunteer_service):
        with pytest.raises(NotFound):
            volunteer_service.authenticate("ghost@foodbank.org")


class TestAssignmentTracker:
    def test_first_check_reports_everything(self, now):
        tracker = AssignmentTracker()
        assert tracker.check("john.smith", ["FD1", "FD2"], now) == ["FD1", "FD2"]
        assert tracker.last_checked("john.smith") == now

    def test_only_new_ids_reported(self, now):
        tracker = AssignmentTracker()
        tracker.check("john.smith", ["FD1"], now)
        assert tracker.check("john.smith", ["FD1", "FD2"], now + timedelta(seconds=30)) == ["FD2"]
        assert tracker.check("john.smith", ["FD1", "FD2"], now + timedelta(seconds=60)) == []

    def test_volunteers_tracked_separately(self, now):
        tracker = AssignmentTracker()
        tracker.check("john.smith", ["FD1"], now)
        assert tracker.check("sarah.johnson", ["FD1"], now) == ["FD1"]

    def test_forget(self, now):
        tracker = AssignmentTracker()
        tracker.check("john.smith", ["FD1"], now)
        tracker.forget("john.smith")
        assert tracker.last_checked("john.smith") is None
        assert tracker.check("john.smith", ["FD1"], now) == ["FD1"]

    def test_message(self):
        assert assignment_message(1) == "You have 1 new collection assigned."
        assert assignment_message(3) == "You have 3 new collections assigned."
