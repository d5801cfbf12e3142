"""Tests for the two-phase submission flow and the donation workflow."""

from datetime import timedelta

import pytest

from foodlink.services.errors import (
    InvalidTransition,
    NotFound,
    SafetyAlertPending,
    ValidationError,
    VolunteerUnavailable,
)
from foodlink.services.safety import COLLECTION_NOTICE, PRIORITY_EXPIRY, WARNING_RAW_STORAGE


class TestSubmission:
    def test_check_does_not_store(self, now, make_draft, empty_donation_service):
        check = empty_donation_service.validate_and_score(make_draft(), now)
        assert not check.proceedable
        assert check.alerts == [COLLECTION_NOTICE]
        assert check.urgency == "Low"
        assert empty_donation_service.list() == []

    def test_notice_alone_pauses_submission(self, now, make_draft, empty_donation_service):
        with pytest.raises(SafetyAlertPending) as excinfo:
            empty_donation_service.commit(make_draft(), now=now)
        assert excinfo.value.alerts == [COLLECTION_NOTICE]
        assert excinfo.value.safety_score == 100
        assert empty_donation_service.list() == []

    def test_confirmed_clean_draft_is_stored(self, now, make_draft, empty_donation_service):
        donation = empty_donation_service.commit(make_draft(), override_confirmed=True, now=now)
        assert donation.status == "Pending Review"
        assert donation.submitted_at == now
        assert donation.safety_score == 100
        assert donation.safety_alerts == [COLLECTION_NOTICE]
        assert donation.urgency == "High"
        assert donation.id.startswith("FD")
        assert empty_donation_service.get(donation.id) == donation

    def test_alerts_pause_submission(self, now, make_draft, empty_donation_service):
        draft = make_draft(food_category="raw", storage_conditions="ambient", expiry_time=now + timedelta(hours=10))
        with pytest.raises(SafetyAlertPending) as excinfo:
            empty_donation_service.commit(draft, now=now)
        assert excinfo.value.alerts == [PRIORITY_EXPIRY, WARNING_RAW_STORAGE]
        assert excinfo.value.safety_score == 60
        assert empty_donation_service.list() == []

    def test_confirmed_override_stores_with_high_urgency(self, now, make_draft, empty_donation_service):
        draft = make_draft(food_category="raw", storage_conditions="ambient", expiry_time=now + timedelta(hours=10))
        donation = empty_donation_service.commit(draft, override_confirmed=True, now=now)
        assert donation.urgency == "High"
        assert donation.safety_alerts == [PRIORITY_EXPIRY, WARNING_RAW_STORAGE]
        assert donation.safety_score == 60

    def test_invalid_draft_never_stored(self, now, make_draft, empty_donation_service):
        with pytest.raises(ValidationError) as excinfo:
            empty_donation_service.commit(make_draft(expiry_time=now + timedelta(days=8)), override_confirmed=True, now=now)
        assert excinfo.value.errors == ["Best before time cannot be more than 7 days in the future"]
        assert empty_donation_service.list() == []

    def test_ids_do_not_collide(self, now, make_draft, empty_donation_service):
        ids = {empty_donation_service.commit(make_draft(), override_confirmed=True, now=now).id for _ in range(200)}
        assert len(ids) == 200


class TestWorkflow:
    def test_full_happy_path(self, now, make_draft, donation_service):
        donation = donation_service.commit(make_draft(), override_confirmed=True, now=now)
        donation_service.approve(donation.id)
        assigned = donation_service.assign_volunteer(donation.id, "david.wilson")
        assert assigned.status == "Assigned"
        assert assigned.assigned_volunteer == "david.wilson"
        donation_service.start_collection(donation.id)
        completed = donation_service.complete(donation.id)
        assert completed.status == "Completed"
        assert completed.assigned_volunteer == "david.wilson"
        assert completed.rejection_reason is None

    def test_assigning_pending_donation_is_invalid(self, donation_service):
        with pytest.raises(InvalidTransition):
            donation_service.assign_volunteer("FD1001", "john.smith")
        assert donation_service.get("FD1001").status == "Pending Review"
        assert donation_service.get("FD1001").assigned_volunteer is None

    def test_completing_pending_donation_is_invalid(self, donation_service):
        with pytest.raises(InvalidTransition):
            donation_service.complete("FD1001")
        assert donation_service.get("FD1001").status == "Pending Review"

    def test_generic_transition_cannot_assign(self, donation_service):
        donation_service.approve("FD1004")
        with pytest.raises(InvalidTransition):
            donation_service.transition("FD1004", "Assigned")

    def test_reject_with_reason(self, donation_service):
        rejected = donation_service.reject("FD1004", "Held hot too long")
        assert rejected.status == "Rejected"
        assert rejected.rejection_reason == "Held hot too long"
        with pytest.raises(InvalidTransition):
            donation_service.approve("FD1004")

    def test_reject_without_reason_leaves_state(self, donation_service):
        with pytest.raises(ValidationError):
            donation_service.reject("FD1001", " ")
        assert donation_service.get("FD1001").status == "Pending Review"

    def test_cannot_reject_after_approval(self, donation_service):
        donation_service.approve("FD1001")
        with pytest.raises(InvalidTransition):
            donation_service.reject("FD1001", "Changed mind")

    def test_inactive_volunteer_cannot_be_assigned(self, donation_service):
        donation_service.approve("FD1001")
        with pytest.raises(VolunteerUnavailable):
            donation_service.assign_volunteer("FD1001", "emily.brown")
        assert donation_service.get("FD1001").status == "Approved"

    def test_unknown_volunteer(self, donation_service):
        donation_service.approve("FD1001")
        with pytest.raises(NotFound):
            donation_service.assign_volunteer("FD1001", "nobody")

    def test_unknown_donation(self, donation_service):
        with pytest.raises(NotFound):
            donation_service.approve("FD0000")

    def test_rejection_reason_only_on_rejected(self, donation_service):
        donation_service.reject("FD1004", "Unsafe")
        for donation in donation_service.list():
            assert bool(donation.rejection_reason) == (donation.status == "Rejected")

    def test_volunteer_only_on_assigned_states(self, donation_service):
        for donation in donation_service.list():
            expected = donation.status in ("Assigned", "In Transit", "Completed")
            assert (donation.assigned_volunteer is not None) == expected


class TestReporting:
    def test_stats(self, donation_service):
        stats = donation_service.stats()
        assert stats.total == 5
        assert stats.pending == 2
        assert stats.approved == 1
        assert stats.in_transit == 1
        assert stats.completed == 1
        assert stats.rejected == 0

    def test_safety_stats(self, donation_service):
        stats = donation_service.safety_stats()
        # demo scores: 75, 90, 85, 70, 60
        assert stats.high_risk == 0
        assert stats.medium_risk == 3
        assert stats.low_risk == 2
        assert stats.with_allergens == 5

    def test_dashboard(self, now, donation_service):
        dashboard = donation_service.dashboard(now)
        assert dashboard.total == 5
        assert dashboard.temperature_controlled == 1
        # FD1001 (2h) and FD1004 (1h) are open and expire within 2 hours
        assert dashboard.expiring_soon == 2
        assert dashboard.with_safety_alerts == 1

    def test_volunteer_views(self, donation_service):
        assert [d.id for d in donation_service.for_volunteer("john.smith")] == ["FD1002"]
        assert [d.id for d in donation_service.completed_by("mike.davis")] == ["FD1005"]
        assert donation_service.for_volunteer("mike.davis") == []

    def test_list_by_status(self, donation_service):
        pending = donation_service.list("Pending Review")
        assert {d.id for d in pending} == {"FD1001", "FD1004"}

    def test_newest_first(self, now, make_draft, donation_service):
        donation = donation_service.commit(make_draft(), override_confirmed=True, now=now)
        assert donation_service.list()[0].id == donation.id

    def test_dashboard_counts_any_stored_alert(self, now, make_draft, donation_service):
        donation_service.commit(make_draft(), override_confirmed=True, now=now)
        # FD1004 plus the new donation carrying only the collection notice
        assert donation_service.dashboard(now).with_safety_alerts == 2


class TestInsights:
    def _hot_meal(self, now, make_draft):
        # hot held 5h (-30) and expiring in 90 minutes (-15): score 55
        return make_draft(
            donor="Night Market",
            food_category="prepared",
            storage_conditions="hot",
            preparation_time=now - timedelta(hours=5),
            expiry_time=now + timedelta(minutes=90),
        )

    def test_seeded_insights(self, now, donation_service):
        insights = donation_service.insights(now)
        assert insights.high_risk_open == 0
        assert insights.temperature_risk == 0
        assert insights.hot_storage == 2
        assert insights.cold_storage == 1
        assert [item.id for item in insights.expiring_soon] == ["FD1004", "FD1001"]
        assert [item.hours_left for item in insights.expiring_soon] == [1.0, 2.0]
        assert [item.safety_score for item in insights.expiring_soon] == [70, 75]
        compliance = insights.compliance
        assert (compliance.low_risk_percent, compliance.medium_risk_percent, compliance.high_risk_percent) == (40, 60, 0)
        assert compliance.with_allergens == 5

    def test_open_high_risk_and_temperature_exposure(self, now, make_draft, donation_service):
        donation = donation_service.commit(self._hot_meal(now, make_draft), override_confirmed=True, now=now)
        assert donation.safety_score == 55
        insights = donation_service.insights(now)
        assert insights.high_risk_open == 1
        assert [item.id for item in insights.high_risk_items] == [donation.id]
        assert insights.high_risk_items[0].safety_alerts == donation.safety_alerts
        assert insights.temperature_risk == 1
        assert [item.id for item in insights.expiring_soon] == ["FD1004", donation.id, "FD1001"]
        compliance = insights.compliance
        assert (compliance.low_risk_percent, compliance.medium_risk_percent, compliance.high_risk_percent) == (33, 50, 17)

    def test_closed_donations_are_not_flagged(self, now, make_draft, donation_service):
        donation = donation_service.commit(self._hot_meal(now, make_draft), override_confirmed=True, now=now)
        donation_service.reject(donation.id, "Held hot too long")
        insights = donation_service.insights(now)
        assert insights.high_risk_open == 0
        assert insights.temperature_risk == 0
        assert donation.id not in [item.id for item in insights.expiring_soon]
        assert insights.compliance.high_risk_percent == 17

    def test_empty_store(self, now, empty_donation_service):
        insights = empty_donation_service.insights(now)
        assert insights.expiring_soon == []
        assert insights.compliance.low_risk_percent == 0
