"""
Tests for the lease overlap rule.

Validates:
- half-open interval intersection, open-ended leases
- overlapping creations rejected, back-to-back creations accepted
- the update path excludes the lease being edited
- overlap failures carry their own app status code
"""

import uuid
from datetime import date

import pytest

from shared.core.exceptions import ConflictError, LeaseOverlapError, NotFoundError
from shared.utils.app_status_code import AppStatusCode
from rental_service.app.services import overlap_service
from rental_service.app.services.overlap_service import intervals_overlap


# =============================================================================
# Interval rule
# =============================================================================


class TestIntervalsOverlap:

    def test_back_to_back_intervals_do_not_overlap(self):
        assert not intervals_overlap(
            date(2024, 1, 1), date(2024, 6, 1),
            date(2024, 6, 1), date(2024, 9, 1))

    def test_partial_intersection_overlaps(self):
        assert intervals_overlap(
            date(2024, 1, 1), date(2024, 6, 1),
            date(2024, 5, 1), date(2024, 8, 1))

    def test_contained_interval_overlaps(self):
        assert intervals_overlap(
            date(2024, 1, 1), date(2024, 12, 31),
            date(2024, 3, 1), date(2024, 4, 1))

    def test_same_start_date_overlaps(self):
        assert intervals_overlap(
            date(2024, 3, 1), date(2024, 6, 1),
            date(2024, 3, 1), date(2024, 4, 1))

    def test_open_ended_lease_blocks_every_later_start(self):
        assert intervals_overlap(
            date(2024, 1, 1), None,
            date(2030, 1, 1), date(2030, 2, 1))

    def test_open_ended_lease_ignores_earlier_interval(self):
        assert not intervals_overlap(
            date(2024, 6, 1), None,
            date(2024, 1, 1), date(2024, 6, 1))


# =============================================================================
# Validator against the store
# =============================================================================


class TestEnsureRoomAvailable:

    def test_rejects_overlapping_period(self, db, make_lease):
        lease = make_lease(start=date(2024, 1, 1), end=date(2024, 6, 1))

        with pytest.raises(ConflictError) as exc:
            overlap_service.ensure_room_available(
                db, lease.room_id, date(2024, 5, 1), date(2024, 8, 1))

        assert exc.value.details["lease_id"] == str(lease.id)

    def test_rejects_lease_starting_on_the_same_day(self, db, make_lease):
        lease = make_lease(start=date(2024, 3, 1), end=date(2024, 6, 1))

        with pytest.raises(LeaseOverlapError) as exc:
            overlap_service.ensure_room_available(
                db, lease.room_id, date(2024, 3, 1), date(2024, 4, 1))

        assert exc.value.details["lease_id"] == str(lease.id)

    def test_accepts_touching_period(self, db, make_lease):
        lease = make_lease(start=date(2024, 1, 1), end=date(2024, 6, 1))

        room = overlap_service.ensure_room_available(
            db, lease.room_id, date(2024, 6, 1), None)

        assert room.id == lease.room_id

    def test_excluded_lease_does_not_clash_with_itself(self, db, make_lease):
        lease = make_lease(start=date(2024, 1, 1), end=date(2024, 6, 1))

        assert not overlap_service.has_overlap(
            db, lease.room_id, date(2024, 1, 1), date(2024, 7, 1),
            exclude_lease_id=lease.id)

    def test_other_rooms_are_independent(self, db, make_lease, make_room):
        lease = make_lease(start=date(2024, 1, 1), end=date(2024, 6, 1))
        other = make_room(room_number="102")

        assert not overlap_service.has_overlap(
            db, other.id, date(2024, 1, 1), date(2024, 6, 1))
        assert lease.room_id != other.id

    def test_unknown_room(self, db):
        with pytest.raises(NotFoundError):
            overlap_service.ensure_room_available(
                db, uuid.uuid4(), date(2024, 1, 1), None)


# =============================================================================
# Room 101 scenario through the API
# =============================================================================


class TestRoom101Scenario:

    def _payload(self, tenant, room, start, end):
        return {
            "tenant_id": str(tenant.id),
            "room_id": str(room.id),
            "start_date": start,
            "end_date": end,
            "rent_value": "450.00",
            "charges": "30.00",
        }

    def test_overlap_rejected_and_touching_lease_accepted(self, client, make_room, make_tenant):
        room = make_room(room_number="101")
        tenant = make_tenant()

        lease_a = client.post("/api/leases/", json=self._payload(
            tenant, room, "2024-01-01", "2024-06-01"))
        assert lease_a.status_code == 201

        lease_b = client.post("/api/leases/", json=self._payload(
            tenant, room, "2024-05-01", "2024-08-01"))
        assert lease_b.status_code == 409
        body = lease_b.json()
        assert body["status"] == "Failure"
        assert body["status_code"] == AppStatusCode.LEASE_OVERLAP
        assert body["message"] == "This room is already leased for the requested period."
        assert body["data"]["lease_id"] == lease_a.json()["id"]

        lease_c = client.post("/api/leases/", json=self._payload(
            tenant, room, "2024-06-01", None))
        assert lease_c.status_code == 201
        assert lease_c.json()["end_date"] is None

        listing = client.get("/api/leases/", params={"room_id": str(room.id)})
        assert listing.json()["total"] == 2

    def test_moving_a_lease_onto_an_occupied_period_is_rejected(
            self, client, make_room, make_tenant):
        room = make_room(room_number="101")
        tenant = make_tenant()
        client.post("/api/leases/", json=self._payload(
            tenant, room, "2024-01-01", "2024-06-01"))
        later = client.post("/api/leases/", json=self._payload(
            tenant, room, "2024-06-01", "2024-09-01")).json()

        resp = client.put(f"/api/leases/{later['id']}", json={"start_date": "2024-03-01"})

        assert resp.status_code == 409
