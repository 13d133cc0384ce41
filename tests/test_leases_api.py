"""
Tests for lease, property and room endpoints.

Validates:
- lease creation returns the chain and its payment schedule
- lease term validation and missing references
- cascading deletes down to receipts and stored artifacts
- shortening a lease drops the stored receipts of removed months
"""

import uuid
from types import SimpleNamespace

from rental_service.app.models.financials.payments import Payment
from rental_service.app.models.financials.receipts import Receipt
from rental_service.app.models.leasing_tenants.leases import Lease
from rental_service.app.models.space_sites.rooms import Room


def _lease_payload(tenant, room, start="2024-01-15", end="2024-04-15"):
    return {
        "tenant_id": str(tenant.id),
        "room_id": str(room.id),
        "start_date": start,
        "end_date": end,
        "rent_value": "500.00",
        "charges": "50.00",
    }


# =============================================================================
# Leases
# =============================================================================


class TestCreateLease:

    def test_created_with_schedule_and_chain(self, client, make_room, make_tenant):
        room, tenant = make_room(), make_tenant()

        resp = client.post("/api/leases/", json=_lease_payload(tenant, room))

        assert resp.status_code == 201
        body = resp.json()
        assert body["tenant_name"] == "Alice Martin"
        assert body["room_number"] == "101"
        assert body["property_name"] == "Maison Bleue"
        assert [p["due_date"] for p in body["payments"]] == [
            "2024-01-15", "2024-02-15", "2024-03-15", "2024-04-15"]
        assert all(p["status"] == "pending" for p in body["payments"])

    def test_end_before_start(self, client, make_room, make_tenant):
        resp = client.post("/api/leases/", json=_lease_payload(
            make_tenant(), make_room(), start="2024-05-01", end="2024-04-01"))

        assert resp.status_code == 400
        assert resp.json()["message"] == "end_date must be after start_date"

    def test_unknown_room(self, client, make_tenant):
        payload = _lease_payload(make_tenant(), SimpleNamespace(id=uuid.uuid4()))

        resp = client.post("/api/leases/", json=payload)

        assert resp.status_code == 404
        assert resp.json()["message"] == "Room not found"

    def test_unknown_tenant(self, client, make_room):
        payload = _lease_payload(SimpleNamespace(id=uuid.uuid4()), make_room())

        resp = client.post("/api/leases/", json=payload)

        assert resp.status_code == 404
        assert resp.json()["message"] == "Tenant not found"

    def test_missing_fields(self, client):
        resp = client.post("/api/leases/", json={"rent_value": "500"})

        assert resp.status_code == 422


class TestReadAndUpdateLease:

    def test_get_and_filter(self, client, make_lease):
        lease = make_lease()

        one = client.get(f"/api/leases/{lease.id}")
        assert one.status_code == 200
        assert len(one.json()["payments"]) == 4

        ended = client.get("/api/leases/", params={"status": "ended"})
        assert ended.json()["total"] == 1
        upcoming = client.get("/api/leases/", params={"status": "upcoming"})
        assert upcoming.json()["total"] == 0

    def test_get_unknown_lease(self, client):
        resp = client.get(f"/api/leases/{uuid.uuid4()}")

        assert resp.status_code == 404

    def test_extending_end_date_appends_payments(self, client, make_lease):
        lease = make_lease()

        resp = client.put(f"/api/leases/{lease.id}", json={"end_date": "2024-06-15"})

        assert resp.status_code == 200
        assert len(resp.json()["payments"]) == 6

    def test_shortening_removes_invalidated_receipt_blobs(
            self, client, db, make_lease, blob_store):
        lease = make_lease()
        april = sorted(lease.payments, key=lambda p: p.due_date)[-1]
        client.put(f"/api/payments/{april.id}/mark-paid")
        client.put(f"/api/payments/{april.id}/mark-unpaid")
        assert len(blob_store.objects) == 1

        resp = client.put(f"/api/leases/{lease.id}", json={"end_date": "2024-03-15"})

        assert resp.status_code == 200
        assert [p["due_date"] for p in resp.json()["payments"]] == [
            "2024-01-15", "2024-02-15", "2024-03-15"]
        db.expire_all()
        assert db.query(Receipt).count() == 0
        assert blob_store.objects == {}


class TestDeleteCascades:

    def test_lease_delete_removes_payments_receipts_and_blobs(
            self, client, db, make_lease, blob_store):
        lease = make_lease()
        lease_id = lease.id
        payment = sorted(lease.payments, key=lambda p: p.due_date)[0]
        client.put(f"/api/payments/{payment.id}/mark-paid")
        assert len(blob_store.objects) == 1

        resp = client.delete(f"/api/leases/{lease_id}")

        assert resp.status_code == 200
        db.expire_all()
        assert db.query(Lease).filter(Lease.id == lease_id).count() == 0
        assert db.query(Payment).filter(Payment.lease_id == lease_id).count() == 0
        assert db.query(Receipt).count() == 0
        assert blob_store.objects == {}

    def test_property_delete_cascades_to_receipts(
            self, client, db, make_lease, make_room, make_property):
        prop = make_property()
        room_a = make_room(room_number="101", prop=prop)
        room_b = make_room(room_number="102", prop=prop)
        lease = make_lease(room=room_a)
        make_lease(room=room_b)
        payment = sorted(lease.payments, key=lambda p: p.due_date)[0]
        client.put(f"/api/payments/{payment.id}/mark-paid")

        resp = client.delete(f"/api/properties/{prop.id}")

        assert resp.status_code == 200
        db.expire_all()
        assert db.query(Room).count() == 0
        assert db.query(Lease).count() == 0
        assert db.query(Payment).count() == 0
        assert db.query(Receipt).count() == 0

    def test_blob_cleanup_failure_does_not_fail_delete(
            self, client, db, make_lease, blob_store):
        lease = make_lease()
        payment = sorted(lease.payments, key=lambda p: p.due_date)[0]
        client.put(f"/api/payments/{payment.id}/mark-paid")
        blob_store.objects.clear()

        resp = client.delete(f"/api/leases/{lease.id}")

        assert resp.status_code == 200


# =============================================================================
# Properties and rooms
# =============================================================================


class TestPropertiesAndRooms:

    def test_property_and_room_lifecycle(self, client):
        prop = client.post("/api/properties/", json={
            "name": "Les Tilleuls", "address": "3 avenue Foch",
            "postal_code": "75016", "city": "Paris", "surface": 210,
        })
        assert prop.status_code == 201
        property_id = prop.json()["id"]

        room = client.post("/api/rooms/", json={
            "property_id": property_id, "room_number": "A1", "surface": 12, "tv": True,
        })
        assert room.status_code == 201
        assert room.json()["property_name"] == "Les Tilleuls"

        listing = client.get("/api/properties/", params={"city": "Paris"})
        assert listing.json()["total"] == 1
        assert listing.json()["properties"][0]["room_count"] == 1

        renamed = client.put(f"/api/properties/{property_id}", json={"name": "Tilleuls"})
        assert renamed.json()["name"] == "Tilleuls"

    def test_property_requires_positive_surface(self, client):
        resp = client.post("/api/properties/", json={
            "name": "X", "address": "Y", "postal_code": "1", "city": "Z", "surface": 0,
        })

        assert resp.status_code == 400

    def test_room_requires_existing_property(self, client):
        resp = client.post("/api/rooms/", json={
            "property_id": str(uuid.uuid4()), "room_number": "A1", "surface": 12,
        })

        assert resp.status_code == 404
