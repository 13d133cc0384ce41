"""
Pytest fixtures for the rental service test suite.

Provides:
- In-memory SQLite database, tables rebuilt for every test
- In-memory blob store standing in for Supabase storage
- FastAPI TestClient with authentication overridden
- Builders for properties, rooms, tenants and leases
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("HASH_SECRET", "test-hash-secret")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date
from decimal import Decimal
from typing import Dict, Tuple

import pytest
from fastapi.testclient import TestClient

from shared.core.auth import validate_current_token
from shared.core.database import Base, SessionLocal, engine
from shared.core.exceptions import ExternalStorageError, SigningError
from shared.core.schemas import UserToken
from shared.utils.pdf_signer import ReceiptSigner
from shared.utils.storage_client import BlobStore
from rental_service.app import models  # noqa: F401
from rental_service.app.dependencies import get_blob_store, get_receipt_signer
from rental_service.app.main import app
from rental_service.app.models.leasing_tenants.leases import Lease
from rental_service.app.models.leasing_tenants.tenants import Tenant
from rental_service.app.models.space_sites.properties import Property
from rental_service.app.models.space_sites.rooms import Room
from rental_service.app.services import payment_schedule_service
from rental_service.app.services.receipt_service import ReceiptEngine


# =============================================================================
# Fakes
# =============================================================================


class InMemoryBlobStore(BlobStore):
    """Dict-backed storage; ``fail_uploads`` simulates an outage."""

    def __init__(self):
        self.objects: Dict[Tuple[str, str], bytes] = {}
        self.fail_uploads = False

    def upload(self, content, bucket, path, content_type="application/pdf"):
        if self.fail_uploads:
            raise ExternalStorageError(f"Upload to {bucket}/{path} failed: offline")
        self.objects[(bucket, path)] = content
        return {"path": path, "url": self.get_signed_url(bucket, path, 60)}

    def download(self, bucket, path):
        try:
            return self.objects[(bucket, path)]
        except KeyError:
            raise ExternalStorageError(f"Object not found: {bucket}/{path}")

    def delete(self, bucket, path):
        if (bucket, path) not in self.objects:
            raise ExternalStorageError(f"Object not found: {bucket}/{path}")
        del self.objects[(bucket, path)]
        return True

    def get_signed_url(self, bucket, path, ttl):
        return f"memory://{bucket}/{path}?ttl={ttl}"


class StampSigner(ReceiptSigner):
    def sign(self, content):
        return content + b"\n%signed"


class BrokenSigner(ReceiptSigner):
    def sign(self, content):
        raise SigningError("certificate expired")


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(autouse=True)
def _tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# Storage and receipt engine
# =============================================================================


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def receipt_engine(blob_store):
    return ReceiptEngine(blob_store)


@pytest.fixture
def stamp_signer():
    return StampSigner()


@pytest.fixture
def broken_signer():
    return BrokenSigner()


# =============================================================================
# API client
# =============================================================================


@pytest.fixture
def current_user():
    return UserToken(user_id="owner-1", role="owner")


@pytest.fixture
def client(blob_store, current_user):
    app.dependency_overrides[validate_current_token] = lambda: current_user
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_receipt_signer] = lambda: None
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# Builders
# =============================================================================


@pytest.fixture
def make_property(db):
    def _make(name="Maison Bleue", city="Lyon", surface=120.0) -> Property:
        prop = Property(name=name, address="12 rue des Lilas",
                        postal_code="69001", city=city, surface=surface)
        db.add(prop)
        db.commit()
        return prop
    return _make


@pytest.fixture
def make_room(db, make_property):
    def _make(room_number="101", prop: Property = None) -> Room:
        prop = prop or make_property()
        room = Room(property_id=prop.id, room_number=room_number, surface=14.5)
        db.add(room)
        db.commit()
        return room
    return _make


@pytest.fixture
def make_tenant(db):
    counter = {"n": 0}

    def _make(first_name="Alice", last_name="Martin") -> Tenant:
        counter["n"] += 1
        tenant = Tenant(
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date(1995, 3, 2),
            email=f"tenant{counter['n']}@example.com",
            phone="0612345678",
        )
        db.add(tenant)
        db.commit()
        return tenant
    return _make


@pytest.fixture
def make_lease(db, make_room, make_tenant):
    def _make(start=date(2024, 1, 15), end=date(2024, 4, 15),
              rent=Decimal("500.00"), charges=Decimal("50.00"),
              room: Room = None, tenant: Tenant = None) -> Lease:
        room = room or make_room()
        tenant = tenant or make_tenant()
        lease = Lease(tenant_id=tenant.id, room_id=room.id, start_date=start,
                      end_date=end, rent_value=rent, charges=charges)
        db.add(lease)
        db.flush()
        payment_schedule_service.apply_schedule(db, lease)
        db.commit()
        return lease
    return _make
