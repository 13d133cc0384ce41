from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from shared.core.database import scoped_transaction
from shared.core.exceptions import NotFoundError, ValidationError
from ...models.financials.payments import Payment
from ...models.financials.receipts import Receipt
from ...models.leasing_tenants.leases import Lease
from ...models.leasing_tenants.tenants import Tenant
from ...models.space_sites.rooms import Room
from ...schemas.leasing_tenants.leases_schemas import (
    LeaseCreate, LeaseListResponse, LeaseOut, LeasePaymentOut, LeaseRequest, LeaseUpdate
)
from ...services import overlap_service, payment_schedule_service


def validate_lease_terms(start_date: date, end_date: Optional[date],
                         rent_value: Decimal, charges: Decimal):
    if start_date is None:
        raise ValidationError("start_date is required")
    if end_date is not None and end_date <= start_date:
        raise ValidationError("end_date must be after start_date")
    if rent_value is None or rent_value < 0:
        raise ValidationError("rent_value must be zero or positive")
    if charges is None or charges < 0:
        raise ValidationError("charges must be zero or positive")


# ----------------------------------------------------
# Filters
# ----------------------------------------------------
def build_filters(params: LeaseRequest, today: date):
    filters = []

    if params.room_id:
        filters.append(Lease.room_id == params.room_id)
    if params.tenant_id:
        filters.append(Lease.tenant_id == params.tenant_id)

    status = (params.status or "all").lower()
    if status == "active":
        filters.append(Lease.start_date <= today)
        filters.append((Lease.end_date.is_(None)) | (Lease.end_date > today))
    elif status == "ended":
        filters.append(Lease.end_date <= today)
    elif status == "upcoming":
        filters.append(Lease.start_date > today)

    if params.search:
        like = f"%{params.search}%"
        filters.append(
            Tenant.first_name.ilike(like) | Tenant.last_name.ilike(like)
        )
    return filters


def _chain_query(db: Session):
    return (
        db.query(Lease)
        .options(
            joinedload(Lease.tenant),
            joinedload(Lease.room).joinedload(Room.property),
            joinedload(Lease.payments),
        )
    )


def lease_to_out(lease: Lease) -> LeaseOut:
    tenant = lease.tenant
    room = lease.room
    prop = room.property if room else None

    return LeaseOut.model_validate({
        "id": lease.id,
        "tenant_id": lease.tenant_id,
        "room_id": lease.room_id,
        "start_date": lease.start_date,
        "end_date": lease.end_date,
        "rent_value": lease.rent_value,
        "charges": lease.charges,
        "tenant_name": tenant.full_name if tenant else "Unknown",
        "tenant_email": tenant.email if tenant else None,
        "room_number": room.room_number if room else None,
        "property_id": prop.id if prop else None,
        "property_name": prop.name if prop else None,
        "property_address": prop.address if prop else None,
        "payments": [LeasePaymentOut.model_validate(p) for p in lease.payments],
    })


# ----------------------------------------------------
# Read
# ----------------------------------------------------
def get_list(db: Session, params: LeaseRequest, today: date = None) -> LeaseListResponse:
    today = today or date.today()
    q = (
        db.query(Lease)
        .join(Tenant, Tenant.id == Lease.tenant_id)
        .filter(*build_filters(params, today))
    )
    total = q.count()
    ids = [
        row.id for row in
        q.order_by(Lease.start_date.desc()).offset(params.skip).limit(params.limit).all()
    ]

    rows = _chain_query(db).filter(Lease.id.in_(ids)).all() if ids else []
    rows.sort(key=lambda lease: ids.index(lease.id))
    return {"leases": [lease_to_out(row) for row in rows], "total": total}


def get_by_id(db: Session, lease_id: UUID) -> Lease:
    lease = _chain_query(db).filter(Lease.id == lease_id).first()
    if not lease:
        raise NotFoundError("Lease not found", {"lease_id": str(lease_id)})
    return lease


def get_lease_out(db: Session, lease_id: UUID) -> LeaseOut:
    return lease_to_out(get_by_id(db, lease_id))


# ----------------------------------------------------
# Create: overlap check, lease row and schedule in one transaction
# ----------------------------------------------------
def create(db: Session, payload: LeaseCreate) -> LeaseOut:
    validate_lease_terms(payload.start_date, payload.end_date,
                         payload.rent_value, payload.charges)

    with scoped_transaction(db):
        tenant = db.query(Tenant).filter(Tenant.id == payload.tenant_id).first()
        if not tenant:
            raise NotFoundError("Tenant not found", {"tenant_id": str(payload.tenant_id)})

        overlap_service.ensure_room_available(
            db, payload.room_id, payload.start_date, payload.end_date)

        lease = Lease(**payload.model_dump())
        db.add(lease)
        db.flush()

        payment_schedule_service.apply_schedule(db, lease)
        lease_id = lease.id

    return get_lease_out(db, lease_id)


# ----------------------------------------------------
# Update
# ----------------------------------------------------
def update(db: Session, lease_id: UUID, payload: LeaseUpdate) -> Tuple[LeaseOut, List[str]]:
    """Apply the edit and return the lease with the storage paths of dropped receipts."""
    data = payload.model_dump(exclude_unset=True)
    discarded = []

    with scoped_transaction(db):
        lease = db.query(Lease).filter(Lease.id == lease_id).first()
        if not lease:
            raise NotFoundError("Lease not found", {"lease_id": str(lease_id)})

        start_date = data.get("start_date", lease.start_date)
        end_date = data.get("end_date", lease.end_date)
        room_id = data.get("room_id", lease.room_id)
        validate_lease_terms(
            start_date, end_date,
            data.get("rent_value", lease.rent_value),
            data.get("charges", lease.charges),
        )

        if "tenant_id" in data and data["tenant_id"] != lease.tenant_id:
            if not db.query(Tenant).filter(Tenant.id == data["tenant_id"]).first():
                raise NotFoundError("Tenant not found", {"tenant_id": str(data["tenant_id"])})

        dates_changed = (
            start_date != lease.start_date
            or end_date != lease.end_date
            or room_id != lease.room_id
        )
        if dates_changed:
            overlap_service.ensure_room_available(
                db, room_id, start_date, end_date, exclude_lease_id=lease.id)

        for k, v in data.items():
            setattr(lease, k, v)
        db.flush()

        if dates_changed:
            _, discarded = payment_schedule_service.resync_schedule(db, lease)

    return get_lease_out(db, lease_id), discarded


# ----------------------------------------------------
# Delete (cascades to payments and receipts)
# ----------------------------------------------------
def delete(db: Session, lease_id: UUID) -> List[str]:
    """Delete the lease and return the storage paths of its receipts."""
    with scoped_transaction(db):
        lease = db.query(Lease).filter(Lease.id == lease_id).first()
        if not lease:
            raise NotFoundError("Lease not found", {"lease_id": str(lease_id)})
        paths = receipt_paths(db, [lease.id])
        db.delete(lease)
    return paths


def receipt_paths(db: Session, lease_ids: List[UUID]) -> List[str]:
    if not lease_ids:
        return []
    rows = (
        db.query(Receipt.storage_path)
        .join(Payment, Payment.id == Receipt.payment_id)
        .filter(Payment.lease_id.in_(lease_ids))
        .all()
    )
    return [path for (path,) in rows]
