from typing import Dict, List
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.database import scoped_transaction
from shared.core.exceptions import NotFoundError, ValidationError
from ...models.leasing_tenants.leases import Lease
from ...models.space_sites.properties import Property
from ...models.space_sites.rooms import Room
from ...schemas.space_sites.properties_schemas import (
    PropertyCreate, PropertyListResponse, PropertyOut, PropertyRequest, PropertyUpdate
)
from ..leasing_tenants.leases_crud import receipt_paths


def validate_property_fields(data: Dict):
    for field in ("name", "address", "postal_code", "city"):
        if field in data and not (data[field] or "").strip():
            raise ValidationError(f"{field} is required")
    if "surface" in data and (data["surface"] is None or data["surface"] <= 0):
        raise ValidationError("surface must be positive")


def property_to_out(db: Session, prop: Property) -> PropertyOut:
    room_count = db.query(func.count(Room.id)).filter(
        Room.property_id == prop.id).scalar()
    return PropertyOut.model_validate({
        "id": prop.id,
        "name": prop.name,
        "address": prop.address,
        "postal_code": prop.postal_code,
        "city": prop.city,
        "surface": prop.surface,
        "room_count": room_count or 0,
    })


def get_list(db: Session, params: PropertyRequest) -> PropertyListResponse:
    q = db.query(Property)
    if params.city:
        q = q.filter(Property.city.ilike(params.city))
    if params.search:
        like = f"%{params.search}%"
        q = q.filter(or_(Property.name.ilike(like), Property.address.ilike(like)))

    total = q.count()
    rows = q.order_by(Property.name.asc()).offset(params.skip).limit(params.limit).all()
    return {"properties": [property_to_out(db, p) for p in rows], "total": total}


def get_property(db: Session, property_id: UUID) -> Property:
    prop = db.query(Property).filter(Property.id == property_id).first()
    if not prop:
        raise NotFoundError("Property not found", {"property_id": str(property_id)})
    return prop


def create(db: Session, payload: PropertyCreate) -> PropertyOut:
    data = payload.model_dump()
    validate_property_fields(data)

    with scoped_transaction(db):
        prop = Property(**data)
        db.add(prop)

    return property_to_out(db, prop)


def update(db: Session, property_id: UUID, payload: PropertyUpdate) -> PropertyOut:
    # descriptive fields only, rooms and leases are untouched
    data = payload.model_dump(exclude_unset=True)
    validate_property_fields(data)

    with scoped_transaction(db):
        prop = get_property(db, property_id)
        for k, v in data.items():
            setattr(prop, k, v)

    return property_to_out(db, prop)


def delete(db: Session, property_id: UUID) -> List[str]:
    """Cascade through rooms, leases, payments and receipts."""
    with scoped_transaction(db):
        prop = get_property(db, property_id)
        lease_ids = [
            lease_id for (lease_id,) in
            db.query(Lease.id)
            .join(Room, Room.id == Lease.room_id)
            .filter(Room.property_id == prop.id)
            .all()
        ]
        paths = receipt_paths(db, lease_ids)
        db.delete(prop)
    return paths
