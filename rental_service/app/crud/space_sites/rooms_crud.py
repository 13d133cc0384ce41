from typing import Dict, List
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from shared.core.database import scoped_transaction
from shared.core.exceptions import NotFoundError, ValidationError
from ...models.leasing_tenants.leases import Lease
from ...models.space_sites.properties import Property
from ...models.space_sites.rooms import Room
from ...schemas.space_sites.rooms_schemas import (
    RoomCreate, RoomListResponse, RoomOut, RoomRequest, RoomUpdate
)
from ..leasing_tenants.leases_crud import receipt_paths


def validate_room_fields(data: Dict):
    if "room_number" in data and not (data["room_number"] or "").strip():
        raise ValidationError("room_number is required")
    if "surface" in data and (data["surface"] is None or data["surface"] <= 0):
        raise ValidationError("surface must be positive")


def room_to_out(room: Room) -> RoomOut:
    return RoomOut.model_validate({
        "id": room.id,
        "property_id": room.property_id,
        "room_number": room.room_number,
        "surface": room.surface,
        "tv": room.tv,
        "shower": room.shower,
        "property_name": room.property.name if room.property else None,
    })


def _ensure_property(db: Session, property_id: UUID):
    if not db.query(Property).filter(Property.id == property_id).first():
        raise NotFoundError("Property not found", {"property_id": str(property_id)})


def get_list(db: Session, params: RoomRequest) -> RoomListResponse:
    q = db.query(Room).options(joinedload(Room.property))
    if params.property_id:
        q = q.filter(Room.property_id == params.property_id)
    if params.search:
        q = q.filter(Room.room_number.ilike(f"%{params.search}%"))

    total = q.count()
    rows = q.order_by(Room.room_number.asc()).offset(params.skip).limit(params.limit).all()
    return {"rooms": [room_to_out(r) for r in rows], "total": total}


def get_room(db: Session, room_id: UUID) -> Room:
    room = (
        db.query(Room)
        .options(joinedload(Room.property))
        .filter(Room.id == room_id)
        .first()
    )
    if not room:
        raise NotFoundError("Room not found", {"room_id": str(room_id)})
    return room


def create(db: Session, payload: RoomCreate) -> RoomOut:
    data = payload.model_dump()
    validate_room_fields(data)

    with scoped_transaction(db):
        _ensure_property(db, data["property_id"])
        room = Room(**data)
        db.add(room)
        db.flush()
        room_id = room.id

    return room_to_out(get_room(db, room_id))


def update(db: Session, room_id: UUID, payload: RoomUpdate) -> RoomOut:
    data = payload.model_dump(exclude_unset=True)
    validate_room_fields(data)

    with scoped_transaction(db):
        room = get_room(db, room_id)
        if "property_id" in data and data["property_id"] != room.property_id:
            _ensure_property(db, data["property_id"])
        for k, v in data.items():
            setattr(room, k, v)

    return room_to_out(get_room(db, room_id))


def delete(db: Session, room_id: UUID) -> List[str]:
    with scoped_transaction(db):
        room = get_room(db, room_id)
        lease_ids = [
            lease_id for (lease_id,) in
            db.query(Lease.id).filter(Lease.room_id == room.id).all()
        ]
        paths = receipt_paths(db, lease_ids)
        db.delete(room)
    return paths
