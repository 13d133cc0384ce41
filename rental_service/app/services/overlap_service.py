from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from shared.core.exceptions import LeaseOverlapError, NotFoundError
from ..models.leasing_tenants.leases import Lease
from ..models.space_sites.rooms import Room

# open-ended leases run until this sentinel
FAR_FUTURE = date.max


def intervals_overlap(start_a: date, end_a: Optional[date],
                      start_b: date, end_b: Optional[date]) -> bool:
    """Half-open ``[start, end)`` intersection; a ``None`` end never closes."""
    end_a = end_a or FAR_FUTURE
    end_b = end_b or FAR_FUTURE
    return start_a < end_b and start_b < end_a


def lock_room(db: Session, room_id: UUID) -> Room:
    """Take a row lock on the room so concurrent lease writes on it serialize."""
    room = (
        db.query(Room)
        .filter(Room.id == room_id)
        .with_for_update()
        .first()
    )
    if not room:
        raise NotFoundError("Room not found", {"room_id": str(room_id)})
    return room


def find_overlap(
    db: Session,
    room_id: UUID,
    start_date: date,
    end_date: Optional[date],
    exclude_lease_id: Optional[UUID] = None,
) -> Optional[Lease]:
    q = db.query(Lease).filter(Lease.room_id == room_id)
    if exclude_lease_id is not None:
        q = q.filter(Lease.id != exclude_lease_id)

    for lease in q.order_by(Lease.start_date).all():
        if intervals_overlap(start_date, end_date, lease.start_date, lease.end_date):
            return lease
    return None


def has_overlap(
    db: Session,
    room_id: UUID,
    start_date: date,
    end_date: Optional[date],
    exclude_lease_id: Optional[UUID] = None,
) -> bool:
    return find_overlap(db, room_id, start_date, end_date, exclude_lease_id) is not None


def ensure_room_available(
    db: Session,
    room_id: UUID,
    start_date: date,
    end_date: Optional[date],
    exclude_lease_id: Optional[UUID] = None,
) -> Room:
    """
    Lock the room and reject the interval if another lease occupies it.

    Must run inside the transaction that writes the lease.
    """
    room = lock_room(db, room_id)
    clash = find_overlap(db, room_id, start_date,
                         end_date, exclude_lease_id)
    if clash is not None:
        raise LeaseOverlapError(
            "This room is already leased for the requested period.",
            {
                "lease_id": str(clash.id),
                "start_date": clash.start_date.isoformat(),
                "end_date": clash.end_date.isoformat() if clash.end_date else None,
            },
        )
    return room
