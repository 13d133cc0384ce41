from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_staff, validate_current_token
from shared.core.database import get_db
from shared.helpers.json_response_helper import success_response
from ...crud.space_sites import rooms_crud as crud
from ...dependencies import get_receipt_engine
from ...schemas.space_sites.rooms_schemas import (
    RoomCreate, RoomListResponse, RoomOut, RoomRequest, RoomUpdate
)
from ...services.receipt_service import ReceiptEngine

router = APIRouter(
    prefix="/api/rooms",
    tags=["rooms"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/", response_model=RoomListResponse)
def get_rooms(params: RoomRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_list(db, params)


@router.get("/{room_id}", response_model=RoomOut)
def get_room(room_id: UUID, db: Session = Depends(get_db)):
    return crud.room_to_out(crud.get_room(db, room_id))


@router.post("/", response_model=RoomOut, status_code=201,
             dependencies=[Depends(allow_staff)])
def create_room(payload: RoomCreate, db: Session = Depends(get_db)):
    return crud.create(db, payload)


@router.put("/{room_id}", response_model=RoomOut,
            dependencies=[Depends(allow_staff)])
def update_room(room_id: UUID, payload: RoomUpdate, db: Session = Depends(get_db)):
    return crud.update(db, room_id, payload)


@router.delete("/{room_id}", dependencies=[Depends(allow_staff)])
def delete_room(
    room_id: UUID,
    db: Session = Depends(get_db),
    engine: ReceiptEngine = Depends(get_receipt_engine),
):
    engine.discard_artifacts(crud.delete(db, room_id))
    return success_response(message="Room deleted successfully")
