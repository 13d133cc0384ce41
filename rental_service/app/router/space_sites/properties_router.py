from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_staff, validate_current_token
from shared.core.database import get_db
from shared.helpers.json_response_helper import success_response
from ...crud.space_sites import properties_crud as crud
from ...dependencies import get_receipt_engine
from ...schemas.space_sites.properties_schemas import (
    PropertyCreate, PropertyListResponse, PropertyOut, PropertyRequest, PropertyUpdate
)
from ...services.receipt_service import ReceiptEngine

router = APIRouter(
    prefix="/api/properties",
    tags=["properties"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/", response_model=PropertyListResponse)
def get_properties(
    params: PropertyRequest = Depends(),
    db: Session = Depends(get_db),
):
    return crud.get_list(db, params)


@router.get("/{property_id}", response_model=PropertyOut)
def get_property(property_id: UUID, db: Session = Depends(get_db)):
    return crud.property_to_out(db, crud.get_property(db, property_id))


@router.post("/", response_model=PropertyOut, status_code=201,
             dependencies=[Depends(allow_staff)])
def create_property(payload: PropertyCreate, db: Session = Depends(get_db)):
    return crud.create(db, payload)


@router.put("/{property_id}", response_model=PropertyOut,
            dependencies=[Depends(allow_staff)])
def update_property(
    property_id: UUID,
    payload: PropertyUpdate,
    db: Session = Depends(get_db),
):
    return crud.update(db, property_id, payload)


@router.delete("/{property_id}", dependencies=[Depends(allow_staff)])
def delete_property(
    property_id: UUID,
    db: Session = Depends(get_db),
    engine: ReceiptEngine = Depends(get_receipt_engine),
):
    paths = crud.delete(db, property_id)
    engine.discard_artifacts(paths)
    return success_response(message="Property deleted successfully")
