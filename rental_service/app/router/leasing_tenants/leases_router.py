from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_staff, validate_current_token
from shared.core.database import get_db
from shared.helpers.json_response_helper import success_response
from ...crud.leasing_tenants import leases_crud as crud
from ...dependencies import get_receipt_engine
from ...schemas.leasing_tenants.leases_schemas import (
    LeaseCreate, LeaseListResponse, LeaseOut, LeaseRequest, LeaseUpdate
)
from ...services.receipt_service import ReceiptEngine

router = APIRouter(
    prefix="/api/leases",
    tags=["leases"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/", response_model=LeaseListResponse)
def get_leases(params: LeaseRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_list(db, params)


@router.get("/{lease_id}", response_model=LeaseOut)
def get_lease(lease_id: UUID, db: Session = Depends(get_db)):
    return crud.get_lease_out(db, lease_id)


@router.post("/", response_model=LeaseOut, status_code=201,
             dependencies=[Depends(allow_staff)])
def create_lease(payload: LeaseCreate, db: Session = Depends(get_db)):
    return crud.create(db, payload)


@router.put("/{lease_id}", response_model=LeaseOut,
            dependencies=[Depends(allow_staff)])
def update_lease(
    lease_id: UUID,
    payload: LeaseUpdate,
    db: Session = Depends(get_db),
    engine: ReceiptEngine = Depends(get_receipt_engine),
):
    lease, discarded = crud.update(db, lease_id, payload)
    # receipts of dropped months go after the commit
    engine.discard_artifacts(discarded)
    return lease


@router.delete("/{lease_id}", dependencies=[Depends(allow_staff)])
def delete_lease(
    lease_id: UUID,
    db: Session = Depends(get_db),
    engine: ReceiptEngine = Depends(get_receipt_engine),
):
    # receipt blobs go after the rows are gone
    engine.discard_artifacts(crud.delete(db, lease_id))
    return success_response(message="Lease deleted successfully")
