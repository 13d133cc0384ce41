from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_staff, ensure_tenant_access, validate_current_token
from shared.core.database import get_db
from shared.helpers.json_response_helper import success_response
from shared.core.schemas import UserToken
from shared.utils.storage_client import BlobStore
from ...crud.financials import payments_crud
from ...crud.leasing_tenants import documents_crud
from ...crud.leasing_tenants import tenants_crud as crud
from ...dependencies import get_blob_store, get_receipt_engine
from ...schemas.financials.receipts_schemas import TenantReceiptOut
from ...schemas.leasing_tenants.documents_schemas import DocumentOut
from ...schemas.leasing_tenants.tenants_schemas import (
    TenantCreate, TenantListResponse, TenantOut, TenantRequest, TenantUpdate
)
from ...services.receipt_service import ReceiptEngine

router = APIRouter(
    prefix="/api/tenants",
    tags=["tenants"],
    dependencies=[Depends(validate_current_token)],
)


@router.get("/", response_model=TenantListResponse,
            dependencies=[Depends(allow_staff)])
def tenants_all(params: TenantRequest = Depends(), db: Session = Depends(get_db)):
    return crud.get_all_tenants(db, params)


@router.get("/{tenant_id}", response_model=TenantOut)
def get_tenant(
    tenant_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    ensure_tenant_access(current_user, tenant_id)
    return crud.get_tenant(db, tenant_id)


@router.post("/", response_model=TenantOut, status_code=201,
             dependencies=[Depends(allow_staff)])
def create_tenant(payload: TenantCreate, db: Session = Depends(get_db)):
    return crud.create_tenant(db, payload)


@router.put("/{tenant_id}", response_model=TenantOut,
            dependencies=[Depends(allow_staff)])
def update_tenant(tenant_id: UUID, payload: TenantUpdate, db: Session = Depends(get_db)):
    return crud.update_tenant(db, tenant_id, payload)


@router.delete("/{tenant_id}", dependencies=[Depends(allow_staff)])
def delete_tenant(
    tenant_id: UUID,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    engine: ReceiptEngine = Depends(get_receipt_engine),
):
    documents = documents_crud.tenant_document_paths(db, tenant_id)
    engine.discard_artifacts(crud.delete_tenant(db, tenant_id))
    for bucket, path in documents:
        store.delete_many(bucket, [path])
    return success_response(message="Tenant deleted successfully")


@router.get("/{tenant_id}/receipts", response_model=List[TenantReceiptOut])
def tenant_receipts(
    tenant_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    ensure_tenant_access(current_user, tenant_id)
    return payments_crud.get_tenant_receipts(db, tenant_id)


@router.get("/{tenant_id}/documents", response_model=List[DocumentOut])
def tenant_documents(
    tenant_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
):
    ensure_tenant_access(current_user, tenant_id)
    return documents_crud.list_tenant_documents(db, tenant_id)
