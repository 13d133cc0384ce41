from uuid import UUID
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from shared.core.auth import allow_staff, ensure_tenant_access, validate_current_token
from shared.core.database import get_db
from shared.helpers.json_response_helper import success_response
from shared.core.schemas import UserToken
from shared.utils.storage_client import BlobStore
from ...crud.leasing_tenants import documents_crud as crud
from ...dependencies import get_blob_store
from ...schemas.leasing_tenants.documents_schemas import DocumentOut, DocumentUrlOut

router = APIRouter(
    prefix="/api/documents",
    tags=["documents"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/", response_model=DocumentOut, status_code=201)
async def upload_document(
    tenant_id: UUID = Form(...),
    type: str = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_user: UserToken = Depends(validate_current_token),
):
    ensure_tenant_access(current_user, tenant_id)
    content = await file.read()
    return crud.upload_document(
        db, store, tenant_id, type, file.filename, content, file.content_type)


@router.get("/{doc_type}/{document_id}", response_model=DocumentUrlOut)
def get_document_url(
    doc_type: str,
    document_id: UUID,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_user: UserToken = Depends(validate_current_token),
):
    document = crud.get_document(db, document_id, doc_type)
    ensure_tenant_access(current_user, document.tenant_id)
    return crud.get_document_url(db, store, doc_type, document_id)


@router.delete("/{document_id}", dependencies=[Depends(allow_staff)])
def delete_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    crud.delete_document(db, store, document_id)
    return success_response(message="Document deleted successfully")
