import logging
import os
import uuid
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.database import scoped_transaction
from shared.core.exceptions import ExternalStorageError, NotFoundError, ValidationError
from shared.utils.enums import DocumentType
from shared.utils.storage_client import BlobStore
from ...models.leasing_tenants.documents import Document
from ...models.leasing_tenants.tenants import Tenant
from ...schemas.leasing_tenants.documents_schemas import DocumentOut, DocumentUrlOut

logger = logging.getLogger(__name__)

MAX_DOCUMENT_SIZE = 10 * 1024 * 1024

BUCKETS = {
    DocumentType.contracts.value: settings.CONTRACTS_BUCKET,
    DocumentType.documents.value: settings.DOCUMENTS_BUCKET,
    DocumentType.tickets.value: settings.TICKETS_BUCKET,
}


def bucket_for(doc_type: str) -> str:
    if doc_type not in BUCKETS:
        raise ValidationError(
            f"Unknown document type '{doc_type}'", {"allowed": list(BUCKETS)})
    return BUCKETS[doc_type]


def document_path(tenant_id: UUID, filename: str) -> str:
    safe_name = os.path.basename(filename or "").replace(" ", "_") or "file"
    return f"tenant_{tenant_id}/{uuid.uuid4().hex}_{safe_name}"


def upload_document(
    db: Session,
    store: BlobStore,
    tenant_id: UUID,
    doc_type: str,
    filename: str,
    content: bytes,
    content_type: str,
) -> Document:
    bucket = bucket_for(doc_type)
    if not content:
        raise ValidationError("No file provided")
    if len(content) > MAX_DOCUMENT_SIZE:
        raise ValidationError("File exceeds the 10 MB limit")
    if not db.query(Tenant).filter(Tenant.id == tenant_id).first():
        raise NotFoundError("Tenant not found", {"tenant_id": str(tenant_id)})

    stored = store.upload(content, bucket, document_path(tenant_id, filename),
                          content_type or "application/octet-stream")

    try:
        with scoped_transaction(db):
            document = Document(
                tenant_id=tenant_id,
                type=doc_type,
                name=filename,
                storage_path=stored["path"],
                storage_url=stored.get("url"),
                mime_type=content_type or "application/octet-stream",
                size=len(content),
            )
            db.add(document)
    except Exception:
        store.delete_many(bucket, [stored["path"]])
        raise

    db.refresh(document)
    logger.info(f"Document {document.id} uploaded for tenant {tenant_id}")
    return document


def get_document(db: Session, document_id: UUID, doc_type: str = None) -> Document:
    q = db.query(Document).filter(Document.id == document_id)
    if doc_type is not None:
        q = q.filter(Document.type == doc_type)
    document = q.first()
    if not document:
        raise NotFoundError("Document not found", {"document_id": str(document_id)})
    return document


def get_document_url(db: Session, store: BlobStore, doc_type: str,
                     document_id: UUID) -> DocumentUrlOut:
    bucket = bucket_for(doc_type)
    document = get_document(db, document_id, doc_type)
    url = store.get_signed_url(bucket, document.storage_path, settings.SIGNED_URL_TTL)
    return DocumentUrlOut(id=document.id, name=document.name, url=url)


def list_tenant_documents(db: Session, tenant_id: UUID) -> List[DocumentOut]:
    if not db.query(Tenant).filter(Tenant.id == tenant_id).first():
        raise NotFoundError("Tenant not found", {"tenant_id": str(tenant_id)})
    documents = (
        db.query(Document)
        .filter(Document.tenant_id == tenant_id)
        .order_by(Document.created_at.desc())
        .all()
    )
    return [DocumentOut.model_validate(d) for d in documents]


def delete_document(db: Session, store: BlobStore, document_id: UUID) -> None:
    with scoped_transaction(db):
        document = get_document(db, document_id)
        bucket = bucket_for(document.type)
        path = document.storage_path
        db.delete(document)

    try:
        store.delete(bucket, path)
    except ExternalStorageError as e:
        logger.error(f"Document {document_id} removed but blob {path} left behind: {e}")


def tenant_document_paths(db: Session, tenant_id: UUID) -> List[tuple]:
    rows = (
        db.query(Document.type, Document.storage_path)
        .filter(Document.tenant_id == tenant_id)
        .all()
    )
    return [(BUCKETS.get(t, settings.DOCUMENTS_BUCKET), path) for t, path in rows]
