from uuid import UUID
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from shared.core.auth import ensure_tenant_access, validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ...crud.financials import payments_crud
from ...dependencies import get_receipt_engine
from ...services.receipt_service import ReceiptEngine

router = APIRouter(
    prefix="/api/receipts",
    tags=["receipts"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/{payment_id}/download")
def download_receipt(
    payment_id: UUID,
    db: Session = Depends(get_db),
    engine: ReceiptEngine = Depends(get_receipt_engine),
    current_user: UserToken = Depends(validate_current_token),
):
    payment = payments_crud.get_payment_with_chain(db, payment_id)
    ensure_tenant_access(current_user, payment.lease.tenant_id)

    _, content, filename = engine.download(db, payment_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
