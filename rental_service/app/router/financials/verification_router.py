from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.database import get_db
from ...schemas.financials.receipts_schemas import VerificationResponse
from ...services import verification_service

# public: scanned from the QR code printed on receipts
router = APIRouter(prefix="/api/verify", tags=["verification"])


@router.get("/{verification_hash}", response_model=VerificationResponse,
            response_model_by_alias=True)
def verify_receipt(verification_hash: str, db: Session = Depends(get_db)):
    return VerificationResponse(data=verification_service.verify(db, verification_hash))
