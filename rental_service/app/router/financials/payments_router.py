from uuid import UUID
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from shared.core.auth import allow_staff, validate_current_token
from shared.core.database import get_db
from ...crud.financials import payments_crud as crud
from ...dependencies import get_receipt_engine
from ...schemas.financials.payments_schemas import (
    PaymentOut, PaymentPeriodResponse, PaymentTransitionOut
)
from ...services import payment_state_service
from ...services.receipt_service import ReceiptEngine

router = APIRouter(
    prefix="/api/payments",
    tags=["payments"],
    dependencies=[Depends(validate_current_token), Depends(allow_staff)]
)


@router.put("/{payment_id}/mark-paid", response_model=PaymentTransitionOut)
def mark_paid(
    payment_id: UUID,
    db: Session = Depends(get_db),
    engine: ReceiptEngine = Depends(get_receipt_engine),
):
    payment, receipt_error = payment_state_service.mark_paid(db, payment_id, engine)
    return PaymentTransitionOut(
        success=True,
        payment=crud.payment_to_out(payment),
        receipt_error=receipt_error,
    )


@router.put("/{payment_id}/mark-unpaid", response_model=PaymentOut)
def mark_unpaid(payment_id: UUID, db: Session = Depends(get_db)):
    return crud.payment_to_out(payment_state_service.mark_unpaid(db, payment_id))


@router.get("/{month}/{year}", response_model=PaymentPeriodResponse)
def payments_for_period(
    month: int = Path(..., ge=1, le=12),
    year: int = Path(..., ge=1900, le=9999),
    db: Session = Depends(get_db),
):
    return crud.get_period(db, month, year)
