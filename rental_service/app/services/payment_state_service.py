import logging
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from shared.core.database import scoped_transaction
from shared.core.exceptions import AlreadyPaidError
from shared.utils.clock import utcnow
from shared.utils.enums import PaymentStatus
from ..crud.financials import payments_crud
from ..models.financials.payments import Payment
from .receipt_service import ReceiptEngine

logger = logging.getLogger(__name__)


def mark_paid(db: Session, payment_id: UUID, engine: ReceiptEngine) -> Tuple[Payment, Optional[str]]:
    """
    pending -> paid, then build the receipt.

    The status change is committed before any storage call. A receipt
    failure is logged and returned as the second element; the payment
    stays paid.
    """
    with scoped_transaction(db):
        payment = payments_crud.lock_payment(db, payment_id)
        if payment.status == PaymentStatus.paid.value:
            raise AlreadyPaidError(
                "Payment is already marked as paid", {"payment_id": str(payment_id)})
        payment.status = PaymentStatus.paid.value
        payment.payment_date = utcnow()

    logger.info(f"Payment {payment_id} marked as paid")

    receipt_error = None
    try:
        engine.generate(db, payment_id)
    except Exception as e:
        logger.exception(f"Receipt generation failed for payment {payment_id}")
        receipt_error = str(e)

    return payments_crud.get_payment_with_chain(db, payment_id), receipt_error


def mark_unpaid(db: Session, payment_id: UUID) -> Payment:
    """
    paid -> pending.

    The receipt is invalidated, not destroyed: its blob is removed later
    by the purge job.
    """
    with scoped_transaction(db):
        payment = payments_crud.lock_payment(db, payment_id)
        receipt = payment.receipt
        if receipt is not None and not receipt.is_deleted:
            receipt.is_deleted = True
        payment.status = PaymentStatus.pending.value
        payment.payment_date = None

    logger.info(f"Payment {payment_id} marked as pending")
    return payments_crud.get_payment_with_chain(db, payment_id)
