import hmac
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from shared.core.config import settings
from shared.core.exceptions import NotFoundError
from shared.utils.clock import utcnow
from ..models.financials.payments import Payment
from ..models.financials.receipts import Receipt
from ..models.leasing_tenants.leases import Lease
from ..models.space_sites.rooms import Room
from ..schemas.financials.receipts_schemas import DocumentInfo, VerificationData
from .receipt_service import compute_verification_hash

DOCUMENT_TYPE = "Rent receipt"


def verify(
    db: Session,
    verification_hash: str,
    now: Optional[datetime] = None,
    secret: str = settings.HASH_SECRET,
) -> VerificationData:
    receipt = (
        db.query(Receipt)
        .options(
            joinedload(Receipt.payment)
            .joinedload(Payment.lease)
            .joinedload(Lease.tenant),
            joinedload(Receipt.payment)
            .joinedload(Payment.lease)
            .joinedload(Lease.room)
            .joinedload(Room.property),
        )
        .filter(
            Receipt.verification_hash == verification_hash,
            Receipt.is_deleted == False,
        )
        .first()
    )
    if not receipt:
        raise NotFoundError("Document not found")

    now = now or utcnow()
    payment = receipt.payment
    lease = payment.lease if payment else None
    tenant = lease.tenant if lease else None
    prop = lease.room.property if lease and lease.room else None

    chain_complete = tenant is not None and prop is not None and payment.payment_date is not None
    is_valid = chain_complete and receipt.generated_at <= now
    if is_valid:
        expected = compute_verification_hash(
            payment.id, lease.id, payment.payment_date, secret)
        is_valid = hmac.compare_digest(expected, verification_hash)

    return VerificationData(
        is_valid=is_valid,
        document_info=DocumentInfo(
            type=DOCUMENT_TYPE,
            date=receipt.generated_at,
            tenant=tenant.full_name if tenant else None,
            property=prop.name if prop else None,
            amount=payment.amount,
        ),
    )
