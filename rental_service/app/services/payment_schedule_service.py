from decimal import Decimal
from typing import List, Tuple

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from shared.utils.enums import PaymentStatus
from ..models.financials.payments import Payment
from ..models.leasing_tenants.leases import Lease
from ..schemas.leasing_tenants.leases_schemas import PaymentStub

# open-ended leases are extended by a rollover, never generated unbounded
OPEN_ENDED_MAX_PAYMENTS = 24


def generate_schedule(lease: Lease) -> List[PaymentStub]:
    """
    Monthly obligations for ``lease``, one per month from ``start_date``.

    Due dates keep the start day-of-month (clamped to shorter months) and
    run while they fall on or before ``end_date``.
    """
    rent = Decimal(lease.rent_value)
    charges = Decimal(lease.charges or 0)

    stubs = []
    month = 0
    while True:
        # offset from the start date so a clamped day never drifts
        due_date = lease.start_date + relativedelta(months=month)
        if lease.end_date is not None and due_date > lease.end_date:
            break
        if lease.end_date is None and len(stubs) >= OPEN_ENDED_MAX_PAYMENTS:
            break
        stubs.append(PaymentStub(
            due_date=due_date,
            rent_amount=rent,
            charges_amount=charges,
            amount=rent + charges,
        ))
        month += 1
    return stubs


def apply_schedule(db: Session, lease: Lease) -> List[Payment]:
    """Persist the months of the schedule the lease does not have yet."""
    existing = {
        due_date for (due_date,) in
        db.query(Payment.due_date).filter(Payment.lease_id == lease.id).all()
    }

    created = []
    for stub in generate_schedule(lease):
        if stub.due_date in existing:
            continue
        payment = Payment(
            lease_id=lease.id,
            due_date=stub.due_date,
            rent_amount=stub.rent_amount,
            charges_amount=stub.charges_amount,
            amount=stub.amount,
            status=PaymentStatus.pending.value,
        )
        db.add(payment)
        created.append(payment)

    db.flush()
    return created


def resync_schedule(db: Session, lease: Lease) -> Tuple[List[Payment], List[str]]:
    """
    Realign pending payments after the lease dates changed.

    Pending months that fall outside the new schedule are dropped and
    missing months appended. Paid payments are never touched. Returns the
    created payments and the storage paths of the invalidated receipts
    removed along with the dropped months.
    """
    expected = {stub.due_date for stub in generate_schedule(lease)}
    stale = (
        db.query(Payment)
        .filter(
            Payment.lease_id == lease.id,
            Payment.status == PaymentStatus.pending.value,
        )
        .all()
    )
    discarded = []
    for payment in stale:
        if payment.due_date not in expected:
            if payment.receipt is not None:
                discarded.append(payment.receipt.storage_path)
            db.delete(payment)
    db.flush()
    return apply_schedule(db, lease), discarded
