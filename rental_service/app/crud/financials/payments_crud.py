import calendar
from datetime import date
from decimal import Decimal
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from shared.core.exceptions import NotFoundError
from shared.utils.enums import PaymentStatus
from shared.utils.receipt_pdf import period_label
from ...models.financials.payments import Payment
from ...models.leasing_tenants.leases import Lease
from ...models.leasing_tenants.tenants import Tenant
from ...models.space_sites.rooms import Room
from ...schemas.financials.payments_schemas import (
    PaymentOut, PaymentPeriodResponse, PaymentStatistics
)
from ...schemas.financials.receipts_schemas import RentPeriod, TenantReceiptOut


def chain_options():
    """Eager-load Payment -> Lease -> Tenant / Room -> Property, plus the receipt."""
    return (
        joinedload(Payment.lease).joinedload(Lease.tenant),
        joinedload(Payment.lease).joinedload(Lease.room).joinedload(Room.property),
        joinedload(Payment.receipt),
    )


def get_payment_with_chain(db: Session, payment_id: UUID) -> Payment:
    payment = (
        db.query(Payment)
        .options(*chain_options())
        .filter(Payment.id == payment_id)
        .first()
    )
    if not payment:
        raise NotFoundError("Payment not found", {"payment_id": str(payment_id)})
    return payment


def lock_payment(db: Session, payment_id: UUID) -> Payment:
    """Row lock on the payment; state transitions and receipt writes serialize on it."""
    payment = (
        db.query(Payment)
        .filter(Payment.id == payment_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not payment:
        raise NotFoundError("Payment not found", {"payment_id": str(payment_id)})
    return payment


def has_active_receipt(payment: Payment) -> bool:
    return payment.receipt is not None and not payment.receipt.is_deleted


def payment_to_out(payment: Payment) -> PaymentOut:
    lease = payment.lease
    tenant = lease.tenant if lease else None
    room = lease.room if lease else None
    prop = room.property if room else None

    return PaymentOut.model_validate({
        "id": payment.id,
        "lease_id": payment.lease_id,
        "due_date": payment.due_date,
        "rent_amount": payment.rent_amount,
        "charges_amount": payment.charges_amount,
        "amount": payment.amount,
        "status": payment.status,
        "payment_date": payment.payment_date,
        "created_at": payment.created_at,
        "tenant_name": tenant.full_name if tenant else "Unknown",
        "property_name": prop.name if prop else "Unknown",
        "room_number": room.room_number if room else "Unknown",
        "has_receipt": has_active_receipt(payment),
    })


# ----------------------------------------------------
# Billing period
# ----------------------------------------------------
def get_period(db: Session, month: int, year: int, today: date = None) -> PaymentPeriodResponse:
    first_day = date(year, month, 1)
    last_day = date(year, month, calendar.monthrange(year, month)[1])
    today = today or date.today()

    payments = (
        db.query(Payment)
        .options(*chain_options())
        .filter(Payment.due_date >= first_day, Payment.due_date <= last_day)
        .order_by(Payment.due_date.asc(), Payment.created_at.desc())
        .all()
    )

    statistics = PaymentStatistics()
    for payment in payments:
        amount = Decimal(payment.amount or 0)
        statistics.expected_amount += amount
        if payment.status == PaymentStatus.paid.value:
            statistics.received_amount += amount
        else:
            statistics.pending_amount += amount
            if payment.due_date < today:
                statistics.late_payments += 1

    return PaymentPeriodResponse(
        payments=[payment_to_out(p) for p in payments],
        statistics=statistics,
    )


# ----------------------------------------------------
# Tenant receipts
# ----------------------------------------------------
def get_tenant_receipts(db: Session, tenant_id: UUID) -> List[TenantReceiptOut]:
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if not tenant:
        raise NotFoundError("Tenant not found")

    lease_count = db.query(Lease).filter(Lease.tenant_id == tenant_id).count()
    if lease_count == 0:
        raise NotFoundError("No lease found for this tenant")

    payments = (
        db.query(Payment)
        .join(Lease, Lease.id == Payment.lease_id)
        .options(*chain_options())
        .filter(
            Lease.tenant_id == tenant_id,
            Payment.status == PaymentStatus.paid.value,
        )
        .order_by(Payment.payment_date.desc())
        .all()
    )

    results = []
    for payment in payments:
        lease = payment.lease
        if not lease.room or not lease.room.property:
            continue
        results.append(TenantReceiptOut(
            id=payment.id,
            amount=payment.amount,
            payment_date=payment.payment_date,
            month=period_label(payment.due_date),
            receipt_generated=has_active_receipt(payment),
            tenant_name=tenant.full_name,
            property_name=lease.room.property.name,
            property_address=lease.room.property.address,
            room_number=lease.room.room_number,
            rent_period=RentPeriod(start=lease.start_date, end=lease.end_date),
        ))
    return results


def get_paid_without_receipt(db: Session) -> List[Payment]:
    payments = (
        db.query(Payment)
        .options(joinedload(Payment.receipt))
        .filter(
            Payment.status == PaymentStatus.paid.value,
            Payment.payment_date.isnot(None),
        )
        .all()
    )
    return [p for p in payments if not has_active_receipt(p)]
