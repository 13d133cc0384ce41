from datetime import date, datetime
from uuid import UUID
from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel


class PaymentOut(BaseModel):
    id: UUID
    lease_id: UUID
    due_date: date
    rent_amount: Decimal
    charges_amount: Decimal
    amount: Decimal
    status: str
    payment_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    tenant_name: Optional[str] = None
    property_name: Optional[str] = None
    room_number: Optional[str] = None
    has_receipt: bool = False


class PaymentTransitionOut(BaseModel):
    success: bool = True
    payment: PaymentOut
    receipt_error: Optional[str] = None


class PaymentStatistics(BaseModel):
    expected_amount: Decimal = Decimal("0")
    received_amount: Decimal = Decimal("0")
    pending_amount: Decimal = Decimal("0")
    late_payments: int = 0


class PaymentPeriodResponse(BaseModel):
    payments: List[PaymentOut]
    statistics: PaymentStatistics
