from datetime import date, datetime
from uuid import UUID
from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel

from shared.core.schemas import CommonQueryParams


class LeasePaymentOut(BaseModel):
    id: UUID
    due_date: date
    amount: Decimal
    status: str
    payment_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LeaseBase(BaseModel):
    tenant_id: Optional[UUID] = None
    room_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rent_value: Optional[Decimal] = None
    charges: Optional[Decimal] = None


class LeaseCreate(LeaseBase):
    tenant_id: UUID
    room_id: UUID
    start_date: date
    rent_value: Decimal
    charges: Decimal = Decimal("0")


class LeaseUpdate(LeaseBase):
    pass


class LeaseOut(LeaseBase):
    id: UUID
    tenant_name: Optional[str] = None
    tenant_email: Optional[str] = None
    room_number: Optional[str] = None
    property_id: Optional[UUID] = None
    property_name: Optional[str] = None
    property_address: Optional[str] = None
    payments: List[LeasePaymentOut] = []


class LeaseRequest(CommonQueryParams):
    room_id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None
    status: Optional[str] = None       # "all" | "active" | "ended" | "upcoming"


class LeaseListResponse(BaseModel):
    leases: List[LeaseOut]
    total: int


class PaymentStub(BaseModel):
    due_date: date
    rent_amount: Decimal
    charges_amount: Decimal
    amount: Decimal
    status: str = "pending"
