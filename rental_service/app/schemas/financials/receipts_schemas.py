from datetime import date, datetime
from uuid import UUID
from typing import Optional
from decimal import Decimal
from pydantic import BaseModel, Field


class RentPeriod(BaseModel):
    start: date
    end: Optional[date] = None


class TenantReceiptOut(BaseModel):
    id: UUID
    amount: Decimal
    payment_date: Optional[datetime] = None
    month: str
    receipt_generated: bool
    tenant_name: str
    property_name: str
    property_address: str
    room_number: str
    rent_period: RentPeriod


class DocumentInfo(BaseModel):
    type: str
    date: datetime
    tenant: Optional[str] = None
    property: Optional[str] = None
    amount: Decimal


class VerificationData(BaseModel):
    is_valid: bool = Field(serialization_alias="isValid")
    document_info: DocumentInfo = Field(serialization_alias="documentInfo")


class VerificationResponse(BaseModel):
    status: str = "success"
    data: VerificationData
