from datetime import date
from uuid import UUID
from typing import List, Optional
from pydantic import BaseModel

from shared.core.schemas import CommonQueryParams


class TenantBase(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class TenantCreate(TenantBase):
    first_name: str
    last_name: str
    date_of_birth: date
    email: str
    phone: str


class TenantUpdate(TenantBase):
    pass


class TenantOut(TenantBase):
    id: UUID

    model_config = {"from_attributes": True}


class TenantRequest(CommonQueryParams):
    pass


class TenantListResponse(BaseModel):
    tenants: List[TenantOut]
    total: int
