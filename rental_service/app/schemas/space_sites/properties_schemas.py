from uuid import UUID
from typing import List, Optional
from pydantic import BaseModel

from shared.core.schemas import CommonQueryParams


class PropertyBase(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    surface: Optional[float] = None


class PropertyCreate(PropertyBase):
    name: str
    address: str
    postal_code: str
    city: str
    surface: float


class PropertyUpdate(PropertyBase):
    pass


class PropertyOut(PropertyBase):
    id: UUID
    room_count: int = 0

    model_config = {"from_attributes": True}


class PropertyRequest(CommonQueryParams):
    city: Optional[str] = None


class PropertyListResponse(BaseModel):
    properties: List[PropertyOut]
    total: int
