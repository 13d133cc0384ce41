from uuid import UUID
from typing import List, Optional
from pydantic import BaseModel

from shared.core.schemas import CommonQueryParams


class RoomBase(BaseModel):
    property_id: Optional[UUID] = None
    room_number: Optional[str] = None
    surface: Optional[float] = None
    tv: Optional[bool] = None
    shower: Optional[bool] = None


class RoomCreate(RoomBase):
    property_id: UUID
    room_number: str
    surface: float
    tv: bool = False
    shower: bool = False


class RoomUpdate(RoomBase):
    pass


class RoomOut(RoomBase):
    id: UUID
    property_name: Optional[str] = None

    model_config = {"from_attributes": True}


class RoomRequest(CommonQueryParams):
    property_id: Optional[UUID] = None


class RoomListResponse(BaseModel):
    rooms: List[RoomOut]
    total: int
