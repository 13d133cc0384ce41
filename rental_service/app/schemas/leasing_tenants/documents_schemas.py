from datetime import datetime
from uuid import UUID
from typing import Optional
from pydantic import BaseModel


class DocumentOut(BaseModel):
    id: UUID
    tenant_id: UUID
    type: str
    name: str
    storage_path: str
    mime_type: str
    size: int
    created_at: datetime

    model_config = {"from_attributes": True}


class DocumentUrlOut(BaseModel):
    id: UUID
    name: str
    url: Optional[str] = None
