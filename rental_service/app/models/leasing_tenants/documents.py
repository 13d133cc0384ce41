import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base
from shared.utils.clock import utcnow


class Document(Base):
    __tablename__ = "documents"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey(
        "tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(16), nullable=False)  # contracts | documents | tickets
    name = Column(String(255), nullable=False)
    storage_path = Column(String(512), nullable=False)
    storage_url = Column(String(1024), nullable=True)
    mime_type = Column(String(128), nullable=False)
    size = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    tenant = relationship("Tenant", back_populates="documents")
