import uuid
from sqlalchemy import Boolean, Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base
from shared.utils.clock import utcnow


class Receipt(Base):
    __tablename__ = "receipts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    payment_id = Column(Uuid(as_uuid=True), ForeignKey(
        "payments.id", ondelete="CASCADE"), nullable=False, unique=True)
    storage_path = Column(String(512), nullable=False)
    storage_url = Column(String(1024), nullable=True)
    verification_hash = Column(String(64), nullable=False, unique=True, index=True)
    signed = Column(Boolean, default=False, nullable=False)
    generated_at = Column(DateTime, default=utcnow, nullable=False)
    downloaded_at = Column(DateTime, nullable=True)
    # set when the payment goes back to pending, the blob is purged later
    is_deleted = Column(Boolean, default=False, nullable=False)

    payment = relationship("Payment", back_populates="receipt")
