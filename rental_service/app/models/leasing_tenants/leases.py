import uuid
from sqlalchemy import Column, Date, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Lease(Base):
    __tablename__ = "leases"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey(
        "tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    room_id = Column(Uuid(as_uuid=True), ForeignKey(
        "rooms.id", ondelete="CASCADE"), nullable=False, index=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)  # null = open-ended

    rent_value = Column(Numeric(10, 2), nullable=False)
    charges = Column(Numeric(10, 2), nullable=False, default=0)

    # relationships
    tenant = relationship("Tenant", back_populates="leases")
    room = relationship("Room", back_populates="leases")
    payments = relationship(
        "Payment", back_populates="lease", cascade="all, delete-orphan",
        order_by="Payment.due_date")
