import uuid
from sqlalchemy import Column, String, Date, Numeric, ForeignKey, DateTime, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base
from shared.utils.clock import utcnow


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint("lease_id", "due_date",
                         name="uq_payments_lease_due_date"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lease_id = Column(Uuid(as_uuid=True), ForeignKey(
        "leases.id", ondelete="CASCADE"), nullable=False, index=True)
    due_date = Column(Date, nullable=False)

    # amounts are a snapshot of the lease at generation time
    rent_amount = Column(Numeric(10, 2), nullable=False)
    charges_amount = Column(Numeric(10, 2), nullable=False, default=0)
    amount = Column(Numeric(10, 2), nullable=False)

    status = Column(String(10), default="pending", nullable=False)  # pending, paid
    payment_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    lease = relationship("Lease", back_populates="payments")
    receipt = relationship(
        "Receipt", back_populates="payment", uselist=False,
        cascade="all, delete-orphan")
