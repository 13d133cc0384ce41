import uuid
from sqlalchemy import Boolean, Column, String, Float, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid(as_uuid=True), ForeignKey(
        "properties.id", ondelete="CASCADE"), nullable=False, index=True)
    room_number = Column(String(32), nullable=False)
    surface = Column(Float, nullable=False)
    tv = Column(Boolean, default=False, nullable=False)
    shower = Column(Boolean, default=False, nullable=False)

    property = relationship("Property", back_populates="rooms")
    leases = relationship(
        "Lease", back_populates="room", cascade="all, delete-orphan")
