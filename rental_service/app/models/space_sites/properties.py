import uuid
from sqlalchemy import Column, String, Float, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Property(Base):
    __tablename__ = "properties"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    postal_code = Column(String(16), nullable=False)
    city = Column(String(128), nullable=False)
    surface = Column(Float, nullable=False)

    rooms = relationship(
        "Room", back_populates="property", cascade="all, delete-orphan")
