import uuid
from sqlalchemy import Column, String, Date, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(32), nullable=False)

    leases = relationship(
        "Lease", back_populates="tenant", cascade="all, delete-orphan")
    documents = relationship(
        "Document", back_populates="tenant", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
