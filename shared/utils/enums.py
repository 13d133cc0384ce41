from enum import Enum


class UserRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    TENANT = "tenant"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"


class DocumentType(str, Enum):
    contracts = "contracts"
    documents = "documents"
    tickets = "tickets"
