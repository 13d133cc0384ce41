import re
from datetime import date
from typing import Dict, List
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import or_
from sqlalchemy.orm import Session

from shared.core.database import scoped_transaction
from shared.core.exceptions import ConstraintViolation, NotFoundError, ValidationError
from ...models.leasing_tenants.leases import Lease
from ...models.leasing_tenants.tenants import Tenant
from ...schemas.leasing_tenants.tenants_schemas import (
    TenantCreate, TenantListResponse, TenantOut, TenantRequest, TenantUpdate
)
from .leases_crud import receipt_paths

PHONE_PATTERN = re.compile(r"^(\+\d{1,3}[- ]?)?\d{10}$")


def validate_tenant_fields(data: Dict, today: date = None):
    today = today or date.today()

    for field in ("first_name", "last_name"):
        if field in data:
            value = (data[field] or "").strip()
            if not 2 <= len(value) <= 50:
                raise ValidationError(f"{field} must contain between 2 and 50 characters")

    if "date_of_birth" in data:
        if data["date_of_birth"] is None or data["date_of_birth"] > today:
            raise ValidationError("date_of_birth cannot be in the future")

    if "email" in data:
        try:
            validate_email(data["email"] or "", check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError(f"Invalid email format: {e}")

    if "phone" in data:
        if not PHONE_PATTERN.match(data["phone"] or ""):
            raise ValidationError("Invalid phone number format")


def _ensure_email_free(db: Session, email: str, exclude_id: UUID = None):
    q = db.query(Tenant).filter(Tenant.email == email)
    if exclude_id is not None:
        q = q.filter(Tenant.id != exclude_id)
    if q.first():
        raise ConstraintViolation("A tenant with this email already exists")


def get_all_tenants(db: Session, params: TenantRequest) -> TenantListResponse:
    q = db.query(Tenant)
    if params.search:
        like = f"%{params.search}%"
        q = q.filter(or_(
            Tenant.first_name.ilike(like),
            Tenant.last_name.ilike(like),
            Tenant.email.ilike(like),
        ))

    total = q.count()
    tenants = (
        q.order_by(Tenant.last_name.asc(), Tenant.first_name.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return {"tenants": [TenantOut.model_validate(t) for t in tenants], "total": total}


def get_tenant(db: Session, tenant_id: UUID) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if not tenant:
        raise NotFoundError("Tenant not found", {"tenant_id": str(tenant_id)})
    return tenant


def create_tenant(db: Session, payload: TenantCreate) -> Tenant:
    data = payload.model_dump()
    validate_tenant_fields(data)

    with scoped_transaction(db):
        _ensure_email_free(db, data["email"])
        tenant = Tenant(**data)
        db.add(tenant)

    db.refresh(tenant)
    return tenant


def update_tenant(db: Session, tenant_id: UUID, payload: TenantUpdate) -> Tenant:
    data = payload.model_dump(exclude_unset=True)
    validate_tenant_fields(data)

    with scoped_transaction(db):
        tenant = get_tenant(db, tenant_id)
        if "email" in data:
            _ensure_email_free(db, data["email"], exclude_id=tenant.id)
        for k, v in data.items():
            setattr(tenant, k, v)

    db.refresh(tenant)
    return tenant


def delete_tenant(db: Session, tenant_id: UUID) -> List[str]:
    """Delete the tenant with its leases and documents; return receipt paths to discard."""
    with scoped_transaction(db):
        tenant = get_tenant(db, tenant_id)
        lease_ids = [
            lease_id for (lease_id,) in
            db.query(Lease.id).filter(Lease.tenant_id == tenant.id).all()
        ]
        paths = receipt_paths(db, lease_ids)
        db.delete(tenant)
    return paths
