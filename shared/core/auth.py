from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from shared.core.config import settings
from shared.core.schemas import UserToken
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import UserRole

security = HTTPBearer()


def create_access_token(data: dict) -> str:
    payload = data.copy()
    expires = datetime.now(timezone.utc) + \
        timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload["exp"] = expires
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def validate_current_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> UserToken:
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
        return UserToken(**payload)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "status_code": AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
                "message": "Invalid access token",
            },
        )


def ensure_tenant_access(current_user: UserToken, tenant_id) -> None:
    """Tenants may only read their own records; staff roles see everything."""
    if current_user.role != UserRole.TENANT.value:
        return
    if current_user.tenant_id is None or str(current_user.tenant_id) != str(tenant_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "status_code": AppStatusCode.AUTHENTICATION_FORBIDDEN,
                "message": "Access denied",
            },
        )


def allow_staff(current_user: UserToken = Depends(validate_current_token)) -> UserToken:
    if current_user.role not in (UserRole.OWNER.value, UserRole.ADMIN.value):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "status_code": AppStatusCode.AUTHENTICATION_FORBIDDEN,
                "message": "Owner or admin role required",
            },
        )
    return current_user
