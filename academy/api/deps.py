from typing import Optional, List
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session
import uuid

from academy.core import security
from academy.core.config import settings
from academy.core.database import get_db
from academy.models.profiles import Profile, ProfileStatus, UserRole
from academy.schemas.common import TokenPayload

# Tokens come from the hosted identity provider; tokenUrl only documents that
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/token",
    auto_error=False,  # Don't error if header is missing, we check cookies
)


def _read_token(request: Request, token: Optional[str]) -> Optional[str]:
    if token:
        return token
    return request.cookies.get("access_token")


def _load_profile(db: Session, token: str) -> Profile:
    try:
        payload = security.decode_access_token(token)
        token_data = TokenPayload(**payload)
        profile_id = uuid.UUID(str(token_data.sub))
    except (JWTError, ValidationError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )
    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


def get_current_profile(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(reusable_oauth2),
) -> Profile:
    token = _read_token(request, token)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    profile = _load_profile(db, token)
    if profile.status != ProfileStatus.approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Profile is not approved",
        )
    return profile


def get_optional_profile(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(reusable_oauth2),
) -> Optional[Profile]:
    token = _read_token(request, token)
    if not token:
        return None
    try:
        profile = _load_profile(db, token)
    except HTTPException:
        return None
    if profile.status != ProfileStatus.approved:
        return None
    return profile


class RoleChecker:
    def __init__(self, allowed_roles: List[str]):
        self.allowed_roles = allowed_roles

    def __call__(self, current_user: Profile = Depends(get_current_profile)) -> Profile:
        role = current_user.role.value
        if role not in self.allowed_roles and role != UserRole.principal.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{role}' is not allowed to access this resource",
            )
        return current_user
