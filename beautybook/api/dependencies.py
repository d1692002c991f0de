# ============================================================================
# FILE: beautybook/api/dependencies.py
# Caller identity for customer and dashboard routes
# ============================================================================
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from uuid import UUID

from beautybook.config.database import get_db
from beautybook.config.settings import get_settings
from beautybook.models.business import Business
from beautybook.models.user import User, UserRole
from beautybook.services.business.business_settings_service import BusinessSettingsService

# Access tokens come from the account service; this API never issues them
bearer_scheme = HTTPBearer(
    scheme_name="Access token",
    description="JWT access token issued by the BeautyBook account service"
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> UUID:
    """
    Validate an access token and return the user ID in its ``sub`` claim.

    Tokens without a ``type`` claim are treated as access tokens.

    Raises:
        HTTPException 401: bad signature, expired, wrong type or bad subject
    """
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise _unauthorized(f"Could not validate credentials: {e}")

    if claims.get("type", "access") != "access":
        raise _unauthorized("Invalid token type")

    try:
        return UUID(str(claims["sub"]))
    except (KeyError, ValueError):
        raise _unauthorized("Invalid user ID in token")


async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
        db: Session = Depends(get_db)
) -> User:
    """The active user behind the bearer token"""
    user_id = decode_access_token(credentials.credentials)

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user account")

    return user


async def require_business_owner(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
) -> Business:
    """
    Resolve the caller's own business for dashboard routes.

    Every dashboard query is scoped to the returned business, so owners can
    never see or change another business's bookings or calendar.
    """
    if current_user.role != UserRole.BUSINESS_OWNER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Business owner access required"
        )

    business = BusinessSettingsService.get_owned_business(db, current_user.id)
    if business is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active business found")

    return business
