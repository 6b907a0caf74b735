# ============================================================================
# FILE: booking_api/api/dependencies.py
# Authentication and service wiring for route handlers
# ============================================================================
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from booking_api.config.database import Database
from booking_api.config.settings import Settings, get_settings
from booking_api.services.appointment.appointment_lifecycle import AppointmentLifecycle
from booking_api.services.appointment.booking_allocator import BookingAllocator
from booking_api.services.notification.notification_dispatcher import NotificationDispatcher

# ============================================================================
# Security Schemes
# ============================================================================

# JWT security for user authentication
jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Enter your JWT access token"
)


# ============================================================================
# JWT verification (tokens are issued by the auth service)
# ============================================================================

def verify_access_token(token: str, settings: Settings) -> dict:
    """
    Verify and decode a JWT access token.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Could not validate credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def get_current_user_id(
        credentials: HTTPAuthorizationCredentials = Depends(jwt_security),
        settings: Settings = Depends(get_settings)
) -> int:
    """Resolve the caller's user id from the bearer token"""
    payload = verify_access_token(credentials.credentials, settings)

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject",
            headers={"WWW-Authenticate": "Bearer"},
        )


# ============================================================================
# Service wiring
# ============================================================================

def get_database(request: Request) -> Database:
    return request.app.state.database


def get_notification_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.notification_dispatcher


def get_booking_allocator(
        database: Database = Depends(get_database),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
        settings: Settings = Depends(get_settings)
) -> BookingAllocator:
    return BookingAllocator(
        database,
        dispatcher,
        max_retries=settings.BOOKING_MAX_RETRIES,
        step_minutes=settings.SLOT_STEP_MINUTES,
        allow_virtual_resource=settings.ALLOW_VIRTUAL_RESOURCE,
    )


def get_appointment_lifecycle(
        database: Database = Depends(get_database),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
) -> AppointmentLifecycle:
    return AppointmentLifecycle(database, dispatcher)
