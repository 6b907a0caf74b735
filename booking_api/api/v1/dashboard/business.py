"""
Business Management Dashboard Routes
Owner-authenticated endpoints for hours, services, resources and bookings
"""
from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from booking_api.api.dependencies import get_current_user_id
from booking_api.config.database import get_db
from booking_api.schemas.availability import BusinessHoursOut, ResourceOut, ServiceOut
from booking_api.schemas.business import (
    BusinessCreateRequest,
    BusinessHoursUpdateRequest,
    BusinessOut,
    BusinessUpdateRequest,
    ResourceCreateRequest,
    ResourceUpdateRequest,
    ServiceCreateRequest,
    ServiceUpdateRequest,
)
from booking_api.services.appointment.appointment_query_service import AppointmentQueryService
from booking_api.services.business.business_service import BusinessService
from booking_api.services.timezone.timezone_normalizer import TimezoneNormalizer

router = APIRouter(prefix="/businesses", tags=["dashboard-business"])


# ============================================================================
# Business profile
# ============================================================================

@router.post("", status_code=status.HTTP_201_CREATED, response_model=BusinessOut)
def create_business(
        body: BusinessCreateRequest,
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Register a business owned by the caller."""
    business = BusinessService.create_business(db, current_user_id, body.name, body.timezone)
    return business.to_dict()


@router.patch("/{business_id}", response_model=BusinessOut)
def update_business(
        body: BusinessUpdateRequest,
        business_id: int = Path(...),
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    business = BusinessService.get_owned_business(db, business_id, current_user_id)
    business = BusinessService.update_business(db, business, name=body.name, timezone=body.timezone)
    return business.to_dict()


@router.put("/{business_id}/hours", response_model=List[BusinessHoursOut])
def replace_business_hours(
        body: BusinessHoursUpdateRequest,
        business_id: int = Path(...),
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """
    Replace the weekly schedule. Days not sent are closed.
    """
    business = BusinessService.get_owned_business(db, business_id, current_user_id)
    rows = BusinessService.replace_hours(db, business, body.hours)
    return [row.to_dict() for row in rows]


# ============================================================================
# Services
# ============================================================================

@router.post("/{business_id}/services", status_code=status.HTTP_201_CREATED, response_model=ServiceOut)
def create_service(
        body: ServiceCreateRequest,
        business_id: int = Path(...),
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    business = BusinessService.get_owned_business(db, business_id, current_user_id)
    service = BusinessService.create_service(
        db, business, name=body.name, duration_minutes=body.duration_minutes, price=body.price
    )
    return service.to_dict()


@router.patch("/{business_id}/services/{service_id}", response_model=ServiceOut)
def update_service(
        body: ServiceUpdateRequest,
        business_id: int = Path(...),
        service_id: int = Path(...),
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    business = BusinessService.get_owned_business(db, business_id, current_user_id)
    service = BusinessService.update_service(
        db,
        business,
        service_id,
        name=body.name,
        duration_minutes=body.duration_minutes,
        price=body.price,
    )
    return service.to_dict()


@router.delete("/{business_id}/services/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(
        business_id: int = Path(...),
        service_id: int = Path(...),
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Deactivate a service. Existing appointments keep referencing it."""
    business = BusinessService.get_owned_business(db, business_id, current_user_id)
    BusinessService.deactivate_service(db, business, service_id)


# ============================================================================
# Resources
# ============================================================================

@router.post("/{business_id}/resources", status_code=status.HTTP_201_CREATED, response_model=ResourceOut)
def create_resource(
        body: ResourceCreateRequest,
        business_id: int = Path(...),
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    business = BusinessService.get_owned_business(db, business_id, current_user_id)
    return BusinessService.create_resource(db, business, body.name).to_dict()


@router.patch("/{business_id}/resources/{resource_id}", response_model=ResourceOut)
def rename_resource(
        body: ResourceUpdateRequest,
        business_id: int = Path(...),
        resource_id: int = Path(...),
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    business = BusinessService.get_owned_business(db, business_id, current_user_id)
    return BusinessService.rename_resource(db, business, resource_id, body.name).to_dict()


@router.delete("/{business_id}/resources/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resource(
        business_id: int = Path(...),
        resource_id: int = Path(...),
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Deactivate a resource. It stops counting towards capacity."""
    business = BusinessService.get_owned_business(db, business_id, current_user_id)
    BusinessService.deactivate_resource(db, business, resource_id)


# ============================================================================
# Bookings
# ============================================================================

@router.get("/{business_id}/appointments")
def list_business_appointments(
        business_id: int = Path(...),
        date: str = Query(..., description="Local calendar date, yyyy-mm-dd"),
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """
    Every appointment starting on a local date, any status.
    Requires the business owner's token.
    """
    day = TimezoneNormalizer.parse_date(date)
    business = BusinessService.get_owned_business(db, business_id, current_user_id)
    return AppointmentQueryService.list_business_appointments(db, business, day)
