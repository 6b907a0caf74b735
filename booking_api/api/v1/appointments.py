# ============================================================================
# booking_api/api/v1/appointments.py
# Customer booking endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from booking_api.api.dependencies import (
    get_appointment_lifecycle,
    get_booking_allocator,
    get_current_user_id,
)
from booking_api.config.database import get_db
from booking_api.schemas.appointment import (
    AppointmentCreateRequest,
    AppointmentEnvelope,
    AppointmentStatusUpdate,
)
from booking_api.services.appointment.appointment_lifecycle import AppointmentLifecycle
from booking_api.services.appointment.appointment_query_service import AppointmentQueryService
from booking_api.services.appointment.booking_allocator import BookingAllocator

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AppointmentEnvelope)
def create_appointment(
        body: AppointmentCreateRequest,
        current_user_id: int = Depends(get_current_user_id),
        allocator: BookingAllocator = Depends(get_booking_allocator)
):
    """
    Book a slot for the authenticated customer.
    Returns 409 when the slot was taken in the meantime; re-fetch slots and retry.
    """
    appointment = allocator.create_appointment(
        business_id=body.business_id,
        service_id=body.service_id,
        customer_id=current_user_id,
        date=body.date,
        time=body.time,
    )
    return {"appointment": AppointmentQueryService.serialize_appointment(appointment)}


@router.patch("/{appointment_id}", response_model=AppointmentEnvelope)
def update_appointment_status(
        body: AppointmentStatusUpdate,
        appointment_id: int = Path(..., description="The appointment ID"),
        current_user_id: int = Depends(get_current_user_id),
        lifecycle: AppointmentLifecycle = Depends(get_appointment_lifecycle)
):
    """
    Complete (business only) or cancel (business or customer) a confirmed appointment.
    """
    appointment = lifecycle.transition(appointment_id, body.status, current_user_id)
    return {"appointment": AppointmentQueryService.serialize_appointment(appointment)}


@router.get("/mine")
def list_my_appointments(
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
        current_user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Bookings made by the authenticated customer, newest first."""
    return AppointmentQueryService.list_customer_appointments(
        db=db,
        customer_id=current_user_id,
        skip=skip,
        limit=limit
    )
