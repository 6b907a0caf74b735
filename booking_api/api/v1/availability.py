# ============================================================================
# booking_api/api/v1/availability.py
# Public read endpoints - thin HTTP layer over the availability services
# ============================================================================
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from booking_api.config.database import get_db
from booking_api.config.settings import Settings, get_settings
from booking_api.schemas.availability import (
    BusinessHoursOut,
    BusyIntervalOut,
    ResourceOut,
    ServiceOut,
    SlotsResponse,
)
from booking_api.services.appointment.appointment_query_service import AppointmentQueryService
from booking_api.services.availability.availability_store import AvailabilityStore
from booking_api.services.availability.slot_calculator import SlotCalculator
from booking_api.services.timezone.timezone_normalizer import TimezoneNormalizer

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/hours", response_model=List[BusinessHoursOut])
def get_business_hours(
        business_id: int = Query(..., alias="businessId", gt=0),
        db: Session = Depends(get_db)
):
    """Weekly working hours of a business (0=Sunday ... 6=Saturday)."""
    store = AvailabilityStore(db)
    store.get_business(business_id)
    return [hours.to_dict() for hours in store.list_business_hours(business_id)]


@router.get("/resources", response_model=List[ResourceOut])
def get_resources(
        business_id: int = Query(..., alias="businessId", gt=0),
        db: Session = Depends(get_db)
):
    """Bookable resources (chairs, bays, staff) of a business."""
    store = AvailabilityStore(db)
    store.get_business(business_id)
    return [resource.to_dict() for resource in store.list_resources(business_id)]


@router.get("/services", response_model=List[ServiceOut])
def get_services(
        business_id: int = Query(..., alias="businessId", gt=0),
        db: Session = Depends(get_db)
):
    """Active services of a business with price and duration."""
    store = AvailabilityStore(db)
    store.get_business(business_id)
    return [service.to_dict() for service in store.list_services(business_id)]


@router.get("/slots", response_model=SlotsResponse)
def get_slots(
        business_id: int = Query(..., alias="businessId", gt=0),
        service_id: int = Query(..., alias="serviceId", gt=0),
        date: str = Query(..., description="Local calendar date, yyyy-mm-dd"),
        db: Session = Depends(get_db),
        settings: Settings = Depends(get_settings)
):
    """
    Bookable local start times for a service on a date.
    The list can go stale; POST /appointments re-checks at commit time.
    """
    day = TimezoneNormalizer.parse_date(date)
    calculator = SlotCalculator(
        AvailabilityStore(db),
        step_minutes=settings.SLOT_STEP_MINUTES,
        allow_virtual_resource=settings.ALLOW_VIRTUAL_RESOURCE,
    )
    return {"slots": calculator.compute_slots(business_id, service_id, day)}


@router.get("/appointments", response_model=List[BusyIntervalOut])
def get_busy_intervals(
        business_id: int = Query(..., alias="businessId", gt=0),
        date: str = Query(..., description="Local calendar date, yyyy-mm-dd"),
        db: Session = Depends(get_db)
):
    """Confirmed bookings overlapping a local day (UTC instants)."""
    day = TimezoneNormalizer.parse_date(date)
    return AppointmentQueryService.list_confirmed_intervals(db, business_id, day)
