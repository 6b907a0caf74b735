# booking_api/schemas/appointment.py
from typing import Optional
from pydantic import BaseModel, Field

from booking_api.models.appointment import AppointmentStatus


class AppointmentCreateRequest(BaseModel):
    """Body of POST /appointments; the customer comes from the bearer token"""
    business_id: int = Field(..., gt=0)
    service_id: int = Field(..., gt=0)
    date: str = Field(..., description="Local calendar date, yyyy-mm-dd")
    time: str = Field(..., description="Local start time, HH:MM")


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentOut(BaseModel):
    id: int
    business_id: int
    service_id: int
    resource_id: Optional[int] = None
    customer_id: int
    start_time: str
    end_time: str
    status: AppointmentStatus
    created_at: Optional[str] = None
    cancelled_at: Optional[str] = None
    completed_at: Optional[str] = None
    timezone: Optional[str] = None
    local_date: Optional[str] = None
    local_time: Optional[str] = None


class AppointmentEnvelope(BaseModel):
    appointment: AppointmentOut
