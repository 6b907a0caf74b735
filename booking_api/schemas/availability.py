# booking_api/schemas/availability.py
"""Response shapes of the public availability endpoints"""
from typing import List, Optional
from pydantic import BaseModel, Field


class BusinessHoursOut(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0=Sunday ... 6=Saturday")
    is_closed: bool
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class ResourceOut(BaseModel):
    id: int
    name: str


class ServiceOut(BaseModel):
    id: int
    name: str
    price: Optional[float] = None
    duration_minutes: int


class SlotsResponse(BaseModel):
    slots: List[str] = Field(default_factory=list, description="Local start times, HH:MM")


class BusyIntervalOut(BaseModel):
    start_time: str
    end_time: str
    resource_id: Optional[int] = None
