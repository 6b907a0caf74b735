"""
Pydantic schemas for owner-side business configuration
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class BusinessCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    timezone: str = Field("UTC", description="IANA timezone, e.g. Asia/Kolkata")


class BusinessUpdateRequest(BaseModel):
    """All fields are optional - only send what you want to update."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    timezone: Optional[str] = None


class BusinessOut(BaseModel):
    id: int
    owner_id: int
    name: str
    timezone: str
    is_active: bool


class BusinessHoursItem(BaseModel):
    day_of_week: int = Field(..., description="0=Sunday ... 6=Saturday")
    is_closed: bool = False
    start_time: Optional[str] = Field(None, description="HH:MM local time")
    end_time: Optional[str] = Field(None, description="HH:MM local time")


class BusinessHoursUpdateRequest(BaseModel):
    hours: List[BusinessHoursItem] = Field(..., max_length=7)


class ServiceCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: float = Field(0, ge=0)
    duration_minutes: int = Field(..., gt=0, description="Duration in minutes")


class ServiceUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[float] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)


class ResourceCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class ResourceUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
