# booking_api/models/__init__.py
from .base import Base
from .business import Business, BusinessHours
from .service import Service
from .resource import Resource
from .appointment import Appointment, AppointmentStatus

__all__ = [
    "Base",
    "Business",
    "BusinessHours",
    "Service",
    "Resource",
    "Appointment",
    "AppointmentStatus",
]
