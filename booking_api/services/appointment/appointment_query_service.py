# ============================================================================
# booking_api/services/appointment/appointment_query_service.py
# Pure read logic - no FastAPI dependencies, fully testable
# ============================================================================
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from booking_api.models.appointment import Appointment
from booking_api.models.business import Business
from booking_api.models.service import Service
from booking_api.services.availability.availability_store import AvailabilityStore
from booking_api.services.timezone.timezone_normalizer import TimezoneNormalizer


def _isoformat_utc(value) -> Optional[str]:
    if value is None:
        return None
    return TimezoneNormalizer.ensure_utc(value).isoformat()


class AppointmentQueryService:
    """Read-side views over appointments"""

    @staticmethod
    def serialize_appointment(appointment: Appointment, tz_name: Optional[str] = None) -> Dict[str, Any]:
        """Convert Appointment model to dictionary."""
        data = {
            "id": appointment.id,
            "business_id": appointment.business_id,
            "service_id": appointment.service_id,
            "resource_id": appointment.resource_id,
            "customer_id": appointment.customer_id,
            "start_time": _isoformat_utc(appointment.start_time),
            "end_time": _isoformat_utc(appointment.end_time),
            "status": appointment.status,
            "created_at": _isoformat_utc(appointment.created_at),
            "cancelled_at": _isoformat_utc(appointment.cancelled_at),
            "completed_at": _isoformat_utc(appointment.completed_at),
        }

        if tz_name:
            local_start = TimezoneNormalizer.utc_to_local(appointment.start_time, tz_name)
            data.update({
                "timezone": tz_name,
                "local_date": local_start.date().isoformat(),
                "local_time": TimezoneNormalizer.format_time(local_start),
            })

        return data

    @staticmethod
    def list_confirmed_intervals(
            db: Session,
            business_id: int,
            day: date
    ) -> List[Dict[str, Any]]:
        """
        Busy intervals of a business for one local day.

        Informational only: booking decisions are always re-made inside the
        allocator transaction.
        """
        store = AvailabilityStore(db)
        business = store.get_business(business_id)
        window_start, window_end = TimezoneNormalizer.day_bounds_utc(day, business.timezone)

        return [
            {
                "start_time": _isoformat_utc(appt.start_time),
                "end_time": _isoformat_utc(appt.end_time),
                "resource_id": appt.resource_id,
            }
            for appt in store.list_confirmed_appointments(business_id, window_start, window_end)
        ]

    @staticmethod
    def list_business_appointments(
            db: Session,
            business: Business,
            day: date
    ) -> Dict[str, Any]:
        """All appointments of a business starting on a local day, any status."""
        window_start, window_end = TimezoneNormalizer.day_bounds_utc(day, business.timezone)

        rows = db.query(Appointment, Service.name).join(
            Service, Service.id == Appointment.service_id
        ).filter(
            Appointment.business_id == business.id,
            Appointment.start_time >= window_start,
            Appointment.start_time < window_end
        ).order_by(Appointment.start_time.asc(), Appointment.id.asc()).all()

        appointments = []
        for appt, service_name in rows:
            data = AppointmentQueryService.serialize_appointment(appt, business.timezone)
            data["service_name"] = service_name
            appointments.append(data)

        return {
            "business_id": business.id,
            "date": day.isoformat(),
            "total_appointments": len(appointments),
            "appointments": appointments,
        }

    @staticmethod
    def list_customer_appointments(
            db: Session,
            customer_id: int,
            skip: int = 0,
            limit: int = 50
    ) -> Dict[str, Any]:
        """A customer's own bookings, newest first."""
        query = db.query(Appointment, Business, Service.name).join(
            Business, Business.id == Appointment.business_id
        ).join(
            Service, Service.id == Appointment.service_id
        ).filter(
            Appointment.customer_id == customer_id
        ).order_by(desc(Appointment.start_time), desc(Appointment.id))

        total = query.count()
        rows = query.offset(skip).limit(limit).all()

        appointments = []
        for appt, business, service_name in rows:
            data = AppointmentQueryService.serialize_appointment(appt, business.timezone)
            data["business_name"] = business.name
            data["service_name"] = service_name
            appointments.append(data)

        return {
            "customer_id": customer_id,
            "total_appointments": total,
            "page": {
                "skip": skip,
                "limit": limit,
                "total_pages": (total + limit - 1) // limit if total > 0 else 0
            },
            "appointments": appointments,
        }
