# ============================================================================
# booking_api/services/availability/availability_store.py
# Read-only queries over one session - no FastAPI dependencies
# ============================================================================
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from booking_api.core.errors import BusinessNotFound, ServiceNotFound
from booking_api.models.appointment import Appointment, AppointmentStatus
from booking_api.models.business import Business, BusinessHours
from booking_api.models.resource import Resource
from booking_api.models.service import Service


class AvailabilityStore:
    """Hours, roster, services and confirmed appointments of a business"""

    def __init__(self, db: Session):
        self.db = db

    def get_business(self, business_id: int, for_update: bool = False) -> Business:
        """
        Load an active business. With ``for_update`` the row stays locked
        until the surrounding transaction ends, which serialises concurrent
        allocators on the same business.
        """
        query = self.db.query(Business).filter(
            Business.id == business_id,
            Business.is_active == True  # noqa: E712
        )
        if for_update:
            query = query.with_for_update()

        business = query.first()
        if not business:
            raise BusinessNotFound(f"business {business_id} not found")
        return business

    def list_business_hours(self, business_id: int) -> List[BusinessHours]:
        return self.db.query(BusinessHours).filter(
            BusinessHours.business_id == business_id
        ).order_by(BusinessHours.day_of_week.asc()).all()

    def get_hours_for_day(self, business_id: int, day_of_week: int) -> Optional[BusinessHours]:
        return self.db.query(BusinessHours).filter(
            BusinessHours.business_id == business_id,
            BusinessHours.day_of_week == day_of_week
        ).first()

    def get_service(self, business_id: int, service_id: int) -> Service:
        service = self.db.query(Service).filter(
            Service.id == service_id,
            Service.is_active == True  # noqa: E712
        ).first()

        if not service or service.business_id != business_id:
            raise ServiceNotFound(f"service {service_id} not found for business {business_id}")
        return service

    def list_services(self, business_id: int) -> List[Service]:
        return self.db.query(Service).filter(
            Service.business_id == business_id,
            Service.is_active == True  # noqa: E712
        ).order_by(Service.id.asc()).all()

    def list_resources(self, business_id: int) -> List[Resource]:
        return self.db.query(Resource).filter(
            Resource.business_id == business_id,
            Resource.is_active == True  # noqa: E712
        ).order_by(Resource.id.asc()).all()

    def list_confirmed_appointments(
            self,
            business_id: int,
            window_start: datetime,
            window_end: datetime
    ) -> List[Appointment]:
        """Confirmed appointments whose [start, end) intersects the window"""
        return self.db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.status == AppointmentStatus.CONFIRMED.value,
            Appointment.start_time < window_end,
            Appointment.end_time > window_start
        ).order_by(Appointment.start_time.asc(), Appointment.id.asc()).all()
