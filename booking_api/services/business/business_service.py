# ============================================================================
# booking_api/services/business/business_service.py
# ============================================================================
"""Owner-side configuration: business profile, weekly hours, services, resources"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from booking_api.core.errors import (
    BusinessNotFound,
    PermissionDenied,
    ServiceNotFound,
    ValidationError,
)
from booking_api.models.business import Business, BusinessHours
from booking_api.models.resource import Resource
from booking_api.models.service import Service
from booking_api.services.timezone.timezone_normalizer import TimezoneNormalizer

logger = logging.getLogger(__name__)


class BusinessService:
    """Mutations of the slowly-changing configuration owned by a business"""

    @staticmethod
    def create_business(db: Session, owner_id: int, name: str, timezone: str = "UTC") -> Business:
        TimezoneNormalizer.get_zone(timezone)

        business = Business(owner_id=owner_id, name=name, timezone=timezone, is_active=True)
        db.add(business)
        db.commit()
        db.refresh(business)

        logger.info(f"Created business {business.id} for owner {owner_id}")
        return business

    @staticmethod
    def get_owned_business(db: Session, business_id: int, user_id: int) -> Business:
        business = db.query(Business).filter(
            Business.id == business_id,
            Business.is_active == True  # noqa: E712
        ).first()

        if not business:
            raise BusinessNotFound(f"business {business_id} not found")
        if business.owner_id != user_id:
            raise PermissionDenied("only the business owner can do this")
        return business

    @staticmethod
    def update_business(
            db: Session,
            business: Business,
            name: Optional[str] = None,
            timezone: Optional[str] = None
    ) -> Business:
        if timezone is not None:
            TimezoneNormalizer.get_zone(timezone)
            business.timezone = timezone
        if name is not None:
            business.name = name

        db.commit()
        db.refresh(business)
        return business

    @staticmethod
    def replace_hours(db: Session, business: Business, hours: Iterable) -> List[BusinessHours]:
        """
        Replace the weekly schedule. Each item needs ``day_of_week``,
        ``is_closed``, ``start_time`` and ``end_time``; days left out have no
        row and are treated as closed.
        """
        items = list(hours)
        seen = set()
        for item in items:
            if item.day_of_week in seen:
                raise ValidationError(f"day_of_week {item.day_of_week} given twice")
            seen.add(item.day_of_week)

            if not 0 <= item.day_of_week <= 6:
                raise ValidationError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")

            if item.is_closed:
                continue
            if not item.start_time or not item.end_time:
                raise ValidationError(f"day {item.day_of_week}: open days need start_time and end_time")
            start = TimezoneNormalizer.parse_time(item.start_time)
            end = TimezoneNormalizer.parse_time(item.end_time)
            if start >= end:
                raise ValidationError(f"day {item.day_of_week}: start_time must be before end_time")

        db.query(BusinessHours).filter(BusinessHours.business_id == business.id).delete()
        db.flush()

        rows = []
        for item in sorted(items, key=lambda h: h.day_of_week):
            row = BusinessHours(
                business_id=business.id,
                day_of_week=item.day_of_week,
                is_closed=item.is_closed,
                start_time=None if item.is_closed else item.start_time,
                end_time=None if item.is_closed else item.end_time,
            )
            db.add(row)
            rows.append(row)

        db.commit()
        logger.info(f"Updated weekly hours for business {business.id} ({len(rows)} days)")
        return rows

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    @staticmethod
    def _get_service(db: Session, business: Business, service_id: int) -> Service:
        service = db.query(Service).filter(
            Service.id == service_id,
            Service.business_id == business.id,
            Service.is_active == True  # noqa: E712
        ).first()
        if not service:
            raise ServiceNotFound()
        return service

    @staticmethod
    def create_service(
            db: Session,
            business: Business,
            name: str,
            duration_minutes: int,
            price: float = 0
    ) -> Service:
        if duration_minutes <= 0:
            raise ValidationError("duration_minutes must be positive")

        service = Service(
            business_id=business.id,
            name=name,
            duration_minutes=duration_minutes,
            price=Decimal(str(price)),
            is_active=True,
        )
        db.add(service)
        db.commit()
        db.refresh(service)

        logger.info(f"Created service {service.id}: {service.name} ({service.formatted_duration})")
        return service

    @staticmethod
    def update_service(
            db: Session,
            business: Business,
            service_id: int,
            name: Optional[str] = None,
            duration_minutes: Optional[int] = None,
            price: Optional[float] = None
    ) -> Service:
        service = BusinessService._get_service(db, business, service_id)

        if duration_minutes is not None:
            if duration_minutes <= 0:
                raise ValidationError("duration_minutes must be positive")
            service.duration_minutes = duration_minutes
        if name is not None:
            service.name = name
        if price is not None:
            service.price = Decimal(str(price))

        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def deactivate_service(db: Session, business: Business, service_id: int) -> None:
        service = BusinessService._get_service(db, business, service_id)
        service.is_active = False
        db.commit()
        logger.info(f"Deactivated service {service_id} of business {business.id}")

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    @staticmethod
    def _get_resource(db: Session, business: Business, resource_id: int) -> Resource:
        resource = db.query(Resource).filter(
            Resource.id == resource_id,
            Resource.business_id == business.id,
            Resource.is_active == True  # noqa: E712
        ).first()
        if not resource:
            raise ValidationError(f"resource {resource_id} not found")
        return resource

    @staticmethod
    def create_resource(db: Session, business: Business, name: str) -> Resource:
        resource = Resource(business_id=business.id, name=name, is_active=True)
        db.add(resource)
        db.commit()
        db.refresh(resource)

        logger.info(f"Created resource {resource.id}: {resource.name}")
        return resource

    @staticmethod
    def rename_resource(db: Session, business: Business, resource_id: int, name: str) -> Resource:
        resource = BusinessService._get_resource(db, business, resource_id)
        resource.name = name
        db.commit()
        db.refresh(resource)
        return resource

    @staticmethod
    def deactivate_resource(db: Session, business: Business, resource_id: int) -> None:
        resource = BusinessService._get_resource(db, business, resource_id)
        resource.is_active = False
        db.commit()
        logger.info(f"Deactivated resource {resource_id} of business {business.id}")
