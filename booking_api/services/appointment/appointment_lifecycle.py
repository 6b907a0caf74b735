# ============================================================================
# booking_api/services/appointment/appointment_lifecycle.py
# ============================================================================
"""
Appointment status state machine.

    confirmed --(business)-------------> completed
    confirmed --(business | customer)--> cancelled

completed and cancelled are terminal. A rejected transition writes nothing.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Optional, Set, Union

from booking_api.config.database import Database
from booking_api.core.errors import (
    AppointmentNotFound,
    InvalidStatusTransition,
    PermissionDenied,
    ValidationError,
)
from booking_api.models.appointment import Appointment, AppointmentStatus
from booking_api.models.business import Business
from booking_api.services.notification.notification_dispatcher import (
    NotificationDispatcher,
    notify_safely,
)

logger = logging.getLogger(__name__)

ROLE_BUSINESS = "business"
ROLE_CUSTOMER = "customer"

TRANSITIONS: Dict[AppointmentStatus, Dict[AppointmentStatus, FrozenSet[str]]] = {
    AppointmentStatus.CONFIRMED: {
        AppointmentStatus.COMPLETED: frozenset({ROLE_BUSINESS}),
        AppointmentStatus.CANCELLED: frozenset({ROLE_BUSINESS, ROLE_CUSTOMER}),
    },
    AppointmentStatus.COMPLETED: {},
    AppointmentStatus.CANCELLED: {},
}


def check_transition(
        current: AppointmentStatus,
        target: AppointmentStatus,
        roles: Set[str]
) -> None:
    """Raise unless one of ``roles`` may move an appointment from current to target"""
    allowed = TRANSITIONS.get(current, {})
    if target not in allowed:
        raise InvalidStatusTransition(
            f"invalid transition: cannot change {current.value} appointment to {target.value}"
        )
    if not roles & allowed[target]:
        raise PermissionDenied(f"only the business can mark an appointment {target.value}")


class AppointmentLifecycle:
    """Applies status transitions after creation"""

    def __init__(self, database: Database, dispatcher: NotificationDispatcher):
        self.database = database
        self.dispatcher = dispatcher

    def transition(
            self,
            appointment_id: int,
            target_status: Union[AppointmentStatus, str],
            actor_id: int,
            now: Optional[datetime] = None
    ) -> Appointment:
        try:
            target = AppointmentStatus(target_status)
        except ValueError:
            raise ValidationError(f"unknown status '{target_status}'")

        db = self.database.transaction(serializable=True)
        try:
            appointment = db.query(Appointment).filter(
                Appointment.id == appointment_id
            ).with_for_update().first()
            if not appointment:
                raise AppointmentNotFound()

            business = db.query(Business).filter(Business.id == appointment.business_id).first()
            owner_id = business.owner_id if business else None

            roles = set()
            if owner_id is not None and owner_id == actor_id:
                roles.add(ROLE_BUSINESS)
            if appointment.customer_id == actor_id:
                roles.add(ROLE_CUSTOMER)
            if not roles:
                raise PermissionDenied("not your appointment")

            current = AppointmentStatus(appointment.status)
            check_transition(current, target, roles)

            stamp = now or datetime.now(timezone.utc)
            appointment.status = target.value
            if target == AppointmentStatus.CANCELLED:
                appointment.cancelled_at = stamp
            elif target == AppointmentStatus.COMPLETED:
                appointment.completed_at = stamp

            db.commit()
            db.refresh(appointment)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        logger.info(
            f"Appointment {appointment_id}: {current.value} -> {target.value} by user {actor_id}"
        )

        if target == AppointmentStatus.CANCELLED:
            message = f"Appointment #{appointment_id} has been cancelled."
            if ROLE_CUSTOMER in roles and owner_id is not None and owner_id != actor_id:
                notify_safely(self.dispatcher, owner_id, message)
            if appointment.customer_id != actor_id:
                notify_safely(self.dispatcher, appointment.customer_id, message)
        elif appointment.customer_id != actor_id:
            notify_safely(
                self.dispatcher,
                appointment.customer_id,
                f"Appointment #{appointment_id} is complete. Thanks for visiting!"
            )

        return appointment
