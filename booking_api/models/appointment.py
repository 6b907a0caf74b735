# booking_api/models/appointment.py
import enum

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from .base import Base


class AppointmentStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_business_status_start", "business_id", "status", "start_time"),
    )

    id = Column(Integer, primary_key=True)

    # References
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    # NULL means the implicit single resource of a business without a roster
    resource_id = Column(Integer, ForeignKey("resources.id"), nullable=True, index=True)
    customer_id = Column(Integer, nullable=False, index=True)

    # UTC instants, half-open [start_time, end_time)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    status = Column(String(20), nullable=False, default=AppointmentStatus.CONFIRMED.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Appointment(id={self.id}, business_id={self.business_id}, status={self.status})>"
