# booking_api/models/business.py
"""
Business Model
A business owns its weekly hours, services and resources.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from booking_api.models.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False, index=True)  # user id from the auth service
    name = Column(String(200), nullable=False)

    # IANA zone the weekly hours are expressed in
    timezone = Column(String(64), nullable=False, default="UTC")

    hours = relationship(
        "BusinessHours",
        back_populates="business",
        order_by="BusinessHours.day_of_week",
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    is_active = Column(Boolean, default=True)

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "timezone": self.timezone,
            "is_active": self.is_active,
        }


class BusinessHours(Base):
    __tablename__ = "business_hours"
    __table_args__ = (
        UniqueConstraint("business_id", "day_of_week", name="uq_business_hours_day"),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    is_closed = Column(Boolean, nullable=False, default=False)
    start_time = Column(String(5), nullable=True)  # HH:MM local wall clock
    end_time = Column(String(5), nullable=True)  # HH:MM local wall clock

    business = relationship("Business", back_populates="hours")

    def __repr__(self):
        return f"<BusinessHours(business_id={self.business_id}, day={self.day_of_week})>"

    def to_dict(self):
        return {
            "day_of_week": self.day_of_week,
            "is_closed": self.is_closed,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }
