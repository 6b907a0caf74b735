# booking_api/models/resource.py
from sqlalchemy import Column, String, Integer, ForeignKey, Boolean, DateTime
from sqlalchemy.sql import func
from booking_api.models.base import Base


class Resource(Base):
    """One unit of booking capacity (a chair, a bay, a member of staff)"""
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True)
    business_id = Column(
        Integer,
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String(200), nullable=False)

    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Resource(id={self.id}, name={self.name}, business_id={self.business_id})>"

    def to_dict(self):
        return {"id": self.id, "name": self.name}
