# bossofclean/models/cleaner.py
"""
Cleaner Model - the professional side of a booking.
Only the columns the availability and booking flows read are mapped here.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from bossofclean.models.base import Base


class Cleaner(Base):
    __tablename__ = "cleaners"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, unique=True, index=True)
    business_name = Column(String(200), nullable=False)
    business_email = Column(String(255), nullable=True)

    instant_booking = Column(Boolean, default=True, nullable=False)
    approval_status = Column(String(20), default="pending", nullable=False)  # pending, approved, rejected

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    availability = relationship(
        "CleanerAvailability",
        back_populates="cleaner",
        cascade="all, delete-orphan",
    )
    blocked_dates = relationship(
        "CleanerBlockedDate",
        back_populates="cleaner",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Cleaner(id={self.id}, business_name={self.business_name})>"
