from sqlalchemy import (
    Column, String, Integer, Boolean, Time, Date, DateTime, ForeignKey,
    CheckConstraint, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bossofclean.models.base import Base
import uuid


class CleanerAvailability(Base):
    """Recurring weekly availability rule of a cleaner"""
    __tablename__ = "cleaner_availability"
    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_availability_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    cleaner_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("cleaners.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    day_of_week = Column(Integer, nullable=False)  # 0=Monday, 6=Sunday
    start_time = Column(Time, nullable=False)  # wall-clock, DEFAULT_TIMEZONE
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    cleaner = relationship("Cleaner", back_populates="availability")

    def __repr__(self):
        return (
            f"<CleanerAvailability(cleaner_id={self.cleaner_id}, day={self.day_of_week}, "
            f"{self.start_time}-{self.end_time})>"
        )

    def to_dict(self):
        return {
            "id": str(self.id),
            "day_of_week": self.day_of_week,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "is_available": self.is_available,
        }


class CleanerBlockedDate(Base):
    """Specific date on which a cleaner takes no bookings"""
    __tablename__ = "cleaner_blocked_dates"
    __table_args__ = (
        UniqueConstraint("cleaner_id", "blocked_date", name="uq_blocked_date_per_cleaner"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    cleaner_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("cleaners.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    blocked_date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=True)  # "Holiday", "Vacation", etc.

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    cleaner = relationship("Cleaner", back_populates="blocked_dates")

    def to_dict(self):
        return {
            "id": str(self.id),
            "blocked_date": self.blocked_date.isoformat(),
            "reason": self.reason,
        }
