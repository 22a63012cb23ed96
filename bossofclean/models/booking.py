from sqlalchemy import (
    Column, String, Integer, Float, Numeric, Text, Date, Time, DateTime, ForeignKey,
    CheckConstraint, Index, Uuid, DDL, event,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bossofclean.models.base import Base
import enum
import uuid


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_booking_time_order"),
        CheckConstraint("estimated_hours > 0", name="ck_booking_estimated_hours"),
        Index("ix_bookings_cleaner_date_status", "cleaner_id", "booking_date", "status"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    cleaner_id = Column(
        Uuid(as_uuid=True), ForeignKey("cleaners.id", ondelete="CASCADE"), nullable=False
    )
    customer_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    # Schedule (wall-clock, DEFAULT_TIMEZONE)
    booking_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    estimated_hours = Column(Float, nullable=False)

    # Job details
    service_type = Column(String(100), nullable=True)
    property_type = Column(String(100), nullable=True)
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)
    zip_code = Column(String(10), nullable=True)
    address = Column(Text, nullable=True)
    special_instructions = Column(Text, nullable=True)
    estimated_price = Column(Numeric(10, 2), nullable=True)

    # Status tracking
    status = Column(String(20), default=BookingStatus.CONFIRMED.value, nullable=False)  # confirmed, cancelled, completed
    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    cleaner = relationship("Cleaner")

    def __repr__(self):
        return (
            f"<Booking(id={self.id}, cleaner_id={self.cleaner_id}, "
            f"{self.booking_date} {self.start_time}-{self.end_time}, status={self.status})>"
        )

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "cleaner_id": str(self.cleaner_id),
            "customer_id": str(self.customer_id),
            "booking_date": self.booking_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "estimated_hours": self.estimated_hours,
            "service_type": self.service_type,
            "property_type": self.property_type,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "zip_code": self.zip_code,
            "address": self.address,
            "special_instructions": self.special_instructions,
            "estimated_price": float(self.estimated_price) if self.estimated_price is not None else None,
            "status": self.status,
            "cancellation_reason": self.cancellation_reason,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


# PostgreSQL-only storage guard, mirrored by the initial Alembic revision so
# create_all() builds the same schema. Other dialects rely on the locked
# re-check in ScheduleStore.
BTREE_GIST_DDL = DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql")

BOOKING_NO_OVERLAP_DDL = DDL("""
    ALTER TABLE bookings
      ADD CONSTRAINT bookings_no_overlap_per_cleaner
      EXCLUDE USING gist (
        cleaner_id WITH =,
        tsrange(booking_date + start_time, booking_date + end_time, '[)') WITH &&
      )
      WHERE (status = 'confirmed')
""").execute_if(dialect="postgresql")

event.listen(Booking.__table__, "before_create", BTREE_GIST_DDL)
event.listen(Booking.__table__, "after_create", BOOKING_NO_OVERLAP_DDL)
