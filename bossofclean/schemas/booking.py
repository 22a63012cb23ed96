"""
Pydantic schemas for booking requests and responses
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import date, time
from uuid import UUID


# ============================================================================
# Request Schemas (for incoming data)
# ============================================================================

class BookingCreateRequest(BaseModel):
    """
    Schema for a customer creating a booking.
    The end time is not accepted; it is start_time + estimated_hours.
    """
    cleaner_id: UUID
    booking_date: date
    start_time: time
    estimated_hours: float = Field(..., gt=0, le=24, description="Service duration in hours")

    service_type: str = Field(..., min_length=1, max_length=100)
    property_type: str = Field(..., min_length=1, max_length=100)
    bedrooms: int = Field(0, ge=0)
    bathrooms: int = Field(0, ge=0)
    zip_code: str = Field(..., min_length=5, max_length=10)
    address: str = Field(..., min_length=1)
    special_instructions: Optional[str] = None
    estimated_price: float = Field(..., gt=0)

    @field_validator('start_time')
    @classmethod
    def validate_start_time(cls, v):
        if v.second or v.microsecond:
            raise ValueError('start_time must be given as HH:MM')
        return v


class BookingUpdateRequest(BaseModel):
    """Customer PATCH body: cancel, or reschedule to a new date and start time"""
    action: Literal["cancel", "reschedule"]
    booking_date: Optional[date] = None
    start_time: Optional[time] = None
    reason: Optional[str] = Field(None, max_length=1000)


class CleanerBookingActionRequest(BaseModel):
    """Cleaner PATCH body"""
    action: Literal["confirm", "decline", "complete"]
    reason: Optional[str] = Field(None, max_length=1000)


# ============================================================================
# Response Schemas (for outgoing data)
# ============================================================================

class BookingResponse(BaseModel):
    id: UUID
    cleaner_id: UUID
    customer_id: UUID
    booking_date: date
    start_time: str
    end_time: str
    estimated_hours: float
    service_type: Optional[str] = None
    property_type: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    zip_code: Optional[str] = None
    address: Optional[str] = None
    special_instructions: Optional[str] = None
    estimated_price: Optional[float] = None
    status: str
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    can_modify: bool = False


class BookingListResponse(BaseModel):
    total: int
    bookings: List[BookingResponse]


class BookingActionResponse(BaseModel):
    success: bool = True
    message: str
    booking: BookingResponse
