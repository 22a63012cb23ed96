from .availability import (
    AvailableSlotsResponse,
    BlockedDateCreate,
    BlockedDateResponse,
    DateEligibilityResponse,
    DaySchedule,
    EligibleDatesResponse,
    TimeRange,
    TimeSlotResponse,
    WeeklyScheduleUpdate,
)
from .booking import (
    BookingActionResponse,
    BookingCreateRequest,
    BookingListResponse,
    BookingResponse,
    BookingUpdateRequest,
    CleanerBookingActionRequest,
)
