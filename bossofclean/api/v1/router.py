"""
API v1 router setup
Organized into: public, customer (JWT) and cleaner (JWT + cleaner profile) routes
"""
from fastapi import APIRouter

from bossofclean.api.v1.public import availability
from bossofclean.api.v1.customer import bookings as customer_bookings
from bossofclean.api.v1.cleaner import schedule, bookings as cleaner_bookings

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    availability.router,
    prefix="/public",
    tags=["Public"]
)

# ============================================================================
# CUSTOMER ROUTES (JWT authentication required)
# ============================================================================
api_v1_router.include_router(
    customer_bookings.router,
    tags=["Customer"]
)

# ============================================================================
# CLEANER ROUTES (JWT authentication + cleaner profile required)
# ============================================================================
api_v1_router.include_router(
    schedule.router,
    tags=["Cleaner"]
)
api_v1_router.include_router(
    cleaner_bookings.router,
    tags=["Cleaner"]
)


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    """
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required",
            "customer": "JWT Bearer token required (user login)",
            "cleaner": "JWT Bearer token of a user owning a cleaner profile",
        }
    }
