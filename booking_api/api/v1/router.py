"""
API v1 router setup
Organized into: public availability, customer appointments (JWT), and dashboard (JWT, owner)
"""
from fastapi import APIRouter

from booking_api.api.v1 import availability, appointments
from booking_api.api.v1.dashboard import business

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    availability.router,
    tags=["Public"]
)

# ============================================================================
# CUSTOMER ROUTES (JWT authentication required)
# ============================================================================
api_v1_router.include_router(
    appointments.router,
    tags=["Appointments"]
)

# ============================================================================
# DASHBOARD ROUTES (JWT authentication + business ownership required)
# ============================================================================
api_v1_router.include_router(
    business.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    """
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required (/availability)",
            "appointments": "JWT Bearer token required (customer or business owner)",
            "dashboard": "JWT Bearer token of the business owner required"
        }
    }
