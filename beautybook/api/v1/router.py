"""
API v1 router setup
Organized into: public, customer (JWT) and dashboard (JWT + business owner) routes
"""
from fastapi import APIRouter

from beautybook.api.v1.public import availability
from beautybook.api.v1.customer import bookings as customer_bookings
from beautybook.api.v1.dashboard import bookings as dashboard_bookings, business_settings

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
# DASHBOARD ROUTES (JWT authentication + business owner)
# ============================================================================
api_v1_router.include_router(
    dashboard_bookings.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    business_settings.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and authentication requirements per route group."""
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required",
            "customer": "JWT Bearer token required",
            "dashboard": "JWT Bearer token of a business owner required",
        }
    }
