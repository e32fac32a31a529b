"""
Partner portal API routers.

All routers are imported here for easy access.
"""

from partner_portal.profile.router import router as profile_router
from partner_portal.organization.router import router as organization_router

__all__ = [
    "profile_router",
    "organization_router",
]
