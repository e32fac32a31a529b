"""
FastAPI dependencies for the partner portal.

Wires every service singleton at startup.
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorGridFSBucket

from partner_portal.auth.dependencies import init_auth_services
from partner_portal.config import Settings
from partner_portal.organization.dependencies import init_organization_services
from partner_portal.profile.dependencies import init_profile_services

logger = logging.getLogger(__name__)


def init_all_services(
    db: AsyncIOMotorDatabase,
    settings: Settings,
    bucket: Optional[AsyncIOMotorGridFSBucket] = None,
) -> None:
    """
    Initialize all services at application startup.

    Args:
        db: Main MongoDB database connection
        settings: Application settings
        bucket: GridFS bucket for attachments
    """
    init_auth_services(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    init_organization_services(db)
    init_profile_services(db, settings, bucket)

    logger.info("All services initialized")
