"""
FastAPI dependencies for Profile system.

Provides dependency injection for profile-related services.
"""

from typing import Dict, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorGridFSBucket

from partner_portal.config import Settings
from partner_portal.organization.services.organization_service import LOGO_SLOT
from partner_portal.profile.models import SubmitIntent
from partner_portal.profile.policy import CompletenessPolicy, build_policies
from partner_portal.profile.sections import DOCUMENTS, PROOF_OF_PARTNER_STATUS
from partner_portal.profile.services.file_store import AttachmentRules, GridFSFileStore
from partner_portal.profile.services.profile_repository import ProfileRepository
from partner_portal.profile.services.staging_service import SelectionStagingService
from partner_portal.profile.validator import ProfileValidator


_profile_repository: ProfileRepository | None = None
_file_store: GridFSFileStore | None = None
_staging_service: SelectionStagingService | None = None
_validator: ProfileValidator | None = None
_policies: Dict[SubmitIntent, CompletenessPolicy] | None = None


def init_profile_services(
    db: AsyncIOMotorDatabase,
    settings: Settings,
    bucket: Optional[AsyncIOMotorGridFSBucket] = None,
) -> None:
    """
    Initialize profile services with database connection.

    Called once at application startup.

    Args:
        db: MongoDB database connection
        settings: Application settings
        bucket: GridFS bucket for attachments (defaults to ATTACHMENT_BUCKET on db)
    """
    global _profile_repository, _file_store, _staging_service, _validator, _policies

    rules = {
        DOCUMENTS: AttachmentRules(
            max_bytes=settings.ATTACHMENT_MAX_BYTES,
            content_types=settings.get_document_content_types(),
        ),
        PROOF_OF_PARTNER_STATUS: AttachmentRules(
            max_bytes=settings.ATTACHMENT_MAX_BYTES,
            content_types=settings.get_proof_of_status_content_types(),
        ),
        LOGO_SLOT: AttachmentRules(
            max_bytes=settings.LOGO_MAX_BYTES,
            content_types=settings.get_logo_content_types(),
        ),
    }

    _profile_repository = ProfileRepository(db=db)
    _file_store = GridFSFileStore(
        bucket=bucket or AsyncIOMotorGridFSBucket(db, bucket_name=settings.ATTACHMENT_BUCKET),
        rules=rules,
    )
    _staging_service = SelectionStagingService(db=db, ttl_minutes=settings.STAGING_TTL_MINUTES)
    _validator = ProfileValidator()
    _policies = build_policies(settings.get_review_required_fields())


def get_profile_repository() -> ProfileRepository:
    """Get profile repository instance."""
    if _profile_repository is None:
        raise RuntimeError("Profile services not initialized. Call init_profile_services first.")
    return _profile_repository


def get_file_store() -> GridFSFileStore:
    """Get attachment file store instance."""
    if _file_store is None:
        raise RuntimeError("Profile services not initialized. Call init_profile_services first.")
    return _file_store


def get_staging_service() -> SelectionStagingService:
    """Get selection staging service instance."""
    if _staging_service is None:
        raise RuntimeError("Profile services not initialized. Call init_profile_services first.")
    return _staging_service


def get_profile_validator() -> ProfileValidator:
    """Get profile validator instance."""
    if _validator is None:
        raise RuntimeError("Profile services not initialized. Call init_profile_services first.")
    return _validator


def get_completeness_policies() -> Dict[SubmitIntent, CompletenessPolicy]:
    """Get completeness policies keyed by submit intent."""
    if _policies is None:
        raise RuntimeError("Profile services not initialized. Call init_profile_services first.")
    return _policies
