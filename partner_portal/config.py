"""
Partner portal application settings.

Extends the base settings with profile and attachment configuration.
"""

from typing import List
from common.config import BaseAppSettings


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseAppSettings):
    """Partner portal specific settings."""

    # ==========================================================================
    # Attachments
    # ==========================================================================
    ATTACHMENT_BUCKET: str = "partnerAttachments"
    ATTACHMENT_MAX_BYTES: int = 10 * 1024 * 1024

    # Comma-separated content types; empty accepts any type
    DOCUMENT_CONTENT_TYPES: str = ""
    PROOF_OF_STATUS_CONTENT_TYPES: str = (
        "application/pdf,image/png,image/jpeg,text/plain,text/markdown"
    )

    # Organization logo
    LOGO_MAX_BYTES: int = 1024 * 1024
    LOGO_CONTENT_TYPES: str = "image/png,image/jpeg"

    # How long a failed submission's file selections are kept for resubmission
    STAGING_TTL_MINUTES: int = 60

    # ==========================================================================
    # Profile workflow
    # ==========================================================================
    # Fields that must be filled before a profile can be submitted for review
    PROFILE_REVIEW_REQUIRED_FIELDS: str = "name"

    # Where the client goes after "Save and Review" succeeds
    PROFILE_REVIEW_PATH: str = "/partners/profile"

    def get_document_content_types(self) -> List[str]:
        """Parse DOCUMENT_CONTENT_TYPES into a list."""
        return _split(self.DOCUMENT_CONTENT_TYPES)

    def get_proof_of_status_content_types(self) -> List[str]:
        """Parse PROOF_OF_STATUS_CONTENT_TYPES into a list."""
        return _split(self.PROOF_OF_STATUS_CONTENT_TYPES)

    def get_logo_content_types(self) -> List[str]:
        """Parse LOGO_CONTENT_TYPES into a list."""
        return _split(self.LOGO_CONTENT_TYPES)

    def get_review_required_fields(self) -> List[str]:
        """Parse PROFILE_REVIEW_REQUIRED_FIELDS into a list."""
        return _split(self.PROFILE_REVIEW_REQUIRED_FIELDS)


# Global settings instance
settings = Settings()
