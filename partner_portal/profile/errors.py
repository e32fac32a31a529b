"""
Profile workflow errors.

Validation failures and storage failures map onto the common HTTP
exception hierarchy; attachment check failures are plain exceptions that
the pipeline folds into field errors.
"""

from typing import List, Optional

from common.utils.exceptions import ServiceUnavailableException, ValidationException
from partner_portal.profile.models import (
    PendingSelection,
    SectionVisibilityState,
    ValidationResult,
)


class FieldValidationError(ValidationException):
    """One or more profile rules failed. Nothing was written."""

    def __init__(
        self,
        result: ValidationResult,
        visibility: SectionVisibilityState,
        pending: Optional[List[PendingSelection]] = None,
        staging_token: Optional[str] = None,
    ):
        self.result = result
        self.visibility = visibility
        self.pending = pending or []
        self.staging_token = staging_token

        super().__init__(
            message="There is a problem with your submission",
            code="PROFILE_INVALID",
            errors=result.to_list(),
            details={
                "fullMessages": result.full_messages,
                "sections": visibility.to_dict(),
                "expandedSections": visibility.expanded_sections,
                "pendingSelections": [p.to_dict() for p in self.pending],
                "stagingToken": staging_token,
            },
        )


class AttachmentError(Exception):
    """An upload was rejected by the file store checks."""

    def __init__(self, slot: str, filename: str, message: str):
        self.slot = slot
        self.filename = filename
        self.message = message
        super().__init__(f"{filename}: {message}")


class AttachmentTooLarge(AttachmentError):
    def __init__(self, slot: str, filename: str, max_bytes: int):
        self.max_bytes = max_bytes
        super().__init__(
            slot,
            filename,
            f"{filename} is too large (maximum is {_format_size(max_bytes)})",
        )


class AttachmentWrongType(AttachmentError):
    def __init__(self, slot: str, filename: str, content_type: str, allowed: List[str]):
        self.content_type = content_type
        self.allowed = allowed
        super().__init__(
            slot,
            filename,
            f"{filename} must be one of: {', '.join(allowed)}",
        )


class PersistenceFailure(ServiceUnavailableException):
    """Database or file storage failed. No partial state was kept."""

    def __init__(self, message: str = "Profile could not be saved, please try again"):
        super().__init__(message=message, code="PERSISTENCE_FAILURE")


def _format_size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024:
        return f"{num_bytes // (1024 * 1024)} MB"
    if num_bytes >= 1024:
        return f"{num_bytes // 1024} KB"
    return f"{num_bytes} bytes"
