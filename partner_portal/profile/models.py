"""
Type definitions for the profile save workflow.

Contains the dataclasses passed between the collector, validator,
attachment merger and visibility resolver.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from partner_portal.profile.sections import (
    ALL_SECTIONS,
    DOCUMENTS,
    FIELD_ORDER,
    PROOF_OF_PARTNER_STATUS,
    humanize,
    section_for_field,
)


class SubmitIntent(str, Enum):
    """Which submit button the partner pressed."""
    SAVE_PROGRESS = "save_progress"
    SAVE_AND_REVIEW = "save_and_review"


class PartnerStatus(str, Enum):
    INVITED = "invited"
    AWAITING_REVIEW = "awaiting_review"
    APPROVED = "approved"


@dataclass(frozen=True)
class AttachmentRef:
    """A stored attachment: opaque file id plus its original filename."""
    id: str
    filename: str
    content_type: str = "application/octet-stream"
    size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "contentType": self.content_type,
            "size": self.size,
        }


@dataclass(frozen=True)
class FileUpload:
    """A file received with the current submission, not yet stored."""
    filename: str
    content_type: str
    data: bytes
    staging_id: Optional[str] = None  # set when replayed from staging

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class PendingSelection:
    """A selected file kept for resubmission. Never downloadable."""
    staging_id: str
    slot: str
    filename: str
    content_type: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stagingId": self.staging_id,
            "slot": self.slot,
            "filename": self.filename,
            "contentType": self.content_type,
            "size": self.size,
        }


@dataclass(frozen=True)
class ProfileDraft:
    """
    A partner profile as seen by one submission.

    `fields` holds every scalar field; `attachments` maps each slot to its
    stored refs (at most one for single slots).
    """
    partner_id: str
    organization_id: Optional[str]
    fields: Dict[str, Any]
    attachments: Dict[str, Tuple[AttachmentRef, ...]] = field(default_factory=dict)
    status: str = PartnerStatus.INVITED.value

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def attachments_for(self, slot: str) -> Tuple[AttachmentRef, ...]:
        return self.attachments.get(slot, ())

    @property
    def documents(self) -> Tuple[AttachmentRef, ...]:
        return self.attachments_for(DOCUMENTS)

    @property
    def proof_of_partner_status(self) -> Optional[AttachmentRef]:
        refs = self.attachments_for(PROOF_OF_PARTNER_STATUS)
        return refs[0] if refs else None

    def with_attachments(self, attachments: Dict[str, Tuple[AttachmentRef, ...]]) -> "ProfileDraft":
        return replace(self, attachments={**self.attachments, **attachments})

    def with_status(self, status: str) -> "ProfileDraft":
        return replace(self, status=status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "partnerId": self.partner_id,
            "organizationId": self.organization_id,
            "status": self.status,
            "fields": dict(self.fields),
            "attachments": {
                slot: [ref.to_dict() for ref in refs]
                for slot, refs in self.attachments.items()
            },
        }


@dataclass(frozen=True)
class FieldError:
    """One failed rule."""
    field: str
    message: str

    @property
    def section(self) -> Optional[str]:
        return section_for_field(self.field)

    @property
    def full_message(self) -> str:
        return f"{humanize(self.field)} {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "message": self.message,
            "fullMessage": self.full_message,
            "section": self.section,
        }


def _error_sort_key(error: FieldError) -> int:
    return FIELD_ORDER.get(error.field, len(FIELD_ORDER))


@dataclass(frozen=True)
class ValidationResult:
    """Every error found for one submission, in field declaration order."""
    errors: Tuple[FieldError, ...] = ()

    @classmethod
    def from_errors(cls, errors: List[FieldError]) -> "ValidationResult":
        # sorted() is stable, so rule order is kept within a field
        return cls(errors=tuple(sorted(errors, key=_error_sort_key)))

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult.from_errors(list(self.errors) + list(other.errors))

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def sections(self) -> List[str]:
        """Sections owning at least one error, in form order."""
        failing = {e.section for e in self.errors if e.section}
        return [s for s in ALL_SECTIONS if s in failing]

    def messages_for(self, field_name: str) -> List[str]:
        return [e.message for e in self.errors if e.field == field_name]

    @property
    def full_messages(self) -> List[str]:
        return [e.full_message for e in self.errors]

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.errors]


@dataclass(frozen=True)
class SectionVisibilityState:
    """Section id -> expanded flag, in form order."""
    expanded: Dict[str, bool]

    def is_expanded(self, section: str) -> bool:
        return self.expanded.get(section, False)

    @property
    def expanded_sections(self) -> List[str]:
        return [s for s, is_open in self.expanded.items() if is_open]

    def to_dict(self) -> Dict[str, bool]:
        return dict(self.expanded)


@dataclass(frozen=True)
class SaveOutcome:
    """Result of a successful save."""
    draft: ProfileDraft
    intent: SubmitIntent
    redirect: Optional[str] = None
