"""
Profile draft validation.

Cross-field rules run against the merged draft. Errors are collected
exhaustively rather than stopping at the first failure.
"""

import re
from typing import List, Sequence

from pydantic import EmailStr, TypeAdapter, ValidationError

from partner_portal.profile.models import FieldError, ProfileDraft, ValidationResult
from partner_portal.profile.sections import ALL_SECTIONS, MEDIA_INFORMATION, PICK_UP_PERSON

_EMAIL = TypeAdapter(EmailStr)


def split_emails(value) -> List[str]:
    """Split a comma and/or whitespace separated address list."""
    if not value:
        return []
    return [part for part in re.split(r"[,\s]+", str(value).strip()) if part]


def _present(value) -> bool:
    return value is not None and str(value).strip() != ""


class ProfileValidator:
    """
    Validates merged profile drafts.
    """

    SOCIAL_FIELDS = ("website", "twitter", "facebook", "instagram")

    REQUEST_TYPE_FIELDS = (
        "enable_child_based_requests",
        "enable_individual_requests",
        "enable_quantity_based_requests",
    )

    MAX_PICK_UP_EMAILS = 3

    NO_SOCIAL_MEDIA_REQUIRED = (
        "must be checked if you have not provided any of Website, Twitter, Facebook, or Instagram."
    )
    NO_SOCIAL_MEDIA_CONFLICT = (
        "can't be checked if you have provided any of Website, Twitter, Facebook, or Instagram."
    )
    REQUEST_TYPE_REQUIRED = "At least one request type must be set"
    TOO_MANY_EMAILS = "can't have more than three email addresses"
    INVALID_EMAIL = "is invalid"

    def validate(
        self,
        draft: ProfileDraft,
        sections: Sequence[str] = ALL_SECTIONS,
    ) -> ValidationResult:
        """
        Run every rule against a draft.

        Rules owned by a section the organization hides are skipped.

        Args:
            draft: Merged profile draft
            sections: Sections shown on the partner's form

        Returns:
            ValidationResult; empty when the draft is valid
        """
        errors: List[FieldError] = []
        if MEDIA_INFORMATION in sections:
            errors.extend(self._check_social_media(draft))
        errors.extend(self._check_request_types(draft))
        if PICK_UP_PERSON in sections:
            errors.extend(self._check_pick_up_emails(draft))
        return ValidationResult.from_errors(errors)

    def _check_social_media(self, draft: ProfileDraft) -> List[FieldError]:
        has_presence = any(_present(draft.get(name)) for name in self.SOCIAL_FIELDS)
        flagged = bool(draft.get("no_social_media_presence"))

        if not has_presence and not flagged:
            return [FieldError("no_social_media_presence", self.NO_SOCIAL_MEDIA_REQUIRED)]
        if has_presence and flagged:
            return [FieldError("no_social_media_presence", self.NO_SOCIAL_MEDIA_CONFLICT)]
        return []

    def _check_request_types(self, draft: ProfileDraft) -> List[FieldError]:
        if any(bool(draft.get(name)) for name in self.REQUEST_TYPE_FIELDS):
            return []
        # reported on the first flag, like the form label it sits under
        return [FieldError(self.REQUEST_TYPE_FIELDS[0], self.REQUEST_TYPE_REQUIRED)]

    def _check_pick_up_emails(self, draft: ProfileDraft) -> List[FieldError]:
        emails = split_emails(draft.get("pick_up_email"))
        errors = []

        if len(emails) > self.MAX_PICK_UP_EMAILS:
            errors.append(FieldError("pick_up_email", self.TOO_MANY_EMAILS))

        for email in emails:
            try:
                _EMAIL.validate_python(email)
            except ValidationError:
                errors.append(FieldError("pick_up_email", self.INVALID_EMAIL))
                break

        return errors
