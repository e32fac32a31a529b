"""
Completeness policies per submit intent.

"Save Progress" accepts any draft that passes the profile rules. "Save and
Review" additionally requires the fields configured in
PROFILE_REVIEW_REQUIRED_FIELDS.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from partner_portal.profile.attachments import AttachmentPlan
from partner_portal.profile.models import FieldError, ProfileDraft, SubmitIntent, ValidationResult
from partner_portal.profile.sections import FIELDS_BY_NAME, SLOTS_BY_NAME

logger = logging.getLogger(__name__)

BLANK = "can't be blank"


@dataclass(frozen=True)
class CompletenessPolicy:
    """Fields (or attachment slots) that must be filled for an intent."""
    intent: SubmitIntent
    required_fields: Tuple[str, ...] = ()

    def check(
        self,
        draft: ProfileDraft,
        plans: Dict[str, AttachmentPlan],
    ) -> ValidationResult:
        """
        Args:
            draft: Merged draft
            plans: Attachment plans, so a slot counts as filled when it will
                hold a file after this save

        Returns:
            ValidationResult with a blank error per missing field
        """
        errors: List[FieldError] = []
        for name in self.required_fields:
            if name in SLOTS_BY_NAME:
                plan = plans.get(name)
                filled = plan is not None and bool(plan.retained or plan.uploads)
            else:
                value = draft.get(name)
                filled = value is not None and str(value).strip() != ""
            if not filled:
                errors.append(FieldError(name, BLANK))
        return ValidationResult.from_errors(errors)


def build_policies(review_required_fields: Sequence[str]) -> Dict[SubmitIntent, CompletenessPolicy]:
    """
    Build the policy table from configuration.

    Unknown field names are dropped with a warning.
    """
    known = []
    for name in review_required_fields:
        if name in FIELDS_BY_NAME or name in SLOTS_BY_NAME:
            known.append(name)
        else:
            logger.warning(f"Ignoring unknown review-required field: {name}")

    return {
        SubmitIntent.SAVE_PROGRESS: CompletenessPolicy(SubmitIntent.SAVE_PROGRESS),
        SubmitIntent.SAVE_AND_REVIEW: CompletenessPolicy(
            SubmitIntent.SAVE_AND_REVIEW, tuple(known)
        ),
    }
