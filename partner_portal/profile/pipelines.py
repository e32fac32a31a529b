"""
Profile system pipeline functions.

Stateless orchestration of the profile save workflow:
collect -> validate -> (commit | report).
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from partner_portal.organization.services.organization_service import OrganizationService
from partner_portal.profile.attachments import AttachmentPlan, pending_uploads, plan_attachments
from partner_portal.profile.collector import collect_submission
from partner_portal.profile.errors import AttachmentError, FieldValidationError, PersistenceFailure
from partner_portal.profile.models import (
    AttachmentRef,
    FieldError,
    FileUpload,
    PartnerStatus,
    SaveOutcome,
    SubmitIntent,
    ValidationResult,
)
from partner_portal.profile.policy import CompletenessPolicy
from partner_portal.profile.services.file_store import GridFSFileStore, resolve_content_type
from partner_portal.profile.services.profile_repository import ProfileRepository
from partner_portal.profile.services.staging_service import SelectionStagingService
from partner_portal.profile.validator import ProfileValidator
from partner_portal.profile.visibility import resolve_visibility

logger = logging.getLogger(__name__)


async def get_profile_pipeline(
    repository: ProfileRepository,
    organization_service: OrganizationService,
    partner_id: str
) -> Dict[str, Any]:
    """
    Get a partner's profile for the edit form.

    Args:
        repository: For profile retrieval
        organization_service: For the organization's section configuration
        partner_id: Partner ID

    Returns:
        dict with profile and sections (all collapsed)
    """
    draft = await repository.load(partner_id)
    sections = await organization_service.get_partner_sections(draft.organization_id)
    visibility = resolve_visibility(None, sections)

    return {
        "profile": draft.to_dict(),
        "sections": visibility.to_dict(),
    }


async def save_profile_pipeline(
    repository: ProfileRepository,
    file_store: GridFSFileStore,
    staging_service: SelectionStagingService,
    organization_service: OrganizationService,
    validator: ProfileValidator,
    policy: CompletenessPolicy,
    partner_id: str,
    submitted: Mapping[str, Any],
    uploads: Optional[Mapping[str, Sequence[FileUpload]]] = None,
    removed_ids: Iterable[str] = (),
    staging_token: Optional[str] = None,
    open_sections: Iterable[str] = (),
    review_path: Optional[str] = None,
) -> SaveOutcome:
    """
    Save a profile submission.

    1. Load the persisted profile and any selections staged by an earlier
       failed submission
    2. Merge submitted fields and plan attachment changes
    3. Run the profile rules, attachment checks and the intent's policy
    4. On failure: stage the selected files and raise FieldValidationError
    5. On success: store new files, commit the whole draft, then delete
       removed files and the staged selections

    Args:
        policy: Completeness policy for the submit intent
        submitted: Posted scalar fields
        uploads: Newly posted files per slot
        removed_ids: Stored attachment ids or staging ids to drop
        staging_token: Token returned by a previous failed submission
        open_sections: Sections the client had expanded
        review_path: Redirect target after a successful "Save and Review"

    Returns:
        SaveOutcome with the committed draft

    Raises:
        FieldValidationError: Rules failed; nothing was stored
        PersistenceFailure: Storage failed; nothing was committed
    """
    removed = set(removed_ids or [])

    # 1. Load
    persisted = await repository.load(partner_id)
    sections = await organization_service.get_partner_sections(persisted.organization_id)

    staged: List[Tuple[str, FileUpload]] = []
    if staging_token:
        staged = await staging_service.load(partner_id, staging_token)
        staged = [(slot, upload) for slot, upload in staged if upload.staging_id not in removed]

    # 2. Collect
    combined: Dict[str, List[FileUpload]] = {}
    for slot, upload in staged:
        combined.setdefault(slot, []).append(upload)
    for slot, files in (uploads or {}).items():
        combined.setdefault(slot, []).extend(files)

    submission = collect_submission(persisted, submitted, combined, removed)
    plans = plan_attachments(submission.draft, submission.uploads, submission.removed_ids)

    # 3. Validate
    result = validator.validate(submission.draft, sections)

    attachment_errors, accepted = _check_uploads(file_store, plans)
    result = result.merge(ValidationResult.from_errors(attachment_errors))
    result = result.merge(policy.check(submission.draft, plans))

    # 4. Report
    if not result.is_valid:
        token, pending = await staging_service.stage(partner_id, accepted, staging_token)
        visibility = resolve_visibility(result, sections, open_sections)

        logger.info(
            f"Profile save rejected for partner {partner_id}: "
            f"{len(result.errors)} error(s) in {result.sections}, {len(pending)} selection(s) pending"
        )
        raise FieldValidationError(
            result=result,
            visibility=visibility,
            pending=pending,
            staging_token=token,
        )

    # 5. Commit
    committed = await _commit(repository, file_store, submission.draft, plans, policy.intent)

    await _delete_removed(file_store, plans)

    if staging_token:
        try:
            await staging_service.discard(partner_id, staging_token)
        except PersistenceFailure:
            logger.warning(f"Staged selections for partner {partner_id} left to expire")

    logger.info(f"Profile saved for partner {partner_id} ({policy.intent.value})")

    redirect = review_path if policy.intent == SubmitIntent.SAVE_AND_REVIEW else None
    return SaveOutcome(draft=committed, intent=policy.intent, redirect=redirect)


def _check_uploads(
    file_store: GridFSFileStore,
    plans: Mapping[str, AttachmentPlan],
) -> Tuple[List[FieldError], List[Tuple[str, FileUpload]]]:
    """Run the file store checks; returns (errors, uploads that passed)."""
    errors = []
    accepted = []
    for slot, upload in pending_uploads(plans):
        try:
            file_store.check(slot, upload)
        except AttachmentError as e:
            errors.append(FieldError(slot, e.message))
            continue
        accepted.append((slot, upload))
    return errors, accepted


async def _commit(repository, file_store, draft, plans, intent):
    stored: List[AttachmentRef] = []
    try:
        final = {}
        for slot_name, plan in plans.items():
            refs = []
            for upload in plan.uploads:
                ref = await file_store.store(
                    upload.data,
                    upload.filename,
                    resolve_content_type(upload),
                )
                stored.append(ref)
                refs.append(ref)
            final[slot_name] = plan.result(refs)

        draft = draft.with_attachments(final)
        if intent == SubmitIntent.SAVE_AND_REVIEW and draft.status == PartnerStatus.INVITED.value:
            draft = draft.with_status(PartnerStatus.AWAITING_REVIEW.value)

        return await repository.commit(draft)
    except Exception:
        await _discard_stored(file_store, stored)
        raise


async def _discard_stored(file_store: GridFSFileStore, stored: List[AttachmentRef]) -> None:
    for ref in stored:
        try:
            await file_store.delete(ref)
        except PersistenceFailure:
            logger.error(f"Orphaned attachment {ref.id} ({ref.filename}) after failed commit")


async def _delete_removed(file_store: GridFSFileStore, plans: Mapping[str, AttachmentPlan]) -> None:
    for plan in plans.values():
        for ref in plan.removed:
            try:
                await file_store.delete(ref)
            except PersistenceFailure:
                logger.error(f"Orphaned attachment {ref.id} ({ref.filename}) after removal")
