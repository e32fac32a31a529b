"""
FastAPI router for Profile system endpoints.

Provides the partner profile edit form API: load, save (progress or
review) and attachment download.
"""

import logging
from typing import Annotated, Any, Dict, List
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, Response
from starlette.datastructures import UploadFile

from common.utils import BadRequestException, NotFoundException, success_response
from partner_portal.auth.dependencies import require_partner
from partner_portal.config import settings
from partner_portal.organization.dependencies import get_organization_service
from partner_portal.organization.services.organization_service import OrganizationService
from partner_portal.profile import pipelines
from partner_portal.profile.dependencies import (
    get_completeness_policies,
    get_file_store,
    get_profile_repository,
    get_profile_validator,
    get_staging_service,
)
from partner_portal.profile.models import FileUpload, SubmitIntent
from partner_portal.profile.policy import CompletenessPolicy
from partner_portal.profile.sections import SLOTS_BY_NAME
from partner_portal.profile.services.file_store import GridFSFileStore
from partner_portal.profile.services.profile_repository import ProfileRepository
from partner_portal.profile.services.staging_service import SelectionStagingService
from partner_portal.profile.validator import ProfileValidator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/partners/profile", tags=["profile"])

# Form keys that steer the workflow rather than carry profile fields
CONTROL_KEYS = {"intent", "staging_token", "remove_attachment_ids", "open_sections"}

SAVED_MESSAGE = "Details were successfully updated."


def _attachment_url(request: Request, attachment_id: str) -> str:
    return str(request.url_for("download_attachment", attachment_id=attachment_id))


def _with_urls(request: Request, data: Dict[str, Any]) -> Dict[str, Any]:
    """Add a download URL to every stored attachment of a profile dict."""
    for refs in data["attachments"].values():
        for ref in refs:
            ref["url"] = _attachment_url(request, ref["id"])
    return data


def _content_disposition(filename: str) -> str:
    """Attachment header; non-ASCII names go in RFC 5987 `filename*`."""
    quoted = quote(filename)
    if quoted == filename:
        return f'attachment; filename="{filename}"'
    fallback = "".join(c for c in filename if " " <= c < "\x7f" and c not in '"\\')
    return f"attachment; filename=\"{fallback or 'attachment'}\"; filename*=UTF-8''{quoted}"


def _parse_intent(value: Any) -> SubmitIntent:
    try:
        return SubmitIntent(value or SubmitIntent.SAVE_PROGRESS.value)
    except ValueError:
        raise BadRequestException(
            message=f"Unknown submit intent: {value}",
            code="INVALID_INTENT"
        )


@router.get("")
async def get_profile(
    request: Request,
    partner: Annotated[dict, Depends(require_partner)],
    repository: Annotated[ProfileRepository, Depends(get_profile_repository)],
    organization_service: Annotated[OrganizationService, Depends(get_organization_service)],
):
    """
    Get the current partner's profile.

    Every shown section starts collapsed.
    """
    result = await pipelines.get_profile_pipeline(
        repository=repository,
        organization_service=organization_service,
        partner_id=partner["partnerId"]
    )

    _with_urls(request, result["profile"])
    return success_response(result)


@router.post("")
async def save_profile(
    request: Request,
    partner: Annotated[dict, Depends(require_partner)],
    repository: Annotated[ProfileRepository, Depends(get_profile_repository)],
    file_store: Annotated[GridFSFileStore, Depends(get_file_store)],
    staging_service: Annotated[SelectionStagingService, Depends(get_staging_service)],
    organization_service: Annotated[OrganizationService, Depends(get_organization_service)],
    validator: Annotated[ProfileValidator, Depends(get_profile_validator)],
    policies: Annotated[Dict[SubmitIntent, CompletenessPolicy], Depends(get_completeness_policies)],
):
    """
    Save profile fields and attachments from a multipart form.

    Only posted fields change. `intent` is "save_progress" (default) or
    "save_and_review". On validation failure the response is 422 with the
    errors, the sections to expand, and the selected files as pending
    selections plus a `staging_token` to send back with the next attempt.
    """
    form = await request.form()
    intent = _parse_intent(form.get("intent"))

    submitted: Dict[str, Any] = {}
    uploads: Dict[str, List[FileUpload]] = {}

    for key in form.keys():
        if key in CONTROL_KEYS:
            continue
        values = form.getlist(key)
        if key in SLOTS_BY_NAME:
            for value in values:
                if isinstance(value, UploadFile) and value.filename:
                    uploads.setdefault(key, []).append(FileUpload(
                        filename=value.filename,
                        content_type=value.content_type or "",
                        data=await value.read(),
                    ))
            continue
        scalars = [v for v in values if not isinstance(v, UploadFile)]
        if scalars:
            submitted[key] = scalars[0] if len(scalars) == 1 else scalars

    outcome = await pipelines.save_profile_pipeline(
        repository=repository,
        file_store=file_store,
        staging_service=staging_service,
        organization_service=organization_service,
        validator=validator,
        policy=policies[intent],
        partner_id=partner["partnerId"],
        submitted=submitted,
        uploads=uploads,
        removed_ids=[str(v) for v in form.getlist("remove_attachment_ids")],
        staging_token=form.get("staging_token") or None,
        open_sections=[str(v) for v in form.getlist("open_sections")],
        review_path=settings.PROFILE_REVIEW_PATH,
    )

    data = {"profile": _with_urls(request, outcome.draft.to_dict())}
    if outcome.redirect:
        data["redirect"] = outcome.redirect

    return success_response(data, message=SAVED_MESSAGE)


@router.get("/attachments/{attachment_id}", name="download_attachment")
async def download_attachment(
    attachment_id: str,
    partner: Annotated[dict, Depends(require_partner)],
    repository: Annotated[ProfileRepository, Depends(get_profile_repository)],
    file_store: Annotated[GridFSFileStore, Depends(get_file_store)],
):
    """
    Download a stored attachment.

    Only committed attachments are reachable; pending selections are not.
    """
    ref = await repository.find_attachment(partner["partnerId"], attachment_id)
    if not ref:
        raise NotFoundException(
            message="Attachment not found",
            code="ATTACHMENT_NOT_FOUND"
        )

    data = await file_store.retrieve(ref)
    return Response(
        content=data,
        media_type=ref.content_type,
        headers={"Content-Disposition": _content_disposition(ref.filename)},
    )
