"""
FastAPI router for Organization system endpoints.

Provides organization details, its users, and admin settings updates.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse

from common.utils import error_response, list_response, success_response
from partner_portal.auth.dependencies import require_organization_admin, require_organization_user
from partner_portal.organization.dependencies import get_organization_service
from partner_portal.organization.schemas import OrganizationSettingsUpdateRequest
from partner_portal.organization.services.organization_service import OrganizationService
from partner_portal.profile.dependencies import get_file_store
from partner_portal.profile.models import FileUpload
from partner_portal.profile.services.file_store import GridFSFileStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/organization", tags=["organization"])


@router.get("")
async def get_organization(
    user: Annotated[dict, Depends(require_organization_user)],
    organization_service: Annotated[OrganizationService, Depends(get_organization_service)],
):
    """Get the current user's organization."""
    organization = await organization_service.get_organization(user["organizationId"])
    organization["fromEmail"] = await organization_service.get_from_email(user["organizationId"])
    return success_response(organization)


@router.get("/users")
async def get_organization_users(
    user: Annotated[dict, Depends(require_organization_user)],
    organization_service: Annotated[OrganizationService, Depends(get_organization_service)],
):
    """
    List users of the current organization.

    Each user appears once however many roles they hold.
    """
    users = await organization_service.get_users(user["organizationId"])
    return list_response(users)


@router.patch("/settings")
async def update_organization_settings(
    body: OrganizationSettingsUpdateRequest,
    user: Annotated[dict, Depends(require_organization_admin)],
    organization_service: Annotated[OrganizationService, Depends(get_organization_service)],
):
    """
    Update organization settings (admin only).

    Only provided fields will be updated. At least one request type must
    stay enabled.
    """
    organization = await organization_service.update_settings(
        user["organizationId"],
        body.model_dump(exclude_unset=True)
    )
    return success_response(organization, message="Organization updated.")


@router.put("/logo")
async def update_organization_logo(
    user: Annotated[dict, Depends(require_organization_admin)],
    organization_service: Annotated[OrganizationService, Depends(get_organization_service)],
    file_store: Annotated[GridFSFileStore, Depends(get_file_store)],
    logo: UploadFile = File(...),
):
    """Replace the organization logo (PNG or JPEG, max 1MB)."""
    data = await logo.read()
    if not data:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_response("Logo file is empty", code="EMPTY_FILE"),
        )

    upload = FileUpload(
        filename=logo.filename or "logo",
        content_type=logo.content_type or "",
        data=data,
    )
    organization = await organization_service.update_logo(
        user["organizationId"],
        upload,
        file_store
    )
    return success_response(organization, message="Logo updated.")
