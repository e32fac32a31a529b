"""
Organization service.

Reads organizations, their users and the partner form configuration, and
validates organization settings updates.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from common.utils.exceptions import NotFoundException, ValidationException
from partner_portal.profile.errors import AttachmentError, PersistenceFailure
from partner_portal.profile.models import AttachmentRef, FileUpload
from partner_portal.profile.sections import OPTIONAL_SECTIONS, sections_to_show
from partner_portal.profile.services.file_store import GridFSFileStore, resolve_content_type

logger = logging.getLogger(__name__)

LOGO_SLOT = "logo"

REQUEST_TYPE_SETTINGS = (
    "enableChildBasedRequests",
    "enableIndividualRequests",
    "enableQuantityBasedRequests",
)

EDITABLE_SETTINGS = {
    "enableChildBasedRequests": {"type": bool},
    "enableIndividualRequests": {"type": bool},
    "enableQuantityBasedRequests": {"type": bool},
    "reminderDay": {"type": int, "min": 1, "max": 28, "nullable": True},
    "deadlineDay": {"type": int, "min": 1, "max": 28, "nullable": True},
    "partnerFormFields": {"type": list},
    "email": {"type": str, "nullable": True},
}


def format_address(org: Dict[str, Any]) -> str:
    """
    Format 'street, city, state zipcode', skipping missing parts.

    Example:
        '123 Main St., Anytown, KS 12345'
    """
    street = (org.get("street") or "").strip()
    city = (org.get("city") or "").strip()
    state = (org.get("state") or "").strip()
    zipcode = (org.get("zipcode") or "").strip()

    state_zip = " ".join(part for part in (state, zipcode) if part)
    return ", ".join(part for part in (street, city, state_zip) if part)


class OrganizationService:
    """
    Manages organizations as seen by the partner portal.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize OrganizationService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._orgs_collection = db["organizations"]
        self._roles_collection = db["roles"]
        self._users_collection = db["users"]

    async def get_organization(self, organization_id: str) -> Dict[str, Any]:
        """
        Get organization by ID.

        Args:
            organization_id: Organization ID

        Returns:
            Organization dict

        Raises:
            NotFoundException: Unknown organization
        """
        org = await self._find_organization(organization_id)
        return self._format_organization(org)

    async def get_partner_sections(self, organization_id: Optional[str]) -> List[str]:
        """
        Profile sections an organization's partners see.

        Partners with no organization see every section.
        """
        if not organization_id:
            return sections_to_show(None)
        org = await self._find_organization(organization_id)
        return sections_to_show(org.get("partnerFormFields"))

    async def get_users(self, organization_id: str) -> List[Dict[str, Any]]:
        """
        Users holding any role on the organization.

        A user with several roles (admin and volunteer, say) has one role
        row each; they are returned once, in order of their first role.

        Returns:
            List of user dicts
        """
        org = await self._find_organization(organization_id)
        roles = await self._roles_collection.find({
            "resourceType": "organization",
            "resourceId": org["_id"],
        }).sort("_id", 1).to_list(length=1000)

        seen = set()
        user_ids = []
        for role in roles:
            user_id = role["userId"]
            if user_id in seen:
                continue
            seen.add(user_id)
            user_ids.append(user_id)

        if not user_ids:
            return []

        users = await self._users_collection.find(
            {"_id": {"$in": user_ids}}
        ).to_list(length=len(user_ids))
        by_id = {user["_id"]: user for user in users}

        return [self._format_user(by_id[uid]) for uid in user_ids if uid in by_id]

    async def get_from_email(self, organization_id: str) -> Optional[str]:
        """
        Sender address for organization mail.

        The organization's own email when set, otherwise its first admin's.
        """
        org = await self._find_organization(organization_id)
        email = (org.get("email") or "").strip()
        if email:
            return email

        admin_role = await self._roles_collection.find_one(
            {
                "resourceType": "organization",
                "resourceId": org["_id"],
                "name": "org_admin",
            },
            sort=[("_id", 1)],
        )
        if not admin_role:
            return None

        admin = await self._users_collection.find_one({"_id": admin_role["userId"]})
        return admin.get("email") if admin else None

    async def update_settings(
        self,
        organization_id: str,
        updates: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Update organization settings (partial update).

        Args:
            organization_id: Organization ID
            updates: camelCase setting -> value

        Returns:
            Updated organization dict

        Raises:
            ValidationException: Invalid setting value, or every request
                type would end up disabled
        """
        org = await self._find_organization(organization_id)

        errors = []
        for key, value in updates.items():
            message = self.validate_setting(key, value)
            if message:
                errors.append({"field": key, "message": message})

        merged = {**org, **updates}
        if not any(merged.get(key, True) for key in REQUEST_TYPE_SETTINGS):
            errors.append({
                "field": "enableChildBasedRequests",
                "message": "At least one request type must be set",
            })

        if errors:
            raise ValidationException(
                message="Invalid organization settings",
                code="INVALID_ORGANIZATION_SETTINGS",
                errors=errors
            )

        if not updates:
            return self._format_organization(org)

        await self._orgs_collection.update_one(
            {"_id": org["_id"]},
            {"$set": {**updates, "updatedAt": datetime.now(timezone.utc)}}
        )

        logger.info(f"Updated organization {organization_id} settings: {list(updates.keys())}")
        return await self.get_organization(organization_id)

    def validate_setting(self, key: str, value: Any) -> Optional[str]:
        """
        Validate one setting.

        Returns:
            Error message, or None when valid
        """
        config = EDITABLE_SETTINGS.get(key)
        if config is None:
            return "is not an editable setting"

        if value is None:
            return None if config.get("nullable") else "can't be blank"

        expected = config["type"]
        # bool is a subclass of int
        if expected is int and isinstance(value, bool):
            return "must be a number"
        if not isinstance(value, expected):
            return f"must be a {expected.__name__}"

        if "min" in config and not (config["min"] <= value <= config["max"]):
            return f"must be between {config['min']} and {config['max']}"

        if key == "partnerFormFields":
            unknown = [item for item in value if item not in OPTIONAL_SECTIONS]
            if unknown:
                return f"contains unknown sections: {', '.join(map(str, unknown))}"

        return None

    async def update_logo(
        self,
        organization_id: str,
        upload: FileUpload,
        file_store: GridFSFileStore
    ) -> Dict[str, Any]:
        """
        Replace the organization logo.

        The old logo is deleted only after the new one is recorded.

        Raises:
            ValidationException: Logo is not PNG/JPEG or is too large
        """
        org = await self._find_organization(organization_id)

        try:
            file_store.check(LOGO_SLOT, upload)
        except AttachmentError as e:
            raise ValidationException(
                message="Invalid logo",
                code="INVALID_LOGO",
                errors=[{"field": LOGO_SLOT, "message": e.message}]
            )

        ref = await file_store.store(upload.data, upload.filename, resolve_content_type(upload))

        try:
            await self._orgs_collection.update_one(
                {"_id": org["_id"]},
                {"$set": {
                    "logo": {
                        "fileId": ObjectId(ref.id),
                        "filename": ref.filename,
                        "contentType": ref.content_type,
                        "size": ref.size,
                    },
                    "updatedAt": datetime.now(timezone.utc),
                }}
            )
        except PyMongoError as e:
            logger.error(f"Failed to record logo for organization {organization_id}: {e}")
            await file_store.delete(ref)
            raise PersistenceFailure(message="Logo could not be saved, please try again")

        previous = org.get("logo")
        if previous:
            try:
                await file_store.delete(AttachmentRef(
                    id=str(previous["fileId"]),
                    filename=previous.get("filename", ""),
                ))
            except PersistenceFailure:
                logger.error(f"Orphaned logo {previous['fileId']} for organization {organization_id}")

        logger.info(f"Updated logo for organization {organization_id}")
        return await self.get_organization(organization_id)

    async def _find_organization(self, organization_id: str) -> Dict[str, Any]:
        try:
            oid = ObjectId(organization_id)
        except (InvalidId, TypeError):
            oid = None

        org = await self._orgs_collection.find_one({"_id": oid}) if oid else None
        if not org:
            raise NotFoundException(
                message="Organization not found",
                code="ORGANIZATION_NOT_FOUND"
            )
        return org

    def _format_organization(self, org: Dict[str, Any]) -> Dict[str, Any]:
        """Format organization for API response."""
        logo = org.get("logo")
        return {
            "id": str(org["_id"]),
            "name": org.get("name"),
            "email": org.get("email"),
            "address": format_address(org),
            "enableChildBasedRequests": org.get("enableChildBasedRequests", True),
            "enableIndividualRequests": org.get("enableIndividualRequests", True),
            "enableQuantityBasedRequests": org.get("enableQuantityBasedRequests", True),
            "reminderDay": org.get("reminderDay"),
            "deadlineDay": org.get("deadlineDay"),
            "partnerFormFields": org.get("partnerFormFields", []),
            "partnerSections": sections_to_show(org.get("partnerFormFields")),
            "logo": {
                "id": str(logo["fileId"]),
                "filename": logo.get("filename"),
            } if logo else None,
        }

    def _format_user(self, user: Dict[str, Any]) -> Dict[str, Any]:
        """Format user for API response."""
        return {
            "id": str(user["_id"]),
            "email": user.get("email"),
            "name": user.get("name"),
        }
