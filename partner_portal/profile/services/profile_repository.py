"""
Partner profile persistence.

Loads and commits whole profile drafts. A commit is a single document
update, so a draft is either written completely or not at all.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from common.utils.exceptions import NotFoundException
from partner_portal.profile.collector import default_fields
from partner_portal.profile.errors import PersistenceFailure
from partner_portal.profile.models import AttachmentRef, PartnerStatus, ProfileDraft
from partner_portal.profile.sections import ATTACHMENT_SLOTS, FIELDS_BY_NAME

logger = logging.getLogger(__name__)


def _object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundException(
            message="Partner profile not found",
            code="PROFILE_NOT_FOUND"
        )


class ProfileRepository:
    """
    Reads and writes partner profile documents.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize ProfileRepository.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._profiles_collection = db["partnerProfiles"]

    async def load(self, partner_id: str) -> ProfileDraft:
        """
        Load the persisted profile for a partner.

        Args:
            partner_id: Partner ID

        Returns:
            ProfileDraft snapshot

        Raises:
            NotFoundException: No profile for this partner
            PersistenceFailure: Database unavailable
        """
        try:
            doc = await self._profiles_collection.find_one(
                {"partnerId": _object_id(partner_id)}
            )
        except PyMongoError as e:
            logger.error(f"Failed to load profile for partner {partner_id}: {e}")
            raise PersistenceFailure(message="Profile could not be loaded, please try again")

        if not doc:
            raise NotFoundException(
                message="Partner profile not found",
                code="PROFILE_NOT_FOUND"
            )

        return self._to_draft(doc)

    async def commit(self, draft: ProfileDraft) -> ProfileDraft:
        """
        Write every field and attachment ref of a draft in one update.

        Args:
            draft: Fully merged, validated draft

        Returns:
            The committed draft

        Raises:
            NotFoundException: Profile was deleted meanwhile
            PersistenceFailure: Database unavailable
        """
        now = datetime.now(timezone.utc)
        update = {
            "profile": {name: draft.fields.get(name) for name in FIELDS_BY_NAME},
            "attachments": {
                slot.name: [self._ref_to_doc(ref) for ref in draft.attachments_for(slot.name)]
                for slot in ATTACHMENT_SLOTS
            },
            "status": draft.status,
            "updatedAt": now,
        }

        try:
            result = await self._profiles_collection.update_one(
                {"partnerId": _object_id(draft.partner_id)},
                {"$set": update}
            )
        except PyMongoError as e:
            logger.error(f"Failed to commit profile for partner {draft.partner_id}: {e}")
            raise PersistenceFailure()

        if result.matched_count == 0:
            raise NotFoundException(
                message="Partner profile not found",
                code="PROFILE_NOT_FOUND"
            )

        logger.info(f"Profile committed for partner {draft.partner_id}")
        return draft

    async def find_attachment(
        self,
        partner_id: str,
        attachment_id: str
    ) -> Optional[AttachmentRef]:
        """
        Find a stored attachment on a partner's profile.

        Returns:
            AttachmentRef or None if the profile has no such attachment
        """
        draft = await self.load(partner_id)
        for refs in draft.attachments.values():
            for ref in refs:
                if ref.id == attachment_id:
                    return ref
        return None

    def _to_draft(self, doc: Dict[str, Any]) -> ProfileDraft:
        stored_fields = doc.get("profile", {})
        fields = default_fields()
        fields.update({k: v for k, v in stored_fields.items() if k in FIELDS_BY_NAME})

        stored_attachments = doc.get("attachments", {})
        attachments = {
            slot.name: tuple(
                self._doc_to_ref(item) for item in stored_attachments.get(slot.name, [])
            )
            for slot in ATTACHMENT_SLOTS
        }

        organization_id = doc.get("organizationId")
        return ProfileDraft(
            partner_id=str(doc["partnerId"]),
            organization_id=str(organization_id) if organization_id else None,
            fields=fields,
            attachments=attachments,
            status=doc.get("status", PartnerStatus.INVITED.value),
        )

    def _ref_to_doc(self, ref: AttachmentRef) -> Dict[str, Any]:
        return {
            "fileId": ObjectId(ref.id),
            "filename": ref.filename,
            "contentType": ref.content_type,
            "size": ref.size,
        }

    def _doc_to_ref(self, item: Dict[str, Any]) -> AttachmentRef:
        return AttachmentRef(
            id=str(item["fileId"]),
            filename=item["filename"],
            content_type=item.get("contentType", "application/octet-stream"),
            size=item.get("size", 0),
        )
