"""
Staging for file selections from failed submissions.

When a submission fails validation its selected files are parked here
under a staging token, so the partner can resubmit without choosing them
again. Staged files are never attachments: they have no download route
and expire on their own.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from bson import Binary, ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from partner_portal.profile.errors import PersistenceFailure
from partner_portal.profile.models import FileUpload, PendingSelection

logger = logging.getLogger(__name__)


class SelectionStagingService:
    """
    Keeps pending file selections between a failed and a retried submission.
    """

    def __init__(self, db: AsyncIOMotorDatabase, ttl_minutes: int = 60):
        """
        Initialize SelectionStagingService.

        Args:
            db: MongoDB database connection
            ttl_minutes: How long staged selections are kept
        """
        self._db = db
        self._staging_collection = db["profileUploadStaging"]
        self._ttl = timedelta(minutes=ttl_minutes)

    async def ensure_indexes(self) -> None:
        """Create the expiry and lookup indexes."""
        await self._staging_collection.create_index("expiresAt", expireAfterSeconds=0)
        await self._staging_collection.create_index([("partnerId", 1), ("token", 1)])

    async def stage(
        self,
        partner_id: str,
        uploads: Sequence[Tuple[str, FileUpload]],
        token: Optional[str] = None,
    ) -> Tuple[Optional[str], List[PendingSelection]]:
        """
        Replace the selections staged under a token.

        Args:
            partner_id: Partner ID
            uploads: (slot, upload) pairs in selection order
            token: Existing staging token to reuse, if any

        Returns:
            (token, pending selections); token is None when nothing is staged
        """
        if not uploads:
            if token:
                await self.discard(partner_id, token)
            return None, []

        previous_token = token
        token = token or secrets.token_urlsafe(24)
        now = datetime.now(timezone.utc)
        expires_at = now + self._ttl

        docs = []
        pending = []
        for position, (slot, upload) in enumerate(uploads):
            staging_id = ObjectId()
            docs.append({
                "_id": staging_id,
                "token": token,
                "partnerId": ObjectId(partner_id),
                "position": position,
                "slot": slot,
                "filename": upload.filename,
                "contentType": upload.content_type,
                "size": upload.size,
                "data": Binary(upload.data),
                "createdAt": now,
                "expiresAt": expires_at,
            })
            pending.append(PendingSelection(
                staging_id=str(staging_id),
                slot=slot,
                filename=upload.filename,
                content_type=upload.content_type,
                size=upload.size,
            ))

        try:
            await self._staging_collection.insert_many(docs)
        except PyMongoError as e:
            logger.error(f"Failed to stage selections for partner {partner_id}: {e}")
            raise PersistenceFailure()

        # Earlier selections under the token go only once the new ones are in
        if previous_token:
            await self.discard(partner_id, previous_token, keep=[doc["_id"] for doc in docs])

        logger.info(f"Staged {len(docs)} selection(s) for partner {partner_id}")
        return token, pending

    async def load(self, partner_id: str, token: str) -> List[Tuple[str, FileUpload]]:
        """
        Get the unexpired selections staged under a token.

        Returns:
            (slot, upload) pairs in original selection order
        """
        try:
            cursor = self._staging_collection.find({
                "partnerId": ObjectId(partner_id),
                "token": token,
                "expiresAt": {"$gt": datetime.now(timezone.utc)},
            }).sort("position", 1)
            docs = await cursor.to_list(length=100)
        except PyMongoError as e:
            logger.error(f"Failed to load staged selections for partner {partner_id}: {e}")
            raise PersistenceFailure()

        return [
            (
                doc["slot"],
                FileUpload(
                    filename=doc["filename"],
                    content_type=doc["contentType"],
                    data=bytes(doc["data"]),
                    staging_id=str(doc["_id"]),
                ),
            )
            for doc in docs
        ]

    async def discard(
        self,
        partner_id: str,
        token: str,
        keep: Sequence[ObjectId] = ()
    ) -> None:
        """Drop what is staged under a token, except the `keep` ids."""
        query = {
            "partnerId": ObjectId(partner_id),
            "token": token,
        }
        if keep:
            query["_id"] = {"$nin": list(keep)}

        try:
            result = await self._staging_collection.delete_many(query)
        except PyMongoError as e:
            logger.error(f"Failed to discard staged selections for partner {partner_id}: {e}")
            raise PersistenceFailure()

        if result.deleted_count:
            logger.debug(f"Discarded {result.deleted_count} staged selection(s) for partner {partner_id}")
