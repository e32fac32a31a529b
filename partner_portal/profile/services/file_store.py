"""
Attachment file store backed by GridFS.

Stores, streams and deletes attachment bytes. Also owns the per-slot size
and content type checks so uploads can be rejected before anything is
written.
"""

import logging
import mimetypes
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from gridfs.errors import NoFile
from motor.motor_asyncio import AsyncIOMotorGridFSBucket
from pymongo.errors import PyMongoError

from common.utils.exceptions import NotFoundException
from partner_portal.profile.errors import (
    AttachmentTooLarge,
    AttachmentWrongType,
    PersistenceFailure,
)
from partner_portal.profile.models import AttachmentRef, FileUpload

logger = logging.getLogger(__name__)

GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}


@dataclass(frozen=True)
class AttachmentRules:
    """Limits for one attachment slot. Empty content_types accepts any type."""
    max_bytes: int
    content_types: List[str] = field(default_factory=list)


def resolve_content_type(upload: FileUpload) -> str:
    """Client-declared type, or a guess from the filename when it is generic."""
    declared = (upload.content_type or "").split(";")[0].strip().lower()
    if declared not in GENERIC_CONTENT_TYPES:
        return declared
    guessed, _ = mimetypes.guess_type(upload.filename)
    return guessed or "application/octet-stream"


class GridFSFileStore:
    """
    Stores attachment bytes in a GridFS bucket.
    """

    def __init__(
        self,
        bucket: AsyncIOMotorGridFSBucket,
        rules: Optional[Dict[str, AttachmentRules]] = None,
    ):
        """
        Initialize GridFSFileStore.

        Args:
            bucket: GridFS bucket for attachment bytes
            rules: Per-slot limits keyed by slot name
        """
        self._bucket = bucket
        self._rules = rules or {}

    def check(self, slot: str, upload: FileUpload) -> None:
        """
        Check an upload against the slot's limits.

        Raises:
            AttachmentTooLarge: upload exceeds the slot's max size
            AttachmentWrongType: content type not accepted by the slot
        """
        rules = self._rules.get(slot)
        if rules is None:
            return

        if upload.size > rules.max_bytes:
            raise AttachmentTooLarge(slot, upload.filename, rules.max_bytes)

        content_type = resolve_content_type(upload)
        if rules.content_types and content_type not in rules.content_types:
            raise AttachmentWrongType(slot, upload.filename, content_type, rules.content_types)

    async def store(self, data: bytes, filename: str, content_type: str) -> AttachmentRef:
        """
        Write bytes to GridFS.

        Returns:
            AttachmentRef for the new file

        Raises:
            PersistenceFailure: GridFS write failed
        """
        try:
            file_id = await self._bucket.upload_from_stream(
                filename,
                data,
                metadata={"contentType": content_type},
            )
        except PyMongoError as e:
            logger.error(f"Failed to store attachment {filename}: {e}")
            raise PersistenceFailure()

        logger.debug(f"Stored attachment {filename} as {file_id}")
        return AttachmentRef(
            id=str(file_id),
            filename=filename,
            content_type=content_type,
            size=len(data),
        )

    async def retrieve(self, ref: AttachmentRef) -> bytes:
        """
        Read an attachment's bytes.

        Raises:
            NotFoundException: file no longer exists
            PersistenceFailure: GridFS read failed
        """
        try:
            stream = await self._bucket.open_download_stream(ObjectId(ref.id))
            return await stream.read()
        except (NoFile, InvalidId):
            raise NotFoundException(
                message="Attachment not found",
                code="ATTACHMENT_NOT_FOUND"
            )
        except PyMongoError as e:
            logger.error(f"Failed to read attachment {ref.id}: {e}")
            raise PersistenceFailure(message="Attachment could not be read, please try again")

    async def delete(self, ref: AttachmentRef) -> None:
        """
        Delete an attachment's bytes. Missing files are ignored.

        Raises:
            PersistenceFailure: GridFS delete failed
        """
        try:
            await self._bucket.delete(ObjectId(ref.id))
            logger.debug(f"Deleted attachment {ref.id} ({ref.filename})")
        except NoFile:
            logger.warning(f"Attachment {ref.id} was already deleted")
        except PyMongoError as e:
            logger.error(f"Failed to delete attachment {ref.id}: {e}")
            raise PersistenceFailure()
