"""Shared test fixtures for partner portal tests."""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from partner_portal.profile.collector import default_fields
from partner_portal.profile.models import AttachmentRef, FileUpload, ProfileDraft
from partner_portal.profile.sections import DOCUMENTS, PROOF_OF_PARTNER_STATUS


@pytest.fixture
def sample_partner_id():
    return str(ObjectId())


@pytest.fixture
def sample_organization_id():
    return str(ObjectId())


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, update_one,
    # insert_many etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def make_cursor():
    """Motor-style cursor: chainable sort(), awaitable to_list()."""
    def _make(docs):
        cursor = MagicMock()
        cursor.sort = MagicMock(return_value=cursor)
        cursor.to_list = AsyncMock(return_value=list(docs))
        return cursor
    return _make


@pytest.fixture
def make_draft(sample_partner_id, sample_organization_id):
    """Build a ProfileDraft on top of default field values."""
    def _make(fields=None, documents=(), proof=None, status="invited"):
        merged = default_fields()
        merged.update({"name": "Helping Hands", "website": "https://helpinghands.org"})
        merged.update(fields or {})
        attachments = {
            PROOF_OF_PARTNER_STATUS: (proof,) if proof else (),
            DOCUMENTS: tuple(documents),
        }
        return ProfileDraft(
            partner_id=sample_partner_id,
            organization_id=sample_organization_id,
            fields=merged,
            attachments=attachments,
            status=status,
        )
    return _make


@pytest.fixture
def stored_document():
    return AttachmentRef(
        id=str(ObjectId()),
        filename="annual_report.pdf",
        content_type="application/pdf",
        size=2048,
    )


@pytest.fixture
def stored_proof():
    return AttachmentRef(
        id=str(ObjectId()),
        filename="irs_letter.pdf",
        content_type="application/pdf",
        size=4096,
    )


@pytest.fixture
def pdf_upload():
    return FileUpload(
        filename="board_minutes.pdf",
        content_type="application/pdf",
        data=b"%PDF-1.4 minutes",
    )


@pytest.fixture
def text_upload():
    return FileUpload(
        filename="notes.txt",
        content_type="text/plain",
        data=b"distribution notes",
    )


@pytest.fixture
def sample_profile_doc(sample_partner_id, sample_organization_id, stored_document):
    now = datetime.now(timezone.utc)
    return {
        "_id": ObjectId(),
        "partnerId": ObjectId(sample_partner_id),
        "organizationId": ObjectId(sample_organization_id),
        "status": "invited",
        "profile": {
            "name": "Helping Hands",
            "website": "https://helpinghands.org",
            "no_social_media_presence": False,
            "pick_up_email": "pickup@helpinghands.org",
            "legacy_field": "dropped on load",
        },
        "attachments": {
            "documents": [
                {
                    "fileId": ObjectId(stored_document.id),
                    "filename": stored_document.filename,
                    "contentType": stored_document.content_type,
                    "size": stored_document.size,
                },
            ],
        },
        "createdAt": now,
        "updatedAt": now,
    }
