"""Unit tests for attachment merging across submissions."""

import pytest
from bson import ObjectId

from partner_portal.profile.attachments import pending_uploads, plan_attachments
from partner_portal.profile.models import AttachmentRef
from partner_portal.profile.sections import DOCUMENTS, PROOF_OF_PARTNER_STATUS


def _stored(filename):
    return AttachmentRef(id=str(ObjectId()), filename=filename, content_type="text/markdown", size=10)


class TestMultiSlot:
    def test_uploads_append_after_existing(self, make_draft, stored_document, pdf_upload, text_upload):
        draft = make_draft(documents=[stored_document])

        plans = plan_attachments(draft, {DOCUMENTS: [pdf_upload, text_upload]}, set())
        plan = plans[DOCUMENTS]

        assert plan.retained == (stored_document,)
        assert plan.uploads == (pdf_upload, text_upload)
        assert plan.removed == ()

        stored = [_stored("board_minutes.pdf"), _stored("notes.txt")]
        assert plan.result(stored) == (stored_document, *stored)

    def test_removal_drops_only_named_ref(self, make_draft):
        first, second = _stored("a.md"), _stored("b.md")
        draft = make_draft(documents=[first, second])

        plan = plan_attachments(draft, {}, {first.id})[DOCUMENTS]

        assert plan.retained == (second,)
        assert plan.removed == (first,)

    def test_empty_submission_is_unchanged(self, make_draft, stored_document):
        draft = make_draft(documents=[stored_document])

        plan = plan_attachments(draft, {}, set())[DOCUMENTS]

        assert plan.is_unchanged
        assert plan.result([]) == (stored_document,)

    def test_unchanged_twice_gives_same_result(self, make_draft, stored_document):
        draft = make_draft(documents=[stored_document])

        first = plan_attachments(draft, {}, set())[DOCUMENTS].result([])
        second = plan_attachments(
            draft.with_attachments({DOCUMENTS: first}), {}, set()
        )[DOCUMENTS].result([])

        assert first == second == (stored_document,)

    def test_result_rejects_mismatched_refs(self, make_draft, pdf_upload):
        plan = plan_attachments(make_draft(), {DOCUMENTS: [pdf_upload]}, set())[DOCUMENTS]

        with pytest.raises(ValueError):
            plan.result([])


class TestSingleSlot:
    def test_persisted_ref_retained_without_upload(self, make_draft, stored_proof):
        draft = make_draft(proof=stored_proof)

        plan = plan_attachments(draft, {}, set())[PROOF_OF_PARTNER_STATUS]

        assert plan.retained == (stored_proof,)
        assert plan.removed == ()
        assert plan.result([]) == (stored_proof,)

    def test_upload_replaces_persisted_ref(self, make_draft, stored_proof, pdf_upload):
        draft = make_draft(proof=stored_proof)

        plan = plan_attachments(draft, {PROOF_OF_PARTNER_STATUS: [pdf_upload]}, set())[PROOF_OF_PARTNER_STATUS]

        assert plan.retained == ()
        assert plan.uploads == (pdf_upload,)
        assert plan.removed == (stored_proof,)

    def test_latest_of_several_uploads_wins(self, make_draft, pdf_upload, text_upload):
        plan = plan_attachments(
            make_draft(), {PROOF_OF_PARTNER_STATUS: [pdf_upload, text_upload]}, set()
        )[PROOF_OF_PARTNER_STATUS]

        assert plan.uploads == (text_upload,)

    def test_explicit_removal_clears_slot(self, make_draft, stored_proof):
        draft = make_draft(proof=stored_proof)

        plan = plan_attachments(draft, {}, {stored_proof.id})[PROOF_OF_PARTNER_STATUS]

        assert plan.result([]) == ()
        assert plan.removed == (stored_proof,)


def test_pending_uploads_in_slot_order(make_draft, pdf_upload, text_upload):
    plans = plan_attachments(
        make_draft(),
        {DOCUMENTS: [text_upload], PROOF_OF_PARTNER_STATUS: [pdf_upload]},
        set(),
    )

    assert pending_uploads(plans) == [
        (PROOF_OF_PARTNER_STATUS, pdf_upload),
        (DOCUMENTS, text_upload),
    ]


def test_planning_does_not_touch_draft(make_draft, stored_document, pdf_upload):
    draft = make_draft(documents=[stored_document])

    plan_attachments(draft, {DOCUMENTS: [pdf_upload]}, {stored_document.id})

    assert draft.documents == (stored_document,)
