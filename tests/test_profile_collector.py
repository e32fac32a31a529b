"""Unit tests for profile field collection."""

import pytest

from partner_portal.profile.collector import collect_submission, default_fields, parse_boolean
from partner_portal.profile.models import FileUpload


class TestParseBoolean:
    @pytest.mark.parametrize("value", ["1", "true", "on", "Yes", True, ["0", "1"]])
    def test_truthy(self, value):
        assert parse_boolean(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "off", "", None, False, ["0"]])
    def test_falsy(self, value):
        assert parse_boolean(value) is False

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_boolean("maybe")


class TestCollectSubmission:
    def test_unposted_fields_keep_persisted_values(self, make_draft):
        persisted = make_draft({"agency_mission": "Feed families", "city": "Topeka"})

        collected = collect_submission(persisted, {"city": "Wichita"})

        assert collected.draft.get("city") == "Wichita"
        assert collected.draft.get("agency_mission") == "Feed families"
        assert collected.changed_fields == ["city"]

    def test_does_not_modify_persisted_draft(self, make_draft):
        persisted = make_draft({"city": "Topeka"})

        collect_submission(persisted, {"city": "Wichita"})

        assert persisted.get("city") == "Topeka"

    def test_strings_are_stripped(self, make_draft):
        collected = collect_submission(make_draft(), {"name": "  Helping Hands Inc  "})

        assert collected.draft.get("name") == "Helping Hands Inc"

    def test_checkbox_pair_reads_last_checked(self, make_draft):
        collected = collect_submission(
            make_draft(),
            {"no_social_media_presence": ["0", "1"], "form_990": "0"},
        )

        assert collected.draft.get("no_social_media_presence") is True
        assert collected.draft.get("form_990") is False

    def test_unparseable_checkbox_keeps_persisted_value(self, make_draft):
        persisted = make_draft({"storage_space": True})

        collected = collect_submission(persisted, {"storage_space": "sometimes"})

        assert collected.draft.get("storage_space") is True
        assert "storage_space" not in collected.changed_fields

    def test_unknown_fields_are_ignored(self, make_draft):
        collected = collect_submission(make_draft(), {"is_admin": "1", "name": "New"})

        assert "is_admin" not in collected.draft.fields
        assert collected.draft.get("name") == "New"

    def test_uploads_for_unknown_slots_and_blank_files_dropped(self, make_draft, pdf_upload):
        blank = FileUpload(filename="", content_type="", data=b"")

        collected = collect_submission(
            make_draft(),
            {},
            uploads={"documents": [pdf_upload, blank], "avatar": [pdf_upload]},
            removed_ids=["abc", ""],
        )

        assert collected.uploads == {"documents": [pdf_upload]}
        assert collected.removed_ids == {"abc"}

    def test_fills_defaults_for_fields_missing_from_persisted(self, make_draft):
        persisted = make_draft()
        persisted.fields.pop("enable_individual_requests")

        collected = collect_submission(persisted, {})

        assert collected.draft.get("enable_individual_requests") is True


def test_default_fields_enable_every_request_type():
    defaults = default_fields()

    assert defaults["enable_child_based_requests"] is True
    assert defaults["enable_individual_requests"] is True
    assert defaults["enable_quantity_based_requests"] is True
    assert defaults["no_social_media_presence"] is False
    assert defaults["name"] is None
