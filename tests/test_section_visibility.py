"""Unit tests for section visibility after a submission."""

from partner_portal.profile.models import FieldError, ValidationResult
from partner_portal.profile.sections import (
    AGENCY_INFORMATION,
    ALL_SECTIONS,
    MEDIA_INFORMATION,
    PARTNER_SETTINGS,
    PICK_UP_PERSON,
    PROGRAM_DELIVERY_ADDRESS,
    sections_to_show,
)
from partner_portal.profile.visibility import resolve_visibility


def test_fresh_form_is_all_collapsed():
    state = resolve_visibility(None)

    assert list(state.to_dict()) == list(ALL_SECTIONS)
    assert state.expanded_sections == []


def test_sections_with_errors_expand():
    result = ValidationResult.from_errors([
        FieldError("pick_up_email", "is invalid"),
        FieldError("no_social_media_presence", "must be checked"),
    ])

    state = resolve_visibility(result)

    assert state.expanded_sections == [MEDIA_INFORMATION, PICK_UP_PERSON]
    assert not state.is_expanded(AGENCY_INFORMATION)


def test_open_sections_stay_open_without_errors():
    state = resolve_visibility(ValidationResult(), open_sections=[AGENCY_INFORMATION])

    assert state.expanded_sections == [AGENCY_INFORMATION]


def test_covers_exactly_the_shown_sections():
    sections = sections_to_show([PICK_UP_PERSON])
    result = ValidationResult.from_errors([FieldError("pick_up_email", "is invalid")])

    state = resolve_visibility(result, sections, open_sections=["not_a_section"])

    assert list(state.to_dict()) == [
        AGENCY_INFORMATION,
        PROGRAM_DELIVERY_ADDRESS,
        PICK_UP_PERSON,
        PARTNER_SETTINGS,
    ]
    assert state.expanded_sections == [PICK_UP_PERSON]


def test_empty_form_configuration_shows_every_section():
    assert sections_to_show([]) == list(ALL_SECTIONS)
    assert sections_to_show(None) == list(ALL_SECTIONS)
