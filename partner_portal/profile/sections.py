"""
Profile form layout.

Declares the profile sections, the fields each section owns and the
attachment slots. The declaration order here is the order errors are
reported in and the order sections are rendered in.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


AGENCY_INFORMATION = "agency_information"
PROGRAM_DELIVERY_ADDRESS = "program_delivery_address"
MEDIA_INFORMATION = "media_information"
AGENCY_STABILITY = "agency_stability"
ORGANIZATIONAL_CAPACITY = "organizational_capacity"
SOURCES_OF_FUNDING = "sources_of_funding"
AREA_SERVED = "area_served"
POPULATION_SERVED = "population_served"
EXECUTIVE_DIRECTOR = "executive_director"
PICK_UP_PERSON = "pick_up_person"
AGENCY_DISTRIBUTION_INFORMATION = "agency_distribution_information"
ATTACHED_DOCUMENTS = "attached_documents"
PARTNER_SETTINGS = "partner_settings"

# Always rendered, regardless of the organization's form configuration
REQUIRED_SECTIONS: Tuple[str, ...] = (
    AGENCY_INFORMATION,
    PROGRAM_DELIVERY_ADDRESS,
)

# Organizations pick a subset of these through partner_form_fields
OPTIONAL_SECTIONS: Tuple[str, ...] = (
    MEDIA_INFORMATION,
    AGENCY_STABILITY,
    ORGANIZATIONAL_CAPACITY,
    SOURCES_OF_FUNDING,
    AREA_SERVED,
    POPULATION_SERVED,
    EXECUTIVE_DIRECTOR,
    PICK_UP_PERSON,
    AGENCY_DISTRIBUTION_INFORMATION,
    ATTACHED_DOCUMENTS,
)

ALL_SECTIONS: Tuple[str, ...] = REQUIRED_SECTIONS + OPTIONAL_SECTIONS + (PARTNER_SETTINGS,)


@dataclass(frozen=True)
class ProfileField:
    """A scalar profile field."""
    name: str
    section: str
    kind: str = "string"  # "string" | "boolean"
    default: object = None


@dataclass(frozen=True)
class AttachmentSlot:
    """A file field on the profile."""
    name: str
    section: str
    multiple: bool


PROFILE_FIELDS: Tuple[ProfileField, ...] = (
    # Agency information
    ProfileField("name", AGENCY_INFORMATION),
    ProfileField("agency_type", AGENCY_INFORMATION),
    ProfileField("other_agency_type", AGENCY_INFORMATION),
    ProfileField("agency_mission", AGENCY_INFORMATION),
    ProfileField("address1", AGENCY_INFORMATION),
    ProfileField("address2", AGENCY_INFORMATION),
    ProfileField("city", AGENCY_INFORMATION),
    ProfileField("state", AGENCY_INFORMATION),
    ProfileField("zip_code", AGENCY_INFORMATION),
    # Program delivery address
    ProfileField("program_address1", PROGRAM_DELIVERY_ADDRESS),
    ProfileField("program_address2", PROGRAM_DELIVERY_ADDRESS),
    ProfileField("program_city", PROGRAM_DELIVERY_ADDRESS),
    ProfileField("program_state", PROGRAM_DELIVERY_ADDRESS),
    ProfileField("program_zip_code", PROGRAM_DELIVERY_ADDRESS),
    # Media information
    ProfileField("website", MEDIA_INFORMATION),
    ProfileField("twitter", MEDIA_INFORMATION),
    ProfileField("facebook", MEDIA_INFORMATION),
    ProfileField("instagram", MEDIA_INFORMATION),
    ProfileField("no_social_media_presence", MEDIA_INFORMATION, "boolean", False),
    # Agency stability
    ProfileField("founded", AGENCY_STABILITY),
    ProfileField("form_990", AGENCY_STABILITY, "boolean", False),
    ProfileField("program_name", AGENCY_STABILITY),
    ProfileField("program_description", AGENCY_STABILITY),
    ProfileField("program_age", AGENCY_STABILITY),
    ProfileField("evidence_based", AGENCY_STABILITY, "boolean", False),
    ProfileField("case_management", AGENCY_STABILITY, "boolean", False),
    ProfileField("currently_provide_diapers", AGENCY_STABILITY, "boolean", False),
    # Organizational capacity
    ProfileField("client_capacity", ORGANIZATIONAL_CAPACITY),
    ProfileField("storage_space", ORGANIZATIONAL_CAPACITY, "boolean", False),
    ProfileField("describe_storage_space", ORGANIZATIONAL_CAPACITY),
    # Sources of funding
    ProfileField("sources_of_funding", SOURCES_OF_FUNDING),
    ProfileField("sources_of_diapers", SOURCES_OF_FUNDING),
    ProfileField("essentials_budget", SOURCES_OF_FUNDING),
    ProfileField("essentials_funding_source", SOURCES_OF_FUNDING),
    # Area served
    ProfileField("counties_served", AREA_SERVED),
    # Population served
    ProfileField("income_requirement_desc", POPULATION_SERVED, "boolean", False),
    ProfileField("income_verification", POPULATION_SERVED, "boolean", False),
    ProfileField("population_description", POPULATION_SERVED),
    # Executive director
    ProfileField("executive_director_name", EXECUTIVE_DIRECTOR),
    ProfileField("executive_director_phone", EXECUTIVE_DIRECTOR),
    ProfileField("executive_director_email", EXECUTIVE_DIRECTOR),
    ProfileField("primary_contact_name", EXECUTIVE_DIRECTOR),
    ProfileField("primary_contact_phone", EXECUTIVE_DIRECTOR),
    ProfileField("primary_contact_email", EXECUTIVE_DIRECTOR),
    # Pick up person
    ProfileField("pick_up_name", PICK_UP_PERSON),
    ProfileField("pick_up_email", PICK_UP_PERSON),
    ProfileField("pick_up_phone", PICK_UP_PERSON),
    # Agency distribution information
    ProfileField("distribution_times", AGENCY_DISTRIBUTION_INFORMATION),
    ProfileField("new_client_times", AGENCY_DISTRIBUTION_INFORMATION),
    ProfileField("more_docs_required", AGENCY_DISTRIBUTION_INFORMATION),
    # Partner settings
    ProfileField("enable_child_based_requests", PARTNER_SETTINGS, "boolean", True),
    ProfileField("enable_individual_requests", PARTNER_SETTINGS, "boolean", True),
    ProfileField("enable_quantity_based_requests", PARTNER_SETTINGS, "boolean", True),
)

DOCUMENTS = "documents"
PROOF_OF_PARTNER_STATUS = "proof_of_partner_status"

ATTACHMENT_SLOTS: Tuple[AttachmentSlot, ...] = (
    AttachmentSlot(PROOF_OF_PARTNER_STATUS, AGENCY_INFORMATION, multiple=False),
    AttachmentSlot(DOCUMENTS, ATTACHED_DOCUMENTS, multiple=True),
)

FIELDS_BY_NAME: Dict[str, ProfileField] = {f.name: f for f in PROFILE_FIELDS}
SLOTS_BY_NAME: Dict[str, AttachmentSlot] = {s.name: s for s in ATTACHMENT_SLOTS}

FIELD_SECTIONS: Dict[str, str] = {
    **{f.name: f.section for f in PROFILE_FIELDS},
    **{s.name: s.section for s in ATTACHMENT_SLOTS},
}

# Error ordering: scalar fields first in declaration order, then slots
FIELD_ORDER: Dict[str, int] = {
    name: index for index, name in enumerate(
        [f.name for f in PROFILE_FIELDS] + [s.name for s in ATTACHMENT_SLOTS]
    )
}


def section_for_field(field: str) -> Optional[str]:
    """Section that owns a field or attachment slot."""
    return FIELD_SECTIONS.get(field)


def sections_to_show(partner_form_fields: Optional[List[str]]) -> List[str]:
    """
    Sections rendered for an organization's partner form configuration.

    An empty configuration shows every optional section. Partner settings
    always come last.
    """
    selected = set(partner_form_fields or [])
    if selected:
        optional = [s for s in OPTIONAL_SECTIONS if s in selected]
    else:
        optional = list(OPTIONAL_SECTIONS)
    return list(REQUIRED_SECTIONS) + optional + [PARTNER_SETTINGS]


def humanize(field: str) -> str:
    """'pick_up_email' -> 'Pick up email'."""
    text = field.replace("_", " ").strip()
    return text[:1].upper() + text[1:]
