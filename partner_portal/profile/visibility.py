"""
Section visibility.

Decides which profile sections render expanded after a submission.
"""

from typing import Iterable, Optional, Sequence

from partner_portal.profile.models import SectionVisibilityState, ValidationResult
from partner_portal.profile.sections import ALL_SECTIONS


def resolve_visibility(
    result: Optional[ValidationResult],
    sections: Sequence[str] = ALL_SECTIONS,
    open_sections: Iterable[str] = (),
) -> SectionVisibilityState:
    """
    Expand sections the client already had open and sections with errors.

    Args:
        result: Validation result for the submission (None when rendering
            the form fresh)
        sections: Sections shown on the form, in render order
        open_sections: Sections the client reports as currently expanded

    Returns:
        SectionVisibilityState covering exactly `sections`
    """
    expanded = set(open_sections)
    if result is not None:
        expanded.update(result.sections)
    return SectionVisibilityState(expanded={s: s in expanded for s in sections})
