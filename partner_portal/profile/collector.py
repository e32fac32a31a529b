"""
Field collection for profile submissions.

Merges the fields posted in one request onto the persisted profile. A
section form only posts its own fields, so anything not posted keeps its
persisted value.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from partner_portal.profile.models import FileUpload, ProfileDraft
from partner_portal.profile.sections import FIELDS_BY_NAME, PROFILE_FIELDS, SLOTS_BY_NAME

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "on", "yes", "t"}
FALSE_VALUES = {"0", "false", "off", "no", "f", ""}


@dataclass(frozen=True)
class CollectedSubmission:
    """The merged draft plus the file changes requested alongside it."""
    draft: ProfileDraft
    uploads: Dict[str, List[FileUpload]] = field(default_factory=dict)
    removed_ids: Set[str] = field(default_factory=set)
    changed_fields: List[str] = field(default_factory=list)


def parse_boolean(value: Any) -> bool:
    """Read a checkbox value as posted by a browser form or a JSON client."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (list, tuple)):
        # hidden "0" followed by a checked "1"
        return any(parse_boolean(v) for v in value)
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean value: {value!r}")


def _coerce(name: str, value: Any) -> Any:
    definition = FIELDS_BY_NAME[name]
    if definition.kind == "boolean":
        return parse_boolean(value)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        value = value[-1] if value else ""
    return str(value).strip()


def default_fields() -> Dict[str, Any]:
    """Field values for a profile nobody has edited yet."""
    return {f.name: f.default for f in PROFILE_FIELDS}


def collect_submission(
    persisted: ProfileDraft,
    submitted: Mapping[str, Any],
    uploads: Optional[Mapping[str, Iterable[FileUpload]]] = None,
    removed_ids: Optional[Iterable[str]] = None,
) -> CollectedSubmission:
    """
    Build the draft for one submission.

    Args:
        persisted: Snapshot loaded from the database
        submitted: Posted scalar fields; any field may be missing
        uploads: Files posted per attachment slot, in upload order
        removed_ids: Attachment or staging ids the partner removed

    Returns:
        CollectedSubmission; the persisted draft is not modified

    Unknown field names are ignored. Unparseable checkbox values keep the
    persisted value.
    """
    merged = {**default_fields(), **persisted.fields}
    changed = []

    for name in FIELDS_BY_NAME:
        if name not in submitted:
            continue
        try:
            value = _coerce(name, submitted[name])
        except ValueError:
            logger.warning(f"Ignoring unparseable value for {name} on partner {persisted.partner_id}")
            continue
        if merged.get(name) != value:
            changed.append(name)
        merged[name] = value

    ignored = [key for key in submitted if key not in FIELDS_BY_NAME]
    if ignored:
        logger.debug(f"Ignoring unknown profile fields: {ignored}")

    collected_uploads: Dict[str, List[FileUpload]] = {}
    for slot, files in (uploads or {}).items():
        if slot not in SLOTS_BY_NAME:
            logger.debug(f"Ignoring uploads for unknown slot: {slot}")
            continue
        files = [f for f in files if f.filename]
        if files:
            collected_uploads[slot] = files

    return CollectedSubmission(
        draft=replace(persisted, fields=merged),
        uploads=collected_uploads,
        removed_ids={rid for rid in (removed_ids or []) if rid},
        changed_fields=changed,
    )
