"""
Attachment merging.

Works out, per slot, which stored attachments survive a submission, which
uploads will be added and which stored attachments go away. Nothing here
touches storage; the pipeline stores uploads only after validation passes.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from partner_portal.profile.models import AttachmentRef, FileUpload, ProfileDraft
from partner_portal.profile.sections import ATTACHMENT_SLOTS, AttachmentSlot


@dataclass(frozen=True)
class AttachmentPlan:
    """Planned change for one attachment slot."""
    slot: AttachmentSlot
    retained: Tuple[AttachmentRef, ...]
    uploads: Tuple[FileUpload, ...]
    removed: Tuple[AttachmentRef, ...]

    @property
    def is_unchanged(self) -> bool:
        return not self.uploads and not self.removed

    def result(self, stored: Sequence[AttachmentRef]) -> Tuple[AttachmentRef, ...]:
        """
        Final refs for the slot once the uploads are stored.

        Args:
            stored: Refs returned by the file store, same order as uploads
        """
        if len(stored) != len(self.uploads):
            raise ValueError(
                f"Expected {len(self.uploads)} stored refs for {self.slot.name}, got {len(stored)}"
            )
        return self.retained + tuple(stored)


def merge_multi_slot(
    slot: AttachmentSlot,
    persisted: Sequence[AttachmentRef],
    uploads: Sequence[FileUpload],
    removed_ids: Set[str],
) -> AttachmentPlan:
    """Existing refs first (minus removals), new uploads appended in order."""
    retained = tuple(ref for ref in persisted if ref.id not in removed_ids)
    removed = tuple(ref for ref in persisted if ref.id in removed_ids)
    return AttachmentPlan(slot=slot, retained=retained, uploads=tuple(uploads), removed=removed)


def merge_single_slot(
    slot: AttachmentSlot,
    persisted: Sequence[AttachmentRef],
    uploads: Sequence[FileUpload],
    removed_ids: Set[str],
) -> AttachmentPlan:
    """A new upload replaces the stored file; otherwise it is kept unless removed."""
    if uploads:
        # only one file fits; the latest selection wins
        return AttachmentPlan(
            slot=slot,
            retained=(),
            uploads=(uploads[-1],),
            removed=tuple(persisted),
        )

    removed = tuple(ref for ref in persisted if ref.id in removed_ids)
    retained = tuple(ref for ref in persisted if ref.id not in removed_ids)
    return AttachmentPlan(slot=slot, retained=retained, uploads=(), removed=removed)


def plan_attachments(
    draft: ProfileDraft,
    uploads: Mapping[str, Iterable[FileUpload]],
    removed_ids: Set[str],
    slots: Sequence[AttachmentSlot] = ATTACHMENT_SLOTS,
) -> Dict[str, AttachmentPlan]:
    """
    Plan attachment changes for every slot.

    Args:
        draft: Draft carrying the persisted refs
        uploads: New files per slot, in upload order
        removed_ids: Ids of stored attachments the partner removed

    Returns:
        Dict of slot name -> AttachmentPlan, in slot declaration order
    """
    plans = {}
    for slot in slots:
        persisted = draft.attachments_for(slot.name)
        slot_uploads = list(uploads.get(slot.name, []))
        merge = merge_multi_slot if slot.multiple else merge_single_slot
        plans[slot.name] = merge(slot, persisted, slot_uploads, removed_ids)
    return plans


def pending_uploads(plans: Mapping[str, AttachmentPlan]) -> List[Tuple[str, FileUpload]]:
    """(slot, upload) pairs still waiting to be stored, in slot order."""
    return [
        (slot_name, upload)
        for slot_name, plan in plans.items()
        for upload in plan.uploads
    ]
