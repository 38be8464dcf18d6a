"""Decide what to strip, extract, OCR and merge for one container."""

from remuxarr.config import ExtractMode, OCRMode, RemuxPolicy
from remuxarr.models.session import Inventory, WorkSets
from remuxarr.models.track import Track, TrackKind
from remuxarr.utils.logger import get_logger

logger = get_logger(__name__)


def should_strip(track: Track, policy: RemuxPolicy) -> bool:
    """Whether a track is removed from the rebuilt container.

    Tracks in a whitelisted language are kept. With ``keep_default_track``,
    tracks flagged default, forced or original are kept too. Unknown flags
    do not count as set.
    """
    if track.kind is TrackKind.AUDIO and not policy.strips_audio:
        return False
    if track.kind is TrackKind.SUBTITLE and not policy.strips_subtitles:
        return False
    if policy.is_whitelisted(track.language):
        return False
    if policy.keep_default_track and track.is_flagged:
        return False
    return True


def should_extract(track: Track, policy: RemuxPolicy) -> bool:
    """Whether a subtitle track is written out as a sidecar file."""
    if track.kind is not TrackKind.SUBTITLE:
        return False
    if policy.extract_mode is ExtractMode.NONE:
        return False
    if not policy.is_whitelisted(track.language):
        return False
    return not policy.extract_only_text_subs or track.is_text_subtitle


def should_ocr(track: Track, policy: RemuxPolicy) -> bool:
    """Whether a subtitle track is converted to text with OCR."""
    if track.kind is not TrackKind.SUBTITLE:
        return False
    if policy.ocr_mode is OCRMode.NONE:
        return False
    if not policy.is_whitelisted(track.language):
        return False
    return track.is_image_subtitle or policy.ocr_always


class DecisionEngine:
    """Turn a track inventory into work sets according to a policy."""

    def __init__(self, policy: RemuxPolicy):
        """Initialize decision engine.

        Args:
            policy: Track handling policy
        """
        self.policy = policy

    def decide(self, inventory: Inventory) -> WorkSets:
        """Build the work sets for a container.

        Container tracks are evaluated for stripping, extraction and OCR.
        Sidecars found on disk are only evaluated for OCR. Each set keeps
        inventory order, container tracks first.

        Args:
            inventory: Tracks of the container and its existing sidecars

        Returns:
            Work sets; ``tracks_to_merge`` starts out empty
        """
        policy = self.policy

        to_strip = [t for t in inventory.tracks if should_strip(t, policy)]
        to_extract = [t for t in inventory.tracks if should_extract(t, policy)]

        resident = [t for t in inventory.sidecars if should_ocr(t, policy)]
        resident_ids = {t.id for t in resident}

        # A sidecar already on disk replaces extracting the same track again
        embedded = [
            t for t in inventory.tracks
            if should_ocr(t, policy) and t.id not in resident_ids
        ]

        work_sets = WorkSets(
            tracks_to_strip=tuple(to_strip),
            tracks_to_extract=tuple(to_extract),
            subtitles_to_ocr=tuple(embedded + resident),
        )

        logger.debug("Work sets decided", **work_sets.summary())
        return work_sets
