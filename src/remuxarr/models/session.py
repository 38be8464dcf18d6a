"""Per-file session state models.

Every stage of the pipeline receives one of these snapshots and returns a new
one. Nothing here is mutated in place.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Optional

from remuxarr.models.file import ContainerType
from remuxarr.models.track import Track, TrackKind


@dataclass(frozen=True)
class Inventory:
    """Tracks found inside a container plus sidecars already beside it."""

    container: ContainerType
    tracks: tuple[Track, ...] = ()
    sidecars: tuple[Track, ...] = ()

    def of_kind(self, kind: TrackKind) -> tuple[Track, ...]:
        return tuple(t for t in self.tracks if t.kind is kind)


@dataclass(frozen=True)
class WorkSets:
    """What to do with the tracks of one container."""

    tracks_to_strip: tuple[Track, ...] = ()
    tracks_to_extract: tuple[Track, ...] = ()
    subtitles_to_ocr: tuple[Track, ...] = ()
    tracks_to_merge: tuple[Track, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (
            self.tracks_to_strip
            or self.tracks_to_extract
            or self.subtitles_to_ocr
            or self.tracks_to_merge
        )

    def stripped_ids(self, kind: TrackKind) -> list[int]:
        return [t.id for t in self.tracks_to_strip if t.kind is kind]

    def with_merged(self, tracks: Iterable[Track]) -> "WorkSets":
        return replace(self, tracks_to_merge=self.tracks_to_merge + tuple(tracks))

    def summary(self) -> dict:
        """Track ids per work set, for logging."""
        return {
            "strip": [t.id for t in self.tracks_to_strip],
            "extract": [t.id for t in self.tracks_to_extract],
            "ocr": [t.id for t in self.subtitles_to_ocr],
            "merge": [t.id for t in self.tracks_to_merge],
        }


@dataclass(frozen=True)
class SessionState:
    """Snapshot handed from one pipeline stage to the next."""

    inventory: Inventory
    work_sets: WorkSets = field(default_factory=WorkSets)
    extracted: tuple[Track, ...] = ()  # Tracks whose sidecar was written
    converted: tuple[Track, ...] = ()  # Tracks whose OCR output was verified
    intermediates: tuple[Path, ...] = ()  # OCR inputs superseded by their output
    remux_output: Optional[Path] = None
    remuxed: bool = False
    committed: bool = False
    sidecars: tuple[Path, ...] = ()  # Final locations of saved sidecars
