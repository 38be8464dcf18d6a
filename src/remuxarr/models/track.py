"""Track data models."""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional


class TrackKind(Enum):
    """Kinds of tracks handled by the pipeline."""

    AUDIO = "audio"
    SUBTITLE = "subtitles"


class TriState(Enum):
    """Track flag as read from the container: set, cleared or absent."""

    UNKNOWN = "unknown"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def from_optional(cls, value: Optional[bool]) -> "TriState":
        if value is None:
            return cls.UNKNOWN
        return cls.TRUE if value else cls.FALSE

    @property
    def is_true(self) -> bool:
        return self is TriState.TRUE


class SubtitleFormat(Enum):
    """Subtitle payload family, used to choose sidecar extensions."""

    TEXT = "srt"
    VOBSUB = "sub"  # Image based, format A
    PGS = "sup"  # Image based, format B
    UNKNOWN = "unknown"

    @classmethod
    def from_codec(cls, codec: Optional[str]) -> "SubtitleFormat":
        """Classify a codec label reported by mkvmerge.

        Anything that is not one of the two image families counts as text.
        """
        label = (codec or "").lower()
        if "vobsub" in label:
            return cls.VOBSUB
        if "pgs" in label:
            return cls.PGS
        return cls.TEXT

    @classmethod
    def from_extension(cls, extension: str) -> "SubtitleFormat":
        """Map a sidecar file extension back to a format."""
        ext = extension.lower().lstrip(".")
        if ext in ("srt", "ass", "ssa"):
            return cls.TEXT
        if ext == "sub":
            return cls.VOBSUB
        if ext == "sup":
            return cls.PGS
        return cls.UNKNOWN

    @property
    def extension(self) -> str:
        return self.value

    @property
    def is_image(self) -> bool:
        return self in (SubtitleFormat.VOBSUB, SubtitleFormat.PGS)


# Codec labels assigned to tracks rebuilt from sidecar files
SIDECAR_CODECS = {
    SubtitleFormat.TEXT: "Text",
    SubtitleFormat.VOBSUB: "VobSub",
    SubtitleFormat.PGS: "HDMV PGS",
}


@dataclass(frozen=True)
class Track:
    """A media stream inside a container, or a standalone sidecar file."""

    id: int  # Track id assigned by mkvmerge
    kind: TrackKind
    codec: str
    language: str  # Compared verbatim against the whitelist
    track_name: str = ""  # Sanitized, with its leading "." marker
    file_path: Optional[Path] = None  # Set once materialized on disk
    is_default: TriState = TriState.UNKNOWN
    is_forced: TriState = TriState.UNKNOWN
    is_original: TriState = TriState.UNKNOWN

    def __post_init__(self) -> None:
        if self.file_path is not None and self.kind is not TrackKind.SUBTITLE:
            raise ValueError(f"Only subtitle tracks can be materialized on disk (track {self.id})")

    @property
    def subtitle_format(self) -> SubtitleFormat:
        return SubtitleFormat.from_codec(self.codec)

    @property
    def is_text_subtitle(self) -> bool:
        return self.kind is TrackKind.SUBTITLE and not self.subtitle_format.is_image

    @property
    def is_image_subtitle(self) -> bool:
        return self.kind is TrackKind.SUBTITLE and self.subtitle_format.is_image

    @property
    def is_flagged(self) -> bool:
        """True when any of default, forced or original is explicitly set."""
        return self.is_default.is_true or self.is_forced.is_true or self.is_original.is_true

    def with_file(self, file_path: Path) -> "Track":
        return replace(self, file_path=file_path)

    def __str__(self) -> str:
        """Human-readable representation."""
        default_marker = " [DEFAULT]" if self.is_default.is_true else ""
        name_part = f" ({self.track_name.lstrip('.')})" if self.track_name else ""
        return f"Track {self.id}: {self.kind.value} {self.language} {self.codec}{name_part}{default_marker}"
