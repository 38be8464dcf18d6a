"""Sidecar file naming.

Sidecars are written as ``<container-stem>.<track-id>.<language>.<name>.<ext>``
where ``<name>`` is the sanitized track name. The sanitized name carries its
own leading dot, so a named track yields ``Movie.3.eng..English.srt`` and an
unnamed one ``Movie.3.eng..srt``. The same layout is parsed back when a later
run looks for sidecars a previous run left behind.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

NAME_MARKER = "."

# mkvextract writes VobSub tracks as a .sub/.idx pair
VOBSUB_EXTENSION = "sub"
VOBSUB_INDEX_EXTENSION = "idx"


def sanitize_track_name(name: Optional[str]) -> str:
    """Make a track name safe for use inside a file name.

    Invalid characters become spaces and the result is prefixed with the
    name marker. Missing or empty names yield an empty string.
    """
    if not name:
        return ""
    return NAME_MARKER + _INVALID_FILENAME_CHARS.sub(" ", name)


def sidecar_file_name(container: Path, track_id: int, language: str, track_name: str, extension: str) -> str:
    return f"{container.stem}.{track_id}.{language}.{track_name}.{extension}"


def companion_files(path: Path) -> list[Path]:
    """A sidecar plus the files that must travel with it."""
    if path.suffix == f".{VOBSUB_EXTENSION}":
        return [path, path.with_suffix(f".{VOBSUB_INDEX_EXTENSION}")]
    return [path]


@dataclass(frozen=True)
class SidecarName:
    """Fields recovered from a sidecar file name."""

    track_id: int
    language: str
    track_name: str  # Sanitized form, including the marker
    extension: str


def parse_sidecar_name(container: Path, file_name: str) -> Optional[SidecarName]:
    """Parse a sidecar file name that belongs to ``container``.

    Returns None for files that do not follow the naming layout, including
    the container itself. The id and language are read from the front and
    the extension from the back; the field left in between is the sanitized
    track name, empty for unnamed tracks. Dots inside the name are kept.
    """
    prefix = f"{container.stem}."
    if not file_name.startswith(prefix):
        return None

    parts = file_name[len(prefix):].split(".")
    if len(parts) < 4:
        return None

    track_id, language, *name_parts, extension = parts
    if not track_id.isdigit() or not language or not extension:
        return None

    track_name = ".".join(name_parts)
    if track_name and not track_name.startswith(NAME_MARKER):
        return None

    return SidecarName(
        track_id=int(track_id),
        language=language,
        track_name=track_name,
        extension=extension,
    )
