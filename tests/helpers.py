"""Builders shared by the test modules."""

import json

from remuxarr.core.tools import ToolResult
from remuxarr.models.track import Track, TrackKind, TriState


def make_track(
    track_id,
    kind=TrackKind.SUBTITLE,
    codec="SubRip/SRT",
    language="eng",
    track_name="",
    is_default=TriState.UNKNOWN,
    **kwargs,
):
    """Build a Track with sensible defaults."""
    return Track(
        id=track_id,
        kind=kind,
        codec=codec,
        language=language,
        track_name=track_name,
        is_default=is_default,
        **kwargs,
    )


def tool_result(returncode=0, stdout="", stderr=""):
    return ToolResult(command=["tool"], returncode=returncode, stdout=stdout, stderr=stderr)


def probe_json(tracks, container_type="Matroska", recognized=True):
    """mkvmerge -i -F json style output."""
    return json.dumps(
        {
            "attachments": [],
            "chapters": [],
            "container": {
                "properties": {},
                "recognized": recognized,
                "supported": recognized,
                "type": container_type,
            },
            "errors": [],
            "file_name": "Movie.mkv",
            "global_tags": [],
            "track_tags": [],
            "tracks": tracks,
            "warnings": [],
        }
    )


def probe_track(track_id, track_type, codec, language="eng", name=None, default=None, forced=None, original=None):
    properties = {"language": language, "number": track_id + 1}
    if name is not None:
        properties["track_name"] = name
    if default is not None:
        properties["default_track"] = default
    if forced is not None:
        properties["forced_track"] = forced
    if original is not None:
        properties["flag_original"] = original
    return {"codec": codec, "id": track_id, "type": track_type, "properties": properties}


