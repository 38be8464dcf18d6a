"""Models for the JSON emitted by ``mkvmerge -i -F json``."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ProbeModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ProbeTrackProperties(_ProbeModel):
    """Per-track properties reported by mkvmerge."""

    language: Optional[str] = None
    track_name: Optional[str] = None
    default_track: Optional[bool] = None
    forced_track: Optional[bool] = None
    flag_original: Optional[bool] = None
    codec_id: Optional[str] = None
    number: Optional[int] = None


class ProbeTrack(_ProbeModel):
    id: int
    type: str
    codec: Optional[str] = None
    properties: ProbeTrackProperties = Field(default_factory=ProbeTrackProperties)


class ProbeAttachment(_ProbeModel):
    id: Optional[int] = None
    content_type: Optional[str] = None
    description: Optional[str] = None
    file_name: Optional[str] = None
    size: Optional[int] = None


class ProbeChapter(_ProbeModel):
    num_entries: Optional[int] = None


class ProbeContainerProperties(_ProbeModel):
    duration: Optional[int] = None
    title: Optional[str] = None


class ProbeContainer(_ProbeModel):
    recognized: bool = False
    supported: bool = False
    type: Optional[str] = None
    properties: ProbeContainerProperties = Field(default_factory=ProbeContainerProperties)


class ProbeOutput(_ProbeModel):
    """Top-level identification result."""

    file_name: Optional[str] = None
    container: ProbeContainer = Field(default_factory=ProbeContainer)
    tracks: List[ProbeTrack] = Field(default_factory=list)
    attachments: List[ProbeAttachment] = Field(default_factory=list)
    chapters: List[ProbeChapter] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
