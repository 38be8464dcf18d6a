"""Subtitle extraction with mkvextract."""

from dataclasses import replace
from pathlib import Path

from remuxarr.config import ToolsConfig
from remuxarr.core.tools import run_tool
from remuxarr.models.session import WorkSets
from remuxarr.models.track import Track
from remuxarr.utils.logger import get_logger
from remuxarr.utils.naming import sidecar_file_name

logger = get_logger(__name__)


def sidecar_path(container: Path, directory: Path, track: Track) -> Path:
    """Target path for a track extracted from ``container`` into ``directory``."""
    name = sidecar_file_name(
        container,
        track.id,
        track.language,
        track.track_name,
        track.subtitle_format.extension,
    )
    return directory / name


class SubtitleExtractor:
    """Pull subtitle tracks out of a container in a single mkvextract run."""

    def __init__(self, tools: ToolsConfig):
        self.tools = tools

    def plan(self, container: Path, work_dir: Path, work_sets: WorkSets) -> dict[int, Path]:
        """Map track id to target path for every track that must be extracted.

        Covers the tracks selected for extraction plus OCR candidates that are
        not on disk yet. Each track id appears once.
        """
        targets: dict[int, Path] = {}
        for track in work_sets.tracks_to_extract:
            targets.setdefault(track.id, sidecar_path(container, work_dir, track))

        for track in work_sets.subtitles_to_ocr:
            if track.file_path is None and track.id not in targets:
                targets[track.id] = sidecar_path(container, work_dir, track)

        return targets

    def build_command(self, container: Path, targets: dict[int, Path]) -> list[str]:
        cmd = [self.tools.mkvextract, str(container), "tracks"]
        cmd.extend(f"{track_id}:{path}" for track_id, path in targets.items())
        return cmd

    def extract(self, container: Path, work_dir: Path, work_sets: WorkSets) -> WorkSets:
        """Extract the planned tracks into ``work_dir``.

        Every planned track gets its ``file_path`` set, whether or not the
        tool succeeds; later stages check the file exists before using it.

        Args:
            container: Path to the container
            work_dir: Working directory receiving the sidecars
            work_sets: Current work sets

        Returns:
            Work sets with file paths assigned
        """
        targets = self.plan(container, work_dir, work_sets)
        if not targets:
            logger.debug("Nothing to extract", file=str(container))
            return work_sets

        logger.info(
            "Extracting subtitle tracks",
            file=str(container),
            tracks=list(targets),
        )

        result = run_tool(
            self.build_command(container, targets),
            timeout=self.tools.extract_timeout,
        )

        if not result.ok:
            logger.error(
                "mkvextract failed",
                file=str(container),
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        else:
            logger.info("Subtitle tracks extracted", file=str(container), count=len(targets))

        def assign(track: Track) -> Track:
            if track.file_path is None and track.id in targets:
                return track.with_file(targets[track.id])
            return track

        return replace(
            work_sets,
            tracks_to_extract=tuple(assign(t) for t in work_sets.tracks_to_extract),
            subtitles_to_ocr=tuple(assign(t) for t in work_sets.subtitles_to_ocr),
        )
