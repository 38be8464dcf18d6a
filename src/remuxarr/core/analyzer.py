"""Track inventory using mkvmerge identification and sidecar discovery."""

import glob
from pathlib import Path

from pydantic import ValidationError

from remuxarr.config import ToolsConfig
from remuxarr.core.tools import run_tool
from remuxarr.errors import ProbeError
from remuxarr.models.file import ContainerType
from remuxarr.models.probe import ProbeOutput, ProbeTrack
from remuxarr.models.session import Inventory
from remuxarr.models.track import SIDECAR_CODECS, SubtitleFormat, Track, TrackKind, TriState
from remuxarr.utils.logger import get_logger
from remuxarr.utils.naming import parse_sidecar_name, sanitize_track_name

logger = get_logger(__name__)

_TRACK_KINDS = {kind.value: kind for kind in TrackKind}


class TrackAnalyzer:
    """Build the track inventory of a Matroska container."""

    def __init__(self, tools: ToolsConfig):
        """Initialize analyzer.

        Args:
            tools: External tool configuration
        """
        self.tools = tools

    def probe(self, file_path: Path) -> ProbeOutput:
        """Identify a container with ``mkvmerge -i -F json``.

        Args:
            file_path: Path to the container

        Returns:
            Parsed identification output

        Raises:
            FileNotFoundError: If file doesn't exist
            ProbeError: If no usable identification was produced
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        logger.debug("Identifying container", file=str(file_path))

        cmd = [self.tools.mkvmerge, "-i", "-F", "json", str(file_path)]
        result = run_tool(cmd, timeout=self.tools.probe_timeout)

        # mkvmerge still prints JSON on exit code 2, with the reason in errors[]
        if not result.stdout.strip():
            logger.error(
                "mkvmerge identification produced no output",
                file=str(file_path),
                returncode=result.returncode,
                stderr=result.stderr,
            )
            raise ProbeError(f"Could not identify {file_path}")

        try:
            output = ProbeOutput.model_validate_json(result.stdout)
        except ValidationError as e:
            logger.error(
                "Failed to parse mkvmerge output", file=str(file_path), error=str(e)
            )
            raise ProbeError(f"Unparseable identification for {file_path}") from e

        if output.errors:
            logger.warning("mkvmerge reported errors", file=str(file_path), errors=output.errors)

        if not output.container.recognized:
            raise ProbeError(f"Container not recognized: {file_path}")

        return output

    def analyze(self, file_path: Path) -> Inventory:
        """Probe a container and collect sidecars left by earlier runs.

        Raises:
            FileNotFoundError: If file doesn't exist
            ProbeError: If the container cannot be identified
        """
        output = self.probe(file_path)

        tracks = tuple(
            track
            for track in (self._to_track(entry) for entry in output.tracks)
            if track is not None
        )
        sidecars = tuple(self.discover_sidecars(file_path))

        inventory = Inventory(
            container=ContainerType.from_probe(output.container.type),
            tracks=tracks,
            sidecars=sidecars,
        )

        logger.info(
            "Tracks analyzed",
            file=str(file_path),
            container=inventory.container.value,
            audio=[t.language for t in inventory.of_kind(TrackKind.AUDIO)],
            subtitles=[t.language for t in inventory.of_kind(TrackKind.SUBTITLE)],
            sidecars=[t.file_path.name for t in sidecars],
        )

        return inventory

    @staticmethod
    def _to_track(entry: ProbeTrack) -> Track | None:
        kind = _TRACK_KINDS.get(entry.type)
        if kind is None:
            return None

        props = entry.properties
        return Track(
            id=entry.id,
            kind=kind,
            codec=entry.codec or "",
            language=props.language or "",
            track_name=sanitize_track_name(props.track_name),
            is_default=TriState.from_optional(props.default_track),
            is_forced=TriState.from_optional(props.forced_track),
            is_original=TriState.from_optional(props.flag_original),
        )

    def discover_sidecars(self, file_path: Path) -> list[Track]:
        """Find subtitle sidecars next to the container.

        Args:
            file_path: Path to the container

        Returns:
            Subtitle tracks with ``file_path`` set, sorted by file name
        """
        sidecars = []
        for candidate in sorted(file_path.parent.glob(f"{glob.escape(file_path.stem)}.*")):
            if not candidate.is_file():
                continue

            parsed = parse_sidecar_name(file_path, candidate.name)
            if parsed is None:
                continue

            subtitle_format = SubtitleFormat.from_extension(parsed.extension)
            if subtitle_format is SubtitleFormat.UNKNOWN:
                continue

            sidecars.append(
                Track(
                    id=parsed.track_id,
                    kind=TrackKind.SUBTITLE,
                    codec=SIDECAR_CODECS[subtitle_format],
                    language=parsed.language,
                    track_name=parsed.track_name,
                    file_path=candidate,
                )
            )

        if sidecars:
            logger.debug(
                "Found existing sidecars",
                file=str(file_path),
                sidecars=[t.file_path.name for t in sidecars],
            )

        return sidecars
