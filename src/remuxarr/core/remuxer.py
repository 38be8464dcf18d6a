"""Container rebuild with mkvmerge and commit over the original file."""

import shutil
from pathlib import Path
from typing import Iterable

from remuxarr.config import ToolsConfig
from remuxarr.core.tools import run_tool
from remuxarr.models.session import WorkSets
from remuxarr.models.track import TrackKind
from remuxarr.utils.logger import get_logger

logger = get_logger(__name__)

# mkvmerge prints this once the output file is complete
COMPLETION_MARKER = "multiplexing took"


def _exclusion(ids: Iterable[int]) -> str:
    return "!" + ",".join(str(i) for i in ids)


class ContainerRemuxer:
    """Rebuild a container without stripped tracks and with merged subtitles.

    Process:
    1. mkvmerge writes the new container into the working directory
    2. Success requires exit code 0 and the completion marker on stdout
    3. The result is copied next to the original under a temporary name
    4. Atomic replace of the original with the copy
    5. The working copy is removed
    """

    def __init__(self, tools: ToolsConfig):
        self.tools = tools

    def build_command(
        self,
        container: Path,
        output: Path,
        work_sets: WorkSets,
        removed_subtitles: list[int],
    ) -> list[str]:
        """Build the mkvmerge command.

        Args:
            container: Source container
            output: Destination inside the working directory
            work_sets: Current work sets
            removed_subtitles: Extra subtitle ids to drop (extracted tracks)

        Returns:
            Command list for subprocess
        """
        cmd = [self.tools.mkvmerge, "-o", str(output)]

        audio_ids = work_sets.stripped_ids(TrackKind.AUDIO)
        if audio_ids:
            cmd.extend(["-a", _exclusion(audio_ids)])

        subtitle_ids = work_sets.stripped_ids(TrackKind.SUBTITLE)
        subtitle_ids += [i for i in removed_subtitles if i not in subtitle_ids]
        if subtitle_ids:
            cmd.extend(["-s", _exclusion(subtitle_ids)])

        cmd.append(str(container))
        cmd.extend(str(track.file_path) for track in work_sets.tracks_to_merge)
        return cmd

    def remux(
        self,
        container: Path,
        work_dir: Path,
        work_sets: WorkSets,
        removed_subtitles: list[int],
    ) -> bool:
        """Rebuild ``container`` and replace it in place.

        The original file is only touched once mkvmerge has reported a
        complete output.

        Returns:
            True if the original was replaced, False otherwise
        """
        output = work_dir / container.name
        cmd = self.build_command(container, output, work_sets, removed_subtitles)

        logger.info(
            "Remuxing container",
            file=str(container),
            strip_audio=work_sets.stripped_ids(TrackKind.AUDIO),
            strip_subtitles=work_sets.stripped_ids(TrackKind.SUBTITLE),
            removed_subtitles=removed_subtitles,
            merge=[str(t.file_path) for t in work_sets.tracks_to_merge],
        )

        result = run_tool(cmd, timeout=self.tools.mux_timeout)

        if not result.ok or COMPLETION_MARKER not in result.stdout.lower():
            logger.error(
                "mkvmerge failed",
                file=str(container),
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
            return False

        if not output.exists():
            logger.error("mkvmerge did not create output file", file=str(container))
            return False

        return self.commit(output, container)

    def commit(self, built: Path, container: Path) -> bool:
        """Move a freshly built container over the original path."""
        temp_file = container.parent / f".{container.name}.tmp"

        try:
            shutil.copyfile(built, temp_file)
            temp_file.replace(container)
        except OSError as e:
            logger.error(
                "Failed to replace original container",
                file=str(container),
                error=str(e),
            )
            self._cleanup_files([temp_file])
            return False

        self._cleanup_files([built])
        logger.info(
            "Replaced original with remuxed file",
            file=str(container),
            new_mb=round(container.stat().st_size / 1024 / 1024, 2),
        )
        return True

    def _cleanup_files(self, files: list[Path]) -> None:
        for file in files:
            try:
                file.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Failed to cleanup file", file=str(file), error=str(e))
