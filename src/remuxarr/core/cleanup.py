"""Final placement of sidecars and removal of the working directory."""

import shutil
from pathlib import Path

from remuxarr.core.workspace import WorkingArea
from remuxarr.models.session import SessionState
from remuxarr.models.track import Track
from remuxarr.utils.logger import get_logger
from remuxarr.utils.naming import companion_files

logger = get_logger(__name__)


def _unique(paths) -> list[Path]:
    seen: dict[Path, None] = {}
    for path in paths:
        if path is not None:
            for file in companion_files(path):
                seen.setdefault(file, None)
    return list(seen)


class SessionCleanup:
    """Move surviving sidecars next to the container and drop the rest."""

    def __init__(self, container: Path, area: WorkingArea):
        self.container = container
        self.area = area

    def merged(self, state: SessionState) -> tuple[Track, ...]:
        """Tracks now inside the container; empty unless the remux was committed."""
        return state.work_sets.tracks_to_merge if state.committed else ()

    def keep_list(self, state: SessionState) -> list[Path]:
        """Sidecars the user asked for: extracted tracks and OCR output not merged."""
        merged = set(self.merged(state))
        return _unique(
            [t.file_path for t in state.work_sets.tracks_to_extract]
            + [t.file_path for t in state.converted if t not in merged]
        )

    def discard_list(self, state: SessionState) -> list[Path]:
        """Working files with no further use."""
        return _unique(
            [t.file_path for t in self.merged(state)]
            + [t.file_path for t in state.work_sets.subtitles_to_ocr]
            + list(state.intermediates)
            + [state.remux_output]
        )

    def run(self, state: SessionState) -> list[Path]:
        """Relocate and delete working files, then remove the directory.

        Nothing here raises; failures are logged and leave files in the
        working directory.

        Returns:
            Final paths of the relocated sidecars
        """
        keep = self.keep_list(state)
        keep_set = set(keep)

        for path in self.discard_list(state):
            if path in keep_set or not self.area.contains(path):
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Failed to delete working file", file=str(path), error=str(e))

        relocated = []
        for path in keep:
            if not self.area.contains(path) or not path.exists():
                continue
            target = self.container.parent / path.name
            try:
                shutil.move(str(path), str(target))
            except OSError as e:
                logger.error(
                    "Failed to relocate sidecar",
                    source=str(path),
                    target=str(target),
                    error=str(e),
                )
                continue
            relocated.append(target)
            logger.info("Sidecar saved", file=str(target))

        self.area.remove()
        return relocated
