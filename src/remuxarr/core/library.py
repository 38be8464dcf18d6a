"""Library-wide remux task.

The task pages through a media library, hands every Matroska item to the
pipeline one at a time and reports progress. A cancellation request is
honoured between items; a file that is already being processed always runs
to completion.
"""

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Protocol

from remuxarr.core.pipeline import RemuxPipeline
from remuxarr.core.scanner import FileScanner
from remuxarr.core.workspace import working_dir_for
from remuxarr.models.file import ProcessResult
from remuxarr.utils.logger import get_logger

logger = get_logger(__name__)

QUERY_PAGE_LIMIT = 100

ProgressSink = Callable[[float], None]


@dataclass(frozen=True)
class MediaItem:
    """A library entry: container path and container type label."""

    path: Path
    container: str


class MediaLibrary(Protocol):
    """Paged view of the candidate items of a media library."""

    def get_count(self) -> int: ...

    def get_items(self, start_index: int, limit: int) -> list[MediaItem]: ...


class DirectoryLibrary:
    """Media library backed by a directory scan."""

    def __init__(self, root: Path, recursive: bool = True, scanner: Optional[FileScanner] = None):
        self.root = root
        self.recursive = recursive
        self.scanner = scanner or FileScanner()
        self._items: Optional[list[MediaItem]] = None

    def _load(self) -> list[MediaItem]:
        if self._items is None:
            files = self.scanner.scan(self.root, recursive=self.recursive)
            self._items = [
                MediaItem(path=f, container=f.suffix.lstrip(".").lower())
                for f in files
                if f.parent != working_dir_for(f.parent.parent / f.name)
            ]
        return self._items

    def get_count(self) -> int:
        return len(self._load())

    def get_items(self, start_index: int, limit: int) -> list[MediaItem]:
        return self._load()[start_index:start_index + limit]


@dataclass
class ScanSummary:
    """Per-status counts of a library run."""

    total: int = 0
    counts: dict[str, int] = field(
        default_factory=lambda: {s: 0 for s in ("success", "skipped", "failed", "dry_run", "error")}
    )
    cancelled: bool = False

    def record(self, result: ProcessResult) -> None:
        self.counts[result.status] = self.counts.get(result.status, 0) + 1

    @property
    def has_failures(self) -> bool:
        return self.counts["failed"] > 0 or self.counts["error"] > 0


class LibraryRemuxTask:
    """Process every Matroska item of a library sequentially."""

    def __init__(self, pipeline: RemuxPipeline, library: MediaLibrary, page_limit: int = QUERY_PAGE_LIMIT):
        self.pipeline = pipeline
        self.library = library
        self.page_limit = page_limit

    async def run(
        self,
        progress: Optional[ProgressSink] = None,
        cancel: Optional[threading.Event] = None,
        on_result: Optional[Callable[[MediaItem, ProcessResult], None]] = None,
    ) -> ScanSummary:
        """Run the task.

        Args:
            progress: Receives a completion percentage (0-100) after each item
            cancel: Checked before each item; stops the run once set
            on_result: Called with each item and its result

        Returns:
            Summary of the run
        """
        total = self.library.get_count()
        summary = ScanSummary(total=total)
        completed = 0
        start_index = 0

        logger.info("Library task started", items=total)

        while start_index < total:
            for item in self.library.get_items(start_index, self.page_limit):
                if cancel is not None and cancel.is_set():
                    summary.cancelled = True
                    logger.warning("Library task cancelled", completed=completed, total=total)
                    return summary

                if "mkv" in item.container.lower():
                    result = await self.pipeline.process(item.path)
                else:
                    result = ProcessResult(
                        status="skipped", file_path=item.path, reason="unsupported_container"
                    )

                summary.record(result)
                completed += 1
                if progress is not None:
                    progress(100.0 * completed / total)
                if on_result is not None:
                    on_result(item, result)

            start_index += self.page_limit

        if progress is not None:
            progress(100.0)

        logger.info("Library task finished", total=total, **summary.counts)
        return summary
