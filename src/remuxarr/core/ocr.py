"""Concurrent OCR of image subtitles with SubtitleEdit."""

import asyncio
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from remuxarr.config import ExtractMode, RemuxPolicy, ToolsConfig
from remuxarr.core.tools import run_tool_async
from remuxarr.models.session import WorkSets
from remuxarr.models.track import Track
from remuxarr.utils.logger import get_logger

logger = get_logger(__name__)


def ocr_output_path(source: Path) -> Path:
    """SubtitleEdit writes its SubRip output next to the input."""
    return source.with_suffix(".srt")


@dataclass(frozen=True)
class OCRBatchResult:
    """Outcome of converting every OCR candidate of one container."""

    work_sets: WorkSets
    converted: tuple[Track, ...] = ()
    intermediates: tuple[Path, ...] = ()  # Inputs of successful conversions


class SubtitleOCR:
    """Convert image subtitles to SubRip, one process per track."""

    def __init__(self, tools: ToolsConfig, policy: RemuxPolicy):
        """Initialize OCR stage.

        Args:
            tools: External tool configuration
            policy: Track handling policy
        """
        self.tools = tools
        self.policy = policy

    def build_command(self, source: Path) -> list[str]:
        return [self.tools.subtitleedit, "/convert", str(source), "subrip"]

    async def convert(self, track: Track) -> Optional[Track]:
        """Convert one subtitle track.

        Returns:
            The track pointing at its SubRip output, or None if the
            conversion failed or its output is missing
        """
        source = track.file_path
        if source is None or not source.exists():
            logger.warning(
                "Subtitle file missing, skipping OCR",
                track_id=track.id,
                file=str(source) if source else None,
            )
            return None

        logger.info("Running OCR", track_id=track.id, file=str(source))
        result = await run_tool_async(self.build_command(source), timeout=self.tools.ocr_timeout)

        if not result.ok:
            logger.error(
                "SubtitleEdit failed",
                track_id=track.id,
                file=str(source),
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
            return None

        output = ocr_output_path(source)
        if not output.exists():
            logger.error("OCR output does not exist", track_id=track.id, expected=str(output))
            return None

        logger.info("OCR complete", track_id=track.id, output=str(output))
        return track.with_file(output)

    async def convert_all(self, work_sets: WorkSets) -> OCRBatchResult:
        """Convert every OCR candidate concurrently.

        All conversions are started before any is awaited and the call
        returns once every one of them has finished. Converted tracks are
        queued for merging only when extraction is disabled.
        """
        candidates = work_sets.subtitles_to_ocr
        if not candidates:
            return OCRBatchResult(work_sets=work_sets)

        logger.info("Starting OCR batch", count=len(candidates), engine=self.policy.ocr_mode.value)

        results = await asyncio.gather(
            *(self.convert(track) for track in candidates), return_exceptions=True
        )

        outcomes = []
        for track, result in zip(candidates, results):
            if isinstance(result, BaseException):
                logger.error("OCR failed", track_id=track.id, error=repr(result))
                result = None
            outcomes.append(result)

        converted = tuple(t for t in outcomes if t is not None)
        intermediates = tuple(
            original.file_path
            for original, outcome in zip(candidates, outcomes)
            if outcome is not None and original.file_path != outcome.file_path
        )
        updated = tuple(
            outcome if outcome is not None else original
            for original, outcome in zip(candidates, outcomes)
        )

        new_sets = replace(work_sets, subtitles_to_ocr=updated)
        if self.policy.extract_mode is ExtractMode.NONE:
            new_sets = new_sets.with_merged(converted)

        logger.info(
            "OCR batch finished",
            converted=len(converted),
            failed=len(candidates) - len(converted),
        )

        return OCRBatchResult(
            work_sets=new_sets,
            converted=converted,
            intermediates=intermediates,
        )
