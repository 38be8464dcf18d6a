"""Processing pipeline orchestrator."""

import time
from dataclasses import replace
from pathlib import Path

from remuxarr.config import Config, ExtractMode
from remuxarr.core.analyzer import TrackAnalyzer
from remuxarr.core.cleanup import SessionCleanup
from remuxarr.core.decision import DecisionEngine
from remuxarr.core.extractor import SubtitleExtractor
from remuxarr.core.ocr import SubtitleOCR
from remuxarr.core.remuxer import ContainerRemuxer
from remuxarr.core.workspace import WorkingArea
from remuxarr.errors import RemuxError
from remuxarr.models.file import ContainerType, ProcessResult
from remuxarr.models.session import SessionState
from remuxarr.utils.logger import get_logger

logger = get_logger(__name__)


class ContainerSession:
    """All work done on one container file.

    Stages run in order, each taking the current :class:`SessionState` and
    leaving a new one in ``self.state``: extraction, OCR, remux, cleanup.
    """

    def __init__(self, config: Config, file_path: Path, state: SessionState):
        self.config = config
        self.file_path = file_path
        self.area = WorkingArea(file_path)
        self.state = state
        self.extractor = SubtitleExtractor(config.tools)
        self.ocr = SubtitleOCR(config.tools, config.policy)
        self.remuxer = ContainerRemuxer(config.tools)

    async def run(self) -> SessionState:
        """Run every stage.

        Raises:
            WorkspaceError: If the working directory cannot be created
        """
        work_dir = self.area.create()

        work_sets = self.extractor.extract(self.file_path, work_dir, self.state.work_sets)
        self.state = replace(
            self.state,
            work_sets=work_sets,
            extracted=tuple(
                t for t in work_sets.tracks_to_extract
                if t.file_path is not None and t.file_path.exists()
            ),
        )

        batch = await self.ocr.convert_all(self.state.work_sets)
        self.state = replace(
            self.state,
            work_sets=batch.work_sets,
            converted=batch.converted,
            intermediates=batch.intermediates,
        )

        self.remux()

        sidecars = SessionCleanup(self.file_path, self.area).run(self.state)
        self.state = replace(self.state, sidecars=tuple(sidecars))
        return self.state

    def removed_subtitles(self) -> list[int]:
        """Extracted container subtitles to drop in extract-and-remux mode.

        Only tracks whose sidecar actually exists are dropped.
        """
        if self.config.policy.extract_mode is not ExtractMode.EXTRACT_AND_REMUX:
            return []
        return [t.id for t in self.state.extracted]

    def remux(self) -> None:
        work_sets = self.state.work_sets
        removed = self.removed_subtitles()

        if not (work_sets.tracks_to_strip or work_sets.tracks_to_merge or removed):
            logger.info("Container unchanged, skipping remux", file=str(self.file_path))
            return

        committed = self.remuxer.remux(self.file_path, self.area.path, work_sets, removed)
        self.state = replace(
            self.state,
            remux_output=self.area.path / self.file_path.name,
            remuxed=True,
            committed=committed,
        )


class RemuxPipeline:
    """Orchestrates the complete track processing pipeline."""

    def __init__(self, config: Config):
        """Initialize the pipeline with configuration.

        Args:
            config: Application configuration
        """
        self.config = config
        self.analyzer = TrackAnalyzer(config.tools)
        self.decision = DecisionEngine(config.policy)

    async def process(self, file_path: Path) -> ProcessResult:
        """Process a single file through the complete pipeline.

        Pipeline steps:
        1. Validation (file exists, regular file)
        2. Track analysis (mkvmerge identification and existing sidecars)
        3. Decision (work sets from the policy)
        4. Extraction, OCR, remux and cleanup

        Errors that abort the file are returned as ``status="error"`` so a
        library scan can continue with the next file.

        Args:
            file_path: Path to the container

        Returns:
            ProcessResult with status and details
        """
        start_time = time.time()

        logger.info("Processing file", file=str(file_path))

        if not file_path.exists():
            logger.error("File not found", file=str(file_path))
            return ProcessResult(status="error", file_path=file_path, error="File not found")

        if not file_path.is_file():
            logger.error("Not a regular file", file=str(file_path))
            return ProcessResult(status="error", file_path=file_path, error="Not a regular file")

        try:
            inventory = self.analyzer.analyze(file_path)

            if inventory.container is ContainerType.UNSUPPORTED:
                logger.info("Skipping unsupported container", file=str(file_path))
                return ProcessResult(
                    status="skipped", file_path=file_path, reason="unsupported_container"
                )

            work_sets = self.decision.decide(inventory)

            if work_sets.is_empty:
                logger.info("Nothing to do", file=str(file_path))
                return ProcessResult(status="skipped", file_path=file_path, reason="nothing_to_do")

            if self.config.execution.dry_run:
                logger.info("DRY RUN: Would process container", file=str(file_path), **work_sets.summary())
                return ProcessResult(
                    status="dry_run",
                    file_path=file_path,
                    stripped=len(work_sets.tracks_to_strip),
                    extracted=len(work_sets.tracks_to_extract),
                    converted=len(work_sets.subtitles_to_ocr),
                )

            session = ContainerSession(
                self.config, file_path, SessionState(inventory=inventory, work_sets=work_sets)
            )
            state = await session.run()

        except RemuxError as e:
            logger.error("Aborting file", file=str(file_path), error=str(e))
            return ProcessResult(status="error", file_path=file_path, error=str(e))
        except Exception as e:
            logger.exception("Pipeline error", file=str(file_path), error=str(e))
            return ProcessResult(status="error", file_path=file_path, error=str(e))

        duration_ms = int((time.time() - start_time) * 1000)
        final = state.work_sets
        result = ProcessResult(
            status="success",
            file_path=file_path,
            stripped=len(final.tracks_to_strip) if state.committed else 0,
            extracted=len(state.extracted),
            converted=len(state.converted),
            merged=len(final.tracks_to_merge) if state.committed else 0,
            changed=state.committed,
        )

        if state.remuxed and not state.committed:
            result.status = "failed"
            result.reason = "remux_failed"
            logger.error("Remux failed, original left untouched", file=str(file_path))
        else:
            logger.info(
                "File processed successfully",
                file=str(file_path),
                changed=state.committed,
                duration_ms=duration_ms,
                **final.summary(),
            )

        return result
