"""Unit tests for the concurrent OCR stage."""

import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from remuxarr.config import ExtractMode, OCRMode, RemuxPolicy, ToolsConfig
from remuxarr.core.ocr import SubtitleOCR, ocr_output_path
from remuxarr.models.session import WorkSets

from helpers import make_track, tool_result


def image_track(track_id, directory, codec="HDMV PGS"):
    path = directory / f"Movie.{track_id}.eng.sup"
    path.write_bytes(b"image subtitle")
    return make_track(track_id, codec=codec, file_path=path)


def fake_subtitleedit(fail_ids=(), skip_output_ids=()):
    """Async stand-in for run_tool_async that writes SubRip output."""

    async def run(cmd, timeout):
        source = Path(cmd[2])
        track_id = int(source.name.split(".")[1])
        await asyncio.sleep(0)
        if track_id in fail_ids:
            return tool_result(returncode=1, stderr="OCR engine crashed")
        if track_id not in skip_output_ids:
            ocr_output_path(source).write_text("1\n00:00:01,000 --> 00:00:02,000\nHi\n")
        return tool_result()

    return run


@pytest.fixture
def ocr_policy():
    return RemuxPolicy(ocr_mode=OCRMode.TESSERACT, extract_mode=ExtractMode.NONE)


class TestSubtitleOCR:
    """Test SubtitleOCR class."""

    def test_command(self, ocr_policy, tmp_path):
        ocr = SubtitleOCR(ToolsConfig(), ocr_policy)

        assert ocr.build_command(tmp_path / "a.sup") == [
            "subtitleedit",
            "/convert",
            str(tmp_path / "a.sup"),
            "subrip",
        ]

    @pytest.mark.asyncio
    async def test_successful_ocr_merged_without_extraction(self, ocr_policy, tmp_path):
        track = image_track(4, tmp_path)
        ocr = SubtitleOCR(ToolsConfig(), ocr_policy)

        with patch("remuxarr.core.ocr.run_tool_async", side_effect=fake_subtitleedit()):
            batch = await ocr.convert_all(WorkSets(subtitles_to_ocr=(track,)))

        converted = batch.converted[0]
        assert converted.file_path == tmp_path / "Movie.4.eng..srt"
        assert batch.work_sets.tracks_to_merge == (converted,)
        assert batch.work_sets.subtitles_to_ocr == (converted,)
        assert batch.intermediates == (tmp_path / "Movie.4.eng..sup",)

    @pytest.mark.asyncio
    async def test_not_merged_when_extracting(self, tmp_path):
        policy = RemuxPolicy(ocr_mode=OCRMode.NOCR, extract_mode=ExtractMode.EXTRACT_ONLY)
        ocr = SubtitleOCR(ToolsConfig(), policy)

        with patch("remuxarr.core.ocr.run_tool_async", side_effect=fake_subtitleedit()):
            batch = await ocr.convert_all(WorkSets(subtitles_to_ocr=(image_track(4, tmp_path),)))

        assert len(batch.converted) == 1
        assert batch.work_sets.tracks_to_merge == ()

    @pytest.mark.asyncio
    async def test_failures_are_dropped(self, ocr_policy, tmp_path):
        tracks = (image_track(3, tmp_path), image_track(4, tmp_path), image_track(5, tmp_path))
        ocr = SubtitleOCR(ToolsConfig(), ocr_policy)

        fake = fake_subtitleedit(fail_ids={3}, skip_output_ids={5})
        with patch("remuxarr.core.ocr.run_tool_async", side_effect=fake):
            batch = await ocr.convert_all(WorkSets(subtitles_to_ocr=tracks))

        assert [t.id for t in batch.converted] == [4]
        assert [t.id for t in batch.work_sets.tracks_to_merge] == [4]
        # Failed tracks keep pointing at their input
        assert batch.work_sets.subtitles_to_ocr[0].file_path == tmp_path / "Movie.3.eng..sup"

    @pytest.mark.asyncio
    async def test_missing_input_skips_tool(self, ocr_policy, tmp_path):
        track = make_track(4, codec="HDMV PGS", file_path=tmp_path / "Movie.4.eng..sup")
        ocr = SubtitleOCR(ToolsConfig(), ocr_policy)

        with patch("remuxarr.core.ocr.run_tool_async") as mock_run:
            batch = await ocr.convert_all(WorkSets(subtitles_to_ocr=(track,)))

        mock_run.assert_not_called()
        assert batch.converted == ()

    @pytest.mark.asyncio
    async def test_all_conversions_run_concurrently(self, ocr_policy, tmp_path):
        tracks = tuple(image_track(i, tmp_path) for i in range(3, 7))
        ocr = SubtitleOCR(ToolsConfig(), ocr_policy)
        started = 0
        all_started = asyncio.Event()

        async def run(cmd, timeout):
            nonlocal started
            started += 1
            if started == len(tracks):
                all_started.set()
            # Only completes if every conversion was launched before any finished
            await asyncio.wait_for(all_started.wait(), timeout=5)
            ocr_output_path(Path(cmd[2])).write_text("ok")
            return tool_result()

        with patch("remuxarr.core.ocr.run_tool_async", side_effect=run):
            batch = await ocr.convert_all(WorkSets(subtitles_to_ocr=tracks))

        assert len(batch.converted) == 4

    @pytest.mark.asyncio
    async def test_empty_batch(self, ocr_policy):
        work_sets = WorkSets()

        batch = await SubtitleOCR(ToolsConfig(), ocr_policy).convert_all(work_sets)

        assert batch.work_sets is work_sets

    @pytest.mark.asyncio
    async def test_unexpected_error_waits_for_other_tracks(self, ocr_policy, tmp_path):
        tracks = (image_track(3, tmp_path), image_track(4, tmp_path))
        ocr = SubtitleOCR(ToolsConfig(), ocr_policy)
        finished = []

        async def run(cmd, timeout):
            source = Path(cmd[2])
            if source.name.startswith("Movie.3."):
                raise RuntimeError("SubtitleEdit crashed")
            await asyncio.sleep(0.01)
            ocr_output_path(source).write_text("ok")
            finished.append(source.name)
            return tool_result()

        with patch("remuxarr.core.ocr.run_tool_async", side_effect=run):
            batch = await ocr.convert_all(WorkSets(subtitles_to_ocr=tracks))

        assert finished == ["Movie.4.eng..sup"]
        assert [t.id for t in batch.converted] == [4]
        assert batch.work_sets.subtitles_to_ocr[0].file_path == tmp_path / "Movie.3.eng..sup"
