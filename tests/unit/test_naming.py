"""Unit tests for sidecar naming and working directories."""

import hashlib
from pathlib import Path

import pytest

from remuxarr.core.workspace import WorkingArea, working_dir_for
from remuxarr.errors import WorkspaceError
from remuxarr.utils.naming import (
    companion_files,
    parse_sidecar_name,
    sanitize_track_name,
    sidecar_file_name,
)


class TestSanitize:
    def test_marker_and_invalid_chars(self):
        assert sanitize_track_name('Signs: "Songs"/FX') == ".Signs   Songs  FX"
        assert sanitize_track_name("A/B") == ".A B"
        assert sanitize_track_name("What?") == ".What "

    def test_empty_names(self):
        assert sanitize_track_name(None) == ""
        assert sanitize_track_name("") == ""


class TestSidecarNames:
    def test_round_trip_with_name(self):
        container = Path("/media/Movie (2020).mkv")
        name = sidecar_file_name(container, 3, "eng", sanitize_track_name("English SDH"), "srt")

        assert name == "Movie (2020).3.eng..English SDH.srt"

        parsed = parse_sidecar_name(container, name)
        assert parsed.track_id == 3
        assert parsed.language == "eng"
        assert parsed.track_name == ".English SDH"
        assert parsed.extension == "srt"

    def test_round_trip_without_name(self):
        container = Path("/media/Movie.mkv")
        name = sidecar_file_name(container, 4, "jpn", sanitize_track_name(None), "sup")

        assert name == "Movie.4.jpn..sup"
        parsed = parse_sidecar_name(container, name)
        assert (parsed.track_id, parsed.language, parsed.track_name) == (4, "jpn", "")

    def test_dotted_container_and_track_names(self):
        container = Path("/media/Show.S01E01.1080p.mkv")
        name = sidecar_file_name(container, 5, "eng", ".Dr. Who", "srt")

        assert name == "Show.S01E01.1080p.5.eng..Dr. Who.srt"
        parsed = parse_sidecar_name(container, name)
        assert parsed.track_id == 5
        assert parsed.track_name == ".Dr. Who"

    @pytest.mark.parametrize(
        "file_name",
        [
            "Movie.mkv",
            "Movie.eng.srt",
            "Movie.x.eng..srt",
            "Other.3.eng..srt",
            "Movie.3.srt",
            "Movie.3.eng.srt",
            "Movie.3.eng.English.srt",
        ],
    )
    def test_rejects_foreign_files(self, file_name):
        assert parse_sidecar_name(Path("/media/Movie.mkv"), file_name) is None

    def test_vobsub_index_travels_with_sub(self):
        assert companion_files(Path("/w/Movie.3.eng..sub")) == [
            Path("/w/Movie.3.eng..sub"),
            Path("/w/Movie.3.eng..idx"),
        ]
        assert companion_files(Path("/w/Movie.3.eng..sup")) == [Path("/w/Movie.3.eng..sup")]


class TestWorkingArea:
    def test_name_is_deterministic(self, tmp_path):
        container = tmp_path / "Movie.mkv"
        digest = hashlib.sha256(b"Movie").hexdigest()

        assert working_dir_for(container) == tmp_path / f"Movie_{digest}"
        assert working_dir_for(container) == working_dir_for(tmp_path / "Movie.mkv")
        assert working_dir_for(container) != working_dir_for(tmp_path / "Movie2.mkv")

    def test_create_and_remove(self, container):
        area = WorkingArea(container)

        path = area.create()
        assert path.is_dir()
        assert area.contains(path / "file.srt")
        assert not area.contains(container)

        assert area.remove() is True
        assert not path.exists()

    def test_remove_non_empty_is_logged_not_raised(self, container):
        area = WorkingArea(container)
        area.create()
        (area.path / "leftover.sup").write_text("x")

        assert area.remove() is False
        assert area.path.exists()

    def test_create_failure_is_fatal(self, tmp_path):
        area = WorkingArea(tmp_path / "missing" / "Movie.mkv")

        with pytest.raises(WorkspaceError):
            area.create()
