"""Shared pytest fixtures for remuxarr tests."""

from pathlib import Path

import pytest

from remuxarr.config import Config, ExtractMode, OCRMode, RemuxPolicy, StripMode
from remuxarr.models.file import ContainerType
from remuxarr.models.session import Inventory
from remuxarr.models.track import TrackKind, TriState

from helpers import make_track


@pytest.fixture
def policy():
    """Policy with every stage enabled."""
    return RemuxPolicy(
        whitelisted_languages=["eng"],
        keep_default_track=True,
        strip_mode=StripMode.STRIP_BOTH,
        extract_mode=ExtractMode.EXTRACT_ONLY,
        extract_only_text_subs=True,
        ocr_mode=OCRMode.TESSERACT,
        ocr_always=False,
    )


@pytest.fixture
def config(policy):
    return Config(policy=policy)


@pytest.fixture
def container(tmp_path) -> Path:
    """A fake Matroska file."""
    path = tmp_path / "Movie.mkv"
    path.write_bytes(b"original container")
    return path


@pytest.fixture
def sample_inventory():
    """Video with mixed audio and subtitle tracks."""
    return Inventory(
        container=ContainerType.MKV,
        tracks=(
            make_track(1, TrackKind.AUDIO, "AAC", "eng", is_default=TriState.TRUE),
            make_track(2, TrackKind.AUDIO, "AC-3", "spa", is_default=TriState.FALSE),
            make_track(3, codec="SubRip/SRT", language="eng", track_name=".English"),
            make_track(4, codec="HDMV PGS", language="eng"),
            make_track(5, codec="SubRip/SRT", language="fre"),
            make_track(6, codec="VobSub", language="ger"),
        ),
    )
