"""Shared pytest fixtures for panofix tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from jpeg_factory import build_jpeg
from panofix.gpano import GPanoRecord, generate_defaults
from panofix.xmp.builder import build_xmp_packet

# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def _clean_panofix_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep PANOFIX_* variables of the developer's shell out of tests."""
    for key in ("READ_WINDOW", "MAX_WORKERS", "OUTPUT_DIR"):
        monkeypatch.delenv(f"PANOFIX_{key}", raising=False)


# =============================================================================
# GPano records
# =============================================================================


@pytest.fixture
def default_record() -> GPanoRecord:
    """Complete GPano record of a 4096x2048 panorama."""
    return generate_defaults(4096, 2048)


# =============================================================================
# JPEG files
# =============================================================================


@pytest.fixture
def valid_pano_bytes(default_record: GPanoRecord) -> bytes:
    """4096x2048 JPEG carrying a complete GPano packet."""
    return build_jpeg(4096, 2048, xmp=build_xmp_packet(default_record))


@pytest.fixture
def bare_pano_bytes() -> bytes:
    """4096x2048 JPEG without any XMP."""
    return build_jpeg(4096, 2048)


@pytest.fixture
def write_jpeg(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing JPEG bytes to a file under tmp_path.

    Usage:
        path = write_jpeg("pano.jpg", data)
    """

    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def pillow_jpeg(tmp_path: Path) -> Callable[..., Path]:
    """Factory encoding a real, decodable JPEG with Pillow.

    Usage:
        path = pillow_jpeg("pano.jpg", 3840, 1920)
    """

    def _make(name: str, width: int, height: int) -> Path:
        path = tmp_path / name
        image = Image.new("RGB", (width, height), color=(40, 90, 160))
        image.save(path, format="JPEG", quality=70)
        return path

    return _make
