"""Tests for the Street View upload requirement checks."""

from __future__ import annotations

import pytest

from panofix.constants import MAX_FILE_SIZE
from panofix.jpeg.scanner import ImageDimensions
from panofix.streetview import check_requirements


@pytest.mark.unit
def test_minimum_pano_passes() -> None:
    errors = check_requirements(
        file_name="pano.JPG", file_size=1024, dimensions=ImageDimensions(3840, 1920)
    )

    assert errors == []


@pytest.mark.unit
def test_wrong_extension() -> None:
    errors = check_requirements(
        file_name="pano.png", file_size=1024, dimensions=ImageDimensions(4096, 2048)
    )

    assert errors == ["File must be a JPEG image."]


@pytest.mark.unit
def test_file_too_large() -> None:
    errors = check_requirements(
        file_name="pano.jpeg",
        file_size=MAX_FILE_SIZE + 1,
        dimensions=ImageDimensions(4096, 2048),
    )

    assert errors == ["File size exceeds the limit of 75 MB."]


@pytest.mark.unit
def test_exactly_max_size_passes() -> None:
    errors = check_requirements(
        file_name="pano.jpg", file_size=MAX_FILE_SIZE, dimensions=ImageDimensions(4096, 2048)
    )

    assert errors == []


@pytest.mark.unit
def test_low_resolution() -> None:
    errors = check_requirements(
        file_name="pano.jpg", file_size=1024, dimensions=ImageDimensions(2000, 1000)
    )

    assert errors == ["Resolution too low. At least 3840×1920 required (Current: 2000×1000)."]


@pytest.mark.unit
@pytest.mark.parametrize(("width", "height"), [(4096, 2000), (6000, 2048)])
def test_wrong_aspect_ratio(width: int, height: int) -> None:
    errors = check_requirements(
        file_name="pano.jpg", file_size=1024, dimensions=ImageDimensions(width, height)
    )

    assert len(errors) == 1
    assert errors[0].startswith("Aspect ratio must be 2:1")


@pytest.mark.unit
def test_aspect_ratio_within_tolerance() -> None:
    # 4100 / 2048 = 2.0020
    errors = check_requirements(
        file_name="pano.jpg", file_size=1024, dimensions=ImageDimensions(4100, 2048)
    )

    assert errors == []


@pytest.mark.unit
def test_unknown_dimensions_skip_size_checks() -> None:
    assert check_requirements(file_name="pano.jpg", file_size=10, dimensions=None) == []
