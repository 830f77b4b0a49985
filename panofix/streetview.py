"""Street View upload requirements that do not depend on GPano metadata.

The Street View Publish API accepts 360° photos that are:
- JPEG
- at most 75 MB
- at least 3840x1920 pixels
- 2:1 (equirectangular aspect ratio)

These are checked from the file name, file size and SOF dimensions only,
without decoding the image.
"""

from __future__ import annotations

from pathlib import PurePath

from panofix.constants import (
    ASPECT_RATIO,
    ASPECT_RATIO_TOLERANCE,
    JPEG_EXTENSIONS,
    MAX_FILE_SIZE,
    MIN_HEIGHT,
    MIN_WIDTH,
)
from panofix.jpeg.scanner import ImageDimensions


def check_requirements(
    *,
    file_name: str,
    file_size: int,
    dimensions: ImageDimensions | None,
) -> list[str]:
    """Check a file against the Street View upload requirements.

    Args:
        file_name: Name of the file; only its extension is used.
        file_size: Size in bytes.
        dimensions: Frame size, or None if it could not be read. Missing
            dimensions are reported by validation, not here.

    Returns:
        List of error messages; empty if the file meets every requirement.
    """
    errors: list[str] = []

    if PurePath(file_name).suffix.lower() not in JPEG_EXTENSIONS:
        errors.append("File must be a JPEG image.")

    if file_size > MAX_FILE_SIZE:
        errors.append(f"File size exceeds the limit of {MAX_FILE_SIZE // (1024 * 1024)} MB.")

    if dimensions is not None:
        width, height = dimensions.width, dimensions.height
        if width < MIN_WIDTH or height < MIN_HEIGHT:
            errors.append(
                f"Resolution too low. At least {MIN_WIDTH}×{MIN_HEIGHT} required "
                f"(Current: {width}×{height})."
            )

        ratio = width / height
        if abs(ratio - ASPECT_RATIO) > ASPECT_RATIO_TOLERANCE:
            errors.append(f"Aspect ratio must be 2:1 (Current: {ratio:.2f}:1).")

    return errors
