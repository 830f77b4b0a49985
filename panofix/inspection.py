"""Inspection of a single JPEG buffer.

Runs the segment scanner and the XMP extractor over one buffer and keeps
their failures apart: a corrupt SOF segment must not hide the GPano
record, and a damaged XMP segment must not hide the image size.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from panofix.errors import JpegFormatError
from panofix.gpano import GPanoRecord
from panofix.jpeg.scanner import (
    Buffer,
    ImageDimensions,
    SegmentDescriptor,
    check_soi,
    find_start_of_frame,
    find_xmp_segment,
)
from panofix.xmp.extract import decode_xmp_payload, extract_gpano

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JpegInspection:
    """What could be read from the head of a JPEG.

    Attributes:
        dimensions: Frame size, or None if it could not be read.
        dimension_error: Why the frame size is missing, if it is.
        xmp_segment: Location of the XMP APP1 segment, if any.
        record: GPano record from that segment, if any.
        xmp_error: Why the XMP lookup failed, if it did.
    """

    dimensions: ImageDimensions | None
    dimension_error: str | None
    xmp_segment: SegmentDescriptor | None
    record: GPanoRecord | None
    xmp_error: str | None = None

    @property
    def errors(self) -> list[str]:
        """Structural problems found while inspecting, in a stable order."""
        return [e for e in (self.dimension_error, self.xmp_error) if e is not None]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "dimensions": self.dimensions.to_dict() if self.dimensions else None,
            "xmp_segment": self.xmp_segment.to_dict() if self.xmp_segment else None,
            "gpano": self.record.to_dict() if self.record is not None else None,
            "errors": self.errors,
        }


def inspect_jpeg(buffer: Buffer, *, partial: bool = False) -> JpegInspection:
    """Read dimensions and GPano metadata from a JPEG buffer.

    Args:
        buffer: JPEG bytes, or a leading prefix of them.
        partial: True if ``buffer`` is only a prefix of the file.

    Returns:
        JpegInspection. Malformed segments are recorded, not raised.

    Raises:
        NotAJpegError: If the buffer does not start with SOI; nothing else
            can be read from such a buffer.
    """
    view = memoryview(buffer)
    check_soi(view)

    dimensions: ImageDimensions | None = None
    dimension_error: str | None = None
    try:
        dimensions = find_start_of_frame(view, partial=partial)
    except JpegFormatError as err:
        logger.debug("SOF lookup failed: %s", err)
        dimension_error = err.message
    else:
        if dimensions is None:
            where = "within the read window" if partial else "before the image data"
            dimension_error = f"No SOF marker found {where}"

    segment: SegmentDescriptor | None = None
    record: GPanoRecord | None = None
    xmp_error: str | None = None
    try:
        segment = find_xmp_segment(view, partial=partial)
    except JpegFormatError as err:
        logger.debug("XMP lookup failed: %s", err)
        # Same walk as the SOF lookup; report it once
        if err.message != dimension_error:
            xmp_error = err.message
    else:
        if segment is not None:
            record = extract_gpano(decode_xmp_payload(view, segment))

    return JpegInspection(
        dimensions=dimensions,
        dimension_error=dimension_error,
        xmp_segment=segment,
        record=record,
        xmp_error=xmp_error,
    )
