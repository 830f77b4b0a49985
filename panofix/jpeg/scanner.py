"""JPEG segment scanner.

Walks the marker segments at the head of a JPEG to find the frame
dimensions (SOF) and the standard XMP packet (APP1). Pixel data is never
touched: the walk ends at Start-Of-Scan.

Layout primer:
- Every JPEG starts with SOI (FF D8).
- Each header segment is ``FF <marker> <length:u16 BE> <payload>``, where
  length counts itself but not the two marker bytes.
- SOS (FF DA) introduces entropy-coded scan data; EOI (FF D9) ends the file.

Callers may hand over only a leading prefix of the file. With
``partial=True`` a segment cut off by the end of that window ends the walk
quietly; on a full buffer the same thing is a malformed file.
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from panofix.constants import (
    APP1,
    EOI,
    SOF_MARKERS,
    SOI_BYTES,
    SOS,
    STANDALONE_MARKERS,
    XMP_NAMESPACE,
    XMP_SIGNATURE_PROBE,
)
from panofix.errors import MalformedJpegError, NotAJpegError

logger = logging.getLogger(__name__)

Buffer = bytes | bytearray | memoryview


@dataclass(frozen=True)
class SegmentDescriptor:
    """Location of one marker segment inside a buffer.

    Attributes:
        marker: Marker code, i.e. the byte following 0xFF (0xE1 for APP1).
        offset: Index of the 0xFF byte that starts the segment.
        length: Declared segment length, including the 2 length bytes.
    """

    marker: int
    offset: int
    length: int

    @property
    def end(self) -> int:
        """Index one past the last byte of the segment."""
        return self.offset + 2 + self.length

    @property
    def payload_start(self) -> int:
        """Index of the first payload byte (after marker and length)."""
        return self.offset + 4

    def payload(self, buffer: Buffer) -> memoryview:
        """Return a read-only view of this segment's payload."""
        return memoryview(buffer)[self.payload_start : self.end].toreadonly()

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {"marker": f"0x{self.marker:02X}", "offset": self.offset, "length": self.length}


@dataclass(frozen=True)
class ImageDimensions:
    """Frame size read from the SOF segment.

    Attributes:
        width: Samples per line.
        height: Number of lines.
    """

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"

    def to_dict(self) -> dict[str, int]:
        """Convert to JSON-serializable dict."""
        return {"width": self.width, "height": self.height}


def check_soi(buffer: Buffer) -> None:
    """Raise NotAJpegError unless the buffer starts with FF D8."""
    leading = bytes(buffer[:2])
    if leading != SOI_BYTES:
        raise NotAJpegError(leading)


def iter_segments(buffer: Buffer, *, partial: bool = False) -> Iterator[SegmentDescriptor]:
    """Yield the header segments of a JPEG in file order.

    The walk stops after yielding SOS, at EOI, or at the end of the buffer.
    Standalone markers (TEM, RSTn) and fill bytes are skipped.

    Args:
        buffer: JPEG bytes, or a leading prefix of them.
        partial: True if ``buffer`` is only a prefix of the file.

    Yields:
        SegmentDescriptor for each length-bearing segment.

    Raises:
        NotAJpegError: If the buffer does not start with SOI.
        MalformedJpegError: If a marker is missing or a declared length
            would read past the end of a complete buffer.
    """
    view = memoryview(buffer)
    check_soi(view)
    size = len(view)
    offset = 2

    while offset < size:
        if view[offset] != 0xFF:
            raise MalformedJpegError(
                f"expected a marker, found byte 0x{view[offset]:02X}", offset=offset
            )
        # Any number of 0xFF fill bytes may precede a marker
        while offset + 1 < size and view[offset + 1] == 0xFF:
            offset += 1
        if offset + 1 >= size:
            break

        marker = view[offset + 1]
        if marker == EOI:
            return
        if marker in STANDALONE_MARKERS:
            offset += 2
            continue
        if marker == 0x00:
            raise MalformedJpegError("stuffed zero byte outside scan data", offset=offset)

        if offset + 4 > size:
            if partial:
                logger.debug("Read window ends inside marker 0x%02X at %d", marker, offset)
                return
            raise MalformedJpegError(
                f"segment 0x{marker:02X} is cut off before its length field", offset=offset
            )

        (length,) = struct.unpack_from(">H", view, offset + 2)
        if length < 2:
            raise MalformedJpegError(
                f"segment 0x{marker:02X} declares length {length}, shorter than its length field",
                offset=offset,
            )

        segment = SegmentDescriptor(marker=marker, offset=offset, length=length)
        if segment.end > size:
            if partial:
                logger.debug(
                    "Segment 0x%02X at %d runs past the %d-byte read window", marker, offset, size
                )
                return
            raise MalformedJpegError(
                f"segment 0x{marker:02X} declares {length} bytes but only "
                f"{size - offset - 2} remain",
                offset=offset,
            )

        yield segment

        if marker == SOS:
            return
        offset = segment.end


def find_start_of_frame(buffer: Buffer, *, partial: bool = False) -> ImageDimensions | None:
    """Read the image size from the first SOF segment.

    Scanning stops as soon as a SOF segment is found.

    Args:
        buffer: JPEG bytes, or a leading prefix of them.
        partial: True if ``buffer`` is only a prefix of the file.

    Returns:
        ImageDimensions, or None if no SOF appears before SOS, EOI or the
        end of the buffer.

    Raises:
        NotAJpegError: If the buffer does not start with SOI.
        MalformedJpegError: If the segment walk fails or the SOF segment
            is truncated or declares a zero dimension.
    """
    view = memoryview(buffer)
    for segment in iter_segments(view, partial=partial):
        if segment.marker not in SOF_MARKERS:
            continue
        # precision (1) + height (2) + width (2) after the length field
        if segment.length < 7:
            raise MalformedJpegError(
                f"SOF segment is only {segment.length} bytes long", offset=segment.offset
            )
        _precision, height, width = struct.unpack_from(">BHH", view, segment.payload_start)
        if width == 0 or height == 0:
            raise MalformedJpegError(
                f"SOF segment declares a {width}x{height} frame", offset=segment.offset
            )
        logger.debug("SOF 0x%02X at %d: %dx%d", segment.marker, segment.offset, width, height)
        return ImageDimensions(width=width, height=height)
    return None


def is_xmp_segment(buffer: Buffer, segment: SegmentDescriptor) -> bool:
    """True if ``segment`` is an APP1 whose payload starts with the XMP namespace."""
    if segment.marker != APP1:
        return False
    probe_end = min(segment.end, segment.payload_start + XMP_SIGNATURE_PROBE)
    probe = bytes(memoryview(buffer)[segment.payload_start : probe_end])
    return probe.startswith(XMP_NAMESPACE)


def find_xmp_segment(buffer: Buffer, *, partial: bool = False) -> SegmentDescriptor | None:
    """Locate the first standard XMP APP1 segment.

    Extended XMP (``http://ns.adobe.com/xmp/extension/``) and EXIF APP1
    segments do not qualify. XMP never follows the start of scan data, so
    the search ends at SOS.

    Args:
        buffer: JPEG bytes, or a leading prefix of them.
        partial: True if ``buffer`` is only a prefix of the file.

    Returns:
        SegmentDescriptor of the XMP segment, or None if there is none in
        the scanned range.

    Raises:
        NotAJpegError: If the buffer does not start with SOI.
        MalformedJpegError: If the segment walk fails.
    """
    view = memoryview(buffer)
    for segment in iter_segments(view, partial=partial):
        if is_xmp_segment(view, segment):
            logger.debug("XMP APP1 at %d (%d bytes)", segment.offset, segment.length)
            return segment
    return None
