"""XMP segment injection.

Splices a freshly built XMP APP1 segment into a JPEG. An existing standard
XMP segment is replaced whole, so any other namespaces it carried (dc,
photoshop, xmpMM, ...) are dropped; without one, the new segment goes
directly after SOI. Every other byte is copied through untouched.
"""

from __future__ import annotations

import logging
import struct

from panofix.constants import APP1, MAX_SEGMENT_LENGTH, SOI_BYTES, XMP_HEADER
from panofix.errors import XmpTooLargeError
from panofix.gpano import GPanoRecord
from panofix.jpeg.scanner import Buffer, check_soi, find_xmp_segment
from panofix.xmp.builder import build_xmp_packet

logger = logging.getLogger(__name__)


def build_xmp_app1_segment(xmp_bytes: bytes) -> bytes:
    """Wrap an XMP packet in an APP1 segment.

    Layout: ``FF E1``, a big-endian length covering the length field, the
    NUL-terminated XMP namespace and the packet, then those bytes.

    Raises:
        XmpTooLargeError: If the length does not fit in 16 bits.
    """
    length = 2 + len(XMP_HEADER) + len(xmp_bytes)
    if length > MAX_SEGMENT_LENGTH:
        raise XmpTooLargeError(length, MAX_SEGMENT_LENGTH)
    return b"\xff" + bytes([APP1]) + struct.pack(">H", length) + XMP_HEADER + xmp_bytes


def inject_gpano(buffer: Buffer, record: GPanoRecord) -> bytes:
    """Return a copy of a JPEG carrying ``record`` as its only XMP packet.

    Args:
        buffer: The complete JPEG file. A truncated prefix would lose the
            image data that follows it.
        record: GPano fields to embed.

    Returns:
        New JPEG bytes.

    Raises:
        NotAJpegError: If the buffer does not start with SOI.
        MalformedJpegError: If the header segments cannot be walked.
        XmpTooLargeError: If the packet does not fit in one segment.
    """
    view = memoryview(buffer)
    check_soi(view)

    segment = build_xmp_app1_segment(build_xmp_packet(record))
    existing = find_xmp_segment(view)

    if existing is not None:
        logger.debug(
            "Replacing %d-byte XMP segment at %d with %d bytes",
            existing.length + 2,
            existing.offset,
            len(segment),
        )
        return b"".join((view[: existing.offset], segment, view[existing.end :]))

    logger.debug("Inserting %d-byte XMP segment after SOI", len(segment))
    return b"".join((SOI_BYTES, segment, view[2:]))
