"""JPEG container handling: segment scanning and XMP segment injection.

Scanning functions:
- iter_segments(): Walk the header segments of a JPEG
- find_start_of_frame(): Read image dimensions from SOF
- find_xmp_segment(): Locate the standard XMP APP1 segment

Injection functions:
- build_xmp_app1_segment(): Wrap an XMP packet in an APP1 segment
- inject_gpano(): Replace or insert the XMP segment of a JPEG
"""

from panofix.jpeg.inject import build_xmp_app1_segment, inject_gpano
from panofix.jpeg.scanner import (
    ImageDimensions,
    SegmentDescriptor,
    check_soi,
    find_start_of_frame,
    find_xmp_segment,
    is_xmp_segment,
    iter_segments,
)

__all__ = [
    "ImageDimensions",
    "SegmentDescriptor",
    "build_xmp_app1_segment",
    "check_soi",
    "find_start_of_frame",
    "find_xmp_segment",
    "inject_gpano",
    "is_xmp_segment",
    "iter_segments",
]
