"""Shared constants for panofix.

JPEG marker codes, XMP namespaces and Street View upload limits used
across the codec and the CLI.
"""

from __future__ import annotations

# JPEG markers (the byte following 0xFF)
SOI = 0xD8
EOI = 0xD9
SOS = 0xDA
APP1 = 0xE1
TEM = 0x01

SOI_BYTES: bytes = b"\xff\xd8"

# SOFn markers carry frame dimensions; C4 (DHT), C8 (JPG) and CC (DAC) do not
SOF_MARKERS: frozenset[int] = frozenset(range(0xC0, 0xD0)) - {0xC4, 0xC8, 0xCC}

# Markers without a length field
STANDALONE_MARKERS: frozenset[int] = frozenset({TEM, *range(0xD0, 0xD8)})

# Largest value the 2-byte segment length field can hold
MAX_SEGMENT_LENGTH: int = 0xFFFF

# Namespaces
XMP_NAMESPACE: bytes = b"http://ns.adobe.com/xap/1.0/"
XMP_HEADER: bytes = XMP_NAMESPACE + b"\x00"
GPANO_NAMESPACE: str = "http://ns.google.com/photos/1.0/panorama/"

# Bytes of an APP1 payload decoded when looking for the XMP namespace
XMP_SIGNATURE_PROBE: int = 32

# Trailing characters kept after "<?xpacket end" to capture the closing PI
XPACKET_END_SLACK: int = 50

# Leading bytes read from a file for inspection (XMP/EXIF live up front)
DEFAULT_READ_WINDOW: int = 2 * 1024 * 1024

# Files inspected in parallel by check_files()
DEFAULT_MAX_WORKERS: int = 3

# Street View upload requirements
JPEG_EXTENSIONS: frozenset[str] = frozenset({".jpg", ".jpeg"})
MAX_FILE_SIZE: int = 75 * 1024 * 1024
MIN_WIDTH: int = 3840
MIN_HEIGHT: int = 1920
ASPECT_RATIO: float = 2.0
ASPECT_RATIO_TOLERANCE: float = 0.01
