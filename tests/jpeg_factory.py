"""Builders for small, hand-assembled JPEG byte strings.

The scanner only reads header segments, so these files carry a real
segment layout but a token scan. Tests that need a decodable image use
Pillow instead (see the ``pillow_jpeg`` fixture in conftest.py).
"""

from __future__ import annotations

import struct
from collections.abc import Iterable, Mapping

SOI = b"\xff\xd8"
EOI = b"\xff\xd9"

JFIF_PAYLOAD = b"JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
EXIF_PAYLOAD = b"Exif\x00\x00MM\x00\x2a\x00\x00\x00\x08\x00\x00"
EXTENDED_XMP_NAMESPACE = b"http://ns.adobe.com/xmp/extension/\x00"

# Entropy-coded data with a stuffed 0xFF byte, as real scans have
SCAN_DATA = b"\x12\x34\xff\x00\x56\x78\x9a"


def build_segment(marker: int, payload: bytes) -> bytes:
    """Assemble ``FF <marker> <length> <payload>``."""
    return bytes([0xFF, marker]) + struct.pack(">H", len(payload) + 2) + payload


def build_sof(width: int, height: int, *, marker: int = 0xC0) -> bytes:
    """Single-component SOF segment declaring ``width`` x ``height``."""
    payload = b"\x08" + struct.pack(">HH", height, width) + b"\x01" + b"\x01\x11\x00"
    return build_segment(marker, payload)


def build_xmp_app1(xmp: str | bytes) -> bytes:
    """Standard XMP APP1 segment around ``xmp``."""
    data = xmp.encode("utf-8") if isinstance(xmp, str) else xmp
    return build_segment(0xE1, b"http://ns.adobe.com/xap/1.0/\x00" + data)


def render_gpano_xmp(
    fields: Mapping[str, str],
    *,
    form: str = "attribute",
    extra: str = "",
) -> str:
    """Render an xpacket holding GPano fields in attribute or element form.

    ``extra`` is inserted into the rdf:Description body, for foreign
    namespaces or conflicting properties.
    """
    if form == "attribute":
        attrs = "".join(f'\n    GPano:{name}="{value}"' for name, value in fields.items())
        description = (
            '<rdf:Description rdf:about=""\n'
            '    xmlns:GPano="http://ns.google.com/photos/1.0/panorama/"'
            f"{attrs}>{extra}</rdf:Description>"
        )
    else:
        elements = "".join(
            f"\n    <GPano:{name}>{value}</GPano:{name}>" for name, value in fields.items()
        )
        description = (
            '<rdf:Description rdf:about=""\n'
            '    xmlns:GPano="http://ns.google.com/photos/1.0/panorama/">'
            f"{elements}{extra}\n  </rdf:Description>"
        )
    return (
        '<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>\n'
        '<x:xmpmeta xmlns:x="adobe:ns:meta/">\n'
        '<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">\n'
        f"  {description}\n"
        "</rdf:RDF>\n"
        "</x:xmpmeta>\n"
        '<?xpacket end="w"?>'
    )


def build_jpeg(
    width: int = 4096,
    height: int = 2048,
    *,
    xmp: str | bytes | None = None,
    before_sof: Iterable[bytes] = (),
    sof_marker: int = 0xC0,
) -> bytes:
    """Assemble a JPEG: SOI, APP0, optional XMP, extra segments, SOF, SOS, scan, EOI."""
    parts = [SOI, build_segment(0xE0, JFIF_PAYLOAD)]
    if xmp is not None:
        parts.append(build_xmp_app1(xmp))
    parts.extend(before_sof)
    parts.append(build_sof(width, height, marker=sof_marker))
    parts.append(build_segment(0xDA, b"\x01\x01\x00\x00\x3f\x00"))
    parts.append(SCAN_DATA)
    parts.append(EOI)
    return b"".join(parts)
