"""GPano extraction from XMP text.

Writers in the wild serialize GPano properties two ways:

- attribute form, on the rdf:Description element::

      <rdf:Description GPano:ProjectionType="equirectangular" .../>

- element form, as child elements::

      <GPano:ProjectionType>equirectangular</GPano:ProjectionType>

Both are read in independent passes. When a file carries the same field
in both forms, the attribute value wins.

Packets are matched with regular expressions, so GPano properties are
still read from packets that are not well-formed XML.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from xml.sax.saxutils import unescape

from panofix.constants import XPACKET_END_SLACK
from panofix.errors import UnknownFieldError
from panofix.gpano import GPanoField, GPanoRecord
from panofix.jpeg.scanner import Buffer, SegmentDescriptor, find_xmp_segment

logger = logging.getLogger(__name__)

XPACKET_BEGIN = "<?xpacket begin"
XPACKET_END = "<?xpacket end"

_ATTRIBUTE_RE = re.compile(r"""GPano:(\w+)\s*=\s*(["'])(.*?)\2""", re.DOTALL)
_ELEMENT_RE = re.compile(r"<GPano:(\w+)\s*>([^<]*)</GPano:\1\s*>")

# Entities beyond the three handled by unescape() by default; the character
# references are the ones quoteattr() writes for whitespace
_XML_ENTITIES = {
    "&quot;": '"',
    "&apos;": "'",
    "&#10;": "\n",
    "&#13;": "\r",
    "&#9;": "\t",
}


def find_xpacket(xmp_text: str) -> str | None:
    """Cut the ``<?xpacket begin ... <?xpacket end`` window out of a text.

    A little trailing slack after the end marker keeps the closing
    processing instruction.

    Returns:
        The packet text, or None if either marker is missing.
    """
    start = xmp_text.find(XPACKET_BEGIN)
    if start == -1:
        return None
    end = xmp_text.find(XPACKET_END, start)
    if end == -1:
        return None
    return xmp_text[start : end + len(XPACKET_END) + XPACKET_END_SLACK]


def _collect(pairs: Iterable[tuple[str, str]]) -> GPanoRecord:
    values: dict[GPanoField, str] = {}
    for name, value in pairs:
        try:
            field = GPanoField.parse(name)
        except UnknownFieldError:
            logger.debug("Ignoring GPano property outside the vocabulary: %s", name)
            continue
        values[field] = value
    return GPanoRecord(values)


def parse_attribute_form(packet: str) -> GPanoRecord:
    """Read ``GPano:Name="value"`` attributes."""
    return _collect(
        (m.group(1), unescape(m.group(3), _XML_ENTITIES)) for m in _ATTRIBUTE_RE.finditer(packet)
    )


def parse_element_form(packet: str) -> GPanoRecord:
    """Read ``<GPano:Name>value</GPano:Name>`` elements."""
    return _collect(
        (m.group(1), unescape(m.group(2).strip(), _XML_ENTITIES))
        for m in _ELEMENT_RE.finditer(packet)
    )


def extract_gpano(xmp_text: str) -> GPanoRecord | None:
    """Extract GPano properties from text containing an XMP packet.

    Args:
        xmp_text: Any text holding an ``<?xpacket?>``-wrapped packet, such
            as a decoded APP1 payload.

    Returns:
        GPanoRecord with attribute values merged over element values, or
        None if there is no packet or it holds no known GPano property.
    """
    packet = find_xpacket(xmp_text)
    if packet is None:
        return None

    record = parse_attribute_form(packet).merged_over(parse_element_form(packet))
    if not record:
        return None
    return record


def decode_xmp_payload(buffer: Buffer, segment: SegmentDescriptor) -> str:
    """Decode an XMP segment payload as text, replacing undecodable bytes."""
    return bytes(segment.payload(buffer)).decode("utf-8", errors="replace")


def extract_gpano_from_jpeg(buffer: Buffer, *, partial: bool = False) -> GPanoRecord | None:
    """Locate the XMP segment of a JPEG and extract its GPano record.

    Args:
        buffer: JPEG bytes, or a leading prefix of them.
        partial: True if ``buffer`` is only a prefix of the file.

    Returns:
        GPanoRecord, or None if there is no XMP segment or no GPano data.

    Raises:
        NotAJpegError: If the buffer does not start with SOI.
        MalformedJpegError: If the segment walk fails.
    """
    segment = find_xmp_segment(buffer, partial=partial)
    if segment is None:
        return None
    return extract_gpano(decode_xmp_payload(buffer, segment))
