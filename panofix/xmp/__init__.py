"""XMP packet reading and writing for the GPano namespace."""

from panofix.xmp.builder import build_xmp_packet
from panofix.xmp.extract import (
    decode_xmp_payload,
    extract_gpano,
    extract_gpano_from_jpeg,
    find_xpacket,
    parse_attribute_form,
    parse_element_form,
)

__all__ = [
    "build_xmp_packet",
    "decode_xmp_payload",
    "extract_gpano",
    "extract_gpano_from_jpeg",
    "find_xpacket",
    "parse_attribute_form",
    "parse_element_form",
]
