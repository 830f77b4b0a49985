"""XMP packet builder.

Serializes a GPanoRecord into a standalone XMP packet. The packet declares
the GPano namespace and nothing else besides the x:/rdf: wrappers:
Street View ingestion rejects packets that mix in other metadata
namespaces.
"""

from __future__ import annotations

from xml.sax.saxutils import quoteattr

from panofix.constants import GPANO_NAMESPACE
from panofix.gpano import GPanoRecord

# Byte-order mark in the begin attribute, as XMP Part 1 recommends
XPACKET_HEADER = '<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>'
XPACKET_TRAILER = '<?xpacket end="w"?>'


def build_xmp_packet(record: GPanoRecord) -> bytes:
    """Serialize a GPano record as a UTF-8 XMP packet.

    Attributes are written in the record's iteration order.

    Args:
        record: Fields to write.

    Returns:
        The complete packet, from ``<?xpacket begin`` to ``<?xpacket end``.
    """
    attributes = "".join(
        f"\n      {field.qualified_name}={quoteattr(value)}" for field, value in record.items()
    )
    packet = (
        f"{XPACKET_HEADER}\n"
        '<x:xmpmeta xmlns:x="adobe:ns:meta/">\n'
        '  <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">\n'
        '    <rdf:Description rdf:about=""\n'
        f'      xmlns:GPano="{GPANO_NAMESPACE}"{attributes}/>\n'
        "  </rdf:RDF>\n"
        "</x:xmpmeta>\n"
        f"{XPACKET_TRAILER}"
    )
    return packet.encode("utf-8")
