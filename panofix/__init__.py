"""panofix - Check and repair GPano metadata of Street View panoramas."""

from panofix.cli import cli
from panofix.fix import fix_files
from panofix.gpano import GPanoField, GPanoRecord, generate_defaults
from panofix.inspection import inspect_jpeg
from panofix.jpeg import (
    ImageDimensions,
    SegmentDescriptor,
    find_start_of_frame,
    find_xmp_segment,
    inject_gpano,
)
from panofix.triage import check_files
from panofix.validation import ValidationVerdict, validate
from panofix.xmp import build_xmp_packet, extract_gpano

__all__ = [
    "GPanoField",
    "GPanoRecord",
    "ImageDimensions",
    "SegmentDescriptor",
    "ValidationVerdict",
    "build_xmp_packet",
    "check_files",
    "cli",
    "extract_gpano",
    "find_start_of_frame",
    "find_xmp_segment",
    "fix_files",
    "generate_defaults",
    "inject_gpano",
    "inspect_jpeg",
    "validate",
]
