"""Structured error codes for panofix.

All errors follow the format PNFX-{category}{number}:
- PNFX-JPG*: JPEG container errors
- PNFX-GPN*: GPano metadata errors
- PNFX-CFG*: Configuration errors

Validation problems are never raised. They are reported through
``ValidationVerdict`` so callers can show them to users verbatim.
"""

from __future__ import annotations

from typing import Any


class PanofixError(Exception):
    """Base class for all panofix errors.

    All errors have:
    - code: Structured error code (e.g., PNFX-JPG001)
    - message: Human-readable error message
    """

    code: str = "PNFX-000"

    _RESERVED_ATTRS = frozenset({"code", "message", "context", "args"})

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        for key, value in context.items():
            if key not in self._RESERVED_ATTRS:
                setattr(self, key, value)
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# JPEG Errors (PNFX-JPG*)
class JpegFormatError(PanofixError):
    """Base class for JPEG container errors."""

    code = "PNFX-JPG000"


class NotAJpegError(JpegFormatError):
    """Raised when a buffer does not start with the SOI marker.

    Error code: PNFX-JPG001
    """

    code = "PNFX-JPG001"

    def __init__(self, leading: bytes) -> None:
        super().__init__(
            f"Not a JPEG: expected SOI marker FFD8, found {leading.hex().upper() or 'nothing'}",
            leading=leading.hex(),
        )


class MalformedJpegError(JpegFormatError):
    """Raised when the segment structure cannot be walked safely.

    Error code: PNFX-JPG002

    Covers segment lengths that run past the end of the buffer, bytes
    where a marker was expected, and SOF segments with zero dimensions.
    """

    code = "PNFX-JPG002"

    def __init__(self, reason: str, *, offset: int | None = None) -> None:
        where = f" at byte {offset}" if offset is not None else ""
        super().__init__(f"Malformed JPEG{where}: {reason}", reason=reason, offset=offset)


class XmpTooLargeError(JpegFormatError):
    """Raised when an XMP packet does not fit in a single APP1 segment.

    Error code: PNFX-JPG003
    """

    code = "PNFX-JPG003"

    def __init__(self, segment_length: int, limit: int) -> None:
        super().__init__(
            f"XMP packet needs an APP1 length of {segment_length} bytes (limit {limit})",
            segment_length=segment_length,
            limit=limit,
        )


# GPano Errors (PNFX-GPN*)
class MetadataError(PanofixError):
    """Base class for GPano metadata errors."""

    code = "PNFX-GPN000"


class UnknownFieldError(MetadataError, KeyError):
    """Raised when a name is not part of the GPano field vocabulary.

    Error code: PNFX-GPN001
    """

    code = "PNFX-GPN001"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown GPano field '{name}'", name=name)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return Exception.__str__(self)


# Configuration Errors (PNFX-CFG*)
class ConfigError(PanofixError):
    """Base class for configuration errors."""

    code = "PNFX-CFG000"


class InvalidSettingError(ConfigError):
    """Raised when a setting has a value of the wrong type or range.

    Error code: PNFX-CFG001
    """

    code = "PNFX-CFG001"

    def __init__(self, key: str, value: Any, reason: str) -> None:
        super().__init__(
            f"Invalid value {value!r} for setting '{key}': {reason}", key=key, value=value
        )
