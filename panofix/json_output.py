"""JSON output envelope for ``--format json``.

Every command emits the same wrapper so scripts can parse results without
knowing which command produced them:

    {
        "success": true|false,
        "command": "check",
        "data": { ... },
        "errors": [ ... ]  # Only present when success=false
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from panofix.errors import PanofixError


@dataclass
class ErrorDetail:
    """One entry of the errors array.

    Attributes:
        type: Error class name (e.g., "NotAJpegError")
        message: Human-readable error description
        code: Structured panofix error code, if the error has one
        path: File the error belongs to, if any
    """

    type: str
    message: str
    code: str | None = None
    path: str | None = None

    @classmethod
    def from_exception(cls, err: Exception, *, path: str | None = None) -> ErrorDetail:
        """Build an entry from an exception, keeping panofix error codes."""
        if isinstance(err, PanofixError):
            return cls(type=type(err).__name__, message=err.message, code=err.code, path=path)
        return cls(type=type(err).__name__, message=str(err), path=path)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        d = {"type": self.type, "message": self.message}
        if self.code is not None:
            d["code"] = self.code
        if self.path is not None:
            d["path"] = self.path
        return d


@dataclass
class OutputEnvelope:
    """The wrapper structure for all JSON command output.

    Attributes:
        success: True if command completed without errors
        command: Name of the command that produced this output
        data: Command-specific payload
        errors: Error entries; present only when success=False
    """

    success: bool
    command: str
    data: dict[str, Any] | None
    errors: list[ErrorDetail] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary; errors is omitted when None."""
        result: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "data": self.data,
        }
        if self.errors is not None:
            result["errors"] = [e.to_dict() for e in self.errors]
        return result

    def to_json(self, *, indent: int | None = 2) -> str:
        """Convert to JSON string (indent=None for compact output)."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def success_envelope(command: str, data: dict[str, Any]) -> OutputEnvelope:
    """Create a success envelope with the given command and data."""
    return OutputEnvelope(success=True, command=command, data=data)


def error_envelope(
    command: str,
    errors: list[ErrorDetail],
    *,
    data: dict[str, Any] | None = None,
) -> OutputEnvelope:
    """Create an error envelope; data defaults to an empty dict."""
    return OutputEnvelope(
        success=False,
        command=command,
        data=data if data is not None else {},
        errors=errors,
    )
