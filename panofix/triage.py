"""Triage of JPEG files into valid, fixable and rejected groups.

For each file the leading read window is inspected, the GPano record is
validated against the SOF dimensions and the Street View upload
requirements are checked. Files then fall into one of three groups:

- VALID: ready for upload as is
- FIXABLE: only missing GPano fields; default metadata can be injected
- REJECTED: anything else (wrong projection, size mismatch, unreadable
  file, resolution or aspect ratio Street View refuses)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from panofix.constants import DEFAULT_MAX_WORKERS, DEFAULT_READ_WINDOW
from panofix.errors import PanofixError
from panofix.files import read_window
from panofix.gpano import GPanoRecord, generate_defaults
from panofix.inspection import JpegInspection, inspect_jpeg
from panofix.streetview import check_requirements
from panofix.validation import Severity, ValidationVerdict, validate
from panofix.validation.runner import DIMENSIONS_UNKNOWN

logger = logging.getLogger(__name__)


class FileStatus(Enum):
    """Triage group of a checked file.

    The severity property allows sorting files by importance:
        REJECTED > FIXABLE > VALID
    """

    VALID = "valid"
    FIXABLE = "fixable"
    REJECTED = "rejected"

    @property
    def severity(self) -> int:
        """Return numeric severity for ordering (higher is worse)."""
        return {FileStatus.VALID: 0, FileStatus.FIXABLE: 1, FileStatus.REJECTED: 2}[self]


@dataclass(frozen=True)
class FileCheck:
    """Everything learned about one file.

    Attributes:
        path: File that was checked.
        file_size: Size in bytes.
        inspection: Scanner/extractor results, or None if the file could
            not be inspected at all.
        verdict: GPano validation verdict, or None if not inspected.
        requirement_errors: Street View upload requirement violations.
        fatal_error: Reason the file could not be inspected, if any.
    """

    path: Path
    file_size: int
    inspection: JpegInspection | None
    verdict: ValidationVerdict | None
    requirement_errors: tuple[str, ...] = ()
    fatal_error: str | None = None

    @property
    def status(self) -> FileStatus:
        """Triage group derived from the verdict and requirement checks."""
        if self.fatal_error is not None or self.verdict is None or self.requirement_errors:
            return FileStatus.REJECTED
        if self.verdict.is_valid:
            return FileStatus.VALID
        # A broken segment walk means the XMP verdict is built on a guess
        if self.verdict.can_auto_fix and not (self.inspection and self.inspection.xmp_error):
            return FileStatus.FIXABLE
        return FileStatus.REJECTED

    @property
    def record(self) -> GPanoRecord | None:
        """GPano record found in the file, if any."""
        return self.inspection.record if self.inspection else None

    @property
    def suggested(self) -> GPanoRecord | None:
        """Default GPano record to inject, for fixable files only."""
        if self.status is not FileStatus.FIXABLE or self.inspection is None:
            return None
        dims = self.inspection.dimensions
        if dims is None:
            return None
        return generate_defaults(dims.width, dims.height)

    @property
    def errors(self) -> list[str]:
        """All blocking messages for this file, in display order."""
        if self.fatal_error is not None:
            return [self.fatal_error]
        errors = list(self.requirement_errors)
        if self.inspection is not None:
            errors.extend(self.inspection.errors)
        if self.verdict is not None:
            # The inspection already says why the frame size is unknown
            sof_reported = (
                self.inspection is not None and self.inspection.dimension_error is not None
            )
            errors.extend(
                f.message
                for f in self.verdict.findings
                if f.severity is Severity.ERROR
                and not (sof_reported and f.rule_name == DIMENSIONS_UNKNOWN)
            )
        return errors

    @property
    def warnings(self) -> list[str]:
        """Non-blocking messages for this file."""
        return list(self.verdict.warnings) if self.verdict is not None else []

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        suggested = self.suggested
        return {
            "path": str(self.path),
            "status": self.status.value,
            "file_size": self.file_size,
            "inspection": self.inspection.to_dict() if self.inspection else None,
            "verdict": self.verdict.to_dict() if self.verdict else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "suggested_gpano": suggested.to_dict() if suggested is not None else None,
        }


@dataclass
class TriageReport:
    """Checked files grouped by status.

    Attributes:
        checks: One FileCheck per file, in input order.
    """

    checks: list[FileCheck] = field(default_factory=list)

    def _with_status(self, status: FileStatus) -> list[FileCheck]:
        return [c for c in self.checks if c.status is status]

    @property
    def valid(self) -> list[FileCheck]:
        """Files ready for upload."""
        return self._with_status(FileStatus.VALID)

    @property
    def fixable(self) -> list[FileCheck]:
        """Files that only need default GPano metadata."""
        return self._with_status(FileStatus.FIXABLE)

    @property
    def rejected(self) -> list[FileCheck]:
        """Files that cannot be fixed automatically."""
        return self._with_status(FileStatus.REJECTED)

    @property
    def all_valid(self) -> bool:
        """True if every file is ready for upload."""
        return all(c.status is FileStatus.VALID for c in self.checks)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "summary": {
                "total": len(self.checks),
                "valid": len(self.valid),
                "fixable": len(self.fixable),
                "rejected": len(self.rejected),
            },
            "files": [c.to_dict() for c in self.checks],
        }


def check_buffer(
    path: Path,
    data: bytes,
    *,
    file_size: int,
    partial: bool = False,
) -> FileCheck:
    """Triage a file whose leading bytes are already in memory.

    Args:
        path: Path the bytes came from (used for its name only).
        data: The file, or its leading window.
        file_size: Size of the whole file in bytes.
        partial: True if ``data`` is only a prefix of the file.

    Returns:
        FileCheck for the file.
    """
    try:
        inspection = inspect_jpeg(data, partial=partial)
    except PanofixError as err:
        return FileCheck(
            path=path,
            file_size=file_size,
            inspection=None,
            verdict=None,
            fatal_error=err.message,
        )

    verdict = validate(inspection.record, inspection.dimensions)
    requirement_errors = check_requirements(
        file_name=path.name,
        file_size=file_size,
        dimensions=inspection.dimensions,
    )
    return FileCheck(
        path=path,
        file_size=file_size,
        inspection=inspection,
        verdict=verdict,
        requirement_errors=tuple(requirement_errors),
    )


def check_file(path: Path, *, read_window_size: int | None = DEFAULT_READ_WINDOW) -> FileCheck:
    """Triage one file by reading only its leading window.

    Args:
        path: JPEG file to check.
        read_window_size: Bytes to read from the start of the file, or
            None to read it whole.

    Returns:
        FileCheck. I/O errors are recorded as a fatal error.
    """
    try:
        file_size = path.stat().st_size
        data, partial = read_window(path, read_window_size)
    except OSError as err:
        logger.warning("Cannot read %s: %s", path, err)
        return FileCheck(
            path=path,
            file_size=0,
            inspection=None,
            verdict=None,
            fatal_error=f"Cannot read file: {err.strerror or err}",
        )
    return check_buffer(path, data, file_size=file_size, partial=partial)


def check_files(
    paths: Sequence[Path],
    *,
    read_window_size: int | None = DEFAULT_READ_WINDOW,
    max_workers: int = DEFAULT_MAX_WORKERS,
    on_progress: Callable[[FileCheck], None] | None = None,
) -> TriageReport:
    """Triage many files with a small bounded thread pool.

    Args:
        paths: Files to check.
        read_window_size: Bytes to read from the start of each file.
        max_workers: Files inspected at the same time.
        on_progress: Optional callback invoked as each file completes.

    Returns:
        TriageReport with checks in the same order as ``paths``.
    """
    if not paths:
        return TriageReport()

    # Ensure at least one worker to avoid ThreadPoolExecutor ValueError
    max_workers = max(1, max_workers)
    logger.debug("Checking %d file(s) with %d worker(s)", len(paths), max_workers)

    checks: list[FileCheck | None] = [None] * len(paths)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(check_file, path, read_window_size=read_window_size): index
            for index, path in enumerate(paths)
        }
        for future in as_completed(future_to_index):
            check = future.result()
            checks[future_to_index[future]] = check
            if on_progress is not None:
                on_progress(check)

    return TriageReport(checks=[c for c in checks if c is not None])
