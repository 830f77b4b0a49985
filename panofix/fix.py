"""GPano fix functions.

Applies default GPano metadata to the fixable files of a TriageReport:
- reads the whole file (injection must copy the image data)
- replaces the existing XMP segment or inserts one after SOI
- re-inspects the result before writing it
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from panofix.errors import PanofixError
from panofix.files import write_atomic
from panofix.gpano import GPanoRecord
from panofix.inspection import inspect_jpeg
from panofix.jpeg.inject import inject_gpano
from panofix.jpeg.scanner import find_xmp_segment
from panofix.triage import FileCheck, FileStatus, TriageReport

logger = logging.getLogger(__name__)


class FixAction(Enum):
    """Type of fix action performed.

    Attributes:
        INSERTED: A new XMP segment was added after SOI.
        REPLACED: The existing XMP segment was replaced.
        SKIPPED: No action taken (file not fixable).
    """

    INSERTED = "inserted"
    REPLACED = "replaced"
    SKIPPED = "skipped"


@dataclass
class FixResult:
    """Result from fixing a single file.

    Attributes:
        file_path: File that was read.
        output_path: File that was (or would be) written.
        action: Type of fix action performed.
        success: Whether the fix succeeded.
        message: Description of what was done or error message.
    """

    file_path: Path
    output_path: Path | None
    action: FixAction
    success: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "file_path": str(self.file_path),
            "output_path": str(self.output_path) if self.output_path else None,
            "action": self.action.value,
            "success": self.success,
            "message": self.message,
        }


@dataclass
class FixReport:
    """Aggregate report of fix results.

    Attributes:
        results: List of individual fix results.
        skipped_count: Number of files not attempted (valid or rejected).
    """

    results: list[FixResult] = field(default_factory=list)
    skipped_count: int = 0

    @property
    def total_count(self) -> int:
        """Total number of files that were attempted."""
        return len(self.results)

    @property
    def success_count(self) -> int:
        """Number of successful fixes."""
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        """Number of failed fixes."""
        return sum(1 for r in self.results if not r.success)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "total_count": self.total_count,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "skipped_count": self.skipped_count,
            "results": [r.to_dict() for r in self.results],
        }


def output_path_for(path: Path, output_dir: Path | None, roots: Sequence[Path] = ()) -> Path:
    """Where the repaired copy of ``path`` is written.

    Files found under one of the ``roots`` directories keep their path
    relative to it inside ``output_dir``; other files land at its top level.
    Without ``output_dir`` the file is rewritten in place.
    """
    if output_dir is None:
        return path
    for root in roots:
        if root.is_dir() and path.is_relative_to(root):
            return output_dir / path.relative_to(root)
    return output_dir / path.name


def repair_bytes(data: bytes, record: GPanoRecord) -> tuple[bytes, FixAction]:
    """Inject ``record`` into a complete JPEG and verify the result.

    Returns:
        Tuple of (new bytes, INSERTED or REPLACED).

    Raises:
        JpegFormatError: If the JPEG cannot be rewritten.
        PanofixError: If the rewritten file does not read back as
            carrying ``record``.
    """
    action = FixAction.INSERTED if find_xmp_segment(data) is None else FixAction.REPLACED
    repaired = inject_gpano(data, record)

    inspection = inspect_jpeg(repaired)
    if inspection.record != record:
        raise PanofixError("Repaired file does not read back the injected GPano metadata")
    return repaired, action


def fix_file(
    check: FileCheck,
    *,
    output_dir: Path | None = None,
    roots: Sequence[Path] = (),
    dry_run: bool = False,
) -> FixResult:
    """Inject default GPano metadata into one fixable file.

    Args:
        check: Triage result for the file.
        output_dir: Directory for the repaired copy. If None, the file is
            rewritten in place.
        roots: Directories the file was found under; see output_path_for().
        dry_run: If True, don't write anything.

    Returns:
        FixResult describing what was done.
    """
    file_path = check.path
    record = check.suggested
    if record is None:
        return FixResult(
            file_path=file_path,
            output_path=None,
            action=FixAction.SKIPPED,
            success=True,
            message=f"Not fixable ({check.status.value})",
        )

    output_path = output_path_for(file_path, output_dir, roots)

    if dry_run:
        has_xmp = check.inspection is not None and check.inspection.xmp_segment is not None
        action = FixAction.REPLACED if has_xmp else FixAction.INSERTED
        return FixResult(
            file_path=file_path,
            output_path=output_path,
            action=action,
            success=True,
            message=f"Would write GPano metadata to {output_path} (dry run)",
        )

    try:
        data = file_path.read_bytes()
        repaired, action = repair_bytes(data, record)
        write_atomic(output_path, repaired, mode_from=file_path)
    except (OSError, PanofixError) as e:
        logger.warning("Failed to fix %s: %s", file_path, e)
        return FixResult(
            file_path=file_path,
            output_path=output_path,
            action=FixAction.SKIPPED,
            success=False,
            message=f"Failed to fix: {e}",
        )

    verb = "Inserted" if action is FixAction.INSERTED else "Replaced"
    return FixResult(
        file_path=file_path,
        output_path=output_path,
        action=action,
        success=True,
        message=f"{verb} GPano XMP metadata ({len(record)} fields)",
    )


def fix_files(
    report: TriageReport,
    *,
    output_dir: Path | None = None,
    roots: Sequence[Path] = (),
    dry_run: bool = False,
) -> FixReport:
    """Fix every FIXABLE file in a triage report.

    Valid and rejected files are counted as skipped. A failure on one file
    does not stop the others. A file whose output path was already taken by
    an earlier file in the batch fails instead of overwriting it.
    """
    fix_results: list[FixResult] = []
    skipped_count = 0
    claimed: dict[Path, Path] = {}

    for check in report.checks:
        if check.status is not FileStatus.FIXABLE:
            skipped_count += 1
            continue

        output_path = output_path_for(check.path, output_dir, roots)
        key = output_path.resolve()
        if key in claimed:
            logger.warning("Output path %s already used by %s", output_path, claimed[key])
            fix_results.append(
                FixResult(
                    file_path=check.path,
                    output_path=output_path,
                    action=FixAction.SKIPPED,
                    success=False,
                    message=f"Output path {output_path} already used by {claimed[key]}",
                )
            )
            continue
        claimed[key] = check.path

        fix_results.append(fix_file(check, output_dir=output_dir, roots=roots, dry_run=dry_run))

    return FixReport(results=fix_results, skipped_count=skipped_count)
