"""File access for the CLI and batch helpers.

The codec itself never touches the filesystem; these helpers read the
leading window of a file, find JPEGs under a directory and write repaired
files atomically.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path

from panofix.constants import JPEG_EXTENSIONS

logger = logging.getLogger(__name__)


def read_window(path: Path, window: int | None) -> tuple[bytes, bool]:
    """Read at most ``window`` leading bytes of a file.

    Args:
        path: File to read.
        window: Maximum number of bytes, or None for the whole file.

    Returns:
        Tuple of (data, partial) where partial is True if the file is
        longer than what was read.
    """
    size = path.stat().st_size
    with open(path, "rb") as f:
        if window is None or window >= size:
            return f.read(), False
        logger.debug("Reading %d of %d bytes from %s", window, size, path)
        return f.read(window), True


def is_jpeg_name(path: Path) -> bool:
    """True if the file extension is a JPEG one."""
    return path.suffix.lower() in JPEG_EXTENSIONS


def collect_jpegs(paths: Iterable[Path]) -> list[Path]:
    """Expand files and directories into a list of JPEG files.

    Files given explicitly are kept whatever their extension, so that a
    mislabelled file still gets reported. Directories are searched
    recursively (in sorted order) for ``.jpg``/``.jpeg`` files, skipping
    hidden entries.

    Raises:
        FileNotFoundError: If a path does not exist.
    """
    found: list[Path] = []
    for path in paths:
        if not path.exists():
            raise FileNotFoundError(f"Path not found: {path}")
        if path.is_file():
            found.append(path)
            continue
        for item in sorted(path.rglob("*")):
            relative = item.relative_to(path)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if item.is_file() and is_jpeg_name(item):
                found.append(item)

    # Keep first occurrence when a file is reachable twice
    seen: set[Path] = set()
    unique: list[Path] = []
    for path in found:
        key = path.resolve()
        if key not in seen:
            seen.add(key)
            unique.append(path)
    return unique


def write_atomic(path: Path, data: bytes, *, mode_from: Path | None = None) -> None:
    """Write ``data`` to ``path`` via a temp file and rename.

    A crash mid-write leaves the original file untouched. The permission
    bits of ``mode_from`` (default: ``path`` itself, if it exists) are
    copied onto the new file.
    """
    mode_source = path if mode_from is None else mode_from
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if mode_source.exists():
            shutil.copymode(mode_source, tmp_name)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
