"""Standardized terminal output utilities.

All user-facing CLI messages go through these functions so that every
command formats results the same way:

    from panofix.output import success, info, warn, error, detail

    success("pano.jpg: valid")
    info("Checking 12 file(s)")
    warn("GPano:UsePanoramaViewer should be \"True\"")
    error("pano.jpg: not a JPEG")
    detail("Missing: GPano:ProjectionType")

Commands that modify files accept dry_run=True, which prefixes the message
with [DRY RUN].
"""

from __future__ import annotations

import sys
from typing import TextIO

import click

_STYLES = {
    "success": "green",
    "info": "blue",
    "warn": "yellow",
    "error": "red",
    "detail": "bright_black",
}

_PREFIXES = {
    "success": "✓",  # checkmark
    "info": "→",  # arrow
    "warn": "⚠",  # warning
    "error": "✗",  # X
    "detail": " ",
}


def _output(message: str, style: str, *, file: TextIO | None, dry_run: bool) -> None:
    if dry_run:
        message = f"[DRY RUN] {message}"
    color = _STYLES[style]
    styled_prefix = click.style(_PREFIXES[style], fg=color)
    click.echo(f"{styled_prefix} {click.style(message, fg=color)}", file=file)


def success(message: str, *, file: TextIO | None = None, dry_run: bool = False) -> None:
    """Print a success message with green checkmark (stdout)."""
    _output(message, "success", file=file, dry_run=dry_run)


def info(message: str, *, file: TextIO | None = None, dry_run: bool = False) -> None:
    """Print an info message with blue arrow (stdout)."""
    _output(message, "info", file=file, dry_run=dry_run)


def warn(message: str, *, file: TextIO | None = None, dry_run: bool = False) -> None:
    """Print a warning with yellow warning symbol (stderr by default)."""
    _output(message, "warn", file=file or sys.stderr, dry_run=dry_run)


def error(message: str, *, file: TextIO | None = None, dry_run: bool = False) -> None:
    """Print an error with red X (stderr by default)."""
    _output(message, "error", file=file or sys.stderr, dry_run=dry_run)


def detail(message: str, *, file: TextIO | None = None, dry_run: bool = False) -> None:
    """Print a dimmed detail line, indented under the previous message."""
    _output(message, "detail", file=file, dry_run=dry_run)
