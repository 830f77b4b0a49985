"""panofix CLI - Check and repair GPano metadata of Street View panoramas.

The CLI is a thin wrapper around the Python API (see triage.py and fix.py).
All business logic lives in the library; the CLI handles user interaction.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click

from panofix.config import (
    get_setting,
    list_settings,
    resolve_int_setting,
    set_setting,
    unset_setting,
)
from panofix.errors import ConfigError, PanofixError
from panofix.files import collect_jpegs, read_window
from panofix.fix import FixAction, FixReport, fix_files
from panofix.inspection import inspect_jpeg
from panofix.json_output import ErrorDetail, OutputEnvelope, error_envelope, success_envelope
from panofix.output import detail, error, info, success, warn
from panofix.triage import FileCheck, FileStatus, TriageReport, check_files


def should_output_json(ctx: click.Context, json_flag: bool = False) -> bool:
    """Determine if JSON output should be used.

    The global --format=json option and the per-command --json flag both
    switch to JSON.
    """
    obj = ctx.find_root().obj or {}
    return obj.get("format", "text") == "json" or json_flag


def output_json_envelope(envelope: OutputEnvelope) -> None:
    """Output a JSON envelope to stdout."""
    click.echo(envelope.to_json())


def _root(ctx: click.Context) -> Path:
    obj = ctx.find_root().obj or {}
    return obj.get("root", Path("."))


def _fail(ctx: click.Context, command: str, err: Exception, use_json: bool) -> None:
    """Report an error that aborts the command, then exit with code 1."""
    if use_json:
        output_json_envelope(error_envelope(command, [ErrorDetail.from_exception(err)]))
    else:
        error(err.message if isinstance(err, PanofixError) else str(err))
    ctx.exit(1)


@click.group()
@click.version_option(package_name="panofix")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format (json for machine parsing, text for humans).",
)
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Project root holding .panofix/config.yaml (default: current directory).",
)
@click.option("--verbose", is_flag=True, help="Log debug messages to stderr.")
@click.pass_context
def cli(ctx: click.Context, output_format: str, root: Path, verbose: bool) -> None:
    """panofix - Check and repair GPano metadata of 360° JPEG photos."""
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format
    ctx.obj["root"] = root
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ─────────────────────────────────────────────────────────────────────────────
# Check command
# ─────────────────────────────────────────────────────────────────────────────

DEFAULT_PATHS = (Path("."),)

_path_arguments = click.argument(
    "paths", nargs=-1, type=click.Path(path_type=Path), metavar="[PATHS]..."
)
_read_window_option = click.option(
    "--read-window",
    "read_window_size",
    type=int,
    default=None,
    help="Bytes read from the start of each file (default: 2 MiB).",
)
_max_workers_option = click.option(
    "--max-workers",
    type=int,
    default=None,
    help="Files inspected in parallel (default: 3).",
)


def _run_triage(
    ctx: click.Context,
    paths: tuple[Path, ...],
    read_window_size: int | None,
    max_workers: int | None,
) -> TriageReport:
    root = _root(ctx)
    window = resolve_int_setting("read_window", cli_value=read_window_size, root=root)
    workers = resolve_int_setting("max_workers", cli_value=max_workers, root=root)
    files = collect_jpegs(paths or DEFAULT_PATHS)
    return check_files(files, read_window_size=window, max_workers=workers)


def _print_file_check(check: FileCheck, *, verbose: bool) -> None:
    """Print one file's triage result with appropriate formatting."""
    name = str(check.path)
    if check.status is FileStatus.VALID:
        success(f"{name}: valid")
    elif check.status is FileStatus.FIXABLE and check.verdict is not None:
        count = len(check.verdict.missing_fields)
        warn(f"{name}: fixable ({count} missing GPano field{'s' if count != 1 else ''})")
    else:
        error(f"{name}: rejected")

    if check.status is not FileStatus.VALID or verbose:
        for message in check.errors:
            detail(f"  {message}")
    for message in check.warnings:
        detail(f"  Warning: {message}")


def _print_triage_summary(report: TriageReport) -> None:
    """Print triage summary message."""
    if not report.checks:
        info("No JPEG files found")
        return
    if report.all_valid:
        success(f"All {len(report.checks)} file(s) are valid Street View panoramas")
        return

    parts = [f"{len(report.valid)} valid"]
    if report.fixable:
        parts.append(f"{len(report.fixable)} fixable")
    if report.rejected:
        parts.append(f"{len(report.rejected)} rejected")
    error(f"Checked {len(report.checks)} file(s): {', '.join(parts)}")
    if report.fixable:
        detail("  Hint: run 'panofix fix' to add default GPano metadata to fixable files")


def _output_check_json(report: TriageReport) -> None:
    """Output check results as JSON envelope."""
    data = report.to_dict()
    if report.all_valid:
        envelope = success_envelope("check", data)
    else:
        errors = [
            ErrorDetail(type="ValidationError", message=message, path=str(check.path))
            for check in report.checks
            if check.status is not FileStatus.VALID
            for message in check.errors
        ]
        envelope = error_envelope("check", errors, data=data)
    output_json_envelope(envelope)


@cli.command()
@_path_arguments
@_read_window_option
@_max_workers_option
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Show details for valid files too")
@click.pass_context
def check(
    ctx: click.Context,
    paths: tuple[Path, ...],
    read_window_size: int | None,
    max_workers: int | None,
    json_output: bool,
    verbose: bool,
) -> None:
    """Validate GPano metadata of JPEG panoramas.

    Each file is grouped as valid, fixable (only missing GPano fields) or
    rejected. PATHS may be files or directories (default: current directory).

    Exits with code 1 unless every file is valid.
    """
    use_json = should_output_json(ctx, json_output)

    try:
        report = _run_triage(ctx, paths, read_window_size, max_workers)
    except (FileNotFoundError, ConfigError) as err:
        _fail(ctx, "check", err, use_json)
        return

    if use_json:
        _output_check_json(report)
    else:
        for file_check in report.checks:
            _print_file_check(file_check, verbose=verbose)
        _print_triage_summary(report)

    if not report.all_valid:
        ctx.exit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Fix command
# ─────────────────────────────────────────────────────────────────────────────


def _print_fix_report(report: FixReport, triage: TriageReport, *, dry_run: bool) -> None:
    if not report.results:
        info("No fixable files")
    for result in report.results:
        if not result.success:
            error(f"{result.file_path}: {result.message}")
        elif result.action is FixAction.SKIPPED:
            detail(f"{result.file_path}: {result.message}")
        else:
            success(f"{result.file_path}: {result.message}", dry_run=dry_run)
            if result.output_path is not None and result.output_path != result.file_path:
                detail(f"  -> {result.output_path}")

    for rejected in triage.rejected:
        warn(f"{rejected.path}: rejected, not fixed")
        for message in rejected.errors:
            detail(f"  {message}")

    if report.failure_count:
        error(f"{report.failure_count} of {report.total_count} fix(es) failed")
    elif report.results and not dry_run:
        success(f"Fixed {report.success_count} file(s)")


@cli.command()
@_path_arguments
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help=(
        "Write repaired copies here instead of rewriting files in place. "
        "Files found in a directory keep their path relative to it."
    ),
)
@click.option("--dry-run", is_flag=True, help="Show what would be fixed without writing.")
@_read_window_option
@_max_workers_option
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.pass_context
def fix(
    ctx: click.Context,
    paths: tuple[Path, ...],
    output_dir: Path | None,
    dry_run: bool,
    read_window_size: int | None,
    max_workers: int | None,
    json_output: bool,
) -> None:
    """Add default GPano metadata to fixable JPEG panoramas.

    Only files whose sole problem is missing GPano fields are touched. Their
    XMP segment is replaced by a GPano-only packet; all other bytes are kept.

    Exits with code 1 if a fix failed or a file was rejected.
    """
    use_json = should_output_json(ctx, json_output)

    try:
        triage = _run_triage(ctx, paths, read_window_size, max_workers)
        configured = get_setting("output_dir", cli_value=output_dir, root=_root(ctx))
    except (FileNotFoundError, ConfigError) as err:
        _fail(ctx, "fix", err, use_json)
        return

    target_dir = Path(configured) if configured is not None else None
    report = fix_files(
        triage, output_dir=target_dir, roots=paths or DEFAULT_PATHS, dry_run=dry_run
    )
    failed = report.failure_count > 0 or bool(triage.rejected)

    if use_json:
        data: dict[str, Any] = {"dry_run": dry_run, **report.to_dict()}
        data["rejected"] = [c.to_dict() for c in triage.rejected]
        if failed:
            errors = [
                ErrorDetail(type="FixError", message=r.message, path=str(r.file_path))
                for r in report.results
                if not r.success
            ] + [
                ErrorDetail(type="RejectedError", message=m, path=str(c.path))
                for c in triage.rejected
                for m in c.errors
            ]
            output_json_envelope(error_envelope("fix", errors, data=data))
        else:
            output_json_envelope(success_envelope("fix", data))
    else:
        _print_fix_report(report, triage, dry_run=dry_run)

    if failed:
        ctx.exit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Show command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_read_window_option
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.pass_context
def show(
    ctx: click.Context, path: Path, read_window_size: int | None, json_output: bool
) -> None:
    """Show the image size and GPano metadata of a JPEG."""
    use_json = should_output_json(ctx, json_output)

    try:
        window = resolve_int_setting("read_window", cli_value=read_window_size, root=_root(ctx))
        data, partial = read_window(path, window)
        inspection = inspect_jpeg(data, partial=partial)
    except (OSError, PanofixError) as err:
        _fail(ctx, "show", err, use_json)
        return

    if use_json:
        output_json_envelope(success_envelope("show", {"path": str(path), **inspection.to_dict()}))
        return

    info(str(path))
    if inspection.dimensions is not None:
        detail(f"  Dimensions: {inspection.dimensions}")
    for message in inspection.errors:
        warn(message)
    if inspection.record is None:
        detail("  No GPano metadata")
        return
    for name, value in inspection.record.to_dict().items():
        detail(f"  GPano:{name} = {value}")


# ─────────────────────────────────────────────────────────────────────────────
# Config commands
# ─────────────────────────────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Manage settings stored in .panofix/config.yaml."""


@config.command("get")
@click.argument("key")
@click.pass_context
def config_get(ctx: click.Context, key: str) -> None:
    """Print the resolved value of a setting."""
    use_json = should_output_json(ctx)
    try:
        value = get_setting(key, root=_root(ctx))
    except ConfigError as err:
        _fail(ctx, "config get", err, use_json)
        return

    if use_json:
        output_json_envelope(success_envelope("config get", {"key": key, "value": value}))
    else:
        click.echo("" if value is None else str(value))


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Store a setting in the project config file."""
    use_json = should_output_json(ctx)
    try:
        set_setting(_root(ctx), key, value)
    except ConfigError as err:
        _fail(ctx, "config set", err, use_json)
        return

    if use_json:
        output_json_envelope(success_envelope("config set", {"key": key, "value": value}))
    else:
        success(f"Set {key} = {value}")


@config.command("unset")
@click.argument("key")
@click.pass_context
def config_unset(ctx: click.Context, key: str) -> None:
    """Remove a setting from the project config file."""
    use_json = should_output_json(ctx)
    try:
        removed = unset_setting(_root(ctx), key)
    except ConfigError as err:
        _fail(ctx, "config unset", err, use_json)
        return

    if use_json:
        output_json_envelope(success_envelope("config unset", {"key": key, "removed": removed}))
    elif removed:
        success(f"Removed {key}")
    else:
        info(f"{key} was not set")


@config.command("list")
@click.pass_context
def config_list(ctx: click.Context) -> None:
    """List all settings with their values and sources."""
    use_json = should_output_json(ctx)
    try:
        settings = list_settings(_root(ctx))
    except ConfigError as err:
        _fail(ctx, "config list", err, use_json)
        return

    if use_json:
        output_json_envelope(success_envelope("config list", {"settings": settings}))
        return
    for key, entry in settings.items():
        info(f"{key} = {entry['value']} ({entry['source']})")
