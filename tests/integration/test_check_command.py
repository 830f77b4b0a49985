"""Integration tests for `panofix check`."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from jpeg_factory import build_jpeg, render_gpano_xmp
from panofix.cli import cli
from panofix.gpano import GPanoRecord

WriteJpeg = Callable[[str, bytes], Path]


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


class TestCheckText:
    """Human-readable output."""

    @pytest.mark.integration
    def test_all_valid_exits_zero(
        self, runner: CliRunner, write_jpeg: WriteJpeg, valid_pano_bytes: bytes
    ) -> None:
        path = write_jpeg("pano.jpg", valid_pano_bytes)

        result = runner.invoke(cli, ["--root", str(path.parent), "check", str(path)])

        assert result.exit_code == 0, result.output
        assert "pano.jpg: valid" in result.output
        assert "All 1 file(s) are valid" in result.output

    @pytest.mark.integration
    def test_mixed_directory_exits_one(
        self,
        runner: CliRunner,
        write_jpeg: WriteJpeg,
        valid_pano_bytes: bytes,
        bare_pano_bytes: bytes,
        tmp_path: Path,
    ) -> None:
        write_jpeg("photos/a.jpg", valid_pano_bytes)
        write_jpeg("photos/b.jpg", bare_pano_bytes)
        write_jpeg(
            "photos/c.jpg", build_jpeg(xmp=render_gpano_xmp({"ProjectionType": "cylindrical"}))
        )

        result = runner.invoke(cli, ["--root", str(tmp_path), "check", str(tmp_path / "photos")])

        assert result.exit_code == 1
        assert "b.jpg: fixable (8 missing GPano fields)" in result.output
        assert "c.jpg: rejected" in result.output
        assert 'must be "equirectangular"' in result.output
        assert "1 valid, 1 fixable, 1 rejected" in result.output
        assert "panofix fix" in result.output

    @pytest.mark.integration
    def test_warnings_shown_for_valid_files(
        self, runner: CliRunner, write_jpeg: WriteJpeg, default_record: GPanoRecord
    ) -> None:
        values = dict(default_record.to_dict(), UsePanoramaViewer="False")
        path = write_jpeg("pano.jpg", build_jpeg(xmp=render_gpano_xmp(values)))

        result = runner.invoke(cli, ["--root", str(path.parent), "check", str(path)])

        assert result.exit_code == 0
        assert "Warning: GPano:UsePanoramaViewer" in result.output

    @pytest.mark.integration
    def test_missing_path(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--root", str(tmp_path), "check", str(tmp_path / "nope")])

        assert result.exit_code == 1
        assert "Path not found" in result.output

    @pytest.mark.integration
    def test_empty_directory(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--root", str(tmp_path), "check", str(tmp_path)])

        assert result.exit_code == 0
        assert "No JPEG files found" in result.output

    @pytest.mark.integration
    def test_invalid_env_setting(
        self, runner: CliRunner, write_jpeg: WriteJpeg, valid_pano_bytes: bytes
    ) -> None:
        path = write_jpeg("pano.jpg", valid_pano_bytes)

        result = runner.invoke(
            cli,
            ["--root", str(path.parent), "check", str(path)],
            env={"PANOFIX_MAX_WORKERS": "lots"},
        )

        assert result.exit_code == 1
        assert "Invalid value 'lots' for setting 'max_workers'" in result.output

    @pytest.mark.integration
    def test_read_window_option(
        self, runner: CliRunner, write_jpeg: WriteJpeg, valid_pano_bytes: bytes
    ) -> None:
        path = write_jpeg("pano.jpg", valid_pano_bytes)

        result = runner.invoke(
            cli, ["--root", str(path.parent), "check", "--read-window", "64", str(path)]
        )

        assert result.exit_code == 1
        assert "No SOF marker found within the read window" in result.output
        assert "Could not read JPEG dimensions" not in result.output


class TestCheckJson:
    """JSON envelope output."""

    @pytest.mark.integration
    def test_success_envelope(
        self, runner: CliRunner, write_jpeg: WriteJpeg, valid_pano_bytes: bytes
    ) -> None:
        path = write_jpeg("pano.jpg", valid_pano_bytes)

        result = runner.invoke(cli, ["--root", str(path.parent), "check", "--json", str(path)])

        assert result.exit_code == 0
        output = json.loads(result.stdout)
        assert output["success"] is True
        assert output["command"] == "check"
        assert output["data"]["summary"]["valid"] == 1
        assert output["data"]["files"][0]["inspection"]["dimensions"] == {
            "width": 4096,
            "height": 2048,
        }

    @pytest.mark.integration
    def test_error_envelope_lists_problems(
        self, runner: CliRunner, write_jpeg: WriteJpeg, bare_pano_bytes: bytes
    ) -> None:
        path = write_jpeg("bare.jpg", bare_pano_bytes)

        result = runner.invoke(
            cli, ["--format", "json", "--root", str(path.parent), "check", str(path)]
        )

        assert result.exit_code == 1
        output = json.loads(result.stdout)
        assert output["success"] is False
        assert output["errors"][0]["path"] == str(path)
        assert output["data"]["files"][0]["status"] == "fixable"
        assert output["data"]["files"][0]["suggested_gpano"]["ProjectionType"] == "equirectangular"

    @pytest.mark.integration
    def test_missing_path_json(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(
            cli, ["--format", "json", "--root", str(tmp_path), "check", str(tmp_path / "nope")]
        )

        assert result.exit_code == 1
        output = json.loads(result.stdout)
        assert output["errors"][0]["type"] == "FileNotFoundError"
