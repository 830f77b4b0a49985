"""Integration tests for `panofix fix`, including real Pillow-encoded JPEGs."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner
from PIL import Image

from jpeg_factory import build_jpeg, render_gpano_xmp
from panofix.cli import cli

WriteJpeg = Callable[[str, bytes], Path]


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


class TestFix:
    """`panofix fix` behavior."""

    @pytest.mark.integration
    def test_fix_then_check(
        self, runner: CliRunner, write_jpeg: WriteJpeg, bare_pano_bytes: bytes
    ) -> None:
        path = write_jpeg("pano.jpg", bare_pano_bytes)
        root = ["--root", str(path.parent)]

        fixed = runner.invoke(cli, [*root, "fix", str(path)])
        checked = runner.invoke(cli, [*root, "check", str(path)])

        assert fixed.exit_code == 0, fixed.output
        assert "Inserted GPano XMP metadata (11 fields)" in fixed.output
        assert "Fixed 1 file(s)" in fixed.output
        assert checked.exit_code == 0, checked.output

    @pytest.mark.integration
    def test_dry_run(
        self, runner: CliRunner, write_jpeg: WriteJpeg, bare_pano_bytes: bytes
    ) -> None:
        path = write_jpeg("pano.jpg", bare_pano_bytes)

        result = runner.invoke(cli, ["--root", str(path.parent), "fix", "--dry-run", str(path)])

        assert result.exit_code == 0
        assert "[DRY RUN]" in result.output
        assert path.read_bytes() == bare_pano_bytes

    @pytest.mark.integration
    def test_output_dir_from_config(
        self,
        runner: CliRunner,
        write_jpeg: WriteJpeg,
        bare_pano_bytes: bytes,
        tmp_path: Path,
    ) -> None:
        path = write_jpeg("in/pano.jpg", bare_pano_bytes)
        root = ["--root", str(tmp_path)]
        runner.invoke(cli, [*root, "config", "set", "output_dir", str(tmp_path / "out")])

        result = runner.invoke(cli, [*root, "fix", str(path)])

        assert result.exit_code == 0, result.output
        assert path.read_bytes() == bare_pano_bytes
        assert (tmp_path / "out" / "pano.jpg").exists()

    @pytest.mark.integration
    def test_output_dir_keeps_subdirectories(
        self,
        runner: CliRunner,
        write_jpeg: WriteJpeg,
        bare_pano_bytes: bytes,
        tmp_path: Path,
    ) -> None:
        write_jpeg("in/a/pano.jpg", bare_pano_bytes)
        write_jpeg("in/b/pano.jpg", bare_pano_bytes)
        out = tmp_path / "out"

        result = runner.invoke(
            cli, ["--root", str(tmp_path), "fix", str(tmp_path / "in"), "--output-dir", str(out)]
        )

        assert result.exit_code == 0, result.output
        assert sorted(p.relative_to(out).as_posix() for p in out.rglob("*.jpg")) == [
            "a/pano.jpg",
            "b/pano.jpg",
        ]
        assert "Fixed 2 file(s)" in result.output

    @pytest.mark.integration
    def test_output_dir_name_clash_fails_second_file(
        self,
        runner: CliRunner,
        write_jpeg: WriteJpeg,
        bare_pano_bytes: bytes,
        tmp_path: Path,
    ) -> None:
        first = write_jpeg("a/pano.jpg", bare_pano_bytes)
        second = write_jpeg("b/pano.jpg", bare_pano_bytes)
        out = tmp_path / "out"

        result = runner.invoke(
            cli,
            ["--root", str(tmp_path), "fix", str(first), str(second), "--output-dir", str(out)],
        )

        assert result.exit_code == 1
        assert f"already used by {first}" in result.output
        assert "1 of 2 fix(es) failed" in result.output
        assert [p.name for p in out.iterdir()] == ["pano.jpg"]

    @pytest.mark.integration
    def test_rejected_files_fail(
        self, runner: CliRunner, write_jpeg: WriteJpeg, bare_pano_bytes: bytes, tmp_path: Path
    ) -> None:
        write_jpeg("a.jpg", bare_pano_bytes)
        rejected = build_jpeg(xmp=render_gpano_xmp({"FullPanoWidthPixels": "100"}))
        bad = write_jpeg("b.jpg", rejected)

        result = runner.invoke(cli, ["--root", str(tmp_path), "fix", str(tmp_path)])

        assert result.exit_code == 1
        assert "b.jpg: rejected, not fixed" in result.output
        assert bad.read_bytes() == rejected

    @pytest.mark.integration
    def test_json(
        self, runner: CliRunner, write_jpeg: WriteJpeg, bare_pano_bytes: bytes
    ) -> None:
        path = write_jpeg("pano.jpg", bare_pano_bytes)

        result = runner.invoke(
            cli, ["--format", "json", "--root", str(path.parent), "fix", "--dry-run", str(path)]
        )

        assert result.exit_code == 0
        output = json.loads(result.stdout)
        assert output["command"] == "fix"
        assert output["data"]["dry_run"] is True
        assert output["data"]["results"][0]["action"] == "inserted"
        assert output["data"]["rejected"] == []


class TestFixRealJpeg:
    """Round trip through Pillow-encoded files."""

    @pytest.mark.integration
    def test_pillow_jpeg_is_fixed_and_still_decodes(
        self, runner: CliRunner, pillow_jpeg: Callable[[str, int, int], Path]
    ) -> None:
        path = pillow_jpeg("pano.jpg", 3840, 1920)
        root = ["--root", str(path.parent)]

        before = runner.invoke(cli, [*root, "check", str(path)])
        fixed = runner.invoke(cli, [*root, "fix", str(path)])
        after = runner.invoke(cli, [*root, "check", str(path)])

        assert before.exit_code == 1
        assert "fixable" in before.output
        assert fixed.exit_code == 0, fixed.output
        assert after.exit_code == 0, after.output
        with Image.open(path) as image:
            assert image.size == (3840, 1920)
            image.load()
            app1 = [content for marker, content in image.applist if marker == "APP1"]
            assert any(b"GPano:ProjectionType" in content for content in app1)

    @pytest.mark.integration
    def test_small_pillow_jpeg_is_rejected(
        self, runner: CliRunner, pillow_jpeg: Callable[[str, int, int], Path]
    ) -> None:
        path = pillow_jpeg("small.jpg", 800, 400)
        original = path.read_bytes()

        result = runner.invoke(cli, ["--root", str(path.parent), "fix", str(path)])

        assert result.exit_code == 1
        assert "Resolution too low" in result.output
        assert path.read_bytes() == original
