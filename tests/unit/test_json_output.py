"""Tests for the JSON output envelope."""

from __future__ import annotations

import json

import pytest

from panofix.errors import NotAJpegError
from panofix.json_output import (
    ErrorDetail,
    OutputEnvelope,
    error_envelope,
    success_envelope,
)


class TestErrorDetail:
    """Tests for ErrorDetail."""

    @pytest.mark.unit
    def test_minimal_to_dict(self) -> None:
        assert ErrorDetail(type="X", message="m").to_dict() == {"type": "X", "message": "m"}

    @pytest.mark.unit
    def test_from_panofix_error_keeps_code(self) -> None:
        detail = ErrorDetail.from_exception(NotAJpegError(b"GI"), path="a.jpg")

        assert detail.to_dict() == {
            "type": "NotAJpegError",
            "message": "Not a JPEG: expected SOI marker FFD8, found 4749",
            "code": "PNFX-JPG001",
            "path": "a.jpg",
        }

    @pytest.mark.unit
    def test_from_other_exception(self) -> None:
        detail = ErrorDetail.from_exception(FileNotFoundError("Path not found: x"))

        assert detail.type == "FileNotFoundError"
        assert detail.code is None
        assert detail.message == "Path not found: x"


class TestEnvelopes:
    """Tests for OutputEnvelope helpers."""

    @pytest.mark.unit
    def test_success_has_no_errors_key(self) -> None:
        envelope = success_envelope("check", {"files": []})

        assert envelope.to_dict() == {"success": True, "command": "check", "data": {"files": []}}

    @pytest.mark.unit
    def test_error_envelope_defaults_data(self) -> None:
        envelope = error_envelope("fix", [ErrorDetail(type="FixError", message="boom")])

        data = envelope.to_dict()

        assert data["success"] is False
        assert data["data"] == {}
        assert data["errors"] == [{"type": "FixError", "message": "boom"}]

    @pytest.mark.unit
    def test_to_json_keeps_unicode(self) -> None:
        envelope = OutputEnvelope(success=True, command="show", data={"name": "全景.jpg"})

        text = envelope.to_json(indent=None)

        assert "全景" in text
        assert json.loads(text)["data"]["name"] == "全景.jpg"
