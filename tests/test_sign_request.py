"""Tests for the request signing script."""

import runpy
import time
from pathlib import Path

import pytest
import structlog

from hawkauth.bewit import decode_bewit
from hawkauth.common.settings import get_settings
from hawkauth.header import parse

SCRIPT = Path(__file__).parent.parent / "scripts" / "sign_request.py"
KEY = "werxhqb98rpaxn39848xrunpaw3489ruxnpa98w4rxn"


@pytest.fixture
def main(monkeypatch):
    """Script entry point with fresh settings."""
    monkeypatch.setenv("HAWK_BEWIT_TTL_SECONDS", "300")
    get_settings.cache_clear()
    yield runpy.run_path(str(SCRIPT), run_name="sign_request")["main"]
    get_settings.cache_clear()
    structlog.reset_defaults()


class TestSignRequest:
    """Test the signing script output."""

    def test_authorization_header(self, main, capsys):
        main(["http://example.com:8000/resource/1?b=1&a=2", "--id", "123456", "--key", KEY, "--ext", "some-app-data"])
        out = capsys.readouterr().out.strip()
        assert out.startswith("Authorization: Hawk ")

        parts = parse(out.removeprefix("Authorization: "))
        assert parts["id"] == "123456"
        assert parts["ext"] == "some-app-data"
        assert len(parts["nonce"]) == 12

    def test_bewit_uses_configured_ttl(self, main, capsys):
        before = int(time.time())
        main(["http://example.com/resource/1?b=1", "--id", "123456", "--key", KEY, "--bewit"])
        out = capsys.readouterr().out.strip()
        assert out.startswith("http://example.com/resource/1?b=1&bewit=")

        bewit = decode_bewit(out.split("bewit=", 1)[1])
        assert before + 300 <= bewit.ts <= int(time.time()) + 300

    def test_bewit_explicit_ttl(self, main, capsys):
        before = int(time.time())
        main(["http://example.com/resource/1", "--id", "123456", "--key", KEY, "--bewit", "30"])
        out = capsys.readouterr().out.strip()
        assert out.startswith("http://example.com/resource/1?bewit=")

        bewit = decode_bewit(out.split("bewit=", 1)[1])
        assert before + 30 <= bewit.ts <= int(time.time()) + 30

    def test_error_reports_code(self, main, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["http://example.com/", "--id", "123456", "--key", KEY, "--algorithm", "md5"])
        assert exc_info.value.code == 1
        assert capsys.readouterr().out.startswith("Error [unsupported_algorithm]:")
