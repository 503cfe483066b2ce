"""Tests for tabby.banner — startup banner and request lines."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from tabby.banner import print_banner, print_response
from tabby.config import ServerOptions, SiteConfig


def _capture(fn: object, *args: object, **kwargs: object) -> str:
    buf = io.StringIO()
    with patch.object(sys, "stderr", buf):
        fn(*args, **kwargs)  # type: ignore[operator]
    return buf.getvalue()


class TestPrintBanner:
    """Tests for the startup banner."""

    def _config(self) -> SiteConfig:
        return SiteConfig(cwd=Path("/tmp/test-site"), server=ServerOptions(port=4000))

    def test_dev_mode_banner(self) -> None:
        output = _capture(print_banner, self._config(), 5, mode="dev", load_ms=42.0)
        assert "(dev)" in output
        assert "5 pages written in 42ms" in output
        assert "http://localhost:4000/ with live reload" in output
        assert "Watching for changes" in output

    def test_build_mode_banner(self) -> None:
        output = _capture(print_banner, self._config(), 1, mode="build", load_ms=100.0)
        assert "(build)" in output
        assert "1 page written in 100ms" in output
        assert "_site" in output
        assert "live reload" not in output
        assert "Watching" not in output

    def test_source_and_output_paths(self) -> None:
        config = self._config()
        output = _capture(print_banner, config, 0, mode="build")
        assert f"source: {config.src_path}" in output
        assert f"output: {config.dest_path}" in output

    def test_no_timing_when_zero(self) -> None:
        output = _capture(print_banner, self._config(), 3, mode="build")
        assert "3 pages written\n" in output

    def test_version_in_banner(self) -> None:
        from tabby import __version__

        output = _capture(print_banner, self._config(), 3, mode="build")
        assert f"tabby {__version__}" in output

    def test_plain_text_when_not_a_terminal(self) -> None:
        output = _capture(print_banner, self._config(), 3, mode="dev")
        assert "\033[" not in output


class TestPrintResponse:
    """Per-request status lines."""

    def test_status_and_path(self) -> None:
        assert _capture(print_response, 200, "/about/").strip().endswith("200 /about/")

    def test_not_found(self) -> None:
        assert "404 /nope" in _capture(print_response, 404, "/nope")

    def test_redirect(self) -> None:
        assert "301 /blog" in _capture(print_response, 301, "/blog")

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        assert _capture(print_response, 500, "/boom") == "500 /boom\n"
