"""Tests for tabby package exports and metadata."""

import pytest

import tabby


class TestPackageMetadata:
    """Package-level exports and metadata."""

    def test_version_string(self) -> None:
        assert isinstance(tabby.__version__, str)
        assert "0.1.0" in tabby.__version__

    def test_all_exports_resolvable(self) -> None:
        for name in tabby.__all__:
            assert getattr(tabby, name) is not None

    def test_lazy_exports(self) -> None:
        from tabby.app import build, dev
        from tabby.config import SiteConfig
        from tabby.core.site import Site

        assert tabby.Site is Site
        assert tabby.SiteConfig is SiteConfig
        assert tabby.build is build
        assert tabby.dev is dev

    def test_invalid_attribute_raises(self) -> None:
        with pytest.raises(AttributeError, match="no attribute"):
            tabby.nonexistent_thing  # type: ignore[attr-defined]  # noqa: B018

    def test_core_exports(self) -> None:
        import tabby.core

        for name in tabby.core.__all__:
            assert hasattr(tabby.core, name)

    def test_server_exports(self) -> None:
        import tabby.server

        for name in tabby.server.__all__:
            assert hasattr(tabby.server, name)
