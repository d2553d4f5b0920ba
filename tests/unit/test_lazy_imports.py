"""Tests for lazy import system in nostrfeed.__init__."""

from __future__ import annotations

import importlib
import sys

import pytest


class TestLazyImports:
    """Test PEP 562 lazy loading in nostrfeed.__init__."""

    def test_lazy_import_does_not_eagerly_load(self) -> None:
        """Importing nostrfeed does not load the feed layer."""
        # Restored afterwards so metric collectors are not registered twice.
        saved = {name: mod for name, mod in sys.modules.items() if name.startswith("nostrfeed")}
        for name in saved:
            del sys.modules[name]
        try:
            importlib.import_module("nostrfeed")

            assert "nostrfeed.feed" not in sys.modules
            assert "nostrfeed.nips" not in sys.modules
        finally:
            for name in [n for n in sys.modules if n.startswith("nostrfeed")]:
                del sys.modules[name]
            sys.modules.update(saved)

    def test_lazy_import_resolves_on_access(self) -> None:
        from nostrfeed import FeedManager
        from nostrfeed.feed.manager import FeedManager as DirectFeedManager

        assert FeedManager is DirectFeedManager

    def test_lazy_import_caches_after_first_access(self) -> None:
        import nostrfeed

        _ = nostrfeed.Event
        assert "Event" in vars(nostrfeed)

    def test_lazy_import_invalid_attribute(self) -> None:
        import nostrfeed

        with pytest.raises(AttributeError, match="no_such_thing"):
            _ = getattr(nostrfeed, "no_such_thing")  # noqa: B009

    def test_all_exports_are_in_lazy_imports(self) -> None:
        import nostrfeed

        assert set(nostrfeed.__all__) == set(nostrfeed._LAZY_IMPORTS)

    def test_version(self) -> None:
        import nostrfeed

        assert nostrfeed.__version__
