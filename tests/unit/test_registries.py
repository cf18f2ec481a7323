"""Named-bundle registry, render-path cache and per-key render locks."""

import threading
import time

import pytest

from asset_bundler.core.types import Asset, GroupBundle, new_group_map
from asset_bundler.exceptions import BundleNotRegisteredError, RenderTimeoutError
from asset_bundler.registries import KeyedOnce, NamedBundleRegistry, RenderPathCache

pytestmark = pytest.mark.unit


class TestNamedBundleRegistry:
    def test_stores_a_snapshot(self):
        registry = NamedBundleRegistry()
        groups = new_group_map()
        groups["default"].assets.append(Asset("a.js"))

        registry.set("jsfoo", groups)
        groups["default"].assets.append(Asset("b.js"))
        groups["late"] = GroupBundle()

        stored = registry.get("jsfoo")
        assert [a.local_path for a in stored["default"].assets] == ["a.js"]
        assert "late" not in stored

    def test_get_returns_independent_copies(self):
        registry = NamedBundleRegistry()
        registry.set("jsfoo", new_group_map())

        first = registry.get("jsfoo")
        first["default"].attributes["defer"] = "defer"

        assert registry.get("jsfoo")["default"].attributes == {}

    def test_missing_name_raises(self):
        registry = NamedBundleRegistry()

        with pytest.raises(BundleNotRegisteredError) as exc_info:
            registry.get("jsmissing")

        assert isinstance(exc_info.value, KeyError)
        assert exc_info.value.name == "jsmissing"
        assert "jsmissing" in str(exc_info.value)

    def test_contains_and_clear(self):
        registry = NamedBundleRegistry()
        registry.set("cssfoo", new_group_map())

        assert "cssfoo" in registry
        registry.clear()
        assert "cssfoo" not in registry


class TestRenderPathCache:
    def test_key_layout(self):
        assert RenderPathCache.key("js", "default", "foo") == "js.default.foo"

    def test_remember_and_get(self):
        paths = RenderPathCache()
        key = paths.key("css", "print", "site")

        assert paths.get(key) is None
        paths.remember(key, "~/out/site.print.css")
        assert paths.get(key) == "~/out/site.print.css"

        paths.clear()
        assert paths.get(key) is None


class TestKeyedOnce:
    def test_same_key_is_mutually_exclusive(self):
        locks = KeyedOnce()
        inside = 0
        max_inside = 0
        counter_lock = threading.Lock()

        def worker():
            nonlocal inside, max_inside
            with locks.hold("k"):
                with counter_lock:
                    inside += 1
                    max_inside = max(max_inside, inside)
                time.sleep(0.01)
                with counter_lock:
                    inside -= 1

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert max_inside == 1
        assert locks.pending() == 0

    def test_different_keys_do_not_contend(self):
        locks = KeyedOnce(timeout=1.0)

        with locks.hold("a"), locks.hold("b"):
            assert locks.pending() == 2

        assert locks.pending() == 0

    def test_timeout_raises(self):
        locks = KeyedOnce()
        held = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("busy"):
                held.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        held.wait(5)
        try:
            with pytest.raises(RenderTimeoutError) as exc_info, locks.hold("busy", timeout=0.05):
                pass
        finally:
            release.set()
            thread.join()

        assert exc_info.value.key == "busy"
        assert locks.pending() == 0

    def test_lock_is_released_on_error(self):
        locks = KeyedOnce()

        with pytest.raises(RuntimeError), locks.hold("k"):
            raise RuntimeError("render failed")

        with locks.hold("k", timeout=0.1):
            pass
