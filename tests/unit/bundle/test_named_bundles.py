"""Persisted bundles: as_named / as_cached and their render_* counterparts."""

import os

import pytest

from asset_bundler import css, javascript
from asset_bundler.exceptions import BundleNotRegisteredError, BundleNotRenderedError
from asset_bundler.hashing import Sha256Hasher
from asset_bundler.minifiers import NullMinifier
from asset_bundler.resolvers import FileSystemResolver

pytestmark = pytest.mark.unit

hash_of = Sha256Hasher().get_hash


class _CountingResolver(FileSystemResolver):
    def __init__(self) -> None:
        self.calls: list[str] = []

    def try_resolve(self, reference: str) -> list[str]:
        self.calls.append(reference)
        return super().try_resolve(reference)


def _script(src: str) -> str:
    return f'<script type="text/javascript" src="{src}"></script>'


def _bump(path, content):
    stat = path.stat()
    path.write_text(content)
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))


@pytest.fixture
def source(write_asset):
    return write_asset("js/a.js", "var a;")


class TestAsNamed:
    def test_render_named_returns_stored_output_without_resolving(
        self, release_config, source, fresh_runtime, site_root
    ):
        resolver = _CountingResolver()
        fresh_runtime.resolvers.set("local", resolver)
        javascript(config=release_config).add("~/js/a.js").with_minifier(
            NullMinifier
        ).as_named("foo", "/out.js")
        calls_after_persist = len(resolver.calls)

        later = javascript(config=release_config)
        content = later.render_named("foo")

        assert content == _script(f"/out.js?r={hash_of('var a;\n')}")
        assert (site_root / "out.js").read_text() == "var a;\n"
        assert len(resolver.calls) == calls_after_persist
        assert [a.local_path for a in later.groups["default"].assets] == ["~/js/a.js"]

    def test_persisted_groups_are_a_snapshot(self, release_config, source):
        bundle = javascript(config=release_config).add("~/js/a.js")
        bundle.as_named("foo", "/out.js")

        bundle.add("~/js/b.js")
        restored = javascript(config=release_config)
        restored.render_named("foo")

        assert [a.local_path for a in restored.groups["default"].assets] == ["~/js/a.js"]

    def test_unknown_name_raises(self, release_config):
        with pytest.raises(BundleNotRegisteredError, match="nope"):
            javascript(config=release_config).render_named("nope")

    def test_names_are_scoped_by_asset_type(self, release_config, source):
        javascript(config=release_config).add("~/js/a.js").as_named("shared", "/out.js")

        with pytest.raises(BundleNotRegisteredError):
            css(config=release_config).render_named("shared")

    def test_invalidated_output_is_not_rendered_again(self, release_config, source):
        javascript(config=release_config).add("~/js/a.js").as_named("foo", "/out.js")

        _bump(source, "var a = 2;")

        with pytest.raises(BundleNotRenderedError) as exc_info:
            javascript(config=release_config).render_named("foo")
        assert exc_info.value.key == "jsfoo"

    def test_debug_output_can_be_named(self, debug_config, source):
        javascript(config=debug_config).add("~/js/a.js").as_named("dbg", "/out.js")

        content = javascript(config=debug_config).render_named("dbg")

        assert content == _script("/js/a.js") + "\n"


class TestAsCached:
    def test_content_and_tag_come_from_memory(self, release_config, source, site_root):
        tag = (
            javascript(config=release_config)
            .add("~/js/a.js")
            .with_minifier(NullMinifier)
            .as_cached("app", "~/assets/app.js")
        )

        digest = hash_of("var a;\n")
        assert tag == _script(f"/assets/app.js?r={digest}")
        assert not (site_root / "assets").exists()

        later = javascript(config=release_config)
        assert later.render_cached("app") == "var a;\n"
        assert later.render_cached_asset_tag("app") == tag

    def test_asset_tag_renders_again_after_invalidation(self, release_config, source):
        javascript(config=release_config).add("~/js/a.js").with_minifier(
            NullMinifier
        ).as_cached("app", "~/assets/app_#.js")

        _bump(source, "var a = 2;")
        later = javascript(config=release_config).with_minifier(NullMinifier)
        tag = later.render_cached_asset_tag("app")

        assert tag == _script(f"/assets/app_{hash_of('var a = 2;\n')}.js")
        assert later.render_cached("app") == "var a = 2;\n"

    def test_groups_are_stored_separately(self, release_config, write_asset):
        write_asset("css/site.css", "a{}")
        write_asset("css/print.css", "b{}")

        css(config=release_config).add("~/css/site.css").add_to_group(
            "print", "~/css/print.css"
        ).with_minifier(NullMinifier).as_cached("theme", "~/theme.css")

        later = css(config=release_config)
        assert later.render_cached("theme") == "a{}\n"
        assert later.render_cached("theme", group="print") == "b{}\n"

    def test_unknown_names_raise(self, release_config):
        bundle = javascript(config=release_config)

        with pytest.raises(BundleNotRegisteredError):
            bundle.render_cached("missing")
        with pytest.raises(BundleNotRegisteredError):
            bundle.render_cached_asset_tag("missing")

    def test_clear_cache_keeps_the_definition(self, release_config, source):
        javascript(config=release_config).add("~/js/a.js").with_minifier(
            NullMinifier
        ).as_cached("app", "~/app.js")

        later = javascript(config=release_config).with_minifier(NullMinifier)
        later.clear_cache()

        with pytest.raises(BundleNotRenderedError):
            later.render_named("app")
        assert later.render_cached_asset_tag("app") == _script(
            f"/app.js?r={hash_of('var a;\n')}"
        )
