"""Bundle: register assets into groups and render them.

A bundle renders in one of two modes. Debug mode emits one tag per asset so
the browser loads every source file separately. Release mode concatenates
each group's files, minifies the result, writes it once and emits a single
tag whose URL carries a content hash.

Every render is keyed and cached in the runtime's bundle cache. The first
caller for a key does the work while holding that key's lock; concurrent
callers for the same key wait and reuse the cached result.

Example:
    from asset_bundler import javascript

    tags = (
        javascript()
        .add("~/js/jquery.js", "~/js/site.js")
        .add_remote("~/js/vendor/react.js", "https://cdn.example.com/react.js")
        .render("~/assets/site_#.js")
    )
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import html
import logging
import os

from asset_bundler.config import FrozenConfig, resolve_frozen_config
from asset_bundler.core.policies import SCRIPT_POLICY, STYLE_POLICY, AssetTypePolicy
from asset_bundler.core.types import (
    DEFAULT_GROUP,
    Asset,
    GroupBundle,
    GroupMap,
    InputFile,
    RenderMode,
    fingerprint_groups,
    new_group_map,
)
from asset_bundler.exceptions import BundleNotRenderedError
from asset_bundler.hashing import Hasher, Sha256Hasher
from asset_bundler.minifiers import Minifier, coerce_minifier
from asset_bundler.paths import PathMapper
from asset_bundler.registries import RenderPathCache
from asset_bundler.renderers import CacheRenderer, FileRenderer, Renderer
from asset_bundler.runtime import BundlerRuntime, get_runtime

logger = logging.getLogger(__name__)

# group name -> renderer that persists that group's artifact
type RendererFactory = Callable[[str], Renderer]

_HASH_KEY_FORBIDDEN = frozenset("?&=#/ ")


def _read_text(path: str) -> str:
    # newline="" keeps the bytes that were written, so hashes match the file
    with open(path, encoding="utf-8", newline="") as fh:
        return fh.read()


class Bundle:
    """An ordered, grouped set of assets of one type (script or style).

    Registration methods return the bundle so calls can be chained. Render
    methods only read the group map, except the ``render_named`` family,
    which first restores the group map persisted under the name.
    """

    def __init__(
        self,
        policy: AssetTypePolicy,
        *,
        config: FrozenConfig | None = None,
        runtime: BundlerRuntime | None = None,
        hasher: Hasher | None = None,
        paths: PathMapper | None = None,
        file_renderer: Renderer | None = None,
    ) -> None:
        self.policy = policy
        self.config = config if config is not None else resolve_frozen_config()
        self.runtime = runtime if runtime is not None else get_runtime()
        self.hasher = hasher or Sha256Hasher(self.config.hash_length)
        self.paths = paths or PathMapper.from_config(self.config)
        self.file_renderer = file_renderer or FileRenderer()

        self.groups: GroupMap = new_group_map()
        self.hash_key_name = self.config.hash_key_name
        self.render_only_if_missing = self.config.render_only_if_missing
        self._forced_mode: RenderMode | None = None
        self._minifier: Minifier | None = None
        self._dependent_files: list[str] = []

    def __repr__(self) -> str:
        return (
            f"Bundle(policy={self.policy.name!r}, "
            f"groups={list(self.groups)!r}, mode={self.mode.value!r})"
        )

    # --- Registration ---------------------------------------------------

    def _group(self, group: str) -> GroupBundle:
        if not group:
            raise ValueError("group name cannot be empty")
        return self.groups.setdefault(group, GroupBundle())

    def add(self, *paths: str) -> Bundle:
        """Append local assets to the default group."""
        return self.add_to_group(DEFAULT_GROUP, *paths)

    def add_to_group(self, group: str, *paths: str) -> Bundle:
        """Append local assets to ``group``, creating it if needed."""
        target = self._group(group)
        target.assets.extend(Asset(path) for path in paths)
        return self

    def add_remote(
        self, local_path: str, remote_url: str, *, group: str = DEFAULT_GROUP
    ) -> Bundle:
        """Register an asset served from ``remote_url`` in release mode.

        Debug mode emits a tag for ``local_path`` instead.
        """
        self._group(group).assets.append(Asset(local_path, remote_url))
        return self

    def add_embedded_resource(
        self, local_path: str, resource_id: str, *, group: str = DEFAULT_GROUP
    ) -> Bundle:
        """Register package data (``package:path``) rendered through ``local_path``."""
        asset = Asset(local_path, resource_id, is_embedded_resource=True)
        self._group(group).assets.append(asset)
        return self

    def with_attribute(self, name: str, value: str) -> Bundle:
        return self.with_group_attribute(name, value, DEFAULT_GROUP)

    def with_attributes(self, attributes: Mapping[str, str], *, merge: bool = True) -> Bundle:
        return self.with_group_attributes(attributes, DEFAULT_GROUP, merge=merge)

    def with_group_attribute(self, name: str, value: str, group: str) -> Bundle:
        return self.with_group_attributes({name: value}, group)

    def with_group_attributes(
        self, attributes: Mapping[str, str], group: str, *, merge: bool = True
    ) -> Bundle:
        """Set tag attributes for ``group``.

        ``merge=True`` overwrites only the given keys; ``merge=False``
        replaces the group's attribute set.
        """
        target = self._group(group)
        if merge:
            target.merge_attributes(attributes)
        else:
            target.replace_attributes(attributes)
        return self

    # --- Behaviour switches --------------------------------------------

    def force_debug(self) -> Bundle:
        self._forced_mode = RenderMode.DEBUG
        return self

    def force_release(self) -> Bundle:
        self._forced_mode = RenderMode.RELEASE
        return self

    def render_only_if_output_file_missing(self) -> Bundle:
        """Reuse an existing output file instead of minifying and writing again.

        Ignored when the destination embeds the hash in the file name. An
        existing file is served even if its sources changed since.
        """
        self.render_only_if_missing = True
        return self

    def with_minifier(self, minifier: Minifier | type) -> Bundle:
        """Use ``minifier`` (instance or zero-argument class) in release mode."""
        self._minifier = coerce_minifier(minifier)
        return self

    def hash_key_named(self, name: str) -> Bundle:
        """Set the query parameter that carries the content hash."""
        if not name or _HASH_KEY_FORBIDDEN.intersection(name):
            raise ValueError(f"Invalid hash key name: {name!r}")
        self.hash_key_name = name
        return self

    @property
    def mode(self) -> RenderMode:
        if self._forced_mode is not None:
            return self._forced_mode
        return RenderMode.DEBUG if self.config.debug else RenderMode.RELEASE

    @property
    def minifier(self) -> Minifier:
        if self._minifier is None:
            self._minifier = self.policy.default_minifier()
        return self._minifier

    @property
    def dependent_files(self) -> tuple[str, ...]:
        """Files read by the last render pass of this bundle."""
        return tuple(self._dependent_files)

    # --- Rendering ------------------------------------------------------

    def render(self, destination: str) -> str:
        """Render to ``destination`` and return the HTML tags.

        A ``#`` in ``destination`` is replaced by the content hash in both the
        written file name and the URL; otherwise the hash is appended as a
        query parameter. Non-default groups write next to ``destination``
        with the group name before the extension.
        """
        render_key = destination + self._settings_key() + fingerprint_groups(self.groups)
        return self._render(destination, render_key, self._file_renderer_for)

    def as_named(self, name: str, destination: str) -> None:
        """Render to ``destination`` under ``name`` and persist the group map."""
        self._render(destination, name, self._file_renderer_for)
        self.runtime.named_bundles.set(self._named_key(name), self.groups)

    def as_cached(self, name: str, destination: str) -> str:
        """Render into the in-memory content store and persist the group map.

        ``destination`` is only used to build the URL in the returned tag.
        """
        content = self._render(destination, name, self._cache_renderer_for(name))
        self.runtime.named_bundles.set(self._named_key(name), self.groups)
        return content

    def render_named(self, name: str) -> str:
        """Return the output cached by `as_named`; never renders."""
        key = self._named_key(name)
        self.groups = self.runtime.named_bundles.get(key)
        return self.runtime.bundle_cache.get_content(key)

    def render_cached(self, name: str, group: str = DEFAULT_GROUP) -> str:
        """Return the minified content stored by `as_cached` for ``group``."""
        self.groups = self.runtime.named_bundles.get(self._named_key(name))
        return self.runtime.content_store.get(
            self.policy.cache_prefix, self._cached_name(name, group)
        )

    def render_cached_asset_tag(self, name: str) -> str:
        """Return the tag for a bundle persisted by `as_cached`.

        Renders again, into the content store, if the cached output was
        invalidated; the destination given to `as_cached` is reused.
        """
        self.groups = self.runtime.named_bundles.get(self._named_key(name))
        return self._render(None, name, self._cache_renderer_for(name))

    def clear_cache(self) -> None:
        self.runtime.bundle_cache.clear_testing_cache()

    # --- Internals ------------------------------------------------------

    def _named_key(self, name: str) -> str:
        return self.policy.cache_prefix + name

    def _settings_key(self) -> str:
        # Every setting that changes the rendered tags or written bytes.
        minifier = type(self.minifier)
        return "|".join(
            (
                "",
                self.mode.value,
                self.hash_key_name,
                f"{minifier.__module__}.{minifier.__qualname__}",
                "missing-only" if self.render_only_if_missing else "always",
                str(self.paths.app_root),
                self.paths.virtual_path,
                "",
            )
        )

    @staticmethod
    def _cached_name(name: str, group: str) -> str:
        return name if group == DEFAULT_GROUP else f"{name}.{group}"

    def _file_renderer_for(self, group: str) -> Renderer:  # noqa: ARG002
        return self.file_renderer

    def _cache_renderer_for(self, name: str) -> RendererFactory:
        store = self.runtime.content_store
        prefix = self.policy.cache_prefix
        return lambda group: CacheRenderer(prefix, self._cached_name(name, group), store)

    def _render(
        self,
        destination: str | None,
        render_key: str,
        renderer_for: RendererFactory,
    ) -> str:
        key = self.policy.cache_prefix + render_key
        cache = self.runtime.bundle_cache
        tele = self.runtime.telemetry()

        with tele("bundle.render", policy=self.policy.name):
            found, content = cache.try_get_value(key)
            if found and content is not None:
                tele.count("bundle.cache_hit")
                logger.debug("Bundle cache hit for %s", key)
                return content

            with self.runtime.render_locks.hold(key, self.config.lock_timeout_seconds):
                found, content = cache.try_get_value(key)
                if found and content is not None:
                    tele.count("bundle.cache_hit")
                    logger.debug("Bundle cache hit for %s after waiting", key)
                    return content

                tele.count("bundle.cache_miss")
                mode = self.mode
                logger.debug("Rendering %s in %s mode", key, mode.value)
                self._dependent_files = []
                if mode is RenderMode.DEBUG:
                    with tele("bundle.render_debug"):
                        content, files = self._render_debug()
                else:
                    with tele("bundle.render_release"):
                        content, files = self._render_release(
                            destination, render_key, renderer_for
                        )
                self._dependent_files = files
                cache.add(key, content, files)
                return content

    def _render_debug(self) -> tuple[str, list[str]]:
        tags: list[str] = []
        dependent: list[str] = []
        for group in self.groups.values():
            attributes = self._format_attributes(group)
            for asset in group.assets:
                if asset.kind == "embedded":
                    files = self._resolve(asset)
                    dependent.extend(files)
                    text = "".join(_read_text(f) + "\n\n\n" for f in files)
                    self.file_renderer.render(text, self.paths.to_filesystem(asset.local_path))
                elif asset.kind == "local":
                    dependent.extend(self._resolve(asset))
                url = self.paths.expand(asset.local_path)
                tags.append(self.policy.fill_template(attributes, url) + "\n")
        return "".join(tags), dependent

    def _render_release(
        self,
        destination: str | None,
        render_key: str,
        renderer_for: RendererFactory,
    ) -> tuple[str, list[str]]:
        output: list[str] = []
        dependent: list[str] = []
        prefix = self.policy.cache_prefix

        for name, group in self.groups.items():
            attributes = self._format_attributes(group)
            output.extend(
                self.policy.fill_template(attributes, asset.remote_path or "")
                for asset in group.assets_of("remote")
            )

            bundled = [a for a in group.assets if a.kind != "remote"]
            if not bundled:
                continue

            path_key = RenderPathCache.key(prefix, name, render_key)
            if destination is None:
                target = self.runtime.render_paths.get(path_key)
                if target is None:
                    raise BundleNotRenderedError(path_key)
            else:
                target = self._group_destination(destination, name)
                self.runtime.render_paths.remember(path_key, target)

            files = [f for asset in bundled for f in self._resolve(asset)]
            dependent.extend(files)
            url = self._write_group(files, target, renderer_for(name))
            output.append(self.policy.fill_template(attributes, url))

        return "".join(output), dependent

    def _write_group(self, files: list[str], target: str, renderer: Renderer) -> str:
        """Persist one group's artifact and return its hashed URL."""
        url = self.paths.expand(target)
        output_file = self.paths.to_filesystem(target)

        if "#" in target:
            content = self._minify(files, output_file)
            digest = self.hasher.get_hash(content)
            output_file = output_file.replace("#", digest)
            renderer.render(content, output_file)
            return url.replace("#", digest)

        if self.render_only_if_missing and os.path.isfile(output_file):
            logger.debug("Reusing existing output %s", output_file)
            content = _read_text(output_file)
        else:
            content = self._minify(files, output_file)
            renderer.render(content, output_file)

        digest = self.hasher.get_hash(content)
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}{self.hash_key_name}={digest}"

    def _minify(self, files: list[str], output_file: str) -> str:
        preprocess = self.policy.preprocess
        parts = []
        for path in files:
            text = _read_text(path)
            if preprocess is not None:
                text = preprocess(text, path, output_file)
            parts.append(text + "\n")
        return self.minifier.minify("".join(parts))

    def _input_file(self, asset: Asset) -> InputFile:
        resolvers = self.runtime.resolvers
        if asset.kind == "local":
            return InputFile(self.paths.to_filesystem(asset.local_path), resolvers.get("local"))
        return InputFile(asset.remote_path or "", resolvers.get(asset.kind))

    def _resolve(self, asset: Asset) -> list[str]:
        input_file = self._input_file(asset)
        files = input_file.resolve()
        if not files:
            logger.warning("No files found for %s asset %s", asset.kind, input_file.path)
        return files

    @staticmethod
    def _format_attributes(group: GroupBundle) -> str:
        return "".join(
            f'{name}="{html.escape(value, quote=True)}" '
            for name, value in group.attributes.items()
        )

    @staticmethod
    def _group_destination(destination: str, group: str) -> str:
        """Derive a group's destination, e.g. ``site.css`` -> ``site.print.css``."""
        if group == DEFAULT_GROUP:
            return destination
        path, sep, query = destination.partition("?")
        head, dot, extension = path.rpartition(".")
        if not dot or "/" in extension:
            return f"{path}.{group}{sep}{query}"
        return f"{head}.{group}.{extension}{sep}{query}"


def javascript(**kwargs) -> Bundle:
    """Return a script bundle; keyword arguments go to `Bundle`."""
    return Bundle(SCRIPT_POLICY, **kwargs)


def css(**kwargs) -> Bundle:
    """Return a style sheet bundle; keyword arguments go to `Bundle`."""
    return Bundle(STYLE_POLICY, **kwargs)
