"""Core data types for registered assets and their groups.

Assets are immutable once registered. Groups own an ordered list of assets
(order is the concatenation and emission order) and one attribute set that
is rendered onto every tag the group produces.
"""

from __future__ import annotations

import copy
import dataclasses
import enum
import hashlib
import json
import typing

if typing.TYPE_CHECKING:
    from asset_bundler.resolvers import Resolver

DEFAULT_GROUP: typing.Final = "default"

AssetKind = typing.Literal["local", "remote", "embedded"]


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        raise exc(f"{field_name}: {message}" if field_name else message)


class RenderMode(enum.Enum):
    """How a bundle renders: one tag per asset, or one artifact per group."""

    DEBUG = "debug"
    RELEASE = "release"


@dataclasses.dataclass(frozen=True, slots=True)
class Asset:
    """One registered input.

    ``remote_path`` holds the external URL for remote assets and the resource
    identifier for embedded ones; plain local assets leave it as None.
    """

    local_path: str
    remote_path: str | None = None
    is_embedded_resource: bool = False

    def __post_init__(self) -> None:
        """Validate that exactly one content origin is described."""
        _require(
            condition=isinstance(self.local_path, str),
            message="must be str",
            field_name="local_path",
            exc=TypeError,
        )
        _require(
            condition=self.local_path.strip() != "",
            message="cannot be empty string",
            field_name="local_path",
        )
        if self.is_embedded_resource:
            _require(
                condition=bool(self.remote_path and self.remote_path.strip()),
                message="embedded resources need a resource identifier",
                field_name="remote_path",
            )
        elif self.remote_path is not None:
            _require(
                condition=self.remote_path.strip() != "",
                message="cannot be empty string",
                field_name="remote_path",
            )

    @property
    def kind(self) -> AssetKind:
        """Return how the asset's content is obtained."""
        if self.is_embedded_resource:
            return "embedded"
        if self.remote_path is not None:
            return "remote"
        return "local"


@dataclasses.dataclass(slots=True)
class GroupBundle:
    """A named partition of assets sharing one HTML attribute set."""

    assets: list[Asset] = dataclasses.field(default_factory=list)
    attributes: dict[str, str] = dataclasses.field(default_factory=dict)

    def merge_attributes(self, attributes: typing.Mapping[str, str]) -> None:
        """Overwrite only the given keys."""
        self.attributes.update(attributes)

    def replace_attributes(self, attributes: typing.Mapping[str, str]) -> None:
        """Replace the attribute set wholesale."""
        self.attributes = dict(attributes)

    def assets_of(self, kind: AssetKind) -> list[Asset]:
        """Return the assets of one kind, in registration order."""
        return [asset for asset in self.assets if asset.kind == kind]


GroupMap = dict[str, GroupBundle]


def new_group_map() -> GroupMap:
    """Return a group map holding only the empty default group."""
    return {DEFAULT_GROUP: GroupBundle()}


def snapshot_groups(groups: GroupMap) -> GroupMap:
    """Deep-copy a group map so later registrations do not leak into it."""
    return copy.deepcopy(groups)


def fingerprint_groups(groups: GroupMap) -> str:
    """Return a structural digest of a group map.

    Two maps with the same groups, attributes and assets in the same order
    produce the same digest regardless of object identity.
    """
    payload = [
        {
            "group": name,
            "attributes": sorted(group.attributes.items()),
            "assets": [
                [a.local_path, a.remote_path, a.is_embedded_resource]
                for a in group.assets
            ],
        }
        for name, group in groups.items()
    ]
    data = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode()
    return hashlib.sha256(data).hexdigest()


@dataclasses.dataclass(frozen=True, slots=True)
class InputFile:
    """A resolvable reference paired with the resolver that understands it."""

    path: str
    resolver: Resolver

    def resolve(self) -> list[str]:
        """Return the concrete, readable locations behind ``path``."""
        return list(self.resolver.try_resolve(self.path))
