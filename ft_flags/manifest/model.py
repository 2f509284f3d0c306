"""Feature manifest model and parser.

A manifest maps each feature name to the features it activates.  The layout
follows Cargo conventions::

    {
        "features": {
            "default": ["std"],
            "std": ["fs", "env"],
            "fs": [],
            "env": [],
            "serde": ["dep:serde", "serde:derive"]
        },
        "metadata": {
            "std": {"description": "Standard library"}
        }
    }

Parsing is purely structural.  Names and references are copied into
immutable containers as-is; :func:`ft_flags.manifest.validate.validate_manifest`
is responsible for reporting garbage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ft_flags.constants import DEFAULT_FEATURE

# camelCase keys found in deno.json / package.json → attribute names
_METADATA_KEYS: Dict[str, str] = {
    "description": "description",
    "since": "since",
    "unstable": "unstable",
    "deprecated": "deprecated",
    "deprecatedMessage": "deprecated_message",
    "deprecated_message": "deprecated_message",
    "docsUrl": "docs_url",
    "docs_url": "docs_url",
    "requiredDeps": "required_deps",
    "required_deps": "required_deps",
}


@dataclass(frozen=True)
class FeatureMetadata:
    """Optional descriptive data for a feature.

    Attributes
    ----------
    description:
        Human-readable description.
    since:
        Version in which the feature first appeared.
    unstable:
        Feature is experimental.
    deprecated / deprecated_message:
        Deprecation flag and the message shown to users.
    docs_url:
        Link to documentation.
    required_deps:
        External packages the feature needs at runtime.
    extra:
        Unrecognised keys, kept for round-tripping.
    """

    description: Optional[str] = None
    since: Optional[str] = None
    unstable: bool = False
    deprecated: bool = False
    deprecated_message: Optional[str] = None
    docs_url: Optional[str] = None
    required_deps: Tuple[str, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FeatureMetadata:
        """Build from a raw mapping, accepting camelCase or snake_case keys."""
        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            attr = _METADATA_KEYS.get(key)
            if attr is None:
                extra[key] = value
            else:
                kwargs[attr] = value

        required = kwargs.get("required_deps")
        if required is not None:
            kwargs["required_deps"] = tuple(required)
        kwargs["unstable"] = bool(kwargs.get("unstable", False))
        kwargs["deprecated"] = bool(kwargs.get("deprecated", False))
        return cls(**kwargs, extra=MappingProxyType(extra))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used in config files."""
        out: Dict[str, Any] = dict(self.extra)
        if self.description is not None:
            out["description"] = self.description
        if self.since is not None:
            out["since"] = self.since
        if self.unstable:
            out["unstable"] = True
        if self.deprecated:
            out["deprecated"] = True
        if self.deprecated_message is not None:
            out["deprecatedMessage"] = self.deprecated_message
        if self.docs_url is not None:
            out["docsUrl"] = self.docs_url
        if self.required_deps:
            out["requiredDeps"] = list(self.required_deps)
        return out


@dataclass(frozen=True)
class ManifestSource:
    """Where a manifest came from (``deno.json``, ``package.json``, ``yaml``, ``inline``)."""

    type: str
    path: Optional[str] = None


@dataclass(frozen=True)
class PackageDependencies:
    """Declared package dependencies, used to cross-check external references."""

    dependencies: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    optional_dependencies: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    peer_dependencies: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    dev_dependencies: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PackageDependencies:
        """Build from package.json-style keys; missing or non-mapping sections are empty."""

        def _section(*keys: str) -> Mapping[str, str]:
            for key in keys:
                value = data.get(key)
                if isinstance(value, Mapping):
                    return MappingProxyType({str(k): str(v) for k, v in value.items()})
            return MappingProxyType({})

        return cls(
            dependencies=_section("dependencies"),
            optional_dependencies=_section("optionalDependencies", "optional_dependencies"),
            peer_dependencies=_section("peerDependencies", "peer_dependencies"),
            dev_dependencies=_section("devDependencies", "dev_dependencies"),
        )

    def all_names(self) -> frozenset:
        """Every package name across all dependency sections."""
        names = set(self.dependencies)
        names.update(self.optional_dependencies)
        names.update(self.peer_dependencies)
        names.update(self.dev_dependencies)
        return frozenset(names)


@dataclass(frozen=True)
class FeatureManifest:
    """Parsed feature manifest.

    ``features`` is the adjacency list of the activation graph: an entry
    ``a -> (b, c)`` means enabling ``a`` also enables ``b`` and ``c``.
    Insertion order is preserved.
    """

    features: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    metadata: Mapping[str, FeatureMetadata] = field(
        default_factory=lambda: MappingProxyType({})
    )
    source: Optional[ManifestSource] = None
    dependencies: Optional[PackageDependencies] = None

    def __contains__(self, name: object) -> bool:
        return name in self.features

    def targets(self, name: str) -> Tuple[str, ...]:
        """Activation targets of *name*, empty for undeclared names."""
        return self.features.get(name, ())


# ── Construction ─────────────────────────────────────────────────────────


def parse_manifest(
    raw: Mapping[str, Any],
    source: Optional[ManifestSource] = None,
    dependencies: Optional[PackageDependencies] = None,
) -> FeatureManifest:
    """Create a manifest from a raw ``{"features": ..., "metadata": ...}`` mapping.

    No validation is performed.  Metadata values may be mappings or
    ready-made :class:`FeatureMetadata` instances.
    """
    features: Dict[str, Tuple[str, ...]] = {}
    for name, targets in (raw.get("features") or {}).items():
        if isinstance(targets, str):
            targets = (targets,)
        features[name] = tuple(targets or ())

    metadata: Dict[str, FeatureMetadata] = {}
    for name, meta in (raw.get("metadata") or {}).items():
        if isinstance(meta, FeatureMetadata):
            metadata[name] = meta
        else:
            metadata[name] = FeatureMetadata.from_dict(meta if isinstance(meta, Mapping) else {})

    return FeatureManifest(
        features=MappingProxyType(features),
        metadata=MappingProxyType(metadata),
        source=source,
        dependencies=dependencies,
    )


def create_empty_manifest() -> FeatureManifest:
    return FeatureManifest()


def create_simple_manifest(
    names: Iterable[str],
    default_names: Optional[Iterable[str]] = None,
) -> FeatureManifest:
    """Manifest of independent features, plus ``default`` if *default_names* is non-empty."""
    features: Dict[str, Tuple[str, ...]] = {name: () for name in names}
    defaults = tuple(default_names or ())
    if defaults:
        features[DEFAULT_FEATURE] = defaults
    return FeatureManifest(features=MappingProxyType(features))


def to_raw_config(manifest: FeatureManifest) -> Dict[str, Any]:
    """Convert a manifest back to the raw mapping accepted by :func:`parse_manifest`."""
    raw: Dict[str, Any] = {
        "features": {name: list(targets) for name, targets in manifest.features.items()},
    }
    if manifest.metadata:
        raw["metadata"] = {name: meta.to_dict() for name, meta in manifest.metadata.items()}
    return raw
