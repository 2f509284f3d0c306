"""Feature resolution.

Computes the transitive set of enabled features for a manifest and records,
for every enabled feature, which features (or sentinel causes) enabled it.

Usage::

    from ft_flags.manifest import ResolveOptions, parse_manifest, resolve_features

    manifest = parse_manifest({"features": {"default": ["std"], "std": ["fs"], "fs": []}})
    resolved = resolve_features(manifest, ResolveOptions(features=("fs",)))
    assert resolved.enabled == {"default", "std", "fs"}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from ft_flags.constants import (
    CAUSE_ALL_FEATURES,
    CAUSE_DEFAULT,
    CAUSE_EXPLICIT,
    DEFAULT_FEATURE,
)
from ft_flags.manifest.model import FeatureManifest
from ft_flags.names import FeatureName, is_valid_feature_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveOptions:
    """Which features to activate.

    ``all_features`` takes priority over ``features`` and
    ``no_default_features``.
    """

    features: Tuple[str, ...] = ()
    no_default_features: bool = False
    all_features: bool = False

    def __post_init__(self) -> None:
        # Accept any iterable of names (lists from CLI / env parsing).
        object.__setattr__(self, "features", tuple(self.features))


@dataclass(frozen=True)
class ResolvedFeatures:
    """Result of :func:`resolve_features`.

    ``enabled_by`` maps each enabled feature to its distinct enablers in
    the order they were first seen.  Sentinel enablers (``<default>``,
    ``<explicit>``, ``<all-features>``) mark non-feature causes.
    """

    enabled: FrozenSet[str]
    enabled_by: Mapping[str, Tuple[str, ...]]
    manifest: FeatureManifest
    options: ResolveOptions = field(default_factory=ResolveOptions)


def _is_sentinel(cause: str) -> bool:
    return cause.startswith("<")


def resolve_features(
    manifest: FeatureManifest,
    options: Optional[ResolveOptions] = None,
) -> ResolvedFeatures:
    """Resolve which features are enabled.

    Undeclared names (including ``dep:`` and ``pkg:feature`` references)
    are ignored.  A feature that is already enabled is not expanded again,
    so cyclic manifests terminate; run the validator before trusting the
    result of a cyclic manifest.
    """
    opts = options or ResolveOptions()
    enabled: set = set()
    enabled_by: Dict[str, List[str]] = {}

    def activate(root: str, root_cause: str) -> None:
        # Depth-first with an explicit stack; targets are pushed in reverse
        # so they are visited in declaration order.
        stack: List[Tuple[str, str]] = [(root, root_cause)]
        while stack:
            name, cause = stack.pop()
            if not isinstance(name, str) or name not in manifest.features:
                continue

            causes = enabled_by.setdefault(name, [])
            if cause not in causes:
                causes.append(cause)

            if name in enabled:
                continue
            enabled.add(name)

            stack.extend((target, name) for target in reversed(manifest.features[name]))

    if opts.all_features:
        for name in manifest.features:
            activate(name, CAUSE_ALL_FEATURES)
    else:
        if not opts.no_default_features:
            activate(DEFAULT_FEATURE, CAUSE_DEFAULT)
        for name in opts.features:
            if name not in manifest.features:
                logger.debug("Requested feature '%s' is not declared; ignoring.", name)
            activate(name, CAUSE_EXPLICIT)

    logger.debug(
        "Resolved %d of %d feature(s) (all_features=%s, no_default_features=%s, explicit=%s).",
        len(enabled),
        len(manifest.features),
        opts.all_features,
        opts.no_default_features,
        list(opts.features),
    )

    return ResolvedFeatures(
        enabled=frozenset(enabled),
        enabled_by=MappingProxyType({k: tuple(v) for k, v in enabled_by.items()}),
        manifest=manifest,
        options=opts,
    )


def is_feature_enabled(name: str, resolved: ResolvedFeatures) -> bool:
    return name in resolved.enabled


def get_enable_chain(name: str, resolved: ResolvedFeatures) -> Optional[List[str]]:
    """Return one path of enablers leading to *name*, root first.

    Follows the *first* recorded enabler of each feature until a sentinel
    cause is reached.  This is a single witness path, not every route.
    Returns ``None`` if *name* is not enabled.
    """
    if name not in resolved.enabled:
        return None

    chain: List[str] = []
    seen: set = set()
    current: Optional[str] = name
    while current is not None and current not in seen:
        seen.add(current)
        chain.append(current)
        causes = resolved.enabled_by.get(current, ())
        current = None
        if causes and not _is_sentinel(causes[0]):
            current = causes[0]

    chain.reverse()
    return chain


# ── Listings ─────────────────────────────────────────────────────────────


def list_available_features(manifest: FeatureManifest) -> List[str]:
    return sorted(manifest.features)


def list_enabled_features(resolved: ResolvedFeatures) -> List[str]:
    return sorted(resolved.enabled)


def list_disabled_features(resolved: ResolvedFeatures) -> List[str]:
    """Declared features that did not end up enabled."""
    return sorted(name for name in resolved.manifest.features if name not in resolved.enabled)


def to_feature_name_set(resolved: ResolvedFeatures) -> FrozenSet[FeatureName]:
    """Enabled names as :class:`FeatureName` values.

    Names that fail kebab-case validation are dropped.
    """
    return frozenset(
        FeatureName.unchecked(name) for name in resolved.enabled if is_valid_feature_name(name)
    )
