"""Feature registry.

Holds a schema and the on/off state of each feature.  Registries are
immutable: :func:`set_feature_state`, :func:`enable_feature`,
:func:`disable_feature` and :func:`merge_registries` return new registries
and never touch their inputs.

Usage::

    from ft_flags.registry import FeatureConfig, create_registry, is_enabled

    registry = create_registry(schema, FeatureConfig(enabled=("fs",)))
    if is_enabled(registry, "fs"):
        ...
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from ft_flags.errors import FeatureNotEnabledError, FeatureNotFoundError
from ft_flags.manifest.resolve import ResolvedFeatures
from ft_flags.names import FeatureName, is_valid_feature_name
from ft_flags.registry.models import (
    PROGRAMMATIC,
    ConfigSource,
    FeatureCheckResult,
    FeatureConfig,
    FeatureDefinition,
    FeatureDefinitionInput,
    FeatureRegistry,
    FeatureSchema,
    FeatureState,
    FeatureStateReason,
    ResolvedConfig,
)
from ft_flags.registry.schema import build_schema, create_empty_schema

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING_STATE = FeatureState(enabled=False, reason=FeatureStateReason.DEFAULT_DISABLED)


def _initial_state(definition: FeatureDefinition, config: FeatureConfig) -> FeatureState:
    if config.enable_all:
        return FeatureState(enabled=True, reason=FeatureStateReason.ENABLE_ALL)
    if config.disable_all:
        return FeatureState(enabled=False, reason=FeatureStateReason.DISABLE_ALL)
    if definition.default_enabled:
        return FeatureState(enabled=True, reason=FeatureStateReason.DEFAULT_ENABLED)
    return FeatureState(enabled=False, reason=FeatureStateReason.DEFAULT_DISABLED)


def create_registry(
    schema: Optional[FeatureSchema] = None,
    config: Optional[FeatureConfig] = None,
    config_source: Optional[ConfigSource] = None,
) -> FeatureRegistry:
    """Create a registry from *schema* and *config*.

    Initial states come from ``enable_all``, ``disable_all`` and each
    definition's ``default_enabled`` flag, in that order.  ``config.enabled``
    is applied next and ``config.disabled`` last, so a name listed in both
    ends up disabled.  Names missing from the schema are skipped.
    """
    schema = schema or create_empty_schema()
    config = config or FeatureConfig()
    source = config_source or PROGRAMMATIC

    states: Dict[FeatureName, FeatureState] = {
        fid: _initial_state(definition, config) for fid, definition in schema.features.items()
    }

    for names, enabled, reason in (
        (config.enabled, True, FeatureStateReason.EXPLICIT_ENABLED),
        (config.disabled, False, FeatureStateReason.EXPLICIT_DISABLED),
    ):
        for name in names:
            if name not in schema.features:
                logger.warning(
                    "Feature '%s' from %s config is not defined in the schema; skipping.",
                    name,
                    source.type,
                )
                continue
            states[FeatureName.unchecked(name)] = FeatureState(
                enabled=enabled, reason=reason, source=source
            )

    return FeatureRegistry(
        schema=schema,
        states=MappingProxyType(states),
        config=ResolvedConfig(config=config, source=source),
    )


def create_simple_registry(names: Iterable[str]) -> FeatureRegistry:
    """Registry where every named feature is defined and explicitly enabled."""
    names = list(names)
    schema = build_schema(FeatureDefinitionInput(id=name) for name in names)
    return create_registry(schema, FeatureConfig(enabled=tuple(names)))


def registry_from_resolved(
    resolved: ResolvedFeatures,
    source: Optional[ConfigSource] = None,
) -> FeatureRegistry:
    """Registry view of a manifest resolution.

    The schema holds every declared feature with a valid kebab-case name
    (descriptions taken from manifest metadata); the resolved features are
    explicitly enabled.
    """
    manifest = resolved.manifest
    definitions = []
    for name in manifest.features:
        if not is_valid_feature_name(name):
            continue
        meta = manifest.metadata.get(name)
        definitions.append(
            FeatureDefinitionInput(
                id=name,
                description=meta.description if meta else None,
                metadata=meta,
            )
        )
    schema = build_schema(definitions)
    enabled = tuple(sorted(n for n in resolved.enabled if n in schema.features))
    return create_registry(schema, FeatureConfig(enabled=enabled), source)


# ── Queries ──────────────────────────────────────────────────────────────


def get_feature(registry: FeatureRegistry, feature: str) -> Optional[FeatureDefinition]:
    return registry.schema.features.get(feature)


def get_feature_state(registry: FeatureRegistry, feature: str) -> Optional[FeatureState]:
    return registry.states.get(feature)


def is_enabled(registry: FeatureRegistry, feature: str) -> bool:
    """Return ``True`` if *feature* is enabled.  Unknown features are disabled."""
    state = registry.states.get(feature)
    return state.enabled if state is not None else False


def is_disabled(registry: FeatureRegistry, feature: str) -> bool:
    return not is_enabled(registry, feature)


def check_feature(registry: FeatureRegistry, feature: str) -> FeatureCheckResult:
    """Enabled flag plus the state explaining it."""
    state = registry.states.get(feature, _MISSING_STATE)
    return FeatureCheckResult(enabled=state.enabled, feature=feature, state=state)


def require_feature(registry: FeatureRegistry, feature: str) -> None:
    """Raise unless *feature* is enabled.

    Raises:
        FeatureNotFoundError: *feature* has neither a definition nor a state.
        FeatureNotEnabledError: *feature* is known but disabled.
    """
    state = registry.states.get(feature)
    if state is None:
        if feature not in registry.schema.features:
            raise FeatureNotFoundError(feature)
        state = _MISSING_STATE
    if not state.enabled:
        raise FeatureNotEnabledError(feature, state)


def list_features(registry: FeatureRegistry) -> List[FeatureName]:
    return list(registry.schema.features)


def list_enabled_features(registry: FeatureRegistry) -> List[FeatureName]:
    return [fid for fid, state in registry.states.items() if state.enabled]


def list_disabled_features(registry: FeatureRegistry) -> List[FeatureName]:
    return [fid for fid, state in registry.states.items() if not state.enabled]


# ── Immutable updates ────────────────────────────────────────────────────


def set_feature_state(registry: FeatureRegistry, feature: str, enabled: bool) -> FeatureRegistry:
    """Return a copy of *registry* with *feature* switched on or off."""
    states = dict(registry.states)
    states[FeatureName.unchecked(feature)] = FeatureState(
        enabled=enabled,
        reason=(
            FeatureStateReason.EXPLICIT_ENABLED if enabled else FeatureStateReason.EXPLICIT_DISABLED
        ),
        source=PROGRAMMATIC,
    )
    return FeatureRegistry(
        schema=registry.schema,
        states=MappingProxyType(states),
        config=registry.config,
    )


def enable_feature(registry: FeatureRegistry, feature: str) -> FeatureRegistry:
    return set_feature_state(registry, feature, True)


def disable_feature(registry: FeatureRegistry, feature: str) -> FeatureRegistry:
    return set_feature_state(registry, feature, False)


def clone_registry(registry: FeatureRegistry) -> FeatureRegistry:
    return FeatureRegistry(
        schema=registry.schema,
        states=MappingProxyType(dict(registry.states)),
        config=registry.config,
    )


def merge_registries(base: FeatureRegistry, override: FeatureRegistry) -> FeatureRegistry:
    """Union of two registries; *override* wins for schema entries and states.

    The merged schema is rebuilt through :func:`build_schema`, and the
    configuration is taken from *override*.
    """
    definitions: Dict[str, FeatureDefinitionInput] = {}
    for reg in (base, override):
        for fid, definition in reg.schema.features.items():
            definitions[str(fid)] = FeatureDefinitionInput.from_definition(definition)
    schema = build_schema(definitions.values())

    states: Dict[FeatureName, FeatureState] = dict(base.states)
    states.update(override.states)

    return FeatureRegistry(
        schema=schema,
        states=MappingProxyType(states),
        config=override.config,
    )


# ── Evaluation helpers ───────────────────────────────────────────────────


def all_enabled(registry: FeatureRegistry, features: Iterable[str]) -> bool:
    return all(is_enabled(registry, f) for f in features)


def any_enabled(registry: FeatureRegistry, features: Iterable[str]) -> bool:
    return any(is_enabled(registry, f) for f in features)


def none_enabled(registry: FeatureRegistry, features: Iterable[str]) -> bool:
    return not any_enabled(registry, features)


def filter_enabled(registry: FeatureRegistry, features: Iterable[str]) -> List[str]:
    return [f for f in features if is_enabled(registry, f)]


def filter_disabled(registry: FeatureRegistry, features: Iterable[str]) -> List[str]:
    return [f for f in features if not is_enabled(registry, f)]


def count_enabled(registry: FeatureRegistry, features: Iterable[str]) -> int:
    return sum(1 for f in features if is_enabled(registry, f))


def when_enabled(registry: FeatureRegistry, feature: str, fn: Callable[[], T]) -> Optional[T]:
    """Call *fn* if *feature* is enabled; return its result, else ``None``."""
    if is_enabled(registry, feature):
        return fn()
    return None


def when_disabled(registry: FeatureRegistry, feature: str, fn: Callable[[], T]) -> Optional[T]:
    if not is_enabled(registry, feature):
        return fn()
    return None


def choose(registry: FeatureRegistry, feature: str, enabled_value: T, disabled_value: T) -> T:
    return enabled_value if is_enabled(registry, feature) else disabled_value
