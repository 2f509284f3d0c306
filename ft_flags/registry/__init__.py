"""Boolean feature registry: schema, states and immutable updates.

Provides the flat runtime view of features (on/off plus a reason), built
from explicit configuration or from a manifest resolution.
"""

from ft_flags.registry.models import (
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
from ft_flags.registry.registry import (
    all_enabled,
    any_enabled,
    check_feature,
    choose,
    clone_registry,
    count_enabled,
    create_registry,
    create_simple_registry,
    disable_feature,
    enable_feature,
    filter_disabled,
    filter_enabled,
    get_feature,
    get_feature_state,
    is_disabled,
    is_enabled,
    list_disabled_features,
    list_enabled_features,
    list_features,
    merge_registries,
    none_enabled,
    registry_from_resolved,
    require_feature,
    set_feature_state,
    when_disabled,
    when_enabled,
)
from ft_flags.registry.schema import (
    build_schema,
    create_empty_schema,
    merge_schemas,
    validate_feature_definition,
    validate_feature_id,
    validate_schema,
)

__all__ = [
    "ConfigSource",
    "FeatureCheckResult",
    "FeatureConfig",
    "FeatureDefinition",
    "FeatureDefinitionInput",
    "FeatureRegistry",
    "FeatureSchema",
    "FeatureState",
    "FeatureStateReason",
    "ResolvedConfig",
    "all_enabled",
    "any_enabled",
    "build_schema",
    "check_feature",
    "choose",
    "clone_registry",
    "count_enabled",
    "create_empty_schema",
    "create_registry",
    "create_simple_registry",
    "disable_feature",
    "enable_feature",
    "filter_disabled",
    "filter_enabled",
    "get_feature",
    "get_feature_state",
    "is_disabled",
    "is_enabled",
    "list_disabled_features",
    "list_enabled_features",
    "list_features",
    "merge_registries",
    "merge_schemas",
    "none_enabled",
    "registry_from_resolved",
    "require_feature",
    "set_feature_state",
    "validate_feature_definition",
    "validate_feature_id",
    "validate_schema",
    "when_disabled",
    "when_enabled",
]
