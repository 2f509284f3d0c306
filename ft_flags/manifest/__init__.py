"""Cargo-style feature manifests: model, resolution, validation and trees."""

from ft_flags.manifest.model import (
    FeatureManifest,
    FeatureMetadata,
    ManifestSource,
    PackageDependencies,
    create_empty_manifest,
    create_simple_manifest,
    parse_manifest,
    to_raw_config,
)
from ft_flags.manifest.resolve import (
    ResolvedFeatures,
    ResolveOptions,
    get_enable_chain,
    is_feature_enabled,
    list_available_features,
    list_disabled_features,
    list_enabled_features,
    resolve_features,
    to_feature_name_set,
)
from ft_flags.manifest.tree import FeatureTreeNode, build_feature_tree, render_feature_tree
from ft_flags.manifest.validate import (
    ExternalReference,
    ValidateOptions,
    ValidationResult,
    detect_cycles,
    extract_external_references,
    merge_validation_results,
    validate_manifest,
)

__all__ = [
    "ExternalReference",
    "FeatureManifest",
    "FeatureMetadata",
    "FeatureTreeNode",
    "ManifestSource",
    "PackageDependencies",
    "ResolveOptions",
    "ResolvedFeatures",
    "ValidateOptions",
    "ValidationResult",
    "build_feature_tree",
    "create_empty_manifest",
    "create_simple_manifest",
    "detect_cycles",
    "extract_external_references",
    "get_enable_chain",
    "is_feature_enabled",
    "list_available_features",
    "list_disabled_features",
    "list_enabled_features",
    "merge_validation_results",
    "parse_manifest",
    "render_feature_tree",
    "resolve_features",
    "to_feature_name_set",
    "to_raw_config",
    "validate_manifest",
]
