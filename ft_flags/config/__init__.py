"""Manifest file loading and environment configuration for ft-flags."""

from ft_flags.config.env import (
    load_from_env,
    load_resolve_options_from_env,
    merge_configs,
    parse_feature_list,
)
from ft_flags.config.loader import (
    load_manifest,
    load_manifest_from_deno_json,
    load_manifest_from_package_json,
    load_manifest_from_yaml,
    read_text_file,
)
from ft_flags.config.schema import FeatureMetadataConfig, ManifestFileConfig, MetadataSection

__all__ = [
    "FeatureMetadataConfig",
    "ManifestFileConfig",
    "MetadataSection",
    "load_from_env",
    "load_manifest",
    "load_manifest_from_deno_json",
    "load_manifest_from_package_json",
    "load_manifest_from_yaml",
    "load_resolve_options_from_env",
    "merge_configs",
    "parse_feature_list",
    "read_text_file",
]
