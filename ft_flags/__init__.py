"""
ft-flags - Cargo-style feature flags for packages.

Features are declared in a flat manifest (``deno.json``, ``package.json``
or ``ft-flags.yaml``) mapping each feature to the features and external
references it activates.  This package resolves, validates and displays
such manifests, and provides a boolean runtime registry built on top.
"""

from ft_flags.constants import PACKAGE_NAME, PACKAGE_VERSION
from ft_flags.errors import (
    ConfigLoadError,
    FeatureFlagError,
    FeatureNotEnabledError,
    FeatureNotFoundError,
    FeatureSchemaError,
)
from ft_flags.manifest import (
    FeatureManifest,
    ResolvedFeatures,
    ResolveOptions,
    ValidationResult,
    detect_cycles,
    get_enable_chain,
    parse_manifest,
    resolve_features,
    validate_manifest,
)
from ft_flags.names import FeatureName, NameParseResult

__version__ = PACKAGE_VERSION
__app_name__ = PACKAGE_NAME

__all__ = [
    "ConfigLoadError",
    "FeatureFlagError",
    "FeatureManifest",
    "FeatureName",
    "FeatureNotEnabledError",
    "FeatureNotFoundError",
    "FeatureSchemaError",
    "NameParseResult",
    "PACKAGE_NAME",
    "PACKAGE_VERSION",
    "ResolveOptions",
    "ResolvedFeatures",
    "ValidationResult",
    "__app_name__",
    "__version__",
    "detect_cycles",
    "get_enable_chain",
    "parse_manifest",
    "resolve_features",
    "validate_manifest",
]
