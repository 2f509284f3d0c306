"""Shared constants for ft-flags."""

PACKAGE_NAME = "ft-flags"
PACKAGE_VERSION = "0.1.0"

# Reserved feature name enabled automatically unless suppressed
DEFAULT_FEATURE = "default"

# Non-feature enablers recorded during resolution
CAUSE_DEFAULT = "<default>"
CAUSE_EXPLICIT = "<explicit>"
CAUSE_ALL_FEATURES = "<all-features>"

# External reference syntax
DEP_PREFIX = "dep:"
REF_SEPARATOR = ":"

# Feature ids longer than this get a warning from the schema validator
MAX_FEATURE_ID_LENGTH = 64

# Environment layer
ENV_PREFIX = "FT_"
ENV_TRUTHY = frozenset({"1", "true", "yes", "on"})

# Manifest files searched by the loader, in order
DENO_JSON = "deno.json"
PACKAGE_JSON = "package.json"
YAML_MANIFESTS = ("ft-flags.yaml", "ft-flags.yml")

# Logging defaults
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FILE_PREFIX = "ft_flags"
