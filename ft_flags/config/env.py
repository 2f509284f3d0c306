"""Environment-variable configuration.

Reads feature selections from ``FT_*`` variables (the prefix is
configurable).  Lookups go through a ``getenv(name) -> Optional[str]``
callable, normally :func:`os.environ.get`, so nothing here touches the
process environment directly.

Recognised variables (with the default prefix)::

    FT_FEATURES / FT_ENABLED     comma-separated features to enable
    FT_DISABLED                  comma-separated features to disable
    FT_ENABLE_ALL / FT_ALL_FEATURES
    FT_DISABLE_ALL
    FT_NO_DEFAULT_FEATURES       (resolve options only)
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from ft_flags.constants import ENV_PREFIX, ENV_TRUTHY
from ft_flags.manifest.resolve import ResolveOptions
from ft_flags.registry.models import FeatureConfig

logger = logging.getLogger(__name__)

GetEnv = Callable[[str], Optional[str]]


def parse_feature_list(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated list, trimming entries and dropping empties."""
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _is_truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in ENV_TRUTHY


def _first(getenv: GetEnv, prefix: str, *suffixes: str) -> Optional[str]:
    for suffix in suffixes:
        value = getenv(prefix + suffix)
        if value is not None:
            return value
    return None


def load_from_env(getenv: GetEnv, prefix: str = ENV_PREFIX) -> FeatureConfig:
    """Build a :class:`FeatureConfig` from environment variables."""
    enabled = parse_feature_list(_first(getenv, prefix, "FEATURES", "ENABLED"))
    disabled = parse_feature_list(getenv(prefix + "DISABLED"))
    enable_all = _is_truthy(_first(getenv, prefix, "ENABLE_ALL", "ALL_FEATURES"))
    disable_all = _is_truthy(getenv(prefix + "DISABLE_ALL"))

    if enabled or disabled or enable_all or disable_all:
        logger.debug(
            "Env config (%s*): enabled=%s disabled=%s enable_all=%s disable_all=%s",
            prefix,
            list(enabled),
            list(disabled),
            enable_all,
            disable_all,
        )
    return FeatureConfig(
        enabled=enabled,
        disabled=disabled,
        enable_all=enable_all,
        disable_all=disable_all,
    )


def load_resolve_options_from_env(getenv: GetEnv, prefix: str = ENV_PREFIX) -> ResolveOptions:
    """Build manifest :class:`ResolveOptions` from environment variables."""
    return ResolveOptions(
        features=parse_feature_list(getenv(prefix + "FEATURES")),
        no_default_features=_is_truthy(getenv(prefix + "NO_DEFAULT_FEATURES")),
        all_features=_is_truthy(getenv(prefix + "ALL_FEATURES")),
    )


def merge_configs(*configs: FeatureConfig) -> FeatureConfig:
    """Merge configs left to right; later ones take precedence.

    A name enabled by a later config is dropped from the disabled list built
    so far, and the other way round.  ``enable_all``/``disable_all`` come
    from the last config that sets either of them.
    """
    enabled: List[str] = []
    disabled: List[str] = []
    enable_all = False
    disable_all = False

    for config in configs:
        for name in config.enabled:
            if name in disabled:
                disabled.remove(name)
            if name not in enabled:
                enabled.append(name)
        for name in config.disabled:
            if name in enabled:
                enabled.remove(name)
            if name not in disabled:
                disabled.append(name)
        if config.enable_all or config.disable_all:
            enable_all = config.enable_all
            disable_all = config.disable_all

    return FeatureConfig(
        enabled=tuple(enabled),
        disabled=tuple(disabled),
        enable_all=enable_all,
        disable_all=disable_all,
    )
