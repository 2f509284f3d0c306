"""
Defines project-specific exception classes.
"""
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ft_flags.registry.models import FeatureState


class FeatureFlagError(Exception):
    """Base class for all custom exceptions in ft-flags."""
    pass


class FeatureNotFoundError(FeatureFlagError):
    """Raised when a feature is not defined in the schema."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f'Feature "{feature}" is not defined in the schema')


class FeatureNotEnabledError(FeatureFlagError):
    """
    Raised when code requires a feature that is not enabled.
    Carries the feature name and the state that explains why.
    """

    def __init__(self, feature: str, state: "FeatureState"):
        self.feature = feature
        self.state = state
        super().__init__(
            f'Feature "{feature}" is not enabled (reason: {state.reason.value})')


class FeatureSchemaError(FeatureFlagError):
    """Raised when building a registry schema from invalid definitions."""
    pass


class ConfigLoadError(FeatureFlagError):
    """
    Raised when reading or parsing a manifest file fails.
    A file that simply does not exist is not an error.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source

        full_msg = message
        if source:
            full_msg += f" (source: {source})"
        super().__init__(full_msg)
