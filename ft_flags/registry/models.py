"""Data models for the boolean feature registry.

The registry is the flat, per-feature on/off view used at runtime.  Every
type here is frozen; registry operations return new objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from ft_flags.manifest.model import FeatureMetadata
from ft_flags.names import FeatureName


class FeatureStateReason(str, Enum):
    EXPLICIT_ENABLED = "explicit-enabled"
    EXPLICIT_DISABLED = "explicit-disabled"
    DEFAULT_ENABLED = "default-enabled"
    DEFAULT_DISABLED = "default-disabled"
    ENABLE_ALL = "enable-all"
    DISABLE_ALL = "disable-all"


@dataclass(frozen=True)
class ConfigSource:
    """Where a :class:`FeatureConfig` came from.

    ``type`` is one of ``deno.json``, ``package.json``, ``yaml``, ``env``,
    ``cli`` or ``programmatic``; the remaining fields carry the detail
    relevant to that type.
    """

    type: str = "programmatic"
    path: Optional[str] = None
    variable: Optional[str] = None
    args: Tuple[str, ...] = ()


PROGRAMMATIC = ConfigSource()


@dataclass(frozen=True)
class FeatureConfig:
    """Which features to switch on or off.  ``disabled`` overrides ``enabled``."""

    enabled: Tuple[str, ...] = ()
    disabled: Tuple[str, ...] = ()
    enable_all: bool = False
    disable_all: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "enabled", tuple(self.enabled))
        object.__setattr__(self, "disabled", tuple(self.disabled))


@dataclass(frozen=True)
class ResolvedConfig:
    config: FeatureConfig = field(default_factory=FeatureConfig)
    source: ConfigSource = PROGRAMMATIC


@dataclass(frozen=True)
class FeatureDefinition:
    """A single feature in a registry schema."""

    id: FeatureName
    name: Optional[str] = None
    description: Optional[str] = None
    default_enabled: bool = False
    metadata: Optional[FeatureMetadata] = None


@dataclass(frozen=True)
class FeatureDefinitionInput:
    """Unvalidated input to :func:`ft_flags.registry.schema.build_schema`."""

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    default_enabled: bool = False
    metadata: Optional[FeatureMetadata] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FeatureDefinitionInput:
        meta = data.get("metadata")
        if isinstance(meta, Mapping):
            meta = FeatureMetadata.from_dict(meta)
        return cls(
            id=data.get("id", ""),
            name=data.get("name"),
            description=data.get("description"),
            default_enabled=bool(data.get("default_enabled", data.get("defaultEnabled", False))),
            metadata=meta,
        )

    @classmethod
    def from_definition(cls, definition: FeatureDefinition) -> FeatureDefinitionInput:
        return cls(
            id=str(definition.id),
            name=definition.name,
            description=definition.description,
            default_enabled=definition.default_enabled,
            metadata=definition.metadata,
        )


@dataclass(frozen=True)
class FeatureSchema:
    """All feature definitions, keyed by id.  In the flat model every feature is a root."""

    features: Mapping[FeatureName, FeatureDefinition] = field(
        default_factory=lambda: MappingProxyType({})
    )
    roots: Tuple[FeatureName, ...] = ()


@dataclass(frozen=True)
class FeatureState:
    enabled: bool
    reason: FeatureStateReason
    source: Optional[ConfigSource] = None


@dataclass(frozen=True)
class FeatureCheckResult:
    enabled: bool
    feature: str
    state: FeatureState


@dataclass(frozen=True)
class FeatureRegistry:
    """A schema plus the current state of each of its features."""

    schema: FeatureSchema = field(default_factory=FeatureSchema)
    states: Mapping[FeatureName, FeatureState] = field(
        default_factory=lambda: MappingProxyType({})
    )
    config: ResolvedConfig = field(default_factory=ResolvedConfig)
