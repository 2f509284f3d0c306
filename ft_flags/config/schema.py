"""Pydantic models for manifest files.

Describes the parts of ``deno.json``, ``package.json`` and
``ft-flags.yaml`` that the loader reads.  Everything else in those files
is accepted and ignored.  Only the *shape* is checked here: feature names
and references are validated later by
:func:`ft_flags.manifest.validate.validate_manifest`.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FeatureMetadataConfig(BaseModel):
    """Metadata for a single feature (``metadata.features.<name>``)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    description: Optional[str] = None
    since: Optional[str] = Field(
        default=None,
        description="Version in which the feature first appeared.",
    )
    unstable: bool = False
    deprecated: bool = False
    deprecated_message: Optional[str] = Field(default=None, alias="deprecatedMessage")
    docs_url: Optional[str] = Field(default=None, alias="docsUrl")
    required_deps: List[str] = Field(
        default_factory=list,
        alias="requiredDeps",
        description="External packages this feature needs.",
    )


class MetadataSection(BaseModel):
    """The top-level ``metadata`` object; only its ``features`` key is used."""

    model_config = ConfigDict(extra="allow")

    features: Dict[str, FeatureMetadataConfig] = Field(default_factory=dict)


class ManifestFileConfig(BaseModel):
    """A manifest-bearing config file."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: Optional[str] = None
    features: Dict[str, List[str]] = Field(
        ...,
        description="Feature name to the features / references it activates.",
    )
    metadata: MetadataSection = Field(default_factory=MetadataSection)
    imports: Dict[str, str] = Field(
        default_factory=dict,
        description="Deno import map; keys count as dependencies.",
    )
    dependencies: Dict[str, str] = Field(default_factory=dict)
    optional_dependencies: Dict[str, str] = Field(
        default_factory=dict, alias="optionalDependencies"
    )
    peer_dependencies: Dict[str, str] = Field(default_factory=dict, alias="peerDependencies")
    dev_dependencies: Dict[str, str] = Field(default_factory=dict, alias="devDependencies")

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, v):
        return {} if v is None else v

    @field_validator(
        "imports",
        "dependencies",
        "optional_dependencies",
        "peer_dependencies",
        "dev_dependencies",
        mode="before",
    )
    @classmethod
    def _null_section(cls, v):
        return {} if v is None else v
