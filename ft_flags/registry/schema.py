"""Registry schema validation and construction.

Features are flat: there is no parent/child hierarchy, so every feature is
a root.  Activation dependencies between features live in the manifest
system (:mod:`ft_flags.manifest`), not here.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Dict, Iterable, List, Sequence, Set

from ft_flags.constants import MAX_FEATURE_ID_LENGTH
from ft_flags.errors import FeatureSchemaError
from ft_flags.manifest.validate import ValidationResult
from ft_flags.names import FeatureName
from ft_flags.registry.models import (
    FeatureDefinition,
    FeatureDefinitionInput,
    FeatureSchema,
)

logger = logging.getLogger(__name__)

_SINCE_RE = re.compile(r"^\d+\.\d+")


def validate_feature_id(feature_id: str) -> ValidationResult:
    if not feature_id or not feature_id.strip():
        return ValidationResult.from_lists(["Feature ID cannot be empty"], [])

    errors: List[str] = []
    warnings: List[str] = []
    parsed = FeatureName.parse(feature_id)
    if not parsed.ok:
        errors.append(
            f"Invalid feature ID \"{feature_id}\": must be kebab-case (e.g., 'async-runtime')"
        )
    if len(feature_id) > MAX_FEATURE_ID_LENGTH:
        warnings.append(
            f'Feature ID "{feature_id}" is very long ({len(feature_id)} chars), '
            "consider shortening"
        )
    return ValidationResult.from_lists(errors, warnings)


def validate_feature_definition(definition: FeatureDefinitionInput) -> ValidationResult:
    id_result = validate_feature_id(definition.id)
    errors = list(id_result.errors)
    warnings = list(id_result.warnings)

    meta = definition.metadata
    if meta is not None:
        if meta.deprecated and not meta.deprecated_message:
            warnings.append(
                f'Feature "{definition.id}" is marked deprecated but has no deprecation message'
            )
        if meta.since and not _SINCE_RE.match(meta.since):
            warnings.append(
                f"Feature \"{definition.id}\" has an unusual 'since' version format: "
                f'"{meta.since}"'
            )
    return ValidationResult.from_lists(errors, warnings)


def validate_schema(definitions: Sequence[FeatureDefinitionInput]) -> ValidationResult:
    """Validate every definition and reject duplicate ids."""
    errors: List[str] = []
    warnings: List[str] = []
    seen: Set[str] = set()

    for definition in definitions:
        result = validate_feature_definition(definition)
        errors.extend(result.errors)
        warnings.extend(result.warnings)

        if definition.id in seen:
            errors.append(f'Duplicate feature ID: "{definition.id}"')
        seen.add(definition.id)

    return ValidationResult.from_lists(errors, warnings)


def build_schema(definitions: Iterable[FeatureDefinitionInput]) -> FeatureSchema:
    """Validate *definitions* and build a :class:`FeatureSchema`.

    Raises:
        FeatureSchemaError: listing every validation error.
    """
    defs = list(definitions)
    validation = validate_schema(defs)
    if not validation.valid:
        raise FeatureSchemaError(
            "Schema validation failed:\n" + "\n".join(validation.errors)
        )
    for warning in validation.warnings:
        logger.warning("Feature schema: %s", warning)

    features: Dict[FeatureName, FeatureDefinition] = {}
    for item in defs:
        fid = FeatureName.unchecked(item.id)
        features[fid] = FeatureDefinition(
            id=fid,
            name=item.name,
            description=item.description,
            default_enabled=item.default_enabled,
            metadata=item.metadata,
        )

    return FeatureSchema(features=MappingProxyType(features), roots=tuple(features))


def create_empty_schema() -> FeatureSchema:
    return FeatureSchema()


def merge_schemas(base: FeatureSchema, override: FeatureSchema) -> FeatureSchema:
    """Union of two schemas; *override* wins for ids present in both."""
    merged: Dict[str, FeatureDefinitionInput] = {}
    for schema in (base, override):
        for fid, definition in schema.features.items():
            merged[str(fid)] = FeatureDefinitionInput.from_definition(definition)
    return build_schema(merged.values())
