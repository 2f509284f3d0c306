"""Manifest validation.

Structural checks over a :class:`FeatureManifest`: name syntax, unknown and
self references, malformed external references, cycles and metadata
consistency.  Problems are reported as strings in a
:class:`ValidationResult`; nothing here raises.

Errors mean the manifest is broken.  Warnings are advisory and never affect
``valid``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import AbstractSet, Iterator, List, Optional, Set, Tuple

from ft_flags.constants import DEFAULT_FEATURE, DEP_PREFIX
from ft_flags.manifest.model import FeatureManifest, PackageDependencies
from ft_flags.names import (
    get_ref_feature,
    get_ref_package,
    is_dep_feature_ref,
    is_dep_ref,
    is_external_ref,
    is_valid_feature_declaration,
    is_valid_feature_name,
    is_valid_package_name,
)

logger = logging.getLogger(__name__)

_SINCE_RE = re.compile(r"^\d+\.\d+")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation pass."""

    valid: bool = True
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    @classmethod
    def from_lists(cls, errors: List[str], warnings: List[str]) -> ValidationResult:
        return cls(valid=not errors, errors=tuple(errors), warnings=tuple(warnings))


def merge_validation_results(*results: ValidationResult) -> ValidationResult:
    errors: List[str] = []
    warnings: List[str] = []
    for result in results:
        errors.extend(result.errors)
        warnings.extend(result.warnings)
    return ValidationResult.from_lists(errors, warnings)


@dataclass(frozen=True)
class ValidateOptions:
    """Options for :func:`validate_manifest`.

    Parameters
    ----------
    dependencies:
        Packages to check ``dep:`` and ``pkg:feature`` references against.
        Falls back to the manifest's own dependencies; when neither is set,
        only reference syntax is checked.
    strict_dependencies:
        Report references to unknown packages as errors instead of warnings.
    """

    dependencies: Optional[PackageDependencies] = None
    strict_dependencies: bool = False


@dataclass(frozen=True)
class ExternalReference:
    """A ``dep:`` or ``pkg:feature`` entry found in an activation list."""

    feature: str
    reference: str
    type: str  # "dep" | "pkg-feature"
    package_name: str
    feature_name: Optional[str] = None


def extract_external_references(manifest: FeatureManifest) -> List[ExternalReference]:
    """Collect every external reference, in manifest order."""
    refs: List[ExternalReference] = []
    for feature, targets in manifest.features.items():
        for target in targets:
            if not isinstance(target, str):
                continue
            if is_dep_ref(target):
                refs.append(
                    ExternalReference(
                        feature=feature,
                        reference=target,
                        type="dep",
                        package_name=target[len(DEP_PREFIX):],
                    )
                )
            elif is_dep_feature_ref(target):
                pkg = get_ref_package(target)
                if pkg:
                    refs.append(
                        ExternalReference(
                            feature=feature,
                            reference=target,
                            type="pkg-feature",
                            package_name=pkg,
                            feature_name=get_ref_feature(target),
                        )
                    )
    return refs


def _check_reference(ref: str, feature: str, declared: AbstractSet[str]) -> Optional[str]:
    """Return an error message for a bad activation target, ``None`` if fine."""
    if is_dep_ref(ref):
        dep = ref[len(DEP_PREFIX):]
        if not dep:
            return f'Feature "{feature}" has invalid dep: reference "{ref}": missing package name'
        if not is_valid_package_name(dep):
            return (
                f'Feature "{feature}" has invalid dep: reference "{ref}": '
                f'"{dep}" is not a valid package name'
            )
        return None

    if is_dep_feature_ref(ref):
        pkg = get_ref_package(ref)
        feat = get_ref_feature(ref)
        prefix = f'Feature "{feature}" has invalid external reference "{ref}"'
        if not pkg:
            return f"{prefix}: missing package name"
        if not feat:
            return f"{prefix}: missing feature name"
        if not is_valid_package_name(pkg):
            return f'{prefix}: "{pkg}" is not a valid package name'
        if not is_valid_feature_name(feat):
            return f'{prefix}: "{feat}" is not a valid feature name (must be kebab-case)'
        return None

    if ref not in declared:
        return f'Feature "{feature}" references unknown feature "{ref}"'
    return None


def validate_manifest(
    manifest: FeatureManifest,
    options: Optional[ValidateOptions] = None,
) -> ValidationResult:
    """Validate *manifest* and collect every error and warning."""
    opts = options or ValidateOptions()
    errors: List[str] = []
    warnings: List[str] = []

    declared = set(manifest.features)
    deps = opts.dependencies if opts.dependencies is not None else manifest.dependencies
    known_packages: Optional[frozenset] = deps.all_names() if deps is not None else None

    # ── Names and references ─────────────────────────────────────────
    for name, targets in manifest.features.items():
        if not isinstance(name, str):
            errors.append(f"Invalid feature name {name!r}: must be a string")
        elif not is_valid_feature_declaration(name):
            errors.append(
                f"Invalid feature name \"{name}\": must be kebab-case (e.g., 'async-runtime')"
            )

        if name in targets:
            errors.append(f'Feature "{name}" references itself')

        for target in targets:
            if not isinstance(target, str):
                errors.append(
                    f'Feature "{name}" has invalid reference {target!r}: must be a string'
                )
                continue
            ref_error = _check_reference(target, name, declared)
            if ref_error:
                errors.append(ref_error)

    # ── Cycles ───────────────────────────────────────────────────────
    for cycle in detect_cycles(manifest):
        errors.append(f"Circular dependency detected: {' -> '.join(cycle)}")

    # ── External references against declared dependencies ────────────
    if known_packages is not None:
        for ref in extract_external_references(manifest):
            if ref.package_name in known_packages:
                continue
            message = (
                f'Feature "{ref.feature}" references non-existent dependency '
                f'"{ref.package_name}" via "{ref.reference}"'
            )
            if opts.strict_dependencies:
                errors.append(message)
            else:
                warnings.append(message)

    # ── Metadata ─────────────────────────────────────────────────────
    for name, meta in manifest.metadata.items():
        if name not in declared:
            warnings.append(f'Metadata defined for unknown feature "{name}"')
        if meta.deprecated and not meta.deprecated_message:
            warnings.append(
                f'Feature "{name}" is marked deprecated but has no deprecation message'
            )
        if meta.since and not _SINCE_RE.match(str(meta.since)):
            warnings.append(
                f"Feature \"{name}\" has an unusual 'since' version format: \"{meta.since}\""
            )
        if known_packages is not None:
            for dep in meta.required_deps:
                if dep not in known_packages:
                    warnings.append(
                        f'Feature "{name}" requires dependency "{dep}" which is not declared'
                    )

    # ── Conventions ──────────────────────────────────────────────────
    default_targets = manifest.features.get(DEFAULT_FEATURE)
    if default_targets is None:
        warnings.append(
            'No "default" feature defined. Consider adding one for conventional usage.'
        )
    elif not default_targets:
        warnings.append(
            'The "default" feature enables no other features. Consider adding features to it.'
        )

    logger.debug(
        "Validated manifest with %d feature(s): %d error(s), %d warning(s).",
        len(declared),
        len(errors),
        len(warnings),
    )
    return ValidationResult.from_lists(errors, warnings)


# ── Cycle detection ──────────────────────────────────────────────────────


def _local_targets(manifest: FeatureManifest, node: str) -> Iterator[str]:
    for target in manifest.features[node]:
        if isinstance(target, str) and not is_external_ref(target) and target in manifest.features:
            yield target


def detect_cycles(manifest: FeatureManifest) -> List[List[str]]:
    """Find circular activation paths.

    Depth-first search over declared local features; external references
    and non-string entries are not followed.  Each cycle is returned as a
    path that ends where it started, e.g. ``["a", "b", "a"]``.
    """
    cycles: List[List[str]] = []
    visited: Set[str] = set()
    in_stack: Set[str] = set()

    for name in manifest.features:
        if name in visited:
            continue

        visited.add(name)
        in_stack.add(name)
        path: List[str] = [name]
        frames: List[Iterator[str]] = [_local_targets(manifest, name)]

        while frames:
            target = next(frames[-1], None)
            if target is None:
                frames.pop()
                in_stack.discard(path.pop())
                continue
            if target in in_stack:
                start = path.index(target)
                cycles.append(path[start:] + [target])
                continue
            if target in visited:
                continue

            visited.add(target)
            in_stack.add(target)
            path.append(target)
            frames.append(_local_targets(manifest, target))

    return cycles
