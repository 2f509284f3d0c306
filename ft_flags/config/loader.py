"""Manifest file loading.

Reads ``deno.json``, ``package.json`` or ``ft-flags.yaml``, checks the
shape of the content against the Pydantic models in :mod:`schema`, and
hands the result to :func:`ft_flags.manifest.parse_manifest`.

File access goes through a ``read_text(path) -> str`` callable so callers
(and tests) decide how files are read.  A missing file is a normal outcome
and yields ``None``; unreadable or malformed files raise
:class:`ConfigLoadError`.
"""

import json
import logging
import os
from typing import Any, Callable, Dict, List, Optional

import yaml
from pydantic import ValidationError

from ft_flags.config.schema import ManifestFileConfig
from ft_flags.constants import DENO_JSON, PACKAGE_JSON, YAML_MANIFESTS
from ft_flags.errors import ConfigLoadError
from ft_flags.manifest.model import (
    FeatureManifest,
    FeatureMetadata,
    ManifestSource,
    PackageDependencies,
    parse_manifest,
)

logger = logging.getLogger(__name__)

ReadText = Callable[[str], str]

# Recognised YAML extensions.
_YAML_EXTS = frozenset({".yaml", ".yml"})


def read_text_file(path: str) -> str:
    """Default reader: UTF-8 text from the local filesystem."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _read_config_file(path: str, read_text: ReadText) -> Optional[Dict[str, Any]]:
    """Read and parse a JSON or YAML config file.

    Returns ``None`` if the file does not exist.  Raises
    :class:`ConfigLoadError` when the file cannot be read or parsed.
    """
    try:
        content = read_text(path)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return None
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"Error reading configuration file: {exc}", path) from exc

    ext = os.path.splitext(path)[1].lower()
    try:
        if ext in _YAML_EXTS:
            raw_data = yaml.safe_load(content)
        else:
            raw_data = json.loads(content)
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigLoadError(f"Error parsing configuration file: {exc}", path) from exc

    if raw_data is None and ext in _YAML_EXTS:
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigLoadError("Top-level configuration content must be a mapping.", path)
    return raw_data


def _format_validation_errors(exc: ValidationError) -> str:
    """Format Pydantic validation errors into a readable multi-line string."""
    lines: List[str] = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        lines.append(f"  • {loc}: {err['msg']}")
    return "\n".join(lines)


def _to_manifest(
    config: ManifestFileConfig,
    source: ManifestSource,
    dependencies: Optional[PackageDependencies],
) -> FeatureManifest:
    metadata: Dict[str, FeatureMetadata] = {}
    for name, meta in config.metadata.features.items():
        metadata[name] = FeatureMetadata.from_dict(
            {
                "description": meta.description,
                "since": meta.since,
                "unstable": meta.unstable,
                "deprecated": meta.deprecated,
                "deprecated_message": meta.deprecated_message,
                "docs_url": meta.docs_url,
                "required_deps": meta.required_deps,
                **(meta.model_extra or {}),
            }
        )
    return parse_manifest(
        {"features": config.features, "metadata": metadata},
        source=source,
        dependencies=dependencies,
    )


def _load(
    path: str,
    source_type: str,
    read_text: ReadText,
    deps_from: Callable[[ManifestFileConfig], Optional[PackageDependencies]],
) -> Optional[FeatureManifest]:
    logger.debug("Loading manifest file: %s", path)

    raw_data = _read_config_file(path, read_text)
    if raw_data is None:
        return None
    if "features" not in raw_data:
        logger.debug("No 'features' section in %s.", path)
        return None

    try:
        config = ManifestFileConfig.model_validate(raw_data)
    except ValidationError as exc:
        error_summary = _format_validation_errors(exc)
        raise ConfigLoadError(
            f"Manifest validation failed ({len(exc.errors())} error(s)):\n{error_summary}",
            path,
        ) from exc

    manifest = _to_manifest(config, ManifestSource(type=source_type, path=path), deps_from(config))
    logger.info(
        "Manifest '%s' loaded. %d feature(s), %d metadata entr(ies).",
        path,
        len(manifest.features),
        len(manifest.metadata),
    )
    return manifest


_PACKAGE_DEP_FIELDS = frozenset(
    {"dependencies", "optional_dependencies", "peer_dependencies", "dev_dependencies"}
)


def _package_deps(config: ManifestFileConfig) -> Optional[PackageDependencies]:
    if not _PACKAGE_DEP_FIELDS & config.model_fields_set:
        return None
    return PackageDependencies.from_dict(
        {
            "dependencies": config.dependencies,
            "optionalDependencies": config.optional_dependencies,
            "peerDependencies": config.peer_dependencies,
            "devDependencies": config.dev_dependencies,
        }
    )


def _deno_deps(config: ManifestFileConfig) -> Optional[PackageDependencies]:
    if not {"imports", "dependencies"} & config.model_fields_set:
        return None
    deps = {name: "*" for name in config.imports}
    deps.update(config.dependencies)
    return PackageDependencies.from_dict({"dependencies": deps})


# ── Public API ───────────────────────────────────────────────────────────


def load_manifest_from_deno_json(
    path: str = DENO_JSON,
    read_text: ReadText = read_text_file,
) -> Optional[FeatureManifest]:
    """Load from ``deno.json``; import-map keys count as dependencies."""
    return _load(path, "deno.json", read_text, _deno_deps)


def load_manifest_from_package_json(
    path: str = PACKAGE_JSON,
    read_text: ReadText = read_text_file,
) -> Optional[FeatureManifest]:
    """Load from ``package.json`` with its four dependency sections."""
    return _load(path, "package.json", read_text, _package_deps)


def load_manifest_from_yaml(
    path: str = YAML_MANIFESTS[0],
    read_text: ReadText = read_text_file,
) -> Optional[FeatureManifest]:
    """Load from a YAML file laid out like ``package.json``."""
    return _load(path, "yaml", read_text, _package_deps)


def load_manifest(
    directory: str = ".",
    read_text: ReadText = read_text_file,
) -> Optional[FeatureManifest]:
    """Find and load the manifest in *directory*.

    Search order: ``deno.json`` → ``package.json`` → ``ft-flags.yaml`` →
    ``ft-flags.yml``.  The first file that exists *and* declares features
    wins.  Returns ``None`` if none do.
    """
    candidates = [
        (os.path.join(directory, DENO_JSON), load_manifest_from_deno_json),
        (os.path.join(directory, PACKAGE_JSON), load_manifest_from_package_json),
    ]
    candidates.extend(
        (os.path.join(directory, name), load_manifest_from_yaml) for name in YAML_MANIFESTS
    )

    for path, loader in candidates:
        manifest = loader(path, read_text)
        if manifest is not None:
            return manifest

    logger.debug("No manifest found in %s.", directory)
    return None
