"""Tests for the registry module: schema, states, immutable updates, helpers."""

from __future__ import annotations

import logging

import pytest

from ft_flags.errors import FeatureNotEnabledError, FeatureNotFoundError, FeatureSchemaError
from ft_flags.manifest import FeatureMetadata, ResolveOptions, parse_manifest, resolve_features
from ft_flags.registry import (
    ConfigSource,
    FeatureConfig,
    FeatureDefinitionInput,
    FeatureStateReason,
    all_enabled,
    any_enabled,
    build_schema,
    check_feature,
    choose,
    clone_registry,
    count_enabled,
    create_empty_schema,
    create_registry,
    create_simple_registry,
    disable_feature,
    enable_feature,
    filter_disabled,
    filter_enabled,
    get_feature,
    get_feature_state,
    is_disabled,
    is_enabled,
    list_disabled_features,
    list_enabled_features,
    list_features,
    merge_registries,
    merge_schemas,
    none_enabled,
    registry_from_resolved,
    require_feature,
    set_feature_state,
    validate_feature_definition,
    validate_feature_id,
    validate_schema,
    when_disabled,
    when_enabled,
)


@pytest.fixture
def schema():
    return build_schema(
        [
            FeatureDefinitionInput(id="fs", description="File system"),
            FeatureDefinitionInput(id="env", default_enabled=True),
            FeatureDefinitionInput(id="net"),
        ]
    )


# ── Schema ───────────────────────────────────────────────────────────────


class TestSchemaValidation:
    def test_valid_id(self):
        result = validate_feature_id("async-runtime")
        assert result.valid
        assert result.warnings == ()

    def test_empty_id(self):
        result = validate_feature_id("  ")
        assert not result.valid
        assert "empty" in result.errors[0]

    def test_invalid_id(self):
        result = validate_feature_id("Async.Runtime")
        assert not result.valid
        assert "kebab-case" in result.errors[0]

    def test_long_id_warns(self):
        result = validate_feature_id("-".join(["segment"] * 10))
        assert result.valid
        assert "very long" in result.warnings[0]

    def test_definition_metadata_warnings(self):
        result = validate_feature_definition(
            FeatureDefinitionInput(
                id="legacy",
                metadata=FeatureMetadata(deprecated=True, since="soon"),
            )
        )
        assert result.valid
        assert len(result.warnings) == 2

    def test_duplicates_rejected(self):
        result = validate_schema([FeatureDefinitionInput(id="a"), FeatureDefinitionInput(id="a")])
        assert not result.valid
        assert 'Duplicate feature ID: "a"' in result.errors

    def test_build_schema_raises(self):
        with pytest.raises(FeatureSchemaError, match="Bad_Id"):
            build_schema([FeatureDefinitionInput(id="Bad_Id")])

    def test_build_schema_roots(self, schema):
        assert schema.roots == ("fs", "env", "net")
        assert schema.features["fs"].description == "File system"

    def test_definition_from_dict(self):
        item = FeatureDefinitionInput.from_dict(
            {"id": "fs", "defaultEnabled": True, "metadata": {"since": "1.0"}}
        )
        assert item.default_enabled is True
        assert item.metadata.since == "1.0"

    def test_merge_schemas(self, schema):
        override = build_schema(
            [FeatureDefinitionInput(id="fs", description="Files"), FeatureDefinitionInput(id="io")]
        )
        merged = merge_schemas(schema, override)
        assert list(merged.features) == ["fs", "env", "net", "io"]
        assert merged.features["fs"].description == "Files"


# ── Creation ─────────────────────────────────────────────────────────────


class TestCreateRegistry:
    def test_defaults(self, schema):
        registry = create_registry(schema)
        assert is_enabled(registry, "env")
        assert is_disabled(registry, "fs")
        assert get_feature_state(registry, "env").reason is FeatureStateReason.DEFAULT_ENABLED
        assert get_feature_state(registry, "fs").reason is FeatureStateReason.DEFAULT_DISABLED

    def test_explicit(self, schema):
        registry = create_registry(schema, FeatureConfig(enabled=["fs"], disabled=["env"]))
        assert is_enabled(registry, "fs")
        assert is_disabled(registry, "env")
        assert get_feature_state(registry, "fs").reason is FeatureStateReason.EXPLICIT_ENABLED

    def test_disabled_overrides_enabled(self):
        schema = build_schema([FeatureDefinitionInput(id="x")])
        registry = create_registry(schema, FeatureConfig(enabled=["x"], disabled=["x"]))
        assert is_enabled(registry, "x") is False
        assert get_feature_state(registry, "x").reason is FeatureStateReason.EXPLICIT_DISABLED

    def test_enable_all_and_disable_all(self, schema):
        on = create_registry(schema, FeatureConfig(enable_all=True, disabled=["net"]))
        assert list_enabled_features(on) == ["fs", "env"]
        assert get_feature_state(on, "fs").reason is FeatureStateReason.ENABLE_ALL

        off = create_registry(schema, FeatureConfig(disable_all=True))
        assert list_enabled_features(off) == []
        assert get_feature_state(off, "env").reason is FeatureStateReason.DISABLE_ALL

    def test_unknown_names_skipped(self, schema, caplog):
        with caplog.at_level(logging.WARNING, logger="ft_flags.registry.registry"):
            registry = create_registry(schema, FeatureConfig(enabled=["ghost"]))
        assert get_feature_state(registry, "ghost") is None
        assert "ghost" in caplog.text

    def test_source_recorded(self, schema):
        source = ConfigSource(type="env", variable="FT_FEATURES")
        registry = create_registry(schema, FeatureConfig(enabled=["fs"]), source)
        assert get_feature_state(registry, "fs").source == source
        assert registry.config.source == source

    def test_empty(self):
        registry = create_registry()
        assert list_features(registry) == []
        assert dict(registry.schema.features) == dict(create_empty_schema().features) == {}

    def test_simple_registry(self):
        registry = create_simple_registry(["a", "b"])
        assert list_enabled_features(registry) == ["a", "b"]

    def test_from_resolved(self):
        manifest = parse_manifest(
            {
                "features": {"default": ["std"], "std": ["fs"], "fs": [], "net": []},
                "metadata": {"fs": {"description": "File system"}},
            }
        )
        registry = registry_from_resolved(resolve_features(manifest, ResolveOptions()))
        assert sorted(list_enabled_features(registry)) == ["default", "fs", "std"]
        assert list_disabled_features(registry) == ["net"]
        assert get_feature(registry, "fs").description == "File system"


# ── Queries ──────────────────────────────────────────────────────────────


class TestQueries:
    def test_unknown_feature_is_disabled(self, schema):
        registry = create_registry(schema)
        assert is_enabled(registry, "ghost") is False
        assert get_feature(registry, "ghost") is None

    def test_check_feature(self, schema):
        registry = create_registry(schema)
        result = check_feature(registry, "env")
        assert result.enabled is True
        assert result.feature == "env"
        assert result.state.reason is FeatureStateReason.DEFAULT_ENABLED

        missing = check_feature(registry, "ghost")
        assert missing.enabled is False
        assert missing.state.reason is FeatureStateReason.DEFAULT_DISABLED

    def test_require_feature(self, schema):
        registry = create_registry(schema)
        require_feature(registry, "env")
        with pytest.raises(FeatureNotEnabledError) as exc_info:
            require_feature(registry, "fs")
        assert exc_info.value.feature == "fs"
        assert exc_info.value.state.reason is FeatureStateReason.DEFAULT_DISABLED
        assert "default-disabled" in str(exc_info.value)

    def test_require_unknown_feature(self, schema):
        registry = create_registry(schema)
        with pytest.raises(FeatureNotFoundError, match="ghost"):
            require_feature(registry, "ghost")
        require_feature(enable_feature(registry, "ghost"), "ghost")


# ── Immutable updates ────────────────────────────────────────────────────


class TestImmutableUpdates:
    def test_enable_does_not_mutate(self, schema):
        original = create_registry(schema)
        updated = enable_feature(original, "fs")
        assert is_enabled(updated, "fs")
        assert is_disabled(original, "fs")
        assert get_feature_state(original, "fs").reason is FeatureStateReason.DEFAULT_DISABLED

    def test_disable_does_not_mutate(self, schema):
        original = create_registry(schema)
        updated = disable_feature(original, "env")
        assert is_disabled(updated, "env")
        assert is_enabled(original, "env")

    def test_set_state_does_not_mutate(self, schema):
        original = create_registry(schema)
        before = dict(original.states)
        set_feature_state(original, "net", True)
        assert dict(original.states) == before

    def test_states_are_read_only(self, schema):
        registry = create_registry(schema)
        with pytest.raises(TypeError):
            registry.states["fs"] = None  # type: ignore[index]

    def test_clone(self, schema):
        original = create_registry(schema)
        copy = clone_registry(original)
        assert copy is not original
        assert dict(copy.states) == dict(original.states)

    def test_merge_registries(self, schema):
        base = create_registry(schema, FeatureConfig(enabled=["fs"]))
        extra_schema = build_schema([FeatureDefinitionInput(id="io")])
        override = create_registry(extra_schema, FeatureConfig(enabled=["io"]))
        merged = merge_registries(base, override)
        assert is_enabled(merged, "fs")
        assert is_enabled(merged, "io")
        assert set(list_features(merged)) == {"fs", "env", "net", "io"}
        assert merged.config is override.config
        assert get_feature_state(base, "io") is None


# ── Helpers ──────────────────────────────────────────────────────────────


class TestHelpers:
    @pytest.fixture
    def registry(self, schema):
        return create_registry(schema, FeatureConfig(enabled=["fs"]))

    def test_all_any_none(self, registry):
        assert all_enabled(registry, ["fs", "env"])
        assert not all_enabled(registry, ["fs", "net"])
        assert any_enabled(registry, ["net", "fs"])
        assert none_enabled(registry, ["net", "ghost"])
        assert all_enabled(registry, [])

    def test_filters_and_count(self, registry):
        names = ["fs", "net", "env", "ghost"]
        assert filter_enabled(registry, names) == ["fs", "env"]
        assert filter_disabled(registry, names) == ["net", "ghost"]
        assert count_enabled(registry, names) == 2

    def test_when_and_choose(self, registry):
        assert when_enabled(registry, "fs", lambda: "ran") == "ran"
        assert when_enabled(registry, "net", lambda: "ran") is None
        assert when_disabled(registry, "net", lambda: "fallback") == "fallback"
        assert when_disabled(registry, "fs", lambda: "fallback") is None
        assert choose(registry, "fs", "fast", "slow") == "fast"
        assert choose(registry, "net", "remote", "local") == "local"
