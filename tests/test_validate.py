"""Tests for manifest validation and cycle detection."""

from __future__ import annotations

from ft_flags.manifest import (
    ExternalReference,
    PackageDependencies,
    ValidateOptions,
    ValidationResult,
    detect_cycles,
    extract_external_references,
    merge_validation_results,
    parse_manifest,
    validate_manifest,
)


def _validate(raw, **opts) -> ValidationResult:
    return validate_manifest(parse_manifest(raw), ValidateOptions(**opts))


def _mentions(messages, *needles) -> bool:
    return any(all(n in m for n in needles) for m in messages)


# ── Structure ────────────────────────────────────────────────────────────


class TestValidateStructure:
    def test_clean_manifest(self):
        result = _validate({"features": {"default": ["std"], "std": ["fs"], "fs": []}})
        assert result.valid is True
        assert result.errors == ()
        assert result.warnings == ()

    def test_unknown_reference(self):
        result = _validate({"features": {"a": ["unknown-x"]}})
        assert result.valid is False
        assert _mentions(result.errors, '"unknown-x"')

    def test_invalid_feature_name(self):
        result = _validate({"features": {"default": [], "Bad_Name": []}})
        assert not result.valid
        assert _mentions(result.errors, '"Bad_Name"', "kebab-case")

    def test_reference_used_as_declaration(self):
        result = _validate({"features": {"default": [], "dep:serde": []}})
        assert not result.valid
        assert _mentions(result.errors, '"dep:serde"')

    def test_self_reference(self):
        result = _validate({"features": {"default": [], "a": ["a"]}})
        assert not result.valid
        assert _mentions(result.errors, '"a" references itself')

    def test_non_string_entries_reported(self):
        result = validate_manifest(
            parse_manifest({"features": {"default": [], "a": [1, None, "default"], 7: []}})
        )
        assert not result.valid
        assert 'Feature "a" has invalid reference 1: must be a string' in result.errors
        assert 'Feature "a" has invalid reference None: must be a string' in result.errors
        assert "Invalid feature name 7: must be a string" in result.errors
        assert len(result.errors) == 3
        assert extract_external_references(parse_manifest({"features": {"a": [1]}})) == []

    def test_deep_chain_is_valid(self):
        features = {f"f{i}": [f"f{i + 1}"] for i in range(2000)}
        features.update({"f2000": [], "default": ["f0"]})
        assert _validate({"features": features}).valid

    def test_cycle_reported(self):
        result = _validate({"features": {"default": [], "a": ["b"], "b": ["a"]}})
        assert not result.valid
        assert _mentions(result.errors, "Circular dependency detected", "a -> b -> a")

    def test_external_reference_syntax(self):
        result = _validate(
            {
                "features": {
                    "default": [],
                    "a": ["dep:", "dep:Bad", "serde:", ":derive", "serde:Derive"],
                    "b": ["dep:serde", "serde:derive", "@scope/pkg:feat"],
                }
            }
        )
        assert not result.valid
        assert len(result.errors) == 5
        assert all('Feature "a"' in e for e in result.errors)
        assert _mentions(result.errors, '"dep:"', "missing package name")
        assert _mentions(result.errors, '"serde:"', "missing feature name")
        assert _mentions(result.errors, '":derive"', "missing package name")
        assert _mentions(result.errors, '"Derive"', "kebab-case")

    def test_options_default_to_none(self):
        manifest = parse_manifest({"features": {"default": []}})
        assert validate_manifest(manifest).valid


# ── Warnings ─────────────────────────────────────────────────────────────


class TestValidateWarnings:
    def test_deprecated_without_message_is_a_warning(self):
        result = _validate(
            {
                "features": {"default": [], "legacy": []},
                "metadata": {"legacy": {"deprecated": True}},
            }
        )
        assert result.valid is True
        assert _mentions(result.warnings, "deprecation message")

    def test_deprecated_with_message(self):
        result = _validate(
            {
                "features": {"default": ["legacy"], "legacy": []},
                "metadata": {"legacy": {"deprecated": True, "deprecatedMessage": "use std"}},
            }
        )
        assert result.warnings == ()

    def test_metadata_for_unknown_feature(self):
        result = _validate(
            {"features": {"default": []}, "metadata": {"ghost": {"description": "?"}}}
        )
        assert result.valid
        assert _mentions(result.warnings, '"ghost"')

    def test_unusual_since(self):
        result = _validate(
            {"features": {"default": ["a"], "a": []}, "metadata": {"a": {"since": "next"}}}
        )
        assert _mentions(result.warnings, "'since'", '"next"')

    def test_missing_default(self):
        result = _validate({"features": {"a": []}})
        assert result.valid
        assert _mentions(result.warnings, 'No "default" feature')

    def test_empty_default(self):
        result = _validate({"features": {"default": [], "a": []}})
        assert _mentions(result.warnings, '"default" feature enables no other features')


# ── Dependencies ─────────────────────────────────────────────────────────


class TestValidateDependencies:
    RAW = {
        "features": {
            "default": ["serde"],
            "serde": ["dep:serde", "serde:derive", "dep:tokio"],
        },
        "metadata": {"serde": {"requiredDeps": ["serde", "chrono"]}},
    }

    def test_not_checked_without_dependencies(self):
        result = _validate(self.RAW)
        assert result.valid
        assert result.warnings == ()

    def test_unknown_package_is_warning(self):
        deps = PackageDependencies.from_dict({"optionalDependencies": {"serde": "1"}})
        result = _validate(self.RAW, dependencies=deps)
        assert result.valid
        assert _mentions(result.warnings, "non-existent dependency", '"tokio"')
        assert not _mentions(result.warnings, "non-existent dependency", '"serde"')
        assert _mentions(result.warnings, '"chrono"', "not declared")

    def test_strict_makes_unknown_package_an_error(self):
        deps = PackageDependencies.from_dict({"dependencies": {"serde": "1"}})
        result = _validate(self.RAW, dependencies=deps, strict_dependencies=True)
        assert not result.valid
        assert _mentions(result.errors, '"tokio"', '"dep:tokio"')

    def test_manifest_dependencies_used_as_fallback(self):
        deps = PackageDependencies.from_dict({"dependencies": {"serde": "1"}})
        manifest = parse_manifest(self.RAW, dependencies=deps)
        result = validate_manifest(manifest)
        assert _mentions(result.warnings, '"tokio"')

    def test_extract_external_references(self):
        refs = extract_external_references(parse_manifest(self.RAW))
        assert refs == [
            ExternalReference("serde", "dep:serde", "dep", "serde"),
            ExternalReference("serde", "serde:derive", "pkg-feature", "serde", "derive"),
            ExternalReference("serde", "dep:tokio", "dep", "tokio"),
        ]


# ── Cycles ───────────────────────────────────────────────────────────────


class TestDetectCycles:
    def test_two_node_cycle(self):
        cycles = detect_cycles(parse_manifest({"features": {"a": ["b"], "b": ["a"]}}))
        assert cycles
        assert all(cycle for cycle in cycles)
        assert cycles[0] == ["a", "b", "a"]

    def test_diamond_is_not_a_cycle(self):
        manifest = parse_manifest(
            {
                "features": {
                    "top": ["left", "right"],
                    "left": ["bottom"],
                    "right": ["bottom"],
                    "bottom": [],
                }
            }
        )
        assert detect_cycles(manifest) == []

    def test_self_loop(self):
        assert detect_cycles(parse_manifest({"features": {"a": ["a"]}})) == [["a", "a"]]

    def test_three_node_cycle(self):
        manifest = parse_manifest({"features": {"a": ["b"], "b": ["c"], "c": ["a"]}})
        assert detect_cycles(manifest) == [["a", "b", "c", "a"]]

    def test_cycle_at_the_end_of_a_deep_chain(self):
        features = {f"f{i}": [f"f{i + 1}"] for i in range(2000)}
        features["f2000"] = ["f1998"]
        cycles = detect_cycles(parse_manifest({"features": features}))
        assert cycles == [["f1998", "f1999", "f2000", "f1998"]]

    def test_non_string_targets_skipped(self):
        manifest = parse_manifest({"features": {"a": [1, ["a"], "b"], "b": ["a"]}})
        assert detect_cycles(manifest) == [["a", "b", "a"]]

    def test_external_refs_not_followed(self):
        manifest = parse_manifest({"features": {"serde": ["serde:derive", "dep:serde"]}})
        assert detect_cycles(manifest) == []


class TestMergeValidationResults:
    def test_merge(self):
        merged = merge_validation_results(
            ValidationResult.from_lists([], ["w1"]),
            ValidationResult.from_lists(["e1"], []),
        )
        assert merged.valid is False
        assert merged.errors == ("e1",)
        assert merged.warnings == ("w1",)

    def test_merge_nothing_is_valid(self):
        assert merge_validation_results().valid
