"""Tests for feature tree building and rendering."""

from __future__ import annotations

from ft_flags.manifest import (
    FeatureTreeNode,
    build_feature_tree,
    parse_manifest,
    render_feature_tree,
)

MANIFEST = parse_manifest(
    {
        "features": {
            "default": ["std"],
            "full": ["std", "experimental"],
            "std": ["fs", "env", "dep:libc"],
            "experimental": [],
            "fs": [],
            "env": [],
        }
    }
)


class TestBuildFeatureTree:
    def test_roots(self):
        roots = [node.name for node in build_feature_tree(MANIFEST)]
        assert roots == ["default", "full"]

    def test_children_skip_external_refs(self):
        (std,) = build_feature_tree(MANIFEST, "std")
        assert [child.name for child in std.children] == ["fs", "env"]
        assert all(not child.children for child in std.children)

    def test_unknown_root(self):
        assert build_feature_tree(MANIFEST, "nope") == []

    def test_cycle_marked_circular(self):
        manifest = parse_manifest({"features": {"a": ["b"], "b": ["a"]}})
        (a,) = build_feature_tree(manifest, "a")
        (b,) = a.children
        (again,) = b.children
        assert again == FeatureTreeNode(name="a", is_circular=True)

    def test_diamond_repeats_shared_node(self):
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
        (top,) = build_feature_tree(manifest)
        assert [c.children[0].name for c in top.children] == ["bottom", "bottom"]
        assert not any(c.children[0].is_circular for c in top.children)

    def test_deep_chain(self):
        features = {f"f{i}": [f"f{i + 1}"] for i in range(2000)}
        features["f2000"] = ["f0"]
        trees = build_feature_tree(parse_manifest({"features": features}), "f0")

        (node,) = trees
        depth = 0
        while node.children:
            (node,) = node.children
            depth += 1
        assert depth == 2001
        assert node.name == "f0"
        assert node.is_circular

        lines = render_feature_tree(trees).splitlines()
        assert len(lines) == 2002
        assert lines[-1] == " " * 4 * 2001 + "`-- f0 (circular)"


class TestRenderFeatureTree:
    def test_ascii(self):
        text = render_feature_tree(build_feature_tree(MANIFEST, "full"))
        assert text.splitlines() == [
            "`-- full",
            "    |-- std",
            "    |   |-- fs",
            "    |   `-- env",
            "    `-- experimental",
        ]

    def test_unicode(self):
        text = render_feature_tree(build_feature_tree(MANIFEST, "std"), unicode=True)
        assert text.splitlines() == [
            "└── std",
            "    ├── fs",
            "    └── env",
        ]

    def test_circular_suffix(self):
        manifest = parse_manifest({"features": {"a": ["a"]}})
        text = render_feature_tree(build_feature_tree(manifest, "a"))
        assert text.splitlines() == ["`-- a", "    `-- a (circular)"]

    def test_empty(self):
        assert render_feature_tree([]) == ""
