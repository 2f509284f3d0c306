"""Feature dependency tree for display."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

from ft_flags.constants import DEFAULT_FEATURE
from ft_flags.manifest.model import FeatureManifest
from ft_flags.names import is_dep_ref

_ASCII = ("|-- ", "`-- ", "|   ", "    ")
_UNICODE = ("├── ", "└── ", "│   ", "    ")


@dataclass(frozen=True)
class FeatureTreeNode:
    """A feature and the features it activates.

    ``is_circular`` marks a feature that already appears on the path from
    the root; such nodes have no children.
    """

    name: str
    children: Tuple[FeatureTreeNode, ...] = ()
    is_circular: bool = False


def _child_names(manifest: FeatureManifest, name: str) -> List[str]:
    return [
        target
        for target in manifest.features.get(name, ())
        if isinstance(target, str) and not is_dep_ref(target) and target in manifest.features
    ]


def _build_node(manifest: FeatureManifest, root: str) -> FeatureTreeNode:
    # Post-order walk with an explicit stack.  Each frame holds the feature,
    # its pending child names and the nodes built for children so far.
    frames: List[Tuple[str, List[str], List[FeatureTreeNode]]] = [
        (root, _child_names(manifest, root), [])
    ]
    on_path: Set[str] = {root}

    while True:
        name, pending, built = frames[-1]
        if pending:
            child = pending.pop(0)
            if child in on_path:
                built.append(FeatureTreeNode(name=child, is_circular=True))
            else:
                on_path.add(child)
                frames.append((child, _child_names(manifest, child), []))
            continue

        frames.pop()
        on_path.discard(name)
        node = FeatureTreeNode(name=name, children=tuple(built))
        if not frames:
            return node
        frames[-1][2].append(node)


def build_feature_tree(
    manifest: FeatureManifest,
    root: Optional[str] = None,
) -> List[FeatureTreeNode]:
    """Build activation trees.

    With *root*, return a single tree (or ``[]`` if *root* is not declared).
    Otherwise return one tree for every feature that no other feature
    activates, plus ``default`` when declared.
    """
    if root is not None:
        if root not in manifest.features:
            return []
        return [_build_node(manifest, root)]

    referenced = {
        target
        for targets in manifest.features.values()
        for target in targets
        if isinstance(target, str)
    }
    return [
        _build_node(manifest, name)
        for name in manifest.features
        if name not in referenced or name == DEFAULT_FEATURE
    ]


def render_feature_tree(
    nodes: Sequence[FeatureTreeNode],
    indent: str = "",
    unicode: bool = False,
) -> str:
    """Render *nodes* as an indented tree with ``|--`` / `` `-- `` connectors."""
    branch, last_branch, pipe, blank = _UNICODE if unicode else _ASCII
    lines: List[str] = []
    stack: List[Tuple[FeatureTreeNode, str, bool]] = [
        (node, indent, i == len(nodes) - 1) for i, node in reversed(list(enumerate(nodes)))
    ]

    while stack:
        node, prefix, is_last = stack.pop()
        line = prefix + (last_branch if is_last else branch) + node.name
        if node.is_circular:
            line += " (circular)"
        lines.append(line)

        if node.children and not node.is_circular:
            child_indent = prefix + (blank if is_last else pipe)
            last = len(node.children) - 1
            stack.extend(
                (child, child_indent, i == last)
                for i, child in reversed(list(enumerate(node.children)))
            )

    return "\n".join(lines)
