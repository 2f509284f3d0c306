"""Console rendering for the ``ft`` command.

All output is built from :class:`rich.text.Text` so feature names and
references are never interpreted as markup.  Rich drops colours when the
output is not a terminal or when ``NO_COLOR`` is set.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, TextIO

from rich.console import Console
from rich.text import Text

from ft_flags.manifest.model import FeatureManifest
from ft_flags.manifest.resolve import (
    ResolvedFeatures,
    get_enable_chain,
    list_available_features,
    list_disabled_features,
    list_enabled_features,
)
from ft_flags.manifest.validate import ValidationResult

# ── Markers ──────────────────────────────────────────────────────────────

OK_MARK = "[ok]"
FAIL_MARK = "[x]"
WARN_MARK = "[!]"

_FEATURE_STYLE = "bold cyan"
_TARGET_STYLE = "dim"


def make_console(file: Optional[TextIO] = None, stderr: bool = False) -> Console:
    """Console that never wraps long lines and ignores markup in data."""
    return Console(file=file, stderr=stderr, soft_wrap=True, highlight=False)


def status_line(mark: str, message: str) -> Text:
    style = {OK_MARK: "bold green", FAIL_MARK: "bold red", WARN_MARK: "bold yellow"}.get(mark, "")
    line = Text(mark, style=style)
    line.append(" ")
    line.append(message)
    return line


def _chain_text(chain: Sequence[str]) -> Text:
    return Text(" -> ".join(chain), style=_TARGET_STYLE)


# ── Commands ─────────────────────────────────────────────────────────────


def print_available(console: Console, manifest: FeatureManifest) -> None:
    """One line per declared feature: targets, description and markers."""
    names = list_available_features(manifest)
    if not names:
        console.print(Text("No features declared."))
        return

    console.print(Text(f"Available features ({len(names)}):", style="bold"))
    for name in names:
        line = Text("  ")
        line.append(name, style=_FEATURE_STYLE)
        targets = manifest.targets(name)
        if targets:
            line.append(" = [" + ", ".join(targets) + "]", style=_TARGET_STYLE)

        meta = manifest.metadata.get(name)
        if meta is not None:
            if meta.deprecated:
                line.append(" (deprecated)", style="yellow")
            if meta.unstable:
                line.append(" (unstable)", style="magenta")
            if meta.description:
                line.append(f"  {meta.description}")
        console.print(line)


def print_enabled(console: Console, resolved: ResolvedFeatures) -> None:
    """Enabled features with the chain that enabled them, then the rest."""
    enabled = list_enabled_features(resolved)
    console.print(Text(f"Enabled features ({len(enabled)}):", style="bold"))
    for name in enabled:
        line = Text("  ")
        line.append(OK_MARK, style="bold green")
        line.append(" ")
        line.append(name, style=_FEATURE_STYLE)
        line.append("  ")
        line.append_text(_chain_text(get_enable_chain(name, resolved) or [name]))
        console.print(line)

    disabled = list_disabled_features(resolved)
    if disabled:
        console.print(Text(f"Disabled features ({len(disabled)}):", style="bold"))
        for name in disabled:
            console.print(Text("  ").append_text(Text(name, style=_TARGET_STYLE)))


def print_resolution(console: Console, resolved: ResolvedFeatures) -> None:
    opts = resolved.options
    console.print(
        Text(
            f"features={list(opts.features)} "
            f"no_default_features={opts.no_default_features} "
            f"all_features={opts.all_features}",
            style=_TARGET_STYLE,
        )
    )
    for name in sorted(resolved.enabled):
        console.print(Text(name))


def print_check(console: Console, resolved: ResolvedFeatures, feature: str) -> bool:
    """Report whether *feature* is enabled.  Returns the enabled flag."""
    if feature not in resolved.manifest:
        console.print(status_line(FAIL_MARK, f'Feature "{feature}" is not declared'))
        return False
    if feature not in resolved.enabled:
        console.print(status_line(FAIL_MARK, f'Feature "{feature}" is not enabled'))
        return False

    console.print(status_line(OK_MARK, f'Feature "{feature}" is enabled'))
    chain = get_enable_chain(feature, resolved) or [feature]
    console.print(Text("  via ").append_text(_chain_text(chain)))
    return True


def print_lines(console: Console, lines: Iterable[str]) -> None:
    for line in lines:
        console.print(Text(line))


def print_validation(console: Console, result: ValidationResult) -> None:
    """Errors, warnings and a one-line verdict."""
    for error in result.errors:
        console.print(status_line(FAIL_MARK, error))
    for warning in result.warnings:
        console.print(status_line(WARN_MARK, warning))

    summary: List[str] = []
    if result.errors:
        summary.append(f"{len(result.errors)} error(s)")
    if result.warnings:
        summary.append(f"{len(result.warnings)} warning(s)")
    detail = f" ({', '.join(summary)})" if summary else ""
    if result.valid:
        console.print(status_line(OK_MARK, f"Manifest is valid{detail}"))
    else:
        console.print(status_line(FAIL_MARK, f"Manifest is invalid{detail}"))
