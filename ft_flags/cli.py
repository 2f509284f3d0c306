"""CLI argument parsing and main entry point.

Inspects the feature manifest of a package::

    ft list [--enabled]          declared (or resolved) features
    ft check FEATURE             exit 0 if FEATURE is enabled, 1 otherwise
    ft resolve                   the resolved feature set
    ft tree [FEATURE]            activation tree
    ft validate                  manifest errors and warnings

Resolution flags (``--features``, ``--no-default-features``,
``--all-features``) fall back to ``FT_FEATURES``, ``FT_NO_DEFAULT_FEATURES``
and ``FT_ALL_FEATURES``.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional

from rich.console import Console

from ft_flags.config.env import load_resolve_options_from_env, parse_feature_list
from ft_flags.config.loader import ReadText, load_manifest, read_text_file
from ft_flags.constants import ENV_PREFIX, PACKAGE_NAME, PACKAGE_VERSION
from ft_flags.display.console import (
    FAIL_MARK,
    make_console,
    print_available,
    print_check,
    print_enabled,
    print_lines,
    print_resolution,
    print_validation,
    status_line,
)
from ft_flags.display.logging_config import VALID_LEVELS, setup_logging
from ft_flags.errors import ConfigLoadError
from ft_flags.manifest.model import FeatureManifest
from ft_flags.manifest.resolve import ResolvedFeatures, ResolveOptions, resolve_features
from ft_flags.manifest.tree import build_feature_tree, render_feature_tree
from ft_flags.manifest.validate import ValidateOptions, validate_manifest

module_logger = logging.getLogger(__name__)


@dataclass
class _Context:
    manifest: FeatureManifest
    environ: Mapping[str, str]
    out: Console
    err: Console


def _resolve_options(args: argparse.Namespace, environ: Mapping[str, str]) -> ResolveOptions:
    """Command-line flags first, then ``FT_*`` variables."""
    env_opts = load_resolve_options_from_env(environ.get, ENV_PREFIX)
    features = (
        parse_feature_list(args.features) if args.features is not None else env_opts.features
    )
    return ResolveOptions(
        features=features,
        no_default_features=args.no_default_features or env_opts.no_default_features,
        all_features=args.all_features or env_opts.all_features,
    )


def _resolve(args: argparse.Namespace, ctx: _Context) -> ResolvedFeatures:
    options = _resolve_options(args, ctx.environ)
    module_logger.debug("Resolving with %s", options)
    return resolve_features(ctx.manifest, options)


# ── Commands ─────────────────────────────────────────────────────────────


def _cmd_list(args: argparse.Namespace, ctx: _Context) -> int:
    if args.enabled:
        print_enabled(ctx.out, _resolve(args, ctx))
    else:
        print_available(ctx.out, ctx.manifest)
    return 0


def _cmd_check(args: argparse.Namespace, ctx: _Context) -> int:
    return 0 if print_check(ctx.out, _resolve(args, ctx), args.feature) else 1


def _cmd_resolve(args: argparse.Namespace, ctx: _Context) -> int:
    print_resolution(ctx.out, _resolve(args, ctx))
    return 0


def _cmd_tree(args: argparse.Namespace, ctx: _Context) -> int:
    nodes = build_feature_tree(ctx.manifest, args.feature)
    if args.feature is not None and not nodes:
        ctx.err.print(status_line(FAIL_MARK, f'Feature "{args.feature}" is not declared'))
        return 1
    if not nodes:
        print_lines(ctx.out, ["No features declared."])
        return 0
    print_lines(ctx.out, render_feature_tree(nodes, unicode=args.unicode).splitlines())
    return 0


def _cmd_validate(args: argparse.Namespace, ctx: _Context) -> int:
    result = validate_manifest(
        ctx.manifest,
        ValidateOptions(strict_dependencies=args.strict_dependencies),
    )
    print_validation(ctx.out, result)
    return 0 if result.valid else 1


# ── Parser ───────────────────────────────────────────────────────────────


def _add_resolve_flags(sp: argparse.ArgumentParser) -> None:
    sp.add_argument(
        "--features",
        type=str,
        default=None,
        metavar="A,B",
        help=f"Comma-separated features to enable (default: ${ENV_PREFIX}FEATURES)",
    )
    sp.add_argument(
        "--no-default-features",
        action="store_true",
        default=False,
        help="Do not activate the 'default' feature",
    )
    sp.add_argument(
        "--all-features",
        action="store_true",
        default=False,
        help="Activate every declared feature",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser with list/check/resolve/tree/validate subcommands."""
    parser = argparse.ArgumentParser(
        prog="ft",
        description=f"{PACKAGE_NAME} v{PACKAGE_VERSION}",
    )
    parser.add_argument(
        "--package",
        type=str,
        default=".",
        metavar="DIR",
        help="Directory holding deno.json, package.json or ft-flags.yaml (default: .)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=[lvl.lower() for lvl in VALID_LEVELS],
        help="Enable logging to stderr at this level",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Also write logs to a timestamped file in DIR",
    )

    subparsers = parser.add_subparsers(dest="command")

    # ── list ─────────────────────────────────────────────────────
    sp_list = subparsers.add_parser("list", help="List declared features")
    sp_list.add_argument(
        "--enabled",
        action="store_true",
        default=False,
        help="Show resolved features with the chain that enabled them",
    )
    _add_resolve_flags(sp_list)
    sp_list.set_defaults(func=_cmd_list)

    # ── check ────────────────────────────────────────────────────
    sp_check = subparsers.add_parser("check", help="Exit 0 if a feature is enabled")
    sp_check.add_argument("feature", metavar="FEATURE")
    _add_resolve_flags(sp_check)
    sp_check.set_defaults(func=_cmd_check)

    # ── resolve ──────────────────────────────────────────────────
    sp_resolve = subparsers.add_parser("resolve", help="Print the resolved feature set")
    _add_resolve_flags(sp_resolve)
    sp_resolve.set_defaults(func=_cmd_resolve)

    # ── tree ─────────────────────────────────────────────────────
    sp_tree = subparsers.add_parser("tree", help="Show the feature activation tree")
    sp_tree.add_argument("feature", nargs="?", default=None, metavar="FEATURE")
    sp_tree.add_argument(
        "--unicode",
        action="store_true",
        default=False,
        help="Draw the tree with box-drawing characters",
    )
    sp_tree.set_defaults(func=_cmd_tree)

    # ── validate ─────────────────────────────────────────────────
    sp_validate = subparsers.add_parser("validate", help="Validate the manifest")
    sp_validate.add_argument(
        "--strict-dependencies",
        action="store_true",
        default=False,
        help="Treat references to unknown packages as errors",
    )
    sp_validate.set_defaults(func=_cmd_validate)

    return parser


def main(
    argv: Optional[List[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    read_text: Optional[ReadText] = None,
) -> int:
    """Program entry point: parse arguments, load the manifest, dispatch.

    Returns the process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.log_level is not None:
        setup_logging(args.log_level, args.log_dir)

    out = make_console()
    err = make_console(stderr=True)
    directory = os.path.abspath(args.package)

    try:
        manifest = load_manifest(directory, read_text or read_text_file)
    except ConfigLoadError as exc:
        module_logger.debug("Manifest load failed: %s", exc)
        err.print(status_line(FAIL_MARK, str(exc)))
        return 1

    if manifest is None:
        err.print(status_line(FAIL_MARK, f"No feature manifest found in {directory}"))
        return 1

    ctx = _Context(
        manifest=manifest,
        environ=os.environ if environ is None else environ,
        out=out,
        err=err,
    )
    func: Callable[[argparse.Namespace, _Context], int] = args.func
    return func(args, ctx)


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())
