# SPDX-License-Identifier: MIT
"""Command-line interface for hdfs-build.

Typical use is from a Cargo build script, which inherits Cargo's
environment (``CARGO_FEATURE_*``, ``OUT_DIR`` ...) and forwards stdout:

    hdfs-build                      # resolve, compile if needed, print directives
    hdfs-build HDFS_LIB_DIR=/opt/lib
    hdfs-build --features hdfs_3_3 --dry-run --format json
    hdfs-build sources --hdfs-version 2.7 --target-os windows
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from hdfs_build.compile_commands import write_compile_commands
from hdfs_build.core.context import BuildContext, OSClass
from hdfs_build.core.directives import Notice
from hdfs_build.core.errors import HdfsBuildError
from hdfs_build.emit import EMITTERS, get_emitter
from hdfs_build.resolver import BuildPlan, plan_build, run_build
from hdfs_build.sources import applicable_rules, build_source_set
from hdfs_build.toolchains import find_c_toolchain
from hdfs_build.versions import VersionTag

# Set up logging
logger = logging.getLogger("hdfs_build")


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level.

    Log records go to stderr; stdout is reserved for directives.
    """
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)


def parse_variables(args: list[str]) -> tuple[dict[str, str], list[str]]:
    """Parse KEY=value arguments from a list.

    Args:
        args: List of arguments.

    Returns:
        Tuple of (variables dict, remaining args).
    """
    variables: dict[str, str] = {}
    remaining: list[str] = []

    for arg in args:
        if "=" in arg and not arg.startswith("-"):
            key, _, value = arg.partition("=")
            if key:  # Valid KEY=value
                variables[key] = value
            else:
                remaining.append(arg)
        else:
            remaining.append(arg)

    return variables, remaining


def parse_features(values: list[str] | None) -> set[str]:
    """Split ``--features a,b --features c`` into a set of feature names."""
    features: set[str] = set()
    for value in values or []:
        for name in value.replace(" ", ",").split(","):
            if name:
                features.add(name.strip().lower().replace("-", "_"))
    return features


def build_context(args: argparse.Namespace, variables: dict[str, str]) -> BuildContext:
    """Create the BuildContext from the environment and command-line overrides.

    Precedence (highest to lowest):
        1. Command-line options (--target-os, --out-dir, --source-root)
        2. KEY=value arguments
        3. Process environment
    """
    environ = dict(os.environ)
    environ.update(variables)

    target_os = getattr(args, "target_os", None)
    ctx = BuildContext.from_environ(
        environ,
        features=parse_features(getattr(args, "features", None)),
        os_class=OSClass.from_target_os(target_os) if target_os else None,
    )

    out_dir = getattr(args, "out_dir", None)
    source_root = getattr(args, "source_root", None)
    if out_dir or source_root:
        ctx = BuildContext(
            os_class=ctx.os_class,
            features=ctx.features,
            env=ctx.env,
            out_dir=Path(out_dir) if out_dir else ctx.out_dir,
            source_root=Path(source_root) if source_root else ctx.source_root,
        )
    return ctx


def _emit_notices(plan: BuildPlan | None, fmt: str) -> None:
    if plan is None:
        return
    notices = [d for d in plan.resolution if isinstance(d, Notice)]
    get_emitter(fmt).emit(notices)


def cmd_resolve(args: argparse.Namespace) -> int:
    """Resolve link directives, compile libhdfs if needed, print directives."""
    setup_logging(args.verbose, args.debug)

    variables, remaining = parse_variables(getattr(args, "extra", []))
    if remaining:
        logger.error("Unexpected arguments: %s", " ".join(remaining))
        return 2

    ctx = build_context(args, variables)
    logger.debug("Context: %s", ctx)

    plan: BuildPlan | None = None
    try:
        plan = plan_build(ctx)
        if plan.skipped:
            return 0

        if args.dry_run:
            if plan.compile_job is not None:
                for path in plan.compile_job.source_set.files:
                    logger.info("  would compile %s", path)
            get_emitter(args.format).emit(plan.resolution)
            return 0

        toolchain = None
        if plan.compile_job is not None:
            toolchain = find_c_toolchain(ctx.os_class, env=ctx.env)
            if args.compile_commands:
                write_compile_commands(plan.compile_job, toolchain)

        resolution = run_build(plan, toolchain)
    except HdfsBuildError as e:
        logger.error("%s", e)
        # Keep advisory notices visible: they often explain the failure.
        _emit_notices(plan, args.format)
        return 1

    get_emitter(args.format).emit(resolution)
    return 0


def cmd_sources(args: argparse.Namespace) -> int:
    """Print the vendored files and include directories for a version/OS."""
    setup_logging(args.verbose, args.debug)

    try:
        version = VersionTag.parse(args.hdfs_version)
    except ValueError as e:
        logger.error("%s", e)
        return 2

    os_class = (
        OSClass.from_target_os(args.target_os) if args.target_os else OSClass.host()
    )
    source_set = build_source_set(version, os_class)

    if args.format == "json":
        data = {
            "version": str(version),
            "source_version": str(source_set.version),
            "os": os_class.value,
            "rules": applicable_rules(version, os_class),
            "files": source_set.files,
            "includes": source_set.includes,
        }
        print(json.dumps(data, indent=2))
        return 0

    print(f"libhdfs {version} ({os_class.value}), sources from {source_set.version}")
    print(f"Rules: {', '.join(applicable_rules(version, os_class))}")
    print()
    print("Include directories:")
    for inc in source_set.includes:
        print(f"  {inc}")
    print()
    print("Files:")
    for path in source_set.files:
        print(f"  {path}")
    return 0


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument(
        "--target-os",
        metavar="OS",
        help="Target OS (default: CARGO_CFG_TARGET_OS or the host)",
    )
    parser.add_argument(
        "--format",
        choices=sorted(EMITTERS),
        default="cargo",
        help="Output format (default: cargo)",
    )


def add_resolve_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments for the resolve command."""
    parser.add_argument(
        "-F",
        "--features",
        action="append",
        metavar="LIST",
        help="Enable features, comma separated (e.g. hdfs_3_3,vendored)",
    )
    parser.add_argument(
        "-o", "--out-dir", help="Output directory (default: OUT_DIR or build)"
    )
    parser.add_argument(
        "-s",
        "--source-root",
        help="Root of the vendored sources (default: CARGO_MANIFEST_DIR or .)",
    )
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Print the planned directives without compiling",
    )
    parser.add_argument(
        "--compile-commands",
        action="store_true",
        help="Also write compile_commands.json to the output directory",
    )
    parser.add_argument(
        "extra",
        nargs="*",
        help="Environment overrides (KEY=value)",
    )


COMMANDS = ("resolve", "sources")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the hdfs-build CLI."""
    parser = argparse.ArgumentParser(
        prog="hdfs-build",
        description="Resolve and build the libhdfs native dependency.",
        epilog="Run 'hdfs-build <command> --help' for command-specific help.",
    )
    from hdfs_build import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # hdfs-build resolve
    resolve_parser = subparsers.add_parser(
        "resolve", help="Resolve and build libhdfs (default)"
    )
    add_common_args(resolve_parser)
    add_resolve_args(resolve_parser)
    resolve_parser.set_defaults(func=cmd_resolve)

    # hdfs-build sources
    sources_parser = subparsers.add_parser(
        "sources", help="Show the vendored sources for a version"
    )
    add_common_args(sources_parser)
    sources_parser.add_argument(
        "--hdfs-version",
        default=str(VersionTag.oldest()),
        metavar="X.Y",
        help=f"libhdfs version (default: {VersionTag.oldest()})",
    )
    sources_parser.set_defaults(func=cmd_sources)

    argv = sys.argv[1:] if argv is None else list(argv)

    # Handle default command (no subcommand specified)
    # Only the first word can name a command; later ones may be option values.
    top_level_only = {"-h", "--help", "--version"}
    if not argv or (argv[0] not in COMMANDS and argv[0] not in top_level_only):
        argv.insert(0, "resolve")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    # Run the specified command
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
