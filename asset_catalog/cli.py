from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from asset_catalog.framework.converters import CONVERTERS
from asset_catalog.framework.errors import AssetCatalogError, InputValidationError, MissingToolError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="asset-catalog", add_help=True)
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build or update an asset catalog from a directory of SVGs")
    build.add_argument("source_dir", nargs="?", help="Directory of SVG sources")
    build.add_argument("--out", dest="output_dir", help="Output directory for the asset catalog (*.xcassets)")
    build.add_argument("--appicon", dest="app_icon", help="Path to the SVG to use as an app icon")
    build.add_argument("--force", action="store_true", default=None, help="Regenerate every SVG")
    build.add_argument(
        "--sanitize",
        action="store_true",
        default=None,
        help="Convert spaces in directory and file names into _",
    )
    build.add_argument("-v", "--verbose", action="store_true", default=None, help="Print progress")
    build.add_argument(
        "--keep-going",
        dest="keep_going",
        action="store_true",
        default=None,
        help="Skip SVGs that fail to parse instead of stopping",
    )
    build.add_argument("--jobs", "-j", type=int, default=None, help="Image sets to generate in parallel")
    build.add_argument("--converter", choices=CONVERTERS, default=None, help="Rasterizer backend")
    build.add_argument("--config", default=None, help="YAML config file")
    build.add_argument("--log-file", dest="log_file", default=None, help="Also write a DEBUG log here")

    show = sub.add_parser("show", help="Print the tree of an existing asset catalog")
    show.add_argument("catalog", help="Path to a *.xcassets directory")

    return parser


def _log_config_source(logger: logging.Logger, meta: dict) -> None:
    mode = meta.get("mode")
    paths = meta.get("paths") or []
    env_var = meta.get("env_var") or "ASSET_CATALOG_CONFIG"
    if mode in {"env", "explicit"} and paths:
        label = f"env {env_var}" if mode == "env" else "explicit path"
        logger.info("Loaded config from %s=%s", label, paths[0])
    elif paths:
        base = paths[0]
        local = paths[1] if len(paths) > 1 else None
        if local:
            logger.info("Loaded config base=%s local=%s", base, local)
        else:
            logger.info("Loaded config base=%s", base)


def _build(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    from .app.build import run_build
    from .foundation.config_io import load_config
    from .foundation.logging_utils import setup_build_logger
    from .framework.config import BuildConfig, apply_overrides

    try:
        raw_cfg, cfg_meta = load_config(args.config)
        overrides = {
            "source_dir": args.source_dir,
            "output_dir": args.output_dir,
            "app_icon": args.app_icon,
            "force": args.force,
            "sanitize": args.sanitize,
            "verbose": args.verbose,
            "keep_going": args.keep_going,
            "jobs": args.jobs,
            "log_file": args.log_file,
            "converter": {"name": args.converter},
        }
        cfg, warnings = BuildConfig.from_dict(apply_overrides(raw_cfg, overrides))
    except (InputValidationError, ValueError, FileNotFoundError) as exc:
        print(f"Usage: {parser.prog} build --out <path/to/Catalog.xcassets> <src>", file=sys.stderr)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    logger = setup_build_logger(verbose=cfg.verbose, log_file=cfg.log_file)
    _log_config_source(logger, cfg_meta)
    for warning in warnings:
        logger.warning(warning)

    try:
        result = run_build(cfg, logger=logger)
    except MissingToolError as exc:
        print(f"error: {exc}", file=sys.stderr)
        print(f"hint: choose another rasterizer with --converter ({', '.join(CONVERTERS)})", file=sys.stderr)
        return 1
    except AssetCatalogError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if not result.ok:
        print(f"error: {len(result.failures)} source(s) failed:", file=sys.stderr)
        for failure in result.failures:
            print(f"  {failure.error}", file=sys.stderr)
        return 1
    return 0


def _show(args: argparse.Namespace) -> int:
    from .app.show import describe_catalog
    from .framework.catalog import Catalog

    try:
        catalog = Catalog.load(args.catalog)
    except AssetCatalogError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    for line in describe_catalog(catalog):
        print(line)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.command == "build":
        return _build(args, parser)

    if args.command == "show":
        return _show(args)

    raise AssertionError(f"Unhandled command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
