"""Command-line interface for the bundler."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .cli_config import config_base_dir, load_config
from .cli_output import format_manifest_summary, write_files, write_manifest
from .cli_parsers import build_bundle_parser
from .config import BundleOverrides, build_bundle_options, load_project_config
from .errors import BundlerError

# Configuration directory for global CLI usage
CONFIG_DIR = Path.home() / ".config" / "webbundler"
CONFIG_ENV_FILE = CONFIG_DIR / ".env"


def _load_config() -> Optional[Path]:
    return load_config(
        cwd=Path.cwd(),
        config_env_file=CONFIG_ENV_FILE,
        load_env=load_dotenv,
    )


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_overrides(args: argparse.Namespace) -> BundleOverrides:
    return BundleOverrides(
        root=args.root,
        entrypoint=args.entrypoint,
        shell=args.shell,
        fragments=list(args.fragments or []),
        inline_scripts=args.inline_scripts,
        inline_css=args.inline_css,
    )


async def _run_bundle_async(
    args: argparse.Namespace, env_file: Optional[Path] = None
) -> int:
    """Main async entry point for bundle."""
    from . import bundle_directory_async

    project = load_project_config(args.config, base_dir=config_base_dir(env_file))
    options = build_bundle_options(project, _build_overrides(args))

    logging.info(
        "Bundling %s (%s strategy, %d entrypoint(s))",
        options.root,
        options.strategy,
        len(options.entrypoints),
    )
    result = await bundle_directory_async(options, exclude=[args.output])

    if args.json_output:
        print(result.manifest.to_json())
    else:
        logging.info("Bundles:\n%s", format_manifest_summary(result.manifest))

    write_files(result.files, options.root, args.output)
    if args.manifest_out:
        write_manifest(result.manifest, args.manifest_out)

    logging.info(
        "Bundle complete: %d input files, %d output files",
        result.stats.get("input_files", 0),
        result.stats.get("output_files", 0),
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the bundle command."""
    args = build_bundle_parser().parse_args(argv)
    _setup_logging(args.verbose)
    env_file = _load_config()

    try:
        return asyncio.run(_run_bundle_async(args, env_file))
    except KeyboardInterrupt:
        logging.info("Interrupted")
        return 130
    except BundlerError as exc:
        logging.error("Bundling failed during %s: %s", exc.phase, exc)
        if args.verbose:
            logging.exception("Full traceback:")
        return 1
    except Exception as exc:
        logging.error("Error: %s", exc)
        if args.verbose:
            logging.exception("Full traceback:")
        return 1


if __name__ == "__main__":
    sys.exit(main())
