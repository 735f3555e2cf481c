"""Argument parser construction for the bundle command."""

from __future__ import annotations

import argparse

DEFAULT_OUTPUT_DIR = "build/bundled"


def build_bundle_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bundle",
        description=(
            "Merge HTML entrypoints and the documents they reference into a "
            "minimal set of bundles."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  # Bundle using ./bundler.json (or defaults: index.html as entrypoint)
  bundle

  # Bundle a project directory with an explicit entrypoint
  bundle ./app --entrypoint index.html -o dist/

  # Shell plus lazily loaded fragments
  bundle ./app --shell src/app-shell.html \\
      --fragment src/view-one.html --fragment src/view-two.html

  # Keep external scripts, write the manifest next to the output
  bundle ./app --no-inline-scripts --manifest-out dist/manifest.json

  # Print the bundle manifest as JSON
  bundle ./app --json
""",
    )
    _add_bundle_args(parser)
    return parser


def _add_bundle_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=None,
        help="Project root directory (default: from config, else current directory)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Project config JSON file (default: $BUNDLER_CONFIG or bundler.json)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})",
    )

    layout_group = parser.add_argument_group("Project layout")
    layout_group.add_argument(
        "--entrypoint",
        type=str,
        default=None,
        help="Main HTML entrypoint, relative to the root (default: index.html)",
    )
    layout_group.add_argument(
        "--shell",
        type=str,
        default=None,
        help="App shell shared by all fragments; enables shell-merge bundling",
    )
    layout_group.add_argument(
        "--fragment",
        action="append",
        dest="fragments",
        default=[],
        help="Lazily loaded fragment to bundle separately (repeatable)",
    )

    inline_group = parser.add_argument_group("Inlining")
    inline_group.add_argument(
        "--no-inline-scripts",
        action="store_false",
        dest="inline_scripts",
        default=None,
        help="Keep external <script src> files instead of inlining them",
    )
    inline_group.add_argument(
        "--no-inline-css",
        action="store_false",
        dest="inline_css",
        default=None,
        help="Keep external stylesheets instead of inlining them",
    )

    parser.add_argument(
        "--manifest-out",
        type=str,
        default=None,
        help="Write the bundle manifest JSON to this file",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the bundle manifest as JSON to stdout",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
