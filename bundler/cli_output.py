"""Output helpers for the bundle command."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Sequence, Tuple

from .document import Content
from .manifest import BundleManifest


def output_path(path: str, root: str, out_dir: Path) -> Path:
    """Map a project file path to its location under ``out_dir``."""
    relative = os.path.relpath(os.path.abspath(path), os.path.abspath(root))
    return out_dir / relative


def write_files(
    files: Sequence[Tuple[str, Content]],
    root: str,
    output: str,
) -> List[Path]:
    """Write the emitted file set under ``output``, mirroring the root layout."""
    out_dir = Path(output)
    written: List[Path] = []
    for path, content in files:
        target = output_path(path, root, out_dir)
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
        written.append(target)
    logging.info("Wrote %d files to %s", len(written), out_dir)
    return written


def write_manifest(manifest: BundleManifest, output: str) -> Path:
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(manifest.to_json() + "\n", encoding="utf-8")
    logging.info("Wrote manifest %s", path)
    return path


def format_manifest_summary(manifest: BundleManifest) -> str:
    """Format the manifest as a short human-readable listing."""
    if not len(manifest):
        return "No bundles."
    lines = []
    for bundle in manifest:
        lines.append(f"{bundle.url} ({bundle.strategy}, {len(bundle.files)} files)")
        for url in bundle.merged_files:
            lines.append(f"  + {url}")
    return "\n".join(lines)
