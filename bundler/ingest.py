"""Read a project directory into ``(path, content)`` pairs for the engine."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple

from .document import Content

LOGGER = logging.getLogger(__name__)

SKIP_DIRECTORIES = {
    "__pycache__",
    ".git",
    ".svn",
    ".hg",
    "venv",
    ".venv",
}


def iter_project_files(
    root: str, exclude: Optional[Iterable[str]] = None
) -> Iterator[Tuple[str, Content]]:
    """Yield every project file under ``root`` with its content.

    Text is decoded as UTF-8; files that are not valid UTF-8 are yielded as
    bytes and pass through the build untouched. Installed dependencies
    (``bower_components``, ``node_modules``) are project files like any
    other, since documents import them. Hidden entries, virtualenvs and
    the ``exclude`` directories (typically the build output) are skipped.
    """
    root_path = Path(os.path.abspath(root))
    excluded = {os.path.abspath(item) for item in (exclude or [])}
    for dirpath, dirnames, filenames in os.walk(root_path):
        current = Path(dirpath)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not _should_skip(name) and str(current / name) not in excluded
        )
        for filename in sorted(filenames):
            if _should_skip(filename):
                continue
            full_path = current / filename
            try:
                raw = full_path.read_bytes()
            except OSError as exc:
                LOGGER.warning("Skipping unreadable file %s: %s", full_path, exc)
                continue
            yield str(full_path), _decode(raw)


def _decode(raw: bytes) -> Content:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw


def _should_skip(name: str) -> bool:
    return name.startswith(".") or name in SKIP_DIRECTORIES
