"""Environment discovery for the bundle command.

The only setting read from the environment is ``BUNDLER_CONFIG``, the
project config file to use when ``--config`` is not given.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional


def load_config(
    *,
    cwd: Path,
    config_env_file: Path,
    load_env: Callable[[Path], bool],
) -> Optional[Path]:
    """Load the first .env found and return its path.

    Search order:
    1. .env in the current working directory
    2. ``config_env_file`` (``~/.config/webbundler/.env``)
    """
    for candidate in _env_candidates(cwd, config_env_file):
        if candidate.is_file():
            load_env(candidate)
            logging.debug("Loaded environment from %s", candidate)
            return candidate
    return None


def config_base_dir(env_file: Optional[Path]) -> Optional[Path]:
    """Directory a relative ``BUNDLER_CONFIG`` is taken from.

    A path written in a .env file is relative to that file; without one it
    is relative to the working directory.
    """
    if env_file is None:
        return None
    return env_file.parent


def _env_candidates(cwd: Path, config_env_file: Path) -> Iterable[Path]:
    yield cwd / ".env"
    yield config_env_file
