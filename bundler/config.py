"""Bundle options and project configuration loading.

A project is described by a JSON file (``bundler.json`` unless
``BUNDLER_CONFIG`` names another one)::

    {
      "root": ".",
      "entrypoint": "index.html",
      "shell": "src/app-shell.html",
      "fragments": ["src/view-one.html", "src/view-two.html"],
      "bundle": {"inlineScripts": true, "inlineCss": true}
    }

Paths are relative to ``root``, which is itself relative to the directory
holding the config file. Command-line flags are applied on top as
:class:`BundleOverrides`.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import BundlerError
from .strategy import DEFAULT_STRATEGY, SHELL_MERGE_STRATEGY
from .urls import path_to_url

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "bundler.json"
DEFAULT_ENTRYPOINT = "index.html"

_PROJECT_FIELDS = {"root", "entrypoint", "shell", "fragments", "bundle"}
_BUNDLE_FIELDS = {"inlineScripts": "inline_scripts", "inlineCss": "inline_css"}


class ProjectConfigError(BundlerError, ValueError):
    """Raised when a project config file is missing or invalid."""

    phase = "config"


@dataclass
class BundleOptions:
    """Engine configuration; entrypoints and shell are canonical URLs."""

    root: str
    entrypoints: List[str] = field(default_factory=list)
    shell: Optional[str] = None
    inline_scripts: bool = True
    inline_css: bool = True

    def __post_init__(self) -> None:
        self.entrypoints = list(dict.fromkeys(self.entrypoints))

    @property
    def strategy(self) -> str:
        return SHELL_MERGE_STRATEGY if self.shell else DEFAULT_STRATEGY


@dataclass
class ProjectConfig:
    """Project layout as declared in the config file; paths, not URLs."""

    root: str = "."
    entrypoint: str = DEFAULT_ENTRYPOINT
    shell: Optional[str] = None
    fragments: List[str] = field(default_factory=list)
    inline_scripts: bool = True
    inline_css: bool = True

    @property
    def all_fragments(self) -> List[str]:
        """Bundle entrypoints: shell and fragments, else the app entrypoint."""
        fragments = list(self.fragments)
        if self.shell:
            fragments.insert(0, self.shell)
        return fragments or [self.entrypoint]


@dataclass
class BundleOverrides:
    """Optional overrides applied on top of the project config."""

    root: Optional[str] = None
    entrypoint: Optional[str] = None
    shell: Optional[str] = None
    fragments: List[str] = field(default_factory=list)
    inline_scripts: Optional[bool] = None
    inline_css: Optional[bool] = None


def _apply_overrides(config: ProjectConfig, overrides: BundleOverrides) -> None:
    if overrides.root:
        config.root = overrides.root
    if overrides.entrypoint:
        config.entrypoint = overrides.entrypoint
    if overrides.shell:
        config.shell = overrides.shell
    if overrides.fragments:
        config.fragments = list(overrides.fragments)
    if overrides.inline_scripts is not None:
        config.inline_scripts = overrides.inline_scripts
    if overrides.inline_css is not None:
        config.inline_css = overrides.inline_css


def load_project_config(
    path: Optional[str] = None, *, base_dir: Optional[Path] = None
) -> ProjectConfig:
    """Load the project config file.

    Without an explicit ``path`` the file named by ``BUNDLER_CONFIG`` (or
    ``bundler.json`` in the working directory) is used when it exists, and
    defaults apply when it does not. A relative ``BUNDLER_CONFIG`` is taken
    from ``base_dir`` when given (the directory of the .env that set it).

    Raises:
        ProjectConfigError: If an explicit file is missing or any file is
            not a valid config.
    """
    explicit = path is not None
    if explicit:
        config_path = Path(path).expanduser()
    else:
        config_path = _default_config_path(base_dir)
    if not config_path.is_file():
        if explicit:
            raise ProjectConfigError(f"Project config file not found: {config_path}")
        LOGGER.debug("No project config at %s, using defaults", config_path)
        return ProjectConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ProjectConfigError(f"Project config has invalid JSON: {exc}") from exc

    config = parse_project_config(data)
    config.root = str(config_path.parent / config.root)
    LOGGER.info("Loaded project config from %s", config_path)
    return config


def _default_config_path(base_dir: Optional[Path]) -> Path:
    configured = os.environ.get("BUNDLER_CONFIG")
    if not configured:
        return Path(DEFAULT_CONFIG_FILE)
    config_path = Path(configured).expanduser()
    if base_dir is not None and not config_path.is_absolute():
        config_path = base_dir / config_path
    return config_path


def parse_project_config(data: Any) -> ProjectConfig:
    if not isinstance(data, dict):
        raise ProjectConfigError("Project config must be a JSON object")
    unknown = sorted(set(data) - _PROJECT_FIELDS)
    if unknown:
        raise ProjectConfigError(f"Unsupported config fields: {', '.join(unknown)}")

    config = ProjectConfig()
    for key in ("root", "entrypoint", "shell"):
        if data.get(key) is not None:
            setattr(config, key, _expect_str(data[key], key))

    fragments = data.get("fragments") or []
    if not isinstance(fragments, list):
        raise ProjectConfigError("'fragments' must be a list of paths")
    config.fragments = [_expect_str(item, "fragments") for item in fragments]

    for key, flag in _bundle_settings(data.get("bundle")).items():
        setattr(config, _BUNDLE_FIELDS[key], flag)
    return config


def build_bundle_options(
    project: Optional[ProjectConfig] = None,
    overrides: Optional[BundleOverrides] = None,
) -> BundleOptions:
    """Resolve a project config and overrides into engine options."""
    config = replace(project) if project else ProjectConfig()
    if overrides:
        _apply_overrides(config, overrides)
    root = config.root
    return BundleOptions(
        root=root,
        entrypoints=[path_to_url(root, path) for path in config.all_fragments],
        shell=path_to_url(root, config.shell) if config.shell else None,
        inline_scripts=config.inline_scripts,
        inline_css=config.inline_css,
    )


def _bundle_settings(value: Any) -> Dict[str, bool]:
    if value is None or isinstance(value, bool):
        # "bundle": true is the shorthand for default bundling.
        return {}
    if not isinstance(value, dict):
        raise ProjectConfigError("'bundle' must be an object or a boolean")
    unknown = sorted(set(value) - set(_BUNDLE_FIELDS))
    if unknown:
        raise ProjectConfigError(f"Unsupported bundle fields: {', '.join(unknown)}")
    settings: Dict[str, bool] = {}
    for key, flag in value.items():
        if not isinstance(flag, bool):
            raise ProjectConfigError(f"'bundle.{key}' must be true or false")
        settings[key] = flag
    return settings


def _expect_str(value: Any, key: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ProjectConfigError(f"'{key}' must be a non-empty path")
    return value
