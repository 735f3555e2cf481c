"""Tests for bundler.config module."""

import json

import pytest

from bundler.config import (
    BundleOptions,
    BundleOverrides,
    ProjectConfig,
    ProjectConfigError,
    _apply_overrides,
    build_bundle_options,
    load_project_config,
    parse_project_config,
)
from bundler.errors import OutOfRootError


class TestBundleOptions:
    def test_defaults(self):
        options = BundleOptions(root="app")
        assert options.entrypoints == []
        assert options.shell is None
        assert options.inline_scripts is True
        assert options.inline_css is True
        assert options.strategy == "default"

    def test_entrypoints_deduplicated_in_order(self):
        options = BundleOptions(root="app", entrypoints=["b.html", "a.html", "b.html"])
        assert options.entrypoints == ["b.html", "a.html"]

    def test_shell_selects_shell_merge(self):
        assert BundleOptions(root="app", shell="shell.html").strategy == "shell-merge"


class TestProjectConfig:
    def test_entrypoint_is_default_fragment(self):
        assert ProjectConfig().all_fragments == ["index.html"]

    def test_shell_leads_fragments(self):
        config = ProjectConfig(shell="shell.html", fragments=["a.html", "b.html"])
        assert config.all_fragments == ["shell.html", "a.html", "b.html"]

    def test_fragments_without_shell(self):
        assert ProjectConfig(fragments=["a.html"]).all_fragments == ["a.html"]


class TestParseProjectConfig:
    def test_full_config(self):
        config = parse_project_config(
            {
                "root": "app",
                "entrypoint": "main.html",
                "shell": "src/shell.html",
                "fragments": ["src/a.html"],
                "bundle": {"inlineScripts": False, "inlineCss": True},
            }
        )
        assert config.root == "app"
        assert config.entrypoint == "main.html"
        assert config.shell == "src/shell.html"
        assert config.fragments == ["src/a.html"]
        assert config.inline_scripts is False
        assert config.inline_css is True

    def test_bundle_boolean_shorthand(self):
        config = parse_project_config({"bundle": True})
        assert config.inline_scripts is True

    def test_unknown_field(self):
        with pytest.raises(ProjectConfigError, match="Unsupported config fields: sources"):
            parse_project_config({"sources": []})

    def test_unknown_bundle_field(self):
        with pytest.raises(ProjectConfigError, match="minify"):
            parse_project_config({"bundle": {"minify": True}})

    def test_non_boolean_bundle_flag(self):
        with pytest.raises(ProjectConfigError, match="inlineCss"):
            parse_project_config({"bundle": {"inlineCss": "yes"}})

    def test_fragments_must_be_list(self):
        with pytest.raises(ProjectConfigError):
            parse_project_config({"fragments": "a.html"})

    def test_empty_path_rejected(self):
        with pytest.raises(ProjectConfigError):
            parse_project_config({"shell": "  "})

    def test_not_an_object(self):
        with pytest.raises(ProjectConfigError):
            parse_project_config(["index.html"])

    def test_error_phase(self):
        with pytest.raises(ProjectConfigError) as info:
            parse_project_config({"bundle": 3})
        assert info.value.phase == "config"


class TestLoadProjectConfig:
    def test_root_relative_to_config_file(self, tmp_path):
        config_file = tmp_path / "bundler.json"
        config_file.write_text(json.dumps({"root": "app", "shell": "shell.html"}))
        config = load_project_config(str(config_file))
        assert config.root == str(tmp_path / "app")
        assert config.shell == "shell.html"

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(ProjectConfigError, match="not found"):
            load_project_config(str(tmp_path / "missing.json"))

    def test_missing_default_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("BUNDLER_CONFIG", raising=False)
        assert load_project_config() == ProjectConfig()

    def test_env_var_names_config(self, tmp_path, monkeypatch):
        config_file = tmp_path / "custom.json"
        config_file.write_text(json.dumps({"entrypoint": "home.html"}))
        monkeypatch.setenv("BUNDLER_CONFIG", str(config_file))
        assert load_project_config().entrypoint == "home.html"

    def test_relative_env_config_taken_from_base_dir(self, tmp_path, monkeypatch):
        (tmp_path / "conf").mkdir()
        (tmp_path / "conf" / "site.json").write_text(json.dumps({"root": "app"}))
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BUNDLER_CONFIG", "site.json")
        assert load_project_config() == ProjectConfig()
        config = load_project_config(base_dir=tmp_path / "conf")
        assert config.root == str(tmp_path / "conf" / "app")

    def test_invalid_json(self, tmp_path):
        config_file = tmp_path / "bundler.json"
        config_file.write_text("{not json")
        with pytest.raises(ProjectConfigError, match="invalid JSON"):
            load_project_config(str(config_file))


class TestApplyOverrides:
    def test_no_overrides(self):
        config = ProjectConfig(shell="shell.html")
        _apply_overrides(config, BundleOverrides())
        assert config == ProjectConfig(shell="shell.html")

    def test_all_overrides(self):
        config = ProjectConfig()
        _apply_overrides(
            config,
            BundleOverrides(
                root="site",
                entrypoint="home.html",
                shell="shell.html",
                fragments=["a.html"],
                inline_scripts=False,
                inline_css=False,
            ),
        )
        assert config.root == "site"
        assert config.entrypoint == "home.html"
        assert config.shell == "shell.html"
        assert config.fragments == ["a.html"]
        assert config.inline_scripts is False
        assert config.inline_css is False


class TestBuildBundleOptions:
    def test_defaults(self, tmp_path):
        options = build_bundle_options(ProjectConfig(root=str(tmp_path)))
        assert options.root == str(tmp_path)
        assert options.entrypoints == ["index.html"]
        assert options.shell is None

    def test_shell_and_fragments_become_urls(self, tmp_path):
        project = ProjectConfig(
            root=str(tmp_path),
            shell="src/app shell.html",
            fragments=[str(tmp_path / "src" / "view.html")],
        )
        options = build_bundle_options(project)
        assert options.shell == "src/app%20shell.html"
        assert options.entrypoints == ["src/app%20shell.html", "src/view.html"]

    def test_overrides_do_not_mutate_project(self, tmp_path):
        project = ProjectConfig(root=str(tmp_path))
        options = build_bundle_options(project, BundleOverrides(inline_css=False))
        assert options.inline_css is False
        assert project.inline_css is True

    def test_entrypoint_outside_root(self, tmp_path):
        project = ProjectConfig(root=str(tmp_path / "app"), entrypoint="../index.html")
        with pytest.raises(OutOfRootError):
            build_bundle_options(project)
